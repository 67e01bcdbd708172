"""Classification rules for Yarn (Berry) output.

Yarn prefixes most diagnostics with a ``YNxxxx`` code; those map through
:data:`YARN_CODE_RULES`. Failures that happen before Yarn's reporter is
up (bad ``.yarnrc.yml``, network errors, missing binaries) carry no
useful code and are recognized by :data:`YARN_PATTERN_RULES` instead.

All patterns are written against ANSI-free text; the classifier strips
escape sequences before matching.

Code reference: https://yarnpkg.com/advanced/error-codes
"""

from __future__ import annotations

import re

from depbump.models.error import ClassificationOrder, ErrorKind, ErrorRule, ErrorRuleSet
from depbump.utils.text import basename, strip_scheme

__all__ = ["YARN_CODE_RULES", "YARN_PATTERN_RULES", "YARN_RULES"]

DEPENDENCY_NOT_FOUND_TEMPLATE = "The following dependency could not be found : {package_req}"
DEPENDENCY_NOT_FOUND_FALLBACK = "The following dependency could not be found : [{code}] {message}"
SOURCE_TIMED_OUT_TEMPLATE = "The following source timed out: {source}"

# A package descriptor as Yarn prints it: optional scope, name, ``@range``.
_PACKAGE_REQ = r"(?P<package_req>(?:@[\w.-]+/)?[\w.-]+@[^\s:]+(?::[^\s:]+)*)"

PACKAGE_NOT_FOUND = re.compile(rf"{_PACKAGE_REQ}: Package not found")
FAILED_TO_RETRIEVE = re.compile(
    rf"{_PACKAGE_REQ}: The remote server failed to provide the requested resource"
)
NO_CANDIDATES_FOUND = re.compile(rf"YN0082:.*?{_PACKAGE_REQ}: No candidates found")

YARN_CODE_RULES = (
    ErrorRule(ErrorKind.UPDATER_ERROR, code="YN0001", description="exception"),
    ErrorRule(
        ErrorKind.DEPENDENCY_FILE_NOT_RESOLVABLE,
        code="YN0002",
        description="missing peer dependency",
    ),
    ErrorRule(
        ErrorKind.GIT_DEPENDENCIES_NOT_REACHABLE,
        code="YN0016",
        description="remote not found",
    ),
    ErrorRule(
        ErrorKind.DEPENDENCY_FILE_NOT_FOUND,
        code="YN0020",
        description="missing lockfile entry",
    ),
    ErrorRule(
        ErrorKind.DEPENDENCY_NOT_FOUND,
        code="YN0035",
        extractors=(PACKAGE_NOT_FOUND, FAILED_TO_RETRIEVE),
        template=DEPENDENCY_NOT_FOUND_TEMPLATE,
        fallback_template=DEPENDENCY_NOT_FOUND_FALLBACK,
        description="network error",
    ),
    ErrorRule(
        ErrorKind.PRIVATE_SOURCE_AUTHENTICATION_FAILURE,
        code="YN0041",
        description="invalid authentication",
    ),
    ErrorRule(
        ErrorKind.MISCONFIGURED_TOOLING,
        code="YN0046",
        description="automerge failed to parse",
    ),
    ErrorRule(
        ErrorKind.MISCONFIGURED_TOOLING,
        code="YN0047",
        description="automerge immutable",
    ),
    ErrorRule(
        ErrorKind.MISCONFIGURED_TOOLING,
        code="YN0080",
        description="network disabled",
    ),
    ErrorRule(
        ErrorKind.MISCONFIGURED_TOOLING,
        code="YN0081",
        description="network unsafe http",
    ),
    ErrorRule(
        ErrorKind.DEPENDENCY_NOT_FOUND,
        code="YN0082",
        extractors=(NO_CANDIDATES_FOUND,),
        template=DEPENDENCY_NOT_FOUND_TEMPLATE,
        fallback_template=DEPENDENCY_NOT_FOUND_FALLBACK,
        description="no candidates found",
    ),
)

YARN_PATTERN_RULES = (
    # tool_name is the runtime named in the output (Node), never "Yarn"
    ErrorRule(
        ErrorKind.TOOL_VERSION_NOT_SUPPORTED,
        patterns=(
            re.compile(
                r"The current (?P<tool_name>\w+) version (?P<detected_version>v?\d+(?:\.\d+)*)"
                r" does not satisfy the required version (?P<supported_versions>v?\d+(?:\.\d+)*)"
            ),
        ),
        template=(
            "The current {tool_name} version {detected_version} does not satisfy "
            "the required version {supported_versions}."
        ),
        description="engine version mismatch",
    ),
    ErrorRule(
        ErrorKind.PRIVATE_SOURCE_AUTHENTICATION_FAILURE,
        patterns=(
            "authentication token not provided",
            "No authentication configured for request",
            'Unauthenticated: request did not include an "Authorization" header.',
        ),
        description="registry authentication",
    ),
    ErrorRule(
        ErrorKind.PRIVATE_SOURCE_TIMED_OUT,
        patterns=(re.compile(r"(?P<source>\S+): ESOCKETTIMEDOUT"),),
        transforms={"source": strip_scheme},
        template=SOURCE_TIMED_OUT_TEMPLATE,
        description="socket timeout",
    ),
    ErrorRule(
        ErrorKind.PRIVATE_SOURCE_TIMED_OUT,
        patterns=(re.compile(r"(?P<source>\S+): socket hang up"),),
        transforms={"source": strip_scheme},
        template=SOURCE_TIMED_OUT_TEMPLATE,
        description="socket hang up",
    ),
    ErrorRule(
        ErrorKind.OUT_OF_DISK,
        patterns=("Out of diskspace", "No space left on device"),
        description="disk full",
    ),
    ErrorRule(
        ErrorKind.DEPENDENCY_FILE_NOT_RESOLVABLE,
        patterns=(re.compile(r"Usage Error: Parse error when loading (?P<filename>[^\s;]+)"),),
        transforms={"filename": basename},
        template='Error while loading "{filename}".',
        description="yarnrc parse error",
    ),
    ErrorRule(
        ErrorKind.MISSING_ENVIRONMENT_VARIABLE,
        patterns=(
            re.compile(
                r"Usage Error: Environment variable not found \((?P<variable>[^)]+)\)"
                r" in (?P<filename>[^\s()]+)"
            ),
        ),
        transforms={"filename": basename},
        template='Environment variable "{variable}" not found in "{filename}".',
        description="yarnrc environment variable",
    ),
    ErrorRule(
        ErrorKind.DEPENDENCY_FILE_NOT_RESOLVABLE,
        patterns=(re.compile(r"getaddrinfo (?:EAI_AGAIN|ENOTFOUND) (?P<host>[^\s:]+)"),),
        template="Network error while resolving dependency.",
        retryable=True,
        description="dns resolution",
    ),
    ErrorRule(
        ErrorKind.DEPENDENCY_FILE_NOT_RESOLVABLE,
        patterns=(
            re.compile(
                r"Internal Error: ENOENT: no such file or directory, \w+ '(?P<filename>[^']+)'"
            ),
        ),
        transforms={"filename": basename},
        template='Internal error while resolving dependency. File not found "{filename}".',
        description="missing file",
    ),
    ErrorRule(
        ErrorKind.DEPENDENCY_FILE_NOT_RESOLVABLE,
        patterns=("refers to a non-existing file",),
        template="Dependency {dependencies} refers to a local path that does not exist.",
        description="local path dependency",
    ),
    ErrorRule(
        ErrorKind.DEPENDENCY_FILE_NOT_RESOLVABLE,
        patterns=(re.compile(r"Can't add \"(?P<package_req>[^\"]+)\": invalid"),),
        template='Invalid package specification "{package_req}" while updating {dependencies}.',
        description="invalid package",
    ),
    ErrorRule(
        ErrorKind.DEPENDENCY_FILE_NOT_RESOLVABLE,
        patterns=("Name contains illegal characters",),
        in_usage=True,
        description="illegal package name",
    ),
    ErrorRule(
        ErrorKind.MISCONFIGURED_TOOLING,
        patterns=("doesn't seem to be part of the project declared in",),
        in_usage=True,
        description="project outside workspace",
    ),
)

YARN_RULES = ErrorRuleSet(
    name="yarn",
    code_pattern=re.compile(r"\bYN\d{4}\b"),
    code_rules=YARN_CODE_RULES,
    pattern_rules=YARN_PATTERN_RULES,
    order=ClassificationOrder.CODES_FIRST,
)
