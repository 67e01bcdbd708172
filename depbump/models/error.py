"""
Error classification data models for depbump.

This module defines the vocabulary the error classifier works with:

- :class:`ErrorKind`: stable, enumerable kinds of classified failures
- :class:`ErrorRule`: one entry of a rule table (code or patterns)
- :class:`ErrorRuleSet`: the ordered rule tables of one ecosystem
- :class:`ErrorContext`: what was being updated when the tool failed
- :class:`ClassifiedError`: the result handed back to the caller

Rule tables are plain tuples of frozen records, so a rule set can be
shared between concurrent update attempts.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Callable,
    Dict,
    Mapping,
    Optional,
    Pattern,
    Sequence,
    Tuple,
    Union,
)

from depbump.constants import ORDER_CODES_FIRST, ORDER_PATTERNS_FIRST
from depbump.exceptions import UpdaterError
from depbump.models.dependency import Dependency
from depbump.models.dependency_file import DependencyFile

#: A literal substring or a compiled regular expression.
PatternLike = Union[str, Pattern[str]]


class ErrorKind(str, Enum):
    """Kinds of classified package-manager failures.

    The string values are stable and safe to persist or compare.
    """

    DEPENDENCY_FILE_NOT_RESOLVABLE = "dependency_file_not_resolvable"
    DEPENDENCY_FILE_NOT_FOUND = "dependency_file_not_found"
    DEPENDENCY_NOT_FOUND = "dependency_not_found"
    GIT_DEPENDENCIES_NOT_REACHABLE = "git_dependencies_not_reachable"
    PRIVATE_SOURCE_AUTHENTICATION_FAILURE = "private_source_authentication_failure"
    PRIVATE_SOURCE_TIMED_OUT = "private_source_timed_out"
    TOOL_VERSION_NOT_SUPPORTED = "tool_version_not_supported"
    MISCONFIGURED_TOOLING = "misconfigured_tooling"
    OUT_OF_DISK = "out_of_disk"
    MISSING_ENVIRONMENT_VARIABLE = "missing_environment_variable"
    UPDATER_ERROR = "updater_error"

    @property
    def retryable(self) -> bool:
        """Whether failures of this kind are worth retrying by default."""
        return self in _RETRYABLE_KINDS

    @property
    def policy(self) -> str:
        """Default handling: ``"retry"`` or ``"report"``."""
        return "retry" if self.retryable else "report"

    @property
    def label(self) -> str:
        """Human-readable name, e.g. ``"Out of disk"``."""
        return self.value.replace("_", " ").capitalize()


_RETRYABLE_KINDS = frozenset({ErrorKind.PRIVATE_SOURCE_TIMED_OUT})


class ClassificationOrder(str, Enum):
    """Which classification pass runs first."""

    CODES_FIRST = ORDER_CODES_FIRST
    PATTERNS_FIRST = ORDER_PATTERNS_FIRST

    @classmethod
    def parse(cls, value: Union[str, "ClassificationOrder"]) -> "ClassificationOrder":
        """Accept ``"codes-first"``, ``"codes_first"`` or a member.

        Raises:
            ValueError: ``value`` names no order.
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("_", "-")
        for member in cls:
            if member.value == normalized:
                return member
        valid = ", ".join(member.value for member in cls)
        raise ValueError(f"Unknown classification order {value!r} (expected {valid})")


class _TemplateValues(dict):
    """Template namespace that renders unknown placeholders as empty."""

    def __missing__(self, key: str) -> str:
        return ""


@dataclass(frozen=True)
class ErrorRule:
    """One entry of a classification rule table.

    A rule either matches an exact native tool ``code`` or any of its
    ``patterns``. On a match, the first of its ``extractors`` that
    matches the text populates structured fields from named capture
    groups; for pattern rules without explicit extractors, the regular
    expressions among ``patterns`` double as extractors.

    ``template`` renders the message with ``{message}`` (the normalized
    text), ``{code}``, ``{dependencies}`` and every extracted field. When
    extractors exist but none matched, ``fallback_template`` is used
    instead; the same applies to a template naming ``{dependencies}`` when
    no dependency names are known. Without a template the normalized text
    is the message.

    Attributes:
        kind: Kind the rule maps to.
        code: Exact code key (code rules).
        patterns: Literal substrings or regexes (pattern rules).
        extractors: Regexes with named groups for structured fields.
        transforms: Per-field post-processing of captured values.
        template: Message template.
        fallback_template: Message template when extraction fails.
        in_usage: Match only against the usage-error region.
        case_sensitive: Literal and regex matching sensitivity.
        retryable: Overrides :attr:`ErrorKind.retryable` when set.
        description: Short label used in logs.
    """

    kind: ErrorKind
    code: Optional[str] = None
    patterns: Tuple[PatternLike, ...] = ()
    extractors: Tuple[Pattern[str], ...] = ()
    transforms: Mapping[str, Callable[[str], str]] = field(default_factory=dict)
    template: Optional[str] = None
    fallback_template: Optional[str] = None
    in_usage: bool = False
    case_sensitive: bool = True
    retryable: Optional[bool] = None
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "patterns", tuple(self.patterns))
        object.__setattr__(self, "extractors", tuple(self.extractors))
        if bool(self.code) == bool(self.patterns):
            raise ValueError("An error rule needs exactly one of 'code' or 'patterns'")

    def __hash__(self) -> int:
        return hash((self.kind, self.code, self.patterns, self.description))

    @property
    def label(self) -> str:
        """Identifier used in logs."""
        return self.code or self.description or self.kind.value

    @property
    def effective_extractors(self) -> Tuple[Pattern[str], ...]:
        if self.extractors or self.code:
            return self.extractors
        return tuple(p for p in self.patterns if not isinstance(p, str) and p.groupindex)

    def extract(self, text: str) -> Optional[Dict[str, str]]:
        """Return fields from the first matching extractor, or ``None``."""
        for extractor in self.effective_extractors:
            match = extractor.search(text)
            if match is None:
                continue
            fields = {k: v for k, v in match.groupdict().items() if v is not None}
            for name, transform in self.transforms.items():
                if name in fields:
                    fields[name] = transform(fields[name])
            return fields
        return None

    def render(
        self,
        text: str,
        fields: Optional[Mapping[str, str]],
        *,
        code: Optional[str] = None,
        context: Optional["ErrorContext"] = None,
    ) -> str:
        """Render the user-facing message for a match."""
        dependency_names = context.dependency_names if context else ""
        if fields is None and self.effective_extractors:
            template = self.fallback_template
        else:
            template = self.template
        if template and not dependency_names and "{dependencies}" in template:
            template = self.fallback_template
        if template is None:
            return text

        values = _TemplateValues(fields or {})
        values["message"] = text
        values["code"] = code or self.code or ""
        values["dependencies"] = dependency_names
        return template.format_map(values)

    def is_retryable(self) -> bool:
        if self.retryable is not None:
            return self.retryable
        return self.kind.retryable


@dataclass(frozen=True)
class ErrorRuleSet:
    """Ordered rule tables of one ecosystem.

    Attributes:
        name: Ecosystem or tool name (``"yarn"``).
        code_pattern: Regex matching every code the tool can emit, known
            or not; unknown codes are ignored by the classifier.
        code_rules: Rules keyed by exact code.
        pattern_rules: Freeform rules, in tie-break order.
        order: Default pass order for this ecosystem.
    """

    name: str
    code_pattern: Optional[Pattern[str]] = None
    code_rules: Tuple[ErrorRule, ...] = ()
    pattern_rules: Tuple[ErrorRule, ...] = ()
    order: ClassificationOrder = ClassificationOrder.CODES_FIRST
    _by_code: Dict[str, ErrorRule] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "code_rules", tuple(self.code_rules))
        object.__setattr__(self, "pattern_rules", tuple(self.pattern_rules))

        by_code: Dict[str, ErrorRule] = {}
        for rule in self.code_rules:
            if not rule.code:
                raise ValueError(f"Code rule without a code in rule set {self.name!r}")
            if rule.code in by_code:
                raise ValueError(f"Duplicate code {rule.code} in rule set {self.name!r}")
            by_code[rule.code] = rule
        object.__setattr__(self, "_by_code", by_code)

        if by_code and self.code_pattern is None:
            alternatives = "|".join(re.escape(code) for code in by_code)
            object.__setattr__(self, "code_pattern", re.compile(rf"\b(?:{alternatives})\b"))

        for rule in self.pattern_rules:
            if rule.code:
                raise ValueError(f"Pattern rule with a code in rule set {self.name!r}")

    def __hash__(self) -> int:
        return hash(self.name)

    def rule_for_code(self, code: str) -> Optional[ErrorRule]:
        """Return the rule mapped to ``code``, if any."""
        return self._by_code.get(code)

    @property
    def known_codes(self) -> Tuple[str, ...]:
        return tuple(self._by_code)


@dataclass(frozen=True)
class ErrorContext:
    """The file context a native tool failed in.

    Attributes:
        dependencies: Dependencies being updated.
        dependency_files: Files the tool was working on.
        lockfile: The lock file involved, when known.
    """

    dependencies: Tuple[Dependency, ...] = ()
    dependency_files: Tuple[DependencyFile, ...] = ()
    lockfile: Optional[DependencyFile] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "dependencies", tuple(self.dependencies))
        object.__setattr__(self, "dependency_files", tuple(self.dependency_files))

    @property
    def dependency_names(self) -> str:
        """Comma-separated dependency names."""
        return ", ".join(dep.name for dep in self.dependencies)

    @classmethod
    def for_update(
        cls,
        dependencies: Sequence[Dependency],
        dependency_files: Sequence[DependencyFile],
        *,
        lockfile_name: Optional[str] = None,
    ) -> "ErrorContext":
        """Build a context, picking the lock file by name when given."""
        lockfile = None
        if lockfile_name:
            lockfile = next(
                (f for f in dependency_files if f.name == lockfile_name), None
            )
        return cls(
            dependencies=tuple(dependencies),
            dependency_files=tuple(dependency_files),
            lockfile=lockfile,
        )


@dataclass(frozen=True)
class ClassifiedError:
    """A native tool failure turned into a typed error.

    Constructed once per classification and handed straight to the
    caller, who decides whether to raise it (:meth:`to_exception`).

    Attributes:
        kind: Classified kind.
        message: Rendered, escape-free message.
        fields: Structured fields extracted from the output.
        code: Native code that matched (code pass only).
        retryable: Whether the caller may retry.
    """

    kind: ErrorKind
    message: str
    fields: Mapping[str, str] = field(default_factory=dict)
    code: Optional[str] = None
    retryable: bool = False

    def __hash__(self) -> int:
        return hash((self.kind, self.message, self.code))

    @property
    def tool_name(self) -> Optional[str]:
        return self.fields.get("tool_name")

    @property
    def detected_version(self) -> Optional[str]:
        return self.fields.get("detected_version")

    @property
    def supported_versions(self) -> Optional[str]:
        return self.fields.get("supported_versions")

    @property
    def package_req(self) -> Optional[str]:
        return self.fields.get("package_req")

    @property
    def source(self) -> Optional[str]:
        return self.fields.get("source")

    def to_exception(self) -> UpdaterError:
        """Return the raisable form of this error."""
        return UpdaterError(
            self.message,
            kind=self.kind,
            fields=self.fields,
            code=self.code,
            retryable=self.retryable,
        )

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "fields": dict(self.fields),
            "code": self.code,
            "retryable": self.retryable,
        }

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"
