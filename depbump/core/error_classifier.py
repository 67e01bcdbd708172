"""Classify raw package-manager output into typed errors.

When a native helper exits abnormally, its captured output goes through
:class:`ErrorClassifier`, which runs two passes over an ecosystem's
:class:`~depbump.models.error.ErrorRuleSet`:

**Code pass**: every code-shaped token in the output is looked up; codes
with no rule are ignored. When several known codes occur, the *last* one
in the output wins.

**Pattern pass**: freeform rules are checked against the full output, or
against the ``Usage Error:`` region only for rules flagged ``in_usage``.
Among matching rules, the one whose match occurs last in the output
wins; table order breaks ties.

Which pass runs first is explicit configuration (the rule set's default,
overridable per package manager in ``depbump.toml``); the first pass that
yields a result wins. No match returns ``None``; deciding what
"unclassified" means is left to the caller.

Output is normalized once (ANSI escapes stripped) before any matching or
rendering.

Typical usage::

    classifier = ErrorClassifier.for_package_manager("npm_and_yarn")
    error = classifier.classify(stderr, ErrorContext.for_update(deps, files))
    if error is not None:
        raise error.to_exception()
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple, Union

from depbump.core.registry import EcosystemRegistry, default_registry
from depbump.models.error import (
    ClassificationOrder,
    ClassifiedError,
    ErrorContext,
    ErrorRule,
    ErrorRuleSet,
    PatternLike,
)
from depbump.utils.logger import get_logger
from depbump.utils.text import excerpt, strip_ansi

if TYPE_CHECKING:
    from depbump.config import DepBumpConfig

logger = get_logger("core.error_classifier")

__all__ = ["ErrorClassifier", "find_usage_error", "pattern_in_message"]

# From the marker to a blank line, an ``ERROR`` terminator line, or the end.
_USAGE_ERROR = re.compile(
    r"(?i:usage error:).*?(?:\n[ \t]*\n|\nERROR\b|\Z)",
    re.DOTALL,
)


def pattern_in_message(
    patterns: Iterable[PatternLike],
    message: str,
    *,
    case_sensitive: bool = True,
) -> bool:
    """Return True if ``message`` contains any of ``patterns``.

    Args:
        patterns: Literal substrings and/or compiled regexes.
        message: Text to search.
        case_sensitive: When False, literals and regexes ignore case.

    Example::

        >>> pattern_in_message(["pattern1", re.compile("pattern2")], "has pattern2")
        True
    """
    return _last_match_start(patterns, message, case_sensitive) is not None


def find_usage_error(message: str) -> Optional[str]:
    """Extract the ``Usage Error:`` region of ``message``, if any.

    The marker is matched case-insensitively; the region runs to the next
    blank line, an ``ERROR`` terminator line (included), or the end.
    """
    match = _USAGE_ERROR.search(message)
    if match is None:
        return None
    return match.group(0).rstrip()


def _last_match_start(
    patterns: Iterable[PatternLike],
    message: str,
    case_sensitive: bool,
) -> Optional[int]:
    """Start offset of the last occurrence of any pattern, or ``None``."""
    haystack = message if case_sensitive else message.lower()
    last: Optional[int] = None

    for pattern in patterns:
        position: Optional[int] = None
        if isinstance(pattern, str):
            needle = pattern if case_sensitive else pattern.lower()
            found = haystack.rfind(needle)
            position = found if found >= 0 else None
        else:
            regex = pattern
            if not case_sensitive and not regex.flags & re.IGNORECASE:
                regex = re.compile(regex.pattern, regex.flags | re.IGNORECASE)
            for match in regex.finditer(message):
                position = match.start()

        if position is not None and (last is None or position > last):
            last = position

    return last


class ErrorClassifier:
    """Classify native tool output with one ecosystem's rule set.

    Stateless apart from its configuration; one instance can serve
    concurrent update attempts.

    Args:
        rules: Rule tables of the ecosystem.
        order: Pass order; defaults to ``rules.order``.
    """

    def __init__(
        self,
        rules: ErrorRuleSet,
        *,
        order: Optional[Union[str, ClassificationOrder]] = None,
    ) -> None:
        self.rules = rules
        self.order = ClassificationOrder.parse(order) if order else rules.order

    @classmethod
    def for_package_manager(
        cls,
        package_manager: str,
        *,
        registry: Optional[EcosystemRegistry] = None,
        config: Optional["DepBumpConfig"] = None,
    ) -> "ErrorClassifier":
        """Build a classifier from the registry entry of ``package_manager``.

        Ecosystems without rules get an empty rule set, which classifies
        nothing.

        Raises:
            UnsupportedPackageManagerError: Unknown package manager.
        """
        ecosystem = (registry or default_registry).lookup(package_manager)
        rules = ecosystem.error_rules or ErrorRuleSet(name=ecosystem.package_manager)
        order = config.order_for(ecosystem.package_manager) if config else None
        return cls(rules, order=order)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def classify(
        self,
        raw_message: str,
        context: Optional[ErrorContext] = None,
    ) -> Optional[ClassifiedError]:
        """Classify ``raw_message``; ``None`` means "not actionable"."""
        message = strip_ansi(raw_message)
        usage_error = find_usage_error(message) or ""

        if self.order is ClassificationOrder.CODES_FIRST:
            result = self._classify_codes(message, context)
            if result is None:
                result = self._classify_patterns(message, usage_error, context)
        else:
            result = self._classify_patterns(message, usage_error, context)
            if result is None:
                result = self._classify_codes(message, context)

        if result is None:
            logger.debug("Unclassified %s output: %s", self.rules.name, excerpt(message))
        return result

    def classify_codes(
        self,
        raw_message: str,
        context: Optional[ErrorContext] = None,
    ) -> Optional[ClassifiedError]:
        """Run only the code pass."""
        return self._classify_codes(strip_ansi(raw_message), context)

    def classify_patterns(
        self,
        raw_message: str,
        usage_error: Optional[str] = None,
        context: Optional[ErrorContext] = None,
    ) -> Optional[ClassifiedError]:
        """Run only the pattern pass.

        Args:
            raw_message: Full tool output.
            usage_error: Usage-error region; extracted from
                ``raw_message`` when omitted.
            context: File context of the failure.
        """
        message = strip_ansi(raw_message)
        if usage_error is None:
            usage_error = find_usage_error(message) or ""
        else:
            usage_error = strip_ansi(usage_error)
        return self._classify_patterns(message, usage_error, context)

    def handle_error(
        self,
        raw_message: str,
        context: Optional[ErrorContext] = None,
    ) -> None:
        """Raise the classified error for ``raw_message``, if there is one.

        Raises:
            UpdaterError: The output was classified.
        """
        result = self.classify(raw_message, context)
        if result is not None:
            raise result.to_exception()

    find_usage_error = staticmethod(find_usage_error)
    pattern_in_message = staticmethod(pattern_in_message)

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    def _classify_codes(
        self,
        message: str,
        context: Optional[ErrorContext],
    ) -> Optional[ClassifiedError]:
        if self.rules.code_pattern is None:
            return None

        last: Optional[Tuple[str, ErrorRule]] = None
        seen: List[str] = []
        for match in self.rules.code_pattern.finditer(message):
            code = match.group(0)
            rule = self.rules.rule_for_code(code)
            if rule is None:
                continue
            seen.append(code)
            last = (code, rule)

        if last is None:
            return None

        code, rule = last
        if len(set(seen)) > 1:
            logger.debug("Codes %s found; last one wins: %s", sorted(set(seen)), code)
        return self._build(rule, message, context, code=code)

    def _classify_patterns(
        self,
        message: str,
        usage_error: str,
        context: Optional[ErrorContext],
    ) -> Optional[ClassifiedError]:
        usage_offset = max(message.find(usage_error), 0) if usage_error else 0

        best: Optional[Tuple[int, ErrorRule, str]] = None
        for rule in self.rules.pattern_rules:
            text = usage_error if rule.in_usage else message
            if not text:
                continue
            position = _last_match_start(rule.patterns, text, rule.case_sensitive)
            if position is None:
                continue
            if rule.in_usage:
                position += usage_offset
            # Strictly greater: earlier table entries win ties
            if best is None or position > best[0]:
                best = (position, rule, text)

        if best is None:
            return None

        _, rule, text = best
        return self._build(rule, text, context)

    def _build(
        self,
        rule: ErrorRule,
        text: str,
        context: Optional[ErrorContext],
        *,
        code: Optional[str] = None,
    ) -> ClassifiedError:
        fields = rule.extract(text)
        rendered = rule.render(text, fields, code=code, context=context)
        logger.debug(
            "Classified %s output as %s via rule %s", self.rules.name, rule.kind.value, rule.label
        )
        return ClassifiedError(
            kind=rule.kind,
            message=rendered,
            fields=dict(fields or {}),
            code=code,
            retryable=rule.is_retryable(),
        )
