"""Ordered pattern rules that assign modules to components."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


class RuleError(ValueError):
    """A classification rule could not be compiled."""


@dataclass(frozen=True)
class ComponentRule:
    """Reassign identifiers matching *pattern* to *component*."""

    component: str
    pattern: re.Pattern[str]

    def matches(self, identifier: str) -> bool:
        return self.pattern.fullmatch(identifier) is not None


def bare_name(module_id: str) -> str:
    """Return the artifact part of ``group:artifact:version`` coordinates.

    Identifiers without a colon (package paths, component names) are their
    own bare name.
    """
    parts = module_id.split(":")
    return parts[1] if len(parts) > 1 else module_id


class Classifier:
    """Fold a module identifier over the rules in declaration order.

    Every matching rule replaces the identifier under classification with its
    component name, so a later rule may match an earlier rule's component and
    move it on (``ui-widgets`` → ``ui`` → ``frontend``).
    """

    def __init__(self, rules: Iterable[ComponentRule] = ()):
        self.rules: list[ComponentRule] = list(rules)
        self._cache: dict[str, str | None] = {}

    def classify(self, module_id: str) -> str | None:
        if module_id in self._cache:
            return self._cache[module_id]

        current = module_id
        for rule in self.rules:
            if rule.matches(current) or rule.matches(bare_name(current)):
                current = rule.component

        result = current if current != module_id else None
        self._cache[module_id] = result
        return result

    def is_component(self, name: str) -> bool:
        return any(rule.component == name for rule in self.rules)


def parse_rules(lines: Iterable[str], source: str = "<rules>") -> list[ComponentRule]:
    """Parse ``component=pattern`` lines, preserving their order."""
    rules: list[ComponentRule] = []
    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith(("#", "!")):
            continue
        component, sep, pattern = line.partition("=")
        component = component.strip()
        pattern = pattern.strip()
        if not sep or not component or not pattern:
            logger.debug("%s:%d: ignoring malformed rule %r", source, lineno, line)
            continue
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise RuleError(f"{source}:{lineno}: invalid pattern {pattern!r}: {e}") from e
        rules.append(ComponentRule(component=component, pattern=compiled))
    return rules


def load_rules(path: Path) -> list[ComponentRule]:
    """Read classification rules from *path*."""
    text = path.read_text(encoding="utf-8")
    rules = parse_rules(text.splitlines(), source=str(path))
    logger.debug("Loaded %d rules from %s", len(rules), path)
    return rules
