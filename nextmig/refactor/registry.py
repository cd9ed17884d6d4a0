"""Transformation registry: tag → rule, in a fixed global order."""

from __future__ import annotations

from typing import Iterable, Iterator, Tuple

from .rules import DEFAULT_RULES, TransformRule


class TransformRegistry:
    """
    Ordered mapping from transform tag to rule.

    Registration order is the global application order: structural renames
    come before rules that touch identifiers inside the renamed code, and
    call-site rewrites compose in the same order for every file.
    """

    def __init__(self, rules: Iterable[TransformRule]) -> None:
        self._rules: dict[str, TransformRule] = {}
        for rule in rules:
            if rule.tag in self._rules:
                raise ValueError(f"duplicate transform tag: {rule.tag}")
            self._rules[rule.tag] = rule
        self._order = {tag: i for i, tag in enumerate(self._rules)}

    def __iter__(self) -> Iterator[TransformRule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, tag: object) -> bool:
        return tag in self._rules

    @property
    def tags(self) -> Tuple[str, ...]:
        return tuple(self._rules)

    def get(self, tag: str) -> TransformRule:
        try:
            return self._rules[tag]
        except KeyError:
            raise KeyError(f"unknown transform tag: {tag}") from None

    def describe(self, tag: str) -> str:
        rule = self._rules.get(tag)
        return rule.description if rule else tag

    def detect(self, text: str) -> Tuple[str, ...]:
        """All tags whose predicate holds for text, in registration order."""
        return tuple(rule.tag for rule in self._rules.values() if rule.detect(text))

    def ordered(self, tags: Iterable[str]) -> Tuple[str, ...]:
        """Sort known tags into registration order, dropping duplicates."""
        known = {t for t in tags if t in self._rules}
        return tuple(sorted(known, key=self._order.__getitem__))


def default_registry() -> TransformRegistry:
    return TransformRegistry(DEFAULT_RULES)
