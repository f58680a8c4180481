"""Match rule hierarchy.

A rule names an ordered set of fields whose equality across two records is
checked together. Children refine a parent with fewer fields so partially
populated records can still be linked when the parent is undecided.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from contact_linkage.errors import RuleConfigError

LEVEL_WEIGHTS: dict[int, float] = {1: 1.0, 2: 0.75, 3: 0.5, 4: 0.25, 5: 0.1}
_DEEP_LEVEL_WEIGHT = 0.1


def level_weight(level: int) -> float:
    """Weight of a verdict produced at ``level`` (top-level rules are level 1)."""

    return LEVEL_WEIGHTS.get(level, _DEEP_LEVEL_WEIGHT)


@dataclass(frozen=True)
class MatchRule:
    name: str
    fields: tuple[str, ...]
    children: tuple["MatchRule", ...] = field(default_factory=tuple)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "MatchRule":
        name = config.get("name")
        if not isinstance(name, str) or not name:
            raise RuleConfigError(f"Rule name must be a non-empty string, got {name!r}")

        raw_fields = config.get("fields") or []
        if isinstance(raw_fields, str) or not all(isinstance(f, str) and f for f in raw_fields):
            raise RuleConfigError(f"Rule {name} fields must be a list of field names")
        if not raw_fields:
            raise RuleConfigError(f"Rule {name} must compare at least one field")

        children = tuple(cls.from_config(child) for child in config.get("children") or [])
        return cls(name=name, fields=tuple(raw_fields), children=children)

    def to_config(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "fields": list(self.fields),
            "children": [child.to_config() for child in self.children],
        }


class RuleTree:
    """Immutable, validated collection of top-level match rules.

    The same named rule may appear under several parents, but every
    occurrence must compare the same fields so a name stays a usable key.
    """

    def __init__(self, roots: Sequence[MatchRule]) -> None:
        self._roots = tuple(roots)
        self._by_name: dict[str, MatchRule] = {}
        for _, rule in self.walk():
            known = self._by_name.get(rule.name)
            if known is None:
                self._by_name[rule.name] = rule
            elif known.fields != rule.fields:
                raise RuleConfigError(
                    f"Rule name {rule.name} is defined with fields {list(known.fields)} "
                    f"and {list(rule.fields)}"
                )
        top_names = [rule.name for rule in self._roots]
        if len(set(top_names)) != len(top_names):
            raise RuleConfigError(f"Top-level rule names must be unique: {top_names}")

    @classmethod
    def from_config(cls, config: Sequence[Mapping[str, Any]]) -> "RuleTree":
        return cls([MatchRule.from_config(rule) for rule in config])

    @classmethod
    def from_json(cls, path: Path) -> "RuleTree":
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        if isinstance(payload, Mapping):
            payload = payload.get("rules", [])
        return cls.from_config(payload)

    def to_config(self) -> list[dict[str, Any]]:
        return [rule.to_config() for rule in self._roots]

    @property
    def roots(self) -> tuple[MatchRule, ...]:
        return self._roots

    @property
    def precedence(self) -> tuple[str, ...]:
        """Top-level rule names, highest precedence first."""

        return tuple(rule.name for rule in self._roots)

    def find(self, name: str) -> MatchRule | None:
        return self._by_name.get(name)

    def fields_for(self, name: str) -> tuple[str, ...]:
        rule = self.find(name)
        return rule.fields if rule else ()

    def walk(self) -> Iterator[tuple[tuple[str, ...], MatchRule]]:
        """Yield ``(path, rule)`` for every node, depth first."""

        stack: list[tuple[tuple[str, ...], MatchRule]] = [((rule.name,), rule) for rule in reversed(self._roots)]
        while stack:
            path, rule = stack.pop()
            yield path, rule
            for child in reversed(rule.children):
                stack.append((path + (child.name,), child))

    def __iter__(self) -> Iterator[MatchRule]:
        return iter(self._roots)

    def __len__(self) -> int:
        return len(self._roots)


def _rule(name: str, fields: Sequence[str], *children: MatchRule) -> MatchRule:
    return MatchRule(name=name, fields=tuple(fields), children=tuple(children))


_EMAIL_ONLY = _rule("Rule-7", ["email"])
_PHONE_ONLY = _rule("Rule-11", ["phone"])

DEFAULT_RULE_TREE = RuleTree(
    [
        # Salutation + first + last + email
        _rule(
            "Rule-1",
            ["salutation", "firstName", "lastName", "email"],
            _rule(
                "Rule-4",
                ["firstName", "lastName", "email"],
                _rule("Rule-5", ["firstName", "email"], _EMAIL_ONLY),
                _rule("Rule-6", ["lastName", "email"], _EMAIL_ONLY),
            ),
        ),
        # Salutation + first + last + phone
        _rule(
            "Rule-2",
            ["salutation", "firstName", "lastName", "phone"],
            _rule(
                "Rule-8",
                ["firstName", "lastName", "phone"],
                _rule("Rule-9", ["firstName", "phone"], _PHONE_ONLY),
                _rule("Rule-10", ["lastName", "phone"], _PHONE_ONLY),
            ),
        ),
        # Salutation + first + last + address
        _rule(
            "Rule-3",
            ["salutation", "firstName", "lastName", "addressLine1", "city", "country"],
            _rule(
                "Rule-12",
                ["firstName", "lastName", "addressLine1", "city", "country"],
                _rule("Rule-13", ["firstName", "addressLine1", "city", "country"]),
            ),
        ),
        # Party + phone
        _rule("Rule-14", ["party", "phone"], _rule("Rule-15", ["phone"])),
    ]
)
