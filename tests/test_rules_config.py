from __future__ import annotations

import json

import pytest

from contact_linkage.errors import RuleConfigError
from contact_linkage.rules import DEFAULT_RULE_TREE, RuleTree


def test_default_tree_shape() -> None:
    assert DEFAULT_RULE_TREE.precedence == ("Rule-1", "Rule-2", "Rule-3", "Rule-14")
    assert len(list(DEFAULT_RULE_TREE.walk())) == 17
    assert DEFAULT_RULE_TREE.fields_for("Rule-13") == ("firstName", "addressLine1", "city", "country")
    assert DEFAULT_RULE_TREE.fields_for("Rule-99") == ()


def test_walk_yields_paths_from_the_root() -> None:
    paths = [path for path, _ in DEFAULT_RULE_TREE.walk()]

    assert paths[:6] == [
        ("Rule-1",),
        ("Rule-1", "Rule-4"),
        ("Rule-1", "Rule-4", "Rule-5"),
        ("Rule-1", "Rule-4", "Rule-5", "Rule-7"),
        ("Rule-1", "Rule-4", "Rule-6"),
        ("Rule-1", "Rule-4", "Rule-6", "Rule-7"),
    ]


def test_config_round_trip() -> None:
    rebuilt = RuleTree.from_config(DEFAULT_RULE_TREE.to_config())

    assert rebuilt.to_config() == DEFAULT_RULE_TREE.to_config()
    assert rebuilt.roots == DEFAULT_RULE_TREE.roots


def test_load_from_json(tmp_path) -> None:
    path = tmp_path / "rules.json"
    path.write_text(
        json.dumps({"rules": [{"name": "email", "fields": ["email"], "children": []}]}),
        encoding="utf-8",
    )

    tree = RuleTree.from_json(path)

    assert tree.precedence == ("email",)


def test_reused_name_must_keep_its_fields() -> None:
    config = [
        {"name": "Rule-A", "fields": ["email", "phone"], "children": [{"name": "Rule-B", "fields": ["email"]}]},
        {"name": "Rule-C", "fields": ["phone", "party"], "children": [{"name": "Rule-B", "fields": ["phone"]}]},
    ]

    with pytest.raises(RuleConfigError):
        RuleTree.from_config(config)


@pytest.mark.parametrize(
    "config",
    [
        [{"name": "", "fields": ["email"]}],
        [{"name": "Rule-A", "fields": []}],
        [{"name": "Rule-A", "fields": "email"}],
        [{"name": "Rule-A", "fields": ["email"]}, {"name": "Rule-A", "fields": ["email"]}],
    ],
)
def test_malformed_configs_are_rejected(config) -> None:
    with pytest.raises(RuleConfigError):
        RuleTree.from_config(config)
