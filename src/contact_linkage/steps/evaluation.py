from __future__ import annotations

import logging
from collections.abc import Sequence

from contact_linkage.models import ContactRecord, RuleStatus, RuleVerdict
from contact_linkage.rules import DEFAULT_RULE_TREE, MatchRule, RuleTree

LOGGER = logging.getLogger(__name__)


def evaluate_rule(rule: MatchRule, left: ContactRecord, right: ContactRecord) -> RuleVerdict:
    """Evaluate a single rule in isolation, ignoring its children.

    Any missing field makes the rule neutral; otherwise any conflicting field
    makes it negative; a rule whose fields all agree is positive.
    """

    matching: list[str] = []
    non_matching: list[str] = []
    missing: list[str] = []

    for field_name in rule.fields:
        left_value = left.value(field_name)
        right_value = right.value(field_name)
        if left_value is None or right_value is None:
            missing.append(field_name)
        elif left_value == right_value:
            matching.append(field_name)
        else:
            non_matching.append(field_name)

    if missing:
        status = RuleStatus.NEUTRAL
    elif non_matching:
        status = RuleStatus.NEGATIVE
    else:
        status = RuleStatus.POSITIVE

    return RuleVerdict(
        status=status,
        matching_fields=tuple(matching),
        non_matching_fields=tuple(non_matching),
        missing_fields=tuple(missing),
        rules_used=((rule.name,),),
        individual_rule_statuses=((rule.name, status),),
    )


def evaluate_ruleset(
    rule: MatchRule,
    left: ContactRecord,
    right: ContactRecord,
    path: Sequence[str] = (),
) -> list[RuleVerdict]:
    """Evaluate a rule and, while it stays neutral, its children (OR semantics).

    A positive or negative rule is terminal for its branch. A neutral rule
    defers to its children; when none of them produces an entry the neutral
    verdict itself is returned with its full path.
    """

    verdict = evaluate_rule(rule, left, right)
    current_path = (*path, rule.name)
    own_status = ((rule.name, verdict.status),)

    if verdict.status is not RuleStatus.NEUTRAL:
        return [_with_path(verdict, current_path, own_status)]

    results: list[RuleVerdict] = []
    for child in rule.children:
        for child_verdict in evaluate_ruleset(child, left, right, current_path):
            results.append(
                _with_path(
                    child_verdict,
                    child_verdict.path,
                    own_status + child_verdict.individual_rule_statuses,
                )
            )

    if results:
        return results
    return [_with_path(verdict, current_path, own_status)]


class HierarchicalRuleEvaluator:
    """Evaluates every top-level rule of a tree and concatenates the traces."""

    def __init__(self, rule_tree: RuleTree = DEFAULT_RULE_TREE) -> None:
        self._rule_tree = rule_tree

    @property
    def rule_tree(self) -> RuleTree:
        return self._rule_tree

    def evaluate(self, left: ContactRecord, right: ContactRecord) -> list[RuleVerdict]:
        trace: list[RuleVerdict] = []
        for rule in self._rule_tree:
            try:
                trace.extend(evaluate_ruleset(rule, left, right))
            except Exception:
                LOGGER.warning(
                    "Skipping rule %s for pair %s/%s",
                    rule.name,
                    left.record_id,
                    right.record_id,
                    exc_info=True,
                )
        return trace


def _with_path(
    verdict: RuleVerdict,
    path: tuple[str, ...],
    statuses: tuple[tuple[str, RuleStatus], ...],
) -> RuleVerdict:
    return RuleVerdict(
        status=verdict.status,
        matching_fields=verdict.matching_fields,
        non_matching_fields=verdict.non_matching_fields,
        missing_fields=verdict.missing_fields,
        rules_used=(path,),
        individual_rule_statuses=statuses,
    )
