from __future__ import annotations

from collections.abc import Sequence

from contact_linkage.models import EdgeType, PairScore, RuleStatus, RuleVerdict
from contact_linkage.rules import level_weight

SCORE_EPSILON = 0.001
CORROBORATION_BONUS = 0.1


def classify_score(match_score: float, has_decisive_verdict: bool) -> EdgeType | None:
    """Map a rounded score to an edge type.

    A near-zero score still yields a ``mixed`` edge when some rule decided,
    so balanced contradictory evidence stays visible.
    """

    if not has_decisive_verdict:
        return None
    if match_score > SCORE_EPSILON:
        return EdgeType.POSITIVE
    if match_score < -SCORE_EPSILON:
        return EdgeType.NEGATIVE
    return EdgeType.MIXED


def corroboration_multiplier(unique_positive_rules: int) -> float:
    if unique_positive_rules > 1:
        return 1 + CORROBORATION_BONUS * (unique_positive_rules - 1)
    return 1.0


class LevelWeightScoring:
    """Fixed weight per verdict level: positive adds it, negative subtracts it."""

    def score(self, trace: Sequence[RuleVerdict]) -> PairScore:
        positive_score = 0.0
        negative_score = 0.0
        unique_positive_rules: set[str] = set()

        for verdict in trace:
            if verdict.status is RuleStatus.POSITIVE:
                positive_score += level_weight(verdict.level)
                if verdict.top_rule is not None:
                    unique_positive_rules.add(verdict.top_rule)
            elif verdict.status is RuleStatus.NEGATIVE:
                negative_score += self._negative_weight(verdict)

        return _finalize(trace, positive_score, negative_score, unique_positive_rules)

    def _negative_weight(self, verdict: RuleVerdict) -> float:
        return level_weight(verdict.level)


class ProportionalScoring(LevelWeightScoring):
    """Negative verdicts weigh in proportion to their conflicting fields.

    A negative verdict contributes ``conflicting / present`` regardless of
    its level, where present counts the fields populated on both sides.
    """

    def _negative_weight(self, verdict: RuleVerdict) -> float:
        present = len(verdict.matching_fields) + len(verdict.non_matching_fields)
        if present == 0:
            return 0.0
        return len(verdict.non_matching_fields) / present


SCORING_POLICIES = {
    "level": LevelWeightScoring,
    "proportional": ProportionalScoring,
}


def select_reporting_verdict(trace: Sequence[RuleVerdict], precedence: Sequence[str]) -> RuleVerdict | None:
    """Pick the verdict shown on an edge; does not affect the score.

    For each top-level rule (in precedence order) the shortest-path entry
    represents that rule. The first positive representative wins, then the
    first negative, then the first neutral.
    """

    representatives: list[RuleVerdict] = []
    for rule_name in precedence:
        chosen: RuleVerdict | None = None
        for verdict in trace:
            if verdict.top_rule != rule_name:
                continue
            if chosen is None or verdict.level < chosen.level:
                chosen = verdict
        if chosen is not None:
            representatives.append(chosen)

    for status in (RuleStatus.POSITIVE, RuleStatus.NEGATIVE):
        for verdict in representatives:
            if verdict.status is status:
                return verdict
    return representatives[0] if representatives else None


def _finalize(
    trace: Sequence[RuleVerdict],
    positive_score: float,
    negative_score: float,
    unique_positive_rules: set[str],
) -> PairScore:
    multiplier = corroboration_multiplier(len(unique_positive_rules))
    match_score = round(positive_score * multiplier - negative_score, 3)
    edge_type = classify_score(match_score, any(verdict.is_decisive for verdict in trace))
    return PairScore(
        match_score=match_score,
        positive_score=positive_score,
        negative_score=negative_score,
        multiplier=multiplier,
        unique_positive_rules=frozenset(unique_positive_rules),
        edge_type=edge_type,
    )
