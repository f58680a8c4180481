from __future__ import annotations

import logging
from collections.abc import Sequence

from contact_linkage.interfaces import ScoringPolicy
from contact_linkage.models import ContactRecord, Edge, RuleStatus
from contact_linkage.steps.evaluation import HierarchicalRuleEvaluator
from contact_linkage.steps.scoring import LevelWeightScoring, select_reporting_verdict

LOGGER = logging.getLogger(__name__)


def pair_key(left_id: str, right_id: str) -> tuple[str, str]:
    """Canonical key for an unordered pair: smaller identifier first."""

    return (left_id, right_id) if left_id <= right_id else (right_id, left_id)


class EdgeBuilder:
    """Evaluates every unordered record pair and keeps the decisive ones."""

    def __init__(
        self,
        evaluator: HierarchicalRuleEvaluator | None = None,
        scoring: ScoringPolicy | None = None,
    ) -> None:
        self._evaluator = evaluator or HierarchicalRuleEvaluator()
        self._scoring = scoring or LevelWeightScoring()

    def build(self, records: Sequence[ContactRecord]) -> list[Edge]:
        edges: dict[tuple[str, str], Edge] = {}
        for i, left in enumerate(records):
            for right in records[i + 1 :]:
                try:
                    edge = self.build_edge(left, right)
                except Exception:
                    LOGGER.warning(
                        "Skipping pair %s/%s after evaluation error",
                        left.record_id,
                        right.record_id,
                        exc_info=True,
                    )
                    continue
                if edge is not None:
                    edges[edge.key] = edge
        return list(edges.values())

    def build_edge(self, left: ContactRecord, right: ContactRecord) -> Edge | None:
        """Return the edge for one pair, or ``None`` if every verdict is neutral."""

        trace = self._evaluator.evaluate(left, right)
        pair_score = self._scoring.score(trace)
        if pair_score.edge_type is None:
            return None

        left_id, right_id = pair_key(left.record_id, right.record_id)
        reported = select_reporting_verdict(trace, self._evaluator.rule_tree.precedence)
        matching_fields: tuple[str, ...] = ()
        non_matching_fields: tuple[str, ...] = ()
        rules_used: tuple[tuple[str, ...], ...] = ()
        if reported is not None:
            if reported.status is not RuleStatus.NEGATIVE:
                matching_fields = reported.matching_fields
            non_matching_fields = reported.non_matching_fields
            rules_used = reported.rules_used

        return Edge(
            left_id=left_id,
            right_id=right_id,
            edge_type=pair_score.edge_type,
            match_score=pair_score.match_score,
            matching_fields=matching_fields,
            non_matching_fields=non_matching_fields,
            rules_used=rules_used,
            trace=tuple(trace),
            positive_score=pair_score.positive_score,
            negative_score=pair_score.negative_score,
            multiplier=pair_score.multiplier,
        )
