from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class RuleStatus(StrEnum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class EdgeType(StrEnum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    MIXED = "mixed"


@dataclass(slots=True)
class ContactRecord:
    """Canonical representation of a contact record."""

    record_id: str
    attributes: dict[str, Any]

    def value(self, field_name: str) -> Any:
        """Return the field value, or ``None`` when it is absent."""

        value = self.attributes.get(field_name)
        if value is None or value == "":
            return None
        return value


@dataclass(slots=True, frozen=True)
class RuleVerdict:
    """Outcome of evaluating one rule against one record pair.

    ``rules_used`` holds a single path of rule names from the top-level rule
    down to the rule that produced this verdict. ``individual_rule_statuses``
    pairs every rule on that path with its own status so callers can render
    the decision tree.
    """

    status: RuleStatus
    matching_fields: tuple[str, ...] = ()
    non_matching_fields: tuple[str, ...] = ()
    missing_fields: tuple[str, ...] = ()
    rules_used: tuple[tuple[str, ...], ...] = ()
    individual_rule_statuses: tuple[tuple[str, RuleStatus], ...] = ()

    @property
    def path(self) -> tuple[str, ...]:
        return self.rules_used[0] if self.rules_used else ()

    @property
    def level(self) -> int:
        return len(self.path)

    @property
    def top_rule(self) -> str | None:
        return self.path[0] if self.path else None

    @property
    def is_decisive(self) -> bool:
        return self.status is not RuleStatus.NEUTRAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "matchingFields": list(self.matching_fields),
            "nonMatchingFields": list(self.non_matching_fields),
            "missingFields": list(self.missing_fields),
            "rulesUsed": [list(path) for path in self.rules_used],
            "individualRuleStatuses": [
                {"ruleName": name, "status": status.value} for name, status in self.individual_rule_statuses
            ],
        }


@dataclass(slots=True, frozen=True)
class PairScore:
    """Aggregated score for one record pair."""

    match_score: float
    positive_score: float
    negative_score: float
    multiplier: float
    unique_positive_rules: frozenset[str]
    edge_type: EdgeType | None


@dataclass(slots=True, frozen=True)
class Edge:
    """Aggregated match relationship between two records.

    ``left_id`` is always the smaller identifier of the pair.
    """

    left_id: str
    right_id: str
    edge_type: EdgeType
    match_score: float
    matching_fields: tuple[str, ...] = ()
    non_matching_fields: tuple[str, ...] = ()
    rules_used: tuple[tuple[str, ...], ...] = ()
    trace: tuple[RuleVerdict, ...] = ()
    positive_score: float = 0.0
    negative_score: float = 0.0
    multiplier: float = 1.0

    @property
    def key(self) -> tuple[str, str]:
        return (self.left_id, self.right_id)

    def to_dict(self, include_trace: bool = True) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "from": self.left_id,
            "to": self.right_id,
            "type": self.edge_type.value,
            "matchingFields": list(self.matching_fields),
            "nonMatchingFields": list(self.non_matching_fields),
            "rulesUsed": [list(path) for path in self.rules_used],
            "matchScore": self.match_score,
            "positiveScore": self.positive_score,
            "negativeScore": self.negative_score,
            "multiplier": self.multiplier,
        }
        if include_trace:
            payload["fullTrace"] = [verdict.to_dict() for verdict in self.trace]
        return payload


@dataclass(slots=True, frozen=True)
class ConstraintViolation:
    """A negative edge whose endpoints ended up in the same cluster."""

    left_id: str
    right_id: str
    cluster_id: int
    conflicting_fields: tuple[str, ...] = ()


@dataclass(slots=True)
class QualityMetrics:
    total_nodes: int = 0
    total_clusters: int = 0
    positive_intra_cluster_ratio: float = 0.0
    negative_inter_cluster_ratio: float = 0.0
    constraint_violations: int = 0
    positive_within_cluster: int = 0
    positive_between_clusters: int = 0
    negative_within_cluster: int = 0
    negative_between_clusters: int = 0


@dataclass(slots=True)
class ClusteringResult:
    """Final cluster assignment plus the quality report derived from it."""

    assignments: dict[str, int] = field(default_factory=dict)
    cluster_groups: dict[int, frozenset[str]] = field(default_factory=dict)
    quality_metrics: QualityMetrics = field(default_factory=QualityMetrics)
    constraint_violations: list[ConstraintViolation] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "ClusteringResult":
        return cls()


@dataclass(slots=True)
class LinkageResult:
    """Everything one pipeline invocation produces."""

    edges: list[Edge] = field(default_factory=list)
    clustering: ClusteringResult = field(default_factory=ClusteringResult)
