"""Rule-based contact record linkage with negative-edge-aware clustering."""

from contact_linkage.models import (
    ClusteringResult,
    ConstraintViolation,
    ContactRecord,
    Edge,
    EdgeType,
    LinkageResult,
    QualityMetrics,
    RuleStatus,
    RuleVerdict,
)
from contact_linkage.rules import DEFAULT_RULE_TREE, MatchRule, RuleTree
from contact_linkage.schema import ContactField, RecordSchema

__all__ = [
    "ClusteringResult",
    "ConstraintViolation",
    "ContactRecord",
    "Edge",
    "EdgeType",
    "LinkageResult",
    "QualityMetrics",
    "RuleStatus",
    "RuleVerdict",
    "DEFAULT_RULE_TREE",
    "MatchRule",
    "RuleTree",
    "ContactField",
    "RecordSchema",
]
