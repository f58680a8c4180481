from contact_linkage.steps.cleanup import FunctionalCleaner, standard_cleaner
from contact_linkage.steps.clustering import ClusteringConfig, ConstrainedClusterer, EdgeIndex
from contact_linkage.steps.edges import EdgeBuilder, pair_key
from contact_linkage.steps.evaluation import HierarchicalRuleEvaluator, evaluate_rule, evaluate_ruleset
from contact_linkage.steps.reporting import compute_quality_metrics, detect_constraint_violations
from contact_linkage.steps.scoring import (
    SCORING_POLICIES,
    LevelWeightScoring,
    ProportionalScoring,
    classify_score,
    select_reporting_verdict,
)

__all__ = [
    "FunctionalCleaner",
    "standard_cleaner",
    "ClusteringConfig",
    "ConstrainedClusterer",
    "EdgeIndex",
    "EdgeBuilder",
    "pair_key",
    "HierarchicalRuleEvaluator",
    "evaluate_rule",
    "evaluate_ruleset",
    "compute_quality_metrics",
    "detect_constraint_violations",
    "SCORING_POLICIES",
    "LevelWeightScoring",
    "ProportionalScoring",
    "classify_score",
    "select_reporting_verdict",
]
