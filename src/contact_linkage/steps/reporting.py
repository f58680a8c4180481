from __future__ import annotations

from collections.abc import Mapping, Sequence

from contact_linkage.models import ConstraintViolation, Edge, EdgeType, QualityMetrics


def detect_constraint_violations(assignments: Mapping[str, int], edges: Sequence[Edge]) -> list[ConstraintViolation]:
    violations: list[ConstraintViolation] = []
    for edge in edges:
        if edge.edge_type is not EdgeType.NEGATIVE:
            continue
        left_cluster = assignments.get(edge.left_id)
        right_cluster = assignments.get(edge.right_id)
        if left_cluster is not None and left_cluster == right_cluster:
            violations.append(
                ConstraintViolation(
                    left_id=edge.left_id,
                    right_id=edge.right_id,
                    cluster_id=left_cluster,
                    conflicting_fields=edge.non_matching_fields,
                )
            )
    return violations


def compute_quality_metrics(
    assignments: Mapping[str, int],
    edges: Sequence[Edge],
    violations: Sequence[ConstraintViolation] = (),
) -> QualityMetrics:
    if not assignments:
        return QualityMetrics()

    metrics = QualityMetrics(
        total_nodes=len(assignments),
        total_clusters=len(set(assignments.values())),
        constraint_violations=len(violations),
    )
    total_positive = 0
    total_negative = 0

    for edge in edges:
        if edge.edge_type is EdgeType.MIXED:
            continue
        left_cluster = assignments.get(edge.left_id)
        right_cluster = assignments.get(edge.right_id)
        if edge.edge_type is EdgeType.POSITIVE:
            total_positive += 1
        else:
            total_negative += 1
        if left_cluster is None or right_cluster is None:
            continue
        same_cluster = left_cluster == right_cluster
        if edge.edge_type is EdgeType.POSITIVE:
            if same_cluster:
                metrics.positive_within_cluster += 1
            else:
                metrics.positive_between_clusters += 1
        elif same_cluster:
            metrics.negative_within_cluster += 1
        else:
            metrics.negative_between_clusters += 1

    if total_positive:
        metrics.positive_intra_cluster_ratio = round(metrics.positive_within_cluster / total_positive * 100, 2)
    if total_negative:
        metrics.negative_inter_cluster_ratio = round(metrics.negative_between_clusters / total_negative * 100, 2)
    return metrics
