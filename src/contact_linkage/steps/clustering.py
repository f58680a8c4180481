"""Constrained greedy clustering over match edges.

Three passes: greedy initial assignment, a strict split on negative edges,
and bounded merging of clusters with strong aggregate positive evidence.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from contact_linkage.errors import ContactLinkageError
from contact_linkage.models import ClusteringResult, ContactRecord, Edge
from contact_linkage.observability import EventRecorder
from contact_linkage.steps.reporting import compute_quality_metrics, detect_constraint_violations

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClusteringConfig:
    """Thresholds for the clusterer.

    Attributes:
        positive_threshold: Edge scores above this count as positive evidence.
        negative_threshold: Edge scores below this forbid co-membership.
        max_cluster_size: Informational; oversized clusters are reported, not split.
        optimization_passes: Upper bound on merge sweeps.
        strong_edge_threshold: Partners above this join a newly opened cluster at once.
    """

    positive_threshold: float = 0.001
    negative_threshold: float = -0.001
    max_cluster_size: int = 10
    optimization_passes: int = 3
    strong_edge_threshold: float = 2.0

    def __post_init__(self) -> None:
        if self.positive_threshold < 0:
            raise ValueError("positive_threshold must be >= 0")
        if self.negative_threshold > 0:
            raise ValueError("negative_threshold must be <= 0")
        if self.optimization_passes < 0:
            raise ValueError("optimization_passes must be >= 0")


class EdgeIndex:
    """Adjacency map of edge scores keyed by record id."""

    def __init__(self, record_ids: Iterable[str], edges: Sequence[Edge]) -> None:
        self._scores: dict[str, dict[str, float]] = {record_id: {} for record_id in record_ids}
        for edge in edges:
            if edge.left_id == edge.right_id:
                raise ContactLinkageError(f"Edge connects record {edge.left_id} to itself")
            if edge.left_id not in self._scores or edge.right_id not in self._scores:
                raise ContactLinkageError(f"Edge {edge.left_id}/{edge.right_id} references an unknown record")
            self._scores[edge.left_id][edge.right_id] = edge.match_score
            self._scores[edge.right_id][edge.left_id] = edge.match_score

    def score(self, left_id: str, right_id: str) -> float | None:
        return self._scores[left_id].get(right_id)

    def neighbours(self, record_id: str) -> Mapping[str, float]:
        return self._scores[record_id]


class ConstrainedClusterer:
    def __init__(
        self,
        config: ClusteringConfig | None = None,
        events: EventRecorder | None = None,
    ) -> None:
        self._config = config or ClusteringConfig()
        self._events = (events or EventRecorder()).scoped("clustering")

    @property
    def config(self) -> ClusteringConfig:
        return self._config

    def cluster(self, records: Sequence[ContactRecord], edges: Sequence[Edge]) -> ClusteringResult:
        """Assign every record to exactly one cluster and report on the result.

        Failures degrade to an empty result instead of propagating.
        """

        if not records:
            return ClusteringResult.empty()

        try:
            groups = self.partition([record.record_id for record in records], edges)
            assignments = {record_id: cluster_id for cluster_id, members in groups.items() for record_id in members}
            violations = detect_constraint_violations(assignments, edges)
            metrics = compute_quality_metrics(assignments, edges, violations)
        except Exception as exc:
            LOGGER.exception("Clustering failed; returning an empty result")
            self._events.record("clustering_failed", {"error": str(exc)})
            return ClusteringResult.empty()

        return ClusteringResult(
            assignments=assignments,
            cluster_groups=groups,
            quality_metrics=metrics,
            constraint_violations=violations,
        )

    def partition(self, record_ids: Sequence[str], edges: Sequence[Edge]) -> dict[int, frozenset[str]]:
        if len(set(record_ids)) != len(record_ids):
            raise ContactLinkageError("Record identifiers must be unique")

        index = EdgeIndex(record_ids, edges)
        rank = {record_id: position for position, record_id in enumerate(record_ids)}

        initial = self._initial_assignment(record_ids, index)
        self._events.record("pass_complete", {"pass": "initial_assignment", "clusters": len(initial)})

        split = self._split_on_negative_edges(initial, index, rank)
        self._events.record("pass_complete", {"pass": "negative_split", "clusters": len(split)})

        merged = self._merge_clusters(split, index)

        ordered = sorted(merged, key=lambda members: min(rank[record_id] for record_id in members))
        groups = {cluster_id: frozenset(members) for cluster_id, members in enumerate(ordered, start=1)}
        for cluster_id, members in groups.items():
            if len(members) > self._config.max_cluster_size:
                self._events.record("oversized_cluster", {"cluster_id": cluster_id, "size": len(members)})
        return groups

    def _initial_assignment(self, record_ids: Sequence[str], index: EdgeIndex) -> list[list[str]]:
        clusters: list[list[str]] = []
        assigned: dict[str, int] = {}

        for record_id in record_ids:
            if record_id in assigned:
                continue

            strongest: dict[int, float] = {}
            for neighbour, score in index.neighbours(record_id).items():
                position = assigned.get(neighbour)
                if position is None:
                    continue
                if position not in strongest or score > strongest[position]:
                    strongest[position] = score

            best_position: int | None = None
            best_key: tuple[float, str] | None = None
            for position, score in strongest.items():
                if score <= self._config.positive_threshold:
                    continue
                lowest_member = min(clusters[position])
                if best_key is None or score > best_key[0] or (score == best_key[0] and lowest_member < best_key[1]):
                    best_position = position
                    best_key = (score, lowest_member)

            if best_position is not None:
                clusters[best_position].append(record_id)
                assigned[record_id] = best_position
                self._events.record(
                    "node_joined",
                    {"record_id": record_id, "cluster_id": best_position + 1, "score": best_key[0]},
                )
                continue

            clusters.append([record_id])
            position = len(clusters) - 1
            assigned[record_id] = position
            self._events.record("cluster_created", {"cluster_id": position + 1, "record_id": record_id})

            for partner in record_ids:
                score = index.score(record_id, partner)
                if partner in assigned or score is None or score <= self._config.strong_edge_threshold:
                    continue
                clusters[position].append(partner)
                assigned[partner] = position
                self._events.record(
                    "node_joined",
                    {"record_id": partner, "cluster_id": position + 1, "score": score, "strong_edge": True},
                )

        return clusters

    def _split_on_negative_edges(
        self,
        clusters: Sequence[Sequence[str]],
        index: EdgeIndex,
        rank: Mapping[str, int],
    ) -> list[list[str]]:
        result: list[list[str]] = []
        for source_id, members in enumerate(clusters, start=1):
            subclusters: list[list[str]] = []
            for member in sorted(members, key=rank.__getitem__):
                best_position: int | None = None
                best_score = float("-inf")
                for position, subcluster in enumerate(subclusters):
                    scores = [index.score(member, other) for other in subcluster]
                    present = [score for score in scores if score is not None]
                    if any(score < self._config.negative_threshold for score in present):
                        continue
                    strongest = max(present, default=float("-inf"))
                    if best_position is None or strongest > best_score:
                        best_position = position
                        best_score = strongest

                if best_position is not None:
                    subclusters[best_position].append(member)
                    continue

                subclusters.append([member])
                if len(subclusters) > 1:
                    self._events.record(
                        "node_moved",
                        {"record_id": member, "from_cluster": source_id, "subcluster": len(subclusters)},
                    )
            result.extend(subclusters)
        return result

    def _merge_clusters(self, clusters: Sequence[Sequence[str]], index: EdgeIndex) -> list[set[str]]:
        working = [set(members) for members in clusters]

        for sweep in range(1, self._config.optimization_passes + 1):
            merged_any = False
            i = 0
            while i < len(working):
                j = i + 1
                while j < len(working):
                    total_positive, has_negative = self._inter_cluster_evidence(working[i], working[j], index)
                    if not self._should_merge(total_positive, has_negative):
                        j += 1
                        continue
                    absorbed = working.pop(j)
                    working[i] |= absorbed
                    merged_any = True
                    self._events.record(
                        "clusters_merged",
                        {
                            "cluster_id": i + 1,
                            "absorbed": j + 1,
                            "members": sorted(working[i]),
                            "total_positive_score": total_positive,
                            "has_negative_edge": has_negative,
                        },
                    )
                i += 1

            self._events.record("pass_complete", {"pass": "merge", "sweep": sweep, "clusters": len(working)})
            if not merged_any:
                break

        return working

    def _inter_cluster_evidence(
        self,
        left: set[str],
        right: set[str],
        index: EdgeIndex,
    ) -> tuple[float, bool]:
        total_positive = 0.0
        has_negative = False
        for member in left:
            for neighbour, score in index.neighbours(member).items():
                if neighbour not in right:
                    continue
                if score > self._config.positive_threshold:
                    total_positive += score
                elif score < self._config.negative_threshold:
                    has_negative = True
        return total_positive, has_negative

    def _should_merge(self, total_positive: float, has_negative: bool) -> bool:
        if total_positive <= 2 * self._config.positive_threshold:
            return False
        # Strong aggregate evidence may override an isolated negative edge.
        return not has_negative or total_positive > 3 * abs(self._config.negative_threshold)
