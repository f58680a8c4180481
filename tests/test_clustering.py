from __future__ import annotations

import itertools

import pytest

from contact_linkage.datasets import ReferenceDatasetGenerator
from contact_linkage.models import EdgeType
from contact_linkage.observability import EventRecorder, LinkageEvent
from contact_linkage.steps import ClusteringConfig, ConstrainedClusterer, EdgeBuilder
from tests.fixtures.records import make_edge, make_record


def _records(*ids: str):
    return [make_record(record_id) for record_id in ids]


def _assert_partition(result, record_ids) -> None:
    members = [set(group) for group in result.cluster_groups.values()]
    assert all(members)
    assert set().union(*members) == set(record_ids)
    assert sum(len(group) for group in members) == len(record_ids)
    assert sorted(result.cluster_groups) == list(range(1, len(members) + 1))
    for cluster_id, group in result.cluster_groups.items():
        assert all(result.assignments[record_id] == cluster_id for record_id in group)


def test_empty_input_returns_empty_result() -> None:
    result = ConstrainedClusterer().cluster([], [])

    assert result.assignments == {}
    assert result.cluster_groups == {}
    assert result.constraint_violations == []
    assert result.quality_metrics.total_nodes == 0


def test_records_without_edges_become_singletons() -> None:
    result = ConstrainedClusterer().cluster(_records("c", "a", "b"), [])

    assert result.assignments == {"c": 1, "a": 2, "b": 3}


def test_negative_partner_is_kept_out_of_strong_pair() -> None:
    edges = [make_edge("A", "B", 3.0), make_edge("B", "C", -1.0)]

    result = ConstrainedClusterer().cluster(_records("A", "B", "C"), edges)

    assert result.assignments["A"] == result.assignments["B"]
    assert result.assignments["C"] != result.assignments["A"]
    assert result.constraint_violations == []
    metrics = result.quality_metrics
    assert metrics.total_nodes == 3
    assert metrics.total_clusters == 2
    assert metrics.positive_intra_cluster_ratio == 100.0
    assert metrics.negative_inter_cluster_ratio == 100.0


def test_tie_prefers_cluster_with_smallest_record_id() -> None:
    edges = [make_edge("m", "z", 1.0), make_edge("c", "z", 1.0), make_edge("m", "c", -1.0)]
    config = ClusteringConfig(optimization_passes=0)

    result = ConstrainedClusterer(config=config).cluster(_records("m", "c", "z"), edges)

    assert result.assignments == {"m": 1, "c": 2, "z": 2}


def test_new_cluster_pulls_in_strong_partners_immediately() -> None:
    # Without the pull-in B would wait for C, whose edge to B is stronger.
    edges = [make_edge("A", "B", 2.5), make_edge("B", "C", 3.0), make_edge("A", "C", -1.0)]
    events: list[LinkageEvent] = []
    recorder = EventRecorder()
    recorder.register(events.append)
    config = ClusteringConfig(optimization_passes=0)

    result = ConstrainedClusterer(config=config, events=recorder).cluster(_records("A", "C", "B"), edges)

    assert result.assignments == {"A": 1, "B": 1, "C": 2}
    strong_joins = [
        event.payload for event in events if event.name == "node_joined" and event.payload.get("strong_edge")
    ]
    assert strong_joins == [{"record_id": "B", "cluster_id": 1, "score": 2.5, "strong_edge": True}]


def test_strict_split_then_soft_merge_reports_violation() -> None:
    edges = [
        make_edge("A", "B", 3.0),
        make_edge("A", "C", 1.0),
        make_edge("B", "C", -1.0, non_matching_fields=("firstName",)),
    ]
    events: list[LinkageEvent] = []
    recorder = EventRecorder()
    recorder.register(events.append)

    result = ConstrainedClusterer(events=recorder).cluster(_records("A", "B", "C"), edges)

    assert set(result.assignments.values()) == {1}
    assert len(result.constraint_violations) == 1
    violation = result.constraint_violations[0]
    assert (violation.left_id, violation.right_id, violation.cluster_id) == ("B", "C", 1)
    assert violation.conflicting_fields == ("firstName",)
    assert result.quality_metrics.constraint_violations == 1

    names = [event.name for event in events]
    assert names.count("cluster_created") == 1
    assert "node_moved" in names
    assert "clusters_merged" in names
    assert all(event.service == "clustering" for event in events)


def test_strict_split_holds_without_merge_passes() -> None:
    edges = [make_edge("A", "B", 3.0), make_edge("A", "C", 1.0), make_edge("B", "C", -1.0)]
    config = ClusteringConfig(optimization_passes=0)

    result = ConstrainedClusterer(config=config).cluster(_records("A", "B", "C"), edges)

    assert result.assignments == {"A": 1, "B": 1, "C": 2}
    assert result.constraint_violations == []


def test_merge_joins_clusters_linked_only_by_weak_edges() -> None:
    # C opens its own cluster before B arrives; merging joins the halves
    # through the B-C edge.
    edges = [make_edge("A", "B", 0.5), make_edge("C", "D", 0.5), make_edge("B", "C", 0.5)]

    result = ConstrainedClusterer().cluster(_records("A", "C", "B", "D"), edges)

    assert set(result.assignments.values()) == {1}


def test_unknown_record_in_edges_degrades_to_empty_result() -> None:
    events: list[LinkageEvent] = []
    recorder = EventRecorder()
    recorder.register(events.append)

    result = ConstrainedClusterer(events=recorder).cluster(_records("A"), [make_edge("A", "ghost", 1.0)])

    assert result.assignments == {}
    assert result.quality_metrics.total_nodes == 0
    assert [event.name for event in events] == ["clustering_failed"]


def test_reporting_failure_degrades_to_empty_result(monkeypatch) -> None:
    def broken_metrics(*args, **kwargs):
        raise ZeroDivisionError("metrics unavailable")

    monkeypatch.setattr("contact_linkage.steps.clustering.compute_quality_metrics", broken_metrics)
    events: list[LinkageEvent] = []
    recorder = EventRecorder()
    recorder.register(events.append)

    result = ConstrainedClusterer(events=recorder).cluster(_records("A", "B"), [make_edge("A", "B", 1.0)])

    assert result.assignments == {}
    assert result.cluster_groups == {}
    failures = [event for event in events if event.name == "clustering_failed"]
    assert [(event.service, event.payload["error"]) for event in failures] == [("clustering", "metrics unavailable")]


def test_duplicate_record_ids_degrade_to_empty_result() -> None:
    result = ConstrainedClusterer().cluster(_records("A", "A"), [])

    assert result.assignments == {}


def test_oversized_clusters_are_reported_not_split() -> None:
    ids = [f"r{i}" for i in range(4)]
    edges = [make_edge(left, right, 1.0) for left, right in itertools.combinations(ids, 2)]
    events: list[LinkageEvent] = []
    recorder = EventRecorder()
    recorder.register(events.append)

    result = ConstrainedClusterer(config=ClusteringConfig(max_cluster_size=2), events=recorder).cluster(
        _records(*ids), edges
    )

    assert len(result.cluster_groups) == 1
    assert any(event.name == "oversized_cluster" and event.payload["size"] == 4 for event in events)


def test_config_rejects_inverted_thresholds() -> None:
    with pytest.raises(ValueError):
        ClusteringConfig(positive_threshold=-0.5)
    with pytest.raises(ValueError):
        ClusteringConfig(negative_threshold=0.5)
    with pytest.raises(ValueError):
        ClusteringConfig(optimization_passes=-1)


@pytest.mark.parametrize("seed", [1, 7, 42])
def test_generated_dataset_is_partitioned_and_violations_are_exact(seed: int) -> None:
    records = ReferenceDatasetGenerator(seed=seed).generate(size=30, duplicate_rate=0.4)
    edges = EdgeBuilder().build(records)

    result = ConstrainedClusterer().cluster(records, edges)

    _assert_partition(result, [record.record_id for record in records])
    reported = {(v.left_id, v.right_id) for v in result.constraint_violations}
    expected = {
        edge.key
        for edge in edges
        if edge.match_score < -0.001 and result.assignments[edge.left_id] == result.assignments[edge.right_id]
    }
    assert reported == expected
    assert all(edge.edge_type is EdgeType.NEGATIVE for edge in edges if edge.key in reported)
