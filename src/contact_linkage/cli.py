from __future__ import annotations

import argparse
import csv
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

from contact_linkage.datasets import CONTACT_COLUMNS, CONTACT_SCHEMA, SAMPLE_CONTACTS, ReferenceDatasetGenerator
from contact_linkage.models import ClusteringResult, ContactRecord, LinkageResult
from contact_linkage.observability import EventRecorder, logging_observer
from contact_linkage.rules import DEFAULT_RULE_TREE, RuleTree
from contact_linkage.runners import LocalLinkagePipeline
from contact_linkage.steps import (
    SCORING_POLICIES,
    ClusteringConfig,
    ConstrainedClusterer,
    EdgeBuilder,
    FunctionalCleaner,
    HierarchicalRuleEvaluator,
    standard_cleaner,
)


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    if args.command == "run":
        logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
        run(
            input_csv=args.input_csv,
            size=args.size,
            duplicate_rate=args.duplicate_rate,
            seed=args.seed,
            output_dir=args.output_dir,
            rules_json=args.rules_json,
            scoring=args.scoring,
            normalize=args.normalize,
            config=ClusteringConfig(
                positive_threshold=args.positive_threshold,
                negative_threshold=args.negative_threshold,
                optimization_passes=args.optimization_passes,
            ),
            include_trace=args.include_trace,
            show_clusters=args.show_clusters,
        )
        return

    parser.print_help()


def run(
    *,
    input_csv: Path | None,
    size: int,
    duplicate_rate: float,
    seed: int,
    output_dir: Path,
    rules_json: Path | None,
    scoring: str,
    normalize: bool,
    config: ClusteringConfig,
    include_trace: bool,
    show_clusters: int,
) -> LinkageResult:
    output_dir.mkdir(parents=True, exist_ok=True)

    if input_csv is not None:
        records = _read_records_csv(input_csv)
        dataset_path: Path | None = input_csv
    elif size > 0:
        records = ReferenceDatasetGenerator(seed=seed).generate(size=size, duplicate_rate=duplicate_rate)
        dataset_path = output_dir / "test_dataset.csv"
        _write_records_csv(dataset_path, records)
    else:
        records = [CONTACT_SCHEMA.to_record(row, index) for index, row in enumerate(SAMPLE_CONTACTS)]
        dataset_path = None

    rule_tree = RuleTree.from_json(rules_json) if rules_json else DEFAULT_RULE_TREE
    events = EventRecorder()
    events.register(logging_observer)
    pipeline = LocalLinkagePipeline(
        cleaner=standard_cleaner() if normalize else FunctionalCleaner(),
        edge_builder=EdgeBuilder(
            evaluator=HierarchicalRuleEvaluator(rule_tree),
            scoring=SCORING_POLICIES[scoring](),
        ),
        clusterer=ConstrainedClusterer(config=config, events=events),
        events=events,
    )
    result = pipeline.run(records)

    edges_path = output_dir / "edges.json"
    clusters_path = output_dir / "clusters.json"
    summary_path = output_dir / "summary.json"

    _write_json(edges_path, [edge.to_dict(include_trace=include_trace) for edge in result.edges])
    _write_json(clusters_path, _clusters_payload(result.clustering))
    summary = _build_summary(
        record_count=len(records),
        result=result,
        dataset_path=dataset_path,
        edges_path=edges_path,
        clusters_path=clusters_path,
    )
    _write_json(summary_path, summary)

    if dataset_path is not None:
        print(f"Dataset: {dataset_path}")
    print(f"Edges: {edges_path}")
    print(f"Clusters: {clusters_path}")
    print(f"Summary: {summary_path}")
    print("---")
    print(f"records={summary['record_count']}")
    print(f"edges={summary['edge_count']}")
    print(f"clusters={summary['quality_metrics']['total_clusters']}")
    print(f"positive_intra_cluster_ratio={summary['quality_metrics']['positive_intra_cluster_ratio']}")
    print(f"negative_inter_cluster_ratio={summary['quality_metrics']['negative_inter_cluster_ratio']}")
    print(f"constraint_violations={len(summary['constraint_violations'])}")
    if show_clusters > 0:
        print("---")
        print("sample_clusters=")
        print(json.dumps(_cluster_sample_payload(result.clustering, records, limit=show_clusters), indent=2))
    return result


def _build_summary(
    *,
    record_count: int,
    result: LinkageResult,
    dataset_path: Path | None,
    edges_path: Path,
    clusters_path: Path,
) -> dict[str, Any]:
    edge_types: dict[str, int] = {}
    for edge in result.edges:
        edge_types[edge.edge_type.value] = edge_types.get(edge.edge_type.value, 0) + 1

    return {
        "record_count": record_count,
        "edge_count": len(result.edges),
        "edge_type_counts": edge_types,
        "quality_metrics": asdict(result.clustering.quality_metrics),
        "constraint_violations": [
            {
                "from": violation.left_id,
                "to": violation.right_id,
                "cluster_id": violation.cluster_id,
                "conflicting_fields": list(violation.conflicting_fields),
            }
            for violation in result.clustering.constraint_violations
        ],
        "dataset_path": str(dataset_path) if dataset_path else None,
        "edges_path": str(edges_path),
        "clusters_path": str(clusters_path),
    }


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="contact-linkage", description="Contact record linkage CLI")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser(
        "run",
        help="Load, sample or generate contacts, link them, and output edges + clusters + summary",
    )
    run_parser.add_argument("--input-csv", type=Path, default=None)
    run_parser.add_argument("--size", type=int, default=0, help="Generate this many records (0 uses the sample set)")
    run_parser.add_argument("--duplicate-rate", type=float, default=0.3)
    run_parser.add_argument("--seed", type=int, default=42)
    run_parser.add_argument("--output-dir", type=Path, default=Path("data/cli_output"))
    run_parser.add_argument("--rules-json", type=Path, default=None)
    run_parser.add_argument("--scoring", choices=sorted(SCORING_POLICIES), default="level")
    run_parser.add_argument("--normalize", action="store_true", help="Normalise case/whitespace before matching")
    run_parser.add_argument("--positive-threshold", type=float, default=0.001)
    run_parser.add_argument("--negative-threshold", type=float, default=-0.001)
    run_parser.add_argument("--optimization-passes", type=int, default=3)
    run_parser.add_argument("--include-trace", action="store_true")
    run_parser.add_argument("--show-clusters", type=int, default=5)
    run_parser.add_argument("--log-level", default="warning")

    return parser


def _write_json(path: Path, payload: object) -> None:
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)


def _write_records_csv(path: Path, records: list[ContactRecord]) -> None:
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=CONTACT_COLUMNS)
        writer.writeheader()
        for record in records:
            writer.writerow(CONTACT_SCHEMA.to_row(record))


def _read_records_csv(path: Path) -> list[ContactRecord]:
    with path.open("r", newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        return [CONTACT_SCHEMA.to_record(row, index) for index, row in enumerate(reader)]


def _clusters_payload(clustering: ClusteringResult) -> dict[str, list[str]]:
    return {str(cluster_id): sorted(members) for cluster_id, members in sorted(clustering.cluster_groups.items())}


def _cluster_sample_payload(
    clustering: ClusteringResult,
    records: list[ContactRecord],
    limit: int = 5,
) -> list[dict[str, Any]]:
    by_id = {record.record_id: record for record in records}
    ranked = sorted(clustering.cluster_groups.items(), key=lambda item: (-len(item[1]), item[0]))
    payload: list[dict[str, Any]] = []

    for cluster_id, members in ranked[:limit]:
        payload.append(
            {
                "cluster_id": cluster_id,
                "size": len(members),
                "records": [
                    {"record_id": record_id, **by_id[record_id].attributes}
                    for record_id in sorted(members)
                    if record_id in by_id
                ],
            }
        )
    return payload


if __name__ == "__main__":
    main()
