from __future__ import annotations

from collections.abc import Sequence

from contact_linkage.interfaces import RecordCleaner, RecordClusterer
from contact_linkage.models import ContactRecord, LinkageResult
from contact_linkage.observability import EventRecorder
from contact_linkage.steps.cleanup import FunctionalCleaner
from contact_linkage.steps.clustering import ConstrainedClusterer
from contact_linkage.steps.edges import EdgeBuilder


class LocalLinkagePipeline:
    """In-process runner: clean, build edges, cluster, report."""

    def __init__(
        self,
        cleaner: RecordCleaner | None = None,
        edge_builder: EdgeBuilder | None = None,
        clusterer: RecordClusterer | None = None,
        events: EventRecorder | None = None,
    ) -> None:
        self._events = events or EventRecorder()
        self._cleaner = cleaner or FunctionalCleaner()
        self._edge_builder = edge_builder or EdgeBuilder()
        self._clusterer = clusterer or ConstrainedClusterer(events=self._events)

    def run(self, records: Sequence[ContactRecord]) -> LinkageResult:
        if not records:
            return LinkageResult()

        pipeline_events = self._events.scoped("pipeline")
        cleaned = self._cleaner.clean(records)
        edges = self._edge_builder.build(cleaned)
        pipeline_events.record("edges_built", {"record_count": len(cleaned), "edge_count": len(edges)})

        clustering = self._clusterer.cluster(cleaned, edges)
        pipeline_events.record(
            "run_complete",
            {
                "clusters": clustering.quality_metrics.total_clusters,
                "violations": len(clustering.constraint_violations),
            },
        )
        return LinkageResult(edges=edges, clustering=clustering)
