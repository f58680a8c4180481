from __future__ import annotations

from typing import Protocol, Sequence

from contact_linkage.models import ClusteringResult, ContactRecord, Edge, LinkageResult, PairScore, RuleVerdict


class RecordCleaner(Protocol):
    """Step 0: normalize field values before comparison."""

    def clean(self, records: Sequence[ContactRecord]) -> list[ContactRecord]:
        ...


class PairEvaluator(Protocol):
    """Step 1: walk the rule tree for one record pair."""

    def evaluate(self, left: ContactRecord, right: ContactRecord) -> list[RuleVerdict]:
        ...


class ScoringPolicy(Protocol):
    """Step 2: collapse an evaluation trace into one score and edge type."""

    def score(self, trace: Sequence[RuleVerdict]) -> PairScore:
        ...


class RecordClusterer(Protocol):
    """Step 3: partition records while honouring negative edges."""

    def cluster(self, records: Sequence[ContactRecord], edges: Sequence[Edge]) -> ClusteringResult:
        ...


class LinkagePipeline(Protocol):
    """Unified pipeline interface."""

    def run(self, records: Sequence[ContactRecord]) -> LinkageResult:
        ...
