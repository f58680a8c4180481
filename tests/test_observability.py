from __future__ import annotations

import logging

from contact_linkage.observability import EventRecorder, LinkageEvent, logging_observer


def test_scoped_recorders_share_observers() -> None:
    events: list[LinkageEvent] = []
    recorder = EventRecorder()
    recorder.register(events.append)
    nested = recorder.scoped("pipeline").scoped("clustering")

    event = nested.record("pass_complete", {"pass": "merge"})

    assert event.service == "pipeline.clustering"
    assert events == [event]
    assert events[0].payload["pass"] == "merge"


def test_failing_observer_does_not_interrupt_dispatch() -> None:
    events: list[LinkageEvent] = []

    def broken(event: LinkageEvent) -> None:
        raise RuntimeError("observer down")

    recorder = EventRecorder()
    recorder.register(broken)
    recorder.register(events.append)

    recorder.record("cluster_created")

    assert [event.name for event in events] == ["cluster_created"]


def test_temporary_observer_is_removed() -> None:
    events: list[LinkageEvent] = []
    recorder = EventRecorder()

    with recorder.temporary_observer(events.append):
        recorder.record("inside")
    recorder.record("outside")

    assert [event.name for event in events] == ["inside"]


def test_logging_observer_reports_pass_completion(caplog) -> None:
    recorder = EventRecorder("clustering")
    recorder.register(logging_observer)

    with caplog.at_level(logging.INFO, logger="contact_linkage.observability"):
        recorder.record("pass_complete", {"pass": "negative_split", "clusters": 3})

    assert "Clustering pass negative_split complete with 3 clusters" in caplog.text
