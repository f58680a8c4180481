"""Structured event sink for linkage runs.

Stages record events at pass boundaries; callers subscribe observers to
watch clustering decisions without the core writing to any global log.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterator

Metadata = dict[str, Any]
EventObserver = Callable[["LinkageEvent"], None]

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class LinkageEvent:
    """Event emitted by a linkage stage."""

    timestamp: datetime
    service: str
    name: str
    payload: Metadata = field(default_factory=dict)


class EventRecorder:
    """Dispatches events to registered observers.

    Scoped recorders share the observer list of their root, so subscribing
    once on the root sees events from every stage.
    """

    __slots__ = ("_service_path", "_root", "_observers")

    def __init__(
        self,
        service: Sequence[str] | str | None = None,
        *,
        parent: "EventRecorder" | None = None,
    ) -> None:
        if parent is None:
            self._root = self
            self._observers: list[EventObserver] = []
            self._service_path: tuple[str, ...] = self._normalize_service_path(service)
        else:
            self._root = parent._root
            self._observers = parent._root._observers
            self._service_path = parent._service_path + self._normalize_service_path(service)

    @staticmethod
    def _normalize_service_path(service: Sequence[str] | str | None) -> tuple[str, ...]:
        if service is None:
            return ()
        if isinstance(service, str):
            return tuple(part for part in service.split(".") if part)
        return tuple(part for part in service if part)

    @property
    def service(self) -> str:
        return ".".join(self._service_path)

    def scoped(self, service: Sequence[str] | str) -> "EventRecorder":
        """Return a child recorder scoped to the given service."""

        return EventRecorder(service=service, parent=self)

    def register(self, observer: EventObserver) -> None:
        if observer not in self._root._observers:
            self._root._observers.append(observer)

    def unregister(self, observer: EventObserver) -> None:
        try:
            self._root._observers.remove(observer)
        except ValueError:
            pass

    def clear_observers(self) -> None:
        self._root._observers.clear()

    @contextmanager
    def temporary_observer(self, observer: EventObserver) -> Iterator[None]:
        """Register an observer for the duration of the context manager."""

        self.register(observer)
        try:
            yield
        finally:
            self.unregister(observer)

    def record(
        self,
        name: str,
        payload: Metadata | None = None,
        *,
        timestamp: datetime | None = None,
    ) -> LinkageEvent:
        """Create an event and notify observers."""

        event = LinkageEvent(
            timestamp=timestamp or datetime.now(timezone.utc),
            service=self.service,
            name=name,
            payload=dict(payload or {}),
        )
        for observer in tuple(self._root._observers):
            try:
                observer(event)
            except Exception:
                # Observers are best-effort and must never break a linkage run.
                LOGGER.debug("Observer %r failed on %s", observer, event.name, exc_info=True)
        return event


def logging_observer(event: LinkageEvent) -> None:
    """Translate linkage events into log lines."""

    if event.name == "pass_complete":
        LOGGER.info(
            "Clustering pass %s complete with %s clusters",
            event.payload.get("pass"),
            event.payload.get("clusters"),
        )
    elif event.name == "clusters_merged":
        LOGGER.debug(
            "Merged cluster %s into %s (positive=%.3f, negative_edge=%s)",
            event.payload.get("absorbed"),
            event.payload.get("cluster_id"),
            event.payload.get("total_positive_score", 0.0),
            event.payload.get("has_negative_edge"),
        )
    elif event.name == "clustering_failed":
        LOGGER.warning("Clustering degraded to an empty result: %s", event.payload.get("error"))
    elif event.name == "edges_built":
        LOGGER.info(
            "Built %s edges for %s records",
            event.payload.get("edge_count"),
            event.payload.get("record_count"),
        )
    else:
        LOGGER.debug("%s.%s %s", event.service, event.name, event.payload)
