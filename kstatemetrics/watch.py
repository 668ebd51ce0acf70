"""Counters for list and watch operations and a lister-watcher that records them."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol


class CounterVec:
    """A counter partitioned by label values."""

    def __init__(self, name: str, help: str, label_names: Iterable[str]) -> None:
        self.name = name
        self.help = help
        self.label_names = tuple(label_names)
        self._counts: dict[tuple[str, ...], float] = {}
        self._lock = threading.Lock()

    def _key(self, values: tuple[str, ...]) -> tuple[str, ...]:
        if len(values) != len(self.label_names):
            raise ValueError(
                f"{self.name}: expected {len(self.label_names)} label values "
                f"{self.label_names!r}, got {len(values)}"
            )
        return values

    def inc(self, *args: str) -> None:
        """Increase the counter for the given label values by one."""
        key = self._key(args)
        with self._lock:
            self._counts[key] = self._counts.get(key, 0.0) + 1

    def value(self, *args: str) -> float:
        """Return the counter for the given label values."""
        key = self._key(args)
        with self._lock:
            return self._counts.get(key, 0.0)


def _watch_total() -> CounterVec:
    return CounterVec(
        "kube_state_metrics_watch_total",
        "Number of total resource watches in kube-state-metrics",
        ["result", "resource"],
    )


def _list_total() -> CounterVec:
    return CounterVec(
        "kube_state_metrics_list_total",
        "Number of total resource list in kube-state-metrics",
        ["result", "resource"],
    )


@dataclass
class ListWatchMetrics:
    """The list and watch counters of the exporter."""

    watch_total: CounterVec = field(default_factory=_watch_total)
    list_total: CounterVec = field(default_factory=_list_total)


class ListerWatcher(Protocol):
    def list(self, options: Any) -> Any: ...

    def watch(self, options: Any) -> Any: ...


class InstrumentedListerWatcher:
    """Wraps a lister-watcher and counts successful and failed calls."""

    def __init__(self, lw: ListerWatcher, metrics: ListWatchMetrics, resource: str) -> None:
        self.lw = lw
        self.metrics = metrics
        self.resource = resource

    def list(self, options: Any) -> Any:
        """List through the wrapped lister-watcher, counting the outcome."""
        try:
            result = self.lw.list(options)
        except Exception:
            self.metrics.list_total.inc("error", self.resource)
            raise
        self.metrics.list_total.inc("success", self.resource)
        return result

    def watch(self, options: Any) -> Any:
        """Watch through the wrapped lister-watcher, counting the outcome."""
        try:
            result = self.lw.watch(options)
        except Exception:
            self.metrics.watch_total.inc("error", self.resource)
            raise
        self.metrics.watch_total.inc("success", self.resource)
        return result