"""The main /metrics endpoint: serves the metrics of all stores, optionally gzipped."""

from __future__ import annotations

import gzip
import io
import logging
import re
import threading
from collections.abc import Mapping
from typing import Any, Callable, Iterable, Protocol

log = logging.getLogger(__name__)

CONTENT_TYPE = "text/plain; version=0.0.4"

_DECIMAL = re.compile(r"^[+-]?[0-9]+$")


class _Store(Protocol):
    def write_all(self, writer: Any) -> None: ...


def _field(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def detect_nominal_from_pod(stateful_set_name: str, pod_name: str) -> int:
    """Return the ordinal of a StatefulSet pod, taken from its name."""
    prefix = stateful_set_name + "-"
    nominal = pod_name[len(prefix):] if pod_name.startswith(prefix) else pod_name
    if not _DECIMAL.match(nominal):
        raise ValueError(
            f"failed to detect shard index for Pod {pod_name} of StatefulSet "
            f"{stateful_set_name}, parsed {nominal}"
        )
    return int(nominal)


def sharding_settings_from_statefulset(stateful_set: Any, pod_name: str) -> tuple[int, int]:
    """Return ``(shard, total_shards)`` for a pod of the given StatefulSet."""
    metadata = _field(stateful_set, "metadata")
    name = _field(metadata, "name") if metadata is not None else _field(stateful_set, "name")
    try:
        nominal = detect_nominal_from_pod(name or "", pod_name)
    except ValueError as exc:
        raise ValueError(f"detecting Pod nominal: {exc}") from exc

    replicas = _field(_field(stateful_set, "spec"), "replicas")
    total_replicas = 1 if replicas is None else int(replicas)
    return nominal, total_replicas


def _wants_gzip(accept_encoding: str) -> bool:
    for part in accept_encoding.split(","):
        part = part.strip()
        if part == "gzip" or part.startswith("gzip;"):
            return True
    return False


class MetricsHandler:
    """Serves the metrics of its stores; the stores can be swapped concurrently."""

    def __init__(self, enable_gzip_encoding: bool = False) -> None:
        self.enable_gzip_encoding = enable_gzip_encoding
        self._lock = threading.RLock()
        self._stores: list[_Store] = []
        self._shard = 0
        self._total_shards = 0

    def set_stores(self, stores: Iterable[_Store], shard: int, total_shards: int) -> None:
        """Replace the served stores together with the sharding they were built for."""
        if total_shards != 1:
            log.info(
                "configuring sharding of this instance to be shard index %d "
                "(zero-indexed) out of %d total shards",
                shard,
                total_shards,
            )
        with self._lock:
            self._stores = list(stores)
            self._shard = shard
            self._total_shards = total_shards

    def sharding_unchanged(self, shard: int, total_shards: int) -> bool:
        """True if the current sharding already equals the given one."""
        with self._lock:
            return self._shard == shard and self._total_shards == total_shards

    def render(self, accept_encoding: str = "") -> tuple[list[tuple[str, str]], bytes]:
        """Return the response headers and body for a request with this Accept-Encoding."""
        headers = [("Content-Type", CONTENT_TYPE)]
        buffer = io.BytesIO()
        with self._lock:
            for store in self._stores:
                store.write_all(buffer)
        body = buffer.getvalue()

        if self.enable_gzip_encoding and _wants_gzip(accept_encoding):
            headers.append(("Content-Encoding", "gzip"))
            body = gzip.compress(body)
        return headers, body

    def __call__(
        self, environ: Mapping[str, Any], start_response: Callable[..., Any]
    ) -> list[bytes]:
        """Serve the metrics as a WSGI application."""
        headers, body = self.render(environ.get("HTTP_ACCEPT_ENCODING", ""))
        headers.append(("Content-Length", str(len(body))))
        start_response("200 OK", headers)
        return [body]