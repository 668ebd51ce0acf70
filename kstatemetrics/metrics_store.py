"""A store that keeps rendered metrics per object instead of the objects."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any, BinaryIO, Callable, Iterable, Protocol


class _ByteSlicer(Protocol):
    def to_bytes(self) -> bytes: ...


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def object_uid(obj: Any) -> str:
    """Return the UID of an object, from its metadata or its own ``uid``."""
    metadata = _field(obj, "metadata")
    source = metadata if metadata is not None else obj
    uid = _field(source, "uid")
    if uid is None:
        raise TypeError(f"object of type {type(obj).__name__} has no metadata uid")
    return str(uid)


class MetricsStore:
    """Stores metric families generated from objects, keyed by object UID."""

    def __init__(
        self,
        headers: Iterable[str],
        generate_func: Callable[[Any], list[_ByteSlicer]],
    ) -> None:
        self.headers = list(headers)
        self._generate = generate_func
        self._metrics: dict[str, list[bytes]] = {}
        self._lock = threading.RLock()

    def add(self, obj: Any) -> None:
        """Generate metrics for ``obj`` and store them under its UID."""
        uid = object_uid(obj)
        with self._lock:
            families = self._generate(obj)
            self._metrics[uid] = [f.to_bytes() for f in families]

    def update(self, obj: Any) -> None:
        """Replace the stored metrics of ``obj``."""
        self.add(obj)

    def delete(self, obj: Any) -> None:
        """Drop the metrics stored for ``obj``."""
        uid = object_uid(obj)
        with self._lock:
            self._metrics.pop(uid, None)

    def list(self) -> list[Any]:
        """Objects are not kept, so nothing is listed."""
        return []

    def list_keys(self) -> list[str]:
        """Objects are not kept, so no keys are listed."""
        return []

    def get(self, obj: Any) -> tuple[Any, bool]:
        """Look ``obj`` up by its UID; objects are not kept, so it is never found."""
        return self.get_by_key(object_uid(obj))

    def get_by_key(self, key: str) -> tuple[Any, bool]:
        """Look up an object by key; objects are not kept, so it is never found."""
        if not isinstance(key, str):
            raise TypeError(f"key must be a string, not {type(key).__name__}")
        return None, False

    def replace(self, objects: Iterable[Any]) -> None:
        """Clear the store and add every object in ``objects``."""
        with self._lock:
            self._metrics = {}
        for obj in objects:
            self.add(obj)

    def resync(self) -> None:
        """Check that every stored object has one entry per metric family."""
        expected = len(self.headers)
        with self._lock:
            for uid, families in self._metrics.items():
                if len(families) < expected:
                    raise ValueError(
                        f"object {uid} has {len(families)} metric families, "
                        f"expected {expected}"
                    )

    def write_all(self, writer: BinaryIO) -> None:
        """Write each header followed by that family's metrics of all objects."""
        with self._lock:
            for i, header in enumerate(self.headers):
                writer.write(header.encode())
                writer.write(b"\n")
                for families in self._metrics.values():
                    writer.write(families[i])