"""Sharding of objects across instances by a hash of their UID."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Protocol

from kstatemetrics.metrics_store import object_uid

_MASK64 = (1 << 64) - 1
_FNV64_OFFSET = 0xCBF29CE484222325
_FNV64_PRIME = 0x100000001B3
_JUMP_MULTIPLIER = 2862933555777941757


def fnv64a(data: bytes) -> int:
    """Return the 64-bit FNV-1a hash of ``data``."""
    h = _FNV64_OFFSET
    for byte in data:
        h ^= byte
        h = (h * _FNV64_PRIME) & _MASK64
    return h


def jump_hash(key: int, num_buckets: int) -> int:
    """Map a 64-bit key to a bucket in ``range(num_buckets)`` with jump consistent hashing."""
    key &= _MASK64
    b = -1
    j = 0
    while j < num_buckets:
        b = j
        key = (key * _JUMP_MULTIPLIER + 1) & _MASK64
        j = int(float(b + 1) * (float(1 << 31) / float((key >> 33) + 1)))
    return b


class ListerWatcher(Protocol):
    def list(self, options: Any) -> Iterable[Any]: ...

    def watch(self, options: Any) -> Iterable[Any]: ...


@dataclass(frozen=True)
class Sharding:
    """One shard out of a total number of shards."""

    shard: int
    total_shards: int

    def keep(self, obj: Any) -> bool:
        """True if ``obj`` belongs to this shard."""
        key = fnv64a(object_uid(obj).encode())
        return jump_hash(key, self.total_shards) == self.shard


def _event_object(event: Any) -> Any:
    if isinstance(event, Mapping):
        return event.get("object")
    return getattr(event, "object", None)


class ShardedListWatch:
    """Wraps a lister-watcher and passes on only the objects of one shard."""

    def __init__(self, sharding: Sharding, lw: ListerWatcher) -> None:
        self.sharding = sharding
        self.lw = lw

    def list(self, options: Any) -> list[Any]:
        """List objects and keep those of this shard."""
        return [item for item in self.lw.list(options) if self.sharding.keep(item)]

    def watch(self, options: Any) -> Iterator[Any]:
        """Watch events and keep those whose objects belong to this shard."""
        events = self.lw.watch(options)
        return self._filter(events)

    def _filter(self, events: Iterable[Any]) -> Iterator[Any]:
        for event in events:
            try:
                keep = self.sharding.keep(_event_object(event))
            except TypeError:
                # Events without an identifiable object are passed through.
                keep = True
            if keep:
                yield event


def new_sharded_list_watch(shard: int, total_shards: int, lw: ListerWatcher) -> Any:
    """Return ``lw`` filtered to one shard, or ``lw`` itself when not sharding."""
    if shard == 0 and total_shards == 1:
        return lw
    return ShardedListWatch(Sharding(shard, total_shards), lw)