"""Merge local and remote recall results."""

from __future__ import annotations

from collections.abc import Iterable
from itertools import chain

from lucidmem.memory.base import MemoryEntry


def _signature(entry: MemoryEntry) -> str:
    # id and score are not part of an entry's identity
    return f"{entry.key.lower()}\0{entry.content.lower()}"


def merge_results(
    primary: Iterable[MemoryEntry],
    secondary: Iterable[MemoryEntry],
    limit: int,
) -> list[MemoryEntry]:
    """Concatenate primary then secondary, drop duplicates, cap at ``limit``.

    First occurrence wins, so primary entries always outrank secondary ones.
    """
    if limit <= 0:
        return []

    merged: list[MemoryEntry] = []
    seen: set[str] = set()
    for entry in chain(primary, secondary):
        signature = _signature(entry)
        if signature in seen:
            continue
        seen.add(signature)
        merged.append(entry)
        if len(merged) >= limit:
            break
    return merged
