"""Lucid context-block protocol: category mapping + parse (no I/O).

The ``lucid context`` command prints free-form text; the useful part is a
bracketed block of bullet lines:

    <lucid-context>
    - [decision] Use token refresh middleware
    - [context] Working in src/auth.rs
    </lucid-context>
"""

from __future__ import annotations

from datetime import datetime

from lucidmem.memory.base import CategoryKind, MemoryCategory, MemoryEntry

CONTEXT_OPEN = "<lucid-context>"
CONTEXT_CLOSE = "</lucid-context>"

SCORE_STEP = 0.05
SCORE_FLOOR = 0.1

_OUTBOUND_TYPES = {
    CategoryKind.CORE: "decision",
    CategoryKind.DAILY: "context",
    CategoryKind.CONVERSATION: "conversation",
    CategoryKind.CUSTOM: "learning",
}


# ── Category mapping ──────────────────────────────────────────


def to_lucid_type(category: MemoryCategory) -> str:
    """Map a local category to the ``--type=`` value lucid stores it under."""
    return _OUTBOUND_TYPES[category.kind]


def to_memory_category(label: str) -> MemoryCategory:
    """Map a bullet label from lucid output back to a local category.

    Lossy on purpose: several lucid types collapse into one category.
    """
    normalized = label.strip().lower()
    if "visual" in normalized:
        return MemoryCategory.custom("visual")
    if normalized in ("decision", "learning", "solution"):
        return MemoryCategory.core()
    if normalized in ("context", "conversation"):
        return MemoryCategory.conversation()
    if normalized == "bug":
        return MemoryCategory.daily()
    if not normalized:
        return MemoryCategory.custom("unlabeled")
    return MemoryCategory.custom(normalized)


# ── Parsing ───────────────────────────────────────────────────


def rank_score(rank: int) -> float:
    """Confidence proxy for presentation order, floored at SCORE_FLOOR."""
    return max(1.0 - rank * SCORE_STEP, SCORE_FLOOR)


def parse_bullet(line: str) -> tuple[str, str] | None:
    """Split ``- [label] content`` into (label, content). None if malformed."""
    if not line.startswith("- ["):
        return None
    label, sep, rest = line[3:].partition("]")
    if not sep:
        return None
    content = rest.strip()
    if not content:
        return None
    return label.strip(), content


def parse_context(raw: str) -> list[MemoryEntry]:
    """Extract ranked entries from ``lucid context`` output.

    Text outside the block and malformed bullets are skipped, so output
    with no block at all yields an empty list.
    """
    entries: list[MemoryEntry] = []
    in_block = False
    now = datetime.now().astimezone().isoformat()

    for line in raw.split("\n"):
        line = line.strip()
        if line == CONTEXT_OPEN:
            in_block = True
            continue
        if line == CONTEXT_CLOSE:
            break
        if not in_block or not line:
            continue

        parsed = parse_bullet(line)
        if parsed is None:
            continue
        label, content = parsed

        rank = len(entries)
        entries.append(
            MemoryEntry(
                id=f"lucid:{rank}",
                key=f"lucid_{rank}",
                content=content,
                category=to_memory_category(label),
                timestamp=now,
                session_id=None,
                score=rank_score(rank),
            )
        )

    return entries
