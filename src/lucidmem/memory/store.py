"""Markdown-backed local memory store.

Markdown files are the source of truth: one file per key under ``entries/``,
with YAML frontmatter holding the structured fields. An in-memory index
(built once at startup, updated incrementally on writes) avoids repeated
disk scans.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import threading
import uuid
from dataclasses import replace
from datetime import datetime
from pathlib import Path

import frontmatter

from lucidmem.memory.base import MemoryCategory, MemoryEntry

logger = logging.getLogger(__name__)

MAX_VERSIONS = 10


def _now() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


def _as_text(value: object) -> str:
    # YAML may hand back datetimes for hand-edited timestamps
    if isinstance(value, datetime):
        return value.isoformat()
    return "" if value is None else str(value)


class MarkdownMemory:
    """Durable key/content memory kept as markdown files."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self._index: dict[str, dict] = {}  # key -> frontmatter + path
        self._lock = threading.RLock()
        self._ensure_initialized()
        self._build_index()

    @property
    def name(self) -> str:
        return "markdown"

    @property
    def entries_dir(self) -> Path:
        return self.root / "entries"

    # ── Initialization ────────────────────────────────────────

    def _ensure_initialized(self) -> None:
        """Ensure base directories exist. Idempotent."""
        for d in [self.entries_dir, self.root / ".versions"]:
            d.mkdir(parents=True, exist_ok=True)

    # ── In-memory index ───────────────────────────────────────

    def _build_index(self) -> None:
        """Scan entries/ once at startup, build in-memory index."""
        self._index.clear()
        for md_file in self.entries_dir.glob("*.md"):
            meta = self._parse_frontmatter(md_file)
            key = _as_text(meta.get("key"))
            if not key:
                logger.warning("Skipping %s: no key in frontmatter", md_file)
                continue
            self._index[key] = self._index_record(md_file, meta)

    def _index_record(self, path: Path, meta: dict) -> dict:
        return {
            "path": path,
            "id": _as_text(meta.get("id")) or uuid.uuid4().hex,
            "category": _as_text(meta.get("category")) or "core",
            "created": _as_text(meta.get("created")),
            "updated": _as_text(meta.get("updated")),
            "session_id": _as_text(meta.get("session_id")) or None,
        }

    def _parse_frontmatter(self, path: Path) -> dict:
        """Parse YAML frontmatter from a markdown file."""
        try:
            post = frontmatter.load(str(path))
            return dict(post.metadata)
        except Exception:
            return {}

    # ── File naming & paths ───────────────────────────────────

    def _slugify(self, key: str) -> str:
        """Minimal slug: strip illegal chars, spaces to hyphens, keep CJK."""
        slug = re.sub(r'[<>:"/\\|?*@\n\r\t]', "", key)
        slug = slug.strip().replace(" ", "-")
        return slug or "unnamed"

    def _resolve_path(self, key: str) -> Path:
        """Existing file for this key, or a fresh non-colliding path."""
        record = self._index.get(key)
        if record:
            return record["path"]

        slug = self._slugify(key)
        path = self.entries_dir / f"{slug}.md"
        counter = 2
        while path.exists():
            path = self.entries_dir / f"{slug}-{counter}.md"
            counter += 1
        return path

    def _backup(self, path: Path) -> None:
        """Backup to .versions/, keep at most MAX_VERSIONS per entry."""
        if not path.exists():
            return
        versions_dir = self.root / ".versions"
        versions_dir.mkdir(exist_ok=True)
        ts = datetime.now().strftime("%Y%m%dT%H%M%S%f")
        (versions_dir / f"{path.stem}@{ts}.md").write_text(
            path.read_text(encoding="utf-8"), encoding="utf-8"
        )
        old = sorted(versions_dir.glob(f"{path.stem}@*.md"))
        for f in old[:-MAX_VERSIONS]:
            f.unlink()
            logger.debug("Dropped old version %s", f.name)

    # ── Synchronous operations (run in a worker thread) ───────

    def _store(
        self,
        key: str,
        content: str,
        category: MemoryCategory,
        session_id: str | None,
    ) -> None:
        if not key.strip():
            raise ValueError("memory key must not be empty")
        if not content.strip():
            raise ValueError("memory content must not be empty")

        with self._lock:
            path = self._resolve_path(key)
            existing = self._index.get(key)
            ts = _now()
            metadata = {
                "id": existing["id"] if existing else uuid.uuid4().hex,
                "key": key,
                "category": str(category),
                "created": existing["created"] if existing else ts,
                "updated": ts,
                "session_id": session_id,
            }
            if existing:
                self._backup(path)

            post = frontmatter.Post(content, **metadata)
            path.write_text(frontmatter.dumps(post) + "\n", encoding="utf-8")
            self._index[key] = self._index_record(path, metadata)

        logger.info("%s memory: %s (%s)", "Updated" if existing else "Stored", key, category)

    def _load(self, key: str) -> MemoryEntry | None:
        record = self._index.get(key)
        if not record:
            return None
        try:
            post = frontmatter.load(str(record["path"]))
        except FileNotFoundError:
            # removed behind our back
            self._index.pop(key, None)
            return None
        return MemoryEntry(
            id=record["id"],
            key=key,
            content=post.content.strip(),
            category=MemoryCategory.parse(record["category"]),
            timestamp=record["updated"] or record["created"],
            session_id=record["session_id"],
        )

    def _recall(self, query: str, limit: int) -> list[MemoryEntry]:
        tokens = query.lower().split()
        if not tokens or limit <= 0:
            return []

        scored: list[tuple[float, str, MemoryEntry]] = []
        with self._lock:
            for key in list(self._index):
                entry = self._load(key)
                if entry is None:
                    continue
                haystack = f"{entry.key}\n{entry.content}".lower()
                hits = sum(1 for token in tokens if token in haystack)
                if not hits:
                    continue
                score = hits / len(tokens)
                scored.append((score, entry.timestamp, entry))

        scored.sort(key=lambda item: (item[0], item[1]), reverse=True)
        return [replace(entry, score=score) for score, _, entry in scored[:limit]]

    def _get(self, key: str) -> MemoryEntry | None:
        with self._lock:
            return self._load(key)

    def _list(self, category: MemoryCategory | None) -> list[MemoryEntry]:
        with self._lock:
            entries = [self._load(key) for key in list(self._index)]
        result = [e for e in entries if e and (category is None or e.category == category)]
        result.sort(key=lambda e: e.timestamp, reverse=True)
        return result

    def _forget(self, key: str) -> bool:
        with self._lock:
            record = self._index.pop(key, None)
            if not record:
                logger.debug("Memory %s not found for deletion", key)
                return False
            path = record["path"]
            self._backup(path)
            path.unlink(missing_ok=True)
        logger.info("Forgot memory: %s", key)
        return True

    # ── Memory protocol ───────────────────────────────────────

    async def store(
        self,
        key: str,
        content: str,
        category: MemoryCategory,
        session_id: str | None = None,
    ) -> None:
        await asyncio.to_thread(self._store, key, content, category, session_id)

    async def recall(self, query: str, limit: int) -> list[MemoryEntry]:
        return await asyncio.to_thread(self._recall, query, limit)

    async def get(self, key: str) -> MemoryEntry | None:
        return await asyncio.to_thread(self._get, key)

    async def list(self, category: MemoryCategory | None = None) -> list[MemoryEntry]:
        return await asyncio.to_thread(self._list, category)

    async def forget(self, key: str) -> bool:
        return await asyncio.to_thread(self._forget, key)

    async def count(self) -> int:
        with self._lock:
            return len(self._index)

    async def health_check(self) -> bool:
        return self.entries_dir.is_dir() and os.access(self.entries_dir, os.W_OK)
