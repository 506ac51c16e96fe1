"""Local-first recall with a distributed lucid context fallback.

Local results are authoritative. When a local recall comes back thin
(fewer hits than ``local_hit_threshold``), the ``lucid`` binary is asked
for shared context and its bullets are merged in after the local hits.
Remote trouble never reaches the caller: failures put the remote path
into a short cooldown and recall degrades to local-only results.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from pathlib import Path

from lucidmem.lucid import process
from lucidmem.lucid.process import LucidError
from lucidmem.lucid.protocol import parse_context, to_lucid_type
from lucidmem.memory.base import Memory, MemoryCategory, MemoryEntry
from lucidmem.memory.cooldown import FailureCooldown
from lucidmem.memory.merge import merge_results

logger = logging.getLogger(__name__)

DEFAULT_BUDGET = 200
DEFAULT_LOCAL_HIT_THRESHOLD = 1
DEFAULT_SYNC_TIMEOUT = 0.15
DEFAULT_RECALL_TIMEOUT = 0.8
DEFAULT_FAILURE_COOLDOWN = 10.0


class LucidMemory:
    """Memory backend wrapping a local store with the lucid context tool."""

    def __init__(
        self,
        workspace_dir: Path,
        local: Memory,
        *,
        lucid_cmd: str = "lucid",
        budget: int = DEFAULT_BUDGET,
        local_hit_threshold: int = DEFAULT_LOCAL_HIT_THRESHOLD,
        sync_timeout: float = DEFAULT_SYNC_TIMEOUT,
        recall_timeout: float = DEFAULT_RECALL_TIMEOUT,
        failure_cooldown: float = DEFAULT_FAILURE_COOLDOWN,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.workspace_dir = workspace_dir
        self.local = local
        self.lucid_cmd = lucid_cmd
        self.budget = budget
        self.local_hit_threshold = max(local_hit_threshold, 0)
        self.sync_timeout = sync_timeout
        self.recall_timeout = recall_timeout
        self.cooldown = FailureCooldown(failure_cooldown, clock=clock or time.monotonic)
        self._sync_tasks: set[asyncio.Task] = set()

    @property
    def name(self) -> str:
        return "lucid"

    # ── Remote helpers ────────────────────────────────────────

    def _project_arg(self) -> str:
        return f"--project={self.workspace_dir}"

    async def _run(self, args: list[str], timeout: float) -> str:
        return await process.run_lucid_command(self.lucid_cmd, args, timeout)

    async def _sync_to_lucid(self, key: str, content: str, category: MemoryCategory) -> None:
        args = [
            "store",
            f"{key}: {content}",
            f"--type={to_lucid_type(category)}",
            self._project_arg(),
        ]
        try:
            await self._run(args, self.sync_timeout)
        except LucidError as e:
            # Sync is best-effort and never touches the cooldown
            logger.debug("Lucid sync of %s dropped: %s", key, e)

    async def _recall_from_lucid(self, query: str) -> list[MemoryEntry]:
        args = [
            "context",
            query,
            f"--budget={self.budget}",
            self._project_arg(),
        ]
        output = await self._run(args, self.recall_timeout)
        return parse_context(output)

    # ── Memory protocol ───────────────────────────────────────

    async def store(
        self,
        key: str,
        content: str,
        category: MemoryCategory,
        session_id: str | None = None,
    ) -> None:
        """Write locally (errors propagate), then sync to lucid in the background."""
        await self.local.store(key, content, category, session_id)

        task = asyncio.create_task(self._sync_to_lucid(key, content, category))
        self._sync_tasks.add(task)
        task.add_done_callback(self._sync_tasks.discard)

    async def recall(self, query: str, limit: int) -> list[MemoryEntry]:
        local_results = await self.local.recall(query, limit)
        if limit <= 0:
            return []
        if len(local_results) >= limit or len(local_results) >= self.local_hit_threshold:
            return local_results

        if self.cooldown.in_cooldown():
            return local_results

        try:
            lucid_results = await self._recall_from_lucid(query)
        except LucidError as e:
            self.cooldown.mark_failure_now()
            logger.debug(
                "Lucid context unavailable (command=%s): %s; using local results",
                self.lucid_cmd,
                e,
            )
            return local_results

        # Ran fine, even if it found nothing
        self.cooldown.clear_failure()
        if not lucid_results:
            return local_results
        return merge_results(local_results, lucid_results, limit)

    async def get(self, key: str) -> MemoryEntry | None:
        return await self.local.get(key)

    async def list(self, category: MemoryCategory | None = None) -> list[MemoryEntry]:
        return await self.local.list(category)

    async def forget(self, key: str) -> bool:
        return await self.local.forget(key)

    async def count(self) -> int:
        return await self.local.count()

    async def health_check(self) -> bool:
        return await self.local.health_check()

    # ── Lifecycle ─────────────────────────────────────────────

    async def close(self) -> None:
        """Wait for in-flight background syncs to finish."""
        if self._sync_tasks:
            await asyncio.gather(*self._sync_tasks, return_exceptions=True)
