"""Build the configured memory backend."""

from __future__ import annotations

import logging

from lucidmem.config import LucidConfig, MemoryConfig
from lucidmem.memory.base import Memory
from lucidmem.memory.lucid import LucidMemory
from lucidmem.memory.store import MarkdownMemory

logger = logging.getLogger(__name__)


def create_memory(memory: MemoryConfig, lucid: LucidConfig | None = None) -> Memory:
    """Return the backend named by ``memory.backend``."""
    local = MarkdownMemory(memory.memory_dir)

    if memory.backend == "markdown":
        return local
    if memory.backend == "lucid":
        lucid = lucid or LucidConfig()
        logger.info(
            "Lucid memory enabled (command=%s, threshold=%d)",
            lucid.command,
            lucid.local_hit_threshold,
        )
        return LucidMemory(
            memory.workspace_dir,
            local,
            lucid_cmd=lucid.command,
            budget=lucid.budget,
            local_hit_threshold=lucid.local_hit_threshold,
            sync_timeout=lucid.sync_timeout,
            recall_timeout=lucid.recall_timeout,
            failure_cooldown=lucid.failure_cooldown,
        )
    raise ValueError(f"Unknown memory backend: {memory.backend}")
