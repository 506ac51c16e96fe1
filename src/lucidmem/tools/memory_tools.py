"""Agent-facing memory tools.

These functions are designed to be exposed as tools to an AI agent,
allowing it to read and write its own memory through any backend.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from lucidmem.memory.base import MemoryCategory, MemoryEntry

if TYPE_CHECKING:
    from lucidmem.memory.base import Memory


def format_entry(entry: MemoryEntry) -> str:
    line = f"- [{entry.category}] {entry.key}: {entry.content}"
    if entry.score is not None:
        line += f" ({entry.score:.2f})"
    return line


def get_memory_tools(memory: Memory) -> dict[str, callable]:
    """Return a dict of tool_name -> async callable for memory operations.

    These can be registered as MCP tools or called directly.
    """

    async def memory_store(key: str, content: str, category: str = "core") -> str:
        """Save a fact under a short key. Reusing a key replaces the old value."""
        await memory.store(key, content, MemoryCategory.parse(category))
        return f"Stored {key} ({category})"

    async def memory_recall(query: str, limit: int = 5) -> str:
        """Search memory for entries relevant to the query, best first."""
        entries = await memory.recall(query, limit)
        if not entries:
            return f"(no memories matching '{query}')"
        return "\n".join(format_entry(e) for e in entries)

    async def memory_get(key: str) -> str:
        """Read one memory by its exact key."""
        entry = await memory.get(key)
        if entry is None:
            return f"(no memory stored under '{key}')"
        return entry.content

    async def memory_forget(key: str) -> str:
        """Delete a memory by key."""
        if await memory.forget(key):
            return f"Forgot {key}"
        return f"(no memory stored under '{key}')"

    return {
        "memory_store": memory_store,
        "memory_recall": memory_recall,
        "memory_get": memory_get,
        "memory_forget": memory_forget,
    }
