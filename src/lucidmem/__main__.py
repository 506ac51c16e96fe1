"""Entry point: python -m lucidmem <command> [args]

- store <key> <content> [category]
- recall <query> [limit]
- get <key>
- list [category]
- forget <key>
- count
- health
"""

from __future__ import annotations

import asyncio
import logging
import sys

from lucidmem.config import load_config
from lucidmem.memory.base import Memory, MemoryCategory
from lucidmem.memory.factory import create_memory
from lucidmem.tools.memory_tools import format_entry

USAGE = """\
Usage: python -m lucidmem <command> [args]
  store <key> <content> [category]  — Save a memory (default category: core)
  recall <query> [limit]            — Search memories (default limit: 5)
  get <key>                         — Show one memory
  list [category]                   — List memories, newest first
  forget <key>                      — Delete a memory
  count                             — Number of stored memories
  health                            — Check the backend is usable"""


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


async def _dispatch(memory: Memory, cmd: str, args: list[str]) -> int:
    if cmd == "store" and len(args) >= 2:
        category = MemoryCategory.parse(args[2]) if len(args) > 2 else MemoryCategory.core()
        await memory.store(args[0], args[1], category)
        print(f"Stored {args[0]} ({category})")
    elif cmd == "recall" and args:
        limit = int(args[1]) if len(args) > 1 else 5
        for entry in await memory.recall(args[0], limit):
            print(format_entry(entry))
    elif cmd == "get" and args:
        entry = await memory.get(args[0])
        if entry is None:
            print(f"Not found: {args[0]}")
            return 1
        print(entry.content)
    elif cmd == "list":
        category = MemoryCategory.parse(args[0]) if args else None
        for entry in await memory.list(category):
            print(format_entry(entry))
    elif cmd == "forget" and args:
        removed = await memory.forget(args[0])
        print(f"Forgot {args[0]}" if removed else f"Not found: {args[0]}")
        return 0 if removed else 1
    elif cmd == "count":
        print(await memory.count())
    elif cmd == "health":
        healthy = await memory.health_check()
        print("ok" if healthy else "unhealthy")
        return 0 if healthy else 1
    else:
        print(USAGE)
        return 1
    return 0


async def _run(cmd: str, args: list[str]) -> int:
    config = load_config()
    _setup_logging(config.log_level)
    memory = create_memory(config.memory, config.lucid)
    try:
        return await _dispatch(memory, cmd, args)
    finally:
        # Let background lucid syncs finish before the loop goes away
        close = getattr(memory, "close", None)
        if close and callable(close):
            await close()


def main() -> None:
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    try:
        code = asyncio.run(_run(sys.argv[1], sys.argv[2:]))
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
