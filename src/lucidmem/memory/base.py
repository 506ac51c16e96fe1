"""Memory backend protocol and shared types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable


class CategoryKind(str, Enum):
    CORE = "core"
    DAILY = "daily"
    CONVERSATION = "conversation"
    CUSTOM = "custom"


@dataclass(frozen=True)
class MemoryCategory:
    """Closed set of categories plus a ``custom`` arm carrying a label.

    Build with the constructors (``core()``, ``daily()``, ``conversation()``,
    ``custom(label)``) rather than directly.
    """

    kind: CategoryKind
    label: str = ""

    def __post_init__(self) -> None:
        if self.kind is CategoryKind.CUSTOM and not self.label:
            raise ValueError("custom category requires a label")
        if self.kind is not CategoryKind.CUSTOM and self.label:
            raise ValueError(f"{self.kind.value} category does not take a label")

    @classmethod
    def core(cls) -> MemoryCategory:
        return cls(CategoryKind.CORE)

    @classmethod
    def daily(cls) -> MemoryCategory:
        return cls(CategoryKind.DAILY)

    @classmethod
    def conversation(cls) -> MemoryCategory:
        return cls(CategoryKind.CONVERSATION)

    @classmethod
    def custom(cls, label: str) -> MemoryCategory:
        return cls(CategoryKind.CUSTOM, label.strip().lower())

    @classmethod
    def parse(cls, text: str) -> MemoryCategory:
        """Inverse of ``str()``: builtin names map to their arm, anything else is custom."""
        normalized = text.strip().lower()
        for kind in (CategoryKind.CORE, CategoryKind.DAILY, CategoryKind.CONVERSATION):
            if normalized == kind.value:
                return cls(kind)
        return cls.custom(normalized)

    @property
    def is_custom(self) -> bool:
        return self.kind is CategoryKind.CUSTOM

    def __str__(self) -> str:
        return self.label if self.is_custom else self.kind.value


@dataclass(frozen=True)
class MemoryEntry:
    """A single recalled memory. Immutable; replacement is the store's job."""

    id: str
    key: str
    content: str
    category: MemoryCategory
    timestamp: str
    session_id: str | None = None
    score: float | None = None


@runtime_checkable
class Memory(Protocol):
    """Protocol that all memory backends must implement."""

    @property
    def name(self) -> str: ...

    async def store(
        self,
        key: str,
        content: str,
        category: MemoryCategory,
        session_id: str | None = None,
    ) -> None:
        """Persist ``content`` under ``key``, replacing any previous value."""
        ...

    async def recall(self, query: str, limit: int) -> list[MemoryEntry]:
        """Return up to ``limit`` entries relevant to ``query``, best first."""
        ...

    async def get(self, key: str) -> MemoryEntry | None: ...

    async def list(self, category: MemoryCategory | None = None) -> list[MemoryEntry]: ...

    async def forget(self, key: str) -> bool:
        """Remove ``key``. Returns True if something was removed."""
        ...

    async def count(self) -> int: ...

    async def health_check(self) -> bool:
        """Check if the backend is usable. Returns True if healthy."""
        ...
