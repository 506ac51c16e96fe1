"""Local-first agent memory with a distributed lucid context fallback."""

__version__ = "0.1.0"
