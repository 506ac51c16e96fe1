"""Configuration loading from environment variables and lucidmem.toml."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

logger = logging.getLogger(__name__)

_DEFAULT_MEMORY_DIR = Path.home() / ".lucidmem" / "memory"
_CONFIG_FILENAME = "lucidmem.toml"


@dataclass
class LucidConfig:
    """Distributed context tool configuration."""

    command: str = "lucid"
    local_hit_threshold: int = 1
    budget: int = 200
    sync_timeout: float = 0.15
    recall_timeout: float = 0.8
    failure_cooldown: float = 10.0


@dataclass
class MemoryConfig:
    """Memory backend selection and storage locations."""

    backend: str = "lucid"
    memory_dir: Path = _DEFAULT_MEMORY_DIR
    workspace_dir: Path = field(default_factory=Path.cwd)


@dataclass
class LucidMemConfig:
    """Top-level configuration."""

    memory: MemoryConfig = field(default_factory=MemoryConfig)
    lucid: LucidConfig = field(default_factory=LucidConfig)
    log_level: str = "INFO"


def _read_env_int(name: str, default: int, minimum: int) -> int:
    """Integer env var; unparseable values fall back to default, small ones clamp up."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return default
    return max(value, minimum)


def load_config(config_path: Path | None = None) -> LucidMemConfig:
    """Load configuration from environment variables and optional lucidmem.toml.

    Priority: environment variables > lucidmem.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.lucidmem/
        for candidate in [
            Path.cwd() / _CONFIG_FILENAME,
            Path.home() / ".lucidmem" / _CONFIG_FILENAME,
        ]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    memory_data = file_data.get("memory", {})
    lucid_data = file_data.get("lucid", {})

    workspace = os.getenv("LUCIDMEM_WORKSPACE", memory_data.get("workspace_dir"))

    config = LucidMemConfig(
        memory=MemoryConfig(
            backend=os.getenv("LUCIDMEM_BACKEND", memory_data.get("backend", "lucid")),
            memory_dir=Path(
                os.getenv(
                    "LUCIDMEM_MEMORY_DIR",
                    memory_data.get("memory_dir", str(_DEFAULT_MEMORY_DIR)),
                )
            ).expanduser(),
            workspace_dir=Path(workspace).expanduser() if workspace else Path.cwd(),
        ),
        lucid=LucidConfig(
            command=os.getenv("LUCIDMEM_LUCID_CMD", lucid_data.get("command", "lucid")),
            local_hit_threshold=_read_env_int(
                "LUCIDMEM_LUCID_THRESHOLD",
                max(int(lucid_data.get("local_hit_threshold", 1)), 0),
                0,
            ),
            budget=int(lucid_data.get("budget", 200)),
            sync_timeout=float(lucid_data.get("sync_timeout", 0.15)),
            recall_timeout=float(lucid_data.get("recall_timeout", 0.8)),
            failure_cooldown=float(lucid_data.get("failure_cooldown", 10.0)),
        ),
        log_level=os.getenv("LUCIDMEM_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
    return config
