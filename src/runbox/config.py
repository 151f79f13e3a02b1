"""Configuration management for runbox."""

from __future__ import annotations

import json
import os
import uuid
from dataclasses import asdict, dataclass
from pathlib import Path

from rich.console import Console

from .constants import CONTAINER_NAME_PREFIX, DEFAULT_BACKEND

console = Console(stderr=True)

BACKEND_ENV_VAR = "RUNBOX_BACKEND"


@dataclass
class Config:
    """runbox configuration model."""

    version: str = "1.0.0"

    # Container backend used when --backend is not given
    backend: str = DEFAULT_BACKEND


def get_config_dir() -> Path:
    """Get the runbox configuration directory."""
    return Path.home() / ".runbox"


def get_config_path() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def load_config() -> Config:
    """Load configuration from file, or return defaults."""
    config_path = get_config_path()

    if config_path.exists():
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
            return Config(**data)
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            console.print(f"[yellow]Warning: Failed to load config ({e}), using defaults[/yellow]")

    return Config()


def save_config(config: Config) -> None:
    """Save configuration to file."""
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    config_path = get_config_path()
    config_path.write_text(
        json.dumps(asdict(config), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )


def resolve_backend_name(explicit: str | None = None) -> str:
    """Pick the active backend: explicit option, environment, config file."""
    if explicit:
        return explicit
    from_env = os.environ.get(BACKEND_ENV_VAR, "").strip()
    if from_env:
        return from_env
    return load_config().backend or DEFAULT_BACKEND


def get_container_name() -> str:
    """Generate a container name for runs without --name."""
    return f"{CONTAINER_NAME_PREFIX}-{uuid.uuid4().hex[:12]}"
