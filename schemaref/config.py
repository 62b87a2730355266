"""Configuration loading for schemaref (.schemaref.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence

import yaml

from .logging import LOG_LEVELS

CONFIG_FILE_NAME = ".schemaref.yml"

DEFAULT_EXCLUDE_TAGS = ("@format", "@maximum", "@minimum")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ReferenceConfig:
    """Represents the settings defined in .schemaref.yml."""

    root: Path
    out: Path = Path("tmp")
    exclude_internal: bool = True
    exclude_tags: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_TAGS))
    disable_sources: bool = True
    log_level: str = "Error"
    output: Optional[str] = None
    title: Optional[str] = None


def load_config(config_path: Path) -> ReferenceConfig:
    """Load configuration from disk, falling back to defaults when the file is missing."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ReferenceConfig(root=root, out=root / "tmp")

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILE_NAME} must contain a mapping at the root")

    config = ReferenceConfig(root=root, out=root / "tmp")

    out = _as_str(data.get("out"))
    if out:
        config.out = root / out

    exclude_internal = _as_bool(data.get("exclude_internal"))
    if exclude_internal is not None:
        config.exclude_internal = exclude_internal

    if "exclude_tags" in data:
        config.exclude_tags = normalize_tags(_as_str_list(data.get("exclude_tags")))

    disable_sources = _as_bool(data.get("disable_sources"))
    if disable_sources is not None:
        config.disable_sources = disable_sources

    log_level = _as_str(data.get("log_level"))
    if log_level:
        if log_level.strip().lower() not in LOG_LEVELS:
            raise ConfigError(f"Unknown log_level '{log_level}' in {CONFIG_FILE_NAME}")
        config.log_level = log_level

    config.output = _as_str(data.get("output"))
    config.title = _as_str(data.get("title"))
    return config


def normalize_tags(tags: Sequence[str]) -> List[str]:
    """Ensure every tag name carries its leading ``@``; duplicates are dropped."""
    normalized: List[str] = []
    for tag in tags:
        cleaned = tag.strip()
        if not cleaned:
            continue
        if not cleaned.startswith("@"):
            cleaned = "@" + cleaned
        if cleaned not in normalized:
            normalized.append(cleaned)
    return normalized


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILE_NAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "DEFAULT_EXCLUDE_TAGS",
    "ReferenceConfig",
    "load_config",
    "normalize_tags",
]
