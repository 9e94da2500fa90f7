"""Configuration management for mediameta.

Supports loading configuration from:
1. Environment variables (MEDIAMETA_*)
2. Config file (~/.mediameta/config.yaml)
3. Default values

Example config file (~/.mediameta/config.yaml):
    limits:
      max_depth: 16
      max_boxes: 100000
      max_tracks: 256
    extraction:
      timeout_seconds: 30
    logging:
      level: "INFO"
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# Config file search locations (in priority order)
CONFIG_LOCATIONS = [
    Path.home() / ".mediameta" / "config.yaml",
    Path.home() / ".config" / "mediameta" / "config.yaml",
    Path(".mediameta.yaml"),
]


@dataclass(frozen=True)
class ParseLimits:
    """Upper bounds applied while walking untrusted containers."""

    max_depth: int = 16
    max_boxes: int = 100_000
    max_tracks: int = 256
    max_sample_entries: int = 64


@dataclass
class ExtractionConfig:
    """Extraction call configuration."""

    timeout_seconds: float = 30.0
    exif_details: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration (applied by the CLI only)."""

    level: str = "WARNING"


@dataclass
class MediametaConfig:
    """Main configuration for mediameta."""

    limits: ParseLimits = field(default_factory=ParseLimits)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _load_yaml_config() -> dict[str, Any]:
    """Load configuration from the first YAML file found."""
    for config_path in CONFIG_LOCATIONS:
        if config_path.exists():
            try:
                with open(config_path) as f:
                    data = yaml.safe_load(f)
                    return data if isinstance(data, dict) else {}
            except (OSError, yaml.YAMLError):
                continue
    return {}


def _get_env(key: str, default: Any = None) -> Any:
    """Get environment variable with MEDIAMETA_ prefix."""
    return os.environ.get(f"MEDIAMETA_{key}", default)


def _parse_bool(value: str | None) -> bool | None:
    """Parse boolean from string."""
    if value is None:
        return None
    return value.lower() in ("true", "1", "yes", "on")


def load_config() -> MediametaConfig:
    """Load configuration from file and environment variables.

    Priority (highest first):
    1. Environment variables (MEDIAMETA_*)
    2. Config file (~/.mediameta/config.yaml)
    3. Default values
    """
    file_config = _load_yaml_config()
    defaults = ParseLimits()

    # Parse limits
    limits_config = file_config.get("limits") or {}
    limits = ParseLimits(
        max_depth=int(_get_env("MAX_DEPTH") or limits_config.get("max_depth", defaults.max_depth)),
        max_boxes=int(_get_env("MAX_BOXES") or limits_config.get("max_boxes", defaults.max_boxes)),
        max_tracks=int(
            _get_env("MAX_TRACKS") or limits_config.get("max_tracks", defaults.max_tracks)
        ),
        max_sample_entries=int(
            _get_env("MAX_SAMPLE_ENTRIES")
            or limits_config.get("max_sample_entries", defaults.max_sample_entries)
        ),
    )

    # Extraction config
    extraction_config = file_config.get("extraction") or {}
    extraction = ExtractionConfig(
        timeout_seconds=float(
            _get_env("TIMEOUT") or extraction_config.get("timeout_seconds", 30.0)
        ),
        exif_details=(
            bool(_parse_bool(_get_env("EXIF_DETAILS")))
            if _get_env("EXIF_DETAILS")
            else bool(extraction_config.get("exif_details", False))
        ),
    )

    # Logging config
    logging_config = file_config.get("logging") or {}
    log = LoggingConfig(
        level=str(_get_env("LOG_LEVEL") or logging_config.get("level", "WARNING")).upper(),
    )

    return MediametaConfig(
        limits=limits,
        extraction=extraction,
        logging=log,
    )


# Global config instance (lazy loaded)
_config: MediametaConfig | None = None


def get_config() -> MediametaConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
