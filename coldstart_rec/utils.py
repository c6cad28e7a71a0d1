from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml


def setup_logging(level: int | str = "INFO") -> None:
    """Configure stdlib logging with a consistent, project-wide format."""
    root_logger = logging.getLogger()
    if root_logger.handlers:
        # Avoid duplicate handlers if called multiple times (e.g., notebooks + CLI).
        root_logger.setLevel(level)
        return

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def load_config(config_path: Path) -> dict[str, Any]:
    """Read the project YAML config; it must be a mapping."""
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    config = yaml.safe_load(config_path.read_text())
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Expected config YAML to be a mapping, got: {type(config)}")
    return config


def config_section(config: dict[str, Any], name: str) -> dict[str, Any]:
    """Return `config[name]` when it is a mapping, else an empty dict."""
    section = config.get(name, {})
    return section if isinstance(section, dict) else {}
