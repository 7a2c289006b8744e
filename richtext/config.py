"""Configuration loader: reads config.yaml and validates it with Pydantic.

One file describes one editor session: what the renderer is seeded with on
load, how the grid lays out images, and how long queries may wait.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, field_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"
CONFIG_ENV_VAR = "RICHTEXT_CONFIG"


class EditorConfig(BaseModel):
    """Top-level editor configuration."""

    # Seeded into the renderer once it reports ZSS_INITIALIZED
    initial_title_html: str = ""
    initial_content_html: str = ""
    title_placeholder: str | None = None
    content_placeholder: str | None = None
    custom_css: str | None = None
    hidden_title: bool = False
    enable_on_change: bool = False

    # Sent on every renderer load
    platform: Literal["ios", "android", "web"] = "web"
    footer_height: int | None = None
    editor_height: int | None = None

    # Image grid
    grid_width: int = 0
    image_cdn_prefix: str = "cdn.hk01.com/image/"

    # Seconds a query waits for its response; None waits forever
    query_timeout: float | None = 10.0

    # Auth & CORS
    api_key: str | None = None
    allowed_origins: list[str] = ["*"]

    @field_validator("grid_width")
    @classmethod
    def grid_width_not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("grid_width must be >= 0")
        return v

    @field_validator("query_timeout")
    @classmethod
    def timeout_positive(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("query_timeout must be positive (or null to disable)")
        return v


# ---------------------------------------------------------------------------
# Module-level config cache
# ---------------------------------------------------------------------------

_config: EditorConfig | None = None
_config_path: str = DEFAULT_CONFIG_PATH


def default_config_path() -> str:
    return os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)


def load_config(path: str | None = None) -> EditorConfig:
    """Read the config file from disk, validate, and cache."""
    global _config, _config_path
    _config_path = path or default_config_path()

    config_file = Path(_config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_file.resolve()}")

    raw = yaml.safe_load(config_file.read_text()) or {}
    _config = EditorConfig(**raw)

    logger.info(
        f"Loaded config: platform={_config.platform}, "
        f"grid_width={_config.grid_width}, query_timeout={_config.query_timeout}"
    )
    return _config


def get_config() -> EditorConfig:
    """Return cached config. Raises if not yet loaded."""
    if _config is None:
        raise RuntimeError("Config not loaded, call load_config() first")
    return _config


def reload_config() -> EditorConfig:
    """Re-read config from disk. Called by /reload endpoint."""
    logger.info(f"Reloading config from {_config_path}")
    return load_config(_config_path)
