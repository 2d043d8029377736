import json
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

# User config: loaded from ~/.chart-recipes/config.json (primary)
# or project-root config.json (fallback).
CONFIG_PATH = Path.home() / ".chart-recipes" / "config.json"
_LOCAL_CONFIG_PATH = Path(__file__).resolve().parent / "config.json"
_user_config: dict = {}


def _load_config() -> dict:
    # Project-local config.json as base, user home config overlaid on top
    merged: dict = {}
    for path in (_LOCAL_CONFIG_PATH, CONFIG_PATH):
        if path is not None and path.exists():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    merged.update(json.load(f))
            except (json.JSONDecodeError, OSError):
                pass
    return merged


def get(key: str, default=None):
    """Get a config value by dot-separated key. E.g. get('export.scale', 2)"""
    keys = key.split(".")
    val = _user_config
    for k in keys:
        if isinstance(val, dict):
            val = val.get(k)
        else:
            return default
    return val if val is not None else default


_user_config = _load_config()


# ---- Data directory -----------------------------------------------------------
# Single source of truth for the base data directory (logs, rendered output).
# Priority: CHART_RECIPES_DIR env var > "data_dir" config key > ~/.chart-recipes

_data_dir: Optional[Path] = None


def get_data_dir() -> Path:
    """Return the resolved base data directory.

    Resolution order:
    1. ``CHART_RECIPES_DIR`` environment variable (highest, useful for CI/Docker)
    2. ``"data_dir"`` key in config.json
    3. ``~/.chart-recipes`` (default)
    """
    global _data_dir
    if _data_dir is not None:
        return _data_dir
    env_val = os.environ.get("CHART_RECIPES_DIR")
    if env_val:
        _data_dir = Path(env_val).expanduser().resolve()
    else:
        configured = get("data_dir")
        if configured:
            _data_dir = Path(configured).expanduser().resolve()
        else:
            _data_dir = Path.home() / ".chart-recipes"
    return _data_dir


def _reset_data_dir() -> None:
    """Reset the cached data directory (for testing only)."""
    global _data_dir
    _data_dir = None


def get_output_dir() -> Path:
    """Directory rendered recipes are written to when no path is given.

    ``"output_dir"`` config key if set, else ``<data_dir>/output``.
    """
    configured = get("output_dir")
    if configured:
        return Path(configured).expanduser().resolve()
    return get_data_dir() / "output"


# ---- Rendering defaults -------------------------------------------------------
DEFAULT_PALETTE = get("palette")              # None → built-in golden-ratio palette
DEFAULT_COLORSCALE = get("colorscale", "Viridis")
WEBGL_THRESHOLD = get("webgl_threshold", 100_000)
FIGURE_WIDTH = get("width", 900)
FIGURE_HEIGHT = get("height", 550)
PANEL_HEIGHT = get("panel_height", 300)
THEME = get("theme", "plotly_white")
PLOTLYJS_SOURCE = get("plotlyjs", "cdn")      # passed to write_html(include_plotlyjs=...)
