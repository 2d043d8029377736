"""Rendering backend: chart builder, scales, style operations and export."""

from .plotly_renderer import (
    ChartBuilder,
    RenderResult,
    build_figure_from_spec,
)
from .scales import ColorState, resolve_palette
from .operations import OperationRegistry, get_default_registry
from .registry import LAYERS, get_layer, validate_layer, render_layer_catalog
from .export import EXPORT_FORMATS, click_to_open_url_script, export_figure

__all__ = [
    "ChartBuilder",
    "ColorState",
    "RenderResult",
    "build_figure_from_spec",
    "resolve_palette",
    "OperationRegistry",
    "get_default_registry",
    "LAYERS",
    "get_layer",
    "validate_layer",
    "render_layer_catalog",
    "EXPORT_FORMATS",
    "click_to_open_url_script",
    "export_figure",
]
