"""
Plotly-based chart builder.

A chart is a chart-level aesthetic mapping plus an ordered list of layers,
in the "plot, then add layers" style:

    result = (
        ChartBuilder(mpg, x="displ", y="hwy", color="class")
        .add_markers()
        .apply("set_title", text="Engine size vs highway mileage")
        .build()
    )
    result.figure.show()

ChartBuilder only records a spec dict. build_figure_from_spec() is the
stateless entry point that turns a spec into a fresh go.Figure:

- ``_meta``: chart-level aesthetics (x, y, color, ...), an optional ``facet``
  column and scale overrides (colors, symbols, sizes, linetypes, colorscale)
- ``layers``: ordered layer dicts, each with a ``type`` from the layer registry
- ``layout``: keyword arguments passed to ``fig.update_layout``
- ``operations``: ordered style operations applied by the operation registry
- ``post_script``: optional JavaScript embedded by the HTML export
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
import pandas as pd
import plotly.colors as pc
import plotly.graph_objects as go
from plotly.subplots import make_subplots

import config
from chart_logging import LOGGER_NAME, tagged
from data_ops.transforms import check_columns, close_polygons, ribbon_path, segment_frame
from rendering.export import click_to_open_url_script
from rendering.operations import _deep_merge, get_default_registry
from rendering.registry import get_layer, validate_layer
from rendering.scales import (
    ColorState,
    ContinuousColorScale,
    DiscreteScale,
    SizeScale,
    is_discrete,
    level_order,
)

logger = logging.getLogger(LOGGER_NAME)

AESTHETICS = ("x", "y", "color", "symbol", "size", "linetype", "text", "customdata", "group")
SCALE_OVERRIDES = ("colors", "symbols", "sizes", "linetypes", "colorscale")
_META_KEYS = frozenset(AESTHETICS + SCALE_OVERRIDES + ("facet",))

# Layer parameters that name columns but are never inherited from the chart
_LAYER_COLUMNS = ("xend", "yend", "ymin", "ymax")

_DEFAULT_LAYOUT = dict(
    paper_bgcolor="white",
    plot_bgcolor="white",
    font_color="#2a3f5f",
    autosize=False,
)

_LEGEND_MAX_LINE = 30  # max chars per line in legend
_MAX_MARKER_PX = 40    # rendered diameter of the largest mapped size


# ---------------------------------------------------------------------------
# RenderResult: return type of build_figure_from_spec
# ---------------------------------------------------------------------------

class RenderResult:
    """Result of a stateless build_figure_from_spec() call."""

    __slots__ = ("figure", "color_state", "trace_labels", "trace_panels",
                 "panel_count", "post_script")

    def __init__(
        self,
        figure: go.Figure,
        color_state: ColorState,
        trace_labels: list[str],
        trace_panels: list[tuple[int, int]],
        panel_count: int,
        post_script: str | None = None,
    ):
        self.figure = figure
        self.color_state = color_state
        self.trace_labels = trace_labels
        self.trace_panels = trace_panels
        self.panel_count = panel_count
        self.post_script = post_script


# ---------------------------------------------------------------------------
# Small helpers
# ---------------------------------------------------------------------------

def _scatter_cls(n_points: int, webgl: bool | None = None):
    """Return go.Scattergl for large datasets (or when forced), go.Scatter otherwise."""
    if webgl is None:
        webgl = n_points > config.WEBGL_THRESHOLD
    return go.Scattergl if webgl else go.Scatter


def _wrap_display_name(name: str, max_line: int = _LEGEND_MAX_LINE) -> str:
    """Wrap a long display name with <br> for multi-line Plotly legends."""
    if len(name) <= max_line:
        return name
    words = name.split()
    lines: list[str] = []
    current = ""
    for word in words:
        candidate = f"{current} {word}".strip()
        if len(candidate) > max_line and current:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return "<br>".join(lines)


def _is_missing(value: Any) -> bool:
    if value is None or value is pd.NaT or value is pd.NA:
        return True
    return isinstance(value, float) and np.isnan(value)


def _values(series: pd.Series) -> list:
    """Column values as a plain list, missing values as None."""
    if isinstance(series.dtype, pd.CategoricalDtype):
        series = series.astype(object)
    return [None if _is_missing(v) else v for v in series.tolist()]


def _join_pieces(pieces: list[list]) -> list:
    """Concatenate point lists with a None between pieces (Plotly's gap marker)."""
    out: list = []
    for i, piece in enumerate(pieces):
        if i:
            out.append(None)
        out.extend(piece)
    return out


def _translucent(color: Any, alpha: float) -> Any:
    """rgba() version of a hex or rgb() color; other colors pass through."""
    if not isinstance(color, str):
        return color
    if color.startswith("#"):
        r, g, b = pc.hex_to_rgb(color)
    elif color.startswith("rgb("):
        r, g, b = pc.unlabel_rgb(color)
    else:
        return color
    return f"rgba({int(r)}, {int(g)}, {int(b)}, {alpha})"


# ---------------------------------------------------------------------------
# Layer resolution and scale training
# ---------------------------------------------------------------------------

class _Layer:
    """A layer with its data and effective aesthetic mapping resolved."""

    def __init__(self, kind: str, data: pd.DataFrame, mapping: dict, params: dict):
        self.kind = kind
        self.data = data
        self.mapping = mapping
        self.params = params
        self.split_keys: list[tuple[str, str]] = []

    def require(self, *aesthetics: str) -> None:
        missing = [a for a in aesthetics if a not in self.mapping]
        if missing:
            raise ValueError(
                f"{self.kind} layer needs a column for: {', '.join(missing)}"
            )


def _layer_data(source, data: pd.DataFrame | None, tables: dict | None) -> pd.DataFrame:
    if source is None:
        df = data
    elif isinstance(source, pd.DataFrame):
        df = source
    elif isinstance(source, str):
        if not tables or source not in tables:
            raise KeyError(f"Table '{source}' not found")
        df = tables[source]
    else:
        raise ValueError(f"Layer data must be a DataFrame or a table label, got {type(source).__name__}")
    if df is None:
        raise ValueError("Layer has no data: pass a DataFrame to the chart or to the layer")
    return df


def _resolve_layer(
    index: int,
    layer: dict,
    meta: dict,
    data: pd.DataFrame | None,
    tables: dict | None,
) -> _Layer:
    params = dict(layer)
    kind = params.pop("type", None)
    if kind is None:
        raise ValueError(f"Layer {index + 1} has no 'type'")
    source = params.pop("data", None)

    errors = validate_layer(kind, params)
    if errors:
        raise ValueError(f"Layer {index + 1} ({kind}): " + "; ".join(errors))

    df = _layer_data(source, data, tables)
    known = {p["name"] for p in get_layer(kind)["parameters"]}

    mapping: dict[str, str] = {}
    if params.pop("inherit", True):
        mapping.update({k: meta[k] for k in AESTHETICS if k in known and meta.get(k) is not None})
    for key in AESTHETICS + _LAYER_COLUMNS:
        if key in params:
            mapping[key] = params.pop(key)
    mapping = {k: v for k, v in mapping.items() if v is not None}

    error_columns: list[str] = []
    for key in ("error_x", "error_y"):
        spec = params.get(key)
        if spec is None:
            continue
        cols = [spec] if isinstance(spec, str) else list(spec)
        if len(cols) not in (1, 2):
            raise ValueError(f"{key} must be one column or [lower, upper] columns")
        error_columns.extend(cols)

    check_columns(df, list(mapping.values()) + error_columns)
    return _Layer(kind, df, mapping, params)


def _train_scales(meta: dict, layers: list[_Layer]) -> dict:
    """Build the chart's scales and train them on every layer."""
    scales = {
        "color": DiscreteScale("color", meta.get("colors")),
        "symbol": DiscreteScale("symbol", meta.get("symbols")),
        "linetype": DiscreteScale("linetype", meta.get("linetypes")),
        "continuous": ContinuousColorScale(meta.get("colorscale")),
        "size": SizeScale(meta.get("sizes")),
    }
    for layer in layers:
        df, m = layer.data, layer.mapping
        color = m.get("color")
        if color is not None:
            if is_discrete(df[color]):
                scales["color"].train(df[color])
                layer.split_keys.append(("color", color))
            else:
                if layer.kind != "markers":
                    raise ValueError(
                        f"Numeric color column '{color}' needs a markers layer; "
                        f"cast it to a category for discrete colors on {layer.kind}"
                    )
                scales["continuous"].train(df[color])
                if scales["continuous"].title is None:
                    scales["continuous"].title = color
        for aes in ("symbol", "linetype"):
            if aes in m:
                scales[aes].train(df[m[aes]])
                layer.split_keys.append((aes, m[aes]))
        if "size" in m:
            scales["size"].train(df[m["size"]])
    return scales


def _facet_levels(facet: str | None, layers: list[_Layer]) -> list:
    if facet is None:
        return []
    levels: list = []
    found = False
    for layer in layers:
        if facet in layer.data.columns:
            found = True
            for lvl in level_order(layer.data[facet]):
                if lvl not in levels:
                    levels.append(lvl)
    if not found:
        raise ValueError(f"Unknown column(s) for facet: {facet}")
    return levels


def _facet_pieces(layer: _Layer, facet: str | None, levels: list):
    """Yield (row, DataFrame) per panel. Layers without the facet column repeat in every panel."""
    if facet is None:
        yield 1, layer.data
        return
    for row, level in enumerate(levels, start=1):
        if facet in layer.data.columns:
            yield row, layer.data[layer.data[facet] == level]
        else:
            yield row, layer.data


def _split(df: pd.DataFrame, keys: list[tuple[str, str]], scales: dict) -> list[tuple[dict, str, pd.DataFrame]]:
    """Split *df* into one piece per combination of discrete levels, in level order.

    Returns (aesthetic -> level, trace label, rows) tuples. Rows with a
    missing level are dropped.
    """
    if not keys:
        return [({}, "", df)]
    columns = list(dict.fromkeys(col for _, col in keys))
    pieces = []
    for levels, rows in df.groupby(columns, observed=True, sort=False):
        if not isinstance(levels, tuple):
            levels = (levels,)
        by_column = dict(zip(columns, levels))
        combo = {aes: by_column[col] for aes, col in keys}
        rank = tuple(scales[aes].levels.index(lvl) for aes, lvl in combo.items())
        label = ", ".join(str(lvl) for lvl in levels)
        pieces.append((rank, combo, label, rows))
    pieces.sort(key=lambda p: p[0])
    return [(combo, label, rows) for _, combo, label, rows in pieces]


def _group_pieces(df: pd.DataFrame, group: str | None, sort_by: str | None = None) -> list[pd.DataFrame]:
    groups = [df] if group is None else [g for _, g in df.groupby(group, observed=True, sort=True)]
    if sort_by is not None:
        groups = [g.sort_values(sort_by, kind="mergesort") for g in groups]
    return groups


def _error_bars(rows: pd.DataFrame, spec, center: pd.Series) -> dict:
    if isinstance(spec, str):
        return dict(type="data", array=_values(rows[spec]), visible=True)
    low, high = spec
    center = pd.to_numeric(center)
    return dict(
        type="data",
        symmetric=False,
        array=_values(rows[high] - center),
        arrayminus=_values(center - rows[low]),
        visible=True,
    )


def _hover_fields(layer: _Layer, rows: pd.DataFrame, text_key: str = "text") -> dict:
    m, out = layer.mapping, {}
    if "text" in m:
        out[text_key] = [None if v is None else str(v) for v in _values(rows[m["text"]])]
    if "customdata" in m:
        out["customdata"] = _values(rows[m["customdata"]])
    return out


# ---------------------------------------------------------------------------
# Trace construction, one function per layer type
# ---------------------------------------------------------------------------

def _markers_trace(layer, rows, combo, color, scales, Scatter, showscale, common):
    layer.require("x", "y")
    m, p = layer.mapping, layer.params
    marker: dict = {}
    if color is not None:
        marker["color"] = color
    elif "color" in m:
        marker.update(scales["continuous"].marker_kwargs(rows[m["color"]], showscale=showscale))
    if "symbol" in combo:
        marker["symbol"] = scales["symbol"].map(combo["symbol"])
    if "size" in m:
        size_scale = scales["size"]
        marker.update(
            size=size_scale.map(rows[m["size"]]),
            sizemode="area",
            sizeref=2.0 * size_scale.range[1] / (_MAX_MARKER_PX ** 2),
        )
    marker = _deep_merge(marker, p.get("marker") or {})

    extras = _hover_fields(layer, rows)
    for key in ("error_x", "error_y"):
        if key in p:
            extras[key] = _error_bars(rows, p[key], rows[m[key[-1]]])

    return Scatter(
        x=_values(rows[m["x"]]), y=_values(rows[m["y"]]),
        mode="markers", marker=marker, **extras, **common,
    )


def _lines_trace(layer, rows, combo, color, scales, Scatter, showscale, common):
    layer.require("x", "y")
    m, p = layer.mapping, layer.params
    line: dict = {}
    if color is not None:
        line["color"] = color
    if "linetype" in combo:
        line["dash"] = scales["linetype"].map(combo["linetype"])
    if "line_shape" in p:
        line["shape"] = p["line_shape"]
    line = _deep_merge(line, p.get("line") or {})

    sort_by = m["x"] if layer.kind == "lines" else None
    groups = _group_pieces(rows, m.get("group"), sort_by)
    extras = {}
    hover = [_hover_fields(layer, g) for g in groups]
    for key in ("text", "customdata"):
        if key in m:
            extras[key] = _join_pieces([h[key] for h in hover])
    if "connectgaps" in p:
        extras["connectgaps"] = p["connectgaps"]

    return Scatter(
        x=_join_pieces([_values(g[m["x"]]) for g in groups]),
        y=_join_pieces([_values(g[m["y"]]) for g in groups]),
        mode="lines", line=line, **extras, **common,
    )


def _segments_trace(layer, rows, combo, color, scales, Scatter, showscale, common):
    layer.require("x", "y", "xend", "yend")
    m, p = layer.mapping, layer.params
    seg = segment_frame(rows, m["x"], m["xend"], m["y"], m["yend"])
    line: dict = {}
    if color is not None:
        line["color"] = color
    if "linetype" in combo:
        line["dash"] = scales["linetype"].map(combo["linetype"])
    line = _deep_merge(line, p.get("line") or {})

    xs = _join_pieces([[x0, x1] for x0, x1 in zip(_values(seg["x"]), _values(seg["xend"]))])
    ys = _join_pieces([[y0, y1] for y0, y1 in zip(_values(seg["y"]), _values(seg["yend"]))])
    extras = {}
    for key, values in _hover_fields(layer, seg).items():
        extras[key] = _join_pieces([[v, v] for v in values])

    return go.Scatter(x=xs, y=ys, mode="lines", line=line, **extras, **common)


def _fill_style(layer, color, alpha: float, outline: dict) -> dict:
    p = layer.params
    line = dict(outline)
    if color is not None:
        line.setdefault("color", color)
    line = _deep_merge(line, p.get("line") or {})
    fillcolor = p.get("fillcolor")
    if fillcolor is None and color is not None:
        fillcolor = _translucent(color, alpha)
    style = {"fill": "toself", "line": line}
    if fillcolor is not None:
        style["fillcolor"] = fillcolor
    return style


def _polygons_trace(layer, rows, combo, color, scales, Scatter, showscale, common):
    layer.require("x", "y")
    m = layer.mapping
    rings = close_polygons(rows, m["x"], m["y"], m.get("group"))
    return go.Scatter(
        x=_values(rings["x"]), y=_values(rings["y"]),
        mode="lines", **_fill_style(layer, color, 0.6, {}), **common,
    )


def _ribbons_trace(layer, rows, combo, color, scales, Scatter, showscale, common):
    layer.require("x", "ymin", "ymax")
    m = layer.mapping
    outlines = [ribbon_path(g, m["x"], m["ymin"], m["ymax"])
                for g in _group_pieces(rows, m.get("group"))]
    return go.Scatter(
        x=_join_pieces([_values(o["x"]) for o in outlines]),
        y=_join_pieces([_values(o["y"]) for o in outlines]),
        mode="lines", **_fill_style(layer, color, 0.3, {"width": 0}), **common,
    )


def _text_trace(layer, rows, combo, color, scales, Scatter, showscale, common):
    layer.require("x", "y", "text")
    m, p = layer.mapping, layer.params
    textfont = {"color": color} if color is not None else {}
    textfont = _deep_merge(textfont, p.get("textfont") or {})
    extras = _hover_fields(layer, rows)
    return go.Scatter(
        x=_values(rows[m["x"]]), y=_values(rows[m["y"]]),
        mode="text", textposition=p.get("textposition", "middle center"),
        textfont=textfont, **extras, **common,
    )


def _bars_trace(layer, rows, combo, color, scales, Scatter, showscale, common):
    layer.require("x", "y")
    m, p = layer.mapping, layer.params
    marker = {"color": color} if color is not None else {}
    marker = _deep_merge(marker, p.get("marker") or {})
    return go.Bar(
        x=_values(rows[m["x"]]), y=_values(rows[m["y"]]),
        orientation=p.get("orientation", "v"), marker=marker,
        **_hover_fields(layer, rows, text_key="hovertext"), **common,
    )


_LAYER_BUILDERS = {
    "markers": _markers_trace,
    "lines": _lines_trace,
    "paths": _lines_trace,
    "segments": _segments_trace,
    "polygons": _polygons_trace,
    "ribbons": _ribbons_trace,
    "text": _text_trace,
    "bars": _bars_trace,
}


# ---------------------------------------------------------------------------
# Stateless figure builder
# ---------------------------------------------------------------------------

def build_figure_from_spec(
    spec: dict,
    data: pd.DataFrame | None = None,
    tables: dict[str, pd.DataFrame] | None = None,
    color_state: ColorState | None = None,
) -> RenderResult | dict:
    """Build a fresh go.Figure from a chart spec.

    This is the main stateless entry point for the rendering pipeline. It
    resolves each layer's data and aesthetic mapping, trains the scales on
    all layers, draws the traces, then applies ``spec["layout"]`` and each
    operation in ``spec["operations"]`` via the operation registry.

    Args:
        spec: Chart specification dict (``_meta``, ``layers``, ``layout``,
            ``operations``, ``post_script``).
        data: Default table for layers that do not name their own.
        tables: Tables that layers may reference by label (``"data": "gwas"``).
        color_state: Optional ColorState for stable cross-render coloring.

    Returns:
        RenderResult on success, or a dict with status='error' on failure.
    """
    layers = spec.get("layers") or []
    if not layers:
        return {"status": "error", "message": "No layers to draw"}

    if color_state is None:
        color_state = ColorState()

    try:
        return _build_from_meta(
            spec.get("_meta") or {},
            layers,
            spec.get("layout") or {},
            spec.get("operations") or [],
            spec.get("post_script"),
            data,
            tables,
            color_state,
        )
    except (ValueError, KeyError) as e:
        message = e.args[0] if e.args else repr(e)
        logger.debug(f"Chart build failed: {message}", extra=tagged("render"))
        return {"status": "error", "message": str(message)}


def _build_from_meta(
    meta: dict,
    layers: list[dict],
    layout: dict,
    operations: list[dict],
    post_script: str | None,
    data: pd.DataFrame | None,
    tables: dict | None,
    color_state: ColorState,
) -> RenderResult:
    """Build figure from _meta + layers + operations. Raises ValueError/KeyError."""
    unknown = sorted(set(meta) - _META_KEYS)
    if unknown:
        raise ValueError(f"Unknown chart option(s): {', '.join(unknown)}")

    resolved = [_resolve_layer(i, layer, meta, data, tables) for i, layer in enumerate(layers)]
    scales = _train_scales(meta, resolved)
    facet = meta.get("facet")
    facet_levels = _facet_levels(facet, resolved)
    n_panels = max(len(facet_levels), 1)

    registry = get_default_registry()
    for op_dict in operations:
        op = registry.get(op_dict.get("op"))
        if op is None:
            raise ValueError(f"Unknown operation '{op_dict.get('op')}'")
        op.bind(op_dict)

    # Create subplot grid (one row per facet level)
    subplot_kwargs: dict = dict(rows=n_panels, cols=1, shared_xaxes=True)
    if n_panels > 1:
        subplot_kwargs["vertical_spacing"] = min(0.06, 1.0 / (n_panels - 1))
    if facet is not None:
        subplot_kwargs["subplot_titles"] = [str(lvl) for lvl in facet_levels]
    fig = make_subplots(**subplot_kwargs)
    fig.update_layout(
        **_DEFAULT_LAYOUT,
        template=config.THEME,
        width=config.FIGURE_WIDTH,
        height=config.PANEL_HEIGHT * n_panels if facet is not None else config.FIGURE_HEIGHT,
        legend=dict(font=dict(size=11), tracegroupgap=2),
    )

    trace_labels: list[str] = []
    trace_panels: list[tuple[int, int]] = []
    shown_in_legend: set[str] = set()
    colorbar_shown = False

    for layer in resolved:
        build_trace = _LAYER_BUILDERS[layer.kind]
        Scatter = _scatter_cls(len(layer.data), layer.params.get("webgl"))
        p = layer.params
        for row, panel_rows in _facet_pieces(layer, facet, facet_levels):
            for combo, label, rows in _split(panel_rows, layer.split_keys, scales):
                if len(rows) == 0:
                    continue
                # A mapped numeric color leaves color None: markers use the colorscale
                color = None
                if "color" in combo:
                    color = scales["color"].map(combo["color"])
                    color_state.label_colors[str(combo["color"])] = color
                if not combo:
                    label = p.get("name") or layer.mapping.get("y") or layer.kind
                    if color is None and "color" not in layer.mapping:
                        color = color_state.next_color(label)

                wants_legend = p.get("showlegend", bool(combo) or "name" in p)
                common = dict(
                    name=_wrap_display_name(str(label)),
                    legendgroup=str(label),
                    showlegend=bool(wants_legend) and label not in shown_in_legend,
                )
                for key in ("opacity", "hoverinfo", "hovertemplate"):
                    if key in p:
                        common[key] = p[key]

                showscale = not colorbar_shown
                trace = build_trace(layer, rows, combo, color, scales, Scatter, showscale, common)
                if layer.kind == "markers" and "color" in layer.mapping and "color" not in combo:
                    colorbar_shown = True
                if common["showlegend"]:
                    shown_in_legend.add(label)

                fig.add_trace(trace, row=row, col=1)
                trace_labels.append(label)
                trace_panels.append((row, 1))

    _apply_axis_defaults(fig, resolved, n_panels)

    if layout:
        fig.update_layout(**layout)

    for op_dict in operations:
        registry.apply(op_dict, fig, trace_labels, panel_count=n_panels)

    return RenderResult(
        figure=fig,
        color_state=color_state,
        trace_labels=trace_labels,
        trace_panels=trace_panels,
        panel_count=n_panels,
        post_script=post_script,
    )


def _apply_axis_defaults(fig: go.Figure, layers: list[_Layer], n_panels: int) -> None:
    """Column names as axis titles, category order for categorical axes, legend title."""
    for aes, update in (("x", fig.update_xaxes), ("y", fig.update_yaxes)):
        mapped = [layer for layer in layers if aes in layer.mapping]
        if not mapped:
            continue
        column = mapped[0].mapping[aes]
        if aes == "x":
            update(title_text=column, row=n_panels, col=1)
        else:
            update(title_text=column)
        series = mapped[0].data[column]
        if isinstance(series.dtype, pd.CategoricalDtype):
            update(categoryorder="array", categoryarray=level_order(series))

    for layer in layers:
        if layer.split_keys:
            columns = dict.fromkeys(col for _, col in layer.split_keys)
            fig.update_layout(legend_title_text=", ".join(columns))
            break


# ---------------------------------------------------------------------------
# Fluent builder
# ---------------------------------------------------------------------------

class ChartBuilder:
    """Records a chart spec: chart-level aesthetics, then layers and styling.

    Chart-level keyword arguments are aesthetic mappings (``x``, ``y``,
    ``color``, ``symbol``, ``size``, ``linetype``, ``text``, ``customdata``,
    ``group``), an optional ``facet`` column and scale overrides (``colors``,
    ``symbols``, ``sizes``, ``linetypes``, ``colorscale``). Layers inherit the
    chart's aesthetics unless they pass ``inherit=False``; an aesthetic set to
    None on a layer removes the inherited mapping.
    """

    def __init__(self, data: pd.DataFrame | None = None, **aesthetics):
        unknown = sorted(set(aesthetics) - _META_KEYS)
        if unknown:
            raise ValueError(f"Unknown chart option(s): {', '.join(unknown)}")
        self.data = data
        self._meta = {k: v for k, v in aesthetics.items() if v is not None}
        self._layers: list[dict] = []
        self._layout: dict = {}
        self._operations: list[dict] = []
        self._post_script: str | None = None

    def _add(self, kind: str, data: pd.DataFrame | str | None, params: dict) -> ChartBuilder:
        errors = validate_layer(kind, params)
        if errors:
            raise ValueError(f"add_{kind}: " + "; ".join(errors))
        layer = {"type": kind, **params}
        if data is not None:
            layer["data"] = data
        self._layers.append(layer)
        return self

    def add_markers(self, data=None, **params) -> ChartBuilder:
        return self._add("markers", data, params)

    def add_lines(self, data=None, **params) -> ChartBuilder:
        """Lines through the points of each group, sorted by x."""
        return self._add("lines", data, params)

    def add_paths(self, data=None, **params) -> ChartBuilder:
        """Lines through the points of each group, in row order."""
        return self._add("paths", data, params)

    def add_segments(self, data=None, **params) -> ChartBuilder:
        return self._add("segments", data, params)

    def add_polygons(self, data=None, **params) -> ChartBuilder:
        return self._add("polygons", data, params)

    def add_ribbons(self, data=None, **params) -> ChartBuilder:
        return self._add("ribbons", data, params)

    def add_text(self, data=None, **params) -> ChartBuilder:
        return self._add("text", data, params)

    def add_bars(self, data=None, **params) -> ChartBuilder:
        return self._add("bars", data, params)

    def layout(self, **kwargs) -> ChartBuilder:
        """Layout properties passed to ``fig.update_layout`` before operations run."""
        self._layout = _deep_merge(self._layout, kwargs)
        return self

    def apply(self, op: str, **params) -> ChartBuilder:
        """Queue a style operation from the operation registry.

        Raises:
            ValueError: Unknown operation, or parameters it does not accept.
        """
        op_def = get_default_registry().get(op)
        if op_def is None:
            raise ValueError(f"Unknown operation '{op}'")
        call = {"op": op, **params}
        op_def.bind(call)
        self._operations.append(call)
        return self

    def on_click_open_url(self, field: str = "customdata", target: str = "_blank") -> ChartBuilder:
        """Open the URL stored on a point when it is clicked (HTML export only)."""
        self._post_script = click_to_open_url_script(field, target)
        return self

    def to_spec(self) -> dict:
        spec = {
            "_meta": dict(self._meta),
            "layers": [dict(layer) for layer in self._layers],
            "layout": dict(self._layout),
            "operations": [dict(op) for op in self._operations],
        }
        if self._post_script:
            spec["post_script"] = self._post_script
        return spec

    def build(self, color_state: ColorState | None = None) -> RenderResult:
        """Build the figure.

        Raises:
            ValueError: If the spec is malformed (unknown columns, missing
                required aesthetics, bad overrides...).
        """
        result = build_figure_from_spec(self.to_spec(), self.data, color_state=color_state)
        if isinstance(result, dict):
            raise ValueError(result["message"])
        return result
