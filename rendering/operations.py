"""
Style operations applied to a built figure.

An operation is called as ``{"op": name, **params}``. Its template is a
Plotly JSON fragment with ``$param`` placeholders; optional parameters that
were not given drop their entries, so ``set_line_style`` with only a width
leaves the dash alone.

Scopes:

    layout      merged into ``fig.layout``
    axis        one panel's x or y axis; x labels default to the bottom
                panel, which carries the shared x axis
    xaxes       every x axis (facet panels share x)
    traces      traces with an exact label, or every trace; template keys
                the trace type lacks are skipped (bars have no ``line``)
    decoration  shapes and annotations added to the layout
    composite   a sequence of other operations

Usage:
    registry = get_default_registry()
    registry.apply({"op": "set_title", "text": "mpg"}, fig, trace_labels, panel_count)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

import plotly.graph_objects as go


REQUIRED = object()
_UNSET = object()
_PLACEHOLDER = re.compile(r"\$(\w+)")

SCOPES = ("layout", "axis", "xaxes", "traces", "decoration", "composite")


def _deep_merge(base: dict, patch: dict) -> dict:
    """Merge *patch* over *base* into a new dict, recursing into nested dicts."""
    merged = {**base}
    for key, value in patch.items():
        old = merged.get(key)
        if isinstance(old, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(old, value)
        else:
            merged[key] = value
    return merged


def axis_key(letter: str, panel: int) -> str:
    """Layout key of a panel's axis: ('x', 1) -> 'xaxis', ('y', 3) -> 'yaxis3'."""
    if panel < 1:
        raise ValueError(f"Panel must be >= 1, got {panel}")
    return f"{letter}axis" if panel == 1 else f"{letter}axis{panel}"


def axis_ref(letter: str, panel: int) -> str:
    """Shape/annotation reference of a panel's axis: ('y', 2) -> 'y2'."""
    return axis_key(letter, panel).replace("axis", "")


def fill_template(template: Any, values: dict[str, Any]) -> Any:
    """Substitute ``$name`` placeholders in *template* from *values*.

    A string that is only a placeholder takes the value as is (numbers and
    lists keep their type); placeholders inside longer strings are
    interpolated. Dict entries whose placeholder has no value are dropped,
    as are dicts left empty by that.
    """
    if isinstance(template, str):
        whole = _PLACEHOLDER.fullmatch(template)
        if whole:
            return values.get(whole.group(1), _UNSET)
        return _PLACEHOLDER.sub(
            lambda m: str(values[m.group(1)]) if m.group(1) in values else m.group(0),
            template,
        )
    if isinstance(template, dict):
        filled = {}
        for key, value in template.items():
            value = fill_template(value, values)
            if value is _UNSET or (isinstance(value, dict) and not value):
                continue
            filled[key] = value
        return filled
    if isinstance(template, list):
        return [fill_template(item, values) for item in template]
    return template


@dataclass
class StyleOp:
    """A named operation.

    ``params`` maps each parameter to its default: ``REQUIRED`` when the
    caller must pass it, ``None`` when it is optional with no default.
    ``axis`` ('x' or 'y') makes the op panel-aware: the chosen panel is
    exposed to the template as ``$panel`` and ``$axisref``.
    """

    name: str
    scope: str
    description: str = ""
    params: dict[str, Any] = field(default_factory=dict)
    template: Any = None
    axis: str | None = None

    def __post_init__(self):
        if self.scope not in SCOPES:
            raise ValueError(f"Operation '{self.name}': unknown scope '{self.scope}'")

    def bind(self, call: dict) -> dict[str, Any]:
        """Defaults overlaid with the call's parameters.

        Raises:
            ValueError: On unknown parameters or a missing required one.
        """
        given = {k: v for k, v in call.items() if k != "op"}
        unknown = sorted(set(given) - set(self.params))
        if unknown:
            raise ValueError(
                f"{self.name}: unknown parameter(s) {', '.join(unknown)}; "
                f"accepts {', '.join(self.params) or 'none'}"
            )
        values = {k: v for k, v in self.params.items() if v is not None and v is not REQUIRED}
        values.update((k, v) for k, v in given.items() if v is not None)
        missing = [k for k, v in self.params.items() if v is REQUIRED and k not in values]
        if missing:
            raise ValueError(f"{self.name}: missing required parameter(s) {', '.join(missing)}")
        return values


class OperationRegistry:
    """Named style operations and the code that applies them to figures."""

    def __init__(self, ops=()):
        self._ops: dict[str, StyleOp] = {}
        for op in ops:
            self.register(op)

    def register(self, op: StyleOp) -> None:
        self._ops[op.name] = op

    def get(self, name: str) -> StyleOp | None:
        return self._ops.get(name)

    def list_operations(self) -> list[str]:
        return sorted(self._ops)

    def apply(
        self,
        call: dict,
        fig: go.Figure,
        trace_labels: list[str],
        panel_count: int = 1,
    ) -> None:
        """Apply one operation call to *fig* in place.

        Args:
            call: e.g. ``{"op": "add_hline", "y": 7.3, "panel": 2}``.
            fig: Figure built by the renderer.
            trace_labels: Label of each trace in ``fig.data``, in order.
            panel_count: Number of facet panels (subplot rows).

        Raises:
            ValueError: Unknown operation or parameter, a panel outside the
                figure, or a trace label that matches nothing.
        """
        op = self._ops.get(call.get("op"))
        if op is None:
            raise ValueError(f"Unknown operation '{call.get('op')}'")
        values = op.bind(call)

        if op.scope == "composite":
            for step in fill_template(op.template, values):
                self.apply(step, fig, trace_labels, panel_count)
            return

        if op.axis is not None:
            panel = int(values.get("panel", panel_count if op.axis == "x" else 1))
            if not 1 <= panel <= panel_count:
                raise ValueError(f"{op.name}: panel {panel} outside 1..{panel_count}")
            values["panel"] = panel
            values["axisref"] = axis_ref(op.axis, panel)

        patch = fill_template(op.template, values)
        if op.scope == "layout":
            fig.update_layout(patch)
        elif op.scope == "axis":
            fig.update_layout({axis_key(op.axis, values["panel"]): patch})
        elif op.scope == "xaxes":
            fig.update_xaxes(patch)
        elif op.scope == "traces":
            self._patch_traces(fig, trace_labels, values.get("trace"), patch)
        else:
            self._decorate(fig, patch)

    @staticmethod
    def _patch_traces(fig: go.Figure, trace_labels: list[str], selector, patch: dict) -> None:
        if selector is None:
            targets = list(fig.data)
        else:
            targets = [
                fig.data[i] for i, label in enumerate(trace_labels)
                if str(label) == str(selector)
            ]
            if not targets:
                known = ", ".join(dict.fromkeys(str(label) for label in trace_labels))
                raise ValueError(f"No trace labelled '{selector}'. Labels: {known or 'none'}")
        for trace in targets:
            supported = {key: value for key, value in patch.items() if key in trace}
            if supported:
                trace.update(supported)

    @staticmethod
    def _decorate(fig: go.Figure, patch: dict) -> None:
        for shape in patch.get("shapes", []):
            fig.add_shape(shape)
        for annotation in patch.get("annotations", []):
            # label text is optional on reference lines
            if annotation.get("text") not in (None, ""):
                fig.add_annotation(annotation)


# ---------------------------------------------------------------------------
# Built-in operations
# ---------------------------------------------------------------------------

def _reference_line(orientation: str) -> dict:
    """Template of a dashed reference line plus its optional label."""
    line = {"color": "$color", "width": "$width", "dash": "$dash"}
    font = {"size": 11, "color": "$color"}
    if orientation == "v":
        return {
            "shapes": [{"type": "line", "xref": "x", "yref": "paper",
                        "x0": "$x", "x1": "$x", "y0": 0, "y1": 1, "line": line}],
            "annotations": [{"xref": "x", "yref": "paper", "x": "$x", "y": 1.02,
                             "text": "$label", "showarrow": False, "font": font}],
        }
    return {
        "shapes": [{"type": "line", "xref": "paper", "yref": "$axisref",
                    "x0": 0, "x1": 1, "y0": "$y", "y1": "$y", "line": line}],
        "annotations": [{"xref": "paper", "yref": "$axisref", "x": 1, "y": "$y",
                         "xanchor": "right", "yanchor": "bottom",
                         "text": "$label", "showarrow": False, "font": font}],
    }


_LINE_DEFAULTS = {"color": "gray", "width": 1, "dash": "dash", "label": ""}

BUILTIN_OPERATIONS: list[StyleOp] = [
    # Figure
    StyleOp("set_title", "layout", "Chart title",
            {"text": REQUIRED}, {"title": {"text": "$text"}}),
    StyleOp("set_theme", "layout", "Plotly template, e.g. 'plotly_white'",
            {"theme": REQUIRED}, {"template": "$theme"}),
    StyleOp("set_font_size", "layout", "Base font size in points",
            {"size": REQUIRED}, {"font": {"size": "$size"}}),
    StyleOp("set_canvas_size", "layout", "Figure width and/or height in pixels",
            {"width": None, "height": None}, {"width": "$width", "height": "$height"}),
    StyleOp("set_margin", "layout", "Plot margins in pixels (any of l, r, t, b)",
            {"l": None, "r": None, "t": None, "b": None},
            {"margin": {"l": "$l", "r": "$r", "t": "$t", "b": "$b"}}),
    StyleOp("set_hovermode", "layout", "Hover grouping: 'closest', 'x', 'y', 'x unified' or False",
            {"mode": REQUIRED}, {"hovermode": "$mode"}),

    # Legend
    StyleOp("set_legend", "layout", "Show or hide the legend",
            {"show": REQUIRED}, {"showlegend": "$show"}),
    StyleOp("set_legend_title", "layout", "Legend title",
            {"text": REQUIRED}, {"legend": {"title": {"text": "$text"}}}),

    # Axes
    StyleOp("set_x_label", "axis", "X axis title (bottom panel unless a panel is given)",
            {"text": REQUIRED, "panel": None}, {"title": {"text": "$text"}}, axis="x"),
    StyleOp("set_y_label", "axis", "Y axis title of a panel",
            {"text": REQUIRED, "panel": None}, {"title": {"text": "$text"}}, axis="y"),
    StyleOp("set_x_range", "xaxes", "Shared x range [min, max]",
            {"range": REQUIRED}, {"range": "$range"}),
    StyleOp("set_y_range", "axis", "Y range [min, max] of a panel",
            {"range": REQUIRED, "panel": None}, {"range": "$range"}, axis="y"),
    StyleOp("set_x_scale", "xaxes", "Shared x axis type: 'linear', 'log', 'date' or 'category'",
            {"scale": REQUIRED}, {"type": "$scale"}),
    StyleOp("set_y_scale", "axis", "Y axis type of a panel: 'linear' or 'log'",
            {"scale": REQUIRED, "panel": None}, {"type": "$scale"}, axis="y"),

    # Traces (all traces when no label is given)
    StyleOp("set_trace_color", "traces", "Line, marker and bar color",
            {"color": REQUIRED, "trace": None},
            {"line": {"color": "$color"}, "marker": {"color": "$color"}}),
    StyleOp("set_line_style", "traces", "Line width and/or dash ('solid', 'dash', 'dot', 'dashdot')",
            {"width": None, "dash": None, "trace": None},
            {"line": {"width": "$width", "dash": "$dash"}}),
    StyleOp("set_line_shape", "traces", "Interpolation: 'linear', 'spline', 'hv', 'vh', 'hvh', 'vhv'",
            {"shape": REQUIRED, "trace": None}, {"line": {"shape": "$shape"}}),
    StyleOp("set_trace_mode", "traces", "Drawing mode: 'lines', 'markers', 'lines+markers'",
            {"mode": REQUIRED, "trace": None}, {"mode": "$mode"}),
    StyleOp("set_marker_opacity", "traces", "Marker alpha between 0 and 1",
            {"opacity": REQUIRED, "trace": None}, {"marker": {"opacity": "$opacity"}}),
    StyleOp("set_trace_visibility", "traces", "True, False or 'legendonly'",
            {"visible": REQUIRED, "trace": None}, {"visible": "$visible"}),
    StyleOp("set_colorscale", "traces", "Colorscale of markers colored by a numeric column",
            {"colorscale": REQUIRED, "trace": None}, {"marker": {"colorscale": "$colorscale"}}),
    StyleOp("set_colorbar_title", "traces", "Title of the colorbar",
            {"text": REQUIRED, "trace": None},
            {"marker": {"colorbar": {"title": {"text": "$text"}}}}),

    # Decorations
    StyleOp("add_vline", "decoration", "Vertical reference line spanning all panels",
            {"x": REQUIRED, **_LINE_DEFAULTS}, _reference_line("v")),
    StyleOp("add_hline", "decoration", "Horizontal reference line on a panel",
            {"y": REQUIRED, "panel": None, **_LINE_DEFAULTS}, _reference_line("h"), axis="y"),
    StyleOp("add_annotation", "decoration", "Text label at a data position",
            {"text": REQUIRED, "x": REQUIRED, "y": REQUIRED, "showarrow": True},
            {"annotations": [{"text": "$text", "x": "$x", "y": "$y", "showarrow": "$showarrow"}]}),
    StyleOp("add_shape", "decoration", "Line, rect or circle in data coordinates",
            {"type": REQUIRED, "x0": REQUIRED, "y0": REQUIRED, "x1": REQUIRED, "y1": REQUIRED,
             "line_color": "black", "line_width": 1, "fillcolor": "rgba(0,0,0,0)"},
            {"shapes": [{"type": "$type", "x0": "$x0", "y0": "$y0", "x1": "$x1", "y1": "$y1",
                         "line": {"color": "$line_color", "width": "$line_width"},
                         "fillcolor": "$fillcolor"}]}),

    # Composite
    StyleOp("style_publication", "composite", "White theme, larger font and canvas, legend on",
            {"font_size": 14, "width": 1200, "height": 800},
            [
                {"op": "set_theme", "theme": "plotly_white"},
                {"op": "set_font_size", "size": "$font_size"},
                {"op": "set_canvas_size", "width": "$width", "height": "$height"},
                {"op": "set_legend", "show": True},
            ]),
]


_default_registry: OperationRegistry | None = None


def get_default_registry() -> OperationRegistry:
    """Shared registry holding the built-in operations."""
    global _default_registry
    if _default_registry is None:
        _default_registry = OperationRegistry(BUILTIN_OPERATIONS)
    return _default_registry
