"""
Layer registry for chart construction.

Describes the layer types ChartBuilder understands as structured data. The
builder validates every layer against this registry before building, and the
CLI renders it as a markdown catalog (``python main.py catalog``).

Adding a new layer type:
    1. Add an entry to LAYERS below
    2. Implement the trace construction in plotly_renderer.py (_LAYER_BUILDERS)
    3. Add a ChartBuilder.add_<type>() shortcut
"""

_AESTHETIC_PARAMS = [
    {"name": "x", "type": "column", "required": False,
     "description": "Column bound to the x axis (inherited from the chart)"},
    {"name": "y", "type": "column", "required": False,
     "description": "Column bound to the y axis (inherited from the chart)"},
    {"name": "color", "type": "column", "required": False,
     "description": "Column mapped to color: discrete → one trace per level, numeric → colorbar"},
    {"name": "group", "type": "column", "required": False,
     "description": "Column whose levels are drawn as separate pieces of the same trace"},
    {"name": "text", "type": "column", "required": False,
     "description": "Column used as hover text (or as the label for text layers)"},
    {"name": "customdata", "type": "column", "required": False,
     "description": "Column attached to each point, e.g. a URL for click handlers"},
    {"name": "name", "type": "string", "required": False,
     "description": "Trace name shown in the legend"},
    {"name": "opacity", "type": "number", "required": False,
     "description": "Trace opacity between 0 and 1"},
    {"name": "showlegend", "type": "boolean", "required": False,
     "description": "Show the trace(s) in the legend"},
    {"name": "hoverinfo", "type": "string", "required": False,
     "description": "Plotly hoverinfo flags, e.g. 'text' or 'x+y'"},
    {"name": "hovertemplate", "type": "string", "required": False,
     "description": "Plotly hovertemplate string"},
    {"name": "inherit", "type": "boolean", "required": False, "default": True,
     "description": "Inherit aesthetic mappings from the chart (scales are always shared)"},
]

_MARKER_PARAMS = [
    {"name": "symbol", "type": "column", "required": False,
     "description": "Discrete column mapped to marker symbols"},
    {"name": "size", "type": "column", "required": False,
     "description": "Column mapped to marker size (interpolated into the 'sizes' range)"},
    {"name": "marker", "type": "object", "required": False,
     "description": "Constant marker properties, e.g. {'color': 'black', 'size': 8}"},
    {"name": "error_x", "type": "column", "required": False,
     "description": "Symmetric error column, or [low, high] columns, for horizontal error bars"},
    {"name": "error_y", "type": "column", "required": False,
     "description": "Symmetric error column, or [low, high] columns, for vertical error bars"},
    {"name": "webgl", "type": "boolean", "required": False,
     "description": "Force WebGL rendering (Scattergl)"},
]

_LINE_PARAMS = [
    {"name": "linetype", "type": "column", "required": False,
     "description": "Discrete column mapped to line dash styles"},
    {"name": "line", "type": "object", "required": False,
     "description": "Constant line properties, e.g. {'width': 1, 'color': 'gray'}"},
    {"name": "line_shape", "type": "string", "required": False,
     "enum": ["linear", "spline", "hv", "vh", "hvh", "vhv"],
     "description": "Interpolation between points"},
    {"name": "connectgaps", "type": "boolean", "required": False,
     "description": "Draw across missing y values instead of breaking the line"},
    {"name": "webgl", "type": "boolean", "required": False,
     "description": "Force WebGL rendering (Scattergl)"},
]

_FILL_PARAMS = [
    {"name": "fillcolor", "type": "string", "required": False,
     "description": "Fill color (defaults to a translucent version of the trace color)"},
    {"name": "line", "type": "object", "required": False,
     "description": "Outline properties, e.g. {'width': 0}"},
]

LAYERS = [
    {
        "name": "markers",
        "description": "Scatter points. Supports color, symbol and size mappings, and error bars.",
        "parameters": _AESTHETIC_PARAMS + _MARKER_PARAMS,
    },
    {
        "name": "lines",
        "description": "Lines connecting points in x order within each group.",
        "parameters": _AESTHETIC_PARAMS + _LINE_PARAMS,
    },
    {
        "name": "paths",
        "description": "Lines connecting points in row order within each group.",
        "parameters": _AESTHETIC_PARAMS + _LINE_PARAMS,
    },
    {
        "name": "segments",
        "description": "One straight segment per row from (x, y) to (xend, yend).",
        "parameters": _AESTHETIC_PARAMS + [
            {"name": "xend", "type": "column", "required": True,
             "description": "Column holding the segment end x"},
            {"name": "yend", "type": "column", "required": True,
             "description": "Column holding the segment end y"},
            {"name": "linetype", "type": "column", "required": False,
             "description": "Discrete column mapped to line dash styles"},
            {"name": "line", "type": "object", "required": False,
             "description": "Constant line properties"},
        ],
    },
    {
        "name": "polygons",
        "description": "Filled polygons; each group is one closed ring.",
        "parameters": _AESTHETIC_PARAMS + _FILL_PARAMS,
    },
    {
        "name": "ribbons",
        "description": "Filled band between ymin and ymax along x.",
        "parameters": [p for p in _AESTHETIC_PARAMS if p["name"] != "y"] + _FILL_PARAMS + [
            {"name": "ymin", "type": "column", "required": True,
             "description": "Column holding the lower edge"},
            {"name": "ymax", "type": "column", "required": True,
             "description": "Column holding the upper edge"},
        ],
    },
    {
        "name": "text",
        "description": "Text labels drawn at (x, y).",
        "parameters": _AESTHETIC_PARAMS + [
            {"name": "textposition", "type": "string", "required": False, "default": "middle center",
             "description": "Label position relative to the point"},
            {"name": "textfont", "type": "object", "required": False,
             "description": "Font properties, e.g. {'size': 10}"},
        ],
    },
    {
        "name": "bars",
        "description": "Bars from zero to y at each x.",
        "parameters": _AESTHETIC_PARAMS + [
            {"name": "orientation", "type": "string", "required": False, "default": "v",
             "enum": ["v", "h"],
             "description": "Bar orientation"},
            {"name": "marker", "type": "object", "required": False,
             "description": "Constant marker properties"},
        ],
    },
]

# Build lookup dict for fast access
_LAYER_MAP = {t["name"]: t for t in LAYERS}


def get_layer(name: str) -> dict | None:
    """Look up a layer type by name.

    Args:
        name: Layer type (e.g., 'markers')

    Returns:
        Layer definition dict, or None if not found.
    """
    return _LAYER_MAP.get(name)


def validate_layer(name: str, args: dict) -> list[str]:
    """Validate layer arguments against the layer's parameter spec.

    Unknown parameters are reported too, so a typo in an aesthetic name
    fails loudly instead of being ignored.

    Args:
        name: Layer type
        args: Layer arguments (without 'type' and 'data')

    Returns:
        List of error messages. Empty list means valid.
    """
    layer = get_layer(name)
    if layer is None:
        return [f"Unknown layer type: {name}"]

    errors = []
    known = {p["name"] for p in layer["parameters"]}
    for key in args:
        if key not in known:
            errors.append(f"Unknown parameter for {name}: {key}")
    for param in layer["parameters"]:
        if param["required"] and param["name"] not in args:
            errors.append(f"Missing required parameter: {param['name']}")
        if param["name"] in args and "enum" in param:
            if args[param["name"]] not in param["enum"]:
                errors.append(
                    f"Invalid value for {param['name']}: '{args[param['name']]}'. "
                    f"Must be one of: {', '.join(str(v) for v in param['enum'])}"
                )
    return errors


def render_layer_catalog() -> str:
    """Render the layer registry as a markdown catalog.

    Returns:
        Markdown string listing all layer types with parameters and examples.
    """
    lines = ["## Layer Types", ""]

    for layer in LAYERS:
        required = [p["name"] for p in layer["parameters"] if p["required"]]
        sig = ", ".join(required)
        lines.append(f"### **add_{layer['name']}**({sig})")
        lines.append(f"{layer['description']}")
        lines.append("")

        for p in layer["parameters"]:
            req = "required" if p["required"] else "optional"
            line = f"- `{p['name']}` ({p['type']}, {req}): {p['description']}"
            if "enum" in p:
                vals = ", ".join(f"`{v}`" for v in p["enum"])
                line += f" Values: {vals}"
            lines.append(line)
        lines.append("")

    lines.extend([
        "## Examples",
        "",
        "- Scatter: `ChartBuilder(mpg, x=\"displ\", y=\"hwy\").add_markers()`",
        "- Discrete color: `ChartBuilder(mpg, x=\"displ\", y=\"hwy\", color=\"drv\", colors=\"Set1\").add_markers()`",
        "- Lines per group: `ChartBuilder(tx, x=\"date\", y=\"median\").add_lines(group=\"city\")`",
        "- Dumbbell: `.add_segments(x=\"cty\", xend=\"hwy\", y=\"model\", yend=\"model\")`",
        "- Ribbon: `.add_ribbons(ymin=\"lower\", ymax=\"upper\")`",
        "- Reference line: `.apply(\"add_hline\", y=7.3, dash=\"dash\")`",
        "",
    ])

    return "\n".join(lines)
