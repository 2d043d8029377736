"""
Figure export and client-side event hooks.

Click handling runs in the browser: we only generate the JavaScript that
Plotly's ``write_html(post_script=...)`` embeds after the figure is drawn.
Static formats (png, pdf, svg) go through kaleido via ``write_image``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import plotly.graph_objects as go

import config
from chart_logging import LOGGER_NAME, tagged

logger = logging.getLogger(LOGGER_NAME)

EXPORT_FORMATS = ("html", "png", "pdf", "svg")

_CLICK_TEMPLATE = """\
var gd = document.getElementById('{plot_id}');
gd.on('plotly_click', function(data) {{
    var point = data.points[0];
    var url = point.{field};
    if (Array.isArray(url)) {{ url = url[0]; }}
    if (url) {{ window.open(url, {target}); }}
}});
"""


def click_to_open_url_script(field: str = "customdata", target: str = "_blank") -> str:
    """JavaScript that opens the URL stored on a clicked point.

    The script is meant for ``write_html(post_script=...)``, where Plotly
    substitutes ``{plot_id}`` with the id of the figure's div.

    Args:
        field: Point attribute holding the URL (``customdata`` or ``text``).
        target: Window name passed to ``window.open``.

    Raises:
        ValueError: If *field* is not a plain attribute name.
    """
    if not field.isidentifier():
        raise ValueError(f"Invalid point field: {field!r}")
    return _CLICK_TEMPLATE.format(
        plot_id="{plot_id}", field=field, target=json.dumps(target),
    )


def export_figure(
    fig: go.Figure,
    filepath: str,
    format: str | None = None,
    post_script: str | None = None,
) -> dict:
    """Write *fig* to disk.

    Args:
        fig: The figure to export.
        filepath: Output path; the extension is added if missing.
        format: One of html, png, pdf, svg. Inferred from the extension when
            omitted (html if there is none).
        post_script: JavaScript run after the plot is drawn (html only).

    Returns:
        Result dict with status, filepath, and size_bytes.
    """
    if format is None:
        suffix = Path(filepath).suffix.lstrip(".").lower()
        format = suffix if suffix in EXPORT_FORMATS else "html"
    if format not in EXPORT_FORMATS:
        return {"status": "error",
                "message": f"Unsupported format '{format}'. Use one of: {', '.join(EXPORT_FORMATS)}"}

    if fig is None or len(fig.data) == 0:
        return {"status": "error",
                "message": "No plot to export. Build a chart with at least one layer first."}

    if not filepath.endswith(f".{format}"):
        filepath += f".{format}"

    filepath = str(Path(filepath).resolve())
    Path(filepath).parent.mkdir(parents=True, exist_ok=True)

    try:
        if format == "html":
            fig.write_html(
                filepath,
                include_plotlyjs=config.PLOTLYJS_SOURCE,
                post_script=post_script,
                full_html=True,
            )
        else:
            fig.write_image(filepath, format=format)
    except Exception as e:
        logger.warning(f"{format.upper()} export to {filepath} failed: {e}", extra=tagged("export"))
        return {"status": "error", "message": f"{format.upper()} export failed: {e}"}

    path_obj = Path(filepath)
    if path_obj.exists() and path_obj.stat().st_size > 0:
        logger.debug(f"Exported {format} ({path_obj.stat().st_size} bytes): {filepath}", extra=tagged("export"))
        return {
            "status": "success",
            "filepath": str(path_obj.resolve()),
            "size_bytes": path_obj.stat().st_size,
        }
    return {"status": "error", "message": f"{format.upper()} file not created or is empty: {filepath}"}
