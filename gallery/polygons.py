"""
Polygon and ribbon recipes: grouped rings, a confidence band around a linear
fit, and the area between two quantiles.
"""

import numpy as np
import pandas as pd

from data_ops.stats import linear_fit
from data_ops.store import TableStore
from data_ops.transforms import group_summarize
from rendering.plotly_renderer import ChartBuilder, RenderResult


def _regular_polygons(n_shapes: int = 6) -> pd.DataFrame:
    """Vertices of regular polygons laid out on a grid, one id per ring."""
    frames = []
    for i in range(n_shapes):
        sides = i + 3
        angles = np.linspace(0, 2 * np.pi, sides, endpoint=False) + np.pi / 2
        cx, cy = 3.0 * (i % 3), -3.0 * (i // 3)
        frames.append(pd.DataFrame({
            "id": f"{sides} sides",
            "x": cx + np.cos(angles),
            "y": cy + np.sin(angles),
            "value": float(sides),
        }))
    df = pd.concat(frames, ignore_index=True)
    order = [f"{i + 3} sides" for i in range(n_shapes)]
    df["id"] = pd.Categorical(df["id"], categories=order, ordered=True)
    return df


def grouped_polygons(store: TableStore) -> RenderResult:
    """One filled ring per id, colored by id."""
    shapes = _regular_polygons()
    return (
        ChartBuilder(shapes, x="x", y="y", color="id", group="id", colors="Dark2")
        .add_polygons(line={"width": 1})
        .layout(yaxis={"scaleanchor": "x", "scaleratio": 1})
        .apply("set_title", text="Grouped polygons")
        .build()
    )


def lm_ribbon(store: TableStore, level: float = 0.95) -> RenderResult:
    """Linear fit of mpg on weight with a confidence ribbon."""
    mtcars = store.table("mtcars")
    fit = linear_fit(mtcars, "wt", "mpg", level=level, n=80)
    return (
        ChartBuilder(mtcars, x="wt", y="mpg")
        .add_ribbons(fit, x="x", ymin="lower", ymax="upper",
                     fillcolor="rgba(51, 132, 204, 0.25)", name=f"{level:.0%} CI")
        .add_lines(fit, x="x", y="fitted", line={"color": "#3384cc", "width": 2}, name="fit")
        .add_markers(text="model", marker={"color": "black", "size": 7})
        .apply("set_x_label", text="Weight (1000 lbs)")
        .apply("set_y_label", text="Miles per gallon")
        .build()
    )


def quantile_area(store: TableStore, low: float = 0.1, high: float = 0.9) -> RenderResult:
    """Band between two quantiles of the city medians, with the median of medians."""
    tx = store.table("txhousing")
    summary = group_summarize(
        tx, "date",
        low=("median", lambda s: s.quantile(low)),
        mid=("median", "median"),
        high=("median", lambda s: s.quantile(high)),
    )
    return (
        ChartBuilder(summary, x="date")
        .add_ribbons(ymin="low", ymax="high", fillcolor="rgba(204, 102, 51, 0.3)",
                     name=f"{low:.0%}–{high:.0%} of cities")
        .add_lines(y="mid", line={"color": "#cc6633"}, name="median city")
        .apply("set_y_label", text="Median price (USD)")
        .apply("set_title", text="Spread of Texas house prices")
        .build()
    )
