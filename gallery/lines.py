"""
Line chart recipes: one line per group, highlighting, linetype mappings,
interpolation shapes, paths versus lines, and density curves.
"""

import numpy as np
import pandas as pd

from data_ops.stats import density_by_group
from data_ops.store import TableStore
from data_ops.transforms import filter_rows, pivot_longer
from rendering.plotly_renderer import ChartBuilder, RenderResult


def by_group(store: TableStore) -> RenderResult:
    """Median house price over time, one colored line per city."""
    tx = store.table("txhousing")
    return (
        ChartBuilder(tx, x="date", y="median", color="city")
        .add_lines()
        .apply("set_title", text="Texas median house prices")
        .apply("set_hovermode", mode="x unified")
        .build()
    )


def highlight_group(store: TableStore, city: str = "Houston") -> RenderResult:
    """Every city in light gray with one city drawn on top in color."""
    tx = store.table("txhousing")
    focus = filter_rows(tx, city=city)
    return (
        ChartBuilder(tx, x="date", y="median", group="city")
        .add_lines(line={"color": "lightgray", "width": 1}, hoverinfo="skip")
        .add_lines(focus, name=city, line={"color": "firebrick", "width": 2.5})
        .apply("set_title", text=f"{city} against the other Texas cities")
        .build()
    )


def linetype_mapping(store: TableStore) -> RenderResult:
    """Two series in long form, told apart by color and dash style."""
    econ = store.table("economics")
    long = pivot_longer(econ, "date", names_to="series", values_to="value",
                        value_cols=["psavert", "uempmed"])
    return (
        ChartBuilder(
            long, x="date", y="value", color="series", linetype="series",
            linetypes={"psavert": "solid", "uempmed": "dot"},
        )
        .add_lines()
        .apply("set_y_label", text="Percent / weeks")
        .build()
    )


def line_shapes(store: TableStore) -> RenderResult:
    """The same points joined with each interpolation shape."""
    rng = np.random.default_rng(7)
    base = np.round(rng.uniform(0, 4, 8), 1)
    shapes = ["linear", "spline", "hv", "vh", "hvh", "vhv"]
    frames = [
        pd.DataFrame({"x": np.arange(len(base)), "y": base + 5 * i, "shape": shape})
        for i, shape in enumerate(shapes)
    ]
    df = pd.concat(frames, ignore_index=True)

    chart = ChartBuilder(df, x="x", y="y")
    for shape, sub in df.groupby("shape", sort=False):
        chart.add_lines(sub, line_shape=shape, name=shape)
        chart.add_markers(sub, marker={"color": "black", "size": 5}, showlegend=False)
    return chart.apply("set_title", text="Line shapes").build()


def paths_vs_lines(store: TableStore) -> RenderResult:
    """Unemployment rate against weeks unemployed.

    A path visits the months in time order; a line re-sorts the same points
    by x, which loses the trajectory.
    """
    econ = store.table("economics")
    recent = econ[econ["date"] >= "2005-01-01"].copy()
    recent["unemploy_pct"] = 100 * recent["unemploy"] / recent["pop"]
    return (
        ChartBuilder(recent, x="unemploy_pct", y="uempmed", text="date")
        .add_paths(name="path (time order)", line={"color": "#3384cc"})
        .add_lines(name="line (sorted by x)", line={"color": "#cc6633", "dash": "dot"})
        .apply("set_x_label", text="Unemployment rate (%)")
        .apply("set_y_label", text="Median weeks unemployed")
        .build()
    )


def density_curves(store: TableStore) -> RenderResult:
    diamonds = store.table("diamonds")
    dens = density_by_group(diamonds, "price", "cut", n=256)
    return (
        ChartBuilder(dens, x="x", y="density", color="cut", colors="Viridis")
        .add_lines(line={"width": 2})
        .apply("set_x_label", text="Price (USD)")
        .apply("set_title", text="Price distribution by cut")
        .build()
    )
