"""
Segment recipes: a dumbbell chart and slope segments, both drawn from
explicit (x, y) → (xend, yend) endpoints.
"""

from data_ops.store import TableStore
from data_ops.transforms import filter_rows, group_summarize, pivot_longer, reorder_levels
from rendering.plotly_renderer import ChartBuilder, RenderResult


def dumbbell(store: TableStore) -> RenderResult:
    """City and highway mileage per model joined by a segment."""
    mpg = store.table("mpg")
    means = group_summarize(mpg, "model", cty=("cty", "mean"), hwy=("hwy", "mean"))
    means = reorder_levels(means, "model", by="hwy")
    ends = pivot_longer(means, "model", names_to="driving", values_to="mpg",
                        value_cols=["cty", "hwy"])
    return (
        ChartBuilder(means, y="model", colors={"cty": "#cc6633", "hwy": "#3384cc"})
        .add_segments(x="cty", xend="hwy", yend="model",
                      line={"color": "lightgray", "width": 4}, hoverinfo="skip")
        .add_markers(ends, x="mpg", color="driving", marker={"size": 9})
        .layout(height=900)
        .apply("set_x_label", text="Miles per gallon")
        .build()
    )


def slope_segments(store: TableStore, start: int = 2000, end: int = 2014) -> RenderResult:
    """Change in yearly median price per city between two years."""
    tx = store.table("txhousing")
    yearly = group_summarize(
        filter_rows(tx, year=[start, end]), ["city", "year"], median=("median", "mean"),
    )
    wide = yearly.pivot(index="city", columns="year", values="median").reset_index()
    wide = wide.rename(columns={start: "start", end: "end"}).dropna(subset=["start", "end"])
    wide = wide.assign(x0=start, x1=end)
    return (
        ChartBuilder(wide, color="city")
        .add_segments(x="x0", y="start", xend="x1", yend="end", line={"width": 2})
        .add_text(x="x1", y="end", text="city", textposition="middle right",
                  showlegend=False)
        .apply("set_legend", show=False)
        .apply("set_x_range", range=[start - 1, end + 4])
        .apply("set_x_label", text="Year")
        .apply("set_y_label", text="Median price (USD)")
        .apply("set_title", text=f"Median house price, {start} vs {end}")
        .build()
    )
