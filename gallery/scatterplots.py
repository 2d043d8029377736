"""
Scatterplot recipes: points, alpha blending, color/symbol/size mappings and
a fitted-line overlay.
"""

from data_ops.stats import linear_fit
from data_ops.store import TableStore
from rendering.plotly_renderer import ChartBuilder, RenderResult


def basic(store: TableStore) -> RenderResult:
    """Engine displacement against highway mileage."""
    mpg = store.table("mpg")
    return (
        ChartBuilder(mpg, x="displ", y="hwy")
        .add_markers(text="model")
        .apply("set_title", text="Bigger engines burn more fuel")
        .apply("set_x_label", text="Displacement (L)")
        .apply("set_y_label", text="Highway (mpg)")
        .build()
    )


def alpha_webgl(store: TableStore) -> RenderResult:
    """Thousands of overlapping points: alpha blending drawn with WebGL."""
    diamonds = store.table("diamonds")
    return (
        ChartBuilder(diamonds, x="carat", y="price")
        .add_markers(opacity=0.15, marker={"size": 5}, webgl=True)
        .apply("set_y_scale", scale="log")
        .apply("set_title", text="Diamond price by carat")
        .build()
    )


def discrete_color(store: TableStore) -> RenderResult:
    mpg = store.table("mpg")
    return (
        ChartBuilder(mpg, x="displ", y="hwy", color="class")
        .add_markers()
        .apply("set_title", text="Mileage by vehicle class")
        .build()
    )


def brewer_palette(store: TableStore) -> RenderResult:
    """Discrete colors from a named qualitative palette."""
    mpg = store.table("mpg")
    return (
        ChartBuilder(mpg, x="displ", y="hwy", color="drv", colors="Set1")
        .add_markers(marker={"size": 8})
        .apply("set_legend_title", text="Drive train")
        .build()
    )


def manual_colors(store: TableStore) -> RenderResult:
    """Hand-picked colors for each cylinder count."""
    mtcars = store.table("mtcars")
    mtcars = mtcars.assign(cyl=mtcars["cyl"].astype(str))
    return (
        ChartBuilder(
            mtcars, x="wt", y="mpg", color="cyl",
            colors={"4": "forestgreen", "6": "darkorange", "8": "firebrick"},
        )
        .add_markers(marker={"size": 10}, text="model")
        .apply("set_x_label", text="Weight (1000 lbs)")
        .apply("set_legend_title", text="Cylinders")
        .build()
    )


def continuous_color(store: TableStore) -> RenderResult:
    """A numeric color column becomes a colorscale with a colorbar."""
    mtcars = store.table("mtcars")
    return (
        ChartBuilder(mtcars, x="wt", y="mpg", color="hp", colorscale="Viridis")
        .add_markers(marker={"size": 11}, text="model")
        .apply("set_colorbar_title", text="Horsepower")
        .build()
    )


def symbols(store: TableStore) -> RenderResult:
    mtcars = store.table("mtcars")
    mtcars = mtcars.assign(cyl=mtcars["cyl"].astype(str))
    return (
        ChartBuilder(
            mtcars, x="wt", y="mpg", symbol="cyl",
            symbols=["circle-open", "triangle-up", "square"],
        )
        .add_markers(marker={"size": 11, "color": "black"})
        .apply("set_legend_title", text="Cylinders")
        .build()
    )


def size_range(store: TableStore) -> RenderResult:
    """Marker area proportional to horsepower within a chosen size range."""
    mtcars = store.table("mtcars")
    mtcars = mtcars.assign(cyl=mtcars["cyl"].astype(str))
    return (
        ChartBuilder(mtcars, x="wt", y="mpg", size="hp", color="cyl", sizes=(20, 200))
        .add_markers(opacity=0.7, text="model")
        .apply("set_title", text="Heavier cars have more horsepower")
        .build()
    )


def fit_overlay(store: TableStore) -> RenderResult:
    mpg = store.table("mpg")
    fit = linear_fit(mpg, "displ", "hwy", n=100)
    return (
        ChartBuilder(mpg, x="displ", y="hwy")
        .add_markers(marker={"color": "gray"}, opacity=0.6)
        .add_lines(fit, x="x", y="fitted", name="linear fit", line={"color": "#3384cc", "width": 3})
        .apply("set_x_label", text="Displacement (L)")
        .apply("set_y_label", text="Highway (mpg)")
        .build()
    )
