"""Dotplot recipes: ordered group means and regression coefficients."""

from data_ops.stats import lm_coefficients
from data_ops.store import TableStore
from data_ops.transforms import group_summarize, reorder_levels
from rendering.plotly_renderer import ChartBuilder, RenderResult


def ordered_means(store: TableStore) -> RenderResult:
    """Mean highway mileage per model, models sorted by that mean."""
    mpg = store.table("mpg")
    means = group_summarize(mpg, "model", hwy=("hwy", "mean"), n=("hwy", "size"))
    means = reorder_levels(means, "model", by="hwy")
    return (
        ChartBuilder(means, x="hwy", y="model")
        .add_markers(marker={"color": "#3384cc", "size": 9})
        .layout(height=900)
        .apply("set_x_label", text="Mean highway mileage (mpg)")
        .apply("set_y_label", text="")
        .build()
    )


def coefficients(store: TableStore) -> RenderResult:
    """Linear model coefficients with confidence intervals as error bars.

    The intercept is dropped; terms are sorted by their estimate and a
    dashed line marks zero.
    """
    mtcars = store.table("mtcars")
    coefs = lm_coefficients(mtcars, "mpg", ["wt", "qsec", "am", "hp"])
    coefs = coefs[coefs["term"] != "(Intercept)"].reset_index(drop=True)
    coefs = reorder_levels(coefs, "term", by="estimate")
    return (
        ChartBuilder(coefs, x="estimate", y="term")
        .add_markers(
            error_x=["conf_low", "conf_high"],
            marker={"color": "black", "size": 10},
            text="p_value",
            hovertemplate="%{y}: %{x:.2f}<br>p = %{text}<extra></extra>",
        )
        .apply("add_vline", x=0, color="gray", dash="dash")
        .apply("set_title", text="mpg ~ wt + qsec + am + hp (95% CI)")
        .build()
    )
