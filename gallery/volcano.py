"""
Volcano plot of GWAS summary statistics.

Effect size on x, -log10(p) on y, points colored by significance class, with
reference lines at the genome-wide significance level and at the effect-size
cut-offs. The strongest hits are annotated, hovering shows the SNP and its
nearest gene, and clicking a point opens the SNP's dbSNP page in the browser
(HTML export only).
"""

import numpy as np

from data_ops.store import TableStore
from data_ops.transforms import classify_threshold, neg_log10, top_n
from rendering.plotly_renderer import ChartBuilder, RenderResult

GENOMEWIDE_P = 5e-8
EFFECT_THRESHOLD = 1.0
SNP_URL = "https://www.ncbi.nlm.nih.gov/snp/{snp}"

SIGNIFICANCE_COLORS = {
    "Down": "#3384cc",
    "Not significant": "lightgray",
    "Up": "#cc3340",
}


def prepare(
    gwas,
    p_threshold: float = GENOMEWIDE_P,
    effect_threshold: float = EFFECT_THRESHOLD,
):
    """Add the columns the volcano chart binds to.

    Adds ``neg_log10_p``, ``significance`` (Down / Not significant / Up),
    ``label`` (hover text) and ``url`` (dbSNP link used by the click handler).
    """
    out = gwas.copy()
    out["neg_log10_p"] = neg_log10(out["P"])
    out["significance"] = classify_threshold(
        out, "EFFECTSIZE", "P", effect_threshold, p_threshold,
    )
    out["label"] = out["SNP"] + " (" + out["GENE"] + ")"
    out["url"] = [SNP_URL.format(snp=snp) for snp in out["SNP"]]
    return out


def volcano(
    store: TableStore,
    n_labels: int = 5,
    p_threshold: float = GENOMEWIDE_P,
    effect_threshold: float = EFFECT_THRESHOLD,
) -> RenderResult:
    df = prepare(store.table("gwas"), p_threshold, effect_threshold)
    threshold_y = float(-np.log10(p_threshold))

    chart = (
        ChartBuilder(
            df, x="EFFECTSIZE", y="neg_log10_p", color="significance",
            colors=SIGNIFICANCE_COLORS, text="label", customdata="url",
        )
        .add_markers(
            marker={"size": 7, "line": {"width": 0.5, "color": "white"}},
            hovertemplate=(
                "<b>%{text}</b><br>effect size: %{x:.3f}"
                "<br>-log10(p): %{y:.2f}<extra></extra>"
            ),
        )
        .apply("add_hline", y=threshold_y, color="gray", dash="dash",
               label=f"p = {p_threshold:g}")
        .apply("add_vline", x=-effect_threshold, color="gray", dash="dot")
        .apply("add_vline", x=effect_threshold, color="gray", dash="dot")
    )

    hits = df[df["significance"] != "Not significant"]
    for _, row in top_n(hits, n_labels, "neg_log10_p").iterrows():
        chart.apply(
            "add_annotation", text=row["GENE"],
            x=float(row["EFFECTSIZE"]), y=float(row["neg_log10_p"]),
            showarrow=True,
        )

    return (
        chart
        .on_click_open_url("customdata")
        .apply("set_x_label", text="Effect size")
        .apply("set_y_label", text="-log10(p)")
        .apply("set_legend_title", text="Significance")
        .apply("set_title", text="Volcano plot")
        .build()
    )
