"""
Tests for the GWAS volcano plot recipe.

Run with: python -m pytest tests/test_volcano.py -v
"""

import numpy as np
import pandas as pd
import pytest

from data_ops.store import TableEntry, TableStore
from gallery.volcano import GENOMEWIDE_P, SIGNIFICANCE_COLORS, SNP_URL, prepare, volcano
from rendering.export import export_figure


@pytest.fixture
def gwas():
    return pd.DataFrame({
        "SNP": ["rs1", "rs2", "rs3", "rs4", "rs5"],
        "GENE": ["APOE", "FTO", "TNF", "MYC", "INS"],
        "P": [1e-12, 1e-9, 0.3, 1e-10, 0.04],
        "EFFECTSIZE": [-1.8, 1.4, 0.05, 0.2, 1.5],
    })


@pytest.fixture
def store(gwas):
    s = TableStore()
    s.put(TableEntry("gwas", gwas))
    return s


class TestPrepare:
    def test_columns(self, gwas):
        df = prepare(gwas)
        assert df["neg_log10_p"].iloc[0] == pytest.approx(12.0)
        assert list(df["significance"]) == ["Down", "Up", "Not significant", "Not significant", "Not significant"]
        assert df["label"].iloc[0] == "rs1 (APOE)"
        assert df["url"].iloc[1] == SNP_URL.format(snp="rs2")

    def test_thresholds_adjustable(self, gwas):
        df = prepare(gwas, p_threshold=0.05, effect_threshold=1.0)
        assert df["significance"].iloc[4] == "Up"

    def test_input_not_mutated(self, gwas):
        prepare(gwas)
        assert "url" not in gwas.columns


class TestVolcanoFigure:
    def test_traces_per_significance_class(self, store):
        result = volcano(store)
        assert result.trace_labels == ["Down", "Not significant", "Up"]
        colors = {t.name: t.marker.color for t in result.figure.data}
        assert colors == SIGNIFICANCE_COLORS

    def test_reference_lines(self, store):
        shapes = volcano(store).figure.layout.shapes
        assert len(shapes) == 3
        hline = shapes[0]
        assert hline.y0 == pytest.approx(-np.log10(GENOMEWIDE_P))
        assert hline.line.dash == "dash"
        assert sorted(s.x0 for s in shapes[1:]) == [-1.0, 1.0]

    def test_top_hits_annotated(self, store):
        annotations = volcano(store, n_labels=5).figure.layout.annotations
        texts = [a.text for a in annotations]
        assert "p = 5e-08" in texts
        # Only the significant SNPs are labelled
        assert {"APOE", "FTO"} <= set(texts)
        assert "TNF" not in texts and "MYC" not in texts

    def test_n_labels(self, store):
        annotations = volcano(store, n_labels=1).figure.layout.annotations
        genes = [a.text for a in annotations if a.showarrow]
        assert genes == ["APOE"]

    def test_hover_and_urls(self, store):
        result = volcano(store)
        up = {t.name: t for t in result.figure.data}["Up"]
        assert list(up.text) == ["rs2 (FTO)"]
        assert list(up.customdata) == ["https://www.ncbi.nlm.nih.gov/snp/rs2"]
        assert "%{text}" in up.hovertemplate

    def test_click_handler(self, store):
        result = volcano(store)
        assert "plotly_click" in result.post_script
        assert "point.customdata" in result.post_script

    def test_axis_labels(self, store):
        layout = volcano(store).figure.layout
        assert layout.xaxis.title.text == "Effect size"
        assert layout.yaxis.title.text == "-log10(p)"
        assert layout.legend.title.text == "Significance"

    def test_html_export_has_click_handler(self, store, tmp_path):
        result = volcano(store)
        status = export_figure(result.figure, str(tmp_path / "volcano"), post_script=result.post_script)
        assert status["status"] == "success"
        html = (tmp_path / "volcano.html").read_text(encoding="utf-8")
        assert "window.open" in html
        assert "ncbi.nlm.nih.gov/snp/rs1" in html


class TestBuiltinGwas:
    def test_builtin_table(self):
        result = volcano(TableStore())
        labels = result.trace_labels
        assert labels[1] == "Not significant"
        assert set(labels) == {"Down", "Not significant", "Up"}
