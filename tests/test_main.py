"""
Tests for the command-line entry point.

Run with: python -m pytest tests/test_main.py -v
"""

import logging

import pandas as pd
import pytest

import config
import chart_logging as recipe_logging
import main
from data_ops.store import reset_store


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Temp log/output dirs, fresh store, handlers dropped afterwards."""
    monkeypatch.setattr(recipe_logging, "LOG_DIR", tmp_path / "logs")
    monkeypatch.setattr(recipe_logging, "_current_log_file", None)
    monkeypatch.setattr(config, "get_output_dir", lambda: tmp_path / "output")
    reset_store()
    yield
    reset_store()
    logger = logging.getLogger(recipe_logging.LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()


class TestParseDataArg:
    def test_ok(self):
        assert main._parse_data_arg("gwas=results.csv") == ("gwas", "results.csv")

    @pytest.mark.parametrize("value", ["gwas", "=a.csv", "gwas="])
    def test_malformed(self, value):
        with pytest.raises(ValueError, match="LABEL=PATH"):
            main._parse_data_arg(value)


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            main.build_parser().parse_args([])

    def test_render_options(self):
        args = main.build_parser().parse_args(
            ["render", "volcano", "-o", "out/v", "-f", "svg", "--data", "gwas=g.csv"]
        )
        assert args.name == "volcano"
        assert args.output == "out/v"
        assert args.format == "svg"
        assert args.data == ["gwas=g.csv"]

    def test_bad_format_rejected(self):
        with pytest.raises(SystemExit):
            main.build_parser().parse_args(["render", "volcano", "-f", "gif"])


class TestCommands:
    def test_list(self, capsys):
        assert main.main(["list"]) == 0
        out = capsys.readouterr().out
        assert "scatterplots" in out
        assert "volcano" in out

    def test_catalog(self, capsys):
        assert main.main(["catalog"]) == 0
        out = capsys.readouterr().out
        assert "add_markers" in out
        assert "**add_hline**" in out

    def test_datasets(self, capsys):
        assert main.main(["datasets", "--columns"]) == 0
        out = capsys.readouterr().out
        assert "mtcars" in out
        assert "EFFECTSIZE" in out

    def test_render_html(self, tmp_path, capsys):
        target = tmp_path / "basic"
        assert main.main(["render", "scatter-basic", "-o", str(target)]) == 0
        assert (tmp_path / "basic.html").exists()
        assert "scatter-basic:" in capsys.readouterr().out

    def test_render_default_output(self, tmp_path):
        assert main.main(["render", "lines-shapes"]) == 0
        assert (tmp_path / "output" / "lines-shapes.html").exists()

    def test_render_unknown_recipe(self):
        assert main.main(["render", "pie-chart"]) == 1
        errors = recipe_logging.get_recent_errors()
        assert any("pie-chart" in e["message"] for e in errors)

    def test_render_with_data_file(self, tmp_path):
        csv = tmp_path / "gwas.csv"
        pd.DataFrame({
            "SNP": ["rs10", "rs11", "rs12"],
            "GENE": ["APOE", "FTO", "TNF"],
            "P": [1e-12, 0.5, 1e-9],
            "EFFECTSIZE": [1.5, 0.1, -2.0],
        }).to_csv(csv, index=False)
        target = tmp_path / "volcano"
        assert main.main(["render", "volcano", "--data", f"gwas={csv}", "-o", str(target)]) == 0
        html = (tmp_path / "volcano.html").read_text(encoding="utf-8")
        assert "rs10" in html
        assert "plotly_click" in html

    def test_render_with_missing_data_file(self, tmp_path):
        assert main.main(["render", "volcano", "--data", f"gwas={tmp_path / 'nope.csv'}"]) == 1

    def test_render_with_bad_table(self, tmp_path):
        csv = tmp_path / "gwas.csv"
        pd.DataFrame({"SNP": ["rs1"], "P": [0.1]}).to_csv(csv, index=False)
        assert main.main(["render", "volcano", "--data", f"gwas={csv}"]) == 1

    def test_errors(self, capsys):
        assert main.main(["errors", "--days", "1"]) == 0
        assert "No errors found" in capsys.readouterr().out
