"""
Tests for data_ops.transforms: reshaping helpers.

Run with: python -m pytest tests/test_transforms.py
"""

import numpy as np
import pandas as pd
import pytest

from data_ops.transforms import (
    check_columns,
    classify_threshold,
    close_polygons,
    filter_rows,
    group_summarize,
    highlight,
    neg_log10,
    pivot_longer,
    reorder_levels,
    ribbon_path,
    segment_frame,
    top_n,
)


@pytest.fixture
def cars():
    return pd.DataFrame({
        "model": ["a", "a", "b", "b", "c"],
        "cty": [10, 12, 20, 22, 15],
        "hwy": [20, 22, 30, 32, 25],
    })


class TestCheckColumns:
    def test_ok(self, cars):
        check_columns(cars, ["model", None])

    def test_missing(self, cars):
        with pytest.raises(ValueError, match="'mpg'"):
            check_columns(cars, ["model", "mpg"])


class TestFilterRows:
    def test_equals(self, cars):
        out = filter_rows(cars, model="b")
        assert list(out["cty"]) == [20, 22]

    def test_list_value(self, cars):
        out = filter_rows(cars, model=["a", "c"])
        assert len(out) == 3

    def test_input_not_mutated(self, cars):
        out = filter_rows(cars, model="a")
        out["cty"] = 0
        assert cars["cty"].iloc[0] == 10


class TestGroupSummarize:
    def test_means(self, cars):
        out = group_summarize(cars, "model", cty=("cty", "mean"), n=("hwy", "size"))
        assert list(out.columns) == ["model", "cty", "n"]
        assert list(out["cty"]) == [11.0, 21.0, 15.0]
        assert list(out["n"]) == [2, 2, 1]

    def test_callable(self, cars):
        out = group_summarize(cars, "model", spread=("hwy", lambda s: s.max() - s.min()))
        assert list(out["spread"]) == [2, 2, 0]

    def test_requires_aggregate(self, cars):
        with pytest.raises(ValueError, match="at least one"):
            group_summarize(cars, "model")

    def test_unknown_column(self, cars):
        with pytest.raises(ValueError):
            group_summarize(cars, "model", x=("nope", "mean"))


class TestTopN:
    def test_overall(self, cars):
        out = top_n(cars, 2, "hwy")
        assert list(out["hwy"]) == [32, 30]

    def test_per_group(self, cars):
        out = top_n(cars, 1, "hwy", by="model")
        assert sorted(out["hwy"]) == [22, 25, 32]

    def test_bad_n(self, cars):
        with pytest.raises(ValueError, match="n must be"):
            top_n(cars, 0, "hwy")


class TestReorderLevels:
    def test_ascending_by_mean(self, cars):
        out = reorder_levels(cars, "model", "hwy")
        assert list(out["model"].cat.categories) == ["a", "c", "b"]

    def test_descending(self, cars):
        out = reorder_levels(cars, "model", "hwy", descending=True)
        assert list(out["model"].cat.categories) == ["b", "c", "a"]


class TestPivotLonger:
    def test_shape_and_order(self, cars):
        out = pivot_longer(cars, "model", names_to="driving", values_to="mpg",
                           value_cols=["hwy", "cty"])
        assert len(out) == 10
        assert list(out.columns) == ["model", "driving", "mpg"]
        assert list(out["driving"].cat.categories) == ["hwy", "cty"]

    def test_default_value_cols(self, cars):
        out = pivot_longer(cars, "model")
        assert set(out["name"]) == {"cty", "hwy"}


class TestGeometry:
    def test_segment_frame_drops_missing(self):
        df = pd.DataFrame({"a": [1, 2], "b": [3, np.nan], "c": [0, 0], "d": [1, 1], "id": ["u", "v"]})
        out = segment_frame(df, "a", "b", "c", "d")
        assert len(out) == 1
        assert out.loc[0, "xend"] == 3
        assert out.loc[0, "id"] == "u"

    def test_close_single_polygon(self):
        df = pd.DataFrame({"px": [0, 1, 1], "py": [0, 0, 1]})
        out = close_polygons(df, "px", "py")
        assert list(out["x"]) == [0, 1, 1, 0]
        assert list(out["y"]) == [0, 0, 1, 0]

    def test_close_grouped_polygons(self):
        df = pd.DataFrame({"x": [0, 1, 1, 5, 6, 6], "y": [0, 0, 1, 5, 5, 6],
                           "id": ["a"] * 3 + ["b"] * 3})
        out = close_polygons(df, "x", "y", group="id")
        assert len(out) == 9
        assert np.isnan(out.loc[4, "x"])
        assert out.loc[3, "x"] == 0
        assert out.loc[8, "x"] == 5

    def test_ribbon_path(self):
        df = pd.DataFrame({"x": [2, 1, 3], "lo": [1, 0, 2], "hi": [3, 2, 4]})
        out = ribbon_path(df, "x", "lo", "hi")
        assert list(out["x"]) == [1, 2, 3, 3, 2, 1, 1]
        assert list(out["y"]) == [2, 3, 4, 2, 1, 0, 2]

    def test_ribbon_path_drops_missing(self):
        df = pd.DataFrame({"x": [1, 2], "lo": [0, np.nan], "hi": [1, 2]})
        out = ribbon_path(df, "x", "lo", "hi")
        assert list(out["x"]) == [1, 1, 1]


class TestSignificance:
    def test_neg_log10(self):
        out = neg_log10([1.0, 0.01, 1e-8])
        np.testing.assert_allclose(out, [0.0, 2.0, 8.0])

    def test_neg_log10_zero_clamped(self):
        assert np.isfinite(neg_log10([0.0])[0])

    def test_classify_threshold(self):
        df = pd.DataFrame({"effect": [-2.0, 2.0, 2.0, 0.1], "p": [1e-9, 1e-9, 0.5, 1e-9]})
        out = classify_threshold(df, "effect", "p", 1.0, 5e-8)
        assert list(out) == ["Down", "Up", "Not significant", "Not significant"]
        assert list(out.cat.categories) == ["Down", "Not significant", "Up"]

    def test_threshold_inclusive(self):
        df = pd.DataFrame({"effect": [1.0], "p": [5e-8]})
        assert classify_threshold(df, "effect", "p", 1.0, 5e-8).iloc[0] == "Up"

    def test_highlight(self, cars):
        out = highlight(cars, "model", ["b"])
        assert list(out["highlighted"]) == [False, False, True, True, False]
        assert "highlighted" not in cars.columns
