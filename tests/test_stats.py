"""Tests for data_ops.stats: fits, coefficients and densities."""

import numpy as np
import pandas as pd
import pytest

from data_ops.stats import density, density_by_group, linear_fit, lm_coefficients


@pytest.fixture
def line_df():
    rng = np.random.default_rng(0)
    x = np.linspace(0, 10, 50)
    return pd.DataFrame({"x": x, "y": 2.0 * x + 1.0 + rng.normal(0, 0.5, 50)})


class TestLinearFit:
    def test_recovers_slope(self, line_df):
        fit = linear_fit(line_df, "x", "y", n=2)
        slope = (fit["fitted"].iloc[1] - fit["fitted"].iloc[0]) / (fit["x"].iloc[1] - fit["x"].iloc[0])
        assert slope == pytest.approx(2.0, abs=0.1)

    def test_columns_and_band(self, line_df):
        fit = linear_fit(line_df, "x", "y")
        assert list(fit.columns) == ["x", "fitted", "se", "lower", "upper"]
        assert len(fit) == 50
        assert (fit["lower"] < fit["fitted"]).all()
        assert (fit["upper"] > fit["fitted"]).all()
        assert fit["x"].is_monotonic_increasing

    def test_wider_band_for_higher_level(self, line_df):
        narrow = linear_fit(line_df, "x", "y", level=0.8)
        wide = linear_fit(line_df, "x", "y", level=0.99)
        assert ((wide["upper"] - wide["lower"]) > (narrow["upper"] - narrow["lower"])).all()

    def test_missing_rows_dropped(self, line_df):
        line_df.loc[0, "y"] = np.nan
        assert len(linear_fit(line_df, "x", "y")) == 49

    def test_too_few_rows(self):
        df = pd.DataFrame({"x": [1.0, 2.0], "y": [1.0, 2.0]})
        with pytest.raises(ValueError, match="at least 3"):
            linear_fit(df, "x", "y")

    def test_constant_predictor(self):
        df = pd.DataFrame({"x": [1.0, 1.0, 1.0], "y": [1.0, 2.0, 3.0]})
        with pytest.raises(ValueError, match="constant"):
            linear_fit(df, "x", "y")

    def test_bad_level(self, line_df):
        with pytest.raises(ValueError, match="level"):
            linear_fit(line_df, "x", "y", level=1.5)


class TestLmCoefficients:
    def test_table(self, line_df):
        coefs = lm_coefficients(line_df, "y", ["x"])
        assert list(coefs["term"]) == ["(Intercept)", "x"]
        slope = coefs.set_index("term").loc["x"]
        assert slope["estimate"] == pytest.approx(2.0, abs=0.1)
        assert slope["conf_low"] < slope["estimate"] < slope["conf_high"]
        assert slope["p_value"] < 1e-10

    def test_rank_deficient(self, line_df):
        line_df["x2"] = line_df["x"] * 2
        with pytest.raises(ValueError, match="rank deficient"):
            lm_coefficients(line_df, "y", ["x", "x2"])

    def test_too_few_rows(self):
        df = pd.DataFrame({"y": [1.0, 2.0], "x": [0.0, 1.0]})
        with pytest.raises(ValueError, match="more than 2"):
            lm_coefficients(df, "y", ["x"])


class TestDensity:
    def test_integrates_to_one(self):
        rng = np.random.default_rng(1)
        dens = density(rng.normal(size=500))
        step = dens["x"].iloc[1] - dens["x"].iloc[0]
        area = dens["density"].sum() * step
        assert area == pytest.approx(1.0, abs=0.02)
        assert len(dens) == 512

    def test_ignores_nan(self):
        dens = density([1.0, 2.0, np.nan, 3.0], n=16)
        assert len(dens) == 16
        assert np.isfinite(dens["density"]).all()

    def test_needs_spread(self):
        with pytest.raises(ValueError, match="spread"):
            density([1.0, 1.0, 1.0])

    def test_needs_two_values(self):
        with pytest.raises(ValueError, match="at least 2"):
            density([1.0])

    def test_by_group_keeps_category_order(self):
        df = pd.DataFrame({
            "v": [1.0, 2.0, 3.0, 4.0, 5.0, 9.0],
            "g": pd.Categorical(["hi", "hi", "hi", "lo", "lo", "one"], categories=["lo", "hi", "one"]),
        })
        out = density_by_group(df, "v", "g", n=8)
        # "one" has a single value and is skipped
        assert set(out["g"]) == {"lo", "hi"}
        assert list(out["g"].cat.categories) == ["lo", "hi", "one"]
        assert len(out) == 16
