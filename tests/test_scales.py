"""Tests for rendering.scales: palettes, discrete and continuous scales."""

import pandas as pd
import pytest

from rendering.scales import (
    ColorState,
    ContinuousColorScale,
    DiscreteScale,
    SizeScale,
    is_discrete,
    level_order,
    resolve_palette,
)


class TestColorState:
    def test_stable_assignment(self):
        cs = ColorState(palette=["red", "green"])
        assert cs.next_color("a") == "red"
        assert cs.next_color("b") == "green"
        assert cs.next_color("a") == "red"

    def test_cycles(self):
        cs = ColorState(palette=["red", "green"])
        colors = [cs.next_color(str(i)) for i in range(3)]
        assert colors == ["red", "green", "red"]


class TestResolvePalette:
    def test_list(self):
        assert resolve_palette(["red", "blue"]) == ["red", "blue"]

    def test_qualitative_name_case_insensitive(self):
        assert resolve_palette("set1")[0] == resolve_palette("Set1")[0]
        assert len(resolve_palette("Dark2")) == 8

    def test_colorscale_sampled(self):
        colors = resolve_palette("Viridis", 4)
        assert len(colors) == 4
        assert colors[0] != colors[-1]

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown palette"):
            resolve_palette("NotAPalette")

    def test_empty_list(self):
        with pytest.raises(ValueError):
            resolve_palette([])


class TestLevels:
    def test_is_discrete(self):
        assert is_discrete(pd.Series(["a", "b"]))
        assert is_discrete(pd.Series([True, False]))
        assert is_discrete(pd.Series(pd.Categorical([1, 2])))
        assert not is_discrete(pd.Series([1.0, 2.0]))
        assert not is_discrete(pd.Series([1, 2]))

    def test_sorted_unique(self):
        assert level_order(pd.Series(["b", "a", "b", None])) == ["a", "b"]

    def test_categorical_order_drops_unused(self):
        s = pd.Series(pd.Categorical(["x", "z"], categories=["z", "y", "x"]))
        assert level_order(s) == ["z", "x"]


class TestDiscreteScale:
    def test_default_symbols_in_level_order(self):
        scale = DiscreteScale("symbol")
        scale.train(pd.Series(["b", "a"]))
        assert scale.map("a") == "circle"
        assert scale.map("b") == "square"

    def test_trained_across_layers(self):
        scale = DiscreteScale("color", ["red", "green", "blue"])
        scale.train(pd.Series(["b", "a"]))
        scale.train(pd.Series(["c", "a"]))
        assert scale.levels == ["a", "b", "c"]
        assert scale.map("c") == "blue"

    def test_list_cycles(self):
        scale = DiscreteScale("linetype", ["solid", "dash"])
        scale.train(pd.Series(["a", "b", "c"]))
        assert scale.map("c") == "solid"

    def test_dict_override_fallback(self):
        scale = DiscreteScale("linetype", {"b": "dot"})
        scale.train(pd.Series(["a", "b", "c"]))
        assert scale.map("b") == "dot"
        assert scale.map("a") == "solid"
        assert scale.map("c") == "dot"  # second default

    def test_string_keys_match_numeric_levels(self):
        scale = DiscreteScale("color", {"4": "red", "8": "blue"})
        scale.train(pd.Series([4, 6, 8]))
        assert scale.map(4) == "red"
        assert scale.map(8) == "blue"

    def test_palette_name(self):
        scale = DiscreteScale("color", "Set1")
        scale.train(pd.Series(["a", "b"]))
        assert scale.map("a") == resolve_palette("Set1")[0]

    def test_untrained_level(self):
        scale = DiscreteScale("color")
        scale.train(pd.Series(["a"]))
        with pytest.raises(KeyError, match="not trained"):
            scale.map("zzz")

    def test_unknown_aesthetic(self):
        with pytest.raises(ValueError, match="Unknown discrete aesthetic"):
            DiscreteScale("alpha")


class TestContinuousColorScale:
    def test_train_expands_domain(self):
        scale = ContinuousColorScale("Viridis")
        scale.train(pd.Series([1.0, 5.0]))
        scale.train(pd.Series([-2.0, 3.0, None]))
        assert (scale.cmin, scale.cmax) == (-2.0, 5.0)

    def test_fixed_limits(self):
        scale = ContinuousColorScale("Viridis", cmin=0.0)
        scale.train(pd.Series([3.0, 5.0]))
        assert (scale.cmin, scale.cmax) == (0.0, 5.0)

    def test_marker_kwargs(self):
        scale = ContinuousColorScale("Viridis", title="hp")
        scale.train(pd.Series([1.0, 2.0]))
        kw = scale.marker_kwargs(pd.Series([1.0, None]), showscale=False)
        assert kw["color"] == [1.0, None]
        assert kw["showscale"] is False
        assert kw["colorbar"] == {"title": {"text": "hp"}}


class TestSizeScale:
    def test_linear(self):
        scale = SizeScale((10, 30))
        scale.train(pd.Series([0.0, 10.0]))
        assert scale.map(pd.Series([0.0, 5.0, 10.0])) == [10.0, 20.0, 30.0]

    def test_degenerate_domain(self):
        scale = SizeScale((10, 30))
        scale.train(pd.Series([4.0, 4.0]))
        assert scale.map(pd.Series([4.0])) == [20.0]

    def test_missing_maps_to_min(self):
        scale = SizeScale((10, 30))
        scale.train(pd.Series([0.0, 1.0]))
        assert scale.map(pd.Series([None, 1.0])) == [10.0, 30.0]

    def test_discrete_levels(self):
        scale = SizeScale((10, 30))
        scale.train(pd.Series(["s", "m", "l"]))
        # sorted levels: l, m, s
        assert scale.map(["l", "m", "s"]) == [10.0, 20.0, 30.0]

    def test_invalid_range(self):
        with pytest.raises(ValueError):
            SizeScale((30, 10))
