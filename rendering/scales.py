"""
Aesthetic scales: map data values onto colors, symbols, line dashes and sizes.

Discrete scales assign palette entries to levels in level order (categorical
order if the column is categorical, sorted unique values otherwise). A user
override may be a palette name, a list (cycled), or a dict keyed by level;
levels the dict does not name fall back to the defaults.

Continuous scales cover numeric columns: a colorscale with a colorbar, or a
linear interpolation into a size range.
"""

from __future__ import annotations

from typing import Any, Iterable

import numpy as np
import pandas as pd
import plotly.colors as pc
from plotly.exceptions import PlotlyError

import config

# Default colour sequence (golden-ratio HSL spacing, pre-computed hex)
_DEFAULT_COLORS = [
    "#cc6633",  # hue=0.000
    "#55cc33",  # hue=0.618
    "#3384cc",  # hue=0.236
    "#a833cc",  # hue=0.854
    "#33cc98",  # hue=0.472
    "#cc3340",  # hue=0.090
    "#33cccc",  # hue=0.708
    "#ccbe33",  # hue=0.326
]

_DEFAULT_SYMBOLS = [
    "circle", "square", "diamond", "cross", "x",
    "triangle-up", "triangle-down", "pentagon", "star", "hexagon",
]

_DEFAULT_LINETYPES = ["solid", "dot", "dash", "longdash", "dashdot", "longdashdot"]

DEFAULT_SIZE_RANGE = (10.0, 100.0)

DISCRETE_AESTHETICS = ("color", "symbol", "linetype")


# ---------------------------------------------------------------------------
# ColorState: stable label-to-color assignment
# ---------------------------------------------------------------------------

class ColorState:
    """Tracks label-to-color assignments for stable coloring across layers."""

    def __init__(
        self,
        label_colors: dict[str, str] | None = None,
        color_index: int = 0,
        palette: list[str] | None = None,
    ):
        self.label_colors: dict[str, str] = dict(label_colors or {})
        self.color_index: int = color_index
        self.palette: list[str] = list(palette or resolve_palette(None))

    def next_color(self, label: str) -> str:
        """Return a stable colour for *label*, assigning a new one if unseen."""
        if label in self.label_colors:
            return self.label_colors[label]
        color = self.palette[self.color_index % len(self.palette)]
        self.color_index += 1
        self.label_colors[label] = color
        return color


# ---------------------------------------------------------------------------
# Palettes and levels
# ---------------------------------------------------------------------------

def _qualitative(name: str) -> list[str] | None:
    for attr in dir(pc.qualitative):
        if attr.startswith("_"):
            continue
        if attr.lower() == name.lower():
            value = getattr(pc.qualitative, attr)
            if isinstance(value, list):
                return list(value)
    return None


def resolve_palette(palette: Any, n: int | None = None) -> list[str]:
    """Turn a palette spec into a list of CSS colors.

    Args:
        palette: None (configured default or the built-in palette), a list of
            colors, a Plotly qualitative palette name (``"Set1"``, ``"Dark2"``,
            ``"Plotly"``...), or a continuous colorscale name (``"Viridis"``)
            which is sampled at *n* evenly spaced points.
        n: Number of colors wanted; only used when sampling a colorscale.

    Raises:
        ValueError: If the name is neither a qualitative palette nor a colorscale.
    """
    if palette is None:
        palette = config.DEFAULT_PALETTE
        if palette is None:
            return list(_DEFAULT_COLORS)
    if isinstance(palette, (list, tuple)):
        if not palette:
            raise ValueError("Palette list must not be empty")
        return [str(c) for c in palette]
    if not isinstance(palette, str):
        raise ValueError(f"Unsupported palette spec: {palette!r}")

    qual = _qualitative(palette)
    if qual is not None:
        return qual
    try:
        scale = pc.get_colorscale(palette)
    except PlotlyError as e:
        raise ValueError(f"Unknown palette or colorscale '{palette}'") from e
    count = max(n or 2, 2)
    if n == 1:
        return pc.sample_colorscale(scale, [0.5])
    return pc.sample_colorscale(scale, count)


def is_discrete(values: pd.Series) -> bool:
    """Categorical, string, object and boolean columns are discrete; numbers are not."""
    dtype = values.dtype
    if isinstance(dtype, pd.CategoricalDtype):
        return True
    return not (pd.api.types.is_numeric_dtype(dtype) and not pd.api.types.is_bool_dtype(dtype))


def level_order(values: pd.Series) -> list:
    """Levels of a discrete column in display order.

    Categorical columns use their category order (levels that never occur are
    dropped); other columns use sorted unique non-null values, or first
    appearance when the values cannot be compared.
    """
    if isinstance(values.dtype, pd.CategoricalDtype):
        present = set(values.dropna().unique())
        return [c for c in values.cat.categories if c in present]
    uniques = pd.unique(values.dropna())
    try:
        return sorted(uniques.tolist())
    except TypeError:
        return uniques.tolist()


def _merge_levels(current: list, new: Iterable) -> list:
    out = list(current)
    seen = set(out)
    for lvl in new:
        if lvl not in seen:
            out.append(lvl)
            seen.add(lvl)
    return out


# ---------------------------------------------------------------------------
# Discrete scales
# ---------------------------------------------------------------------------

class DiscreteScale:
    """Assigns one aesthetic value per level, in level order.

    Args:
        aesthetic: ``"color"``, ``"symbol"`` or ``"linetype"``.
        values: Optional override: a list (cycled over levels), a dict
            ``level -> value``, or for colors a palette name.
    """

    def __init__(self, aesthetic: str, values: Any = None):
        if aesthetic not in DISCRETE_AESTHETICS:
            raise ValueError(
                f"Unknown discrete aesthetic '{aesthetic}'. "
                f"Must be one of: {', '.join(DISCRETE_AESTHETICS)}"
            )
        self.aesthetic = aesthetic
        self.values = values
        self.levels: list = []
        self._mapping: dict | None = None

    def train(self, values: pd.Series) -> None:
        """Add the levels of *values* (after any already seen)."""
        self.levels = _merge_levels(self.levels, level_order(values))
        self._mapping = None

    def _defaults(self, n: int) -> list[str]:
        if self.aesthetic == "symbol":
            return list(_DEFAULT_SYMBOLS)
        if self.aesthetic == "linetype":
            return list(_DEFAULT_LINETYPES)
        return resolve_palette(None, n)

    def mapping(self) -> dict:
        """Return the full ``level -> value`` mapping for the trained levels."""
        if self._mapping is not None:
            return self._mapping
        n = len(self.levels)
        if isinstance(self.values, dict):
            explicit = {k: v for k, v in self.values.items()}
            # String keys also match numeric levels (e.g. {"4": "red"} for cyl == 4)
            for lvl in self.levels:
                if lvl not in explicit and str(lvl) in explicit:
                    explicit[lvl] = explicit[str(lvl)]
            defaults = self._defaults(n)
            mapping = {}
            fallback = 0
            for lvl in self.levels:
                if lvl in explicit:
                    mapping[lvl] = explicit[lvl]
                else:
                    mapping[lvl] = defaults[fallback % len(defaults)]
                    fallback += 1
        else:
            if self.values is None:
                palette = self._defaults(n)
            elif self.aesthetic == "color":
                palette = resolve_palette(self.values, n)
            elif isinstance(self.values, str):
                palette = [self.values]
            else:
                palette = list(self.values)
                if not palette:
                    raise ValueError(f"Empty value list for {self.aesthetic} scale")
            mapping = {lvl: palette[i % len(palette)] for i, lvl in enumerate(self.levels)}
        self._mapping = mapping
        return mapping

    def map(self, level) -> str:
        mapping = self.mapping()
        if level not in mapping:
            raise KeyError(f"Level {level!r} was not trained on the {self.aesthetic} scale")
        return mapping[level]


# ---------------------------------------------------------------------------
# Continuous scales
# ---------------------------------------------------------------------------

class ContinuousColorScale:
    """Numeric → colorscale mapping rendered with a colorbar."""

    def __init__(
        self,
        colorscale: Any = None,
        cmin: float | None = None,
        cmax: float | None = None,
        title: str | None = None,
    ):
        self.colorscale = colorscale or config.DEFAULT_COLORSCALE
        self.cmin = cmin
        self.cmax = cmax
        self.title = title
        self._fixed = (cmin is not None, cmax is not None)

    def train(self, values: pd.Series) -> None:
        arr = pd.to_numeric(values, errors="coerce").to_numpy(dtype=np.float64)
        arr = arr[np.isfinite(arr)]
        if arr.size == 0:
            return
        lo, hi = float(arr.min()), float(arr.max())
        if not self._fixed[0]:
            self.cmin = lo if self.cmin is None else min(self.cmin, lo)
        if not self._fixed[1]:
            self.cmax = hi if self.cmax is None else max(self.cmax, hi)

    def marker_kwargs(self, values: pd.Series, showscale: bool = True) -> dict:
        """Marker properties for a trace colored by *values*."""
        colors = [None if pd.isna(v) else float(v) for v in values]
        colorbar: dict = {}
        if self.title:
            colorbar["title"] = {"text": self.title}
        return {
            "color": colors,
            "colorscale": self.colorscale,
            "cmin": self.cmin,
            "cmax": self.cmax,
            "showscale": showscale,
            "colorbar": colorbar,
        }


class SizeScale:
    """Linear interpolation of a numeric column into a marker size range.

    A degenerate domain (all values equal) maps everything to the midpoint;
    missing values map to the smallest size. Discrete columns get evenly
    spaced sizes in level order.
    """

    def __init__(self, size_range: tuple[float, float] | list[float] | None = None):
        size_range = tuple(size_range) if size_range is not None else DEFAULT_SIZE_RANGE
        if len(size_range) != 2 or size_range[0] > size_range[1]:
            raise ValueError(f"sizes must be (min, max) with min <= max, got {size_range!r}")
        self.range = (float(size_range[0]), float(size_range[1]))
        self.vmin: float | None = None
        self.vmax: float | None = None
        self.levels: list = []
        self.discrete = False

    def train(self, values: pd.Series) -> None:
        if is_discrete(values):
            self.discrete = True
            self.levels = _merge_levels(self.levels, level_order(values))
            return
        arr = pd.to_numeric(values, errors="coerce").to_numpy(dtype=np.float64)
        arr = arr[np.isfinite(arr)]
        if arr.size == 0:
            return
        lo, hi = float(arr.min()), float(arr.max())
        self.vmin = lo if self.vmin is None else min(self.vmin, lo)
        self.vmax = hi if self.vmax is None else max(self.vmax, hi)

    def map(self, values: pd.Series) -> list[float]:
        smin, smax = self.range
        if self.discrete:
            n = len(self.levels)
            steps = {
                lvl: (smin + smax) / 2 if n == 1 else smin + (smax - smin) * i / (n - 1)
                for i, lvl in enumerate(self.levels)
            }
            return [steps.get(v, smin) for v in values]
        arr = pd.to_numeric(values, errors="coerce").to_numpy(dtype=np.float64)
        if self.vmin is None or self.vmax is None:
            return [smin] * len(arr)
        if self.vmax == self.vmin:
            out = np.full(arr.shape, (smin + smax) / 2)
        else:
            out = smin + (arr - self.vmin) / (self.vmax - self.vmin) * (smax - smin)
        out = np.where(np.isfinite(arr), out, smin)
        return [float(v) for v in out]
