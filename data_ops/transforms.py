"""
Relational reshaping helpers.

Each function takes a DataFrame (plus column names) and returns a new
DataFrame shaped the way a chart layer expects it. Inputs are never mutated.
"""

from typing import Callable, Iterable

import numpy as np
import pandas as pd


def check_columns(df: pd.DataFrame, columns: Iterable[str | None]) -> None:
    """Raise if any non-None column name is missing from *df*.

    Raises:
        ValueError: Listing the unknown column(s) and the available ones.
    """
    missing = [c for c in columns if c is not None and c not in df.columns]
    if missing:
        raise ValueError(
            f"Unknown column(s) {', '.join(repr(c) for c in missing)}. "
            f"Available: {', '.join(map(str, df.columns))}"
        )


def filter_rows(df: pd.DataFrame, **equals) -> pd.DataFrame:
    """Keep rows where every keyword column equals its value.

    A list/tuple/set value keeps rows whose column is any of the values.
    """
    check_columns(df, equals.keys())
    mask = pd.Series(True, index=df.index)
    for column, value in equals.items():
        if isinstance(value, (list, tuple, set)):
            mask &= df[column].isin(list(value))
        else:
            mask &= df[column] == value
    return df.loc[mask].copy()


def group_summarize(
    df: pd.DataFrame,
    by: str | list[str],
    **aggs: tuple[str, str | Callable],
) -> pd.DataFrame:
    """Group by *by* and compute named aggregates.

    Example:
        group_summarize(mpg, "model", cty=("cty", "mean"), hwy=("hwy", "mean"))

    Args:
        df: Input table.
        by: Grouping column(s).
        **aggs: ``output_name=(column, func)``; func is a pandas aggregation
            name or callable.

    Returns:
        One row per group, grouping columns first. Categorical groups keep
        only observed levels.

    Raises:
        ValueError: If no aggregates are given or columns are unknown.
    """
    if not aggs:
        raise ValueError("group_summarize requires at least one aggregate")
    keys = [by] if isinstance(by, str) else list(by)
    check_columns(df, keys + [col for col, _ in aggs.values()])
    out = df.groupby(keys, observed=True, sort=True).agg(**aggs)
    return out.reset_index()


def top_n(
    df: pd.DataFrame,
    n: int,
    column: str,
    by: str | None = None,
) -> pd.DataFrame:
    """Rows with the *n* largest values of *column* (optionally per group)."""
    check_columns(df, [column, by])
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    if by is None:
        return df.nlargest(n, column).reset_index(drop=True)
    return (
        df.sort_values(column, ascending=False)
        .groupby(by, observed=True, sort=False)
        .head(n)
        .reset_index(drop=True)
    )


def reorder_levels(
    df: pd.DataFrame,
    column: str,
    by: str,
    func: str | Callable = "mean",
    descending: bool = False,
) -> pd.DataFrame:
    """Turn *column* into an ordered categorical sorted by a summary of *by*.

    Categorical axes and discrete scales follow category order, so this
    controls the order dots appear along an axis.
    """
    check_columns(df, [column, by])
    summary = df.groupby(column, observed=True)[by].agg(func)
    order = summary.sort_values(ascending=not descending).index.tolist()
    out = df.copy()
    out[column] = pd.Categorical(out[column], categories=order, ordered=True)
    return out


def pivot_longer(
    df: pd.DataFrame,
    id_cols: str | list[str],
    names_to: str = "name",
    values_to: str = "value",
    value_cols: list[str] | None = None,
) -> pd.DataFrame:
    """Stack value columns into (name, value) pairs, one row per id × column.

    The resulting *names_to* column is categorical in *value_cols* order.
    """
    ids = [id_cols] if isinstance(id_cols, str) else list(id_cols)
    if value_cols is None:
        value_cols = [c for c in df.columns if c not in ids]
    check_columns(df, ids + value_cols)
    long = df.melt(id_vars=ids, value_vars=value_cols, var_name=names_to, value_name=values_to)
    long[names_to] = pd.Categorical(long[names_to], categories=value_cols, ordered=True)
    return long


def segment_frame(
    df: pd.DataFrame,
    x: str,
    xend: str,
    y: str,
    yend: str,
) -> pd.DataFrame:
    """Return segment endpoints as columns ``x, y, xend, yend``.

    Rows with a missing endpoint are dropped; any other columns are kept.
    """
    check_columns(df, [x, xend, y, yend])
    out = df.assign(
        x=df[x].values,
        y=df[y].values,
        xend=df[xend].values,
        yend=df[yend].values,
    )
    return out.dropna(subset=["x", "y", "xend", "yend"]).reset_index(drop=True)


def close_polygons(
    df: pd.DataFrame,
    x: str,
    y: str,
    group: str | None = None,
) -> pd.DataFrame:
    """Close each polygon ring and separate groups with an all-NaN row.

    Plotly draws one filled trace across several rings when consecutive rings
    are separated by a missing point. Each ring's first vertex is appended at
    its end so the outline is closed.

    Returns:
        DataFrame with columns ``x``, ``y`` (and *group* if given).
    """
    check_columns(df, [x, y, group])
    if group is None:
        groups = [(None, df)]
    else:
        groups = list(df.groupby(group, observed=True, sort=False))

    frames = []
    for i, (key, sub) in enumerate(groups):
        ring = sub[[x, y]].rename(columns={x: "x", y: "y"}).reset_index(drop=True)
        if len(ring) == 0:
            continue
        ring = pd.concat([ring, ring.iloc[[0]]], ignore_index=True)
        if group is not None:
            ring[group] = key
        frames.append(ring)
        if i < len(groups) - 1:
            gap = pd.DataFrame({"x": [np.nan], "y": [np.nan]})
            if group is not None:
                gap[group] = key
            frames.append(gap)
    if not frames:
        return pd.DataFrame(columns=["x", "y"] + ([group] if group else []))
    return pd.concat(frames, ignore_index=True)


def ribbon_path(
    df: pd.DataFrame,
    x: str,
    ymin: str,
    ymax: str,
) -> pd.DataFrame:
    """Outline of a ribbon: along *ymax* with ascending x, back along *ymin*.

    Rows missing any of the three values are dropped.

    Returns:
        DataFrame with columns ``x`` and ``y`` forming a closed outline.
    """
    check_columns(df, [x, ymin, ymax])
    sub = df[[x, ymin, ymax]].dropna().sort_values(x, kind="mergesort")
    upper = pd.DataFrame({"x": sub[x].values, "y": sub[ymax].values})
    lower = pd.DataFrame({"x": sub[x].values[::-1], "y": sub[ymin].values[::-1]})
    path = pd.concat([upper, lower], ignore_index=True)
    if len(path):
        path = pd.concat([path, path.iloc[[0]]], ignore_index=True)
    return path


def neg_log10(values, floor: float = 1e-300) -> np.ndarray:
    """-log10 of p-values; zeros and underflows are clamped to *floor*."""
    arr = np.asarray(values, dtype=np.float64)
    return -np.log10(np.clip(arr, floor, None))


def highlight(
    df: pd.DataFrame,
    column: str,
    values: Iterable,
    flag: str = "highlighted",
) -> pd.DataFrame:
    """Add a boolean *flag* column marking rows whose *column* is in *values*."""
    check_columns(df, [column])
    out = df.copy()
    out[flag] = out[column].isin(list(values))
    return out


def classify_threshold(
    df: pd.DataFrame,
    effect: str,
    pvalue: str,
    effect_threshold: float,
    p_threshold: float,
    labels: tuple[str, str, str] = ("Down", "Not significant", "Up"),
) -> pd.Series:
    """Label each row as down/unchanged/up by effect size and p-value cut-offs.

    A row is significant when ``p <= p_threshold`` and
    ``|effect| >= effect_threshold``; its sign picks the down or up label.
    The result is an ordered categorical in (down, unchanged, up) order.
    """
    check_columns(df, [effect, pvalue])
    down, neutral, up = labels
    sig = (df[pvalue] <= p_threshold) & (df[effect].abs() >= effect_threshold)
    out = np.where(sig & (df[effect] > 0), up, np.where(sig, down, neutral))
    return pd.Series(
        pd.Categorical(out, categories=[down, neutral, up], ordered=True),
        index=df.index,
        name="significance",
    )
