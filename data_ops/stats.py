"""
Statistical data sources for chart layers.

These wrap numpy least squares and scipy.stats so a recipe can overlay a
fitted line, a confidence ribbon, coefficient estimates or a density curve.
They return plain DataFrames; none of them draw anything.
"""

import numpy as np
import pandas as pd
from scipy import stats

from .transforms import check_columns


def _design_matrix(df: pd.DataFrame, terms: list[str]) -> np.ndarray:
    return np.column_stack([np.ones(len(df))] + [df[t].to_numpy(dtype=np.float64) for t in terms])


def linear_fit(
    df: pd.DataFrame,
    x: str,
    y: str,
    level: float = 0.95,
    n: int | None = None,
) -> pd.DataFrame:
    """Simple linear regression of *y* on *x* with a confidence band.

    Args:
        df: Input table; rows with missing x or y are dropped.
        x: Predictor column.
        y: Response column.
        level: Confidence level of the band around the fitted mean.
        n: If given, evaluate the fit on *n* evenly spaced x values instead
            of the observed ones.

    Returns:
        DataFrame with columns x, fitted, se, lower, upper, sorted by x.

    Raises:
        ValueError: Fewer than three complete rows, or a constant predictor.
    """
    check_columns(df, [x, y])
    if not 0 < level < 1:
        raise ValueError(f"level must be in (0, 1), got {level}")
    sub = df[[x, y]].dropna()
    if len(sub) < 3:
        raise ValueError(f"linear_fit needs at least 3 complete rows, got {len(sub)}")
    xs = sub[x].to_numpy(dtype=np.float64)
    ys = sub[y].to_numpy(dtype=np.float64)
    if np.ptp(xs) == 0:
        raise ValueError(f"Predictor '{x}' is constant; cannot fit a slope")

    X = _design_matrix(sub, [x])
    beta, _, _, _ = np.linalg.lstsq(X, ys, rcond=None)
    resid = ys - X @ beta
    dof = len(ys) - 2
    sigma2 = float(resid @ resid) / dof
    xtx_inv = np.linalg.inv(X.T @ X)

    grid = np.linspace(xs.min(), xs.max(), n) if n else np.sort(xs)
    G = np.column_stack([np.ones(len(grid)), grid])
    fitted = G @ beta
    se = np.sqrt(np.einsum("ij,jk,ik->i", G, xtx_inv, G) * sigma2)
    tq = stats.t.ppf(0.5 + level / 2, dof)

    return pd.DataFrame({
        "x": grid,
        "fitted": fitted,
        "se": se,
        "lower": fitted - tq * se,
        "upper": fitted + tq * se,
    })


def lm_coefficients(
    df: pd.DataFrame,
    response: str,
    terms: list[str],
    level: float = 0.95,
) -> pd.DataFrame:
    """Ordinary least squares coefficient table.

    Returns:
        One row per coefficient (``(Intercept)`` first) with columns term,
        estimate, std_error, statistic, p_value, conf_low, conf_high.
    """
    check_columns(df, [response] + list(terms))
    sub = df[[response] + list(terms)].dropna()
    p = len(terms) + 1
    if len(sub) <= p:
        raise ValueError(
            f"lm_coefficients needs more than {p} complete rows, got {len(sub)}"
        )
    X = _design_matrix(sub, list(terms))
    ys = sub[response].to_numpy(dtype=np.float64)
    beta, _, rank, _ = np.linalg.lstsq(X, ys, rcond=None)
    if rank < p:
        raise ValueError("Design matrix is rank deficient; drop collinear terms")
    resid = ys - X @ beta
    dof = len(ys) - p
    sigma2 = float(resid @ resid) / dof
    se = np.sqrt(np.diag(np.linalg.inv(X.T @ X)) * sigma2)
    tstat = beta / se
    tq = stats.t.ppf(0.5 + level / 2, dof)

    return pd.DataFrame({
        "term": ["(Intercept)"] + list(terms),
        "estimate": beta,
        "std_error": se,
        "statistic": tstat,
        "p_value": 2 * stats.t.sf(np.abs(tstat), dof),
        "conf_low": beta - tq * se,
        "conf_high": beta + tq * se,
    })


def density(values, n: int = 512, bw_method=None) -> pd.DataFrame:
    """Gaussian kernel density estimate on an evenly spaced grid.

    The grid extends three bandwidths past the data range on both sides.

    Returns:
        DataFrame with columns x, density.

    Raises:
        ValueError: Fewer than two finite values or zero variance.
    """
    arr = np.asarray(values, dtype=np.float64)
    arr = arr[np.isfinite(arr)]
    if arr.size < 2:
        raise ValueError(f"density needs at least 2 finite values, got {arr.size}")
    if np.ptp(arr) == 0:
        raise ValueError("density needs values with non-zero spread")
    kde = stats.gaussian_kde(arr, bw_method=bw_method)
    bw = float(np.sqrt(kde.covariance[0, 0]))
    grid = np.linspace(arr.min() - 3 * bw, arr.max() + 3 * bw, n)
    return pd.DataFrame({"x": grid, "density": kde(grid)})


def density_by_group(
    df: pd.DataFrame,
    value: str,
    group: str,
    n: int = 512,
    bw_method=None,
) -> pd.DataFrame:
    """Per-group density curves stacked into one long table.

    Groups with too few values for a density estimate are skipped. The
    *group* column keeps its categorical order when it has one.
    """
    check_columns(df, [value, group])
    frames = []
    for key, sub in df.groupby(group, observed=True, sort=True):
        try:
            dens = density(sub[value], n=n, bw_method=bw_method)
        except ValueError:
            continue
        dens[group] = key
        frames.append(dens)
    if not frames:
        return pd.DataFrame(columns=["x", "density", group])
    out = pd.concat(frames, ignore_index=True)
    if isinstance(df[group].dtype, pd.CategoricalDtype):
        out[group] = pd.Categorical(
            out[group],
            categories=df[group].cat.categories,
            ordered=df[group].cat.ordered,
        )
    return out
