"""
Built-in sample tables used by the chart recipes.

Every loader is deterministic (fixed numpy seed) so that rendered recipes and
tests are reproducible. Schemas follow the classic teaching datasets the
recipes are written against; apart from ``mtcars`` the values are synthetic.
"""

from pathlib import Path
from typing import Callable

import numpy as np
import pandas as pd
from scipy import stats

_SEED = 20240101


# ---------------------------------------------------------------------------
# mpg: fuel economy of popular car models
# ---------------------------------------------------------------------------

# (manufacturer, model, class, drv, typical displacements)
_MPG_MODELS = [
    ("audi", "a4", "compact", "f", [1.8, 2.0, 2.8, 3.1]),
    ("audi", "a4 quattro", "compact", "4", [1.8, 2.0, 2.8, 3.1]),
    ("audi", "a6 quattro", "midsize", "4", [2.8, 3.1, 4.2]),
    ("chevrolet", "c1500 suburban 2wd", "suv", "r", [5.3, 5.7, 6.0]),
    ("chevrolet", "corvette", "2seater", "r", [5.7, 6.2, 7.0]),
    ("chevrolet", "k1500 tahoe 4wd", "suv", "4", [5.3, 5.7, 6.5]),
    ("chevrolet", "malibu", "midsize", "f", [2.4, 3.1, 3.5, 3.6]),
    ("dodge", "caravan 2wd", "minivan", "f", [2.4, 3.0, 3.3, 3.8, 4.0]),
    ("dodge", "dakota pickup 4wd", "pickup", "4", [3.7, 3.9, 4.7, 5.2]),
    ("dodge", "durango 4wd", "suv", "4", [3.9, 4.7, 5.2, 5.7]),
    ("dodge", "ram 1500 pickup 4wd", "pickup", "4", [4.7, 5.2, 5.7, 5.9]),
    ("ford", "expedition 2wd", "suv", "r", [4.6, 5.4]),
    ("ford", "explorer 4wd", "suv", "4", [4.0, 4.6, 5.0]),
    ("ford", "f150 pickup 4wd", "pickup", "4", [4.2, 4.6, 5.4]),
    ("ford", "mustang", "subcompact", "r", [3.8, 4.0, 4.6, 5.4]),
    ("honda", "civic", "subcompact", "f", [1.6, 1.8, 2.0]),
    ("hyundai", "sonata", "midsize", "f", [2.4, 2.5, 3.3]),
    ("hyundai", "tiburon", "subcompact", "f", [2.0, 2.7]),
    ("jeep", "grand cherokee 4wd", "suv", "4", [3.0, 3.7, 4.0, 4.7, 5.7, 6.1]),
    ("land rover", "range rover", "suv", "4", [4.0, 4.2, 4.4, 4.6]),
    ("lincoln", "navigator 2wd", "suv", "r", [5.4]),
    ("mercury", "mountaineer 4wd", "suv", "4", [4.0, 4.6]),
    ("nissan", "altima", "midsize", "f", [2.4, 2.5, 3.5]),
    ("nissan", "maxima", "midsize", "f", [3.0, 3.5]),
    ("nissan", "pathfinder 4wd", "suv", "4", [3.3, 4.0, 5.6]),
    ("pontiac", "grand prix", "midsize", "f", [3.1, 3.8, 5.3]),
    ("subaru", "forester awd", "suv", "4", [2.5]),
    ("subaru", "impreza awd", "subcompact", "4", [2.2, 2.5]),
    ("toyota", "4runner 4wd", "suv", "4", [2.7, 3.4, 4.0, 4.7]),
    ("toyota", "camry", "midsize", "f", [2.2, 2.4, 3.0, 3.3, 3.5]),
    ("toyota", "camry solara", "compact", "f", [2.2, 2.4, 3.0, 3.3]),
    ("toyota", "corolla", "compact", "f", [1.8]),
    ("toyota", "land cruiser wagon 4wd", "suv", "4", [4.7, 5.7]),
    ("toyota", "toyota tacoma 4wd", "pickup", "4", [2.7, 3.4, 4.0]),
    ("volkswagen", "gti", "compact", "f", [2.0, 2.8]),
    ("volkswagen", "jetta", "compact", "f", [1.9, 2.0, 2.5, 2.8]),
    ("volkswagen", "new beetle", "subcompact", "f", [1.9, 2.0, 2.5]),
    ("volkswagen", "passat", "midsize", "f", [1.8, 2.0, 2.8, 3.6]),
]

_CLASS_HWY_OFFSET = {
    "2seater": 2.0, "compact": 1.5, "midsize": 1.0, "minivan": -1.0,
    "pickup": -2.5, "subcompact": 2.0, "suv": -2.0,
}


def _cyl_for_displ(displ: float) -> int:
    if displ <= 2.6:
        return 4
    if displ <= 4.0:
        return 6
    return 8


def mpg() -> pd.DataFrame:
    """Fuel economy for 38 car models, 1999 and 2008 model years."""
    rng = np.random.default_rng(_SEED)
    rows = []
    for manufacturer, model, cls, drv, displs in _MPG_MODELS:
        n = int(rng.integers(4, 9))
        for _ in range(n):
            displ = float(rng.choice(displs))
            year = int(rng.choice([1999, 2008]))
            cyl = _cyl_for_displ(displ)
            hwy = 37.0 - 3.4 * displ + _CLASS_HWY_OFFSET[cls]
            hwy += 1.0 if year == 2008 else 0.0
            hwy += -1.5 if drv == "4" else 0.0
            hwy = int(round(max(12.0, hwy + rng.normal(0, 1.6))))
            cty = int(round(max(9.0, hwy * 0.72 + rng.normal(0, 0.8))))
            rows.append({
                "manufacturer": manufacturer,
                "model": model,
                "displ": displ,
                "year": year,
                "cyl": cyl,
                "trans": str(rng.choice(["auto(l4)", "auto(l5)", "manual(m5)", "manual(m6)", "auto(s6)"])),
                "drv": drv,
                "cty": cty,
                "hwy": hwy,
                "fl": str(rng.choice(["r", "p", "e", "d"], p=[0.7, 0.22, 0.05, 0.03])),
                "class": cls,
            })
    return pd.DataFrame(rows)


# ---------------------------------------------------------------------------
# mtcars: Motor Trend road tests (1974)
# ---------------------------------------------------------------------------

_MTCARS_COLUMNS = ["model", "mpg", "cyl", "disp", "hp", "drat", "wt", "qsec", "vs", "am", "gear", "carb"]

_MTCARS_ROWS = [
    ("Mazda RX4", 21.0, 6, 160.0, 110, 3.90, 2.620, 16.46, 0, 1, 4, 4),
    ("Mazda RX4 Wag", 21.0, 6, 160.0, 110, 3.90, 2.875, 17.02, 0, 1, 4, 4),
    ("Datsun 710", 22.8, 4, 108.0, 93, 3.85, 2.320, 18.61, 1, 1, 4, 1),
    ("Hornet 4 Drive", 21.4, 6, 258.0, 110, 3.08, 3.215, 19.44, 1, 0, 3, 1),
    ("Hornet Sportabout", 18.7, 8, 360.0, 175, 3.15, 3.440, 17.02, 0, 0, 3, 2),
    ("Valiant", 18.1, 6, 225.0, 105, 2.76, 3.460, 20.22, 1, 0, 3, 1),
    ("Duster 360", 14.3, 8, 360.0, 245, 3.21, 3.570, 15.84, 0, 0, 3, 4),
    ("Merc 240D", 24.4, 4, 146.7, 62, 3.69, 3.190, 20.00, 1, 0, 4, 2),
    ("Merc 230", 22.8, 4, 140.8, 95, 3.92, 3.150, 22.90, 1, 0, 4, 2),
    ("Merc 280", 19.2, 6, 167.6, 123, 3.92, 3.440, 18.30, 1, 0, 4, 4),
    ("Merc 280C", 17.8, 6, 167.6, 123, 3.92, 3.440, 18.90, 1, 0, 4, 4),
    ("Merc 450SE", 16.4, 8, 275.8, 180, 3.07, 4.070, 17.40, 0, 0, 3, 3),
    ("Merc 450SL", 17.3, 8, 275.8, 180, 3.07, 3.730, 17.60, 0, 0, 3, 3),
    ("Merc 450SLC", 15.2, 8, 275.8, 180, 3.07, 3.780, 18.00, 0, 0, 3, 3),
    ("Cadillac Fleetwood", 10.4, 8, 472.0, 205, 2.93, 5.250, 17.98, 0, 0, 3, 4),
    ("Lincoln Continental", 10.4, 8, 460.0, 215, 3.00, 5.424, 17.82, 0, 0, 3, 4),
    ("Chrysler Imperial", 14.7, 8, 440.0, 230, 3.23, 5.345, 17.42, 0, 0, 3, 4),
    ("Fiat 128", 32.4, 4, 78.7, 66, 4.08, 2.200, 19.47, 1, 1, 4, 1),
    ("Honda Civic", 30.4, 4, 75.7, 52, 4.93, 1.615, 18.52, 1, 1, 4, 2),
    ("Toyota Corolla", 33.9, 4, 71.1, 65, 4.22, 1.835, 19.90, 1, 1, 4, 1),
    ("Toyota Corona", 21.5, 4, 120.1, 97, 3.70, 2.465, 20.01, 1, 0, 3, 1),
    ("Dodge Challenger", 15.5, 8, 318.0, 150, 2.76, 3.520, 16.87, 0, 0, 3, 2),
    ("AMC Javelin", 15.2, 8, 304.0, 150, 3.15, 3.435, 17.30, 0, 0, 3, 2),
    ("Camaro Z28", 13.3, 8, 350.0, 245, 3.73, 3.840, 15.41, 0, 0, 3, 4),
    ("Pontiac Firebird", 19.2, 8, 400.0, 175, 3.08, 3.845, 17.05, 0, 0, 3, 2),
    ("Fiat X1-9", 27.3, 4, 79.0, 66, 4.08, 1.935, 18.90, 1, 1, 4, 1),
    ("Porsche 914-2", 26.0, 4, 120.3, 91, 4.43, 2.140, 16.70, 0, 1, 5, 2),
    ("Lotus Europa", 30.4, 4, 95.1, 113, 3.77, 1.513, 16.90, 1, 1, 5, 2),
    ("Ford Pantera L", 15.8, 8, 351.0, 264, 4.22, 3.170, 14.50, 0, 1, 5, 4),
    ("Ferrari Dino", 19.7, 6, 145.0, 175, 3.62, 2.770, 15.50, 0, 1, 5, 6),
    ("Maserati Bora", 15.0, 8, 301.0, 335, 3.54, 3.570, 14.60, 0, 1, 5, 8),
    ("Volvo 142E", 21.4, 4, 121.0, 109, 4.11, 2.780, 18.60, 1, 1, 4, 2),
]


def mtcars() -> pd.DataFrame:
    """The 32-row Motor Trend road test table."""
    return pd.DataFrame(_MTCARS_ROWS, columns=_MTCARS_COLUMNS)


# ---------------------------------------------------------------------------
# economics: monthly US economic time series
# ---------------------------------------------------------------------------

def economics() -> pd.DataFrame:
    """Monthly economic indicators, July 1967 through April 2015."""
    rng = np.random.default_rng(_SEED + 1)
    dates = pd.date_range("1967-07-01", "2015-04-01", freq="MS")
    n = len(dates)
    t = np.arange(n) / 12.0

    pop = 198_712 + 2_140 * t + rng.normal(0, 60, n).cumsum() * 0.05
    pce = 507.4 * np.exp(0.0665 * t) * (1 + rng.normal(0, 0.004, n))
    psavert = 12.5 - 0.14 * t + 1.8 * np.sin(t / 3.1) + rng.normal(0, 0.6, n)
    cycle = np.sin(2 * np.pi * t / 8.5 - 1.2)
    unemploy = 2_944 + 95 * t + 2_600 * np.clip(cycle, 0, None) + rng.normal(0, 180, n)
    uempmed = 4.5 + 0.07 * t + 3.5 * np.clip(cycle, 0, None) + rng.normal(0, 0.5, n)

    return pd.DataFrame({
        "date": dates,
        "pce": np.round(pce, 1),
        "pop": np.round(pop).astype(int),
        "psavert": np.round(np.clip(psavert, 1.9, 17.3), 1),
        "uempmed": np.round(np.clip(uempmed, 4.0, 25.2), 1),
        "unemploy": np.round(unemploy).astype(int),
    })


# ---------------------------------------------------------------------------
# txhousing: Texas housing market by city
# ---------------------------------------------------------------------------

# city -> (median price in 2000, annual growth, monthly sales)
_TX_CITIES = {
    "Austin": (145_000, 0.050, 1_900),
    "Bay Area": (120_000, 0.032, 420),
    "Beaumont": (85_000, 0.030, 170),
    "Corpus Christi": (95_000, 0.038, 330),
    "Dallas": (135_000, 0.030, 4_200),
    "El Paso": (78_000, 0.036, 560),
    "Fort Worth": (100_000, 0.034, 800),
    "Houston": (118_000, 0.040, 5_000),
    "Lubbock": (82_000, 0.040, 260),
    "San Antonio": (98_000, 0.039, 1_600),
}


def txhousing() -> pd.DataFrame:
    """Monthly housing sales and median prices for Texas cities, 2000–2015."""
    rng = np.random.default_rng(_SEED + 2)
    rows = []
    for city, (base, growth, sales0) in _TX_CITIES.items():
        for year in range(2000, 2016):
            for month in range(1, 13):
                if year == 2015 and month > 7:
                    break
                t = (year - 2000) + (month - 1) / 12.0
                season = 1 + 0.05 * np.sin(2 * np.pi * (month - 3) / 12)
                slump = 0.93 if 2008 <= year <= 2011 else 1.0
                median = base * (1 + growth) ** t * season * slump
                median *= 1 + rng.normal(0, 0.03)
                sales = max(5.0, sales0 * season * slump * (1 + 0.03 * t) + rng.normal(0, sales0 * 0.08))
                listings = sales * rng.uniform(4.5, 7.5)
                rows.append({
                    "city": city,
                    "year": year,
                    "month": month,
                    "sales": float(round(sales)),
                    "volume": float(round(sales * median)),
                    "median": float(round(median, -2)),
                    "listings": float(round(listings)),
                    "inventory": round(listings / max(sales, 1.0), 1),
                    "date": round(year + (month - 1) / 12.0, 3),
                })
    df = pd.DataFrame(rows)
    # Reporting gaps: a handful of months without a recorded median.
    gaps = rng.choice(len(df), size=max(1, len(df) // 60), replace=False)
    df.loc[gaps, "median"] = np.nan
    return df


# ---------------------------------------------------------------------------
# diamonds: prices and attributes of round-cut diamonds
# ---------------------------------------------------------------------------

CUT_LEVELS = ["Fair", "Good", "Very Good", "Premium", "Ideal"]
COLOR_LEVELS = ["D", "E", "F", "G", "H", "I", "J"]
CLARITY_LEVELS = ["I1", "SI2", "SI1", "VS2", "VS1", "VVS2", "VVS1", "IF"]


def diamonds(n: int = 5_000) -> pd.DataFrame:
    """Diamond prices; ``cut``, ``color`` and ``clarity`` are ordered categoricals."""
    rng = np.random.default_rng(_SEED + 3)
    carat = np.round(np.clip(rng.lognormal(mean=-0.45, sigma=0.55, size=n), 0.2, 5.0), 2)
    cut_idx = rng.choice(len(CUT_LEVELS), size=n, p=[0.03, 0.09, 0.22, 0.26, 0.40])
    color_idx = rng.choice(len(COLOR_LEVELS), size=n)
    clarity_idx = rng.choice(len(CLARITY_LEVELS), size=n, p=[0.02, 0.17, 0.24, 0.23, 0.15, 0.09, 0.07, 0.03])

    log_price = 8.35 + 1.72 * np.log(carat) + 0.04 * cut_idx - 0.07 * color_idx + 0.09 * clarity_idx
    price = np.round(np.exp(log_price + rng.normal(0, 0.18, n))).astype(int)

    return pd.DataFrame({
        "carat": carat,
        "cut": pd.Categorical.from_codes(cut_idx, CUT_LEVELS, ordered=True),
        "color": pd.Categorical.from_codes(color_idx, COLOR_LEVELS, ordered=True),
        "clarity": pd.Categorical.from_codes(clarity_idx, CLARITY_LEVELS, ordered=True),
        "depth": np.round(rng.normal(61.75, 1.4, n), 1),
        "table": np.round(rng.normal(57.4, 2.2, n)),
        "price": price,
    })


# ---------------------------------------------------------------------------
# gwas: genome-wide association summary statistics
# ---------------------------------------------------------------------------

_GENES = [
    "APOE", "BRCA1", "BRCA2", "CDKN2A", "CFTR", "EGFR", "FTO", "HLA-DRB1",
    "IL6", "INS", "KRAS", "LDLR", "MTHFR", "MYC", "NOD2", "PCSK9", "PTPN22",
    "SORT1", "TCF7L2", "TNF", "TP53", "VEGFA",
]


def gwas(n: int = 2_000) -> pd.DataFrame:
    """Per-SNP association results: effect size, p-value and nearest gene."""
    rng = np.random.default_rng(_SEED + 4)
    chrom = np.sort(rng.integers(1, 23, size=n))
    bp = rng.integers(10_000, 240_000_000, size=n)

    se = rng.uniform(0.08, 0.3, size=n)
    effect = rng.normal(0.0, 0.12, size=n)
    # A small set of true associations with large effects.
    signals = rng.choice(n, size=max(3, n // 80), replace=False)
    effect[signals] = rng.choice([-1.0, 1.0], size=len(signals)) * rng.uniform(0.9, 2.2, size=len(signals))
    se[signals] = rng.uniform(0.08, 0.15, size=len(signals))

    z = effect / se
    p = 2.0 * stats.norm.sf(np.abs(z))

    order = np.lexsort((bp, chrom))
    snp_ids = np.array([f"rs{v}" for v in rng.integers(1_000, 80_000_000, size=n)])
    return pd.DataFrame({
        "SNP": snp_ids[order],
        "CHR": chrom[order],
        "BP": bp[order],
        "GENE": rng.choice(_GENES, size=n)[order],
        "P": np.clip(p[order], 1e-300, 1.0),
        "EFFECTSIZE": np.round(effect[order], 4),
        "DISTANCE": rng.integers(0, 250_000, size=n)[order],
        "ZSCORE": np.round(z[order], 4),
    }).reset_index(drop=True)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

DATASETS: dict[str, tuple[Callable[[], pd.DataFrame], str]] = {
    "mpg": (mpg, "Fuel economy of popular car models"),
    "mtcars": (mtcars, "Motor Trend car road tests"),
    "economics": (economics, "Monthly US economic time series"),
    "txhousing": (txhousing, "Texas housing sales by city"),
    "diamonds": (diamonds, "Prices and attributes of diamonds"),
    "gwas": (gwas, "GWAS summary statistics for a volcano plot"),
}


def load_dataset(name: str) -> pd.DataFrame:
    """Return a fresh copy of a built-in dataset.

    Raises:
        KeyError: If *name* is not a built-in dataset.
    """
    if name not in DATASETS:
        raise KeyError(
            f"Unknown dataset '{name}'. Available: {', '.join(sorted(DATASETS))}"
        )
    loader, _ = DATASETS[name]
    return loader()


def load_table(path: str | Path) -> pd.DataFrame:
    """Read a table from disk, choosing the reader by file suffix.

    Supports .csv, .tsv and .json (records or columns).

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the suffix is not supported.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"No such table: {path}")
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path)
    if suffix == ".tsv":
        return pd.read_csv(path, sep="\t")
    if suffix == ".json":
        return pd.read_json(path)
    raise ValueError(
        f"Unsupported table format '{suffix}'. Use .csv, .tsv or .json."
    )
