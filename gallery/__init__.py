"""
Recipe gallery.

Each recipe is a function ``recipe(store) -> RenderResult`` that pulls its
tables from a TableStore, reshapes them and builds one chart.

Adding a new recipe:
    1. Write the function in the module of its chart family
    2. Add an entry to RECIPES below
"""

from . import dotplots, lines, polygons, scatterplots, segments, volcano

RECIPES = [
    # --- scatterplots ---
    {"name": "scatter-basic", "family": "scatterplots", "func": scatterplots.basic,
     "tables": ["mpg"], "description": "Displacement vs highway mileage"},
    {"name": "scatter-alpha-webgl", "family": "scatterplots", "func": scatterplots.alpha_webgl,
     "tables": ["diamonds"], "description": "Overplotted points with alpha blending, drawn with WebGL"},
    {"name": "scatter-discrete-color", "family": "scatterplots", "func": scatterplots.discrete_color,
     "tables": ["mpg"], "description": "Vehicle class mapped to the default palette"},
    {"name": "scatter-brewer-palette", "family": "scatterplots", "func": scatterplots.brewer_palette,
     "tables": ["mpg"], "description": "Drive train colored with the Set1 palette"},
    {"name": "scatter-manual-colors", "family": "scatterplots", "func": scatterplots.manual_colors,
     "tables": ["mtcars"], "description": "Named colors chosen per cylinder count"},
    {"name": "scatter-continuous-color", "family": "scatterplots", "func": scatterplots.continuous_color,
     "tables": ["mtcars"], "description": "Horsepower on a colorscale with a colorbar"},
    {"name": "scatter-symbols", "family": "scatterplots", "func": scatterplots.symbols,
     "tables": ["mtcars"], "description": "Cylinder count mapped to overridden marker symbols"},
    {"name": "scatter-size-range", "family": "scatterplots", "func": scatterplots.size_range,
     "tables": ["mtcars"], "description": "Horsepower mapped to marker area within a size range"},
    {"name": "scatter-fit-overlay", "family": "scatterplots", "func": scatterplots.fit_overlay,
     "tables": ["mpg"], "description": "Points with a fitted regression line"},
    # --- lines ---
    {"name": "lines-by-group", "family": "lines", "func": lines.by_group,
     "tables": ["txhousing"], "description": "One colored line per city"},
    {"name": "lines-highlight", "family": "lines", "func": lines.highlight_group,
     "tables": ["txhousing"], "description": "One city highlighted against the rest in gray"},
    {"name": "lines-linetype", "family": "lines", "func": lines.linetype_mapping,
     "tables": ["economics"], "description": "Series told apart by dash style with an override"},
    {"name": "lines-shapes", "family": "lines", "func": lines.line_shapes,
     "tables": [], "description": "Linear, spline and step interpolation"},
    {"name": "lines-paths-vs-lines", "family": "lines", "func": lines.paths_vs_lines,
     "tables": ["economics"], "description": "Row-order path against an x-sorted line"},
    {"name": "lines-density", "family": "lines", "func": lines.density_curves,
     "tables": ["diamonds"], "description": "Kernel density curve per group"},
    # --- dotplots ---
    {"name": "dotplot-ordered-means", "family": "dotplots", "func": dotplots.ordered_means,
     "tables": ["mpg"], "description": "Group means sorted by value"},
    {"name": "dotplot-coefficients", "family": "dotplots", "func": dotplots.coefficients,
     "tables": ["mtcars"], "description": "Regression coefficients with confidence intervals"},
    # --- segments ---
    {"name": "segments-dumbbell", "family": "segments", "func": segments.dumbbell,
     "tables": ["mpg"], "description": "City vs highway mileage per model"},
    {"name": "segments-slope", "family": "segments", "func": segments.slope_segments,
     "tables": ["txhousing"], "description": "Price change per city between two years"},
    # --- polygons ---
    {"name": "polygons-grouped", "family": "polygons", "func": polygons.grouped_polygons,
     "tables": [], "description": "Filled rings, one per group"},
    {"name": "polygons-lm-ribbon", "family": "polygons", "func": polygons.lm_ribbon,
     "tables": ["mtcars"], "description": "Confidence ribbon around a linear fit"},
    {"name": "polygons-quantile-area", "family": "polygons", "func": polygons.quantile_area,
     "tables": ["txhousing"], "description": "Area between two quantiles over time"},
    # --- volcano ---
    {"name": "volcano", "family": "volcano", "func": volcano.volcano,
     "tables": ["gwas"], "description": "GWAS volcano plot with clickable SNPs"},
]

# Build lookup dict for fast access
_RECIPE_MAP = {r["name"]: r for r in RECIPES}


def get_recipe(name: str) -> dict:
    """Look up a recipe by name.

    Raises:
        KeyError: If no recipe has that name.
    """
    if name not in _RECIPE_MAP:
        raise KeyError(
            f"Unknown recipe '{name}'. Available: {', '.join(sorted(_RECIPE_MAP))}"
        )
    return _RECIPE_MAP[name]


def list_recipes(family: str | None = None) -> list[dict]:
    """Name, family, tables and description of each recipe (without the function)."""
    return [
        {k: v for k, v in r.items() if k != "func"}
        for r in RECIPES
        if family is None or r["family"] == family
    ]
