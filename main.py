#!/usr/bin/env python3
"""
Chart Recipes - Main Entry Point

Render the statistical chart recipes to HTML or static images.

Usage:
    python main.py list                          # List recipes by family
    python main.py catalog                       # Layer types and style operations
    python main.py datasets                      # Built-in sample tables
    python main.py render volcano                # Render one recipe to HTML
    python main.py render scatter-basic -o out/basic.png
    python main.py render volcano --data gwas=my_gwas.csv --show
    python main.py render-all -d charts/         # Render every recipe
    python main.py errors                        # Show recent errors from logs

Add --verbose to any command to echo debug logging to the console.
"""

import argparse
import sys
from pathlib import Path

import config
from data_ops.datasets import DATASETS
from data_ops.store import get_store
from gallery import RECIPES, get_recipe, list_recipes
from chart_logging import get_logger, log_error, print_recent_errors, setup_logging, tagged
from rendering.export import EXPORT_FORMATS, export_figure
from rendering.operations import get_default_registry
from rendering.registry import render_layer_catalog


def _parse_data_arg(value: str) -> tuple[str, str]:
    """Split a ``LABEL=PATH`` argument."""
    label, sep, path = value.partition("=")
    if not sep or not label or not path:
        raise ValueError(f"--data expects LABEL=PATH, got '{value}'")
    return label.strip(), path.strip()


def _render_one(name: str, output: str | None, fmt: str | None, show: bool = False) -> bool:
    """Build one recipe and export it. Returns True on success."""
    logger = get_logger()
    store = get_store()
    try:
        recipe = get_recipe(name)
        logger.debug(f"Rendering '{name}'", extra=tagged("render"))
        result = recipe["func"](store)
    except (KeyError, ValueError) as e:
        message = e.args[0] if e.args else str(e)
        log_error(f"Recipe '{name}' failed: {message}", exc=e, context={"recipe": name})
        return False

    if output is None:
        output = str(config.get_output_dir() / name)
    status = export_figure(result.figure, output, format=fmt, post_script=result.post_script)
    if status["status"] != "success":
        log_error(f"Export of '{name}' failed: {status['message']}",
                  context={"recipe": name, "output": output})
        return False

    logger.info(f"Wrote {status['filepath']}", extra=tagged("export"))
    print(f"{name}: {status['filepath']} ({status['size_bytes']:,} bytes)")
    if show:
        result.figure.show()
    return True


def cmd_list(args) -> int:
    family = None
    for recipe in list_recipes():
        if recipe["family"] != family:
            family = recipe["family"]
            print(f"\n{family}")
        print(f"  {recipe['name']:<28} {recipe['description']}")
    return 0


def cmd_catalog(args) -> int:
    print(render_layer_catalog())
    registry = get_default_registry()
    print("## Style Operations")
    print()
    for name in registry.list_operations():
        op = registry.get(name)
        params = ", ".join(op.params)
        print(f"- **{name}**({params}): {op.description}")
    return 0


def cmd_datasets(args) -> int:
    store = get_store()
    for name in DATASETS:
        summary = store.get_or_load(name).summary()
        print(f"{name:<10} {summary['num_rows']:>6} rows  {summary['description']}")
        if args.columns:
            for col, dtype in summary["columns"].items():
                print(f"    {col:<14} {dtype}")
    return 0


def cmd_render(args) -> int:
    store = get_store()
    for value in args.data or []:
        try:
            label, path = _parse_data_arg(value)
            entry = store.load_file(label, path)
        except (ValueError, FileNotFoundError) as e:
            log_error(f"Could not load table: {e}", exc=e, context={"data": value})
            return 1
        get_logger().info(f"Loaded '{entry.label}' from {entry.source} ({len(entry.data)} rows)")
    return 0 if _render_one(args.name, args.output, args.format, show=args.show) else 1


def cmd_render_all(args) -> int:
    out_dir = Path(args.directory) if args.directory else config.get_output_dir()
    failed = []
    for recipe in RECIPES:
        output = str(out_dir / recipe["name"])
        if not _render_one(recipe["name"], output, args.format):
            failed.append(recipe["name"])
    if failed:
        print(f"{len(failed)} of {len(RECIPES)} recipes failed: {', '.join(failed)}", file=sys.stderr)
        return 1
    print(f"Rendered {len(RECIPES)} recipes to {out_dir}")
    return 0


def cmd_errors(args) -> int:
    print_recent_errors(days=args.days, limit=args.limit)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Statistical chart recipes")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging on the console",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("list", help="List recipes by family")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("catalog", help="Show layer types and style operations")
    p.set_defaults(func=cmd_catalog)

    p = sub.add_parser("datasets", help="List the built-in sample tables")
    p.add_argument("--columns", action="store_true", help="Also list column dtypes")
    p.set_defaults(func=cmd_datasets)

    p = sub.add_parser("render", help="Render one recipe")
    p.add_argument("name", help="Recipe name (see 'list')")
    p.add_argument("--output", "-o", default=None,
                   help="Output path (default: <output_dir>/<name>.<format>)")
    p.add_argument("--format", "-f", choices=EXPORT_FORMATS, default=None,
                   help="Output format (default: from the extension, else html)")
    p.add_argument("--data", action="append", metavar="LABEL=PATH",
                   help="Replace a table with a .csv/.tsv/.json file (repeatable)")
    p.add_argument("--show", action="store_true", help="Also open the figure in a browser")
    p.set_defaults(func=cmd_render)

    p = sub.add_parser("render-all", help="Render every recipe")
    p.add_argument("--directory", "-d", default=None, help="Output directory")
    p.add_argument("--format", "-f", choices=EXPORT_FORMATS, default=None,
                   help="Output format (default: html)")
    p.set_defaults(func=cmd_render_all)

    p = sub.add_parser("errors", help="Show recent errors from the logs")
    p.add_argument("--days", type=int, default=7)
    p.add_argument("--limit", type=int, default=10)
    p.set_defaults(func=cmd_errors)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
