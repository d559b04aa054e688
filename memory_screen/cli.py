"""Command line entry point for the cleaning pipeline.

Examples (run from the project root)::

    # everything, using the default input locations from config.py
    python -m memory_screen

    # just re-run reconciliation against another export of the supplement
    python -m memory_screen --stage reconcile --supplement data/raw/supplement_v2.xlsx

    # final stage without calling the gene annotation service
    python -m memory_screen --stage enrich --skip-lookup
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from . import pipelines
from .extraction.pdf_tables import parse_pages

STAGES = ("extract", "normalize", "reconcile", "enrich", "all")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Clean and enrich the Walkinshaw 2016 memory-screen tables")
    p.add_argument("--stage", choices=STAGES, default="all", help="Stage to run (default: all)")
    p.add_argument("--pdf", type=Path, default=None, help="Manuscript PDF (default from config)")
    p.add_argument("--pages-increased", type=parse_pages, default=None, help="Pages of Table 2, e.g. '5'")
    p.add_argument("--pages-decreased", type=parse_pages, default=None, help="Pages of the supplementary table, e.g. '13-38'")
    p.add_argument("--corrections", type=Path, default=None, help="CSV of identifier corrections (column,old,new)")
    p.add_argument("--supplement", type=Path, default=None, help="Supplementary results table (CSV/TSV/XLSX)")
    p.add_argument("--catalog", type=Path, default=None, help="VDRC stock catalog (CSV/TSV/XLSX)")
    p.add_argument("--output", type=Path, default=None, help="Final TSV path (default from config)")
    p.add_argument("--skip-lookup", action="store_true", help="Do not query the gene annotation service")
    p.add_argument("--log-level", default="INFO", help="Logging level (default INFO)")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    if args.stage == "extract":
        ok = pipelines.run_extraction(args.pdf, args.pages_increased, args.pages_decreased)
    elif args.stage == "normalize":
        ok = pipelines.run_normalization(args.corrections)
    elif args.stage == "reconcile":
        ok = pipelines.run_reconciliation(args.supplement)
    elif args.stage == "enrich":
        ok = pipelines.run_enrichment(args.catalog, args.output, skip_lookup=args.skip_lookup)
    else:
        ok = pipelines.run_all(
            pdf_path=args.pdf,
            increased_pages=args.pages_increased,
            decreased_pages=args.pages_decreased,
            corrections_path=args.corrections,
            supplement_path=args.supplement,
            catalog_path=args.catalog,
            output_path=args.output,
            skip_lookup=args.skip_lookup,
        )
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
