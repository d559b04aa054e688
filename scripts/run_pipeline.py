#!/usr/bin/env python
"""CLI entry point for the Walkinshaw 2016 memory-screen cleaning run.

This script is a thin wrapper around `memory_screen.cli.main`.

Before running
- Put the manuscript PDF, the supplementary table export and the VDRC
    catalog under data/raw (or point MEMORY_SCREEN_PDF,
    MEMORY_SCREEN_SUPPLEMENT and MEMORY_SCREEN_CATALOG at them; a .env
    file is read if python-dotenv is installed).

Examples (run from project root)
    # Full run
    python scripts/run_pipeline.py

    # Re-extract only, with a different page range for the supplementary table
    python scripts/run_pipeline.py --stage extract --pages-decreased 13-38

    # Final stage without network access
    python scripts/run_pipeline.py --stage enrich --skip-lookup

Where files are written
- data/processed: raw_*_tables.json, significant_lines.tsv,
    reconciled_lines.tsv, gene_lookup_cache.tsv
- results/walkinshaw_enriched.tsv (final table)
"""
from __future__ import annotations

import sys
from pathlib import Path

# Ensure project root (folder containing memory_screen) is importable
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from memory_screen.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
