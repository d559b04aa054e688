"""
Join VDRC stock-catalog information onto the reconciled lines.

The catalog maps each transformant (VDRC id) to the CG number its RNAi
construct targets.  Supplement-only lines have no CG number of their
own, so the catalog fills it in.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from .. import config
from ..processing.normalize import clean_cell, normalize_cg_number
from ..utils import file_io

CATALOG_COLUMNS = ["vdrc_id", "cg_number", "construct_id", "library"]


def load_catalog(path: Path | str) -> pd.DataFrame:
    """Read the stock-center catalog and keep one row per VDRC id."""
    raw = file_io.read_table(path)
    df = file_io.map_columns(raw, config.CATALOG_COLUMN_ALIASES)
    missing = {"vdrc_id", "cg_number"} - set(df.columns)
    if missing:
        raise ValueError(
            f"Catalog {path} is missing column(s) {', '.join(sorted(missing))}; "
            f"available: {list(raw.columns)}"
        )
    for column in CATALOG_COLUMNS:
        if column not in df.columns:
            df[column] = pd.NA
    df = df[CATALOG_COLUMNS].apply(lambda col: col.map(clean_cell))

    ids = pd.to_numeric(df["vdrc_id"], errors="coerce")
    keep = ids.notna() & (ids % 1 == 0)
    df = df[keep].copy()
    df["vdrc_id"] = ids[keep].astype("int64").astype("Int64")
    df["cg_number"] = df["cg_number"].map(normalize_cg_number)

    n_dupes = int(df["vdrc_id"].duplicated().sum())
    if n_dupes:
        logging.info("Catalog: dropping %s duplicated VDRC id row(s)", n_dupes)
        df = df.drop_duplicates("vdrc_id", keep="first")
    logging.info("Loaded %s catalog entries from %s", len(df), path)
    return df.reset_index(drop=True)


def attach_catalog(df: pd.DataFrame, catalog: pd.DataFrame) -> pd.DataFrame:
    """Left join ``catalog`` on ``vdrc_id``.

    CG numbers already present (from the manuscript) are kept and only
    missing ones are taken from the catalog.  Disagreements and lines
    absent from the catalog are logged.
    """
    left = df.copy()
    left["vdrc_id"] = left["vdrc_id"].astype("Int64")
    right = catalog.rename(columns={"cg_number": "catalog_cg_number"})
    right["vdrc_id"] = right["vdrc_id"].astype("Int64")

    merged = left.merge(right, on="vdrc_id", how="left", indicator=True)
    not_found = int((merged["_merge"] == "left_only").sum())
    if not_found:
        logging.warning("%s line(s) not found in the stock catalog", not_found)

    has_both = merged["cg_number"].notna() & merged["catalog_cg_number"].notna()
    mismatch = has_both & (merged["cg_number"] != merged["catalog_cg_number"])
    if int(mismatch.sum()):
        logging.warning(
            "%s line(s) have a CG number differing from the catalog; keeping the manuscript value: %s",
            int(mismatch.sum()),
            ", ".join(str(v) for v in merged.loc[mismatch, "vdrc_id"].head(10)),
        )

    merged["cg_number"] = merged["cg_number"].combine_first(merged["catalog_cg_number"])
    return merged.drop(columns=["catalog_cg_number", "_merge"])
