"""
Turn raw PDF cell matrices into tabular records.

Table 2 of the manuscript (increased memory, page 5) and the
supplementary table (decreased memory, pages 13-38) come out of the
PDF as ragged grids: header rows mixed in with data, columns that are
empty on some pages and not on others, and the usual PDF text
artifacts (unicode minus signs, non-breaking spaces, wrapped cells).
The functions here clean those up and give every table the same
column layout.
"""

from __future__ import annotations

import logging
import re
import unicodedata

import pandas as pd

from .. import config

# Minus-like characters that PDF text extraction produces for "-".
_DASHES = re.compile(r"[\u2212\u2012\u2013\u2014\u2010\u2011\ufe63\uff0d]")
_ZERO_WIDTH = re.compile(r"[\u200b\u200c\u200d\ufeff\u00ad]")
_CG_LIKE = re.compile(r"^(cg|cr)(\d+)$", flags=re.IGNORECASE)


def clean_cell(value):
    """Fix encoding artifacts in a single cell; empty cells become ``NA``."""
    if value is None:
        return pd.NA
    if not isinstance(value, str):
        if pd.isna(value):
            return pd.NA
        value = str(value)
    text = unicodedata.normalize("NFKC", value)
    text = _ZERO_WIDTH.sub("", text)
    text = _DASHES.sub("-", text)
    # NFKC already maps NBSP and friends to a plain space; newlines from
    # wrapped cells go the same way.
    text = re.sub(r"\s+", " ", text).strip()
    return text if text else pd.NA


def dataframe_from_matrix(matrix) -> pd.DataFrame:
    """Convert one raw matrix into a DataFrame with :data:`config.RAW_COLUMNS`.

    Cells are cleaned, columns that are entirely empty are dropped and
    the remaining ones are named by position.  Surplus columns are
    discarded; absent trailing columns are filled with ``NA``.
    """
    names = config.RAW_COLUMNS
    rows = [list(row) for row in matrix if row is not None]
    if not rows:
        return pd.DataFrame(columns=names)

    width = max(len(row) for row in rows)
    rows = [row + [None] * (width - len(row)) for row in rows]
    df = pd.DataFrame(rows, dtype=object)
    df = df.apply(lambda col: col.map(clean_cell))
    df = df.dropna(axis=1, how="all")

    if df.shape[1] > len(names):
        logging.debug("Dropping %s surplus column(s)", df.shape[1] - len(names))
        df = df.iloc[:, : len(names)]
    df.columns = names[: df.shape[1]]
    for name in names[df.shape[1]:]:
        df[name] = pd.NA
    return df[names].reset_index(drop=True)


def normalize_increased(matrices) -> pd.DataFrame:
    """Records for Table 2 (lines whose memory score increased)."""
    if not matrices:
        raise ValueError("No tables extracted for the increased-memory table")
    if len(matrices) > 1:
        logging.warning(
            "Expected one increased-memory table, got %s; using the first",
            len(matrices),
        )
    body = matrices[0][config.INCREASED_HEADER_ROWS:]
    df = dataframe_from_matrix(body)
    df["change_in_memory"] = "+"
    logging.info("Increased-memory table: %s row(s)", len(df))
    return df


def normalize_decreased(matrices) -> pd.DataFrame:
    """Records for the supplementary table (lines whose memory score decreased).

    Each page is converted on its own because the set of empty columns
    differs between pages; only the first page carries the header.
    """
    if not matrices:
        raise ValueError("No tables extracted for the decreased-memory table")
    frames = [dataframe_from_matrix(m) for m in matrices]
    df = pd.concat(frames, ignore_index=True)
    df = df.iloc[config.DECREASED_HEADER_ROWS:].reset_index(drop=True)
    df["change_in_memory"] = "-"
    # Activity significance is only reported for lines without a
    # mean activity difference.
    df.loc[df["mean_activity_difference"].notna(), "act_sig"] = pd.NA
    logging.info("Decreased-memory table: %s row(s) from %s page table(s)", len(df), len(matrices))
    return df


def normalize_cg_number(value):
    """Remove stray whitespace from a CG/CR annotation id and upper-case its prefix."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return pd.NA
    text = re.sub(r"\s+", "", str(value))
    if not text:
        return pd.NA
    match = _CG_LIKE.match(text)
    if match:
        return match.group(1).upper() + match.group(2)
    return text
