"""
Union of the increased- and decreased-memory tables.

The two normalised tables are stacked into one table of significant
lines.  Score cells such as ``"0.12 ± 0.03"`` are split into separate
PI and SEM columns, identifiers are coerced to proper types and the
table is sorted by VDRC id.
"""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path

import pandas as pd

from .. import config
from ..utils import file_io
from .normalize import normalize_cg_number

_NUMBER = r"[-+]?(?:\d+\.?\d*|\.\d+)"
_SCORE = re.compile(
    rf"^\s*(?P<pi>{_NUMBER})"
    r"(?:\s*(?:±|\+/-|\+-|\+|-)?\s*"
    rf"(?P<sem>{_NUMBER}))?\s*$"
)


def split_score(value) -> tuple[float, float]:
    """Split a ``"PI ± SEM"`` cell into two floats.

    The SEM is returned as an absolute value because the ``±`` sign is
    sometimes extracted as a bare ``-`` glued to the number.  Cells that
    do not parse give ``(nan, nan)``; a lone number gives ``(PI, nan)``.
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return math.nan, math.nan
    match = _SCORE.match(str(value))
    if not match:
        return math.nan, math.nan
    pi = float(match.group("pi"))
    sem = abs(float(match.group("sem"))) if match.group("sem") else math.nan
    return pi, sem


def load_corrections(path: Path | str | None = None) -> dict[str, dict[str, str]]:
    """Return identifier corrections from config, extended by an optional CSV.

    The CSV needs ``column``, ``old`` and ``new`` columns; one row per fix.
    """
    corrections = {col: dict(mapping) for col, mapping in config.IDENTIFIER_CORRECTIONS.items()}
    if path is None:
        return corrections
    table = file_io.read_table(path).fillna("")
    missing = {"column", "old", "new"} - set(table.columns)
    if missing:
        raise ValueError(f"Corrections file {path} is missing column(s): {', '.join(sorted(missing))}")
    for row in table.itertuples(index=False):
        corrections.setdefault(row.column, {})[row.old] = row.new
    logging.info("Loaded %s identifier correction(s) from %s", len(table), path)
    return corrections


def apply_corrections(df: pd.DataFrame, corrections: dict[str, dict[str, str]]) -> pd.DataFrame:
    """Replace known bad identifier values; an empty replacement means ``NA``.

    CG numbers are matched in their normalised form, so a fix can be keyed
    on the value shown in the output tables.
    """
    df = df.copy()
    for column, mapping in corrections.items():
        if column not in df.columns or not mapping:
            continue
        if column == "cg_number":
            df[column] = df[column].map(normalize_cg_number)
            mapping = {normalize_cg_number(k): v for k, v in mapping.items()}
        mask = df[column].isin(list(mapping))
        n_fixed = int(mask.sum())
        if not n_fixed:
            continue
        df.loc[mask, column] = df.loc[mask, column].map(lambda v: mapping[v] or pd.NA)
        logging.info("Corrected %s value(s) in %s", n_fixed, column)
    return df


def _split_score_column(df: pd.DataFrame, column: str, prefix: str) -> pd.DataFrame:
    parts = [split_score(v) for v in df[column]]
    df[f"{prefix}_PI"] = [p[0] for p in parts]
    df[f"{prefix}_SEM"] = [p[1] for p in parts]
    unparsed = int(df[column].notna().sum() - df[f"{prefix}_PI"].notna().sum())
    if unparsed:
        logging.warning("%s %s cell(s) could not be parsed", unparsed, column)
    return df.drop(columns=[column])


def merge_significant(
    decreased: pd.DataFrame,
    increased: pd.DataFrame,
    corrections: dict[str, dict[str, str]] | None = None,
) -> pd.DataFrame:
    """Stack both tables and clean them into significant-line records.

    Parameters
    ----------
    decreased, increased : DataFrame
        Output of :func:`normalize.normalize_decreased` and
        :func:`normalize.normalize_increased`.
    corrections : dict, optional
        Literal identifier fixes; defaults to
        :data:`config.IDENTIFIER_CORRECTIONS`.

    Returns
    -------
    DataFrame
        Columns :data:`config.SIGNIFICANT_COLUMNS`, sorted by ``vdrc_id``.
    """
    if corrections is None:
        corrections = config.IDENTIFIER_CORRECTIONS
    df = pd.concat([decreased, increased], ignore_index=True)
    df = apply_corrections(df, corrections)

    # Header rows repeated on later pages and footnotes have no numeric id.
    ids = pd.to_numeric(df["vdrc_id"], errors="coerce")
    valid = ids.notna() & (ids % 1 == 0)
    n_dropped = int((~valid).sum())
    if n_dropped:
        logging.info("Dropping %s row(s) without a valid VDRC id", n_dropped)
    df = df[valid].copy()
    df["vdrc_id"] = ids[valid].astype("int64").astype("Int64")

    df = _split_score_column(df, "primary_score", "primary")
    df = _split_score_column(df, "secondary_score", "secondary")
    df = df.drop(columns=["gene_name"])

    df["physical_abnormality"] = df["physical_abnormality"].fillna("").map(
        lambda v: "+" if v == "+" else "-"
    )
    df["mean_activity_difference"] = pd.to_numeric(df["mean_activity_difference"], errors="coerce")
    df["cg_number"] = df["cg_number"].map(normalize_cg_number)

    df = df[config.SIGNIFICANT_COLUMNS].sort_values("vdrc_id", kind="mergesort").reset_index(drop=True)
    duplicated = int(df["vdrc_id"].duplicated().sum())
    if duplicated:
        logging.warning("%s VDRC id(s) appear more than once among significant lines", duplicated)
    logging.info("Merged %s significant line(s)", len(df))
    return df


def check_counts(df: pd.DataFrame, expected: dict[str, int] | None = None) -> dict[str, int]:
    """Compare line counts with the published ones and log any mismatch."""
    if expected is None:
        expected = config.EXPECTED_COUNTS
    observed = {
        "total": len(df),
        "increased": int((df["change_in_memory"] == "+").sum()),
        "decreased": int((df["change_in_memory"] == "-").sum()),
    }
    for key, want in expected.items():
        got = observed.get(key)
        if got != want:
            logging.warning("Count mismatch for %s lines: expected %s, found %s", key, want, got)
    logging.info(
        "Significant lines: %s total (%s increased, %s decreased)",
        observed["total"],
        observed["increased"],
        observed["decreased"],
    )
    return observed
