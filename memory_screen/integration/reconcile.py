"""
Reconcile the significant lines with the full supplementary results.

The supplementary spreadsheet lists every line that was screened,
including the non-significant ones, and some lines more than once
(re-tests).  The manuscript tables are the published values, so when
the two disagree the manuscript wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from pathlib import Path

import pandas as pd

from .. import config
from ..processing.normalize import clean_cell
from ..utils import file_io

SUPPLEMENT_COLUMNS = ["vdrc_id", "PI", "SEM", "date", "physical_abnormality"]
REQUIRED_SUPPLEMENT_COLUMNS = {"vdrc_id", "PI", "SEM"}

RECONCILED_COLUMNS = [
    "vdrc_id",
    "cg_number",
    "PI",
    "SEM",
    "date",
    "physical_abnormality",
    "significant",
    "change_in_memory",
    "primary_PI",
    "primary_SEM",
    "secondary_PI",
    "secondary_SEM",
    "mean_activity_difference",
    "act_sig",
]

_POSITIVE = {"+", "yes", "y", "true", "1", "x"}


@dataclass
class ReconciliationReport:
    """Counts collected while reconciling the two tables."""

    supplement_rows: int = 0
    duplicate_rows_dropped: int = 0
    missing_from_supplement: int = 0
    pi_disagreements: int = 0
    reconciled_lines: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


def _encode_abnormality(value):
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return pd.NA
    return "+" if str(value).strip().lower() in _POSITIVE else "-"


def load_supplement(path: Path | str) -> pd.DataFrame:
    """Load the supplementary results table with canonical column names.

    Parameters
    ----------
    path : Path or str
        CSV, TSV or Excel export of the supplementary table.

    Returns
    -------
    DataFrame
        Columns ``vdrc_id`` (Int64), ``PI``, ``SEM`` (float, SEM
        absolute), ``date`` (datetime) and ``physical_abnormality``
        (``+``/``-``/NA).  Rows without a numeric VDRC id are dropped.
    """
    raw = file_io.read_table(path)
    df = file_io.map_columns(raw, config.SUPPLEMENT_COLUMN_ALIASES)
    missing = REQUIRED_SUPPLEMENT_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(
            f"Supplement {path} is missing column(s) {', '.join(sorted(missing))}; "
            f"available: {list(raw.columns)}"
        )
    for column in SUPPLEMENT_COLUMNS:
        if column not in df.columns:
            df[column] = pd.NA
    df = df[SUPPLEMENT_COLUMNS].apply(lambda col: col.map(clean_cell))

    ids = pd.to_numeric(df["vdrc_id"], errors="coerce")
    keep = ids.notna() & (ids % 1 == 0)
    if int((~keep).sum()):
        logging.info("Supplement: dropping %s row(s) without a VDRC id", int((~keep).sum()))
    df = df[keep].copy()
    df["vdrc_id"] = ids[keep].astype("int64").astype("Int64")
    df["PI"] = pd.to_numeric(df["PI"], errors="coerce")
    df["SEM"] = pd.to_numeric(df["SEM"], errors="coerce").abs()
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    df["physical_abnormality"] = df["physical_abnormality"].map(_encode_abnormality)
    logging.info("Loaded %s supplement row(s) from %s", len(df), path)
    return df.reset_index(drop=True)


def resolve_duplicates(supplement: pd.DataFrame, significant: pd.DataFrame) -> pd.DataFrame:
    """Keep one supplement row per VDRC id.

    For a significant line the re-test whose PI is closest to the
    manuscript PI is kept; for the others the most recent test wins.
    Remaining ties keep the earlier row.
    """
    reference = significant.drop_duplicates("vdrc_id").set_index("vdrc_id")["primary_PI"]
    sup = supplement.copy()
    sup["_order"] = range(len(sup))
    sup["_distance"] = (sup["PI"] - sup["vdrc_id"].map(reference)).abs()
    sup = sup.sort_values(
        ["vdrc_id", "_distance", "date", "_order"],
        ascending=[True, True, False, True],
        na_position="last",
        kind="mergesort",
    )
    sup = sup.drop_duplicates("vdrc_id", keep="first")
    return sup.drop(columns=["_order", "_distance"]).reset_index(drop=True)


def reconcile(
    significant: pd.DataFrame,
    supplement: pd.DataFrame,
    tolerance: float | None = None,
) -> tuple[pd.DataFrame, ReconciliationReport]:
    """Join the significant lines onto the supplement, preferring manuscript values.

    Every supplement line appears once, plus any manuscript line the
    supplement does not list.  ``PI``/``SEM``/``physical_abnormality``
    take the manuscript value where there is one.  The result is unique
    on ``vdrc_id`` and sorted by it.
    """
    if tolerance is None:
        tolerance = config.PI_TOLERANCE
    report = ReconciliationReport(supplement_rows=len(supplement))

    significant = significant.copy()
    supplement = supplement.copy()
    significant["vdrc_id"] = significant["vdrc_id"].astype("Int64")
    supplement["vdrc_id"] = supplement["vdrc_id"].astype("Int64")

    n_sig_dupes = int(significant["vdrc_id"].duplicated().sum())
    if n_sig_dupes:
        logging.warning("Dropping %s duplicated significant line(s); first occurrence kept", n_sig_dupes)
        significant = significant.drop_duplicates("vdrc_id", keep="first")

    deduped = resolve_duplicates(supplement, significant)
    report.duplicate_rows_dropped = len(supplement) - len(deduped)
    if report.duplicate_rows_dropped:
        logging.info("Resolved %s duplicated supplement row(s)", report.duplicate_rows_dropped)

    merged = deduped.merge(
        significant,
        on="vdrc_id",
        how="outer",
        suffixes=("_supplement", ""),
        indicator=True,
    )
    in_manuscript = merged["_merge"] != "left_only"
    both = merged["_merge"] == "both"
    report.missing_from_supplement = int((merged["_merge"] == "right_only").sum())
    if report.missing_from_supplement:
        logging.warning(
            "%s significant line(s) are not listed in the supplement",
            report.missing_from_supplement,
        )

    disagree = both & ((merged["PI"] - merged["primary_PI"]).abs() > tolerance)
    report.pi_disagreements = int(disagree.sum())
    if report.pi_disagreements:
        logging.warning(
            "%s line(s) have a supplement PI differing from the manuscript by more than %s",
            report.pi_disagreements,
            tolerance,
        )

    merged["PI"] = merged["primary_PI"].combine_first(merged["PI"])
    merged["SEM"] = merged["primary_SEM"].combine_first(merged["SEM"])
    merged["physical_abnormality"] = merged["physical_abnormality"].combine_first(
        merged["physical_abnormality_supplement"]
    )
    merged["significant"] = in_manuscript

    result = (
        merged[RECONCILED_COLUMNS]
        .sort_values("vdrc_id", kind="mergesort")
        .reset_index(drop=True)
    )
    report.reconciled_lines = len(result)
    logging.info(
        "Reconciled %s line(s), %s significant",
        report.reconciled_lines,
        int(result["significant"].sum()),
    )
    return result, report
