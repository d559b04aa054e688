"""File input/output helper functions."""

import json
import logging
from pathlib import Path

import pandas as pd


def read_json(path):
    """Read a JSON file and return the loaded object."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except Exception as exc:
        logging.error("Failed to read JSON file %s: %s", path, exc)
        raise


def write_json(data, path):
    """Write a Python object to a JSON file."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
    except Exception as exc:
        logging.error("Failed to write JSON file %s: %s", path, exc)
        raise


def read_table(path, dtype=str):
    """Read a CSV, TSV or Excel file into a DataFrame.

    The format is picked from the file suffix.  Everything is read as
    text by default; callers coerce the columns they care about.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    try:
        if suffix in (".xlsx", ".xls"):
            return pd.read_excel(path, dtype=dtype)
        sep = "\t" if suffix in (".tsv", ".tab", ".txt") else ","
        return pd.read_csv(path, sep=sep, dtype=dtype)
    except Exception as exc:
        logging.error("Failed to read table %s: %s", path, exc)
        raise


def read_tsv(path):
    """Read a tab-separated file written by :func:`write_tsv`."""
    path = Path(path)
    try:
        return pd.read_csv(path, sep="\t")
    except Exception as exc:
        logging.error("Failed to read TSV file %s: %s", path, exc)
        raise


def write_tsv(df, path):
    """Write a DataFrame to a tab-separated file; missing values are left empty."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(path, sep="\t", index=False, na_rep="")
    except Exception as exc:
        logging.error("Failed to write TSV file %s: %s", path, exc)
        raise


def normalise_header(name) -> str:
    """Lowercase a column header and collapse punctuation/whitespace."""
    text = str(name).strip().lower().replace("_", " ")
    return " ".join(text.split())


def map_columns(df: pd.DataFrame, aliases: dict[str, list[str]]) -> pd.DataFrame:
    """Rename the first column matching each alias list to its canonical name.

    Headers are compared after :func:`normalise_header`.  Canonical names
    without a matching column are simply absent from the result.
    """
    lookup = {normalise_header(col): col for col in df.columns}
    renames = {}
    for canonical, names in aliases.items():
        for alias in names:
            col = lookup.get(normalise_header(alias))
            if col is not None and col not in renames:
                renames[col] = canonical
                break
    return df.rename(columns=renames)
