"""
Functions to pull raw table cells out of the manuscript PDF.

Tables are read page by page with pdfplumber.  The result is kept as
plain nested lists of strings (one matrix per table) so that the shape
quirks of each page can be dealt with later by the row normaliser.
Matrices can be saved to JSON so the later stages can be re-run
without touching the PDF.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import pdfplumber

from ..utils import file_io

Matrix = list[list[str | None]]


def parse_pages(spec: str | int | Iterable[int]) -> list[int]:
    """Turn ``"13-38"``, ``"5"`` or ``"1,3,5-7"`` into a list of page numbers.

    Integers and iterables of integers are accepted as-is.  Pages are
    1-indexed, duplicates are dropped and the original order is kept.
    """
    if isinstance(spec, int):
        pages = [spec]
    elif isinstance(spec, str):
        pages = []
        for part in spec.split(","):
            part = part.strip()
            if not part:
                continue
            if "-" in part:
                start_s, end_s = part.split("-", 1)
                try:
                    start, end = int(start_s), int(end_s)
                except ValueError:
                    raise ValueError(f"Invalid page range: {part!r}") from None
                if end < start:
                    raise ValueError(f"Page range runs backwards: {part!r}")
                pages.extend(range(start, end + 1))
            else:
                try:
                    pages.append(int(part))
                except ValueError:
                    raise ValueError(f"Invalid page number: {part!r}") from None
    else:
        pages = [int(p) for p in spec]

    if not pages:
        raise ValueError(f"No pages given: {spec!r}")
    if any(p < 1 for p in pages):
        raise ValueError(f"Page numbers start at 1: {spec!r}")
    return list(dict.fromkeys(pages))


def extract_tables(pdf_path: Path | str, pages: str | int | Iterable[int]) -> list[Matrix]:
    """Extract every table found on ``pages`` of the PDF at ``pdf_path``.

    Parameters
    ----------
    pdf_path : Path or str
        Manuscript PDF.
    pages : str, int or iterable of int
        1-indexed pages to read; see :func:`parse_pages`.

    Returns
    -------
    list of matrices
        One ``list[list[str | None]]`` per table, in page order.  Pages
        without a detectable table are logged and skipped.
    """
    pdf_path = Path(pdf_path)
    if not pdf_path.exists():
        raise FileNotFoundError(f"PDF not found: {pdf_path}")
    page_numbers = parse_pages(pages)

    matrices: list[Matrix] = []
    with pdfplumber.open(pdf_path) as pdf:
        n_pages = len(pdf.pages)
        for page_num in page_numbers:
            if page_num > n_pages:
                raise ValueError(f"Page {page_num} out of range ({pdf_path.name} has {n_pages} pages)")
            page = pdf.pages[page_num - 1]
            tables = page.extract_tables()
            if not tables:
                logging.warning("No table found on page %s of %s", page_num, pdf_path.name)
                continue
            for table in tables:
                matrices.append([list(row) for row in table if row])
            logging.debug("Page %s: %s table(s)", page_num, len(tables))

    logging.info(
        "Extracted %s table(s) from %s page(s) of %s",
        len(matrices),
        len(page_numbers),
        pdf_path.name,
    )
    return matrices


def write_raw_tables(matrices: list[Matrix], path: Path | str) -> None:
    """Save raw matrices as JSON."""
    file_io.write_json(matrices, path)
    logging.info("Saved %s raw table(s) to %s", len(matrices), path)


def read_raw_tables(path: Path | str) -> list[Matrix]:
    """Load matrices saved by :func:`write_raw_tables`."""
    return file_io.read_json(path)
