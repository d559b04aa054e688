from __future__ import annotations

import pytest
import requests

from memory_screen import config
from memory_screen.extraction import pdf_tables


class FakePage:
    def __init__(self, tables):
        self._tables = tables

    def extract_tables(self):
        return self._tables


class FakePDF:
    def __init__(self, pages):
        self.pages = [FakePage(t) for t in pages]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class FakeSession:
    """Answers MyGene-style queries from a dict of ``cg_number -> hit``."""

    def __init__(self, genes=None, responses=None):
        self.genes = genes or {}
        self.responses = list(responses or [])
        self.calls = []

    def post(self, url, data=None, timeout=None):
        self.calls.append(data)
        if self.responses:
            return self.responses.pop(0)
        hits = []
        for query in data["q"].split(","):
            hit = self.genes.get(query)
            if hit is None:
                hits.append({"query": query, "notfound": True})
            else:
                hits.append({"query": query, **hit})
        return FakeResponse(200, hits)


@pytest.fixture
def fake_pdf(monkeypatch, tmp_path):
    """Patch pdfplumber.open; returns a function that installs page tables."""
    pdf_path = tmp_path / "paper.pdf"
    pdf_path.write_bytes(b"%PDF-1.4\n")

    def install(pages):
        monkeypatch.setattr(pdf_tables.pdfplumber, "open", lambda path: FakePDF(pages))
        return pdf_path

    return install


@pytest.fixture
def workspace(monkeypatch, tmp_path):
    """Point every configured input/output path into ``tmp_path``."""
    raw = tmp_path / "raw"
    processed = tmp_path / "processed"
    results = tmp_path / "results"
    for d in (raw, processed, results):
        d.mkdir()
    paths = {
        "PDF_PATH": raw / "paper.pdf",
        "SUPPLEMENT_PATH": raw / "supplement.csv",
        "CATALOG_PATH": raw / "catalog.csv",
        "CORRECTIONS_PATH": None,
        "RAW_INCREASED_JSON": processed / "raw_increased_tables.json",
        "RAW_DECREASED_JSON": processed / "raw_decreased_tables.json",
        "SIGNIFICANT_TSV": processed / "significant_lines.tsv",
        "RECONCILED_TSV": processed / "reconciled_lines.tsv",
        "GENE_CACHE_TSV": processed / "gene_lookup_cache.tsv",
        "ENRICHED_TSV": results / "enriched.tsv",
    }
    for name, value in paths.items():
        monkeypatch.setattr(config, name, value)
    return paths
