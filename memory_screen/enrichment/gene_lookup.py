"""
Look up gene symbols and stable ids for CG numbers.

Queries the MyGene.info batch query endpoint with the CG annotation
ids and keeps the gene symbol, FlyBase gene id (FBgn) and NCBI Entrez
gene id of the first hit for each query.  Answers can be cached in a
TSV so repeated runs do not hit the service again.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable

import pandas as pd
import requests
from retrying import retry  # type: ignore
from tqdm import tqdm  # type: ignore

from .. import config
from ..processing.normalize import normalize_cg_number
from ..utils import file_io

GENE_COLUMNS = ["cg_number", "gene_symbol", "flybase_id", "entrez_id"]


class GeneLookupError(RuntimeError):
    """Raised when the gene annotation service cannot be queried."""


class _TransientHTTPError(Exception):
    """HTTP status worth retrying (rate limit or server error)."""


def _is_transient(exc: Exception) -> bool:
    return isinstance(exc, (_TransientHTTPError, requests.ConnectionError, requests.Timeout))


def _first(value):
    if isinstance(value, list):
        return value[0] if value else None
    return value


def parse_hits(hits: list[dict[str, Any]]) -> pd.DataFrame:
    """Flatten MyGene.info query hits into one row per query.

    Queries reported as ``notfound`` are kept with empty ids.  When a
    query matches several genes the first hit is used.
    """
    rows: dict[str, dict[str, Any]] = {}
    multi: set[str] = set()
    for hit in hits:
        query = hit.get("query")
        if query is None:
            continue
        if query in rows:
            if not hit.get("notfound"):
                multi.add(query)
            continue
        if hit.get("notfound"):
            rows[query] = {"cg_number": query, "gene_symbol": None, "flybase_id": None, "entrez_id": None}
            continue
        entrez = _first(hit.get("entrezgene"))
        rows[query] = {
            "cg_number": query,
            "gene_symbol": hit.get("symbol"),
            "flybase_id": _first(hit.get("FLYBASE")),
            "entrez_id": str(entrez) if entrez is not None else None,
        }
    if multi:
        logging.info("%s CG number(s) matched several genes; first hit kept", len(multi))
    return pd.DataFrame(list(rows.values()), columns=GENE_COLUMNS)


class GeneLookupClient:
    """Batch client for the MyGene.info ``/query`` endpoint."""

    def __init__(
        self,
        url: str | None = None,
        session: requests.Session | None = None,
        batch_size: int | None = None,
        timeout: int | None = None,
        max_attempts: int | None = None,
        retry_wait_ms: int = 500,
    ) -> None:
        self.url = url or config.MYGENE_URL
        self.session = session or requests.Session()
        self.batch_size = batch_size or config.LOOKUP_BATCH_SIZE
        self.timeout = timeout or config.LOOKUP_TIMEOUT
        self.max_attempts = max_attempts or config.LOOKUP_MAX_ATTEMPTS
        self.retry_wait_ms = retry_wait_ms

    def query_batch(self, ids: list[str]) -> list[dict[str, Any]]:
        """POST one batch of ids, retrying rate limits and server errors."""
        payload = {
            "q": ",".join(ids),
            "scopes": config.MYGENE_SCOPES,
            "fields": config.MYGENE_FIELDS,
            "species": config.MYGENE_SPECIES,
        }

        @retry(
            stop_max_attempt_number=self.max_attempts,
            wait_exponential_multiplier=self.retry_wait_ms,
            wait_exponential_max=30000,
            retry_on_exception=_is_transient,
        )
        def _post() -> list[dict[str, Any]]:
            resp = self.session.post(self.url, data=payload, timeout=self.timeout)
            if resp.status_code == 429 or 500 <= resp.status_code < 600:
                logging.warning("HTTP %s from %s; retrying", resp.status_code, self.url)
                raise _TransientHTTPError(f"HTTP {resp.status_code}")
            resp.raise_for_status()
            return resp.json()

        try:
            hits = _post()
        except (requests.RequestException, _TransientHTTPError, ValueError) as exc:
            raise GeneLookupError(f"Gene lookup failed for a batch of {len(ids)} id(s): {exc}") from exc
        if not isinstance(hits, list):
            raise GeneLookupError(f"Unexpected response from {self.url}: {str(hits)[:300]}")
        return hits

    def lookup(self, cg_numbers: Iterable[str]) -> pd.DataFrame:
        """Look up ``cg_numbers`` in batches and return :data:`GENE_COLUMNS`."""
        ids = list(cg_numbers)
        if not ids:
            return pd.DataFrame(columns=GENE_COLUMNS)
        batches = [ids[i:i + self.batch_size] for i in range(0, len(ids), self.batch_size)]
        hits: list[dict[str, Any]] = []
        for batch in tqdm(batches, desc="Looking up genes", disable=len(batches) < 2):
            hits.extend(self.query_batch(batch))
        found = parse_hits(hits)
        # Ids the service did not echo back at all are treated as not found.
        echoed = set(found["cg_number"])
        absent = [i for i in ids if i not in echoed]
        if absent:
            found = pd.concat(
                [found, pd.DataFrame({"cg_number": absent}, columns=GENE_COLUMNS)],
                ignore_index=True,
            )
        return found


def lookup_genes(
    cg_numbers: Iterable,
    client: GeneLookupClient | None = None,
    cache_path: Path | str | None = None,
) -> pd.DataFrame:
    """Return gene ids for the distinct, normalised ``cg_numbers``.

    With ``cache_path`` earlier answers are reused and new ones are
    appended to the cache.
    """
    ids = [normalize_cg_number(v) for v in cg_numbers]
    ids = list(dict.fromkeys(i for i in ids if not pd.isna(i)))

    cached = pd.DataFrame(columns=GENE_COLUMNS)
    if cache_path is not None and Path(cache_path).exists():
        cached = file_io.read_table(cache_path)[GENE_COLUMNS]
        logging.info("Loaded %s cached gene lookup(s) from %s", len(cached), cache_path)

    known = set(cached["cg_number"])
    todo = [i for i in ids if i not in known]
    if todo:
        client = client or GeneLookupClient()
        logging.info("Querying %s CG number(s) at %s", len(todo), client.url)
        fresh = client.lookup(todo)
        cached = pd.concat([cached, fresh], ignore_index=True) if len(cached) else fresh
        if cache_path is not None:
            file_io.write_tsv(cached, cache_path)

    result = cached[cached["cg_number"].isin(ids)].drop_duplicates("cg_number")
    return result.reset_index(drop=True)


def attach_gene_ids(df: pd.DataFrame, genes: pd.DataFrame) -> pd.DataFrame:
    """Left join gene ids on ``cg_number`` and log the CG numbers left unmapped."""
    left = df.copy()
    left["cg_number"] = left["cg_number"].astype(object)
    right = genes[GENE_COLUMNS].drop_duplicates("cg_number").astype({"cg_number": object})
    merged = left.merge(right, on="cg_number", how="left")
    unmapped = merged["cg_number"].notna() & merged["flybase_id"].isna()
    if int(unmapped.sum()):
        logging.warning(
            "%s line(s) with a CG number have no FlyBase id: %s",
            int(unmapped.sum()),
            ", ".join(sorted(set(merged.loc[unmapped, "cg_number"].astype(str)))[:10]),
        )
    return merged
