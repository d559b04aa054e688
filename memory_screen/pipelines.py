"""
High‑level pipeline orchestration functions.

Each function in this module coordinates one stage of the cleaning
run.  The functions call into lower‑level modules defined in
`extraction`, `processing`, `integration` and `enrichment`, and pass
data between stages through files in `config.PROCESSED_DATA_DIR` so a
stage can be re-run on its own.  Use these functions from the command
line (``python -m memory_screen``) or import them into a notebook.
"""

from __future__ import annotations

import logging
from pathlib import Path

from . import config
from .extraction import pdf_tables
from .processing import merge_scores, normalize
from .integration import reconcile as reconcile_mod
from .enrichment import catalog as catalog_mod
from .enrichment import gene_lookup
from .utils import file_io


def run_extraction(
    pdf_path: Path | None = None,
    increased_pages=None,
    decreased_pages=None,
) -> bool:
    """Extract the raw increased- and decreased-memory tables from the PDF.

    Raw matrices are saved as JSON to `config.RAW_INCREASED_JSON` and
    `config.RAW_DECREASED_JSON`.  Returns ``False`` if the PDF is
    missing.
    """
    pdf_path = Path(pdf_path or config.PDF_PATH)
    if not pdf_path.exists():
        logging.error("Manuscript PDF not found at %s", pdf_path)
        return False
    increased_pages = increased_pages or config.INCREASED_PAGES
    decreased_pages = decreased_pages or config.DECREASED_PAGES

    logging.info("Extracting increased-memory table…")
    increased = pdf_tables.extract_tables(pdf_path, increased_pages)
    pdf_tables.write_raw_tables(increased, config.RAW_INCREASED_JSON)

    logging.info("Extracting decreased-memory table…")
    decreased = pdf_tables.extract_tables(pdf_path, decreased_pages)
    pdf_tables.write_raw_tables(decreased, config.RAW_DECREASED_JSON)
    return True


def run_normalization(corrections_path: Path | None = None) -> bool:
    """Normalise the raw tables and merge them into the significant-lines table.

    Reads the JSON written by :func:`run_extraction`, writes
    `config.SIGNIFICANT_TSV` and checks the line counts against the
    published ones.
    """
    for path in (config.RAW_INCREASED_JSON, config.RAW_DECREASED_JSON):
        if not path.exists():
            logging.error("Raw tables not found at %s; run the extract stage first", path)
            return False

    increased = normalize.normalize_increased(pdf_tables.read_raw_tables(config.RAW_INCREASED_JSON))
    decreased = normalize.normalize_decreased(pdf_tables.read_raw_tables(config.RAW_DECREASED_JSON))

    corrections = merge_scores.load_corrections(corrections_path or config.CORRECTIONS_PATH)
    logging.info("Merging significant lines…")
    significant = merge_scores.merge_significant(decreased, increased, corrections)
    merge_scores.check_counts(significant)

    file_io.write_tsv(significant, config.SIGNIFICANT_TSV)
    logging.info("Saved significant lines to %s", config.SIGNIFICANT_TSV)
    return True


def run_reconciliation(supplement_path: Path | None = None) -> bool:
    """Join the significant lines with the supplementary results table."""
    supplement_path = Path(supplement_path or config.SUPPLEMENT_PATH)
    if not config.SIGNIFICANT_TSV.exists():
        logging.error("Significant lines not found at %s; run the normalize stage first", config.SIGNIFICANT_TSV)
        return False
    if not supplement_path.exists():
        logging.error("Supplementary table not found at %s", supplement_path)
        return False

    significant = file_io.read_tsv(config.SIGNIFICANT_TSV)
    supplement = reconcile_mod.load_supplement(supplement_path)

    logging.info("Reconciling with the supplementary table…")
    reconciled, report = reconcile_mod.reconcile(significant, supplement)
    logging.info("Reconciliation summary: %s", report.as_dict())

    file_io.write_tsv(reconciled, config.RECONCILED_TSV)
    logging.info("Saved reconciled lines to %s", config.RECONCILED_TSV)
    return True


def run_enrichment(
    catalog_path: Path | None = None,
    output_path: Path | None = None,
    skip_lookup: bool = False,
    client: gene_lookup.GeneLookupClient | None = None,
) -> bool:
    """Attach catalog information and gene ids; write the final TSV.

    With ``skip_lookup`` only the catalog join is done and the gene id
    columns are left out.  A missing catalog is logged and the gene
    lookup runs on the manuscript CG numbers alone.
    """
    catalog_path = Path(catalog_path or config.CATALOG_PATH)
    output_path = Path(output_path or config.ENRICHED_TSV)
    if not config.RECONCILED_TSV.exists():
        logging.error("Reconciled lines not found at %s; run the reconcile stage first", config.RECONCILED_TSV)
        return False

    enriched = file_io.read_tsv(config.RECONCILED_TSV)
    if catalog_path.exists():
        logging.info("Joining stock catalog…")
        enriched = catalog_mod.attach_catalog(enriched, catalog_mod.load_catalog(catalog_path))
    else:
        logging.warning("Stock catalog not found at %s; CG numbers come from the manuscript only", catalog_path)

    if skip_lookup:
        logging.info("Skipping gene id lookup.")
    else:
        logging.info("Looking up gene symbols and ids…")
        genes = gene_lookup.lookup_genes(
            enriched["cg_number"],
            client=client,
            cache_path=config.GENE_CACHE_TSV,
        )
        enriched = gene_lookup.attach_gene_ids(enriched, genes)

    file_io.write_tsv(enriched, output_path)
    logging.info("Saved %s enriched line(s) to %s", len(enriched), output_path)
    return True


def run_all(
    pdf_path: Path | None = None,
    increased_pages=None,
    decreased_pages=None,
    corrections_path: Path | None = None,
    supplement_path: Path | None = None,
    catalog_path: Path | None = None,
    output_path: Path | None = None,
    skip_lookup: bool = False,
    client: gene_lookup.GeneLookupClient | None = None,
) -> bool:
    """Run every stage in order, stopping at the first one that produces nothing."""
    stages = (
        lambda: run_extraction(pdf_path, increased_pages, decreased_pages),
        lambda: run_normalization(corrections_path),
        lambda: run_reconciliation(supplement_path),
        lambda: run_enrichment(catalog_path, output_path, skip_lookup=skip_lookup, client=client),
    )
    for name, stage in zip(("extract", "normalize", "reconcile", "enrich"), stages):
        if not stage():
            logging.error("Stage %s did not complete; stopping.", name)
            return False
    return True
