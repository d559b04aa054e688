"""
Project configuration settings.

Edit the variables in this module to point to your input files and to
adjust the dataset-specific constants (page ranges, expected counts,
identifier corrections).  Keeping configuration in one place makes it
easy to override default behaviour without modifying individual
modules.
"""

from pathlib import Path
import os

try:  # optional dotenv load
    from dotenv import load_dotenv  # type: ignore
    load_dotenv()
except Exception:
    pass

# Base directory for storing input and output data: the project the
# pipeline is run from, or MEMORY_SCREEN_HOME when set.
BASE_DIR: Path = Path(os.getenv("MEMORY_SCREEN_HOME", Path.cwd())).resolve()

###############################################################################
# Directory paths
###############################################################################

# Input files (PDF, supplementary spreadsheet, stock catalog) live here
RAW_DATA_DIR: Path = BASE_DIR / "data" / "raw"

# Intermediate tables written between stages
PROCESSED_DATA_DIR: Path = BASE_DIR / "data" / "processed"

# Final enriched dataset
RESULTS_DIR: Path = BASE_DIR / "results"

# Create directories if they do not already exist
for _dir in (RAW_DATA_DIR, PROCESSED_DATA_DIR, RESULTS_DIR):
    _dir.mkdir(parents=True, exist_ok=True)

###############################################################################
# Input files
###############################################################################

# Prefer environment variables; fall back to the conventional file names.
PDF_PATH: Path = Path(os.getenv("MEMORY_SCREEN_PDF", RAW_DATA_DIR / "Walkinshaw2016.pdf"))
SUPPLEMENT_PATH: Path = Path(
    os.getenv("MEMORY_SCREEN_SUPPLEMENT", RAW_DATA_DIR / "Walkinshaw2016_supplement.csv")
)
CATALOG_PATH: Path = Path(os.getenv("MEMORY_SCREEN_CATALOG", RAW_DATA_DIR / "vdrc_catalog.xlsx"))
CORRECTIONS_PATH: Path | None = (
    Path(os.environ["MEMORY_SCREEN_CORRECTIONS"]) if os.getenv("MEMORY_SCREEN_CORRECTIONS") else None
)

###############################################################################
# PDF layout
###############################################################################

# Table 2 (lines with increased memory) sits on page 5 of the manuscript.
INCREASED_PAGES: list[int] = [5]
# The supplementary table of lines with decreased memory spans pages 13-38.
DECREASED_PAGES: list[int] = list(range(13, 39))

# Table 2 repeats its column names over two rows; the decreased table has one.
INCREASED_HEADER_ROWS: int = 2
DECREASED_HEADER_ROWS: int = 1

# Positional names for the columns left after empty columns are dropped.
RAW_COLUMNS: list[str] = [
    "vdrc_id",
    "cg_number",
    "gene_name",
    "primary_score",
    "secondary_score",
    "physical_abnormality",
    "mean_activity_difference",
    "act_sig",
]

SIGNIFICANT_COLUMNS: list[str] = [
    "vdrc_id",
    "cg_number",
    "primary_PI",
    "primary_SEM",
    "secondary_PI",
    "secondary_SEM",
    "physical_abnormality",
    "mean_activity_difference",
    "act_sig",
    "change_in_memory",
]

###############################################################################
# Published counts
###############################################################################

EXPECTED_COUNTS: dict[str, int] = {
    "total": 600,
    "increased": 42,
    "decreased": 558,
}

###############################################################################
# Reconciliation
###############################################################################

SUPPLEMENT_COLUMN_ALIASES: dict[str, list[str]] = {
    "vdrc_id": ["vdrc_id", "vdrc id", "vdrc", "transformant id", "line"],
    "PI": ["pi", "performance index", "memory score", "score"],
    "SEM": ["sem", "pi sem", "s.e.m.", "se"],
    "date": ["date", "test date", "date tested"],
    "physical_abnormality": ["physical_abnormality", "physical abnormality", "phenotype", "abnormality"],
}

# PI differences (manuscript vs supplement) above this are reported.
PI_TOLERANCE: float = 0.01

###############################################################################
# Identifier enrichment
###############################################################################

CATALOG_COLUMN_ALIASES: dict[str, list[str]] = {
    "vdrc_id": ["vdrc_id", "vdrc id", "transformant id", "id"],
    "cg_number": ["cg_number", "cg number", "cg", "annotation id", "synonym"],
    "construct_id": ["construct_id", "construct id", "construct"],
    "library": ["library", "lib"],
}

# Literal fixes for identifiers the PDF extraction gets wrong.  Add entries
# here (or in a corrections CSV, see CORRECTIONS_PATH) as they turn up.
# Shape: {column: {bad_value: good_value}}
IDENTIFIER_CORRECTIONS: dict[str, dict[str, str]] = {
    "vdrc_id": {},
    "cg_number": {},
}

MYGENE_URL: str = os.getenv("MYGENE_URL", "https://mygene.info/v3/query")
# Fly genes carry their CG annotation id as the symbol (unnamed genes) or
# as an alias (named genes).  Free-text name fields are not searched.
MYGENE_SCOPES: str = "symbol,alias"
MYGENE_FIELDS: str = "symbol,FLYBASE,entrezgene"
MYGENE_SPECIES: str = "fruitfly"
LOOKUP_BATCH_SIZE: int = 1000
LOOKUP_TIMEOUT: int = 30
LOOKUP_MAX_ATTEMPTS: int = 5

###############################################################################
# Output files
###############################################################################

RAW_INCREASED_JSON: Path = PROCESSED_DATA_DIR / "raw_increased_tables.json"
RAW_DECREASED_JSON: Path = PROCESSED_DATA_DIR / "raw_decreased_tables.json"
SIGNIFICANT_TSV: Path = PROCESSED_DATA_DIR / "significant_lines.tsv"
RECONCILED_TSV: Path = PROCESSED_DATA_DIR / "reconciled_lines.tsv"
GENE_CACHE_TSV: Path = PROCESSED_DATA_DIR / "gene_lookup_cache.tsv"
ENRICHED_TSV: Path = RESULTS_DIR / "walkinshaw_enriched.tsv"
