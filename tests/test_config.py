import importlib
from pathlib import Path

import pytest

from memory_screen import config

_PATH_VARIABLES = (
    "MEMORY_SCREEN_HOME",
    "MEMORY_SCREEN_PDF",
    "MEMORY_SCREEN_SUPPLEMENT",
    "MEMORY_SCREEN_CATALOG",
    "MEMORY_SCREEN_CORRECTIONS",
)


@pytest.fixture
def reload_config(monkeypatch):
    """Reload config under a patched environment and restore it afterwards."""
    for name in _PATH_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    # keep a project .env from overriding the patched environment
    monkeypatch.setattr("dotenv.load_dotenv", lambda *args, **kwargs: False)
    yield lambda: importlib.reload(config)
    monkeypatch.undo()
    importlib.reload(config)


def test_base_dir_defaults_to_working_directory(reload_config, monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    cfg = reload_config()
    assert cfg.BASE_DIR == tmp_path.resolve()
    assert cfg.PDF_PATH == tmp_path.resolve() / "data" / "raw" / "Walkinshaw2016.pdf"
    assert cfg.RAW_DATA_DIR.is_dir()
    assert cfg.RESULTS_DIR.is_dir()


def test_base_dir_from_environment(reload_config, monkeypatch, tmp_path):
    home = tmp_path / "screen"
    monkeypatch.setenv("MEMORY_SCREEN_HOME", str(home))
    cfg = reload_config()
    assert cfg.BASE_DIR == home.resolve()
    assert cfg.ENRICHED_TSV.parent == home.resolve() / "results"
    assert Path(cfg.__file__).parent not in cfg.PDF_PATH.parents
