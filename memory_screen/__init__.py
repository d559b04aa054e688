"""
Walkinshaw 2016 memory-screen cleaning package

This package scrapes the significant-line tables out of the manuscript
PDF, reconciles them with the supplementary results and enriches the
result with stock-catalog and gene identifiers.  Modules are organised
by stage and can be used independently or orchestrated together
through the high‑level pipeline functions.
"""

from . import config  # noqa: F401
from . import pipelines  # noqa: F401

__all__ = [
    "config",
    "pipelines",
]
