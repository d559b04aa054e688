"""
Subpackage for pulling raw tables out of the manuscript PDF.

Modules in this package return untyped cell matrices; all cleaning
happens in `processing`.
"""

__all__ = [
    "pdf_tables",
]
