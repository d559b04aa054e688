"""
Subpackage for attaching external identifiers.

`catalog` joins the VDRC stock catalog on the VDRC id; `gene_lookup`
queries a gene annotation service for symbols and stable gene ids.
"""

__all__ = [
    "catalog",
    "gene_lookup",
]
