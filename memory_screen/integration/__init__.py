"""
Reconciliation of the significant lines with the supplementary results.
"""

__all__ = [
    "reconcile",
]
