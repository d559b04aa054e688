"""
Subpackage for cleaning and merging the extracted tables.

`normalize` turns raw cell matrices into records with a fixed column
layout; `merge_scores` stacks the increased- and decreased-memory
records into one table of significant lines.
"""

__all__ = [
    "normalize",
    "merge_scores",
]
