"""Core extraction logic for ffsites.

- CDS record model with strand derived from coordinate order
- Overlap resolution between consecutive records
- Single-pass record cursor
- Four-fold site classification

Example:
    >>> from ffsites.core import extract_from_file
    >>> sites, stats = extract_from_file("cds_sorted.fasta")
"""

from ffsites.core.cursor import (
    CursorState,
    ExtractStats,
    RecordCursor,
    RecordSlot,
    extract_fourfold_sites,
    extract_from_file,
)
from ffsites.core.fourfold import FourFoldSite, SiteSink, find_fourfold_sites, is_fourfold
from ffsites.core.overlap import Disposition, OverlapResolver, Resolution, codon_ceiling
from ffsites.core.records import CDSRecord, Strand

__all__: list[str] = [
    # Records
    "CDSRecord",
    "Strand",
    # Overlap resolution
    "Disposition",
    "OverlapResolver",
    "Resolution",
    "codon_ceiling",
    # Cursor
    "CursorState",
    "ExtractStats",
    "RecordCursor",
    "RecordSlot",
    "extract_fourfold_sites",
    "extract_from_file",
    # Classification
    "FourFoldSite",
    "SiteSink",
    "find_fourfold_sites",
    "is_fourfold",
]
