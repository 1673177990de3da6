"""Input/output handlers for ffsites.

- Headers: FlyBase CDS ``loc=`` and ``parent=`` parsing
- FASTA: line streaming and sort/dedup of raw CDS files
- Sites: TSV output of four-fold sites

Example:
    >>> from ffsites.io import parse_header, sort_cds_fasta, write_sites_tsv
"""

from ffsites.io.fasta import SortSummary, iter_fasta_lines, sort_cds_fasta
from ffsites.io.headers import CHROMOSOME_ARMS, ParsedHeader, parse_header
from ffsites.io.sites import write_sites_tsv

__all__: list[str] = [
    "CHROMOSOME_ARMS",
    "ParsedHeader",
    "SortSummary",
    "iter_fasta_lines",
    "parse_header",
    "sort_cds_fasta",
    "write_sites_tsv",
]
