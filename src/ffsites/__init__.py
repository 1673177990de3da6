"""ffsites: four-fold synonymous site extraction from CDS FASTA files.

ffsites reads coding sequences annotated with FlyBase-style ``loc=``
headers, removes regions covered by more than one overlapping CDS while
keeping every surviving codon in frame, and reports the genomic position
of each four-fold degenerate site.

Example:
    >>> import ffsites
    >>> ffsites.__version__
    '0.1.0'

Modules:
    io: Header parsing, FASTA reading and sorting, site table output
    core: Record model, overlap resolution, codon classification
    utils: Logging utilities
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
