"""Four-fold synonymous site classification.

In the standard genetic code a codon's third position is four-fold
degenerate when its first two bases fix the amino acid:

- middle base C: always (Ser, Pro, Thr, Ala)
- middle base T or G: only with first base C or G (Leu, Val, Arg, Gly)
- middle base A: never

Example:
    >>> from ffsites.core.fourfold import is_fourfold
    >>> is_fourfold("CTG"), is_fourfold("ATG")
    (True, False)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Iterator, NamedTuple

if TYPE_CHECKING:
    from ffsites.core.records import CDSRecord

logger = logging.getLogger(__name__)

CODON_LENGTH = 3

# First bases that make a T or G middle base four-fold
_STRONG_FIRST_BASES = frozenset("CG")


class FourFoldSite(NamedTuple):
    """Genomic location of a four-fold degenerate base.

    Attributes:
        chromosome: Chromosome arm name.
        gene_id: Gene the site was extracted from.
        position: Genomic coordinate of the third codon position.
    """

    chromosome: str
    gene_id: str
    position: int


def is_fourfold(codon: str) -> bool:
    """Check whether a codon's third position is four-fold degenerate.

    Args:
        codon: Three-letter codon, any case.

    Returns:
        True if every base at the third position gives the same amino acid.
    """
    if len(codon) != CODON_LENGTH:
        return False
    first, middle = codon[0].upper(), codon[1].upper()
    if middle == "C":
        return True
    if middle in ("T", "G"):
        return first in _STRONG_FIRST_BASES
    return False


def find_fourfold_sites(record: CDSRecord) -> Iterator[FourFoldSite]:
    """Yield the four-fold sites of a record in codon order.

    Codons are read from offset 0; one or two leftover bases at the end
    are ignored.
    """
    sequence = record.sequence or ""
    n_codons = len(sequence) // CODON_LENGTH
    for i in range(0, n_codons * CODON_LENGTH, CODON_LENGTH):
        if is_fourfold(sequence[i : i + CODON_LENGTH]):
            yield FourFoldSite(
                record.chromosome,
                record.gene_id,
                record.positions[i + CODON_LENGTH - 1],
            )


class SiteSink:
    """Append-only, ordered collection of emitted sites.

    Example:
        >>> sink = SiteSink()
        >>> sink.flush(record)
        >>> sink.sites[:3]
    """

    def __init__(self) -> None:
        self._sites: list[FourFoldSite] = []
        self.n_records = 0

    def extend(self, sites: Iterable[FourFoldSite]) -> None:
        """Append sites in the order given."""
        self._sites.extend(sites)

    def flush(self, record: CDSRecord) -> int:
        """Classify a finalized record and append its sites.

        Returns:
            Number of sites appended.
        """
        before = len(self._sites)
        self.extend(find_fourfold_sites(record))
        self.n_records += 1
        added = len(self._sites) - before
        logger.debug(f"{record.gene_id}: {added} four-fold sites from {len(record)} bp")
        return added

    @property
    def sites(self) -> list[FourFoldSite]:
        """Copy of the emitted sites."""
        return list(self._sites)

    def __len__(self) -> int:
        return len(self._sites)

    def __iter__(self) -> Iterator[FourFoldSite]:
        return iter(self._sites)
