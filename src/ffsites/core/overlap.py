"""Resolution of genomic overlap between consecutive CDS records.

When the next record in a sorted stream starts before the current one
ends, the shared region is removed from both. The number of removed bases
is rounded up to a whole number of codons so that whatever survives keeps
its reading frame.

Strand only decides which end of a record is its genomically low (head)
or high (tail) end; the overlap arithmetic is the same for all four strand
combinations.

Example:
    >>> from ffsites.core.overlap import OverlapResolver
    >>> resolver = OverlapResolver()
    >>> resolution = resolver.resolve(slot, candidate, sink)
    >>> resolution.disposition
    <Disposition.TRUNCATE_BOTH: 'truncate_both'>
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

from ffsites.core.fourfold import CODON_LENGTH

if TYPE_CHECKING:
    from ffsites.core.cursor import RecordSlot
    from ffsites.core.fourfold import SiteSink
    from ffsites.core.records import CDSRecord

logger = logging.getLogger(__name__)


# =============================================================================
# Enums and Data Structures
# =============================================================================


class Disposition(Enum):
    """What happened to the current and candidate records."""

    NO_OVERLAP = "no_overlap"  # Current flushed, candidate adopted
    TRUNCATE_BOTH = "truncate_both"  # Both trimmed, current flushed
    DROP_CURRENT = "drop_current"  # Current inside overlap, candidate trimmed
    DROP_CANDIDATE = "drop_candidate"  # Candidate inside overlap, current trimmed
    DROP_BOTH = "drop_both"  # Mutual containment, nothing emitted


# Dispositions after which the candidate owns the slot
ADOPTING_DISPOSITIONS = frozenset(
    {Disposition.NO_OVERLAP, Disposition.TRUNCATE_BOTH, Disposition.DROP_CURRENT}
)


class Resolution(NamedTuple):
    """Outcome of resolving one current/candidate pair.

    Attributes:
        disposition: Branch taken.
        overlap: Bases of the current record at or beyond the candidate start.
        del_length: Bases removed from each surviving record.
    """

    disposition: Disposition
    overlap: int = 0
    del_length: int = 0

    @property
    def adopted(self) -> bool:
        """True if the candidate became the current record."""
        return self.disposition in ADOPTING_DISPOSITIONS

    @property
    def n_dropped(self) -> int:
        """Number of records discarded without emission."""
        if self.disposition is Disposition.DROP_BOTH:
            return 2
        if self.disposition in (Disposition.DROP_CURRENT, Disposition.DROP_CANDIDATE):
            return 1
        return 0


# =============================================================================
# Arithmetic
# =============================================================================


def codon_ceiling(n: int) -> int:
    """Round ``n`` up to the nearest multiple of the codon length."""
    return -(-n // CODON_LENGTH) * CODON_LENGTH


def overlaps(current: CDSRecord, candidate: CDSRecord) -> bool:
    """Check whether a candidate starts at or before the current record's end."""
    return (
        current.chromosome == candidate.chromosome
        and candidate.start <= current.end
    )


# =============================================================================
# Resolver
# =============================================================================


class OverlapResolver:
    """Decides the fate of the current record and its successor.

    The resolver borrows the cursor's slot and the freshly parsed
    candidate. It never keeps a reference to either after ``resolve``
    returns.
    """

    def resolve(
        self,
        slot: RecordSlot,
        candidate: CDSRecord,
        sink: SiteSink,
    ) -> Resolution:
        """Resolve the current record in ``slot`` against ``candidate``.

        Args:
            slot: Slot holding the current record, sequence attached.
            candidate: Next record on the same chromosome; its sequence
                may still be pending.
            sink: Destination for flushed records.

        Returns:
            Resolution describing the branch taken. The slot holds the
            candidate afterwards if ``resolution.adopted``, else it is empty.
        """
        current = slot.record
        if current is None:
            raise ValueError("Cannot resolve overlap against an empty slot")

        if not overlaps(current, candidate):
            slot.flush(sink)
            slot.replace(candidate)
            return Resolution(Disposition.NO_OVERLAP)

        overlap = current.count_from_tail(candidate.start)
        del_length = codon_ceiling(overlap)
        logger.info(
            f"Overlap on {current.chromosome} between {current.gene_id} and "
            f"{candidate.gene_id}: {overlap} bp, removing {del_length} bp"
        )

        current_survives = del_length < len(current)
        candidate_survives = del_length < len(candidate)

        if current_survives and candidate_survives:
            slot.truncate_tail(del_length)
            slot.flush(sink)
            slot.replace(candidate)
            slot.truncate_head(del_length)
            disposition = Disposition.TRUNCATE_BOTH
        elif candidate_survives:
            slot.drop()
            slot.replace(candidate)
            slot.truncate_head(del_length)
            disposition = Disposition.DROP_CURRENT
            logger.warning(
                f"{current.gene_id} lies within the overlap with "
                f"{candidate.gene_id}; dropped"
            )
        elif current_survives:
            slot.truncate_tail(del_length)
            slot.flush(sink)
            disposition = Disposition.DROP_CANDIDATE
            logger.warning(
                f"{candidate.gene_id} lies within the overlap with "
                f"{current.gene_id}; dropped"
            )
        else:
            slot.drop()
            disposition = Disposition.DROP_BOTH
            logger.warning(
                f"{current.gene_id} and {candidate.gene_id} contain each other; "
                "both dropped"
            )

        return Resolution(disposition, overlap, del_length)
