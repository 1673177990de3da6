"""Single-pass cursor over a sorted CDS record stream.

The cursor reads a FASTA stream in which every header is followed by
exactly one sequence line. It holds one current record in a ``RecordSlot``
and, on each new header, either flushes it (chromosome switch, end of
stream) or hands it to the ``OverlapResolver`` together with the new
candidate.

Records must arrive grouped by chromosome and sorted by start position,
as written by ``ffsites sort``.

Example:
    >>> from ffsites.core.cursor import extract_from_file
    >>> sites, stats = extract_from_file("cds_sorted.fasta")
    >>> stats.n_sites == len(sites)
    True
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Iterable

import attrs

from ffsites.core.fourfold import FourFoldSite, SiteSink
from ffsites.core.overlap import OverlapResolver, Resolution
from ffsites.core.records import CDSRecord
from ffsites.errors import InvariantViolation, StreamTruncatedError
from ffsites.io.fasta import HEADER_MARKER, iter_fasta_lines
from ffsites.io.headers import CHROMOSOME_ARMS

logger = logging.getLogger(__name__)


# =============================================================================
# Record Slot
# =============================================================================


class RecordSlot:
    """Owned, optional holder for the current record.

    Every change to the current record goes through one of the named
    transitions below, so a record is never held by two owners.
    """

    def __init__(self) -> None:
        self._record: CDSRecord | None = None

    @property
    def record(self) -> CDSRecord | None:
        return self._record

    @property
    def is_empty(self) -> bool:
        return self._record is None

    def replace(self, record: CDSRecord) -> None:
        """Adopt a record. The slot must be empty."""
        if self._record is not None:
            raise InvariantViolation(
                f"Slot still holds {self._record.gene_id} while adopting {record.gene_id}",
                chromosome=record.chromosome,
                gene_id=record.gene_id,
                header=record.header,
            )
        self._record = record

    def take(self) -> CDSRecord | None:
        """Remove and return the current record."""
        record, self._record = self._record, None
        return record

    def drop(self) -> CDSRecord | None:
        """Discard the current record without emitting it."""
        record = self.take()
        if record is not None:
            logger.debug(f"Dropped {record.gene_id}")
        return record

    def flush(self, sink: SiteSink) -> int:
        """Classify the current record into ``sink`` and empty the slot.

        Returns:
            Number of sites emitted.
        """
        record = self.take()
        if record is None:
            return 0
        record.check_lengths()
        return sink.flush(record)

    def truncate_tail(self, n: int) -> None:
        """Trim ``n`` bases from the genomically high end of the record."""
        if self._record is not None:
            self._record.truncate_tail(n)

    def truncate_head(self, n: int) -> None:
        """Trim ``n`` bases from the genomically low end of the record."""
        if self._record is not None:
            self._record.truncate_head(n)


# =============================================================================
# Cursor
# =============================================================================


class CursorState(Enum):
    """Lifecycle of a RecordCursor."""

    AWAITING_FIRST = "awaiting_first"
    HAVE_CURRENT = "have_current"
    FLUSHING = "flushing"
    DONE = "done"


@attrs.define
class ExtractStats:
    """Counters collected over one extraction run.

    Attributes:
        n_records: Headers read.
        n_flushed: Records classified and emitted.
        n_dropped: Records discarded by containment.
        n_overlaps: Overlapping record pairs.
        n_chromosomes: Distinct chromosomes seen.
        n_sites: Four-fold sites emitted.
    """

    n_records: int = 0
    n_flushed: int = 0
    n_dropped: int = 0
    n_overlaps: int = 0
    n_chromosomes: int = 0
    n_sites: int = 0


class RecordCursor:
    """Drives overlap resolution and classification over a record stream.

    Attributes:
        sink: Destination of emitted sites.
        state: Current lifecycle state.
        stats: Run counters.
    """

    def __init__(
        self,
        sink: SiteSink | None = None,
        resolver: OverlapResolver | None = None,
        arms: frozenset[str] | set[str] = CHROMOSOME_ARMS,
    ) -> None:
        self.sink = sink if sink is not None else SiteSink()
        self.resolver = resolver or OverlapResolver()
        self.arms = arms
        self.state = CursorState.AWAITING_FIRST
        self.stats = ExtractStats()
        self._slot = RecordSlot()
        self._chromosome: str | None = None
        # Record whose sequence the next line fills; None means discard it
        self._awaiting: CDSRecord | None = None
        self._expect_sequence = False
        self._last: CDSRecord | None = None

    @property
    def current(self) -> CDSRecord | None:
        """Record currently held by the cursor."""
        return self._slot.record

    def _context(self) -> dict[str, str | None]:
        """Location of the most recently read record, for error reports."""
        if self._last is None:
            return {}
        return {
            "chromosome": self._last.chromosome,
            "gene_id": self._last.gene_id,
            "header": self._last.header,
        }

    def _flush_current(self) -> None:
        if self._slot.is_empty:
            return
        self.stats.n_sites += self._slot.flush(self.sink)
        self.stats.n_flushed += 1

    def feed_header(self, header: str) -> Resolution | None:
        """Process the header of the next record.

        Returns:
            The overlap resolution, or None if no resolution was needed.

        Raises:
            HeaderFormatError: If the header cannot be parsed.
            StreamTruncatedError: If the previous record had no sequence.
        """
        if self.state is CursorState.DONE:
            raise StreamTruncatedError("Header received after end of stream", header=header)
        if self._expect_sequence:
            raise StreamTruncatedError(
                "Header follows a header with no sequence line",
                **self._context(),
            )

        candidate = CDSRecord.from_header(header, self.arms)
        self.stats.n_records += 1
        self._last = candidate
        self._expect_sequence = True

        if candidate.chromosome != self._chromosome:
            if self._chromosome is not None:
                logger.info(f"Finished chromosome {self._chromosome}")
            logger.info(f"Processing chromosome {candidate.chromosome}")
            self._chromosome = candidate.chromosome
            self.stats.n_chromosomes += 1
            self._flush_current()

        if self._slot.is_empty:
            self._slot.replace(candidate)
            self._awaiting = candidate
            self.state = CursorState.HAVE_CURRENT
            return None

        sites_before = len(self.sink)
        records_before = self.sink.n_records
        resolution = self.resolver.resolve(self._slot, candidate, self.sink)
        self.stats.n_sites += len(self.sink) - sites_before
        self.stats.n_flushed += self.sink.n_records - records_before
        self.stats.n_dropped += resolution.n_dropped
        if resolution.overlap:
            self.stats.n_overlaps += 1

        self._awaiting = candidate if resolution.adopted else None
        self.state = (
            CursorState.AWAITING_FIRST if self._slot.is_empty else CursorState.HAVE_CURRENT
        )
        return resolution

    def feed_sequence(self, line: str) -> None:
        """Attach a sequence line to the record whose header came last.

        The line is read and discarded when that record was dropped.

        Raises:
            StreamTruncatedError: If no header precedes the line.
            InvariantViolation: If the sequence length mismatches the header.
        """
        if not self._expect_sequence:
            raise StreamTruncatedError(
                "Sequence line without a preceding header",
                **self._context(),
            )
        self._expect_sequence = False
        if self._awaiting is not None:
            self._awaiting.attach_sequence(line)
        self._awaiting = None

    def finish(self) -> SiteSink:
        """Flush the pending record and end the run.

        Raises:
            StreamTruncatedError: If the last header has no sequence line.
        """
        if self._expect_sequence:
            raise StreamTruncatedError(
                "End of input before the sequence line",
                **self._context(),
            )
        self.state = CursorState.FLUSHING
        self._flush_current()
        self.state = CursorState.DONE
        return self.sink

    def consume(self, lines: Iterable[str]) -> SiteSink:
        """Run the cursor over every line of a record stream.

        Blank lines are skipped.
        """
        for line in lines:
            line = line.strip()
            if not line:
                continue
            if line.startswith(HEADER_MARKER):
                self.feed_header(line)
            else:
                self.feed_sequence(line)
        return self.finish()


# =============================================================================
# Convenience Functions
# =============================================================================


def extract_fourfold_sites(
    lines: Iterable[str],
    arms: frozenset[str] | set[str] = CHROMOSOME_ARMS,
) -> tuple[list[FourFoldSite], ExtractStats]:
    """Extract four-fold sites from an iterable of FASTA lines.

    Returns:
        Tuple of (sites in emission order, run statistics).
    """
    cursor = RecordCursor(arms=arms)
    sink = cursor.consume(lines)
    return sink.sites, cursor.stats


def extract_from_file(
    path: Path | str,
    arms: frozenset[str] | set[str] = CHROMOSOME_ARMS,
) -> tuple[list[FourFoldSite], ExtractStats]:
    """Extract four-fold sites from a sorted CDS FASTA file."""
    path = Path(path)
    logger.info(f"Extracting four-fold sites from {path.name}")
    return extract_fourfold_sites(iter_fasta_lines(path), arms)
