"""CDS record model.

A ``CDSRecord`` pairs a nucleotide sequence with the genomic coordinate of
every base, both listed in transcript order. Its sequence may arrive after
its header (the stream is read header first), so truncations requested
before the sequence is known are remembered and applied on attachment.

Strand is never stored: it is read off the coordinate order.
"""

from __future__ import annotations

from enum import Enum

import attrs

from ffsites.errors import InvariantViolation
from ffsites.io.headers import CHROMOSOME_ARMS, parse_header


class Strand(Enum):
    """Transcript orientation relative to the genome."""

    FORWARD = "+"
    REVERSE = "-"


@attrs.define(slots=True)
class CDSRecord:
    """A coding sequence with per-nucleotide genomic coordinates.

    Attributes:
        chromosome: Chromosome arm name.
        gene_id: Parent gene identifier.
        positions: Genomic coordinate of each base, 5' to 3'.
        header: Raw header line, kept for diagnostics.
        sequence: Nucleotide sequence, or None until attached.
        pending_5prime: Bases to remove from the 5' end on attachment.
        pending_3prime: Bases to remove from the 3' end on attachment.
    """

    chromosome: str
    gene_id: str
    positions: list[int]
    header: str = ""
    sequence: str | None = None
    pending_5prime: int = attrs.field(default=0, init=False)
    pending_3prime: int = attrs.field(default=0, init=False)

    @classmethod
    def from_header(
        cls,
        header: str,
        arms: frozenset[str] | set[str] = CHROMOSOME_ARMS,
    ) -> CDSRecord:
        """Build a record awaiting its sequence from a FASTA header."""
        parsed = parse_header(header, arms)
        return cls(
            chromosome=parsed.chromosome,
            gene_id=parsed.gene_id,
            positions=parsed.positions,
            header=header.strip(),
        )

    def __len__(self) -> int:
        return len(self.positions)

    @property
    def strand(self) -> Strand:
        """Orientation derived from the first and last coordinates."""
        if self.positions and self.positions[0] > self.positions[-1]:
            return Strand.REVERSE
        return Strand.FORWARD

    @property
    def start(self) -> int:
        """Lowest genomic coordinate."""
        return min(self.positions)

    @property
    def end(self) -> int:
        """Highest genomic coordinate."""
        return max(self.positions)

    @property
    def has_sequence(self) -> bool:
        return self.sequence is not None

    # -------------------------------------------------------------------------
    # Sequence attachment
    # -------------------------------------------------------------------------

    def attach_sequence(self, raw: str) -> None:
        """Attach the sequence line, applying any pending truncation.

        Args:
            raw: Sequence text exactly as read from the file.

        Raises:
            InvariantViolation: If the sequence length does not match the
                coordinate list parsed from the header.
        """
        raw = raw.strip()
        expected = len(self.positions) + self.pending_5prime + self.pending_3prime
        if len(raw) != expected:
            raise InvariantViolation(
                f"Sequence length {len(raw)} does not match {expected} header positions",
                chromosome=self.chromosome,
                gene_id=self.gene_id,
                header=self.header,
            )
        self.sequence = raw[self.pending_5prime : len(raw) - self.pending_3prime]
        self.pending_5prime = 0
        self.pending_3prime = 0
        self.check_lengths()

    def check_lengths(self) -> None:
        """Raise InvariantViolation if sequence and coordinates differ in length."""
        if self.sequence is not None and len(self.sequence) != len(self.positions):
            raise InvariantViolation(
                f"Sequence length {len(self.sequence)} differs from "
                f"{len(self.positions)} positions",
                chromosome=self.chromosome,
                gene_id=self.gene_id,
                header=self.header,
            )

    # -------------------------------------------------------------------------
    # Truncation
    # -------------------------------------------------------------------------

    def trim_5prime(self, n: int) -> None:
        """Remove ``n`` bases from the start of the transcript."""
        if n <= 0:
            return
        self.positions = self.positions[n:]
        if self.sequence is None:
            self.pending_5prime += n
        else:
            self.sequence = self.sequence[n:]
        self.check_lengths()

    def trim_3prime(self, n: int) -> None:
        """Remove ``n`` bases from the end of the transcript."""
        if n <= 0:
            return
        keep = max(len(self.positions) - n, 0)
        self.positions = self.positions[:keep]
        if self.sequence is None:
            self.pending_3prime += n
        else:
            self.sequence = self.sequence[:keep]
        self.check_lengths()

    def truncate_head(self, n: int) -> None:
        """Remove ``n`` bases from the genomically lowest end."""
        if self.strand is Strand.FORWARD:
            self.trim_5prime(n)
        else:
            self.trim_3prime(n)

    def truncate_tail(self, n: int) -> None:
        """Remove ``n`` bases from the genomically highest end."""
        if self.strand is Strand.FORWARD:
            self.trim_3prime(n)
        else:
            self.trim_5prime(n)

    def count_from_tail(self, threshold: int) -> int:
        """Count coordinates at or beyond ``threshold``.

        Coordinates are monotonic, so the walk starts at the genomically
        highest end and stops at the first one below the threshold.
        """
        walk = (
            reversed(self.positions)
            if self.strand is Strand.FORWARD
            else iter(self.positions)
        )
        count = 0
        for position in walk:
            if position < threshold:
                break
            count += 1
        return count
