"""Exceptions raised while extracting four-fold sites.

Every failure during a run is fatal. Each exception carries an
``ErrorKind`` plus whatever record context was known when it was raised,
so the offending record can be located in the input file.

Example:
    >>> from ffsites.errors import HeaderFormatError
    >>> from ffsites.io.headers import parse_header
    >>> try:
    ...     parse_header(">bad")
    ... except HeaderFormatError as e:
    ...     print(e.kind, e.header)
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Closed set of failure kinds."""

    HEADER_FORMAT = "header_format"  # Unparseable annotation header
    STREAM_TRUNCATED = "stream_truncated"  # Record cut short or out of sync
    INVARIANT = "invariant"  # Coordinate and sequence lengths disagree


class FFSitesError(Exception):
    """Base class for extraction failures.

    Attributes:
        kind: Failure kind.
        message: Human-readable description.
        chromosome: Chromosome arm of the offending record, if known.
        gene_id: Gene identifier of the offending record, if known.
        header: Raw header line of the offending record, if known.
    """

    kind: ErrorKind = ErrorKind.INVARIANT

    def __init__(
        self,
        message: str,
        *,
        chromosome: str | None = None,
        gene_id: str | None = None,
        header: str | None = None,
    ) -> None:
        self.message = message
        self.chromosome = chromosome
        self.gene_id = gene_id
        self.header = header
        super().__init__(str(self))

    def __str__(self) -> str:
        parts = [self.message]
        context = []
        if self.chromosome is not None:
            context.append(f"chromosome={self.chromosome}")
        if self.gene_id is not None:
            context.append(f"gene={self.gene_id}")
        if context:
            parts.append(f"({', '.join(context)})")
        if self.header is not None:
            parts.append(f"in header: {self.header}")
        return " ".join(parts)


class HeaderFormatError(FFSitesError, ValueError):
    """Raised when a FASTA header cannot be parsed into a CDS location."""

    kind = ErrorKind.HEADER_FORMAT


class StreamTruncatedError(FFSitesError):
    """Raised when the record stream ends or breaks in the middle of a record."""

    kind = ErrorKind.STREAM_TRUNCATED


class InvariantViolation(FFSitesError):
    """Raised when a record's coordinates and sequence fall out of step."""

    kind = ErrorKind.INVARIANT
