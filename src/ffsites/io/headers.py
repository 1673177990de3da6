"""Parsing of FlyBase-style CDS FASTA headers.

A CDS header carries whitespace-separated ``key=value;`` annotation
tokens. Two of them matter here:

    loc=2L:join(7680..8116,8193..8589)
    loc=X:complement(join(19961297..19961845,19963955..19964071))
    parent=FBgn0031208,FBtr0300689

The location is expanded into one genomic coordinate per nucleotide,
listed in transcript (5' to 3') order, so that complemented records yield
descending coordinates.

Example:
    >>> from ffsites.io.headers import parse_header
    >>> parsed = parse_header(">FBpp1 type=CDS; loc=2L:101..106; parent=FBgn1,FBtr1;")
    >>> parsed.chromosome, parsed.gene_id, parsed.positions
    ('2L', 'FBgn1', [101, 102, 103, 104, 105, 106])
"""

from __future__ import annotations

import re
from typing import NamedTuple

from ffsites.errors import HeaderFormatError

# =============================================================================
# Constants
# =============================================================================

# Drosophila chromosome arms
CHROMOSOME_ARMS = frozenset({"2L", "2R", "3L", "3R", "4", "X"})

# Prefix used for arm names in the D. simulans CDS files
SCAFFOLD_PREFIX = "Scf_"

LOC_KEY = "loc="
PARENT_KEY = "parent="

_LOC_PATTERN = re.compile(r"^(?P<chrom>[^:]+):(?P<body>.+)$")
_RANGE_PATTERN = re.compile(r"^(?P<start>\d+)\.\.(?P<end>\d+)$")
_WRAPPER_PATTERN = re.compile(r"^(?P<name>complement|join)\((?P<inner>.*)\)$")


class ParsedHeader(NamedTuple):
    """Location and identity of a CDS record.

    Attributes:
        chromosome: Chromosome arm name without any scaffold prefix.
        gene_id: Parent gene identifier (FBgn number).
        positions: Genomic coordinate of every nucleotide, 5' to 3'.
        is_reverse: True if the location is complemented.
    """

    chromosome: str
    gene_id: str
    positions: list[int]
    is_reverse: bool


# =============================================================================
# Token Helpers
# =============================================================================


def _find_token(header: str, key: str) -> str | None:
    """Return the value of the first ``key=`` token, stripped of ``;``."""
    for field in header.split():
        if field.startswith(key):
            return field[len(key) :].rstrip(";")
    return None


def parse_chromosome(
    token: str,
    arms: frozenset[str] | set[str] = CHROMOSOME_ARMS,
) -> str | None:
    """Normalize a chromosome token to an arm name.

    Args:
        token: Chromosome name as written in the header.
        arms: Recognized arm names.

    Returns:
        Arm name, or None if the token is not a recognized arm.
    """
    if token.startswith(SCAFFOLD_PREFIX):
        token = token[len(SCAFFOLD_PREFIX) :]
    return token if token in arms else None


def parse_range(text: str, header: str | None = None) -> tuple[int, int]:
    """Parse a ``START..END`` range.

    Raises:
        HeaderFormatError: If either number is missing or non-numeric, or
            if start is not before end.
    """
    match = _RANGE_PATTERN.match(text.strip())
    if not match:
        raise HeaderFormatError(f"Cannot parse position range '{text}'", header=header)

    start = int(match.group("start"))
    end = int(match.group("end"))
    if start >= end:
        raise HeaderFormatError(
            f"Start position {start} is not before end position {end}",
            header=header,
        )
    return start, end


def expand_ranges(ranges: list[tuple[int, int]], reverse: bool) -> list[int]:
    """Enumerate every coordinate covered by a list of inclusive ranges.

    Forward records are listed range by range in ascending order. Reverse
    records walk the ranges last to first, each one descending.
    """
    positions: list[int] = []
    if reverse:
        for start, end in reversed(ranges):
            positions.extend(range(end, start - 1, -1))
    else:
        for start, end in ranges:
            positions.extend(range(start, end + 1))
    return positions


def parse_location(
    body: str,
    header: str | None = None,
) -> tuple[list[tuple[int, int]], bool]:
    """Parse the part of a ``loc=`` token after the chromosome.

    Returns:
        Tuple of (ranges in file order, complemented flag).
    """
    complemented = False
    joined = False

    match = _WRAPPER_PATTERN.match(body)
    if match and match.group("name") == "complement":
        complemented = True
        body = match.group("inner")
        match = _WRAPPER_PATTERN.match(body)
    if match and match.group("name") == "join":
        joined = True
        body = match.group("inner")

    if not body or not body[0].isdigit():
        raise HeaderFormatError(f"Unknown value in position list '{body}'", header=header)

    pieces = body.split(",") if joined else [body]
    return [parse_range(piece, header) for piece in pieces], complemented


# =============================================================================
# Header Parsing
# =============================================================================


def parse_header(
    header: str,
    arms: frozenset[str] | set[str] = CHROMOSOME_ARMS,
) -> ParsedHeader:
    """Parse a CDS FASTA header.

    Args:
        header: Header line, with or without the leading ``>``.
        arms: Recognized chromosome arm names.

    Returns:
        ParsedHeader with coordinates in transcript order.

    Raises:
        HeaderFormatError: If the location or parent token is missing or
            malformed, or the chromosome is not a recognized arm.
    """
    header = header.strip()

    loc = _find_token(header, LOC_KEY)
    if loc is None:
        raise HeaderFormatError("No loc= field", header=header)

    match = _LOC_PATTERN.match(loc)
    if not match:
        raise HeaderFormatError(f"Cannot parse location '{loc}'", header=header)

    chromosome = parse_chromosome(match.group("chrom"), arms)
    if chromosome is None:
        raise HeaderFormatError(
            f"Unknown chromosome '{match.group('chrom')}'",
            header=header,
        )

    ranges, reverse = parse_location(match.group("body"), header)

    parent = _find_token(header, PARENT_KEY)
    gene_id = parent.split(",")[0] if parent else ""
    if not gene_id:
        raise HeaderFormatError(
            "No parent= field",
            chromosome=chromosome,
            header=header,
        )

    return ParsedHeader(
        chromosome=chromosome,
        gene_id=gene_id,
        positions=expand_ranges(ranges, reverse),
        is_reverse=reverse,
    )


def parse_start(header: str) -> tuple[str, int] | None:
    """Get the raw chromosome token and first coordinate of a header.

    Used for sorting, where records on unrecognized chromosomes are
    skipped rather than rejected.

    Returns:
        Tuple of (chromosome token, first number in the location), or None
        if the header has no usable location.
    """
    loc = _find_token(header, LOC_KEY)
    if loc is None:
        return None
    match = _LOC_PATTERN.match(loc)
    if not match:
        return None
    number = re.search(r"\d+", match.group("body"))
    if number is None:
        return None
    return match.group("chrom"), int(number.group(0))
