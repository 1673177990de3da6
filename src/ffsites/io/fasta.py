"""CDS FASTA reading and sorting.

Extraction streams a FASTA file line by line and expects one sequence
line per record. ``sort_cds_fasta`` produces such a file from a raw CDS
FASTA (wrapped lines, arbitrary order) using pyfaidx for record access.

Example:
    >>> from ffsites.io.fasta import sort_cds_fasta
    >>> summary = sort_cds_fasta("dmel-all-CDS.fasta", "cds_sorted.fasta")
    >>> summary.n_written
    30719
"""

from __future__ import annotations

import gzip
import logging
from collections import defaultdict
from pathlib import Path
from typing import Iterator

import attrs
import pyfaidx

from ffsites.io.headers import CHROMOSOME_ARMS, parse_chromosome, parse_start

logger = logging.getLogger(__name__)

# First character of a FASTA header line
HEADER_MARKER = ">"


# =============================================================================
# Line Reading
# =============================================================================


def iter_fasta_lines(path: Path | str) -> Iterator[str]:
    """Yield the lines of a plain or gzip-compressed text file.

    Trailing newlines are removed.

    Raises:
        FileNotFoundError: If the file doesn't exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"FASTA file not found: {path}")

    opener = gzip.open if path.suffix == ".gz" else open
    with opener(path, "rt") as f:
        for line in f:
            yield line.rstrip("\r\n")


# =============================================================================
# Sorting
# =============================================================================


@attrs.define
class SortSummary:
    """Counts from a sort run.

    Attributes:
        n_read: Records in the input file.
        n_written: Records written to the output file.
        n_skipped: Records without a location on a recognized arm.
        n_collapsed: Records sharing a start with a longer (or first) record.
        chromosomes: Arm names in output order.
    """

    n_read: int = 0
    n_written: int = 0
    n_skipped: int = 0
    n_collapsed: int = 0
    chromosomes: list[str] = attrs.Factory(list)


def sort_cds_fasta(
    input_path: Path | str,
    output_path: Path | str,
    arms: frozenset[str] | set[str] = CHROMOSOME_ARMS,
) -> SortSummary:
    """Sort CDS records by chromosome and start position.

    Records are keyed by the first coordinate of their ``loc=`` field.
    When two records on a chromosome share a start, only the one with the
    longer sequence is kept. Records on unrecognized chromosomes are
    skipped. Every sequence is written on a single line.

    Args:
        input_path: CDS FASTA file. A ``.fai`` index is created beside it
            if missing.
        output_path: Sorted FASTA file to write.
        arms: Recognized chromosome arm names.

    Returns:
        SortSummary with record counts.

    Raises:
        FileNotFoundError: If the input file doesn't exist.
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    if not input_path.exists():
        raise FileNotFoundError(f"FASTA file not found: {input_path}")

    summary = SortSummary()
    by_chrom: dict[str, dict[int, tuple[str, str]]] = defaultdict(dict)

    with pyfaidx.Fasta(
        str(input_path),
        as_raw=True,
        sequence_always_upper=False,
    ) as fasta:
        for record in fasta:
            summary.n_read += 1
            header = record.long_name.strip()

            location = parse_start(header)
            chrom = parse_chromosome(location[0], arms) if location else None
            if location is None or chrom is None:
                summary.n_skipped += 1
                continue

            start = location[1]
            sequence = str(record)
            existing = by_chrom[chrom].get(start)
            if existing is not None:
                summary.n_collapsed += 1
                if len(sequence) <= len(existing[1]):
                    continue
            by_chrom[chrom][start] = (header, sequence)

    with open(output_path, "w") as f:
        for chrom in sorted(by_chrom):
            summary.chromosomes.append(chrom)
            for start in sorted(by_chrom[chrom]):
                header, sequence = by_chrom[chrom][start]
                f.write(f"{HEADER_MARKER}{header}\n{sequence}\n")
                summary.n_written += 1

    logger.info(
        f"Sorted {summary.n_written} of {summary.n_read} records "
        f"({summary.n_skipped} skipped, {summary.n_collapsed} collapsed)"
    )
    return summary
