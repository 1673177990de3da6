"""Pytest configuration and shared fixtures for ffsites tests.

Fixtures are organized by category:

- Header fixtures: Build FlyBase-style CDS headers
- FASTA fixtures: Write synthetic CDS FASTA files
- Record fixtures: Build CDSRecord objects directly
"""

from pathlib import Path
from typing import Callable

import numpy as np
import pytest

from ffsites.core.records import CDSRecord


# =============================================================================
# Header Fixtures
# =============================================================================


def _header(
    gene_id: str,
    loc: str,
    chrom: str = "2L",
    protein_id: str = "FBpp0000001",
) -> str:
    return (
        f">{protein_id} type=CDS; loc={chrom}:{loc}; name=CG0000-PA; "
        f"dbxref=FlyBase:{protein_id}; parent={gene_id},FBtr0000001; "
        "release=r6.32; species=Dmel;"
    )


@pytest.fixture
def make_header() -> Callable[..., str]:
    """Return a factory for CDS FASTA header lines."""
    return _header


# =============================================================================
# Sequence Fixtures
# =============================================================================


@pytest.fixture
def random_sequence() -> Callable[[int], str]:
    """Return a factory for reproducible random nucleotide sequences."""
    rng = np.random.default_rng(42)

    def _random_sequence(length: int) -> str:
        return "".join(rng.choice(list("ACGT"), length))

    return _random_sequence


# =============================================================================
# Record Fixtures
# =============================================================================


@pytest.fixture
def make_record() -> Callable[..., CDSRecord]:
    """Return a factory for CDSRecord objects.

    ``positions`` may be a list or a (first, last) tuple; a descending
    tuple gives a reverse-strand record.
    """

    def _make_record(
        gene_id: str,
        positions: list[int] | tuple[int, int],
        sequence: str | None = None,
        chromosome: str = "2L",
    ) -> CDSRecord:
        if isinstance(positions, tuple):
            first, last = positions
            step = 1 if last >= first else -1
            positions = list(range(first, last + step, step))
        record = CDSRecord(chromosome=chromosome, gene_id=gene_id, positions=list(positions))
        if sequence is not None:
            record.attach_sequence(sequence)
        return record

    return _make_record


# =============================================================================
# FASTA Fixtures
# =============================================================================


@pytest.fixture
def sorted_cds_fasta(tmp_path: Path) -> Path:
    """Write a small sorted CDS FASTA with one overlapping pair.

    - FBgn0000001: 2L 100..109, truncated to 7 bases by the overlap
    - FBgn0000002: 2L 108..120, loses its first 3 bases
    - FBgn0000003: 3R complement 200..205, no overlap
    """
    fasta_path = tmp_path / "cds_sorted.fasta"
    records = [
        (_header("FBgn0000001", "100..109", "2L", "FBpp0000001"), "CTGCTGCTGA"),
        (_header("FBgn0000002", "108..120", "2L", "FBpp0000002"), "AAAGCAGCAGCAG"),
        (_header("FBgn0000003", "complement(200..205)", "3R", "FBpp0000003"), "GGTATG"),
    ]
    with open(fasta_path, "w") as f:
        for header, sequence in records:
            f.write(f"{header}\n{sequence}\n")
    return fasta_path


@pytest.fixture
def unsorted_cds_fasta(tmp_path: Path, random_sequence: Callable[[int], str]) -> Path:
    """Write an unsorted, line-wrapped CDS FASTA for sort tests.

    Contains six records: one on an unrecognized chromosome and two
    sharing a start position on 2L (the second one longer).
    """
    fasta_path = tmp_path / "cds_raw.fasta"
    records = [
        (_header("FBgn0000005", "500..589", "3R", "FBpp0000005"), random_sequence(90)),
        (_header("FBgn0000002", "300..359", "2L", "FBpp0000002"), random_sequence(60)),
        (
            _header("FBgn0000001", "complement(join(100..129,150..179))", "2L", "FBpp0000001"),
            random_sequence(60),
        ),
        (_header("FBgn0000009", "50..79", "Scf_X", "FBpp0000009"), random_sequence(30)),
        (_header("FBgn0000007", "10..39", "Y", "FBpp0000007"), random_sequence(30)),
        (_header("FBgn0000003", "300..419", "2L", "FBpp0000003"), random_sequence(120)),
    ]
    with open(fasta_path, "w") as f:
        for header, sequence in records:
            f.write(f"{header}\n")
            for i in range(0, len(sequence), 50):
                f.write(sequence[i : i + 50] + "\n")
    return fasta_path
