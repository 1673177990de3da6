"""Unit tests for ffsites.core.cursor module.

Tests cover:
- RecordSlot transitions
- Cursor lifecycle and end-of-stream flush
- Overlap, containment and chromosome switches in a stream
- Stream errors
- File-level extraction
"""

import gzip
from pathlib import Path

import pytest

from ffsites.core.cursor import (
    CursorState,
    RecordCursor,
    RecordSlot,
    extract_fourfold_sites,
    extract_from_file,
)
from ffsites.core.fourfold import FourFoldSite, SiteSink, find_fourfold_sites
from ffsites.core.overlap import Disposition
from ffsites.errors import HeaderFormatError, InvariantViolation, StreamTruncatedError


# =============================================================================
# RecordSlot
# =============================================================================


class TestRecordSlot:
    """Tests for RecordSlot transitions."""

    def test_starts_empty(self) -> None:
        """New slots hold nothing."""
        slot = RecordSlot()
        assert slot.is_empty
        assert slot.record is None

    def test_replace_and_take(self, make_record) -> None:
        """take() moves the record out of the slot."""
        slot = RecordSlot()
        record = make_record("A", (1, 3), "GCA")
        slot.replace(record)
        assert slot.record is record
        assert slot.take() is record
        assert slot.is_empty

    def test_replace_occupied(self, make_record) -> None:
        """Adopting into an occupied slot is an invariant violation."""
        slot = RecordSlot()
        slot.replace(make_record("A", (1, 3), "GCA"))
        with pytest.raises(InvariantViolation, match="Slot still holds A"):
            slot.replace(make_record("B", (4, 6)))

    def test_flush(self, make_record) -> None:
        """flush() classifies into the sink and empties the slot."""
        slot, sink = RecordSlot(), SiteSink()
        slot.replace(make_record("A", (1, 3), "GCA"))
        assert slot.flush(sink) == 1
        assert slot.is_empty
        assert sink.sites == [FourFoldSite("2L", "A", 3)]

    def test_flush_empty(self) -> None:
        """Flushing an empty slot emits nothing."""
        sink = SiteSink()
        assert RecordSlot().flush(sink) == 0
        assert sink.n_records == 0

    def test_drop(self, make_record) -> None:
        """drop() discards without emission."""
        slot = RecordSlot()
        record = make_record("A", (1, 3), "GCA")
        slot.replace(record)
        assert slot.drop() is record
        assert slot.is_empty

    def test_truncate_delegates(self, make_record) -> None:
        """Truncations apply to the held record."""
        slot = RecordSlot()
        slot.replace(make_record("A", (1, 9), "AAACCCGGG"))
        slot.truncate_tail(3)
        slot.truncate_head(3)
        assert slot.record.sequence == "CCC"


# =============================================================================
# Cursor Streams
# =============================================================================


class TestCursorStream:
    """Tests for RecordCursor over in-memory line streams."""

    def test_single_record_flushed_once(self, make_header) -> None:
        """A lone record is emitted exactly once at end of stream."""
        cursor = RecordCursor()
        assert cursor.state is CursorState.AWAITING_FIRST

        cursor.feed_header(make_header("FBgn1", "101..109"))
        assert cursor.state is CursorState.HAVE_CURRENT
        cursor.feed_sequence("CTGATGCCA")
        sink = cursor.finish()

        assert cursor.state is CursorState.DONE
        assert sink.sites == [
            FourFoldSite("2L", "FBgn1", 103),
            FourFoldSite("2L", "FBgn1", 109),
        ]
        assert cursor.stats.n_flushed == 1
        assert cursor.stats.n_sites == 2

    def test_non_overlapping_equals_direct(self, make_header, make_record) -> None:
        """Without overlap the output is each record classified on its own."""
        lines = [
            make_header("FBgn1", "100..108"),
            "CTGATGGCA",
            make_header("FBgn2", "complement(200..205)"),
            "GGTCCC",
        ]
        sites, stats = extract_fourfold_sites(lines)

        expected = list(find_fourfold_sites(make_record("FBgn1", (100, 108), "CTGATGGCA")))
        expected += list(find_fourfold_sites(make_record("FBgn2", (205, 200), "GGTCCC")))
        assert sites == expected
        assert stats.n_overlaps == 0

    def test_overlapping_pair(self, make_header) -> None:
        """Both members of an overlapping pair are trimmed and emitted."""
        lines = [
            make_header("FBgnA", "100..109"),
            "CTGCTGCTGA",
            make_header("FBgnB", "108..120"),
            "AAAGCAGCAGCAG",
        ]
        sites, stats = extract_fourfold_sites(lines)

        assert sites == [
            FourFoldSite("2L", "FBgnA", 102),
            FourFoldSite("2L", "FBgnA", 105),
            FourFoldSite("2L", "FBgnB", 113),
            FourFoldSite("2L", "FBgnB", 116),
            FourFoldSite("2L", "FBgnB", 119),
        ]
        assert stats.n_overlaps == 1
        assert stats.n_flushed == 2
        assert stats.n_dropped == 0

    def test_reverse_candidate_pending_truncation(self, make_header) -> None:
        """A complement candidate loses its 3' end before its sequence arrives."""
        lines = [
            make_header("FBgnA", "100..109"),
            "CTGCTGCTGA",
            make_header("FBgnB", "complement(108..120)"),
            "GCAGCAGCAGTTT",
        ]
        cursor = RecordCursor()
        sink = cursor.consume(lines)

        assert [(s.gene_id, s.position) for s in sink] == [
            ("FBgnA", 102),
            ("FBgnA", 105),
            ("FBgnB", 118),
            ("FBgnB", 115),
            ("FBgnB", 112),
        ]
        assert cursor.stats.n_overlaps == 1
        assert cursor.stats.n_flushed == 2
        assert cursor.stats.n_dropped == 0

    def test_current_swallowed_by_rounding(self, make_header) -> None:
        """A short record inside the rounded overlap is dropped; the next is trimmed."""
        lines = [
            make_header("FBgnA", "100..104"),
            "CTGCT",
            make_header("FBgnB", "101..120"),
            "GGGGGG" + "CTG" * 4 + "CC",
        ]
        cursor = RecordCursor()
        sink = cursor.consume(lines)

        assert [(s.gene_id, s.position) for s in sink] == [
            ("FBgnB", 109),
            ("FBgnB", 112),
            ("FBgnB", 115),
            ("FBgnB", 118),
        ]
        assert cursor.stats.n_dropped == 1
        assert cursor.stats.n_flushed == 1
        assert cursor.stats.n_overlaps == 1

    def test_current_swallowed_reverse_candidate(self, make_header) -> None:
        """The same drop with a complement candidate trims its 3' end."""
        lines = [
            make_header("FBgnA", "100..104"),
            "CTGCT",
            make_header("FBgnB", "complement(101..120)"),
            "CTG" * 4 + "CC" + "GGGGGG",
        ]
        cursor = RecordCursor()
        sink = cursor.consume(lines)

        assert [(s.gene_id, s.position) for s in sink] == [
            ("FBgnB", 118),
            ("FBgnB", 115),
            ("FBgnB", 112),
            ("FBgnB", 109),
        ]
        assert cursor.stats.n_dropped == 1
        assert cursor.stats.n_flushed == 1

    def test_contained_record_sequence_discarded(self, make_header) -> None:
        """A dropped candidate's sequence line is skipped."""
        lines = [
            make_header("FBgnA", "100..109"),
            "CTGCTGCTGA",
            make_header("FBgnB", "101..105"),
            "CCCCC",
            make_header("FBgnC", "200..205"),
            "CTGCTG",
        ]
        cursor = RecordCursor()
        sink = cursor.consume(lines)

        assert [(s.gene_id, s.position) for s in sink] == [("FBgnC", 202), ("FBgnC", 205)]
        assert cursor.stats.n_records == 3
        assert cursor.stats.n_dropped == 1
        assert cursor.stats.n_flushed == 2

    def test_mutual_containment_resets(self, make_header) -> None:
        """After both records are dropped the next record starts afresh."""
        cursor = RecordCursor()
        cursor.feed_header(make_header("FBgnA", "100..104"))
        cursor.feed_sequence("CTGCT")
        resolution = cursor.feed_header(make_header("FBgnB", "100..103"))

        assert resolution.disposition is Disposition.DROP_BOTH
        assert cursor.state is CursorState.AWAITING_FIRST
        assert cursor.current is None

        cursor.feed_sequence("GGGG")
        cursor.feed_header(make_header("FBgnC", "300..305"))
        cursor.feed_sequence("GGTGGT")
        sink = cursor.finish()

        assert [s.position for s in sink] == [302, 305]
        assert cursor.stats.n_dropped == 2

    def test_chromosome_switch_flushes(self, make_header) -> None:
        """Coordinates on a new chromosome never overlap the previous one."""
        lines = [
            make_header("FBgnA", "100..108", chrom="2L"),
            "CTGCTGCTG",
            make_header("FBgnB", "100..108", chrom="2R"),
            "GCAGCAGCA",
        ]
        sites, stats = extract_fourfold_sites(lines)

        assert [(s.chromosome, s.position) for s in sites] == [
            ("2L", 102), ("2L", 105), ("2L", 108),
            ("2R", 102), ("2R", 105), ("2R", 108),
        ]
        assert stats.n_chromosomes == 2
        assert stats.n_overlaps == 0

    def test_chain_of_overlaps(self, make_header) -> None:
        """A record trimmed at its head can be trimmed again at its tail."""
        lines = [
            make_header("FBgnA", "100..111"),
            "CTGCTGCTGCTG",
            make_header("FBgnB", "110..130"),
            "GCA" * 7,
            make_header("FBgnC", "129..140"),
            "CCC" * 4,
        ]
        sites, stats = extract_fourfold_sites(lines)

        by_gene = {}
        for site in sites:
            by_gene.setdefault(site.gene_id, []).append(site.position)
        assert by_gene["FBgnA"] == [102, 105, 108]
        assert by_gene["FBgnB"] == [115, 118, 121, 124, 127]
        assert by_gene["FBgnC"] == [134, 137, 140]
        assert stats.n_overlaps == 2

    def test_blank_lines_ignored(self, make_header) -> None:
        """Blank lines between records are skipped."""
        lines = ["", make_header("FBgn1", "1..3"), "", "GCA", ""]
        sites, _ = extract_fourfold_sites(lines)
        assert [s.position for s in sites] == [3]

    def test_empty_stream(self) -> None:
        """An empty stream yields no sites."""
        sites, stats = extract_fourfold_sites([])
        assert sites == []
        assert stats.n_records == 0

    def test_lowercase_sequence(self, make_header) -> None:
        """Soft-masked sequence classifies like uppercase."""
        sites, _ = extract_fourfold_sites([make_header("FBgn1", "1..3"), "gca"])
        assert len(sites) == 1

    def test_chromosome_switch_logged(self, make_header, caplog) -> None:
        """Each chromosome switch produces a log line."""
        caplog.set_level("INFO", logger="ffsites")
        extract_fourfold_sites(
            [
                make_header("FBgnA", "1..3", chrom="2L"),
                "GCA",
                make_header("FBgnB", "1..3", chrom="X"),
                "GCA",
            ]
        )
        assert "Processing chromosome 2L" in caplog.text
        assert "Processing chromosome X" in caplog.text


# =============================================================================
# Stream Errors
# =============================================================================


class TestCursorErrors:
    """Tests for fatal stream errors."""

    def test_header_without_sequence_at_eof(self, make_header) -> None:
        """Input ending after a header is truncated."""
        header = make_header("FBgn1", "1..3")
        with pytest.raises(StreamTruncatedError, match="End of input") as excinfo:
            extract_fourfold_sites([header])
        assert excinfo.value.header == header

    def test_header_after_header(self, make_header) -> None:
        """Two headers in a row mean a missing sequence line."""
        lines = [make_header("FBgn1", "1..3"), make_header("FBgn2", "10..12"), "GCA"]
        with pytest.raises(StreamTruncatedError, match="no sequence line"):
            extract_fourfold_sites(lines)

    def test_sequence_without_header(self) -> None:
        """A sequence line must follow a header."""
        with pytest.raises(StreamTruncatedError, match="without a preceding header"):
            extract_fourfold_sites(["ACGT"])

    def test_truncation_carries_record_context(self, make_header) -> None:
        """Stream errors name the chromosome and gene of the record being read."""
        lines = [make_header("FBgn1", "1..3", chrom="3R"), make_header("FBgn2", "10..12")]
        with pytest.raises(StreamTruncatedError) as excinfo:
            extract_fourfold_sites(lines)
        assert excinfo.value.chromosome == "3R"
        assert excinfo.value.gene_id == "FBgn1"
        assert "gene=FBgn1" in str(excinfo.value)

    def test_end_of_input_carries_record_context(self, make_header) -> None:
        """A record cut off at end of input is identified."""
        with pytest.raises(StreamTruncatedError) as excinfo:
            extract_fourfold_sites([make_header("FBgn7", "1..3", chrom="X")])
        assert excinfo.value.chromosome == "X"
        assert excinfo.value.gene_id == "FBgn7"

    def test_extra_sequence_line_names_previous_record(self, make_header) -> None:
        """A second sequence line is reported against the record before it."""
        lines = [make_header("FBgn1", "1..3"), "GCA", "GCA"]
        with pytest.raises(StreamTruncatedError, match="without a preceding header") as excinfo:
            extract_fourfold_sites(lines)
        assert excinfo.value.gene_id == "FBgn1"

    def test_length_mismatch(self, make_header) -> None:
        """Sequence length must match the header coordinates."""
        with pytest.raises(InvariantViolation):
            extract_fourfold_sites([make_header("FBgn1", "1..6"), "GCA"])

    def test_bad_header(self, make_header) -> None:
        """Unparseable headers abort the run."""
        with pytest.raises(HeaderFormatError):
            extract_fourfold_sites([make_header("FBgn1", "1..6", chrom="Y"), "GCAGCA"])

    def test_partial_output_kept(self, make_header) -> None:
        """Sites flushed before a failure remain in the sink."""
        cursor = RecordCursor()
        lines = [
            make_header("FBgnA", "1..3", chrom="2L"),
            "GCA",
            make_header("FBgnB", "1..3", chrom="3L"),
        ]
        with pytest.raises(StreamTruncatedError):
            cursor.consume(lines)
        assert [s.gene_id for s in cursor.sink] == ["FBgnA"]

    def test_header_after_finish(self, make_header) -> None:
        """A finished cursor accepts no more records."""
        cursor = RecordCursor()
        cursor.finish()
        with pytest.raises(StreamTruncatedError):
            cursor.feed_header(make_header("FBgn1", "1..3"))


# =============================================================================
# File Extraction
# =============================================================================


class TestExtractFromFile:
    """Tests for extract_from_file."""

    def test_sorted_file(self, sorted_cds_fasta: Path) -> None:
        """Extraction over a fixture file."""
        sites, stats = extract_from_file(sorted_cds_fasta)

        assert [(s.chromosome, s.gene_id, s.position) for s in sites] == [
            ("2L", "FBgn0000001", 102),
            ("2L", "FBgn0000001", 105),
            ("2L", "FBgn0000002", 113),
            ("2L", "FBgn0000002", 116),
            ("2L", "FBgn0000002", 119),
            ("3R", "FBgn0000003", 203),
        ]
        assert stats.n_records == 3
        assert stats.n_chromosomes == 2

    def test_gzipped_file(self, sorted_cds_fasta: Path, tmp_path: Path) -> None:
        """Gzip-compressed input gives the same sites."""
        gz_path = tmp_path / "cds_sorted.fasta.gz"
        with open(sorted_cds_fasta, "rb") as src, gzip.open(gz_path, "wb") as dst:
            dst.write(src.read())
        assert extract_from_file(gz_path)[0] == extract_from_file(sorted_cds_fasta)[0]

    def test_missing_file(self, tmp_path: Path) -> None:
        """Missing input raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="FASTA file not found"):
            extract_from_file(tmp_path / "missing.fasta")
