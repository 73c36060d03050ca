"""
Unit tests for the pairwise score table and its TSV parser.

Tests PairwiseTable lookups and PairwiseTableParser including:
- Direction-independent lookups
- Duplicate and self pairs
- Non-finite scores
- Combination-count validation
- Malformed records and empty files
"""

from __future__ import annotations

import gzip
from pathlib import Path

import pytest

from guidetree.core.exceptions import (
    DuplicatePairError,
    EmptyTableError,
    GuideTreeError,
    InvalidScoreError,
    MalformedRecordError,
    PairCountMismatchError,
    PairwiseTableError,
    SelfPairError,
)
from guidetree.core.pairwise import PairwiseTable, PairwiseTableParser


# =============================================================================
# PairwiseTable Tests
# =============================================================================


class TestPairwiseTable:
    """Tests for the in-memory table."""

    def test_lookup_both_directions(self, three_item_table):
        """A pair stored as (a, b) should be found as (b, a) too."""
        assert three_item_table.get("s1", "s2") == 10.0
        assert three_item_table.get("s2", "s1") == 10.0

    def test_missing_pair_is_none(self, three_item_table):
        """Unknown pairs and unknown items should return None."""
        assert three_item_table.get("s1", "s9") is None
        assert three_item_table.get("x", "y") is None

    def test_items_in_first_appearance_order(self):
        """Items should be listed in the order they first appear."""
        table = PairwiseTable.from_records([("b", "c", 1.0), ("a", "b", 2.0), ("a", "c", 3.0)])
        assert table.items == ("b", "c", "a")
        assert table.n_items == 3

    def test_len_counts_pairs(self, five_item_table):
        """len() should be the number of stored pairs."""
        assert len(five_item_table) == 10
        assert five_item_table.expected_pairs == 10

    def test_contains(self, three_item_table):
        """Membership should accept pairs in either direction."""
        assert ("s3", "s1") in three_item_table
        assert ("s3", "s4") not in three_item_table
        assert "s1" not in three_item_table

    def test_pairs_preserve_stored_direction(self, three_item_records, three_item_table):
        """pairs() should yield records as they were stored."""
        assert list(three_item_table.pairs()) == three_item_records

    def test_reverse_duplicate_rejected(self):
        """Storing both (a, b) and (b, a) should fail."""
        table = PairwiseTable()
        table.add("a", "b", 1.0)
        with pytest.raises(DuplicatePairError) as exc_info:
            table.add("b", "a", 2.0)
        assert exc_info.value.item_a == "b"
        assert table.get("a", "b") == 1.0

    def test_exact_duplicate_rejected(self):
        """Storing the same pair twice should fail."""
        table = PairwiseTable()
        table.add("a", "b", 1.0)
        with pytest.raises(DuplicatePairError):
            table.add("a", "b", 1.0)
        assert len(table) == 1

    def test_self_pair_rejected(self):
        """An item cannot be paired with itself."""
        with pytest.raises(SelfPairError, match="itself") as exc_info:
            PairwiseTable().add("a", "a", 1.0)
        assert isinstance(exc_info.value, GuideTreeError)
        assert exc_info.value.item == "a"

    @pytest.mark.parametrize("score", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_score_rejected(self, score):
        """NaN and infinite scores would break heap ordering."""
        table = PairwiseTable()
        with pytest.raises(InvalidScoreError, match="not finite"):
            table.add("a", "b", score)
        assert len(table) == 0
        assert table.n_items == 0

    def test_validate_complete_passes(self, five_item_table):
        """A table with all n*(n-1)/2 pairs should validate."""
        five_item_table.validate_complete()

    def test_validate_complete_missing_pair(self, five_item_records):
        """One missing pair should fail with the combination counts."""
        table = PairwiseTable.from_records(five_item_records[:-1])
        with pytest.raises(PairCountMismatchError) as exc_info:
            table.validate_complete()
        error = exc_info.value
        assert error.n_items == 5
        assert error.expected == 10
        assert error.accepted == 9
        assert "expected combination number is 10" in str(error)


# =============================================================================
# PairwiseTableParser Tests
# =============================================================================


class TestPairwiseTableParser:
    """Tests for reading pairwise tables from disk."""

    def test_parse_valid_file(self, three_item_tsv):
        """A well-formed file should load into a table."""
        table = PairwiseTableParser(three_item_tsv).parse()
        assert table.items == ("s1", "s2", "s3")
        assert len(table) == 3
        assert table.get("s3", "s2") == 1.0

    def test_missing_file(self, tmp_path):
        """A missing path should raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="not found"):
            PairwiseTableParser(tmp_path / "nope.tsv")

    def test_labels_with_spaces_and_quotes(self, write_tsv):
        """Labels are taken verbatim, including spaces and quote characters."""
        path = write_tsv([
            "E. coli\tB \"x\"\t1.5",
            "E. coli\tC\t2",
            "B \"x\"\tC\t3",
        ])
        table = PairwiseTableParser(path).parse()
        assert table.items == ("E. coli", 'B "x"', "C")
        assert table.get("C", "E. coli") == 2.0

    def test_score_whitespace_is_trimmed(self, write_tsv):
        """Surrounding whitespace and CRLF endings in scores are ignored."""
        path = write_tsv(["a\tb\t 1.25 \r"])
        table = PairwiseTableParser(path).parse()
        assert table.get("a", "b") == 1.25

    def test_scientific_notation(self, write_tsv):
        """Scores in scientific notation should parse."""
        path = write_tsv(["a\tb\t1e-3"])
        assert PairwiseTableParser(path).parse().get("a", "b") == pytest.approx(0.001)

    def test_gzipped_input(self, tmp_path, three_item_records):
        """Gzipped tables should be read transparently."""
        path = tmp_path / "pairs.tsv.gz"
        with gzip.open(path, "wt") as f:
            for a, b, s in three_item_records:
                f.write(f"{a}\t{b}\t{s}\n")
        table = PairwiseTableParser(path).parse()
        assert len(table) == 3

    def test_empty_file(self, tmp_path):
        """An empty file should raise EmptyTableError."""
        path = tmp_path / "empty.tsv"
        path.write_text("")
        with pytest.raises(EmptyTableError):
            PairwiseTableParser(path).parse()

    def test_two_fields(self, write_tsv):
        """Records with two fields should be rejected."""
        path = write_tsv(["a\tb", "a\tc"])
        with pytest.raises(MalformedRecordError, match="expected 3 fields"):
            PairwiseTableParser(path).parse()

    def test_four_fields(self, write_tsv):
        """Records with four fields should be rejected."""
        path = write_tsv(["a\tb\t1.0\textra"])
        with pytest.raises(MalformedRecordError):
            PairwiseTableParser(path).parse()

    def test_unparsable_score(self, write_tsv):
        """Non-numeric scores should be reported with their record number."""
        path = write_tsv(["a\tb\t1.0", "a\tc\thigh", "b\tc\t2.0"])
        with pytest.raises(MalformedRecordError) as exc_info:
            PairwiseTableParser(path).parse()
        assert exc_info.value.record_num == 2
        assert "'high'" in str(exc_info.value)

    @pytest.mark.parametrize("raw", ["nan", "NaN", "inf", "-inf"])
    def test_non_finite_score(self, write_tsv, raw):
        """NaN and infinite scores are malformed and carry the record number."""
        path = write_tsv(["a\tb\t1.0", "a\tc\t2.0", f"b\tc\t{raw}"])
        with pytest.raises(MalformedRecordError, match="not finite") as exc_info:
            PairwiseTableParser(path).parse()
        assert exc_info.value.record_num == 3
        assert repr(raw) in str(exc_info.value)

    def test_nan_score_does_not_reach_clustering(self, write_tsv):
        """A NaN pair must fail loading rather than merge ahead of a-d."""
        path = write_tsv([
            "a\tb\tnan",
            "a\tc\t1",
            "b\tc\t2",
            "a\td\t9",
            "b\td\t0.5",
            "c\td\t0.1",
        ])
        with pytest.raises(MalformedRecordError) as exc_info:
            PairwiseTableParser(path).parse()
        assert exc_info.value.record_num == 1

    def test_self_pair_record(self, write_tsv):
        """A record pairing an item with itself is malformed."""
        path = write_tsv(["a\ta\t1.0"])
        with pytest.raises(MalformedRecordError, match="paired with itself"):
            PairwiseTableParser(path).parse()

    def test_duplicate_record(self, write_tsv):
        """The same pair listed in both directions should fail."""
        path = write_tsv(["a\tb\t1.0", "b\ta\t1.0"])
        with pytest.raises(DuplicatePairError):
            PairwiseTableParser(path).parse()

    def test_missing_pair_fails_before_clustering(self, write_tsv, five_item_records):
        """An incomplete table should fail with a count mismatch."""
        lines = [f"{a}\t{b}\t{s}" for a, b, s in five_item_records[1:]]
        path = write_tsv(lines)
        with pytest.raises(PairCountMismatchError, match="accepted combination number is 9"):
            PairwiseTableParser(path).parse()

    def test_missing_pair_allowed_without_validation(self, write_tsv, five_item_records):
        """validate=False should return the partial table."""
        lines = [f"{a}\t{b}\t{s}" for a, b, s in five_item_records[1:]]
        table = PairwiseTableParser(write_tsv(lines)).parse(validate=False)
        assert len(table) == 9

    def test_errors_share_base_class(self, write_tsv):
        """All table errors should be catchable as PairwiseTableError."""
        path = write_tsv(["a\tb\tnot-a-number"])
        with pytest.raises(PairwiseTableError):
            PairwiseTableParser(path).parse()
