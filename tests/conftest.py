"""
Shared pytest fixtures for guidetree tests.

Provides small pairwise score tables, both in memory and written to TSV
files, for unit and CLI testing.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from guidetree.core.pairwise import PairwiseTable

Record = tuple[str, str, float]


# =============================================================================
# Pairwise Record Fixtures
# =============================================================================


@pytest.fixture
def three_item_records() -> list[Record]:
    """s1 and s2 are close; s3 is equally far from both."""
    return [
        ("s1", "s2", 10.0),
        ("s1", "s3", 1.0),
        ("s2", "s3", 1.0),
    ]


@pytest.fixture
def five_item_records() -> list[Record]:
    """Negated distances for five samples with distinct linkage scores.

    Expected merge order: (s1,s2) at -2, (s4,s5) at -3,
    (s1,s2)+s3 at -4.5, then the root.
    """
    return [
        ("s1", "s2", -2.0),
        ("s1", "s3", -5.0),
        ("s1", "s4", -7.0),
        ("s1", "s5", -9.0),
        ("s2", "s3", -4.0),
        ("s2", "s4", -6.0),
        ("s2", "s5", -7.0),
        ("s3", "s4", -4.1),
        ("s3", "s5", -6.0),
        ("s4", "s5", -3.0),
    ]


@pytest.fixture
def three_item_table(three_item_records: list[Record]) -> PairwiseTable:
    return PairwiseTable.from_records(three_item_records)


@pytest.fixture
def five_item_table(five_item_records: list[Record]) -> PairwiseTable:
    return PairwiseTable.from_records(five_item_records)


# =============================================================================
# TSV File Fixtures
# =============================================================================


@pytest.fixture
def write_tsv(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing raw lines to a TSV file under tmp_path."""

    def _write(lines: list[str], name: str = "pairs.tsv") -> Path:
        path = tmp_path / name
        path.write_text("".join(f"{line}\n" for line in lines))
        return path

    return _write


@pytest.fixture
def three_item_tsv(
    write_tsv: Callable[..., Path],
    three_item_records: list[Record],
) -> Path:
    return write_tsv([f"{a}\t{b}\t{s}" for a, b, s in three_item_records])


@pytest.fixture
def five_item_tsv(
    write_tsv: Callable[..., Path],
    five_item_records: list[Record],
) -> Path:
    return write_tsv([f"{a}\t{b}\t{s}" for a, b, s in five_item_records])
