"""
Pairwise score table and its TSV loader.

The table maps item A to a mapping of item B to a score. Only one direction
is stored per unordered pair, so lookups check both ``table[a][b]`` and
``table[b][a]``.

Expected input format (no header):
    item_a <TAB> item_b <TAB> score
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator
from pathlib import Path

import polars as pl

from guidetree.core.exceptions import (
    DuplicatePairError,
    EmptyTableError,
    InvalidScoreError,
    MalformedRecordError,
    PairCountMismatchError,
    SelfPairError,
)

logger = logging.getLogger(__name__)


class PairwiseTable:
    """
    Ordered two-level mapping of pairwise association scores.

    Items are remembered in order of first appearance, which fixes the
    handle order of leaf clusters. Adding a pair that already exists in
    either direction raises DuplicatePairError, so ``get`` never has to
    choose between two stored directions.

    Example:
        >>> table = PairwiseTable.from_records([("s1", "s2", 10.0)])
        >>> table.get("s2", "s1")
        10.0
    """

    __slots__ = ("_items", "_n_pairs", "_scores")

    def __init__(self) -> None:
        self._scores: dict[str, dict[str, float]] = {}
        self._items: dict[str, None] = {}
        self._n_pairs = 0

    @classmethod
    def from_records(cls, records: Iterable[tuple[str, str, float]]) -> PairwiseTable:
        """Build a table from ``(item_a, item_b, score)`` records."""
        table = cls()
        for item_a, item_b, score in records:
            table.add(item_a, item_b, score)
        return table

    def add(self, item_a: str, item_b: str, score: float) -> None:
        """
        Store the score for one unordered pair.

        Raises:
            SelfPairError: If an item is paired with itself.
            InvalidScoreError: If the score is NaN or infinite.
            DuplicatePairError: If the pair is already stored in either direction.
        """
        if item_a == item_b:
            raise SelfPairError(item_a)
        score = float(score)
        if not math.isfinite(score):
            raise InvalidScoreError(item_a, item_b, score)
        if self.get(item_a, item_b) is not None:
            raise DuplicatePairError(item_a, item_b)

        self._items.setdefault(item_a, None)
        self._items.setdefault(item_b, None)
        self._scores.setdefault(item_a, {})[item_b] = score
        self._n_pairs += 1

    def get(self, item_a: str, item_b: str) -> float | None:
        """Look up a pair score in either direction, or None if undefined."""
        inner = self._scores.get(item_a)
        if inner is not None and item_b in inner:
            return inner[item_b]
        inner = self._scores.get(item_b)
        if inner is not None and item_a in inner:
            return inner[item_a]
        return None

    @property
    def items(self) -> tuple[str, ...]:
        """Distinct items in order of first appearance."""
        return tuple(self._items)

    @property
    def n_items(self) -> int:
        return len(self._items)

    @property
    def expected_pairs(self) -> int:
        n = len(self._items)
        return (n * n - n) // 2

    def __len__(self) -> int:
        return self._n_pairs

    def __contains__(self, pair: object) -> bool:
        if not isinstance(pair, tuple) or len(pair) != 2:
            return False
        return self.get(pair[0], pair[1]) is not None

    def pairs(self) -> Iterator[tuple[str, str, float]]:
        """Iterate stored ``(item_a, item_b, score)`` records in insertion order per item."""
        for item_a, inner in self._scores.items():
            for item_b, score in inner.items():
                yield item_a, item_b, score

    def validate_complete(self) -> None:
        """
        Check that every pairwise combination of items is present.

        Raises:
            PairCountMismatchError: If the stored pair count differs from n*(n-1)/2.
        """
        expected = self.expected_pairs
        if self._n_pairs != expected:
            raise PairCountMismatchError(self.n_items, expected, self._n_pairs)


class PairwiseTableParser:
    """
    Parser for tab-separated pairwise score tables.

    Reads the whole file with Polars as string columns, validates record
    shape and score values in vectorized form, and then fills a
    PairwiseTable. Gzipped input (``.gz``) is decompressed transparently.
    """

    COLUMN_NAMES = ("item_a", "item_b", "score")

    def __init__(self, table_path: Path) -> None:
        """
        Initialize pairwise table parser.

        Args:
            table_path: Path to the TSV file of pairwise scores.
        """
        self.table_path = table_path
        self._validate_path()

    def _validate_path(self) -> None:
        """Ensure table file exists."""
        if not self.table_path.exists():
            msg = f"Pairwise table not found: {self.table_path}"
            raise FileNotFoundError(msg)

    def parse(self, validate: bool = True) -> PairwiseTable:
        """
        Parse the file into a PairwiseTable.

        Args:
            validate: If True, require all n*(n-1)/2 pairs to be present.

        Returns:
            Populated PairwiseTable.

        Raises:
            EmptyTableError: If the file holds no records.
            MalformedRecordError: If a record has the wrong field count, an
                unparsable or non-finite score, or pairs an item with itself.
            DuplicatePairError: If a pair appears twice.
            PairCountMismatchError: If pairs are missing (with validate=True).
        """
        df = self._read_frame()
        table = PairwiseTable()
        for item_a, item_b, score in df.iter_rows():
            table.add(item_a, item_b, score)

        logger.info(
            "Loaded %d pairs over %d items from %s",
            len(table),
            table.n_items,
            self.table_path,
        )

        if validate:
            table.validate_complete()
        return table

    def _read_frame(self) -> pl.DataFrame:
        path = str(self.table_path)
        try:
            raw = pl.read_csv(
                self.table_path,
                separator="\t",
                has_header=False,
                quote_char=None,
                infer_schema_length=0,
            )
        except pl.exceptions.NoDataError:
            raise EmptyTableError(path) from None
        except pl.exceptions.ComputeError as e:
            raise MalformedRecordError(path, None, str(e).splitlines()[0]) from None

        if raw.is_empty():
            raise EmptyTableError(path)
        if raw.width != len(self.COLUMN_NAMES):
            raise MalformedRecordError(
                path, 1, f"expected 3 fields, got {raw.width}"
            )

        raw.columns = list(self.COLUMN_NAMES)
        df = (
            raw.with_row_index("record", offset=1)
            # Blank lines
            .filter(~pl.all_horizontal(pl.col(*self.COLUMN_NAMES).is_null()))
            .with_columns(
                pl.col("score").str.strip_chars().cast(pl.Float64, strict=False).alias("value")
            )
        )
        if df.is_empty():
            raise EmptyTableError(path)

        missing = df.filter(pl.any_horizontal(pl.col(*self.COLUMN_NAMES).is_null()))
        if not missing.is_empty():
            raise MalformedRecordError(path, missing["record"][0], "missing field")

        unparsable = df.filter(pl.col("value").is_null())
        if not unparsable.is_empty():
            raise MalformedRecordError(
                path,
                unparsable["record"][0],
                f"score {unparsable['score'][0]!r} is not a number",
            )

        non_finite = df.filter(~pl.col("value").is_finite())
        if not non_finite.is_empty():
            raise MalformedRecordError(
                path,
                non_finite["record"][0],
                f"score {non_finite['score'][0]!r} is not finite",
            )

        self_pairs = df.filter(pl.col("item_a") == pl.col("item_b"))
        if not self_pairs.is_empty():
            raise MalformedRecordError(
                path,
                self_pairs["record"][0],
                f"item {self_pairs['item_a'][0]!r} is paired with itself",
            )

        return df.select("item_a", "item_b", "value")
