"""
Custom exceptions with actionable guidance.

Every failure in guidetree is fatal: a malformed pairwise table or a broken
clustering invariant means the resulting tree cannot be trusted. Each error
carries an optional suggestion that the CLI prints below the message.
"""

from __future__ import annotations


class GuideTreeError(Exception):
    """Base exception for guidetree errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.full_message)

    @property
    def full_message(self) -> str:
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class PairwiseTableError(GuideTreeError):
    """Base class for pairwise score table errors."""



class MalformedRecordError(PairwiseTableError):
    """Raised when a table record cannot be parsed."""

    def __init__(self, path: str, record_num: int | None, reason: str):
        location = f"record {record_num}" if record_num is not None else "unknown record"
        super().__init__(
            message=f"Malformed pairwise table '{path}' at {location}: {reason}",
            suggestion=(
                "Each line must hold exactly three tab-separated fields:\n"
                "  item_a <TAB> item_b <TAB> score\n\n"
                "The score must parse as a floating-point number and an item "
                "may not be paired with itself."
            ),
        )
        self.path = path
        self.record_num = record_num


class DuplicatePairError(PairwiseTableError):
    """Raised when the same unordered pair appears more than once."""

    def __init__(self, item_a: str, item_b: str):
        super().__init__(
            message=f"Pair {item_a}-{item_b} is listed more than once",
            suggestion=(
                "List every unordered pair exactly once, in one direction only. "
                "Remove either the 'a b' or the 'b a' record."
            ),
        )
        self.item_a = item_a
        self.item_b = item_b


class SelfPairError(PairwiseTableError):
    """Raised when an item is paired with itself."""

    def __init__(self, item: str):
        super().__init__(
            message=f"Item {item!r} cannot be paired with itself",
            suggestion="Only pairs of distinct items carry a score.",
        )
        self.item = item


class InvalidScoreError(PairwiseTableError):
    """Raised when a pair score is NaN or infinite."""

    def __init__(self, item_a: str, item_b: str, score: float):
        super().__init__(
            message=f"Score for pair {item_a}-{item_b} is not finite: {score!r}",
            suggestion="Replace NaN and infinite scores with finite values.",
        )
        self.item_a = item_a
        self.item_b = item_b
        self.score = score


class PairCountMismatchError(PairwiseTableError):
    """Raised when the table does not cover every pairwise combination."""

    def __init__(self, n_items: int, expected: int, accepted: int):
        super().__init__(
            message=(
                f"The number of input samples is {n_items} and expected combination "
                f"number is {expected}, but accepted combination number is {accepted}"
            ),
            suggestion=(
                "Average linkage needs a score for all n*(n-1)/2 item pairs. "
                "Check that the tool that produced the table did not drop pairs."
            ),
        )
        self.n_items = n_items
        self.expected = expected
        self.accepted = accepted


class EmptyTableError(PairwiseTableError):
    """Raised when the pairwise table holds no records."""

    def __init__(self, path: str):
        super().__init__(
            message=f"Pairwise table is empty: {path}",
            suggestion="At least two items and one scored pair are needed to build a tree.",
        )


class ClusteringError(GuideTreeError):
    """Base class for clustering engine errors."""



class UnknownClusterError(ClusteringError):
    """Raised when a cluster handle is not registered in the arena."""

    def __init__(self, handle: int):
        super().__init__(
            message=f"Cluster handle {handle} is not registered in the arena",
        )
        self.handle = handle


class QueueExhaustedError(ClusteringError):
    """Raised when the candidate queue empties before a root is formed."""

    def __init__(self, n_active: int):
        super().__init__(
            message=(
                f"Candidate queue exhausted with {n_active} active clusters left; "
                "no root could be formed"
            ),
            suggestion=(
                "Some clusters have no defined linkage to each other. "
                "Make sure the table covers every pair of items."
            ),
        )
        self.n_active = n_active


class ClusteringIncompleteError(ClusteringError):
    """Raised when a tree is serialized before clustering has finished."""

    def __init__(self) -> None:
        super().__init__(
            message="Root cluster is not set; clustering has not finished",
            suggestion="Run the merge loop to completion before serializing the tree.",
        )


class ConfigurationError(GuideTreeError):
    """Raised when configuration is invalid."""
