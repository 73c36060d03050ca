"""
Result model for a finished clustering run.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ClusteringResult(BaseModel):
    """Newick tree plus bookkeeping counters from one merge loop.

    Attributes:
        newick: Serialized tree, terminated by a semicolon.
        n_items: Number of distinct items clustered.
        n_merges: Successful merges performed (n_items - 1 for a full run).
        n_stale: Queue entries discarded because a side was already absorbed.
        n_undefined_linkages: Candidate pairs with no known pairwise score.
        root_members: Item labels of the root cluster in tree order.
    """

    newick: str = Field(description="Newick tree text")
    n_items: int = Field(ge=1, description="Number of distinct items")
    n_merges: int = Field(ge=0, description="Successful merges")
    n_stale: int = Field(default=0, ge=0, description="Discarded stale queue entries")
    n_undefined_linkages: int = Field(
        default=0,
        ge=0,
        description="Candidate pairs skipped for lack of any pairwise score",
    )
    root_members: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}
