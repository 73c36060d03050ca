"""
Greedy average-linkage agglomerative clustering.

The engine repeatedly pops the best-scoring candidate pair from a max-heap,
merges it if both sides are still active, and queues linkage scores between
the new cluster and every other active cluster. Entries that reference an
absorbed cluster stay in the heap and are discarded when popped.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import TypeAlias

from guidetree.core.clustering.arena import ClusterArena
from guidetree.core.exceptions import QueueExhaustedError
from guidetree.core.heap import MaxHeap
from guidetree.core.newick import serialize
from guidetree.core.pairwise import PairwiseTable
from guidetree.models.clustering import ClusteringResult
from guidetree.models.config import ClusteringConfig

logger = logging.getLogger(__name__)

# Queue payload: (left handle, right handle)
HandlePair: TypeAlias = tuple[int, int]
CandidateQueue: TypeAlias = MaxHeap[HandlePair]


def average_linkage(
    members_a: Sequence[str],
    members_b: Sequence[str],
    table: PairwiseTable,
) -> float | None:
    """
    Mean pairwise score between two clusters over the pairs the table knows.

    Pairs with no score in either direction are left out of both the sum
    and the count.

    Args:
        members_a: Item labels of the first cluster.
        members_b: Item labels of the second cluster.
        table: Pairwise score lookup.

    Returns:
        Mean score, or None if no cross pair has a score.
    """
    total = 0.0
    count = 0
    for a in members_a:
        for b in members_b:
            score = table.get(a, b)
            if score is not None:
                total += score
                count += 1
    if count == 0:
        return None
    return total / count


class ClusteringEngine:
    """
    Drives the merge loop over a ClusterArena.

    The arena and the queue are only mutated from the calling thread. When
    ``config.workers`` is above one and a merge step has at least
    ``config.parallel_threshold`` candidates, linkage scores for that step
    are computed in a thread pool; every score is collected before any of
    them is queued.

    Example:
        >>> table = PairwiseTable.from_records([
        ...     ("s1", "s2", 10.0), ("s1", "s3", 1.0), ("s2", "s3", 1.0),
        ... ])
        >>> engine = ClusteringEngine(table.items)
        >>> queue = engine.seed(table)
        >>> root = engine.run(queue, table)
        >>> engine.arena.node(root).members
        ('s1', 's2', 's3')
    """

    def __init__(
        self,
        items: Sequence[str],
        config: ClusteringConfig | None = None,
    ) -> None:
        """
        Initialize the engine with one leaf cluster per distinct item.

        Args:
            items: Item labels; duplicates are collapsed, first occurrence wins.
            config: Clustering configuration (uses defaults if None).
        """
        self.config = config or ClusteringConfig()
        self.arena = ClusterArena(items)
        self.n_merges = 0
        self.n_stale = 0
        self.n_undefined_linkages = 0

    @property
    def is_complete(self) -> bool:
        return self.arena.root is not None

    def seed(self, table: PairwiseTable) -> CandidateQueue:
        """
        Build the initial candidate queue from every stored table pair.

        Returns:
            Max-heap holding one entry per pair, keyed by its queue score.
        """
        queue: CandidateQueue = MaxHeap()
        arena = self.arena
        for item_a, item_b, score in table.pairs():
            queue.insert(
                self.config.queue_key(score),
                (arena.leaf_handle(item_a), arena.leaf_handle(item_b)),
            )
        logger.debug("Seeded queue with %d candidate pairs", len(queue))
        return queue

    def try_merge_and_expand(
        self,
        left: int,
        right: int,
        queue: CandidateQueue,
        table: PairwiseTable,
    ) -> int | None:
        """
        Merge one candidate pair and queue the new cluster's linkages.

        A pair where either side already has a parent is stale: it is
        dropped without touching the arena or the queue. If the merged
        cluster covers every item it becomes the root and nothing more is
        queued.

        Args:
            left: Handle that becomes the left child.
            right: Handle that becomes the right child.
            queue: Candidate queue receiving the new linkage entries.
            table: Pairwise score lookup.

        Returns:
            Handle of the new cluster, or None for a stale pair.

        Raises:
            UnknownClusterError: If either handle is not in the arena.
        """
        arena = self.arena
        if not arena.node(left).is_active or not arena.node(right).is_active:
            self.n_stale += 1
            logger.debug("Discarding stale pair (%d, %d)", left, right)
            return None

        new_handle = arena.merge(left, right)
        self.n_merges += 1
        new_node = arena.node(new_handle)
        logger.debug(
            "Merged %d and %d into %d (%d members)",
            left,
            right,
            new_handle,
            new_node.size,
        )

        if new_node.size == arena.n_items:
            arena.set_root(new_handle)
            logger.info(
                "Clustering complete after %d merges (%d stale entries discarded)",
                self.n_merges,
                self.n_stale,
            )
            return new_handle

        candidates = [
            h for h in arena.active_handles() if arena.node(h).members != new_node.members
        ]
        scores = self._linkage_scores(new_node.members, candidates, table)
        for handle, score in zip(candidates, scores):
            if score is None:
                self.n_undefined_linkages += 1
                logger.debug("No pairwise scores between %d and %d", new_handle, handle)
                continue
            queue.insert(self.config.queue_key(score), (new_handle, handle))
        return new_handle

    def _linkage_scores(
        self,
        members: tuple[str, ...],
        candidates: list[int],
        table: PairwiseTable,
    ) -> list[float | None]:
        """Average linkage from ``members`` to each candidate, in candidate order."""
        arena = self.arena
        candidate_members = [arena.node(h).members for h in candidates]
        score = partial(average_linkage, members, table=table)

        workers = self.config.workers
        if workers <= 1 or len(candidates) < self.config.parallel_threshold:
            return [score(m) for m in candidate_members]

        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(score, candidate_members))

    def run(self, queue: CandidateQueue, table: PairwiseTable) -> int:
        """
        Pop and merge candidates until a root cluster exists.

        Returns:
            Handle of the root cluster.

        Raises:
            QueueExhaustedError: If the queue empties before a root is formed.
        """
        arena = self.arena
        while arena.root is None:
            entry = queue.pop_max()
            if entry is None:
                raise QueueExhaustedError(len(arena.active_handles()))
            _, (left, right) = entry
            self.try_merge_and_expand(left, right, queue, table)
        return arena.root

    def to_newick(self) -> str:
        """Serialize the finished tree using the configured label quoting."""
        return serialize(self.arena, quote_labels=self.config.quote_labels)


def cluster_table(
    table: PairwiseTable,
    config: ClusteringConfig | None = None,
) -> ClusteringResult:
    """
    Run average-linkage clustering over a pairwise table.

    Args:
        table: Pairwise scores covering the items to cluster.
        config: Clustering configuration (uses defaults if None).

    Returns:
        ClusteringResult with the Newick tree and run counters.
    """
    engine = ClusteringEngine(table.items, config)
    queue = engine.seed(table)
    root = engine.run(queue, table)

    return ClusteringResult(
        newick=engine.to_newick(),
        n_items=engine.arena.n_items,
        n_merges=engine.n_merges,
        n_stale=engine.n_stale,
        n_undefined_linkages=engine.n_undefined_linkages,
        root_members=list(engine.arena.node(root).members),
    )
