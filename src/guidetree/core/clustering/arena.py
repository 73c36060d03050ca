"""
Append-only arena of cluster nodes addressed by integer handles.

Parent and child links are plain handle fields, so the growing forest of
clusters needs no shared ownership between nodes. Handles are never freed
or reused; interior nodes persist until the tree is serialized.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from guidetree.core.exceptions import ClusteringError, UnknownClusterError

logger = logging.getLogger(__name__)


@dataclass
class ClusterNode:
    """
    One cluster in the arena.

    Attributes:
        members: Item labels in accumulation order (left subtree first).
        parent: Handle of the cluster this node was merged into, or None
            while the node is still active.
        left: Handle of the left child, None for leaves.
        right: Handle of the right child, None for leaves.
    """

    members: tuple[str, ...]
    parent: int | None = None
    left: int | None = None
    right: int | None = None

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    @property
    def is_active(self) -> bool:
        return self.parent is None


class ClusterArena:
    """
    Owns every cluster node of one clustering run.

    Singleton nodes are created up front, one per distinct item, taking
    handles ``0..n-1`` in item order. Each merge appends one new parent node.
    A reverse mapping from member tuple to handle lets callers resolve a
    leaf item to its handle.

    Attributes:
        all_items: Fixed universe of item labels.
        absorbed_singletons: Items whose leaf node has been merged at least once.
        subtree_roots: Handles of every node produced by a merge. A handle in
            this set is active only while its node's parent is None.
        root: Handle of the finished tree, set exactly once.
    """

    def __init__(self, items: Iterable[str]) -> None:
        ordered = tuple(dict.fromkeys(items))
        if not ordered:
            msg = "Cannot build a cluster arena from an empty item set"
            raise ClusteringError(msg)

        self._item_order: tuple[str, ...] = ordered
        self.all_items: frozenset[str] = frozenset(ordered)
        self.absorbed_singletons: set[str] = set()
        self.subtree_roots: set[int] = set()
        self.root: int | None = None

        self._nodes: list[ClusterNode] = []
        self._handles: dict[tuple[str, ...], int] = {}
        for item in ordered:
            self._register(ClusterNode(members=(item,)))

        # A single item is already a complete tree
        if len(ordered) == 1:
            logger.warning("Only one item (%s); the tree is a single leaf", ordered[0])
            self.root = 0

    def _register(self, node: ClusterNode) -> int:
        handle = len(self._nodes)
        if node.members in self._handles:
            msg = f"Members {node.members!r} are already registered under another handle"
            raise ClusteringError(msg)
        self._nodes.append(node)
        self._handles[node.members] = handle
        return handle

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, handle: object) -> bool:
        return isinstance(handle, int) and 0 <= handle < len(self._nodes)

    @property
    def n_items(self) -> int:
        return len(self._item_order)

    @property
    def items(self) -> tuple[str, ...]:
        """Item labels in leaf-handle order."""
        return self._item_order

    def node(self, handle: int) -> ClusterNode:
        """
        Return the node registered under ``handle``.

        Raises:
            UnknownClusterError: If the handle is not in the arena.
        """
        if handle not in self:
            raise UnknownClusterError(handle)
        return self._nodes[handle]

    def handle_for(self, members: tuple[str, ...]) -> int | None:
        """Resolve a member tuple back to its handle."""
        return self._handles.get(tuple(members))

    def leaf_handle(self, item: str) -> int:
        """Return the handle of the singleton cluster for ``item``."""
        handle = self._handles.get((item,))
        if handle is None:
            msg = f"Item {item!r} is not part of this arena"
            raise KeyError(msg)
        return handle

    def merge(self, left: int, right: int) -> int:
        """
        Join two clusters under a new parent node.

        The parent's members are the left members followed by the right
        members. Both children get the new handle as their parent, and
        singleton children are recorded as absorbed.

        Args:
            left: Handle of the left child.
            right: Handle of the right child.

        Returns:
            Handle of the new parent node.

        Raises:
            UnknownClusterError: If either handle is not registered.
            ClusteringError: If both handles are the same cluster.
        """
        left_node = self.node(left)
        right_node = self.node(right)
        if left == right:
            msg = f"Cannot merge cluster {left} with itself"
            raise ClusteringError(msg)

        parent_handle = self._register(
            ClusterNode(
                members=left_node.members + right_node.members,
                left=left,
                right=right,
            )
        )
        left_node.parent = parent_handle
        right_node.parent = parent_handle

        for child in (left_node, right_node):
            if child.size == 1:
                self.absorbed_singletons.add(child.members[0])
        self.subtree_roots.add(parent_handle)
        return parent_handle

    def set_root(self, handle: int) -> None:
        """Mark ``handle`` as the finished tree's root."""
        if self.root is not None:
            msg = f"Root already set to {self.root}; cannot reassign to {handle}"
            raise ClusteringError(msg)
        self.node(handle)
        self.root = handle

    def unabsorbed_items(self) -> list[str]:
        """Items whose singleton cluster has not been merged yet."""
        return [i for i in self._item_order if i not in self.absorbed_singletons]

    def active_handles(self) -> list[int]:
        """
        Enumerate the currently active clusters.

        Returns the leaf handles of unabsorbed items followed by every merged
        subtree root that has not itself been absorbed, in handle order.
        """
        leaves = [self._handles[(item,)] for item in self.unabsorbed_items()]
        merged = sorted(h for h in self.subtree_roots if self._nodes[h].parent is None)
        return leaves + merged
