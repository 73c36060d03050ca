"""
Newick serialization of a finished cluster arena.

The emitter walks left/right handles from the root with an explicit stack,
so deep trees do not hit the recursion limit and no label text is ever
searched for inside the partial output.
"""

from __future__ import annotations

import re

from guidetree.core.clustering.arena import ClusterArena
from guidetree.core.exceptions import ClusteringIncompleteError

# Whitespace and the characters Newick reserves for structure
_RESERVED = re.compile(r"[\s(),:;\[\]']")


def format_label(label: str, quote: bool = True) -> str:
    """
    Render one leaf label.

    Labels containing Newick-reserved characters are wrapped in single quotes
    with embedded quotes doubled. Other labels are written verbatim.

    Example:
        >>> format_label("s1")
        's1'
        >>> format_label("E. coli")
        "'E. coli'"
    """
    if quote and _RESERVED.search(label):
        return "'" + label.replace("'", "''") + "'"
    return label


def serialize(arena: ClusterArena, quote_labels: bool = True) -> str:
    """
    Convert a clustered arena to a Newick string.

    Each interior node becomes ``(left,right)`` and each leaf its label.
    Children appear in merge order, left before right. A single-leaf tree
    serializes to ``label;``.

    Args:
        arena: Arena whose root has been set by the merge loop.
        quote_labels: Quote labels containing reserved characters.

    Returns:
        Newick text terminated by a semicolon.

    Raises:
        ClusteringIncompleteError: If the arena has no root yet.
    """
    if arena.root is None:
        raise ClusteringIncompleteError()

    parts: list[str] = []
    stack: list[int | str] = [arena.root]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
            continue

        node = arena.node(item)
        if node.is_leaf:
            parts.append(format_label(node.members[0], quote_labels))
            continue

        # Pushed in reverse so the left subtree is emitted first
        parts.append("(")
        stack.extend((")", node.right, ",", node.left))

    parts.append(";")
    return "".join(parts)
