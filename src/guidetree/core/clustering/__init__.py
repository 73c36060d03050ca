"""Cluster arena and the average-linkage merge loop."""

from guidetree.core.clustering.arena import ClusterArena, ClusterNode
from guidetree.core.clustering.engine import (
    ClusteringEngine,
    average_linkage,
    cluster_table,
)

__all__ = [
    "ClusterArena",
    "ClusterNode",
    "ClusteringEngine",
    "average_linkage",
    "cluster_table",
]
