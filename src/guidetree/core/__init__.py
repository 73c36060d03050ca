"""
Core algorithms for guide tree construction.

This module contains the candidate max-heap, the pairwise score table and
its loader, the clustering engine and the Newick serializer.
"""

from guidetree.core.clustering import ClusterArena, ClusteringEngine, cluster_table
from guidetree.core.heap import MaxHeap
from guidetree.core.newick import serialize
from guidetree.core.pairwise import PairwiseTable, PairwiseTableParser

__all__ = [
    "ClusterArena",
    "ClusteringEngine",
    "MaxHeap",
    "PairwiseTable",
    "PairwiseTableParser",
    "cluster_table",
    "serialize",
]
