"""
guidetree: average-linkage guide trees from pairwise score tables.

Builds a binary merge tree over labeled items by repeatedly joining the two
best-scoring active clusters, and writes the result in Newick format for use
as a guide or phylogenetic-style tree.
"""

__version__ = "0.1.0"
__author__ = "guidetree Team"

from guidetree.core.clustering.engine import ClusteringEngine, cluster_table
from guidetree.core.pairwise import PairwiseTable, PairwiseTableParser
from guidetree.models.clustering import ClusteringResult
from guidetree.models.config import ClusteringConfig

__all__ = [
    "ClusteringConfig",
    "ClusteringEngine",
    "ClusteringResult",
    "PairwiseTable",
    "PairwiseTableParser",
    "__version__",
    "cluster_table",
]
