"""
Pydantic data models for guidetree.

Provides the clustering configuration and the result of a clustering run.
"""

from guidetree.models.clustering import ClusteringResult
from guidetree.models.config import ClusteringConfig

__all__ = [
    "ClusteringConfig",
    "ClusteringResult",
]
