"""
Pydantic configuration models for guidetree.

ClusteringConfig controls how scores are ranked, whether linkage
recomputation fans out over threads, and how labels are written to Newick.
Configuration can be loaded from a YAML file and overridden by CLI flags.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from guidetree.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ClusteringConfig(BaseModel):
    """
    Configuration for average-linkage agglomerative clustering.

    Score Modes:
        - similarity: higher scores mean closer items; the highest-scoring
          pair of active clusters merges first (default).
        - distance: lower scores mean closer items; scores are negated when
          queued so the smallest distance merges first. Linkage means are
          always averaged over the raw table values.
    """

    score_mode: Literal["similarity", "distance"] = Field(
        default="similarity",
        description="Whether table scores are similarities or distances",
    )
    workers: int = Field(
        default=1,
        ge=1,
        description="Threads used to compute linkage scores within one merge step",
    )
    parallel_threshold: int = Field(
        default=64,
        ge=1,
        description=(
            "Minimum number of active candidates in a merge step before the "
            "thread pool is used. Smaller steps are computed inline."
        ),
    )
    quote_labels: bool = Field(
        default=True,
        description="Quote Newick labels that contain reserved characters",
    )

    model_config = {"frozen": True}

    def queue_key(self, score: float) -> float:
        """Map a table or linkage score onto the max-heap key."""
        if self.score_mode == "distance":
            return -score
        return score

    def with_overrides(self, **overrides: Any) -> ClusteringConfig:
        """
        Return a copy with non-None overrides applied and re-validated.

        Raises:
            ConfigurationError: If an override value is invalid.
        """
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return self
        try:
            return type(self)(**{**self.model_dump(), **updates})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration override: {e}") from None

    @classmethod
    def from_yaml(cls, path: Path) -> ClusteringConfig:
        """
        Load clustering configuration from a YAML file.

        Keys may sit at the top level or under a ``clustering`` section.
        Unknown keys are ignored.

        Args:
            path: Path to YAML configuration file.

        Returns:
            ClusteringConfig populated from YAML values merged with defaults.

        Raises:
            FileNotFoundError: If YAML file does not exist.
            ConfigurationError: If the YAML is not a mapping or holds invalid values.
        """
        import yaml

        try:
            raw = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Could not parse YAML config {path}: {e}") from None
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            msg = f"YAML config must be a mapping, got {type(raw).__name__}"
            raise ConfigurationError(msg)

        section = raw.get("clustering", raw)
        if not isinstance(section, dict):
            msg = "'clustering' section of YAML config must be a mapping"
            raise ConfigurationError(msg)

        known = {k: v for k, v in section.items() if k in cls.model_fields}
        ignored = set(section) - set(known)
        if ignored:
            logger.debug("Ignoring unknown config keys: %s", sorted(ignored))

        try:
            return cls(**known)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration in {path}: {e}",
                suggestion="Check the value types and ranges in the YAML file.",
            ) from None

    def to_yaml_str(self) -> str:
        """Serialize the configuration as a YAML string under a ``clustering`` section."""
        import yaml

        return yaml.dump(
            {"clustering": self.model_dump()},
            default_flow_style=False,
            sort_keys=False,
        )

    def to_yaml(self, path: Path) -> None:
        """Write the configuration to a YAML file."""
        path.write_text(self.to_yaml_str())
