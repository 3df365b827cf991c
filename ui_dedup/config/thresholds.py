"""Similarity threshold configuration.

Thresholds are an immutable value passed explicitly to the analysis
core; validation happens on construction so an invalid configuration
is rejected before any comparison runs.
"""

import math
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..errors import InvalidThresholds

# camelCase keys used in config files and by the TypeScript extractor
_CAMEL_KEYS = {
    "nameDistanceThreshold": "name_distance_threshold",
    "minSimilarityScore": "min_similarity_score",
    "minStructureComplexity": "min_structure_complexity",
    "minComplexityRatio": "min_complexity_ratio",
}

# Fields constrained to the unit interval
_UNIT_FIELDS = (
    "name_distance_threshold",
    "min_similarity_score",
    "min_complexity_ratio",
)


class SimilarityThresholds(BaseModel):
    """Thresholds controlling comparison gating and significance."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name_distance_threshold: float = Field(
        default=0.7, description="Max name edit distance as a fraction of name length"
    )
    min_similarity_score: float = Field(
        default=0.8, description="Minimum score for a pair to be clustered"
    )
    min_structure_complexity: float = Field(
        default=3.0, description="Minimum element tree complexity to score a pair"
    )
    min_complexity_ratio: float = Field(
        default=0.7, description="Minimum smaller/larger complexity ratio"
    )

    @model_validator(mode="after")
    def check_ranges(self) -> "SimilarityThresholds":
        for name in (*_UNIT_FIELDS, "min_structure_complexity"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise InvalidThresholds(name, value, "that is finite")
        for name in _UNIT_FIELDS:
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidThresholds(name, value, "between 0 and 1")
        if self.min_structure_complexity < 0:
            raise InvalidThresholds(
                "min_structure_complexity", self.min_structure_complexity, ">= 0"
            )
        return self

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "SimilarityThresholds":
        """Build thresholds from a camelCase or snake_case mapping.

        Raises:
            InvalidThresholds: On unknown keys, non-numeric or out-of-range values.
        """
        values = {_CAMEL_KEYS.get(key, key): value for key, value in (data or {}).items()}
        try:
            return cls(**values)
        except ValidationError as e:
            first = e.errors()[0]
            field_name = ".".join(str(part) for part in first.get("loc", ())) or "root"
            raise InvalidThresholds(
                field_name, first.get("input"), "a valid number"
            ) from e

    def with_overrides(self, **overrides: float | None) -> "SimilarityThresholds":
        """Return a validated copy with the non-None overrides applied."""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return type(self).from_mapping(values)

    def to_dict(self) -> dict[str, float]:
        """camelCase representation used in config files."""
        reverse = {snake: camel for camel, snake in _CAMEL_KEYS.items()}
        return {reverse[key]: value for key, value in self.model_dump().items()}


DEFAULT_THRESHOLDS = SimilarityThresholds()


def ensure_thresholds(
    value: "SimilarityThresholds | Mapping[str, Any] | None",
) -> SimilarityThresholds:
    """Coerce caller input to validated thresholds.

    Re-validates instances too, since ``model_construct`` bypasses validation.
    """
    if value is None:
        return DEFAULT_THRESHOLDS
    if isinstance(value, SimilarityThresholds):
        return SimilarityThresholds.from_mapping(value.model_dump())
    return SimilarityThresholds.from_mapping(value)
