"""Entity tagging: turn request text into typed, non-overlapping spans."""

from querylens.tagging.models import (
    ComparisonOperator,
    EntityMatch,
    EntityType,
    NumericValue,
    TemporalValue,
    UserContext,
)
from querylens.tagging.tagger import CURRENT_USER, EntityTagger

__all__ = [
    "CURRENT_USER",
    "ComparisonOperator",
    "EntityMatch",
    "EntityTagger",
    "EntityType",
    "NumericValue",
    "TemporalValue",
    "UserContext",
]
