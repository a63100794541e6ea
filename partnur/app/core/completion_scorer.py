"""
Profile Completion Scorer

Weighted percentage of the scored profile fields that hold a value.
"""
import logging
from typing import Any, Iterable, List, Mapping

from partnur.app.core.field_schema import PROFILE_FIELDS, FieldSpec, is_empty

logger = logging.getLogger(__name__)


class CompletionScorer:
    """Computes the 0-100 completion score of a profile."""

    def __init__(self, fields: Iterable[FieldSpec] = PROFILE_FIELDS):
        self.fields = [spec for spec in fields if spec.is_scored]
        self.total_weight = sum(spec.weight for spec in self.fields)
        if self.total_weight <= 0:
            raise ValueError("Completion scoring needs at least one weighted field")

    def score(self, profile: Mapping[str, Any]) -> int:
        """
        Score a profile.

        A field counts when it is not None, not a blank string and, for
        sequences, not empty.

        Returns:
            round-half-up(100 * filled weight / total weight)
        """
        filled = sum(spec.weight for spec in self.fields if not is_empty(profile.get(spec.name)))
        # Integer round half up
        return (200 * filled + self.total_weight) // (2 * self.total_weight)

    def missing_fields(self, profile: Mapping[str, Any]) -> List[str]:
        """Unfilled scored fields, heaviest first"""
        missing = [spec for spec in self.fields if is_empty(profile.get(spec.name))]
        missing.sort(key=lambda spec: spec.weight, reverse=True)
        return [spec.name for spec in missing]


def calculate_profile_completion(profile: Mapping[str, Any]) -> int:
    """Score *profile* with the default field schema"""
    return CompletionScorer().score(profile)
