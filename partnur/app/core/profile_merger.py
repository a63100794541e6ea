"""
Profile Merger

Folds newly extracted field values into an existing profile state.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from partnur.app.core.field_schema import FIELDS_BY_NAME, filter_extraction

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    """Next profile state plus the fields whose value actually changed"""
    profile: Dict[str, Any]
    changed_fields: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.changed_fields)

    def updates(self) -> Dict[str, Any]:
        """Column values to persist for this merge"""
        values = {name: self.profile.get(name) for name in self.changed_fields}
        values["last_profile_update"] = self.profile.get("last_profile_update")
        values["updated_at"] = self.profile.get("updated_at")
        return values


class ProfileMerger:
    """Merges extracted values into a profile following each field's shape."""

    def merge(
        self,
        current: Mapping[str, Any],
        proposed: Mapping[str, Any],
        now: Optional[datetime] = None
    ) -> MergeResult:
        """
        Merge proposed values into the current profile.

        Rules:
        - Scalar fields: the proposed value replaces the current one
        - Sequence fields: union of current and proposed values, no duplicates,
          current elements first followed by new ones in proposed order
        - Fields missing from ``proposed`` are left as they are
        - Unknown or non-extractable fields are dropped

        Args:
            current: Current profile state (not modified)
            proposed: Extracted field values
            now: Merge time, defaults to ``datetime.now()``

        Returns:
            MergeResult with a new profile mapping
        """
        merged = dict(current)
        changed: List[str] = []

        for name, value in filter_extraction(proposed).items():
            spec = FIELDS_BY_NAME[name]
            existing = merged.get(name)

            if spec.is_sequence:
                combined: List[Any] = []
                for item in list(existing or []) + value:
                    if item not in combined:
                        combined.append(item)
                new_value = combined
            else:
                new_value = value

            if new_value != existing:
                changed.append(name)
            merged[name] = new_value

        merge_time = now or datetime.now()
        merged["last_profile_update"] = merge_time
        merged["updated_at"] = merge_time

        if changed:
            logger.debug(f"Profile merge: updated fields {changed}")

        return MergeResult(profile=merged, changed_fields=changed)
