"""
Conversation analytics and platform-wide profile completion trends
"""
from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
import logging

from partnur.app.config import settings
from partnur.app.core.completion_scorer import CompletionScorer
from partnur.app.services.profile_store import ProfileStoreError

logger = logging.getLogger(__name__)

# Extracted fields whose values are counted as conversation topics
TOPIC_FIELDS = ("business_type", "location_city")

SNAPSHOT_FIELDS = (
    "business_type", "location_city", "location_state", "monthly_revenue",
    "staff_count", "platforms_used", "goals", "challenges",
)


def _isoformat(value: Any) -> Any:
    return value.isoformat() if isinstance(value, datetime) else value


def _mean(values: List[float]) -> float:
    """Arithmetic mean, 0 for no values"""
    if not values:
        return 0
    return round(sum(values) / len(values), 2)


class AnalyticsService:
    """Windowed conversation statistics and completion trends"""

    def __init__(self, store, scorer: Optional[CompletionScorer] = None):
        self.store = store
        self.scorer = scorer or CompletionScorer()

    def windowed_stats(
        self,
        user_id: int,
        window_days: int,
        now: Optional[datetime] = None,
        recent_limit: int = 5
    ) -> Dict[str, Any]:
        """
        Aggregate a user's conversations from the last *window_days* days

        Args:
            user_id: Profile primary id
            window_days: Size of the trailing window
            now: End of the window, defaults to ``datetime.now()``
            recent_limit: How many of the latest conversations to include

        Returns:
            Dict with total_conversations, avg_response_time_ms, common_topics
            and recent_conversations
        """
        now = now or datetime.now()
        cutoff = now - timedelta(days=window_days)
        entries = [
            entry for entry in self.store.logs_since(user_id, cutoff)
            if entry.get("created_at") is None or entry["created_at"] <= now
        ]
        entries.sort(key=lambda entry: entry.get("created_at") or cutoff, reverse=True)

        latencies = [entry["response_time_ms"] for entry in entries if entry.get("response_time_ms") is not None]

        topics: Counter = Counter()
        for entry in entries:
            extracted = entry.get("extracted_info") or {}
            for name in TOPIC_FIELDS:
                value = extracted.get(name)
                if isinstance(value, (str, int, float)) and value != "":
                    topics[value] += 1

        return {
            "period_days": window_days,
            "total_conversations": len(entries),
            "avg_response_time_ms": _mean(latencies),
            "common_topics": dict(topics),
            "recent_conversations": [
                {
                    "user_message": entry.get("user_message"),
                    "ai_response": entry.get("ai_response"),
                    "profile_updates": entry.get("profile_updates") or [],
                    "session_id": entry.get("session_id"),
                    "created_at": _isoformat(entry.get("created_at")),
                }
                for entry in entries[:recent_limit]
            ],
        }

    def completion_trend(self, limit: int) -> List[Dict[str, Any]]:
        """Completion scores of the most recently created profiles, newest first"""
        profiles = self.store.profiles_by_created_desc(limit)
        profiles.sort(key=lambda profile: profile.get("created_at") or datetime.min, reverse=True)
        return [
            {
                "profile_completion_score": profile.get("profile_completion_score") or 0,
                "created_at": _isoformat(profile.get("created_at")),
                "business_type": profile.get("business_type"),
                "location_city": profile.get("location_city"),
            }
            for profile in profiles[:limit]
        ]

    @staticmethod
    def trend_summary(trends: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Profile count, mean completion and business type histogram"""
        total = len(trends)
        score_sum = sum(trend["profile_completion_score"] for trend in trends)
        average = (2 * score_sum + total) // (2 * total) if total else 0

        business_types: Counter = Counter(
            trend["business_type"] for trend in trends if trend.get("business_type")
        )
        return {
            "total_profiles": total,
            "average_completion": average,
            "business_types": dict(business_types),
        }

    def activity_summary(self, user_id: int, now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
        """
        Current completion, activity and business snapshot of one user

        Returns:
            Summary dict, or None when the profile cannot be resolved
        """
        try:
            profile = self.store.get_by_id(user_id)
            if profile is None:
                return None
            stats = self.windowed_stats(user_id, settings.ANALYTICS_DEFAULT_DAYS, now=now, recent_limit=1)
        except ProfileStoreError as e:
            logger.warning(f"Activity summary unavailable for user {user_id}: {str(e)}")
            return None

        recent = stats["recent_conversations"]
        last_active = recent[0]["created_at"] if recent else _isoformat(profile.get("updated_at"))

        return {
            "completion_score": self.scorer.score(profile),
            "last_active_at": last_active,
            "conversation_count": stats["total_conversations"],
            "avg_response_time_ms": stats["avg_response_time_ms"],
            "business_snapshot": {name: profile.get(name) for name in SNAPSHOT_FIELDS},
        }
