"""
Chat pipeline: one pass per inbound message

RECEIVED -> PROFILE_RESOLVED -> EXTRACTED -> MERGED (only with new information)
-> SCORED -> RESPONDED -> LOGGED -> DONE

Only a storage failure while resolving the profile escapes to the caller;
extraction, merge persistence, reply generation and logging all fall back.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional
import logging
import time

from partnur.app.config import settings
from partnur.app.core.completion_scorer import CompletionScorer
from partnur.app.core.field_schema import filter_extraction
from partnur.app.core.profile_locks import ProfileLockRegistry
from partnur.app.core.profile_merger import ProfileMerger
from partnur.app.services.advisor_tips import (
    generate_smart_questions,
    get_business_insights,
    get_contextual_tips,
    get_seasonal_tip,
)
from partnur.app.services.ai_service import AIService
from partnur.app.services.profile_store import ProfileStoreError

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    """Stages a chat message passes through"""
    RECEIVED = "received"
    PROFILE_RESOLVED = "profile_resolved"
    EXTRACTED = "extracted"
    MERGED = "merged"
    SCORED = "scored"
    RESPONDED = "responded"
    LOGGED = "logged"
    DONE = "done"


@dataclass
class ChatResult:
    """Outcome of processing one message"""
    response: str
    profile_completion: int
    extracted_info: Dict[str, Any]
    suggestions: List[str]
    profile: Dict[str, Any]
    changed_fields: List[str] = field(default_factory=list)
    context_used: Dict[str, Any] = field(default_factory=dict)
    response_time_ms: int = 0
    stages: List[PipelineStage] = field(default_factory=list)
    smart_features: Optional[Dict[str, Any]] = None
    analytics_preview: Optional[Dict[str, Any]] = None

    def to_response(self) -> Dict[str, Any]:
        """Body of the plain /chat response"""
        return {
            "response": self.response,
            "profile_completion": self.profile_completion,
            "extracted_info": self.extracted_info,
            "suggestions": self.suggestions,
        }


class ChatPipeline:
    """Composes profile storage, extraction, merge, scoring, replies and logging"""

    def __init__(
        self,
        store,
        ai_service: AIService,
        conversation_logger,
        analytics=None,
        merger: Optional[ProfileMerger] = None,
        scorer: Optional[CompletionScorer] = None,
        locks: Optional[ProfileLockRegistry] = None,
    ):
        self.store = store
        self.ai_service = ai_service
        self.conversation_logger = conversation_logger
        self.analytics = analytics
        self.merger = merger or ProfileMerger()
        self.scorer = scorer or CompletionScorer()
        self.locks = locks or ProfileLockRegistry()

    def process(
        self,
        mobile_number: str,
        message: str,
        session_id: Optional[str] = None,
        enhanced: bool = False,
        started_at: Optional[float] = None,
        today: Optional[date] = None,
    ) -> ChatResult:
        """
        Handle one inbound chat message

        Args:
            mobile_number: Stable user identifier
            message: Free-text message
            session_id: Optional conversation session tag
            enhanced: Also produce smart features and an analytics preview
            started_at: ``time.perf_counter()`` value at request start

        Returns:
            ChatResult

        Raises:
            ValueError: If mobile_number or message is missing
            ProfileStoreError: If the profile cannot be loaded or created
        """
        if not mobile_number or not message or not message.strip():
            raise ValueError("mobile_number and message are required")

        started_at = started_at if started_at is not None else time.perf_counter()
        stages = [PipelineStage.RECEIVED]

        profile = self._resolve_profile(mobile_number)
        stages.append(PipelineStage.PROFILE_RESOLVED)

        extracted_info = self._extract(message, profile)
        stages.append(PipelineStage.EXTRACTED)

        changed_fields: List[str] = []
        if extracted_info:
            profile, changed_fields = self._merge(mobile_number, profile, extracted_info)
            stages.append(PipelineStage.MERGED)

        profile, completion_score = self._score(profile)
        stages.append(PipelineStage.SCORED)

        reply = self._respond(message, profile, enhanced, today)
        stages.append(PipelineStage.RESPONDED)

        response_time_ms = int((time.perf_counter() - started_at) * 1000)
        self.conversation_logger.log({
            "user_id": profile["user_id"],
            "user_message": message,
            "ai_response": reply["content"],
            "extracted_info": extracted_info,
            "profile_updates": changed_fields,
            "context_used": reply["context_used"],
            "response_time_ms": response_time_ms,
            "session_id": session_id or None,
        })
        stages.append(PipelineStage.LOGGED)

        result = ChatResult(
            response=reply["content"],
            profile_completion=completion_score,
            extracted_info=extracted_info,
            suggestions=reply.get("suggestions") or [],
            profile=profile,
            changed_fields=changed_fields,
            context_used=reply["context_used"],
            response_time_ms=response_time_ms,
            stages=stages,
        )
        if enhanced:
            result.smart_features = self._smart_features(profile, reply, today)
            result.analytics_preview = self._analytics_preview(profile["user_id"])

        stages.append(PipelineStage.DONE)
        return result

    def _resolve_profile(self, mobile_number: str) -> Dict[str, Any]:
        profile = self.store.get_by_mobile(mobile_number)
        if profile is None:
            floor_score = self.scorer.score({"mobile_number": mobile_number})
            profile = self.store.create(mobile_number, floor_score)
            logger.info(f"👤 Created new user profile for {mobile_number}")
        return profile

    def _extract(self, message: str, profile: Dict[str, Any]) -> Dict[str, Any]:
        try:
            raw = self.ai_service.extract_profile_info(message, profile)
        except Exception as e:
            logger.error(f"Error extracting profile info: {str(e)}")
            return {}
        extracted = filter_extraction(raw)
        logger.info(f"🔍 Extracted info: {extracted}")
        return extracted

    def _merge(self, mobile_number: str, profile: Dict[str, Any], extracted: Dict[str, Any]):
        """Reload, merge and persist under the profile's lock"""
        try:
            with self.locks.hold(mobile_number):
                current = self.store.get_by_id(profile["user_id"]) or profile
                merged = self.merger.merge(current, extracted)
                updates = merged.updates()
                updates["profile_completion_score"] = self.scorer.score(merged.profile)
                saved = self.store.update(current["user_id"], updates)
        except ProfileStoreError as e:
            logger.error(f"Could not save profile update for {mobile_number}: {str(e)}")
            return profile, []

        logger.info(f"📝 Profile updated, changed fields: {merged.changed_fields}")
        return saved, merged.changed_fields

    def _score(self, profile: Dict[str, Any]):
        score = self.scorer.score(profile)
        if profile.get("profile_completion_score") != score:
            try:
                profile = self.store.update(profile["user_id"], {"profile_completion_score": score})
            except ProfileStoreError as e:
                logger.error(f"Could not save completion score for user {profile['user_id']}: {str(e)}")
        return profile, score

    def _respond(self, message: str, profile: Dict[str, Any], enhanced: bool, today: Optional[date]) -> Dict[str, Any]:
        try:
            if enhanced:
                return self.ai_service.generate_response(message, profile, enhanced=True, today=today)
            return self.ai_service.generate_response(message, profile)
        except Exception as e:
            logger.error(f"Error generating AI response: {str(e)}")
            return AIService.fallback_response()

    def _smart_features(self, profile: Dict[str, Any], reply: Dict[str, Any], today: Optional[date]) -> Dict[str, Any]:
        return {
            "smart_questions": generate_smart_questions(profile, self.scorer),
            "seasonal_tip": reply.get("seasonal_tip") or get_seasonal_tip(today),
            "business_insights": get_business_insights(profile),
            "contextual_tips": get_contextual_tips(profile),
        }

    def _analytics_preview(self, user_id: int) -> Dict[str, Any]:
        preview = {"total_conversations": 0, "avg_response_time": 0}
        if self.analytics is None:
            return preview
        try:
            stats = self.analytics.windowed_stats(user_id, settings.ANALYTICS_PREVIEW_DAYS)
        except ProfileStoreError as e:
            logger.warning(f"Analytics preview unavailable for user {user_id}: {str(e)}")
            return preview
        preview["total_conversations"] = stats["total_conversations"]
        preview["avg_response_time"] = stats["avg_response_time_ms"]
        return preview
