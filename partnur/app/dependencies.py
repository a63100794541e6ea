"""
Service wiring for the API routes

Services are built once per application and kept on ``app.state``; tests
replace them with ``app.dependency_overrides[get_services]``.
"""
from dataclasses import dataclass
from fastapi import Request
import logging
import threading

from partnur.app.core.chat_pipeline import ChatPipeline
from partnur.app.core.completion_scorer import CompletionScorer
from partnur.app.core.profile_locks import ProfileLockRegistry
from partnur.app.services.ai_service import AIService
from partnur.app.services.analytics import AnalyticsService
from partnur.app.services.conversation_logger import ConversationLogger
from partnur.app.services.profile_store import ProfileStore

logger = logging.getLogger(__name__)

# Serializes the lazy build so every request shares one lock registry
_build_lock = threading.Lock()


@dataclass
class Services:
    """Explicitly constructed collaborators shared by all requests"""
    store: ProfileStore
    scorer: CompletionScorer
    analytics: AnalyticsService
    conversation_logger: ConversationLogger
    pipeline: ChatPipeline

    def shutdown(self):
        self.conversation_logger.shutdown(wait=True)


def build_services(store: ProfileStore = None, ai_service: AIService = None, conversation_logger=None) -> Services:
    """Wire the chat pipeline and its collaborators"""
    store = store or ProfileStore()
    ai_service = ai_service or AIService()
    scorer = CompletionScorer()
    analytics = AnalyticsService(store, scorer)
    conversation_logger = conversation_logger or ConversationLogger(store)
    pipeline = ChatPipeline(
        store=store,
        ai_service=ai_service,
        conversation_logger=conversation_logger,
        analytics=analytics,
        scorer=scorer,
        locks=ProfileLockRegistry(),
    )
    return Services(
        store=store,
        scorer=scorer,
        analytics=analytics,
        conversation_logger=conversation_logger,
        pipeline=pipeline,
    )


def get_services(request: Request) -> Services:
    """FastAPI dependency returning the application's services"""
    services = getattr(request.app.state, "services", None)
    if services is None:
        with _build_lock:
            services = getattr(request.app.state, "services", None)
            if services is None:
                logger.info("Building application services")
                services = build_services()
                request.app.state.services = services
    return services
