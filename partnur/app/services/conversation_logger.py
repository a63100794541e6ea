"""
Fire-and-forget conversation logging

Log rows are diagnostic: a failed write is reported through logging and never
reaches the chat response.
"""
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Dict, Optional
import logging

from partnur.app.config import settings

logger = logging.getLogger(__name__)


class ConversationLogger:
    """Writes conversation log entries on a background thread pool"""

    def __init__(self, store, executor: Optional[Executor] = None):
        self.store = store
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=settings.LOG_WRITER_WORKERS,
            thread_name_prefix="conversation-log"
        )

    def log(self, entry: Dict[str, Any]) -> Optional[Future]:
        """
        Queue *entry* for writing and return immediately

        Returns:
            Future of the write (resolves to True/False), or None if the entry
            could not even be queued
        """
        try:
            return self.executor.submit(self._write, dict(entry))
        except Exception as e:
            logger.error(f"Could not queue conversation log for user {entry.get('user_id')}: {str(e)}")
            return None

    def _write(self, entry: Dict[str, Any]) -> bool:
        try:
            self.store.insert_log(entry)
            return True
        except Exception as e:
            logger.error(f"Error logging conversation for user {entry.get('user_id')}: {str(e)}")
            return False

    def shutdown(self, wait: bool = True):
        """Flush pending writes and stop the worker threads"""
        if self._owns_executor:
            self.executor.shutdown(wait=wait)
            logger.info("Conversation log writer stopped")
