"""
Storage adapter for business profiles and conversation logs

The rest of the application sees profiles and log entries as plain dicts;
only this module knows about SQLAlchemy sessions.
"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy import desc
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import logging

from partnur.app.models.profile import UserProfile
from partnur.app.models.conversation import ConversationLog
from partnur.app.database import get_session_local
from partnur.app.config import settings

logger = logging.getLogger(__name__)

# Columns that callers may never overwrite through update()
_PROTECTED_COLUMNS = {"user_id", "mobile_number", "created_at"}


class ProfileStoreError(Exception):
    """Raised when the profile database cannot be read or written"""


class ProfileStore:
    """Profile and conversation-log persistence"""

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self.session_factory = session_factory or get_session_local()

    def get_db(self) -> Session:
        """Get database session"""
        return self.session_factory()

    def get_by_mobile(self, mobile_number: str) -> Optional[Dict[str, Any]]:
        """
        Get a profile by mobile number

        Returns:
            Profile dict or None when no profile exists

        Raises:
            ProfileStoreError: If the database query fails
        """
        db = self.get_db()
        try:
            profile = db.query(UserProfile).filter(UserProfile.mobile_number == mobile_number).first()
            return profile.to_dict() if profile else None
        except SQLAlchemyError as e:
            logger.error(f"Error fetching profile for {mobile_number}: {str(e)}")
            raise ProfileStoreError("Failed to fetch profile") from e
        finally:
            db.close()

    def get_by_id(self, user_id: int) -> Optional[Dict[str, Any]]:
        """Get a profile by its primary id"""
        db = self.get_db()
        try:
            profile = db.query(UserProfile).filter(UserProfile.user_id == user_id).first()
            return profile.to_dict() if profile else None
        except SQLAlchemyError as e:
            logger.error(f"Error fetching profile {user_id}: {str(e)}")
            raise ProfileStoreError("Failed to fetch profile") from e
        finally:
            db.close()

    def create(self, mobile_number: str, completion_score: int = None) -> Dict[str, Any]:
        """
        Create an empty profile for a new mobile number

        If a concurrent request created the same profile first, that row is
        returned instead.
        """
        if completion_score is None:
            completion_score = settings.INITIAL_COMPLETION_SCORE

        db = self.get_db()
        try:
            now = datetime.now()
            profile = UserProfile(
                mobile_number=mobile_number,
                language_pref=settings.DEFAULT_LANGUAGE_PREF,
                profile_completion_score=completion_score,
                created_at=now,
                updated_at=now,
            )
            db.add(profile)
            db.commit()
            db.refresh(profile)
            logger.info(f"Created new user profile for {mobile_number}")
            return profile.to_dict()
        except IntegrityError:
            db.rollback()
            logger.info(f"Profile for {mobile_number} was created concurrently, reusing it")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error creating profile for {mobile_number}: {str(e)}")
            raise ProfileStoreError("Failed to create profile") from e
        finally:
            db.close()

        existing = self.get_by_mobile(mobile_number)
        if existing is None:
            raise ProfileStoreError("Failed to create profile")
        return existing

    def update(self, user_id: int, updates: Dict[str, Any]) -> Dict[str, Any]:
        """
        Write column values to an existing profile

        Args:
            user_id: Primary id of the profile
            updates: Column name to new value; unknown and protected columns are ignored

        Returns:
            The updated profile dict
        """
        db = self.get_db()
        try:
            profile = db.query(UserProfile).filter(UserProfile.user_id == user_id).first()
            if profile is None:
                raise ProfileStoreError(f"Profile {user_id} not found")

            columns = UserProfile.__table__.columns.keys()
            for key, value in updates.items():
                if key in _PROTECTED_COLUMNS or key not in columns:
                    continue
                # New list objects so the JSON columns are flagged as modified
                setattr(profile, key, list(value) if isinstance(value, (list, tuple)) else value)

            db.commit()
            db.refresh(profile)
            return profile.to_dict()
        except (SQLAlchemyError, OverflowError) as e:
            db.rollback()
            logger.error(f"Error updating profile {user_id}: {str(e)}")
            raise ProfileStoreError("Failed to update profile") from e
        finally:
            db.close()

    def insert_log(self, entry: Dict[str, Any]) -> None:
        """Append one conversation log row"""
        db = self.get_db()
        try:
            db.add(ConversationLog(**entry))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise ProfileStoreError("Failed to insert conversation log") from e
        finally:
            db.close()

    def logs_since(self, user_id: int, cutoff: datetime) -> List[Dict[str, Any]]:
        """
        Conversation logs of a user created at or after *cutoff*, newest first
        """
        db = self.get_db()
        try:
            rows = db.query(ConversationLog).filter(
                ConversationLog.user_id == user_id,
                ConversationLog.created_at >= cutoff
            ).order_by(desc(ConversationLog.created_at), desc(ConversationLog.id)).all()
            return [row.to_dict() for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"Error fetching conversation logs for {user_id}: {str(e)}")
            raise ProfileStoreError("Failed to fetch conversation logs") from e
        finally:
            db.close()

    def profiles_by_created_desc(self, limit: int) -> List[Dict[str, Any]]:
        """Most recently created profiles first"""
        db = self.get_db()
        try:
            rows = db.query(UserProfile).order_by(
                desc(UserProfile.created_at), desc(UserProfile.user_id)
            ).limit(limit).all()
            return [row.to_dict() for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"Error fetching profiles: {str(e)}")
            raise ProfileStoreError("Failed to fetch profiles") from e
        finally:
            db.close()
