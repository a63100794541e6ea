"""
Conversation log model - one append-only row per chat request
"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, Text, JSON, ForeignKey, Index
from partnur.app.database import Base


class ConversationLog(Base):
    """
    Diagnostic record of a single chat interaction
    """
    __tablename__ = "conversation_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(Integer, ForeignKey('user_profiles.user_id', ondelete='CASCADE'), nullable=False)

    user_message = Column(Text, nullable=False)
    ai_response = Column(Text, nullable=True)

    extracted_info = Column(JSON, default=dict)
    profile_updates = Column(JSON, default=list)  # Field names actually changed
    context_used = Column(JSON, default=dict)

    response_time_ms = Column(Integer, nullable=True)
    session_id = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.now, nullable=False)

    __table_args__ = (
        Index('ix_conversation_user_created', 'user_id', 'created_at'),
    )

    def __repr__(self):
        return f"<ConversationLog(id={self.id}, user_id={self.user_id}, created_at={self.created_at})>"

    def to_dict(self):
        """Convert to dictionary"""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'user_message': self.user_message,
            'ai_response': self.ai_response,
            'extracted_info': self.extracted_info or {},
            'profile_updates': self.profile_updates or [],
            'context_used': self.context_used or {},
            'response_time_ms': self.response_time_ms,
            'session_id': self.session_id,
            'created_at': self.created_at,
        }
