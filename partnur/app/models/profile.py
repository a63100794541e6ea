"""
Business profile model built up from conversations
"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, JSON
from partnur.app.database import Base
from partnur.app.core.field_schema import SEQUENCE_FIELDS


class UserProfile(Base):
    """
    One business profile per mobile number
    Scalar attributes are plain columns, sequence attributes are JSON lists
    """
    __tablename__ = "user_profiles"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    mobile_number = Column(String(32), unique=True, nullable=False, index=True)
    language_pref = Column(String(32), default="Hinglish")

    # Identity
    business_type = Column(String(255), nullable=True)
    location_city = Column(String(255), nullable=True)
    location_state = Column(String(255), nullable=True)

    # Operations
    monthly_revenue = Column(Integer, nullable=True)  # Rupees per month
    staff_count = Column(Integer, nullable=True)
    supplier_name = Column(String(255), nullable=True)
    inventory_source = Column(String(255), nullable=True)
    pricing_model = Column(String(100), nullable=True)  # fixed, seasonal, discount-based

    peak_hours = Column(JSON, default=list)
    peak_days = Column(JSON, default=list)
    top_products = Column(JSON, default=list)
    staff_roles = Column(JSON, default=list)

    # Tools & platforms
    payment_methods = Column(JSON, default=list)
    ad_channels = Column(JSON, default=list)
    platforms_used = Column(JSON, default=list)
    past_campaigns = Column(JSON, default=list)

    # Strategy
    goals = Column(JSON, default=list)
    challenges = Column(JSON, default=list)

    profile_completion_score = Column(Integer, default=5, nullable=False)

    # Metadata
    last_profile_update = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    def __repr__(self):
        return f"<UserProfile(user_id={self.user_id}, mobile={self.mobile_number}, score={self.profile_completion_score})>"

    def to_dict(self):
        """Convert to a plain document; sequences are always lists"""
        data = {column.name: getattr(self, column.name) for column in self.__table__.columns}
        for name in SEQUENCE_FIELDS:
            data[name] = list(data.get(name) or [])
        return data
