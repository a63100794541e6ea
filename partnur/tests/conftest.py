"""
Pytest configuration and shared fixtures
"""
import os
import sys

# Must be set before the application settings are first imported
os.environ.setdefault('RATE_LIMIT_CHAT', '10000/minute')
os.environ.setdefault('DATABASE_URL', 'sqlite://')

import pytest
from concurrent.futures import Executor, Future
from datetime import datetime
from typing import Dict, Any
from unittest.mock import Mock, MagicMock
from sqlalchemy.orm import sessionmaker

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../..'))

from partnur.app.database import build_engine, init_db
from partnur.app.services.ai_service import AIService
from partnur.app.services.conversation_logger import ConversationLogger
from partnur.app.services.profile_store import ProfileStore


class ImmediateExecutor(Executor):
    """Runs submitted work on the calling thread"""

    def submit(self, fn, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


@pytest.fixture
def session_factory():
    """Session factory bound to a fresh in-memory SQLite database"""
    engine = build_engine('sqlite://')
    init_db(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def store(session_factory) -> ProfileStore:
    return ProfileStore(session_factory)


@pytest.fixture
def immediate_executor() -> ImmediateExecutor:
    return ImmediateExecutor()


@pytest.fixture
def conversation_logger(store, immediate_executor) -> ConversationLogger:
    """Conversation logger that writes synchronously"""
    return ConversationLogger(store, executor=immediate_executor)


@pytest.fixture
def mock_ai_service():
    """AIService double with a canned reply and no extracted information"""
    service = Mock(spec=AIService)
    service.extract_profile_info.return_value = {}
    service.generate_response.return_value = {
        'content': 'Namaste! Tell me a little about your business.',
        'context_used': {},
        'suggestions': ['Tell me about your business type'],
    }
    return service


@pytest.fixture
def mock_openai_client():
    """Mock openai.OpenAI client returning one chat completion"""
    client = MagicMock()
    completion = MagicMock()
    completion.choices = [MagicMock()]
    completion.choices[0].message.content = '{}'
    client.chat.completions.create.return_value = completion
    return client


@pytest.fixture
def make_completion():
    """Factory for mock chat completions with the given reply text"""
    def _make(content):
        completion = MagicMock()
        completion.choices = [MagicMock()]
        completion.choices[0].message.content = content
        return completion
    return _make


@pytest.fixture
def empty_profile() -> Dict[str, Any]:
    """Profile of a user who has only sent their mobile number"""
    return {
        'user_id': 1,
        'mobile_number': '+919876543210',
        'language_pref': 'Hinglish',
        'business_type': None,
        'location_city': None,
        'location_state': None,
        'monthly_revenue': None,
        'staff_count': None,
        'supplier_name': None,
        'inventory_source': None,
        'pricing_model': None,
        'peak_hours': [],
        'peak_days': [],
        'top_products': [],
        'staff_roles': [],
        'payment_methods': [],
        'ad_channels': [],
        'platforms_used': [],
        'past_campaigns': [],
        'goals': [],
        'challenges': [],
        'profile_completion_score': 5,
        'last_profile_update': None,
        'created_at': datetime(2025, 1, 10, 9, 0, 0),
        'updated_at': datetime(2025, 1, 10, 9, 0, 0),
    }


@pytest.fixture
def salon_profile(empty_profile) -> Dict[str, Any]:
    """Salon owner in Kanpur with revenue, goals and a couple of platforms"""
    profile = dict(empty_profile)
    profile.update({
        'business_type': 'salon',
        'location_city': 'Kanpur',
        'location_state': 'Uttar Pradesh',
        'monthly_revenue': 80000,
        'peak_days': ['Saturday', 'Sunday'],
        'platforms_used': ['Instagram'],
        'goals': ['increase sales'],
        'challenges': ['low footfall'],
        'profile_completion_score': 63,
    })
    return profile


@pytest.fixture
def full_profile(salon_profile) -> Dict[str, Any]:
    """Profile with every scored field filled"""
    profile = dict(salon_profile)
    profile.update({
        'peak_hours': ['18:00-21:00'],
        'top_products': ['haircut', 'facial'],
        'staff_count': 3,
        'inventory_source': 'local wholesaler',
        'payment_methods': ['Cash', 'UPI'],
        'ad_channels': ['WhatsApp'],
        'past_campaigns': ['Diwali discount'],
        'profile_completion_score': 100,
    })
    return profile


@pytest.fixture(autouse=True)
def reset_environment():
    """Reset environment variables before each test"""
    # Store original values
    original_env = os.environ.copy()

    # Set test environment variables
    os.environ['TESTING'] = 'true'
    os.environ['OPENAI_API_KEY'] = 'test-api-key'

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)
