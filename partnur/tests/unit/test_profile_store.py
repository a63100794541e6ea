"""
Unit tests for ProfileStore against an in-memory SQLite database
"""
import pytest
from datetime import datetime, timedelta
from unittest.mock import MagicMock
from sqlalchemy.exc import OperationalError
from partnur.app.services.profile_store import ProfileStore, ProfileStoreError


MOBILE = '+919876543210'


@pytest.mark.unit
class TestProfileStore:
    """Test suite for ProfileStore"""

    def test_get_missing_profile(self, store):
        assert store.get_by_mobile(MOBILE) is None

    def test_create_profile(self, store):
        profile = store.create(MOBILE)

        assert profile['user_id'] is not None
        assert profile['mobile_number'] == MOBILE
        assert profile['language_pref'] == 'Hinglish'
        assert profile['profile_completion_score'] == 5
        assert profile['goals'] == []
        assert profile['created_at'] is not None

    def test_create_with_score(self, store):
        assert store.create(MOBILE, completion_score=12)['profile_completion_score'] == 12

    def test_create_existing_returns_stored_row(self, store):
        first = store.create(MOBILE)
        second = store.create(MOBILE)

        assert second['user_id'] == first['user_id']

    def test_get_by_mobile_and_id(self, store):
        created = store.create(MOBILE)

        assert store.get_by_mobile(MOBILE)['user_id'] == created['user_id']
        assert store.get_by_id(created['user_id'])['mobile_number'] == MOBILE
        assert store.get_by_id(created['user_id'] + 100) is None

    def test_update_scalar_and_sequence(self, store):
        profile = store.create(MOBILE)

        updated = store.update(profile['user_id'], {
            'business_type': 'salon',
            'monthly_revenue': 80000,
            'platforms_used': ['Instagram', 'Meesho'],
        })

        assert updated['business_type'] == 'salon'
        assert updated['monthly_revenue'] == 80000
        assert updated['platforms_used'] == ['Instagram', 'Meesho']
        assert store.get_by_mobile(MOBILE)['platforms_used'] == ['Instagram', 'Meesho']

    def test_update_sequence_twice_persists(self, store):
        profile = store.create(MOBILE)
        store.update(profile['user_id'], {'goals': ['grow']})
        store.update(profile['user_id'], {'goals': ['grow', 'hire staff']})

        assert store.get_by_mobile(MOBILE)['goals'] == ['grow', 'hire staff']

    def test_update_ignores_protected_and_unknown_columns(self, store):
        profile = store.create(MOBILE)

        updated = store.update(profile['user_id'], {
            'mobile_number': '+910000000000',
            'user_id': 999,
            'favourite_colour': 'blue',
            'location_city': 'Kanpur',
        })

        assert updated['mobile_number'] == MOBILE
        assert updated['user_id'] == profile['user_id']
        assert 'favourite_colour' not in updated
        assert updated['location_city'] == 'Kanpur'

    def test_update_missing_profile(self, store):
        with pytest.raises(ProfileStoreError):
            store.update(12345, {'business_type': 'salon'})

    def test_update_integer_overflow_wrapped(self, store):
        profile = store.create(MOBILE)

        with pytest.raises(ProfileStoreError):
            store.update(profile['user_id'], {'monthly_revenue': 10 ** 30})

        assert store.get_by_mobile(MOBILE)['monthly_revenue'] is None

    def test_insert_and_read_logs(self, store):
        profile = store.create(MOBILE)
        now = datetime.now()
        for i, age_days in enumerate([0, 2, 10]):
            store.insert_log({
                'user_id': profile['user_id'],
                'user_message': f'message {i}',
                'ai_response': 'ok',
                'response_time_ms': 100,
                'created_at': now - timedelta(days=age_days),
            })

        logs = store.logs_since(profile['user_id'], now - timedelta(days=7))

        assert [log['user_message'] for log in logs] == ['message 0', 'message 1']
        assert logs[0]['extracted_info'] == {}

    def test_profiles_by_created_desc(self, store):
        base = datetime(2025, 1, 1)
        for i in range(3):
            profile = store.create(f'+91000000000{i}')
            store.update(profile['user_id'], {'business_type': f'shop {i}'})

        profiles = store.profiles_by_created_desc(2)

        assert len(profiles) == 2
        assert profiles[0]['created_at'] >= profiles[1]['created_at']
        assert profiles[0]['created_at'] >= base

    def test_database_error_wrapped(self):
        session = MagicMock()
        session.query.side_effect = OperationalError('SELECT 1', {}, Exception('database is locked'))
        store = ProfileStore(session_factory=lambda: session)

        with pytest.raises(ProfileStoreError):
            store.get_by_mobile(MOBILE)
        session.close.assert_called_once()
