"""
Integration tests for Chat API endpoints
Tests the /chat and /chat/enhanced endpoints
"""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock
from partnur.app.main import app
from partnur.app.dependencies import build_services, get_services
from partnur.app.services.profile_store import ProfileStoreError


MOBILE = '+919876543210'


@pytest.fixture
def services(store, mock_ai_service, conversation_logger):
    """Application services wired to the in-memory store and mocked AI"""
    return build_services(store=store, ai_service=mock_ai_service, conversation_logger=conversation_logger)


@pytest.fixture
def client(services):
    """Create test client"""
    app.dependency_overrides[get_services] = lambda: services
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.mark.integration
@pytest.mark.api
class TestChatRoutes:
    """Test suite for chat API routes"""

    def test_chat_new_user(self, client, store):
        """Test POST /chat creates the profile on first contact"""
        response = client.post('/chat', json={'mobile_number': MOBILE, 'message': 'Hello'})

        assert response.status_code == 200
        data = response.json()
        assert data['response'] == 'Namaste! Tell me a little about your business.'
        assert data['profile_completion'] == 5
        assert data['extracted_info'] == {}
        assert data['suggestions'] == ['Tell me about your business type']
        assert store.get_by_mobile(MOBILE) is not None

    def test_chat_salon_scenario(self, client, mock_ai_service):
        """Test POST /chat merges extracted information"""
        mock_ai_service.extract_profile_info.return_value = {'business_type': 'salon', 'location_city': 'Kanpur'}
        first = client.post('/chat', json={'mobile_number': MOBILE, 'message': 'I run a salon in Kanpur'})

        mock_ai_service.extract_profile_info.return_value = {'monthly_revenue': 80000}
        second = client.post('/chat', json={'mobile_number': MOBILE, 'message': 'I earn around 80k per month'})

        assert first.json()['profile_completion'] == 23
        assert first.json()['extracted_info'] == {'business_type': 'salon', 'location_city': 'Kanpur'}
        assert second.json()['profile_completion'] == 31

    def test_chat_query_parameters(self, client):
        """Test POST /chat accepts parameters from the query string"""
        response = client.post('/chat', params={'mobile_number': MOBILE, 'message': 'Hello'})

        assert response.status_code == 200
        assert response.json()['profile_completion'] == 5

    @pytest.mark.parametrize('payload', [
        {'mobile_number': MOBILE},
        {'message': 'Hello'},
        {'mobile_number': '', 'message': 'Hello'},
        {},
    ])
    def test_chat_missing_fields(self, client, store, payload):
        """Test POST /chat rejects requests without mobile_number or message"""
        response = client.post('/chat', json=payload)

        assert response.status_code == 400
        detail = response.json()['detail']
        assert detail['error'] == 'mobile_number and message are required'
        assert 'example' in detail
        assert store.get_by_mobile(MOBILE) is None

    def test_chat_invalid_json_body(self, client):
        """Test POST /chat with a body that is not JSON"""
        response = client.post('/chat', content=b'not json', headers={'Content-Type': 'application/json'})

        assert response.status_code == 400

    def test_chat_storage_failure(self, client, services):
        """Test POST /chat hides storage errors behind a generic 500"""
        services.pipeline.store = Mock()
        services.pipeline.store.get_by_mobile.side_effect = ProfileStoreError('connection refused')

        response = client.post('/chat', json={'mobile_number': MOBILE, 'message': 'Hello'})

        assert response.status_code == 500
        detail = response.json()['detail']
        assert detail['error'] == 'Something went wrong. Please try again.'
        assert 'details' not in detail

    def test_chat_generation_failure(self, client, mock_ai_service):
        """Test POST /chat still answers when the model fails"""
        mock_ai_service.generate_response.side_effect = RuntimeError('model unavailable')

        response = client.post('/chat', json={'mobile_number': MOBILE, 'message': 'Hello'})

        assert response.status_code == 200
        assert response.json()['response'].startswith("I'm having trouble")

    def test_chat_response_headers(self, client):
        """Test security and timing headers"""
        response = client.post('/chat', json={'mobile_number': MOBILE, 'message': 'Hello'})

        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert 'X-Response-Time-ms' in response.headers

    def test_enhanced_chat(self, client, mock_ai_service):
        """Test POST /chat/enhanced"""
        mock_ai_service.extract_profile_info.return_value = {'business_type': 'salon'}
        mock_ai_service.generate_response.return_value = {
            'content': 'Try a loyalty card!',
            'context_used': {'business_type': 'salon'},
            'suggestions': [],
            'seasonal_tip': 'Festive season tip',
        }

        response = client.post('/chat/enhanced', json={'mobile_number': MOBILE, 'message': 'I run a salon'})

        assert response.status_code == 200
        data = response.json()
        assert data['success'] is True
        assert data['response'] == 'Try a loyalty card!'
        assert data['profile_completion'] == 15
        assert data['extracted_info'] == {'business_type': 'salon'}
        assert data['smart_features']['seasonal_tip'] == 'Festive season tip'
        assert len(data['smart_features']['smart_questions']) == 3
        assert data['analytics_preview']['total_conversations'] == 1
        assert data['context_used'] == {'business_type': 'salon'}
        assert data['response_time_ms'] >= 0
        assert 'timestamp' in data

    def test_enhanced_chat_keeps_base_fields(self, client):
        """Test POST /chat/enhanced returns everything /chat returns"""
        plain = client.post('/chat', json={'mobile_number': MOBILE, 'message': 'Hello'}).json()
        enhanced = client.post('/chat/enhanced', json={'mobile_number': MOBILE, 'message': 'Hello'}).json()

        for key in plain:
            assert key in enhanced
        assert enhanced['suggestions'] == ['Tell me about your business type']

    def test_enhanced_chat_missing_fields(self, client):
        """Test POST /chat/enhanced validation"""
        response = client.post('/chat/enhanced', json={'mobile_number': MOBILE})

        assert response.status_code == 400


@pytest.mark.integration
@pytest.mark.api
class TestHealth:
    """Test suite for the health endpoint"""

    def test_health(self):
        client = TestClient(app)

        response = client.get('/health')

        assert response.status_code == 200
        assert response.json()['status'] == 'Partnur Backend is running!'
        assert 'timestamp' in response.json()
