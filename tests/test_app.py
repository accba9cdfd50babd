"""
Test the Flask operator surface
"""

import pytest

from app import create_app
from intake_console.config import ClientConfig
from intake_console.utils.conversation_modes import GUIDED_INTAKE_GREETING
from intake_console.utils.gigachat_client import GatewayError


class MockGateway:
    """Mock gateway returning canned replies; raises when told to"""

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.fail_next = False

    def complete(self, messages, temperature=0.7, max_tokens=None, initial_prompt=None):
        if initial_prompt is not None:
            return initial_prompt
        if self.fail_next:
            self.fail_next = False
            raise GatewayError("Completion failed: HTTP 500")
        return self.replies.pop(0) if self.replies else "ok"


@pytest.fixture
def gateway():
    return MockGateway(replies=["Where is the pain?", "Any allergies?"])


@pytest.fixture
def client(gateway):
    app = create_app(gateway=gateway, variant='guided-intake', config=ClientConfig())
    app.config['TESTING'] = True
    return app.test_client()


def test_start_returns_greeting(client):
    response = client.post('/api/start')
    data = response.get_json()

    assert response.status_code == 200
    assert data['success'] is True
    assert data['kind'] == 'started'
    assert data['output'] == GUIDED_INTAKE_GREETING
    assert data['mode'] == 'guided-intake'


def test_message_round_trip(client):
    client.post('/api/start')
    response = client.post('/api/message', json={'text': 'My back hurts'})
    data = response.get_json()

    assert response.status_code == 200
    assert data['kind'] == 'reply'
    assert data['output'] == "Where is the pain?"
    assert data['is_final'] is False


def test_commands_through_message_endpoint(client):
    client.post('/api/start')
    client.post('/api/message', json={'text': 'Headache'})

    summary = client.post('/api/message', json={'text': 'summary'}).get_json()
    assert summary['kind'] == 'summary'
    assert 'Headache' in summary['output']

    cleared = client.post('/api/message', json={'text': 'clear'}).get_json()
    assert cleared['kind'] == 'cleared'


def test_gateway_error_keeps_session(client, gateway):
    client.post('/api/start')
    gateway.fail_next = True

    response = client.post('/api/message', json={'text': 'I feel dizzy'})
    data = response.get_json()
    assert response.status_code == 502
    assert data['success'] is False
    assert 'HTTP 500' in data['error']

    retry = client.post('/api/message', json={'text': 'I feel dizzy'})
    assert retry.status_code == 200


def test_summary_endpoint(client):
    client.post('/api/start')
    client.post('/api/message', json={'text': "I'm allergic to nuts"})

    data = client.get('/api/summary').get_json()
    assert data['record']['main_complaint'] == "I'm allergic to nuts"
    assert data['record']['allergies'] == ["I'm allergic to nuts"]
    assert len(data['record']['responses']) == 1


def test_summary_endpoint_outside_guided_mode():
    app = create_app(gateway=MockGateway(), variant='plain', config=ClientConfig())
    response = app.test_client().get('/api/summary')
    assert response.status_code == 400


def test_text_must_be_string(client):
    response = client.post('/api/message', json={'text': 42})
    assert response.status_code == 400
