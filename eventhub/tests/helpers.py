"""Request helpers shared by the API and client tests."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from fastapi.testclient import TestClient

PASSWORD = 'Secret123'


def future_date(days: int = 1) -> str:
    day = datetime.now(timezone.utc).date() + timedelta(days=days)
    return day.isoformat()


def event_payload(**overrides) -> Dict[str, Any]:
    payload = {
        'title': 'Jazz in the Park',
        'description': 'An evening of live jazz by the lake.',
        'date': future_date(1),
        'time': '19:30',
        'location': {'address': '1 Lakeside Road, Oslo'},
        'category': 'Music',
        'image': 'https://example.com/jazz.jpg',
        'price': 0,
    }
    payload.update(overrides)
    return payload


def register(client: TestClient, name: str = 'Ada Lovelace', email: str = 'ada@example.com') -> Dict[str, Any]:
    """Register a user and return ``{'user', 'token', 'headers'}``."""
    response = client.post('/api/auth/register', json={'name': name, 'email': email, 'password': PASSWORD})
    assert response.status_code == 201, response.text
    body = response.json()
    return {
        'user': body['user'],
        'token': body['token'],
        'headers': {'Authorization': f"Bearer {body['token']}"},
    }


def create_event(client: TestClient, headers: Dict[str, str], **overrides) -> Dict[str, Any]:
    response = client.post('/api/events', json=event_payload(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()['event']
