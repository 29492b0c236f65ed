import pytest

from tests.fakes import FakeProfileValidator
from userapi.entrypoints.flask_app import create_app


@pytest.fixture
def profile_validator():
    return FakeProfileValidator()


@pytest.fixture
def app(profile_validator):
    """Create test Flask application on a fresh in-memory database."""
    return create_app("testing", profile_validator=profile_validator)


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def create_user(client):
    def _create_user(name: str = "John Doe", email: str = "john@example.com", bio: str | None = None) -> dict:
        response = client.post("/api/users", json={"name": name, "email": email, "bio": bio})
        assert response.status_code == 201, response.get_json()
        return response.get_json()

    return _create_user
