from __future__ import annotations

from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from src.idvault.api.http.app import create_app
from src.idvault.runtime.config.config_data import ConfigData

REGISTRATION_BODY = {
    "email": "asha@example.com",
    "password": "correct-horse-battery",
    "firstName": "Asha",
    "lastName": "Rao",
    "phone": "+91 98765 43210",
    "sensitiveId": "1234 5678 9012",
}


@pytest.fixture
def client(service_config: ConfigData) -> Generator[TestClient]:
    """Test client running the full lifespan against a temporary database."""
    with TestClient(create_app(service_config)) as test_client:
        yield test_client


@pytest.fixture
def registration_body() -> dict[str, str]:
    return dict(REGISTRATION_BODY)


@pytest.fixture
def auth_headers(
    client: TestClient, registration_body: dict[str, str]
) -> dict[str, str]:
    client.post("/api/auth/register", json=registration_body)
    response = client.post(
        "/api/auth/login",
        json={
            "email": registration_body["email"],
            "password": registration_body["password"],
        },
    )
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def login_as(client: TestClient) -> Callable[[str, str], dict[str, str]]:
    def _login(email: str, password: str) -> dict[str, str]:
        response = client.post(
            "/api/auth/login", json={"email": email, "password": password}
        )
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login
