import pytest
from fastapi.testclient import TestClient

from helpers import BASE_URL, FakePayPal
from paypal_service.config import Settings
from paypal_service.main import create_app


@pytest.fixture
def settings():
    return Settings(
        paypal_base_url=BASE_URL,
        paypal_client_id="client-id",
        paypal_client_secret="client-secret",
        public_client_id="public-client-id",
        public_base_url="http://localhost:3000",
        request_timeout=5,
    )


@pytest.fixture
def paypal(mocker):
    fake = FakePayPal()
    mocker.patch("paypal_service.paypal_client.requests.post", side_effect=fake)
    return fake


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c
