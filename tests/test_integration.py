from datetime import date, timedelta

import pytest

from paypal_service.checkout_client import CheckoutClient, CheckoutError, CheckoutState


@pytest.fixture
def checkout(client):
    return CheckoutClient("http://testserver", session=client, timeout=5)


def test_full_checkout_lifecycle_integration(client, paypal, checkout):
    """
    Test the full lifecycle:
    1. Widget asks for an order (client -> service -> PayPal mocked)
    2. User approves, widget captures (client -> service -> PayPal mocked)
    3. Client navigates to the complete page
    """
    order_id = checkout.create_order()
    assert order_id == "ORDER-1"

    navigation = checkout.approve({"orderID": order_id})

    assert navigation == "/complete-payment"
    assert checkout.state == CheckoutState.CAPTURED
    user = checkout.result["user"]
    assert user["email"] == "a@b.com"
    assert user["tier"] == "pro"
    assert date.fromisoformat(user["tierEndAt"][:10]) in (
        date.today() + timedelta(days=30),
        date.today() + timedelta(days=31),
    )
    assert len(paypal.token_calls) == 2


def test_create_order_response_has_order_id(client, paypal):
    response = client.post("/paypal/createorder")

    assert response.status_code == 200
    order_id = response.json()["order"]["id"]
    assert isinstance(order_id, str) and order_id


def test_create_failure_cancels_without_capture(client, paypal, checkout):
    paypal.create_status = 500

    with pytest.raises(CheckoutError, match="500"):
        checkout.create_order()
    navigation = checkout.error("createOrder rejected")

    assert navigation == "/cancel-payment"
    assert checkout.state == CheckoutState.CANCELLED
    assert paypal.capture_calls == []


def test_declined_capture_cancels(client, paypal, checkout):
    paypal.capture_status = "DECLINED"
    order_id = checkout.create_order()

    response = client.post(f"/paypal/capturepayment/{order_id}")
    assert response.status_code == 400
    assert "user" not in response.json()

    assert checkout.approve({"orderID": order_id}) == "/cancel-payment"
    assert checkout.state == CheckoutState.CANCELLED


def test_capture_of_never_created_order_relays_provider_error(client, paypal):
    response = client.post("/paypal/capturepayment/FABRICATED-123")

    assert response.status_code == 404
    assert response.json()["error"] == "Failed to capture payment"
    assert response.json()["details"]["name"] == "RESOURCE_NOT_FOUND"


def test_token_rejected_relays_provider_status(client, paypal):
    paypal.token_status = 401

    response = client.post("/paypal/createorder")

    assert response.status_code == 401
    assert response.json() == {"error": "Failed to get access token", "details": {"error": "invalid_client"}}
    assert len(paypal.calls) == 1


def test_token_cache_enabled_app_fetches_once(settings, paypal):
    from fastapi.testclient import TestClient

    from paypal_service.main import create_app

    settings.token_cache = True
    with TestClient(create_app(settings)) as c:
        order_id = c.post("/paypal/createorder").json()["order"]["id"]
        assert c.post(f"/paypal/capturepayment/{order_id}").status_code == 200

    assert len(paypal.token_calls) == 1


def test_capture_path_cannot_rewrite_provider_url(client, paypal):
    response = client.post("/paypal/capturepayment/ORDER-1%3Fx=")

    assert response.status_code == 404
    url = paypal.capture_calls[0][0]
    assert url.endswith("/capture")
    assert "?" not in url
