"""
Checkout client: the three PayPal widget callbacks as a single-shot state machine.

    IDLE --create_order()--> CREATED --approve()--> CAPTURED   (navigate to /complete-payment)
                                     \\-approve() fails / error()--> CANCELLED (navigate to /cancel-payment)

Every backend call is bounded by `timeout`. Once CAPTURED or CANCELLED the
checkout is over; a new attempt needs a new client.
"""

import enum
import logging
from typing import Any, Dict, Optional

import requests

from paypal_service.pages import CANCEL_PATH, COMPLETE_PATH

logger = logging.getLogger(__name__)


class CheckoutState(str, enum.Enum):
    IDLE = "idle"
    CREATED = "created"
    CAPTURED = "captured"
    CANCELLED = "cancelled"


TERMINAL_STATES = (CheckoutState.CAPTURED, CheckoutState.CANCELLED)


class CheckoutError(Exception):
    pass


def _error_message(response) -> str:
    try:
        return response.json().get("error") or "Unknown error"
    except (ValueError, AttributeError):
        return "Unknown error"


class CheckoutClient:
    def __init__(self, base_url: str, session=None, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.state = CheckoutState.IDLE
        self.order_id: Optional[str] = None
        self.navigation: Optional[str] = None
        self.result: Optional[Dict[str, Any]] = None

    def _post(self, path: str):
        return self.session.post(
            f"{self.base_url}{path}",
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )

    def _finish(self, state: CheckoutState) -> str:
        self.state = state
        self.navigation = COMPLETE_PATH if state == CheckoutState.CAPTURED else CANCEL_PATH
        return self.navigation

    def create_order(self) -> str:
        """createOrder callback: returns the PayPal order id or raises for the widget to display."""
        if self.state != CheckoutState.IDLE:
            raise CheckoutError(f"Cannot create an order in state {self.state.value}")

        try:
            response = self._post("/paypal/createorder")
        except requests.RequestException as e:
            raise CheckoutError(f"Failed to create order on server: {e}") from e

        if not 200 <= response.status_code < 300:
            raise CheckoutError(
                f"Failed to create order on server: {response.status_code} - {_error_message(response)}"
            )

        try:
            order = response.json().get("order") or {}
        except (ValueError, AttributeError):
            order = {}
        order_id = order.get("id") if isinstance(order, dict) else None
        if not order_id:
            raise CheckoutError("Invalid order ID received from backend. Expected 'order.id'.")

        self.order_id = order_id
        self.state = CheckoutState.CREATED
        return order_id

    def approve(self, data: Optional[Dict[str, Any]]) -> str:
        """onApprove callback: captures the approved order and returns where to navigate."""
        if self.state in TERMINAL_STATES:
            raise CheckoutError(f"Checkout already {self.state.value}")

        try:
            order_id = (data or {}).get("orderID")
            if not order_id:
                raise CheckoutError("Order ID not found from PayPal data")

            response = self._post(f"/paypal/capturepayment/{order_id}")
            if not 200 <= response.status_code < 300:
                raise CheckoutError(
                    f"Failed to capture payment on server: {response.status_code} - {_error_message(response)}"
                )
            self.result = response.json()
        except Exception:
            logger.exception("Capturing the approved order failed")
            return self._finish(CheckoutState.CANCELLED)

        return self._finish(CheckoutState.CAPTURED)

    def error(self, error: Any = None) -> str:
        """onError callback: the widget failed on its own."""
        logger.error("PayPal Buttons encountered an error: %s", error)
        if self.state == CheckoutState.CAPTURED:
            return self.navigation
        return self._finish(CheckoutState.CANCELLED)
