import logging
import threading
import time
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import requests

from paypal_service.config import Settings
from paypal_service.models import build_order_payload

logger = logging.getLogger(__name__)

TOKEN_PATH = "/v1/oauth2/token"
ORDERS_PATH = "/v2/checkout/orders"


class PayPalError(Exception):
    """A failed call to PayPal, carrying the status code to relay to the caller."""

    def __init__(self, message: str, status_code: int = 500, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class TokenCache:
    """Access tokens keyed by credential pair, dropped `margin` seconds before they expire."""

    def __init__(self, margin: float = 60, clock=time.monotonic):
        self.margin = margin
        self._clock = clock
        self._tokens: Dict[Tuple[str, str], Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: Tuple[str, str]) -> Optional[str]:
        with self._lock:
            entry = self._tokens.get(key)
            if entry is None:
                return None
            token, expires_at = entry
            if self._clock() >= expires_at:
                del self._tokens[key]
                return None
            return token

    def set(self, key: Tuple[str, str], token: str, expires_in: Optional[float]):
        if not expires_in:
            return
        with self._lock:
            self._tokens[key] = (token, self._clock() + float(expires_in) - self.margin)

    def invalidate(self, key: Tuple[str, str]):
        with self._lock:
            self._tokens.pop(key, None)


def _response_body(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


class PayPalClient:
    def __init__(self, settings: Settings, token_cache: Optional[TokenCache] = None):
        self.settings = settings
        self.token_cache = token_cache

    @property
    def _credentials(self) -> Tuple[str, str]:
        return (self.settings.paypal_client_id, self.settings.paypal_client_secret)

    def _fetch_token(self) -> Tuple[str, Optional[float]]:
        message = "Failed to get access token"
        try:
            response = requests.post(
                f"{self.settings.api_base}{TOKEN_PATH}",
                auth=self._credentials,
                data={"grant_type": "client_credentials"},
                headers={"Accept": "application/json"},
                timeout=self.settings.request_timeout,
            )
        except requests.RequestException as e:
            logger.warning("PayPal token request failed: %s", e)
            raise PayPalError(message, details=str(e)) from e

        if not response.ok:
            logger.warning("PayPal rejected token request with %s", response.status_code)
            raise PayPalError(message, response.status_code, _response_body(response))

        try:
            data = response.json()
        except ValueError as e:
            raise PayPalError(message, details="Malformed token response") from e

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise PayPalError(message, details="Token response has no access_token")
        return token, data.get("expires_in")

    def _token(self) -> Tuple[str, bool]:
        if self.token_cache is not None:
            token = self.token_cache.get(self._credentials)
            if token:
                return token, True

        token, expires_in = self._fetch_token()
        if self.token_cache is not None:
            self.token_cache.set(self._credentials, token, expires_in)
        return token, False

    def get_access_token(self) -> str:
        return self._token()[0]

    def _post(self, path: str, token: str, message: str, body: Optional[Dict[str, Any]] = None) -> requests.Response:
        try:
            return requests.post(
                f"{self.settings.api_base}{path}",
                json=body,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                timeout=self.settings.request_timeout,
            )
        except requests.RequestException as e:
            logger.warning("PayPal request to %s failed: %s", path, e)
            raise PayPalError(message, details=str(e)) from e

    def _call(self, path: str, message: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        token, cached = self._token()
        response = self._post(path, token, message, body)

        if response.status_code == 401 and cached:
            logger.info("Cached PayPal token was rejected, fetching a new one")
            self.token_cache.invalidate(self._credentials)
            token, _ = self._token()
            response = self._post(path, token, message, body)

        if not response.ok:
            logger.warning("PayPal %s returned %s", path, response.status_code)
            raise PayPalError(message, response.status_code, _response_body(response))

        try:
            return response.json()
        except ValueError as e:
            raise PayPalError(message, details="Malformed response from PayPal") from e

    def create_order(self) -> Dict[str, Any]:
        payload = build_order_payload(self.settings.complete_url, self.settings.cancel_url)
        return self._call(ORDERS_PATH, "Failed to create order", payload)

    def capture_order(self, order_id: str) -> Dict[str, Any]:
        return self._call(f"{ORDERS_PATH}/{quote(order_id, safe='')}/capture", "Failed to capture payment")
