import json

import requests

BASE_URL = "https://api-m.sandbox.paypal.com"


def fake_response(status_code=200, payload=None, text=""):
    response = requests.Response()
    response.status_code = status_code
    response.encoding = "utf-8"
    response._content = json.dumps(payload).encode() if payload is not None else text.encode()
    return response


class FakePayPal:
    """Stands in for requests.post against the PayPal sandbox."""

    def __init__(self):
        self.calls = []
        self.orders = set()
        self.token_status = 200
        self.create_status = 201
        self.capture_status = "COMPLETED"
        self.payer_email = "a@b.com"
        self.issued = 0
        self.revoked = set()

    def urls(self):
        return [url for url, _ in self.calls]

    @property
    def token_calls(self):
        return [c for c in self.calls if c[0].endswith("/v1/oauth2/token")]

    @property
    def capture_calls(self):
        return [c for c in self.calls if c[0].endswith("/capture")]

    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))

        if url == f"{BASE_URL}/v1/oauth2/token":
            if self.token_status != 200:
                return fake_response(self.token_status, {"error": "invalid_client"})
            self.issued += 1
            return fake_response(200, {"access_token": f"token-{self.issued}", "expires_in": 32400})

        token = kwargs["headers"]["Authorization"].split()[1]
        if token in self.revoked:
            return fake_response(401, {"error": "invalid_token"})

        if url == f"{BASE_URL}/v2/checkout/orders":
            if self.create_status >= 300:
                return fake_response(self.create_status, {"name": "INTERNAL_SERVER_ERROR"})
            order_id = f"ORDER-{len(self.orders) + 1}"
            self.orders.add(order_id)
            return fake_response(self.create_status, {"id": order_id, "status": "PAYER_ACTION_REQUIRED"})

        if url.startswith(f"{BASE_URL}/v2/checkout/orders/") and url.endswith("/capture"):
            order_id = url.split("/")[-2]
            if order_id not in self.orders:
                return fake_response(404, {"name": "RESOURCE_NOT_FOUND", "message": "The specified resource does not exist."})
            return fake_response(201, {
                "id": order_id,
                "status": self.capture_status,
                "payer": {"email_address": self.payer_email},
            })

        return fake_response(404, {"name": "NOT_FOUND"})


