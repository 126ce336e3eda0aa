"""
Browser side of the checkout: the PayPal button page and the two terminal pages.

The button page wires the PayPal JS SDK callbacks to the order routes the same
way `CheckoutClient` does: a failed create is thrown back to the widget, a
failed capture or a widget error sends the browser to /cancel-payment.
"""

import json
from urllib.parse import urlencode

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from paypal_service.models import CURRENCY

router = APIRouter()

SDK_URL = "https://www.paypal.com/sdk/js"

CHECKOUT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>PayPal Payment Demo</title>
    <script src="{{ sdk_src }}"></script>
</head>
<body>
    <h1>PayPal Payment Demo</h1>
    <div id="paypal-buttons"></div>
    <script>
    const COMPLETE_PATH = {{ complete_path | tojson }};
    const CANCEL_PATH = {{ cancel_path | tojson }};

    async function readError(response) {
        try {
            const data = await response.json();
            return data.error || "Unknown error";
        } catch (e) {
            return "Unknown error";
        }
    }

    paypal.Buttons({
        style: { layout: "vertical", shape: "rect" },
        createOrder: async () => {
            const response = await fetch("/paypal/createorder", {
                method: "POST",
                headers: { "Content-Type": "application/json" },
            });
            if (!response.ok) {
                throw new Error(`Failed to create order on server: ${response.status} - ${await readError(response)}`);
            }
            const data = await response.json();
            if (!data.order || !data.order.id) {
                throw new Error("Invalid order ID received from backend. Expected 'order.id'.");
            }
            return data.order.id;
        },
        onApprove: async (data) => {
            try {
                if (!data || !data.orderID) {
                    throw new Error("Order ID not found from PayPal data");
                }
                const response = await fetch(`/paypal/capturepayment/${data.orderID}`, {
                    method: "POST",
                    headers: { "Content-Type": "application/json" },
                });
                if (!response.ok) {
                    throw new Error(`Failed to capture payment on server: ${response.status} - ${await readError(response)}`);
                }
                window.location.href = COMPLETE_PATH;
            } catch (error) {
                console.error("Error capturing PayPal order:", error);
                window.location.href = CANCEL_PATH;
            }
        },
        onError: (error) => {
            console.error("PayPal Buttons encountered an error:", error);
            window.location.href = CANCEL_PATH;
        },
    }).render("#paypal-buttons");
    </script>
</body>
</html>"""

RESULT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{{ title }}</title>
</head>
<body>
    <h1>{{ title }}</h1>
    <p>{{ line1 }}</p>
    <p>{{ line2 }}</p>
</body>
</html>"""

COMPLETE_PATH = "/complete-payment"
CANCEL_PATH = "/cancel-payment"


def sdk_src(client_id: str, currency: str = CURRENCY) -> str:
    return f"{SDK_URL}?{urlencode({'client-id': client_id, 'currency': currency})}"


@router.get("/", response_class=HTMLResponse)
def checkout_page(request: Request):
    settings = request.app.state.settings
    html = CHECKOUT_TEMPLATE.replace("{{ sdk_src }}", sdk_src(settings.public_client_id))
    html = html.replace("{{ complete_path | tojson }}", json.dumps(COMPLETE_PATH))
    html = html.replace("{{ cancel_path | tojson }}", json.dumps(CANCEL_PATH))
    return HTMLResponse(content=html)


def _result_page(title: str, line1: str, line2: str) -> HTMLResponse:
    html = RESULT_TEMPLATE.replace("{{ title }}", title)
    html = html.replace("{{ line1 }}", line1).replace("{{ line2 }}", line2)
    return HTMLResponse(content=html)


@router.get(COMPLETE_PATH, response_class=HTMLResponse)
def complete_payment_page():
    return _result_page(
        "Payment Completed",
        "Your payment has been successfully processed.",
        "Thank you for your purchase!",
    )


@router.get(CANCEL_PATH, response_class=HTMLResponse)
def cancel_payment_page():
    return _result_page(
        "Payment Cancelled",
        "Your payment has been cancelled.",
        "If you have any questions, please contact support.",
    )
