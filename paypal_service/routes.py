import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from paypal_service.models import CaptureResult, SessionUpdate
from paypal_service.paypal_client import PayPalClient, PayPalError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/paypal")


def get_paypal_client(request: Request) -> PayPalClient:
    return request.app.state.paypal_client


def error_response(error: PayPalError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@router.post("/createorder")
def create_order_api(paypal: PayPalClient = Depends(get_paypal_client)):
    try:
        order = paypal.create_order()
        order_id = order.get("id") if isinstance(order, dict) else None
        if not order_id or not isinstance(order_id, str):
            raise PayPalError("Failed to create order", 500, order)

        logger.info("Created PayPal order %s", order_id)
    except PayPalError as e:
        return error_response(e)
    except Exception:
        logger.exception("Unexpected error while creating order")
        return error_response(PayPalError("Internal Error. Failed to create order"))

    return {"order": order}


@router.post("/capturepayment/{order_id}")
def capture_payment_api(order_id: str, paypal: PayPalClient = Depends(get_paypal_client)):
    try:
        capture = CaptureResult.from_payload(paypal.capture_order(order_id))
        if not capture.completed:
            logger.warning("Order %s capture finished with status %s", order_id, capture.status)
            return error_response(PayPalError("Payment not completed", 400, capture.raw))

        user = SessionUpdate.from_capture(capture, now=datetime.now())
    except PayPalError as e:
        return error_response(e)
    except Exception:
        logger.exception("Unexpected error while capturing order %s", order_id)
        return error_response(PayPalError("Internal Error. Failed to capture payment"))

    logger.info("Captured PayPal order %s", order_id)
    return {
        "message": "Payment captured successfully",
        "user": user.model_dump(mode="json", by_alias=True),
        "capture": capture.raw,
    }
