from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

CURRENCY = "USD"
PRO_TIER = "pro"
TIER_DURATION = timedelta(days=30)
COMPLETED = "COMPLETED"


class LineItem(BaseModel):
    name: str
    quantity: int = 1
    unit_price: str
    currency: str = CURRENCY

    @property
    def total(self) -> str:
        return f"{float(self.unit_price) * self.quantity:.2f}"


PRO_PLAN = LineItem(name="Hola Translation Pro", unit_price="9.99")


def build_order_payload(return_url: str, cancel_url: str, item: LineItem = PRO_PLAN) -> Dict[str, Any]:
    """Order body for POST /v2/checkout/orders (single item, immediate payment)."""
    total = item.total
    return {
        "intent": "CAPTURE",
        "purchase_units": [
            {
                "items": [
                    {
                        "name": item.name,
                        "quantity": str(item.quantity),
                        "unit_amount": {"currency_code": item.currency, "value": item.unit_price},
                    }
                ],
                "amount": {
                    "currency_code": item.currency,
                    "value": total,
                    "breakdown": {
                        "item_total": {"currency_code": item.currency, "value": total},
                    },
                },
            }
        ],
        "payment_source": {
            "paypal": {
                "experience_context": {
                    "payment_method_preference": "IMMEDIATE_PAYMENT_REQUIRED",
                    "user_action": "PAY_NOW",
                    "return_url": return_url,
                    "cancel_url": cancel_url,
                }
            }
        },
    }


class CaptureResult(BaseModel):
    status: Optional[str] = None
    email: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "CaptureResult":
        payer = payload.get("payer") or {}
        return cls(status=payload.get("status"), email=payer.get("email_address"), raw=payload)

    @property
    def completed(self) -> bool:
        return self.status == COMPLETED


class SessionUpdate(BaseModel):
    email: Optional[str]
    tier: str = PRO_TIER
    tier_end_at: datetime = Field(serialization_alias="tierEndAt")

    @classmethod
    def from_capture(cls, capture: CaptureResult, now: Optional[datetime] = None) -> "SessionUpdate":
        if not capture.completed:
            raise ValueError(f"Cannot build a session update from a {capture.status} capture")
        now = now or datetime.now()
        return cls(email=capture.email, tier_end_at=now + TIER_DURATION)
