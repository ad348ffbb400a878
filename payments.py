"""
Razorpay integration.

Order creation, payment fetch/capture/refund go straight to the Razorpay REST
API; all the ledger work happens on their side. This module only forwards
requests, checks the checkout signature and splits session revenue between
the platform and the giver.
"""
import hashlib
import hmac
import logging
from typing import Optional

import httpx

from config import (
    PLATFORM_FEE_PERCENT,
    RAZORPAY_BASE_URL,
    RAZORPAY_KEY_ID,
    RAZORPAY_KEY_SECRET,
)

logger = logging.getLogger(__name__)

# Razorpay amounts are in paise
PAISE_PER_RUPEE = 100


class PaymentGatewayError(Exception):
    """Raised when the payment gateway rejects or fails a request"""

    pass


def calculate_earnings(amount: int, platform_fee_percent: int = PLATFORM_FEE_PERCENT) -> dict:
    """Split a session amount into platform fee and giver earnings."""
    platform_fee = round(amount * (platform_fee_percent / 100))
    return {
        "total_amount": amount,
        "platform_fee": platform_fee,
        "giver_earnings": amount - platform_fee,
        "platform_fee_percent": platform_fee_percent,
    }


def compute_signature(order_id: str, payment_id: str, secret: str) -> str:
    body = f"{order_id}|{payment_id}"
    return hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_signature(
    order_id: str,
    payment_id: str,
    signature: str,
    secret: str = RAZORPAY_KEY_SECRET,
) -> bool:
    """Check the checkout signature: hex HMAC-SHA256 of "order_id|payment_id"."""
    if not signature:
        return False
    expected = compute_signature(order_id, payment_id, secret)
    return hmac.compare_digest(expected, signature)


class RazorpayClient:
    """Thin synchronous wrapper over the Razorpay orders/payments endpoints"""

    def __init__(
        self,
        key_id: str = RAZORPAY_KEY_ID,
        key_secret: str = RAZORPAY_KEY_SECRET,
        base_url: str = RAZORPAY_BASE_URL,
        timeout: float = 10.0,
    ):
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _request(self, method: str, path: str, json: Optional[dict] = None) -> dict:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(
                auth=(self.key_id, self.key_secret), timeout=self.timeout
            ) as client:
                response = client.request(method, url, json=json)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Razorpay {method} {path} failed: {e.response.status_code} {e.response.text}"
            )
            raise PaymentGatewayError(f"Gateway returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Razorpay {method} {path} failed: {e}")
            raise PaymentGatewayError(str(e)) from e

    def create_order(
        self,
        amount: int,
        receipt: str,
        currency: str = "INR",
        notes: Optional[dict] = None,
    ) -> dict:
        payload = {
            "amount": amount * PAISE_PER_RUPEE,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
            "payment_capture": 1,
        }
        return self._request("POST", "/orders", json=payload)

    def fetch_payment(self, payment_id: str) -> dict:
        return self._request("GET", f"/payments/{payment_id}")

    def capture_payment(self, payment_id: str, amount: int, currency: str = "INR") -> dict:
        payload = {"amount": amount * PAISE_PER_RUPEE, "currency": currency}
        return self._request("POST", f"/payments/{payment_id}/capture", json=payload)

    def refund_payment(self, payment_id: str, amount: Optional[int] = None) -> dict:
        payload = {}
        if amount is not None:
            payload["amount"] = amount * PAISE_PER_RUPEE
        return self._request("POST", f"/payments/{payment_id}/refund", json=payload)


def get_payment_gateway() -> RazorpayClient:
    return RazorpayClient()
