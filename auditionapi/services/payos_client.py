import hashlib
import hmac
import json
import logging
from typing import Any, Dict

import httpx

from auditionapi.config import Settings
from auditionapi.core.exceptions import InternalServerError, ServiceUnavailableError

logger = logging.getLogger(__name__)

PAYMENT_REQUEST_SIGNED_FIELDS = ("amount", "cancelUrl", "description", "orderCode", "returnUrl")


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def build_signature_payload(data: Dict[str, Any]) -> str:
    """``k1=v1&k2=v2`` over keys sorted alphabetically"""
    return "&".join(f"{key}={_stringify(data[key])}" for key in sorted(data))


def sign(data: Dict[str, Any], checksum_key: str) -> str:
    return hmac.new(
        checksum_key.encode("utf-8"),
        build_signature_payload(data).encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


class PayOSClient:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.base_url = settings.PAYOS_BASE_URL.rstrip("/")

    @property
    def configured(self) -> bool:
        return self.settings.payos_configured

    def _require_configured(self) -> None:
        if not self.configured:
            raise ServiceUnavailableError("Payment gateway is not configured")

    def sign_payment_request(self, payload: Dict[str, Any]) -> str:
        self._require_configured()
        signed = {field: payload[field] for field in PAYMENT_REQUEST_SIGNED_FIELDS}
        return sign(signed, self.settings.PAYOS_CHECKSUM_KEY)

    def verify_webhook_signature(self, data: Dict[str, Any], signature: str) -> bool:
        self._require_configured()
        if not signature:
            return False
        expected = sign(data, self.settings.PAYOS_CHECKSUM_KEY)
        return hmac.compare_digest(expected, signature)

    async def create_payment_link(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST /v2/payment-requests; returns PayOS ``data`` (checkoutUrl, ...)"""
        self._require_configured()
        body = dict(payload, signature=self.sign_payment_request(payload))
        headers = {
            "x-client-id": self.settings.PAYOS_CLIENT_ID,
            "x-api-key": self.settings.PAYOS_API_KEY,
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.PAYOS_TIMEOUT_SECONDS
            ) as client:
                response = await client.post(
                    f"{self.base_url}/v2/payment-requests", json=body, headers=headers
                )
        except httpx.TimeoutException:
            logger.error("PayOS payment request timeout")
            raise ServiceUnavailableError("Payment gateway timeout")
        except httpx.HTTPError as e:
            logger.error(f"PayOS payment request failed: {e}")
            raise ServiceUnavailableError("Payment gateway unreachable")

        result = response.json() if response.content else {}
        if response.status_code != 200 or result.get("code") != "00" or not result.get("data"):
            logger.error(f"PayOS rejected order {payload.get('orderCode')}: {response.text}")
            raise InternalServerError(result.get("desc") or "Failed to create payment link")
        return result["data"]
