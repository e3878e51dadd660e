"""
Payment gateways

``OfflinePaymentGateway`` records cash and manual transfers that the
property staff already collected. ``HttpPaymentGateway`` talks to an
external processor over a JSON API. ``get_payment_gateway()`` picks one
according to the ``PAYMENT_GATEWAY`` setting.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import uuid
from dataclasses import dataclass, field
from decimal import Decimal

import requests
from django.conf import settings  # type: ignore
from django.core.exceptions import ImproperlyConfigured  # type: ignore

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """The gateway could not be reached or answered with garbage."""


@dataclass
class GatewayResult:
    is_success: bool
    transaction_id: str = ""
    error_message: str = ""
    raw: dict = field(default_factory=dict)


class PaymentGateway:
    name = "base"

    def charge(self, amount: Decimal, currency: str, method: str, reference: str) -> GatewayResult:
        raise NotImplementedError

    def refund(self, gateway_transaction_id: str, amount: Decimal, currency: str) -> GatewayResult:
        raise NotImplementedError

    def void(self, gateway_transaction_id: str) -> GatewayResult:
        raise NotImplementedError


class OfflinePaymentGateway(PaymentGateway):
    """Cash desk / manual transfer: the money is already in hand."""

    name = "offline"

    def charge(self, amount: Decimal, currency: str, method: str, reference: str) -> GatewayResult:
        transaction_id = f"offline_{uuid.uuid4().hex[:16]}"
        logger.info(f"Recorded offline {method} payment {transaction_id} for {reference}: {amount} {currency}")
        return GatewayResult(is_success=True, transaction_id=transaction_id)

    def refund(self, gateway_transaction_id: str, amount: Decimal, currency: str) -> GatewayResult:
        transaction_id = f"offline_refund_{uuid.uuid4().hex[:16]}"
        logger.info(f"Recorded offline refund of {amount} {currency} for {gateway_transaction_id}")
        return GatewayResult(is_success=True, transaction_id=transaction_id)

    def void(self, gateway_transaction_id: str) -> GatewayResult:
        logger.info(f"Recorded offline void of {gateway_transaction_id}")
        return GatewayResult(is_success=True, transaction_id=gateway_transaction_id)


class HttpPaymentGateway(PaymentGateway):
    """Processor reachable at ``PAYMENT_GATEWAY_URL``.

    Requests are JSON bodies signed with HMAC-SHA256 of the sorted
    ``key=value`` pairs using the API key.
    """

    name = "http"

    def __init__(self, base_url: str | None = None, api_key: str | None = None, timeout: int | None = None,
                 session: requests.Session | None = None):
        self.base_url = (base_url or getattr(settings, "PAYMENT_GATEWAY_URL", "")).rstrip("/")
        self.api_key = api_key or getattr(settings, "PAYMENT_GATEWAY_API_KEY", "")
        self.timeout = timeout or getattr(settings, "PAYMENT_GATEWAY_TIMEOUT", 15)
        self.session = session or requests.Session()
        if not self.base_url:
            raise ImproperlyConfigured("PAYMENT_GATEWAY_URL is required for the http payment gateway")

    def sign(self, payload: dict) -> str:
        sign_string = "&".join(f"{key}={value}" for key, value in sorted(payload.items()))
        return hmac.new(self.api_key.encode(), sign_string.encode(), hashlib.sha256).hexdigest()

    def _post(self, path: str, payload: dict) -> dict:
        payload = dict(payload, signature=self.sign(payload))
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        try:
            response = self.session.post(f"{self.base_url}/{path}", json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Payment gateway request to {path} failed: {e}")
            raise PaymentGatewayError(f"Payment gateway unavailable: {e}") from e
        except ValueError as e:
            logger.error(f"Payment gateway returned a non-JSON response for {path}: {e}")
            raise PaymentGatewayError("Payment gateway returned an invalid response") from e

    @staticmethod
    def _result(data: dict) -> GatewayResult:
        if data.get("success"):
            return GatewayResult(is_success=True, transaction_id=str(data.get("transaction_id", "")), raw=data)
        error = data.get("error") or {}
        message = error.get("message") if isinstance(error, dict) else str(error)
        return GatewayResult(is_success=False, error_message=message or "Payment declined", raw=data)

    def charge(self, amount: Decimal, currency: str, method: str, reference: str) -> GatewayResult:
        logger.info(f"Charging {amount} {currency} ({method}) for {reference} via {self.base_url}")
        data = self._post("payments/charge", {
            "amount": str(amount),
            "currency": currency,
            "method": method,
            "reference": reference,
        })
        return self._result(data)

    def refund(self, gateway_transaction_id: str, amount: Decimal, currency: str) -> GatewayResult:
        logger.info(f"Refunding {amount} {currency} of {gateway_transaction_id} via {self.base_url}")
        data = self._post("payments/refund", {
            "transaction_id": gateway_transaction_id,
            "amount": str(amount),
            "currency": currency,
        })
        return self._result(data)

    def void(self, gateway_transaction_id: str) -> GatewayResult:
        logger.info(f"Voiding {gateway_transaction_id} via {self.base_url}")
        data = self._post("payments/void", {"transaction_id": gateway_transaction_id})
        return self._result(data)


def get_payment_gateway() -> PaymentGateway:
    gateway = getattr(settings, "PAYMENT_GATEWAY", "offline")
    if gateway == "http":
        return HttpPaymentGateway()
    if gateway == "offline":
        return OfflinePaymentGateway()
    raise ImproperlyConfigured(f"Unknown PAYMENT_GATEWAY: {gateway}")
