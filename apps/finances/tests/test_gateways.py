from __future__ import annotations

from decimal import Decimal
from unittest import mock

import pytest
import requests
from django.core.exceptions import ImproperlyConfigured  # type: ignore

from apps.finances.gateways import (
    HttpPaymentGateway,
    OfflinePaymentGateway,
    PaymentGatewayError,
    get_payment_gateway,
)


def _gateway(response=None, error=None):
    session = mock.Mock(spec=requests.Session)
    if error is not None:
        session.post.side_effect = error
    else:
        session.post.return_value = response
    return HttpPaymentGateway(base_url="https://pay.example.com/api/", api_key="secret", session=session), session


def _response(payload, status_code=200):
    response = mock.Mock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    return response


def test_charge_posts_signed_payload():
    gateway, session = _gateway(_response({"success": True, "transaction_id": "gw-42"}))

    result = gateway.charge(Decimal("150.00"), "YER", "card", "booking-1")

    assert result.is_success
    assert result.transaction_id == "gw-42"
    url = session.post.call_args.args[0]
    kwargs = session.post.call_args.kwargs
    assert url == "https://pay.example.com/api/payments/charge"
    body = kwargs["json"]
    assert body["amount"] == "150.00"
    assert body["signature"] == gateway.sign(
        {"amount": "150.00", "currency": "YER", "method": "card", "reference": "booking-1"}
    )
    assert kwargs["headers"]["Authorization"] == "Bearer secret"


def test_declined_charge_carries_message():
    gateway, _ = _gateway(_response({"success": False, "error": {"message": "Card expired"}}))

    result = gateway.charge(Decimal("10.00"), "YER", "card", "booking-1")

    assert not result.is_success
    assert result.error_message == "Card expired"


def test_void_posts_transaction_reference():
    gateway, session = _gateway(_response({"success": True, "transaction_id": "gw-42"}))

    result = gateway.void("gw-42")

    assert result.is_success
    assert session.post.call_args.args[0] == "https://pay.example.com/api/payments/void"
    assert session.post.call_args.kwargs["json"]["transaction_id"] == "gw-42"


def test_network_failure_becomes_gateway_error():
    gateway, _ = _gateway(error=requests.ConnectionError("refused"))

    with pytest.raises(PaymentGatewayError):
        gateway.refund("gw-1", Decimal("5.00"), "YER")


def test_http_error_becomes_gateway_error():
    gateway, _ = _gateway(_response({}, status_code=502))

    with pytest.raises(PaymentGatewayError):
        gateway.charge(Decimal("5.00"), "YER", "card", "booking-1")


def test_non_json_response_becomes_gateway_error():
    response = _response({})
    response.json.side_effect = ValueError("not json")
    gateway, _ = _gateway(response)

    with pytest.raises(PaymentGatewayError):
        gateway.charge(Decimal("5.00"), "YER", "card", "booking-1")


def test_http_gateway_requires_url(settings):
    settings.PAYMENT_GATEWAY_URL = ""

    with pytest.raises(ImproperlyConfigured):
        HttpPaymentGateway()


def test_gateway_is_chosen_by_setting(settings):
    settings.PAYMENT_GATEWAY = "offline"
    assert isinstance(get_payment_gateway(), OfflinePaymentGateway)

    settings.PAYMENT_GATEWAY = "http"
    settings.PAYMENT_GATEWAY_URL = "https://pay.example.com"
    assert isinstance(get_payment_gateway(), HttpPaymentGateway)

    settings.PAYMENT_GATEWAY = "paypal"
    with pytest.raises(ImproperlyConfigured):
        get_payment_gateway()
