from types import SimpleNamespace
from unittest.mock import patch

import pytest
import stripe

from config import Settings
from errors import PaymentUnavailable
from payments import amount_in_minor_units, create_payment_intent


def test_amount_in_minor_units():
    assert amount_in_minor_units(50) == 5000
    assert amount_in_minor_units(19.99) == 1999


def test_create_payment_intent(settings):
    intent = SimpleNamespace(client_secret="pi_1_secret_x")
    with patch("payments.stripe.PaymentIntent.create", return_value=intent) as create:
        assert create_payment_intent(19.99, settings) == "pi_1_secret_x"

    kwargs = create.call_args.kwargs
    assert kwargs["amount"] == 1999
    assert kwargs["currency"] == "usd"
    assert kwargs["payment_method_types"] == ["card"]
    assert kwargs["api_key"] == "sk_test_123"


def test_missing_key_is_unavailable():
    with pytest.raises(PaymentUnavailable):
        create_payment_intent(10, Settings(jwt_token_secret="s"))


def test_stripe_error_is_unavailable(settings):
    with patch("payments.stripe.PaymentIntent.create", side_effect=stripe.StripeError("declined")):
        with pytest.raises(PaymentUnavailable):
            create_payment_intent(10, settings)


def test_payment_intent_endpoint(client, auth_header):
    intent = SimpleNamespace(client_secret="pi_2_secret_y")
    with patch("payments.stripe.PaymentIntent.create", return_value=intent):
        res = client.post("/create-payment-intent", json={"price": 50}, headers=auth_header("a@mail.com"))

    assert res.status_code == 200
    assert res.json() == {"clientSecret": "pi_2_secret_y"}


def test_payment_intent_endpoint_errors(client, auth_header):
    assert client.post("/create-payment-intent", json={"price": 50}).status_code == 401
    headers = auth_header("a@mail.com")
    assert client.post("/create-payment-intent", json={"price": 0}, headers=headers).status_code == 422
    with patch("payments.stripe.PaymentIntent.create", side_effect=stripe.StripeError("down")):
        assert client.post("/create-payment-intent", json={"price": 5}, headers=headers).status_code == 502
