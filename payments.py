import logging

import stripe

from config import Settings
from errors import PaymentUnavailable

logger = logging.getLogger(__name__)


def amount_in_minor_units(price: float) -> int:
    return int(round(price * 100))


def create_payment_intent(price: float, settings: Settings) -> str:
    """Create a card PaymentIntent for `price` and return its client secret."""
    if not settings.stripe_secret_key:
        logger.warning("Stripe secret key not configured")
        raise PaymentUnavailable("Payments are not currently available")

    try:
        intent = stripe.PaymentIntent.create(
            api_key=settings.stripe_secret_key,
            amount=amount_in_minor_units(price),
            currency=settings.payment_currency,
            payment_method_types=["card"],
        )
    except stripe.StripeError as exc:
        logger.exception("Stripe API error while creating payment intent", exc_info=exc)
        raise PaymentUnavailable() from exc
    return intent.client_secret
