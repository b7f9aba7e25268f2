"""
Transactional email for bookings and payments, sent through Resend.

Delivery runs after the response has been sent (FastAPI BackgroundTasks) and
never raises into the request: failures are logged and handed to an optional
on_failure hook.
"""
import logging
from typing import Any, Callable, Dict, Optional

import resend

logger = logging.getLogger(__name__)

BOOKING_CONFIRMED = "booking_confirmed"
PAYMENT_RECEIVED = "payment_received"

FailureHook = Callable[[str, Dict[str, Any], Exception], None]


def booking_confirmed_message(record: Dict[str, Any], business_name: str) -> Dict[str, str]:
    treatment, date, slot = record.get("treatment"), record.get("date"), record.get("slot")
    name = record.get("patientName", "")
    return {
        "subject": f"Appointment Confirmation for {treatment} on {date} at {slot} is confirmed!",
        "text": (
            f"Dear {name},\n\nYour appointment for {treatment} on {date} at {slot} is confirmed!"
            f"\n\nThank you for choosing {business_name}!"
        ),
        "html": f"""
    <div>
      <h1>Dear {name},</h1>
      <p>Your appointment for {treatment} on {date} at {slot} is confirmed!</p>
      <p>Thank you for choosing {business_name}!</p>
      <p>Best Regards,</p>
      <p>{business_name}</p>
    </div>
    """,
    }


def payment_received_message(record: Dict[str, Any], business_name: str) -> Dict[str, str]:
    treatment, date, slot = record.get("treatment"), record.get("date"), record.get("slot")
    name = record.get("patientName", "")
    return {
        "subject": f"We have received your payment for {treatment} on {date} at {slot}!",
        "text": (
            f"Dear {name},\n\nWe have received your payment for {treatment} on {date} at {slot}!"
            f"\n\nThank you for choosing {business_name}!"
        ),
        "html": f"""
    <div>
      <h1>Dear {name},</h1>
      <p>Thank you for your Payment. Your appointment for {treatment} on {date} at {slot} is confirmed!</p>
      <h3>We have received your payment!</h3>
      <p>Thank you for choosing {business_name}!</p>
      <p>Best Regards,</p>
      <p>{business_name}</p>
    </div>
    """,
    }


TEMPLATES = {
    BOOKING_CONFIRMED: booking_confirmed_message,
    PAYMENT_RECEIVED: payment_received_message,
}


class Notifier:
    def __init__(
        self,
        api_key: Optional[str],
        sender: str,
        business_name: str,
        on_failure: Optional[FailureHook] = None,
    ):
        self.api_key = api_key
        self.sender = sender
        self.business_name = business_name
        self.on_failure = on_failure

    def build(self, kind: str, record: Dict[str, Any]) -> Dict[str, Any]:
        message = TEMPLATES[kind](record, self.business_name)
        message["from"] = self.sender
        message["to"] = [record["patient"]]
        return message

    def deliver(self, message: Dict[str, Any]) -> Any:
        if not self.api_key:
            logger.warning("RESEND_API_KEY missing - skipping email to %s", message["to"])
            return None
        resend.api_key = self.api_key
        response = resend.Emails.send(message)
        logger.info("Email sent via Resend to %s: %s", message["to"], response)
        return response

    def dispatch(self, kind: str, record: Dict[str, Any]) -> None:
        try:
            self.deliver(self.build(kind, record))
        except Exception as exc:
            logger.exception("Failed to send %s notice to %s", kind, record.get("patient"))
            if self.on_failure is not None:
                self.on_failure(kind, record, exc)
