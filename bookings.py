"""
Booking lifecycle: Requested -> Created (unpaid) -> Paid.

A patient may hold at most one booking per (treatment, date). Two patients
racing for the same slot are not stopped here. Writes are independent calls
with no transaction around them, so a crash between the booking update and
the payment insert in confirm_payment leaves one without the other.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from catalog import find_treatment
from database import BOOKINGS, PAYMENTS, create_document, get_documents, object_id, serialize, write_result
from errors import Forbidden, InvalidBooking, NotFound
from notifications import BOOKING_CONFIRMED, PAYMENT_RECEIVED
from schemas import BookingRequest, PaymentConfirmation, Principal

logger = logging.getLogger(__name__)

Notify = Callable[[str, Dict[str, Any]], None]

# Copied from the booking onto its payment record
PAYMENT_FIELDS = ("treatment", "date", "slot", "patient", "patientName", "price")


def dedup_key(treatment: str, date: str, patient: str) -> Dict[str, str]:
    return {"treatment": treatment, "date": date, "patient": patient}


def _duplicate(existing: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {"success": False, "booking": serialize(existing), "message": "Booking already exists!"}


def create_booking(db: Database, request: BookingRequest, notify: Optional[Notify] = None) -> Dict[str, Any]:
    treatment = find_treatment(db, request.treatment)
    if treatment is None:
        raise NotFound(f"No treatment named {request.treatment!r}")
    if request.slot not in (treatment.get("slots") or []):
        raise InvalidBooking(f"{request.slot!r} is not a slot of {request.treatment}")

    key = dedup_key(request.treatment, request.date, request.patient)
    existing = db[BOOKINGS].find_one(key)
    if existing:
        logger.info("Duplicate booking refused for %s", key)
        return _duplicate(existing)

    booking = request.model_dump(by_alias=True, exclude_none=True)
    booking["paid"] = False
    try:
        booking_id = create_document(db, BOOKINGS, booking)
    except DuplicateKeyError:
        # lost a race against the same patient; the unique index kept one
        logger.info("Duplicate booking refused by index for %s", key)
        return _duplicate(db[BOOKINGS].find_one(key))

    booking["_id"] = booking_id
    logger.info("Booking %s created for %s", booking["_id"], request.patient)
    if notify is not None:
        notify(BOOKING_CONFIRMED, booking)
    return {"success": True, "result": {"acknowledged": True, "insertedId": booking_id}, "booking": booking}


def get_booking(db: Database, booking_id: str) -> Dict[str, Any]:
    booking = db[BOOKINGS].find_one({"_id": object_id(booking_id)})
    if booking is None:
        raise NotFound(f"No booking with id {booking_id}")
    return serialize(booking)


def list_for_patient(db: Database, patient: Optional[str], principal: Principal) -> List[Dict[str, Any]]:
    if patient != principal.email:
        raise Forbidden()
    return get_documents(db, BOOKINGS, {"patient": patient})


def confirm_payment(
    db: Database,
    booking_id: str,
    confirmation: PaymentConfirmation,
    notify: Optional[Notify] = None,
) -> Dict[str, Any]:
    """
    Mark a booking paid and append its payment record.

    Not guarded on the current state: confirming an already-paid booking
    overwrites transactionId and appends another payment.
    """
    oid = object_id(booking_id)
    booking = db[BOOKINGS].find_one({"_id": oid})
    if booking is None:
        raise NotFound(f"No booking with id {booking_id}")

    update = db[BOOKINGS].update_one(
        {"_id": oid},
        {"$set": {"paid": True, "transactionId": confirmation.transactionId}},
    )

    payment = {field: booking[field] for field in PAYMENT_FIELDS if field in booking}
    payment.update(confirmation.model_dump())
    payment["booking"] = booking_id
    payment["_id"] = create_document(db, PAYMENTS, payment)
    logger.info("Booking %s paid with transaction %s", booking_id, confirmation.transactionId)

    if notify is not None:
        notify(PAYMENT_RECEIVED, payment)
    return write_result(update)
