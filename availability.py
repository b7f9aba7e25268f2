from typing import Any, Dict, List, Optional

from pymongo.database import Database

from database import BOOKINGS, TREATMENTS, get_documents


def remaining_slots(slots: List[str], booked: set) -> List[str]:
    return [slot for slot in slots if slot not in booked]


def list_available(db: Database, date: Optional[str]) -> List[Dict[str, Any]]:
    """
    Every treatment in the catalog with its slots reduced to those still open on `date`.

    Recomputed on each call from the canonical catalog slots; nothing is decremented
    in storage. Without a date no booking can match, so every slot is open.
    """
    treatments = get_documents(db, TREATMENTS)
    bookings = get_documents(db, BOOKINGS, {"date": date}, {"treatment": 1, "slot": 1}) if date else []

    booked_by_treatment: Dict[str, set] = {}
    for booking in bookings:
        booked_by_treatment.setdefault(booking.get("treatment"), set()).add(booking.get("slot"))

    for treatment in treatments:
        booked = booked_by_treatment.get(treatment.get("name"), set())
        treatment["slots"] = remaining_slots(treatment.get("slots") or [], booked)
    return treatments
