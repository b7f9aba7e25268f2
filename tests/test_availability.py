from availability import list_available, remaining_slots
from database import BOOKINGS


def _book(db, treatment, date, slot, patient="p@mail.com"):
    db[BOOKINGS].insert_one({"treatment": treatment, "date": date, "slot": slot, "patient": patient, "paid": False})


def _slots(result):
    return {t["name"]: t["slots"] for t in result}


def test_remaining_slots_preserves_catalog_order():
    assert remaining_slots(["9am", "10am", "11am", "2pm"], {"11am", "9am"}) == ["10am", "2pm"]


def test_booked_slot_is_removed_for_that_treatment_only(db, cleaning):
    _book(db, "Cleaning", "2024-01-01", "9am")

    slots = _slots(list_available(db, "2024-01-01"))

    assert slots["Cleaning"] == ["10am", "11am"]
    assert slots["Whitening"] == ["9am", "2pm"]


def test_bookings_on_other_dates_do_not_count(db, cleaning):
    _book(db, "Cleaning", "2024-01-02", "9am")

    assert _slots(list_available(db, "2024-01-01"))["Cleaning"] == ["9am", "10am", "11am"]


def test_missing_date_shows_full_availability(db, cleaning):
    _book(db, "Cleaning", "2024-01-01", "9am")
    db[BOOKINGS].insert_one({"treatment": "Cleaning", "slot": "10am", "patient": "x@mail.com"})

    assert _slots(list_available(db, None))["Cleaning"] == ["9am", "10am", "11am"]


def test_catalog_is_never_decremented(db, cleaning):
    _book(db, "Cleaning", "2024-01-01", "9am")

    first = list_available(db, "2024-01-01")
    second = list_available(db, "2024-01-01")

    assert first == second
    assert db["appoinment"].find_one({"name": "Cleaning"})["slots"] == ["9am", "10am", "11am"]


def test_fully_booked_treatment_has_no_slots(db, cleaning):
    for i, slot in enumerate(["9am", "2pm"]):
        _book(db, "Whitening", "2024-01-01", slot, patient=f"p{i}@mail.com")

    assert _slots(list_available(db, "2024-01-01"))["Whitening"] == []


def test_available_endpoint_is_public(client, db, cleaning):
    _book(db, "Cleaning", "2024-01-01", "9am")

    res = client.get("/available", params={"date": "2024-01-01"})

    assert res.status_code == 200
    cleaning_row = next(t for t in res.json() if t["name"] == "Cleaning")
    assert cleaning_row["slots"] == ["10am", "11am"]
    assert cleaning_row["price"] == 50.0
    assert isinstance(cleaning_row["_id"], str)
