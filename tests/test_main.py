import logging
from unittest.mock import patch

from pymongo.errors import ServerSelectionTimeoutError

from database import write_result
from errors import Forbidden, NotFound


def test_root(client):
    assert client.get("/").json() == {"message": "Treatment Booking API running"}


def test_database_health(client, cleaning):
    body = client.get("/test").json()

    assert body["connection_status"] == "Connected"
    assert "appoinment" in body["collections"]


def test_storage_failure_is_internal_error(client):
    with patch("catalog.get_documents", side_effect=ServerSelectionTimeoutError("no servers")):
        res = client.get("/appoinment")

    assert res.status_code == 500
    assert res.json() == {"detail": "Storage unavailable"}


def test_dedup_index_created(client, db):
    index_keys = [list(info["key"]) for info in db["booking"].index_information().values()]
    assert [("treatment", 1), ("date", 1), ("patient", 1)] in index_keys


def test_write_result_shapes(db):
    inserted = db["x"].insert_one({"a": 1})
    assert write_result(inserted) == {"acknowledged": True, "insertedId": str(inserted.inserted_id)}

    updated = write_result(db["x"].update_one({"a": 1}, {"$set": {"a": 2}}))
    assert updated == {"acknowledged": True, "matchedCount": 1, "modifiedCount": 1, "upsertedId": None}

    assert write_result(db["x"].delete_one({"a": 2})) == {"acknowledged": True, "deletedCount": 1}


def test_request_url_is_logged(client, caplog):
    with caplog.at_level(logging.INFO, logger="main"):
        client.get("/available", params={"date": "2024-01-01"})

    assert "URL: GET /available" in caplog.messages


def test_service_error_default_and_custom_messages():
    assert Forbidden().message == "Forbidden Access"
    assert NotFound("No booking with id x").message == "No booking with id x"
