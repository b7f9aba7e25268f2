import logging
from typing import Any, Dict, List, Optional

from pymongo.database import Database

from database import TREATMENTS, get_documents, object_id, serialize, write_result
from errors import NotFound
from schemas import Treatment

logger = logging.getLogger(__name__)


def list_names(db: Database) -> List[Dict[str, Any]]:
    return get_documents(db, TREATMENTS, projection={"name": 1})


def list_all(db: Database) -> List[Dict[str, Any]]:
    return get_documents(db, TREATMENTS)


def find_treatment(db: Database, name: str) -> Optional[Dict[str, Any]]:
    return serialize(db[TREATMENTS].find_one({"name": name}))


def upsert(db: Database, treatment: Treatment) -> Dict[str, Any]:
    result = db[TREATMENTS].update_one(
        {"name": treatment.name},
        {"$set": {"price": treatment.price, "slots": treatment.slots, "image": treatment.image}},
        upsert=True,
    )
    logger.info("Treatment %s upserted", treatment.name)
    return write_result(result)


def remove(db: Database, treatment_id: str) -> Dict[str, Any]:
    result = db[TREATMENTS].delete_one({"_id": object_id(treatment_id)})
    if result.deleted_count == 0:
        raise NotFound(f"No treatment with id {treatment_id}")
    logger.info("Treatment %s removed", treatment_id)
    return write_result(result)
