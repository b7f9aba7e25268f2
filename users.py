import logging
from typing import Any, Dict, List

from pymongo.database import Database

from auth import ADMIN_ROLE, create_token
from config import Settings
from database import USERS, get_documents, write_result
from errors import NotFound
from schemas import UserProfile

logger = logging.getLogger(__name__)

# Fields only this module decides; never copied from a profile body.
PROTECTED_FIELDS = ("email", "role", "_id")


def list_users(db: Database) -> List[Dict[str, Any]]:
    return get_documents(db, USERS)


def upsert_and_issue_token(db: Database, email: str, profile: UserProfile, settings: Settings) -> Dict[str, Any]:
    """
    Create or update the user keyed by `email` and hand back a signed token for it.

    This is the only place tokens are issued. It is reachable without a credential,
    so anyone can obtain a token for any email (see DESIGN.md).
    """
    fields = {k: v for k, v in profile.model_dump(exclude_none=True).items() if k not in PROTECTED_FIELDS}
    fields["email"] = email
    result = db[USERS].update_one({"email": email}, {"$set": fields}, upsert=True)
    token = create_token(email, settings)
    logger.info("User %s upserted, token issued", email)
    return {"result": write_result(result), "token": token}


def promote_to_admin(db: Database, email: str) -> Dict[str, Any]:
    result = db[USERS].update_one({"email": email}, {"$set": {"role": ADMIN_ROLE}})
    if result.matched_count == 0:
        raise NotFound(f"No user with email {email}")
    logger.info("User %s promoted to admin", email)
    return write_result(result)


def remove(db: Database, email: str) -> Dict[str, Any]:
    result = db[USERS].delete_one({"email": email})
    if result.deleted_count == 0:
        raise NotFound(f"No user with email {email}")
    logger.info("User %s removed", email)
    return write_result(result)
