import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, Header, Request
from jose import JWTError, jwt
from pymongo.database import Database

from config import Settings
from database import USERS, get_db
from errors import Forbidden, Unauthenticated
from schemas import Principal

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


def create_token(email: str, settings: Settings) -> str:
    now = datetime.now(timezone.utc)
    claims: Dict[str, Any] = {
        "email": email,
        "iat": now,
        "exp": now + timedelta(days=settings.token_expire_days),
    }
    return jwt.encode(claims, settings.jwt_token_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, settings: Settings) -> Principal:
    """Decode a signed token into a Principal, or raise Forbidden."""
    try:
        payload = jwt.decode(token, settings.jwt_token_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.warning("JWT verification failed: %s", e)
        raise Forbidden()
    email = payload.get("email")
    if not email:
        logger.warning("JWT verification failed: missing email claim")
        raise Forbidden()
    return Principal(email=email)


def authenticate(credential: Optional[str], settings: Settings) -> Principal:
    if not credential:
        raise Unauthenticated()
    # "<scheme> <token>": only the position matters, the scheme is not checked
    parts = credential.split(" ")
    if len(parts) < 2 or not parts[1]:
        raise Forbidden()
    return verify_token(parts[1], settings)


def is_admin(db: Database, email: str) -> bool:
    user = db[USERS].find_one({"email": email}, {"role": 1})
    return user is not None and user.get("role") == ADMIN_ROLE


def authorize_admin(db: Database, principal: Principal) -> None:
    if not is_admin(db, principal.email):
        logger.info("Admin check refused for %s", principal.email)
        raise Forbidden()


# ----------------------------- FastAPI dependencies -----------------------------
def current_principal(request: Request, authorization: Optional[str] = Header(None)) -> Principal:
    return authenticate(authorization, request.app.state.settings)


def admin_principal(
    principal: Principal = Depends(current_principal),
    db: Database = Depends(get_db),
) -> Principal:
    authorize_admin(db, principal)
    return principal
