import os
import warnings
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


class Settings(BaseModel):
    database_url: Optional[str] = None
    database_name: str = "treatment_booking"
    db_timeout_ms: int = 5000

    jwt_token_secret: str
    jwt_algorithm: str = "HS256"
    token_expire_days: int = 1

    resend_api_key: Optional[str] = None
    email_sender: str = "Oro Dental Aid <noreply@example.com>"
    business_name: str = "Oro Dental Aid"

    stripe_secret_key: Optional[str] = None
    payment_currency: str = "usd"

    cors_origins: List[str] = ["*"]
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        secret = os.getenv("JWT_TOKEN_SECRET")
        if not secret:
            warnings.warn(
                "JWT_TOKEN_SECRET not set! Using insecure default - DO NOT USE IN PRODUCTION",
                RuntimeWarning,
                stacklevel=2,
            )
            secret = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

        origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

        return cls(
            database_url=os.getenv("DATABASE_URL"),
            database_name=os.getenv("DATABASE_NAME", "treatment_booking"),
            db_timeout_ms=int(os.getenv("DB_TIMEOUT_MS", "5000")),
            jwt_token_secret=secret,
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            token_expire_days=int(os.getenv("TOKEN_EXPIRE_DAYS", "1")),
            resend_api_key=os.getenv("RESEND_API_KEY"),
            email_sender=os.getenv("EMAIL_SENDER", "Oro Dental Aid <noreply@example.com>"),
            business_name=os.getenv("BUSINESS_NAME", "Oro Dental Aid"),
            stripe_secret_key=os.getenv("STRIPE_SECRET_KEY"),
            payment_currency=os.getenv("PAYMENT_CURRENCY", "usd"),
            cors_origins=origins or ["*"],
            port=int(os.getenv("PORT", "8000")),
        )
