import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import BackgroundTasks, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError

import availability
import bookings
import catalog
import users
from auth import admin_principal, current_principal, is_admin
from config import Settings
from database import connect, ensure_indexes, get_db
from errors import ServiceError
from notifications import Notifier
from payments import create_payment_intent
from schemas import BookingRequest, PaymentConfirmation, PaymentIntentRequest, Principal, Treatment, UserProfile

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if app.state.db is None:
        app.state.db = connect(settings.database_url, settings.database_name, settings.db_timeout_ms)
    try:
        ensure_indexes(app.state.db)
    except PyMongoError as e:
        logger.error("Failed to ensure indexes: %s", e)
    logger.info("Treatment Booking API started")
    yield
    logger.info("Treatment Booking API shutting down")


def create_app(settings: Settings, db: Optional[Database] = None, notifier: Optional[Notifier] = None) -> FastAPI:
    app = FastAPI(title="Treatment Booking API", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = db
    app.state.notifier = notifier or Notifier(settings.resend_api_key, settings.email_sender, settings.business_name)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_url(request: Request, call_next):
        logger.info("URL: %s %s", request.method, request.url.path)
        return await call_next(request)

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(PyMongoError)
    async def storage_error_handler(request: Request, exc: PyMongoError):
        logger.error("Storage error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Storage unavailable"})

    def notify_later(background_tasks: BackgroundTasks):
        def notify(kind, record):
            background_tasks.add_task(app.state.notifier.dispatch, kind, record)
        return notify

    @app.get("/")
    def root():
        return {"message": "Treatment Booking API running"}

    @app.get("/test")
    def test_database(db: Database = Depends(get_db)):
        response = {
            "backend": "✅ Running",
            "database": "❌ Not Available",
            "database_name": None,
            "connection_status": "Not Connected",
            "collections": []
        }
        if db is None:
            return response
        response["database_name"] = db.name
        try:
            collections = db.list_collection_names()
            response["collections"] = collections[:10]
            response["connection_status"] = "Connected"
            response["database"] = "✅ Connected & Working"
        except PyMongoError as e:
            response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
        return response

    # ----------------------------- Treatments -----------------------------
    @app.get("/appoinment", response_model=List[dict])
    def list_treatment_names(db: Database = Depends(get_db)):
        return catalog.list_names(db)

    @app.get("/allappoinment", response_model=List[dict])
    def list_treatments(db: Database = Depends(get_db), _: Principal = Depends(admin_principal)):
        return catalog.list_all(db)

    @app.put("/appoinment", response_model=dict)
    def upsert_treatment(treatment: Treatment, db: Database = Depends(get_db), _: Principal = Depends(admin_principal)):
        return catalog.upsert(db, treatment)

    @app.delete("/appoinment/{treatment_id}", response_model=dict)
    def delete_treatment(treatment_id: str, db: Database = Depends(get_db), _: Principal = Depends(admin_principal)):
        return catalog.remove(db, treatment_id)

    # ----------------------------- Availability -----------------------------
    @app.get("/available", response_model=List[dict])
    def available(date: Optional[str] = None, db: Database = Depends(get_db)):
        return availability.list_available(db, date)

    # ----------------------------- Bookings -----------------------------
    @app.post("/booking", response_model=dict)
    def create_booking(req: BookingRequest, background_tasks: BackgroundTasks, db: Database = Depends(get_db)):
        return bookings.create_booking(db, req, notify_later(background_tasks))

    @app.get("/booking", response_model=List[dict])
    def list_bookings(
        patient: Optional[str] = None,
        db: Database = Depends(get_db),
        principal: Principal = Depends(current_principal),
    ):
        return bookings.list_for_patient(db, patient, principal)

    @app.get("/booking/{booking_id}", response_model=dict)
    def get_booking(booking_id: str, db: Database = Depends(get_db), _: Principal = Depends(current_principal)):
        return bookings.get_booking(db, booking_id)

    @app.patch("/booking/{booking_id}", response_model=dict)
    def confirm_payment(
        booking_id: str,
        payment: PaymentConfirmation,
        background_tasks: BackgroundTasks,
        db: Database = Depends(get_db),
        _: Principal = Depends(current_principal),
    ):
        return bookings.confirm_payment(db, booking_id, payment, notify_later(background_tasks))

    # ----------------------------- Payments -----------------------------
    @app.post("/create-payment-intent", response_model=dict)
    def payment_intent(req: PaymentIntentRequest, _: Principal = Depends(current_principal)):
        return {"clientSecret": create_payment_intent(req.price, settings)}

    # ----------------------------- Users -----------------------------
    @app.get("/users", response_model=List[dict])
    def list_users(db: Database = Depends(get_db), _: Principal = Depends(current_principal)):
        return users.list_users(db)

    @app.put("/user/admin/{email}", response_model=dict)
    def make_admin(email: str, db: Database = Depends(get_db), _: Principal = Depends(admin_principal)):
        return users.promote_to_admin(db, email)

    @app.put("/user/{email}", response_model=dict)
    def upsert_user(email: str, profile: UserProfile, db: Database = Depends(get_db)):
        return users.upsert_and_issue_token(db, email, profile, settings)

    @app.delete("/user/{email}", response_model=dict)
    def delete_user(email: str, db: Database = Depends(get_db), _: Principal = Depends(admin_principal)):
        return users.remove(db, email)

    @app.get("/admin/{email}", response_model=dict)
    def check_admin(email: str, db: Database = Depends(get_db)):
        return {"admin": is_admin(db, email)}

    return app


app = create_app(Settings.from_env())

if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
