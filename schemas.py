"""
Database Schemas for the Treatment Booking Service

Each Pydantic model validates a request body before it is written to its
MongoDB collection (appoinment, booking, payments, users).
"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.networks import validate_email


# Catalog
class Treatment(BaseModel):
    name: str = Field(..., min_length=1, description="Unique treatment name")
    price: float = Field(..., ge=0)
    slots: List[str] = Field(default_factory=list, description="Canonical time-slot labels for a day")
    image: Optional[str] = Field(None, description="Image URL")

    @field_validator("slots")
    @classmethod
    def slots_are_distinct(cls, value: List[str]) -> List[str]:
        if len(set(value)) != len(value):
            raise ValueError("slots must be distinct")
        return value


# Bookings & payments
class BookingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    treatment: str
    date: str = Field(..., min_length=1, description="Calendar date label, matched exactly")
    slot: str
    patient: str = Field(..., description="Patient email, stored exactly as given")
    patient_name: str = Field(..., alias="patientName")
    phone: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)

    @field_validator("patient")
    @classmethod
    def patient_is_email(cls, value: str) -> str:
        # checked only; the stored key must match token claims and queries verbatim
        validate_email(value)
        return value


class PaymentConfirmation(BaseModel):
    model_config = ConfigDict(extra="allow")

    transactionId: str = Field(..., min_length=1)


class PaymentIntentRequest(BaseModel):
    price: float = Field(..., gt=0)


# Users
class UserProfile(BaseModel):
    """Free-form profile fields; role and email are never taken from the body."""
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None


class Principal(BaseModel):
    email: str
