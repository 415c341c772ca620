# ehr_api/schemas.py
from datetime import date
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from .errors import ValidationError


def require(*values) -> None:
    """Presence check shared by every handler: None or blank counts as missing."""
    for value in values:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError()


# Auth
class RegisterIn(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[str] = None
    password: Optional[str] = None

    # emails are unique case-insensitively whatever the store's collation
    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower() if v else v


class LoginIn(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower() if v else v


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    photo: Optional[str] = None
    role: str
    class Config:
        from_attributes = True


# Appointments
class AppointmentIn(BaseModel):
    patient_id: Optional[int] = Field(default=None, alias="patientId")
    doctor_id: Optional[int] = Field(default=None, alias="doctorId")
    appointment_date: Optional[date] = Field(default=None, alias="date")
    department: Optional[str] = None
    procedure: Optional[str] = None
    class Config:
        populate_by_name = True


class StatusUpdateIn(BaseModel):
    status: Optional[str] = None


# Lab results
class LabResultIn(BaseModel):
    patient_id: Optional[int] = Field(default=None, alias="patientId")
    test_name: Optional[str] = Field(default=None, alias="testName")
    results: Optional[str] = Field(default=None, alias="labResults")
    class Config:
        populate_by_name = True
