# ehr_api/models.py
from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from .database import Base

ROLES = ("Admin", "Doctor", "Patient")


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('Admin', 'Doctor', 'Patient')", name="ck_users_role"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    role = Column(String(20), nullable=False, index=True)
    photo = Column(String(255), nullable=True)
    password = Column(String(255), nullable=False)


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    appointment_date = Column(Date, nullable=False)
    department = Column(String(120), nullable=False)
    procedure = Column(String(200), nullable=False)
    status = Column(String(40), nullable=False, default="Scheduled", server_default="Scheduled")
    created_date = Column(DateTime(timezone=True), server_default=func.now())


class LabResult(Base):
    __tablename__ = "labresults"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    test_name = Column(String(200), nullable=False)
    results = Column(Text, nullable=False)
    created_date = Column(DateTime(timezone=True), server_default=func.now())
