# ehr_api/repository.py
"""
Data access: one parameterized statement (or fixed join) per operation.

Values always travel as bound parameters through SQLAlchemy expressions.
Reads return a list of plain dicts, possibly empty. Writes (``db.add`` or a
bulk ``query.update``) commit their single statement and either succeed or
raise; nothing spans more than one statement.
"""
import logging
import uuid
from contextlib import contextmanager
from datetime import date
from typing import List, Optional

from sqlalchemy import exc as sa_exc
from sqlalchemy import select
from sqlalchemy.orm import Session, aliased

from .errors import DuplicateEntity, StoreError, StoreTimeout, ValidationError
from .models import ROLES, Appointment, LabResult, User

logger = logging.getLogger(__name__)

# MySQL: statement exceeded max_execution_time / connection lost mid-query
_TIMEOUT_ERRNOS = {3024, 2013}


def _is_timeout(exc: sa_exc.SQLAlchemyError) -> bool:
    if isinstance(exc, sa_exc.TimeoutError):
        return True
    if isinstance(exc, sa_exc.OperationalError):
        orig = exc.orig
        if getattr(orig, "errno", None) in _TIMEOUT_ERRNOS:
            return True
        return "database is locked" in str(orig).lower()
    return False


@contextmanager
def _statement(db: Session, action: str):
    try:
        yield
    except sa_exc.SQLAlchemyError as exc:
        db.rollback()
        reference = uuid.uuid4().hex
        logger.error("Store failure while %s", action, exc_info=exc, extra={"reference": reference})
        error_cls = StoreTimeout if _is_timeout(exc) else StoreError
        raise error_cls(reference=reference) from exc


def _rows(db: Session, stmt) -> List[dict]:
    return [dict(row) for row in db.execute(stmt).mappings().all()]


# ---- users

def create_user(
    db: Session,
    name: str,
    email: str,
    role: str,
    password_hash: str,
    photo: Optional[str] = None,
) -> int:
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}.")

    with _statement(db, "registering a user"):
        try:
            user = User(name=name, email=email, role=role, photo=photo, password=password_hash)
            db.add(user)
            db.commit()
        except sa_exc.IntegrityError as exc:
            # the UNIQUE constraint on email is the only one a valid payload can hit
            db.rollback()
            raise DuplicateEntity() from exc
    return user.id


def find_users_by_email(db: Session, email: str) -> List[dict]:
    """Includes the password hash; never hand these rows to a client."""
    with _statement(db, "looking up a user by email"):
        return _rows(db, select(User.__table__).where(User.email == email))


def list_users_by_role(db: Session, role: str) -> List[dict]:
    stmt = (
        select(User.id, User.name, User.email, User.role, User.photo)
        .where(User.role == role)
        .order_by(User.id.desc())
    )
    with _statement(db, f"listing {role} users"):
        return _rows(db, stmt)


# ---- appointments

def _appointment_columns(id_label: str = "id"):
    return (
        Appointment.id.label(id_label),
        Appointment.patient_id,
        Appointment.doctor_id,
        Appointment.appointment_date,
        Appointment.department,
        Appointment.procedure,
        Appointment.status,
        Appointment.created_date,
    )


def create_appointment(
    db: Session,
    patient_id: int,
    doctor_id: int,
    appointment_date: date,
    department: str,
    procedure: str,
) -> int:
    with _statement(db, "creating an appointment"):
        try:
            appointment = Appointment(
                patient_id=patient_id,
                doctor_id=doctor_id,
                appointment_date=appointment_date,
                department=department,
                procedure=procedure,
            )
            db.add(appointment)
            db.commit()
        except sa_exc.IntegrityError as exc:
            db.rollback()
            raise ValidationError("patientId and doctorId must reference existing users.") from exc
    return appointment.id


def update_appointment_status(db: Session, appointment_id: int, status: str) -> int:
    """Returns the number of rows changed (0 when the id is unknown)."""
    with _statement(db, "updating an appointment status"):
        changed = (
            db.query(Appointment)
            .filter(Appointment.id == appointment_id)
            .update({Appointment.status: status}, synchronize_session=False)
        )
        db.commit()
    return changed


def list_appointments_with_patient(db: Session) -> List[dict]:
    stmt = (
        select(*_appointment_columns("appointment_id"), User.name, User.photo)
        .join(User, Appointment.patient_id == User.id)
        .order_by(Appointment.id.desc())
    )
    with _statement(db, "listing appointments"):
        return _rows(db, stmt)


def list_appointments_with_doctor(db: Session) -> List[dict]:
    stmt = (
        select(
            *_appointment_columns("appointment_id"),
            User.name.label("doctor_name"),
            User.photo.label("doctor_photo"),
        )
        .join(User, Appointment.doctor_id == User.id)
        .order_by(Appointment.id.desc())
    )
    with _statement(db, "listing appointments"):
        return _rows(db, stmt)


def list_doctor_appointments(db: Session, doctor_id: int, scheduled_only: bool = False) -> List[dict]:
    """A doctor's appointments with the patient's contact details."""
    patient = aliased(User)
    stmt = (
        select(*_appointment_columns(), patient.name, patient.email, patient.photo)
        .join(patient, Appointment.patient_id == patient.id)
        .where(Appointment.doctor_id == doctor_id)
        .order_by(Appointment.appointment_date, Appointment.id)
    )
    if scheduled_only:
        stmt = stmt.where(Appointment.status == "Scheduled")
    with _statement(db, "listing a doctor's appointments"):
        return _rows(db, stmt)


def list_patient_appointments(db: Session, patient_id: int) -> List[dict]:
    """A patient's appointments with the doctor's name and photo."""
    doctor = aliased(User)
    stmt = (
        select(*_appointment_columns(), doctor.name, doctor.photo)
        .join(doctor, Appointment.doctor_id == doctor.id)
        .where(Appointment.patient_id == patient_id)
        .order_by(Appointment.appointment_date, Appointment.id)
    )
    with _statement(db, "listing a patient's appointments"):
        return _rows(db, stmt)


def get_appointment_details(db: Session, appointment_id: int) -> List[dict]:
    stmt = (
        select(*_appointment_columns(), User.name, User.photo)
        .join(User, Appointment.patient_id == User.id)
        .where(Appointment.id == appointment_id)
    )
    with _statement(db, "fetching appointment details"):
        return _rows(db, stmt)


# ---- lab results

def _lab_result_query():
    return (
        select(
            LabResult.id.label("lab_id"),
            LabResult.patient_id,
            User.name,
            User.photo,
            LabResult.test_name,
            LabResult.results,
            LabResult.created_date,
        )
        .join(User, LabResult.patient_id == User.id)
        .order_by(LabResult.id.desc())
    )


def create_lab_result(db: Session, patient_id: int, test_name: str, results: str) -> int:
    with _statement(db, "creating a lab result"):
        try:
            lab_result = LabResult(patient_id=patient_id, test_name=test_name, results=results)
            db.add(lab_result)
            db.commit()
        except sa_exc.IntegrityError as exc:
            db.rollback()
            raise ValidationError("patientId must reference an existing user.") from exc
    return lab_result.id


def list_lab_results(db: Session) -> List[dict]:
    with _statement(db, "listing lab results"):
        return _rows(db, _lab_result_query())


def list_patient_lab_results(db: Session, patient_id: int) -> List[dict]:
    with _statement(db, "listing a patient's lab results"):
        return _rows(db, _lab_result_query().where(LabResult.patient_id == patient_id))
