# ehr_api/appointments.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from . import repository, schemas
from .deps import get_db
from .errors import NotFound

logger = logging.getLogger(__name__)

router = APIRouter(tags=["appointments"])


def _listing(rows: list) -> dict:
    return {"Status": "Success", "message": f"{len(rows)} appointment(s) found.", "Result": rows}


# ---- Create an appointment (patient action)
@router.post("/appointment")
def create_appointment(payload: schemas.AppointmentIn, db: Session = Depends(get_db)):
    schemas.require(
        payload.patient_id,
        payload.doctor_id,
        payload.appointment_date,
        payload.department,
        payload.procedure,
    )
    appointment_id = repository.create_appointment(
        db,
        patient_id=payload.patient_id,
        doctor_id=payload.doctor_id,
        appointment_date=payload.appointment_date,
        department=payload.department.strip(),
        procedure=payload.procedure.strip(),
    )
    logger.info("Appointment %s created for patient %s", appointment_id, payload.patient_id)
    return {
        "Status": "Success",
        "message": "Appointment Successfully Created!",
        "Result": {"id": appointment_id},
    }


# ---- Set the status of an appointment (doctor/admin action)
@router.put("/updateAppointmentStatus/{appointment_id}")
def update_appointment_status(
    appointment_id: int,
    payload: schemas.StatusUpdateIn,
    db: Session = Depends(get_db),
):
    schemas.require(payload.status)
    changed = repository.update_appointment_status(db, appointment_id, payload.status.strip())
    if not changed:
        raise NotFound("Appointment not found.")
    logger.info("Appointment %s set to %s", appointment_id, payload.status.strip())
    return {"Status": "Success", "success": True, "message": "Appointment successfully updated."}


# ---- Listings
@router.get("/allAppointments")
def all_appointments(db: Session = Depends(get_db)):
    """Every appointment with the patient's name and photo."""
    return _listing(repository.list_appointments_with_patient(db))


@router.get("/appointments")
def appointments_with_doctor(db: Session = Depends(get_db)):
    """Every appointment with the doctor's name and photo."""
    return _listing(repository.list_appointments_with_doctor(db))


@router.get("/doctorAppointments/{doctor_id}")
def doctor_scheduled_appointments(doctor_id: int, db: Session = Depends(get_db)):
    return _listing(repository.list_doctor_appointments(db, doctor_id, scheduled_only=True))


@router.get("/allDoctorAppointments/{doctor_id}")
def doctor_appointments(doctor_id: int, db: Session = Depends(get_db)):
    return _listing(repository.list_doctor_appointments(db, doctor_id))


@router.get("/patientAppointments/{patient_id}")
def patient_appointments(patient_id: int, db: Session = Depends(get_db)):
    return _listing(repository.list_patient_appointments(db, patient_id))


@router.get("/appointmentDetails/{appointment_id}")
def appointment_details(appointment_id: int, db: Session = Depends(get_db)):
    return _listing(repository.get_appointment_details(db, appointment_id))
