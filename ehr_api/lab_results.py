# ehr_api/lab_results.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from . import repository, schemas
from .deps import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["lab results"])


@router.post("/labResults")
def create_lab_result(payload: schemas.LabResultIn, db: Session = Depends(get_db)):
    schemas.require(payload.patient_id, payload.test_name, payload.results)
    lab_id = repository.create_lab_result(
        db,
        patient_id=payload.patient_id,
        test_name=payload.test_name.strip(),
        results=payload.results,
    )
    logger.info("Lab result %s recorded for patient %s", lab_id, payload.patient_id)
    return {
        "Status": "Success",
        "message": "Lab Results Successfully Created!",
        "Result": {"lab_id": lab_id},
    }


@router.get("/labResults")
def list_lab_results(db: Session = Depends(get_db)):
    rows = repository.list_lab_results(db)
    return {"Status": "Success", "message": f"{len(rows)} lab result(s) found.", "Result": rows}


@router.get("/patientResults/{patient_id}")
def patient_results(patient_id: int, db: Session = Depends(get_db)):
    rows = repository.list_patient_lab_results(db, patient_id)
    return {"Status": "Success", "message": f"{len(rows)} lab result(s) found.", "Result": rows}
