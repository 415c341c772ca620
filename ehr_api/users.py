# ehr_api/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from . import repository
from .deps import get_db

router = APIRouter(tags=["users"])


@router.get("/doctors")
def list_doctors(db: Session = Depends(get_db)):
    rows = repository.list_users_by_role(db, "Doctor")
    return {"Status": "Success", "message": f"{len(rows)} doctor(s) found.", "Result": rows}


@router.get("/patients")
def list_patients(db: Session = Depends(get_db)):
    rows = repository.list_users_by_role(db, "Patient")
    return {"Status": "Success", "message": f"{len(rows)} patient(s) found.", "Result": rows}
