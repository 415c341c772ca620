# ehr_api/auth.py
import logging

import pydantic
from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from . import repository, schemas
from .deps import (
    get_db,
    get_password_hasher,
    get_photo_store,
    get_token_service,
    require_roles,
)
from .errors import AuthError, DuplicateEntity, ValidationError
from .passwords import PasswordHasher
from .tokens import CLAIM_FIELDS, TokenService
from .uploads import PhotoStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


async def _read_registration(request: Request):
    """
    Registration arrives as multipart (with an optional photo) or as JSON.

    Returns ``(fields, photo, form)``; the caller closes ``form`` once the photo
    has been stored.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            raise ValidationError("Request body must be valid JSON.")
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object.")
        return data, None, None

    form = await request.form()
    photo = form.get("photo")
    fields = {key: value for key, value in form.items() if isinstance(value, str)}
    return fields, (None if isinstance(photo, str) else photo), form


def _create_user(
    db: Session,
    hasher: PasswordHasher,
    photos: PhotoStore,
    payload: schemas.RegisterIn,
    photo_upload,
) -> int:
    hashed = hasher.hash(payload.password)
    photo = photos.save(photo_upload, field="photo")
    try:
        return repository.create_user(
            db,
            name=payload.name.strip(),
            email=payload.email,
            role=payload.role,
            password_hash=hashed,
            photo=photo,
        )
    except Exception:
        photos.delete(photo)
        raise


@router.post("/register")
async def register(
    request: Request,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    photos: PhotoStore = Depends(get_photo_store),
):
    data, photo_upload, form = await _read_registration(request)
    try:
        schemas.require(data.get("name"), data.get("email"), data.get("role"), data.get("password"))
        try:
            payload = schemas.RegisterIn(**data)
        except pydantic.ValidationError:
            raise ValidationError("A valid name, email, role and password are required.")

        try:
            user_id = await run_in_threadpool(_create_user, db, hasher, photos, payload, photo_upload)
        except DuplicateEntity:
            logger.info("Registration refused: email already registered")
            raise
    finally:
        # releases the spooled upload files
        if form is not None:
            await form.close()

    logger.info("Registered user %s with role %s", user_id, payload.role)
    return {"Status": "Success", "message": "User Successfully Registered!"}


@router.post("/login")
def login(
    payload: schemas.LoginIn,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
):
    schemas.require(payload.email, payload.password)

    users = repository.find_users_by_email(db, payload.email)
    if not users:
        raise AuthError("User not found, please register")
    user = users[0]

    if not hasher.verify(payload.password, user["password"]):
        logger.info("Login failed for user %s: wrong password", user["id"])
        raise AuthError("Incorrect Password!")

    claims = {key: user[key] for key in CLAIM_FIELDS}
    token = tokens.issue(claims)
    response.set_cookie(
        "token",
        token,
        httponly=True,
        max_age=int(tokens.ttl.total_seconds()),
        samesite="lax",
        secure=request.app.state.settings.cookie_secure,
    )
    logger.info("User %s logged in", user["id"])
    return {
        "Status": "Success",
        "message": "Login Successful!",
        "token": token,
        "user": schemas.UserOut(**claims).model_dump(),
    }


# ---- protected probes: each echoes the verified claims for its roles

def _probe(claims: dict) -> dict:
    return {
        "Status": "success",
        "role": claims.get("role"),
        "message": "Protected route accessed",
        "user": claims,
    }


@router.get("/admin")
def admin_probe(claims: dict = Depends(require_roles("Admin"))):
    return _probe(claims)


@router.get("/doctor")
def doctor_probe(claims: dict = Depends(require_roles("Doctor", "Admin"))):
    return _probe(claims)


@router.get("/patient")
def patient_probe(claims: dict = Depends(require_roles("Patient", "Admin"))):
    return _probe(claims)
