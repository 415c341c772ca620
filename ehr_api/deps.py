# ehr_api/deps.py
import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.orm import Session

from .errors import Forbidden, InvalidToken, NotAuthenticated
from .passwords import PasswordHasher
from .tokens import TokenService
from .uploads import PhotoStore

logger = logging.getLogger(__name__)

# Read the raw header: a missing header and a malformed one are different failures.
authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


def get_db(request: Request):
    db = request.app.state.store.session()
    try:
        yield db
    finally:
        db.close()


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


def get_photo_store(request: Request) -> PhotoStore:
    return request.app.state.photos


def get_current_claims(
    request: Request,
    authorization: Optional[str] = Depends(authorization_header),
    tokens: TokenService = Depends(get_token_service),
) -> dict:
    if not authorization:
        logger.info("Rejected %s: no Authorization header", request.url.path)
        raise NotAuthenticated()

    scheme, token = get_authorization_scheme_param(authorization)
    if scheme.lower() != "bearer" or not token:
        logger.info("Rejected %s: malformed Authorization header", request.url.path)
        raise InvalidToken()

    try:
        claims = tokens.verify(token)
    except InvalidToken:
        logger.info("Rejected %s: token failed verification", request.url.path)
        raise

    request.state.user = claims
    return claims


def require_roles(*roles: str):
    """Dependency factory: a verified token whose role is one of ``roles``."""

    def check_role(claims: dict = Depends(get_current_claims)) -> dict:
        role = claims.get("role")
        if role not in roles:
            raise Forbidden(f"Access denied for role {role}.")
        return claims

    return check_role
