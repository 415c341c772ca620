# ehr_api/errors.py
"""
Error taxonomy and the handlers that turn it into response envelopes.

Every failure a client can see is an ``AppError`` subclass carrying the HTTP
status and a client-safe message. Store failures are logged with a
correlation ``reference`` that is echoed to the client instead of the raw
driver error.
"""
import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    status_marker = "Error"
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def body(self) -> dict:
        return {"Status": self.status_marker, "message": self.message}


class ValidationError(AppError):
    status_code = 400
    default_message = "All fields are required."


class DuplicateEntity(AppError):
    # Not an HTTP error: the client uses the marker to redirect to login.
    status_code = 200
    status_marker = "Exists"
    default_message = "User already exists. Please log in."


class PayloadTooLarge(AppError):
    status_code = 413
    default_message = "Upload too large."


class NotFound(AppError):
    status_code = 404
    default_message = "Not found."


class AuthError(AppError):
    status_code = 401
    default_message = "Authentication failed."


class NotAuthenticated(AuthError):
    status_code = 403
    default_message = "User not authenticated!"


class InvalidToken(AuthError):
    status_code = 400
    default_message = "Invalid token"


class Forbidden(AuthError):
    status_code = 403
    default_message = "Access denied."


class StoreError(AppError):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None, reference: str = None):
        super().__init__(message)
        self.reference = reference or uuid.uuid4().hex

    def body(self) -> dict:
        body = super().body()
        body["reference"] = self.reference
        return body


class StoreTimeout(StoreError):
    default_message = "The data store did not respond in time."


async def app_error_handler(request: Request, exc: AppError):
    if isinstance(exc, StoreError):
        # the underlying driver error was logged where it was caught
        logger.error(
            "%s %s failed: %s",
            request.method,
            request.url.path,
            type(exc).__name__,
            extra={"reference": exc.reference},
        )
    return JSONResponse(status_code=exc.status_code, content=exc.body())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = [".".join(str(p) for p in err.get("loc", ()) if p != "body") for err in exc.errors()]
    fields = [f for f in fields if f]
    message = "Invalid request."
    if fields:
        message = f"Invalid or missing fields: {', '.join(sorted(set(fields)))}."
    return JSONResponse(status_code=400, content={"Status": "Error", "message": message})


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"Status": "Error", "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    reference = uuid.uuid4().hex
    logger.error(
        "%s %s raised an unhandled error",
        request.method,
        request.url.path,
        exc_info=exc,
        extra={"reference": reference},
    )
    return JSONResponse(
        status_code=500,
        content={"Status": "Error", "message": "Internal server error", "reference": reference},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
