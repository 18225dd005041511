# drive/core/errors.py
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from drive.core.config import get_settings

logger = structlog.get_logger()


class ApiError(Exception):
    """An error with a fixed HTTP status and a user-facing message."""

    status_code = 500
    message = "Something went wrong!"

    def __init__(self, message: str | None = None, errors: list[str] | None = None):
        if message is not None:
            self.message = message
        self.errors = errors
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.errors:
            body["errors"] = list(self.errors)
        return body


class ValidationFailed(ApiError):
    status_code = 400
    message = "Validation failed"


class EmailAlreadyRegistered(ApiError):
    status_code = 400
    message = "Email already registered"

    def __init__(self):
        super().__init__(
            errors=[
                "This email address is already in use. "
                "Please use a different email or try logging in."
            ]
        )


class InvalidCredentials(ApiError):
    status_code = 401
    message = "Invalid credentials"

    def __init__(self):
        super().__init__(errors=["Invalid email or password"])


class AuthenticationRequired(ApiError):
    status_code = 401
    message = "Authentication required"


class InvalidToken(ApiError):
    status_code = 403
    message = "Invalid token"


class InvalidFileToken(InvalidToken):
    # file retrieval answers 401 for bad tokens, other routes answer 403
    status_code = 401


class NoFileUploaded(ApiError):
    status_code = 400
    message = "No file uploaded"


class FileTooLarge(ApiError):
    status_code = 413
    message = "File too large"


class FileNotFound(ApiError):
    status_code = 404
    message = "File not found"


class FileMissingOnDisk(ApiError):
    status_code = 404
    message = "File not found on server"


# --- request validation messages ---
def _field_label(loc: tuple) -> str:
    # loc looks like ("body", "email"); a bare ("body",) means no JSON body at all
    fields = [str(part) for part in loc if part != "body"]
    return fields[-1].replace("_", " ").capitalize() if fields else "Request body"


def validation_messages(exc: RequestValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        if error.get("type") == "missing":
            message = f"{_field_label(tuple(error.get('loc', ())))} is required"
        else:
            message = error.get("msg", "Invalid value")
        if message not in messages:
            messages.append(message)
    return messages


# --- handlers ---
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    logger.info(
        "request_rejected",
        path=request.url.path,
        status=exc.status_code,
        reason=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # a plain text field named "file" is still "no file", not a type error
    if any(tuple(error.get("loc", ())) == ("body", "file") for error in exc.errors()):
        return await api_error_handler(request, NoFileUploaded())
    return await api_error_handler(request, ValidationFailed(errors=validation_messages(exc)))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=type(exc).__name__,
        exc_info=exc,
    )
    if get_settings().is_development:
        detail = str(exc) or type(exc).__name__
    else:
        detail = "An unexpected error occurred. Please try again."
    return JSONResponse(
        status_code=500,
        content={"message": "Something went wrong!", "errors": [detail]},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
