"""
Domain error taxonomy and the FastAPI handlers that render it.

Services raise these exceptions; handlers never build error responses
themselves. Every error response body is JSON with a stable shape:

- validation: ``{"errors": [{"field": ..., "message": ...}, ...]}``
- everything else: ``{"error": ..., "code": ...}``
"""

import logging
from typing import Dict, List, Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from caixa.validation import FieldError, ValidationResult

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Erro interno do servidor"


class DomainError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500
    code = "INTERNAL_ERROR"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_body(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationFailed(DomainError):
    """One or more field-level validation errors."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, errors: Sequence[FieldError]):
        self.errors: List[FieldError] = list(errors)
        super().__init__("; ".join(e.message for e in self.errors))

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationFailed":
        return cls([FieldError(field, message)])

    def to_body(self) -> dict:
        return {"errors": [e.to_dict() for e in self.errors]}


def raise_if_invalid(result: ValidationResult) -> None:
    """Turn a failed validation result into a :class:`ValidationFailed`."""
    if not result.is_valid:
        raise ValidationFailed(result.errors)


class BadRequestError(DomainError):
    status_code = 400
    code = "BAD_REQUEST"


class UnauthenticatedError(DomainError):
    status_code = 401
    code = "UNAUTHORIZED"


class ForbiddenError(DomainError):
    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(DomainError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(DomainError):
    status_code = 409
    code = "CONFLICT"


class ImmutableStateError(DomainError):
    """Attempt to change a record that has reached a terminal state."""

    status_code = 400
    code = "QUOTE_ALREADY_EXECUTED"


class RateLimitedError(DomainError):
    status_code = 429
    code = "RATE_LIMITED"

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.headers = {"Retry-After": str(retry_after)}


class UpstreamError(DomainError):
    """A third-party service failed or timed out."""

    status_code = 502
    code = "UPSTREAM_ERROR"


class CascadeDeleteError(DomainError):
    """A step of a multi-table delete failed; nothing was committed."""

    status_code = 500
    code = "CASCADE_DELETE_FAILED"

    def __init__(self, failed_step: str, completed_steps: Sequence[str]):
        self.failed_step = failed_step
        self.completed_steps = list(completed_steps)
        super().__init__(f"Falha ao excluir dados relacionados ({failed_step})")

    def to_body(self) -> dict:
        body = super().to_body()
        body["failedStep"] = self.failed_step
        return body


def _field_from_loc(loc: Sequence) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed with %s: %s",
            request.method, request.url.path, exc.code, exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=exc.headers)


def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for err in exc.errors():
        errors.append(FieldError(_field_from_loc(err.get("loc", ())), "Valor inválido").to_dict())
    if not errors:
        errors.append(FieldError("body", "Corpo da requisição inválido").to_dict())
    return JSONResponse(status_code=400, content={"errors": errors})


def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": INTERNAL_ERROR_MESSAGE, "code": "INTERNAL_ERROR"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error handlers to an application."""
    app.add_exception_handler(DomainError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
