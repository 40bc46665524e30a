"""Maps domain and API exceptions to the error envelope.

    {"success": false, "message": "...", "errors": ["...", ...]}

``errors`` is always a flat list of messages, one per violated rule.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import (
    ExpectedVersionError,
    InvalidOperationError,
    ObjectNotFoundError,
    ValidationError,
)

from storefront.api.dependencies import AuthorizationError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _error(status_code: int, message: str, errors: list[str] | None = None) -> JSONResponse:
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=status_code, content=body)


def flatten_messages(messages) -> list[str]:
    """Flatten Protean's ``{field: [msg, ...]}`` error mapping into a list of messages."""
    if isinstance(messages, dict):
        flat = []
        for value in messages.values():
            flat.extend(flatten_messages(value))
        return flat
    if isinstance(messages, (list, tuple)):
        return [str(message) for message in messages if message]
    return [str(messages)] if messages else []


def _exception_message(exc: Exception, default: str) -> str:
    messages = flatten_messages(getattr(exc, "messages", None))
    if messages:
        return messages[0]
    return str(exc) or default


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        errors = flatten_messages(exc.messages)
        return _error(400, errors[0] if errors else "Validation failed", errors)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"] if part != "body")
            errors.append(f"{field}: {error['msg']}" if field else error["msg"])
        return _error(400, "Validation failed", errors)

    @app.exception_handler(ObjectNotFoundError)
    async def not_found(request: Request, exc: ObjectNotFoundError):
        return _error(404, _exception_message(exc, "Not found"))

    @app.exception_handler(ExpectedVersionError)
    async def version_conflict(request: Request, exc: ExpectedVersionError):
        logger.warning("concurrent_modification", path=request.url.path)
        return _error(409, "The resource was modified by another request, please retry")

    @app.exception_handler(InvalidOperationError)
    async def invalid_operation(request: Request, exc: InvalidOperationError):
        return _error(409, _exception_message(exc, "Operation not allowed"))

    @app.exception_handler(AuthorizationError)
    async def authorization_error(request: Request, exc: AuthorizationError):
        return _error(exc.status_code, exc.message)
