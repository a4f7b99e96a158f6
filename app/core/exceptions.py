# app/core/exceptions.py
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.logging import get_logger

logger = get_logger(__name__)


class SupportError(Exception):
    """Base class for errors surfaced by the support backend."""

    status_code = 500
    code = "internal_error"


class InvalidPayload(SupportError):
    """Ticket or notify body did not match a recognized shape."""

    status_code = 400
    code = "invalid_payload"

    def __init__(self, detail: Any = "Invalid payload"):
        super().__init__(str(detail))
        self.detail = detail


class TicketNotFound(SupportError):
    status_code = 404
    code = "not_found"

    def __init__(self, ticket_id: str):
        super().__init__(f"Ticket {ticket_id} not found")
        self.ticket_id = ticket_id


class ProviderFailure(SupportError):
    """An email/WhatsApp provider answered with a non-2xx status or was unreachable.

    Never turned into an HTTP error; the dispatcher records it per channel.
    """

    code = "provider_failure"

    def __init__(self, provider: str, status_code: int | None = None, body: str = ""):
        label = f"{provider}_fail:{status_code}" if status_code is not None else f"{provider}_fail"
        super().__init__(label)
        self.provider = provider
        self.provider_status = status_code
        self.body = body


def _error_response(status_code: int, code: str, detail: Any = None) -> JSONResponse:
    content: dict[str, Any] = {"ok": False, "error": code}
    if detail is not None:
        content["detail"] = jsonable_encoder(detail)
    return JSONResponse(status_code=status_code, content=content)


async def _invalid_payload_handler(request: Request, exc: InvalidPayload) -> JSONResponse:
    return _error_response(exc.status_code, exc.code, exc.detail)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("invalid_payload", path=request.url.path, errors=len(exc.errors()))
    return _error_response(InvalidPayload.status_code, InvalidPayload.code, exc.errors())


async def _not_found_handler(request: Request, exc: TicketNotFound) -> JSONResponse:
    return _error_response(exc.status_code, exc.code, "Ticket not found")


async def _internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, method=request.method)
    return _error_response(500, SupportError.code)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidPayload, _invalid_payload_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(TicketNotFound, _not_found_handler)
    app.add_exception_handler(Exception, _internal_error_handler)


__all__ = [
    "SupportError",
    "InvalidPayload",
    "TicketNotFound",
    "ProviderFailure",
    "register_exception_handlers",
]
