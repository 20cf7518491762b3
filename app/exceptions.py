"""
Service-layer error taxonomy and the FastAPI handler that renders it.

Services raise these instead of ``HTTPException`` so they stay callable
outside a request (tests, scripts).  The handler turns them into the same
``{"detail": ...}`` body FastAPI uses for its own errors.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class ServiceError(Exception):
    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(ServiceError):
    status_code = 404
    default_detail = "Not found"


class BadRequestError(ServiceError):
    status_code = 400
    default_detail = "Bad request"


class ConflictError(ServiceError):
    status_code = 409
    default_detail = "Resource was modified concurrently"


class MailDeliveryError(Exception):
    """Raised by the mailer when the transport rejects or times out."""


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
