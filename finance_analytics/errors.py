from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class FinanceError(Exception):
    """Base class for domain errors raised by the service layer."""

    status_code = 400

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFoundError(FinanceError):
    status_code = 404


class InvalidArgumentError(FinanceError):
    status_code = 400


class ConflictError(FinanceError):
    status_code = 409


def register_exception_handlers(app: FastAPI) -> None:
    """Translate service-layer errors into JSON responses."""

    @app.exception_handler(FinanceError)
    async def _finance_error_handler(request: Request, exc: FinanceError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
