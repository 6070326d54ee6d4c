# provider_kernel/web/errors.py
from __future__ import annotations
import logging

from fastapi import Request, FastAPI
from fastapi.responses import JSONResponse

from provider_kernel.di.errors import DIError, ProviderNotFoundError
from provider_kernel.di.formatting import format_token

logger = logging.getLogger("provider_kernel.web.errors")


def error_envelope(code: str, message: str, details=None):
    return {"error": {"code": code, "message": message, "details": details or {}}}


async def exception_middleware(request: Request, call_next):
    try:
        return await call_next(request)
    except ProviderNotFoundError as e:
        return JSONResponse(
            error_envelope("NOT_FOUND", "No provider registered", {"token": format_token(e.token)}),
            status_code=404,
        )
    except DIError as e:
        return JSONResponse(error_envelope("DI_ERROR", str(e)), status_code=500)
    except Exception:
        logger.exception("⚠️ Unexpected error on %s %s", request.method, request.url.path)
        return JSONResponse(
            error_envelope("SERVER_ERROR", "Unexpected error"), status_code=500
        )


def add_error_handlers(app: FastAPI) -> None:
    """Attach global exception middleware to app."""
    app.middleware("http")(exception_middleware)
