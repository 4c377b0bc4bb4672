"""Map marketplace errors to HTTP responses.

Protean's standard handlers cover its own exception types. The handlers
registered here are more specific, so Starlette prefers them for the
marketplace taxonomy and the body carries ``code`` plus structured detail.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers as register_protean_handlers

from marketplace.errors import AccessDenied, MarketplaceError, OrderNotFound, PersistenceFailure

logger = structlog.get_logger(__name__)


def _respond(exc) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder({"error": exc.to_dict()}))


def register_exception_handlers(app: FastAPI) -> None:
    register_protean_handlers(app)

    @app.exception_handler(MarketplaceError)
    async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
        logger.info("Request rejected", code=exc.code, path=request.url.path)
        return _respond(exc)

    @app.exception_handler(OrderNotFound)
    async def order_not_found_handler(request: Request, exc: OrderNotFound) -> JSONResponse:
        return _respond(exc)

    @app.exception_handler(AccessDenied)
    async def access_denied_handler(request: Request, exc: AccessDenied) -> JSONResponse:
        logger.warning("Access denied", reason=exc.reason, path=request.url.path)
        return _respond(exc)

    @app.exception_handler(PersistenceFailure)
    async def persistence_failure_handler(request: Request, exc: PersistenceFailure) -> JSONResponse:
        response = _respond(exc)
        response.headers["Retry-After"] = "1"
        return response
