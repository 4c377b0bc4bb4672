"""Marketplace FastAPI application.

Web server that processes commands synchronously via HTTP. Every request
runs inside the marketplace domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (notifications fire in UoW)
#   - "production" → event_processing = "async" (notifications fire via Engine)
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from marketplace.domain import marketplace  # noqa: E402

marketplace.init()

from marketplace.api import (  # noqa: E402
    domain_context_middleware,
    order_router,
    product_router,
    register_exception_handlers,
    shop_router,
)


def create_app() -> FastAPI:
    """Assemble the API around an already initialized domain."""
    app = FastAPI(
        title="Marketplace API",
        description="Multi-shop marketplace: catalogue, shops and orders",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(domain_context_middleware)

    app.include_router(order_router)
    app.include_router(shop_router)
    app.include_router(product_router)
    register_exception_handlers(app)

    @app.get("/health")
    async def health():
        return JSONResponse(
            content={
                "status": "ok",
                "domain": {"name": marketplace.name},
            }
        )

    return app


app = create_app()
