"""Purchasing FastAPI application.

Web server that processes purchasing commands synchronously via HTTP. Each
request runs inside the purchasing domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → in-memory providers
#   - "production" → PostgreSQL via DATABASE_URL
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from purchasing.domain import purchasing  # noqa: E402
from purchasing.utils.db import setup_db  # noqa: E402
from purchasing.utils.logging import bind_request_context, clear_request_context  # noqa: E402

purchasing.init()
setup_db(purchasing)

_DOMAIN_PREFIXES = ("/orders", "/downloads")


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Purchasing API",
    description="Order lifecycle, fulfillment and compensation for courses, events and digital goods",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the purchasing domain context for each domain request."""
    if request.url.path.startswith(_DOMAIN_PREFIXES):
        bind_request_context(request.method, request.url.path, request.headers.get("x-buyer-id"))
        try:
            with purchasing.domain_context():
                response = await call_next(request)
        finally:
            clear_request_context()
        return response
    # Health check, docs, etc.
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from purchasing.api import download_router, order_router, register_error_handlers  # noqa: E402

app.include_router(order_router)
app.include_router(download_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "purchasing": {"name": purchasing.name},
            },
        }
    )
