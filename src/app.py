"""Storefront ordering FastAPI application.

Web server that processes ordering commands synchronously via HTTP. Each
request runs inside the ordering domain's context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from uuid import uuid4

# ---------------------------------------------------------------------------
# Logging & domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the configuration overlay; LOG_LEVEL and LOG_DIR tune logging.
from ordering.utils.logging import add_context, clear_context, configure_logging

configure_logging()

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402

from ordering.domain import ordering  # noqa: E402

ordering.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront Ordering API",
    description="Carts, cash-on-delivery orders, stock reservation and delivery assignment",
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
    """Push the ordering domain context and a request id for each request."""
    clear_context()
    add_context(request_id=request.headers.get("X-Request-ID", uuid4().hex), path=request.url.path)
    with ordering.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers & error mapping
# ---------------------------------------------------------------------------
from ordering.api import register_error_handlers, routers  # noqa: E402

for router in routers:
    app.include_router(router)

register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"ordering": {"name": ordering.name}},
        }
    )
