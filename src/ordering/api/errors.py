"""HTTP mapping of domain failures.

FastAPI resolves exception handlers along the exception's MRO, so the more
specific entries below win over Protean's generic handlers.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import (
    ExpectedVersionError,
    InvalidOperationError,
    ObjectNotFoundError,
    ValidationError,
)
from protean.integrations.fastapi import register_exception_handlers

from ordering.shared.errors import (
    AgentNotFound,
    CodeDeliveryFailed,
    InsufficientStock,
    InvalidOrExpiredCode,
    InvalidState,
    NotCancellable,
)

ERROR_STATUS_CODES: dict[type[Exception], int] = {
    ValidationError: 400,
    InvalidOrExpiredCode: 400,
    ObjectNotFoundError: 404,
    AgentNotFound: 404,
    InvalidOperationError: 409,
    InvalidState: 409,
    NotCancellable: 409,
    InsufficientStock: 409,
    ExpectedVersionError: 409,
    CodeDeliveryFailed: 502,
}


async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = ERROR_STATUS_CODES.get(type(exc))
    if status_code is None:
        status_code = next(
            (code for cls, code in ERROR_STATUS_CODES.items() if isinstance(exc, cls)),
            500,
        )
    return JSONResponse(
        status_code=status_code,
        content={
            "error": getattr(exc, "messages", None) or str(exc),
            "error_type": type(exc).__name__,
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's handlers, then the ordering domain's own status codes."""
    register_exception_handlers(app)
    for exc_class in ERROR_STATUS_CODES:
        app.add_exception_handler(exc_class, domain_error_handler)
