"""
api/main.py -- FastAPI application entry point for the guardian service.

Exposes the credential flows (signup, login, password reset) over HTTP.

Run with:  uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. log_requests          -- one access-log line per request with latency
  2. CORSMiddleware        -- adds CORS headers for allowed browser origins
  3. TrustedHostMiddleware -- rejects requests with unexpected Host headers

Starlette wraps the last-registered middleware outermost, so they are added
below in the reverse of this order.

Lifespan builds every collaborator once from Settings (store, hasher, token
issuer, notifier) and wires them into the flows on app.state. Flows never
read Settings themselves.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from auth.flows import (
    AuthenticationFlow,
    ChangePasswordFlow,
    ForgetPasswordFlow,
    RegistrationFlow,
    ResetCodeVerificationFlow,
)
from auth.hasher import SecretHasher
from auth.notifier import SmtpNotifier
from auth.store import AccountStore
from auth.tokens import TokenIssuer
from core.config import Settings, get_settings

_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("guardian.api")

_settings = get_settings()


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def wire_flows(app: FastAPI, settings: Settings, account_store, notifier) -> None:
    """Build the credential flows from their collaborators and attach them to app.state.

    Separate from lifespan so tests can wire an in-memory store and a fake
    notifier through exactly the same code path.
    """
    hasher = SecretHasher(cost=settings.hash_cost)
    token_issuer = TokenIssuer(
        secret_key=settings.secret_key,
        expire_seconds=settings.token_expire_seconds,
        reset_code_length=settings.reset_code_length,
    )
    app.state.account_store = account_store
    app.state.token_issuer = token_issuer
    app.state.registration = RegistrationFlow(accounts=account_store, hasher=hasher)
    app.state.authentication = AuthenticationFlow(accounts=account_store, hasher=hasher, tokens=token_issuer)
    app.state.forget_password = ForgetPasswordFlow(
        accounts=account_store,
        hasher=hasher,
        tokens=token_issuer,
        notifier=notifier,
        sender=settings.mail_from,
        code_expire_seconds=settings.reset_code_expire_seconds,
    )
    app.state.reset_code_verification = ResetCodeVerificationFlow(
        accounts=account_store, hasher=hasher, tokens=token_issuer
    )
    app.state.change_password = ChangePasswordFlow(accounts=account_store, hasher=hasher)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the account store and flows on startup; dispose the engine on shutdown."""
    logger.info("Guardian API starting up")
    account_store = AccountStore(_settings.database_url)
    notifier = SmtpNotifier(
        host=_settings.smtp_host,
        port=_settings.smtp_port,
        username=_settings.smtp_username,
        password=_settings.smtp_password,
        use_tls=_settings.smtp_use_tls,
    )
    wire_flows(app, _settings, account_store, notifier)
    logger.info("Credential flows initialized (hash_cost=%d)", _settings.hash_cost)

    yield

    account_store.close()
    logger.info("Guardian API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Guardian API",
    description="Guardian accounts: signup, login and password recovery.",
    version=_VERSION,
    lifespan=lifespan,
)

app.add_middleware(TrustedHostMiddleware, allowed_hosts=_settings.allowed_hosts)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when the request body fails validation."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=str(exc.errors()),
            )
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    Route handlers raise HTTPException with detail=ErrorDetail(...).model_dump().
    When detail is already a dict, use it directly as the error field.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=exc.headers,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    Hashing, signing and delivery failures from the flows land here. The
    traceback goes to the log only; the client gets a generic message.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", include_in_schema=True, tags=["Health"])
async def health(request: Request) -> HealthResponse:
    """Return liveness plus a database round-trip check."""
    database = "ok"
    try:
        await asyncio.to_thread(request.app.state.account_store.ping)
    except Exception:
        logger.warning("Health check: database unreachable", exc_info=True)
        database = "error"
    return HealthResponse(version=_VERSION, components={"app": "ok", "database": database})
