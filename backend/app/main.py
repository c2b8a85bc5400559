# backend/app/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.responses import Response

# rate limiting
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.core.rate_limit import limiter
from app.core.settings import get_settings
from app.db import init_db
from app.errors import PortalError, StoreUnavailable
from app.security.logger import vote_logger

ALLOWED_ORIGINS = get_settings().allowed_origins

# ---- Default security headers ----
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
    "Content-Security-Policy": (
        "default-src 'self'; "
        "frame-ancestors 'none'; "
        "object-src 'none'; "
        "base-uri 'self'; "
        "form-action 'self'"
    ),
}
# NOTE: HSTS only takes effect when served over HTTPS (enable at your reverse proxy in prod)
STRICT_TRANSPORT_SECURITY = "max-age=31536000; includeSubDomains"

JSON_BODY_METHODS = ("POST", "PUT", "PATCH")


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    yield


app = FastAPI(title="STEMANIKA School Portal API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["authorization", "content-type", "x-requested-with", "x-admin-secret"],
    max_age=3600,
)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(RateLimitExceeded)
def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    response = JSONResponse(
        status_code=429,
        content={"error": "too_many_requests", "detail": "Try again later."},
    )
    for header, value in (getattr(exc, "headers", {}) or {}).items():
        response.headers.setdefault(header, value)
    return response


@app.exception_handler(PortalError)
def _portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    if isinstance(exc, StoreUnavailable):
        vote_logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "detail": exc.message},
    )


@app.exception_handler(RequestValidationError)
def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # malformed bodies and unknown fields are client errors like any other invalid input
    return JSONResponse(
        status_code=400,
        content={"error": "invalid_input", "detail": jsonable_encoder(exc.errors())},
    )


# ---- Security headers middleware ----
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response: Response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    # HSTS (effective only when behind HTTPS)
    response.headers.setdefault("Strict-Transport-Security", STRICT_TRANSPORT_SECURITY)
    return response


# ---- Require JSON bodies ----
@app.middleware("http")
async def require_json_body(request: Request, call_next):
    if request.method in JSON_BODY_METHODS:
        content_type = request.headers.get("content-type", "")
        if not content_type.lower().startswith("application/json"):
            return JSONResponse(
                status_code=415,
                content={"detail": "Unsupported Media Type. Must be application/json"},
            )
    return await call_next(request)


# ---- Health endpoint (used by tests and curl) ----
@app.get("/health")
def health():
    return {"ok": True}


from app.routers import admin, auth, ballots, eskul, kandidat, school, votes  # noqa: E402

app.include_router(auth.router)
app.include_router(votes.router)
app.include_router(ballots.router)
app.include_router(kandidat.router)
app.include_router(eskul.router)
app.include_router(school.router)
app.include_router(admin.router)
