"""
Pharmacy sales reporting API.

ARCHITECTURE:
- FastAPI routes: thin, check access then call services
- Services: filtering, supervisor scoping and sales aggregation
- SQLAlchemy: SQLite in development, PostgreSQL in production

Every response is JSON with a `success` flag; failures carry `message`
and optionally `error` / `errors`.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from pharmasales.api.routes import (
    auth,
    baby_joy,
    contests,
    detailed_sales,
    header_sales,
    incentive_items,
    insurance_items,
    pharmacies,
    users,
    visits,
)
from pharmasales.core.config import settings
from pharmasales.core.exceptions import APIError, BusinessError, duplicate_field_from_integrity_error
from pharmasales.db.init_db import init_db
from pharmasales.schemas.common import error_messages

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing database...")
    init_db()
    logger.info("Database initialized")
    yield


app = FastAPI(
    title="PharmaSales API",
    description="Multi-pharmacy sales reporting: detailed and header sales, catalogs, statistics.",
    version="1.0.0",
    lifespan=lifespan,
)

# SECURITY: Restrict CORS to specific methods and headers (not wildcards)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
    ],
    max_age=600,
    expose_headers=["Content-Type"],
)


@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-XSS-Protection"] = "1; mode=block"
    response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    response.headers["Content-Security-Policy"] = "default-src 'self'"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=exc.headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # exc.detail can be str/dict/list
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=BusinessError.validation(error_messages(exc)).to_payload())


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    column = duplicate_field_from_integrity_error(exc)
    error = BusinessError.duplicate_key(column) if column else BusinessError.bad_request(
        "Database constraint violated", error=str(exc.orig)
    )
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    error = BusinessError.server_error(f"Unhandled error on {request.method} {request.url.path}", exc)
    payload = error.to_payload()
    payload["message"] = "Server error"
    return JSONResponse(status_code=error.status_code, content=payload)


app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(pharmacies.router, prefix="/api/pharmacies", tags=["pharmacies"])
app.include_router(detailed_sales.router, prefix="/api/detailed-sales", tags=["detailed-sales"])
app.include_router(header_sales.router, prefix="/api/header-sales", tags=["header-sales"])
app.include_router(incentive_items.router, prefix="/api/incentive-items", tags=["incentive-items"])
app.include_router(insurance_items.router, prefix="/api/insurance-items", tags=["insurance-items"])
app.include_router(contests.router, prefix="/api/contests", tags=["contests"])
app.include_router(baby_joy.router, prefix="/api/baby-joy", tags=["baby-joy"])
app.include_router(visits.router, prefix="/api/visits", tags=["visits"])


@app.get("/health")
def health():
    return {"status": "ok"}
