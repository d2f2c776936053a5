import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from errors import AppError
from responses import envelope
from routers import checkins, company, dashboard, locations, login, reports, shifts, swaps, timeoff, users

logging.basicConfig(
    level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _normalize_origins(origins):
    """
    Ensures allow_origins is always a list[str].
    Supports:
      - list/tuple/set of origins
      - comma-separated string
      - single string origin
    """
    if origins is None:
        return []
    if isinstance(origins, (list, tuple, set)):
        return list(origins)
    if isinstance(origins, str):
        # allow comma-separated env var like: "https://a.com,https://b.com"
        parts = [o.strip() for o in origins.split(",") if o.strip()]
        return parts if parts else []
    return []


app = FastAPI(title=getattr(settings, "APP_NAME", "TimeTidy API"))

allowed_origins = _normalize_origins(getattr(settings, "ALLOWED_ORIGINS", []))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers already define their own prefixes
app.include_router(login.router)
app.include_router(users.router)
app.include_router(locations.router)
app.include_router(shifts.router)
app.include_router(checkins.router)
app.include_router(swaps.router)
app.include_router(timeoff.router)
app.include_router(dashboard.router)
app.include_router(company.router)
app.include_router(reports.router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(None, exc.message, success=False, errors=exc.errors),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(None, str(exc.detail), success=False),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        field = loc[-1] if len(loc) > 1 else (loc[0] if loc else "body")
        errors.setdefault(field, []).append(err.get("msg", "Invalid value"))
    return JSONResponse(
        status_code=400,
        content=envelope(None, "Validation failed", success=False, errors=errors),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=envelope(None, "Internal server error", success=False),
    )


@app.get("/api/health")
async def health():
    return {"status": "ok"}
