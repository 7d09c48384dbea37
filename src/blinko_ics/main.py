import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import InvalidInput, NoteApiConfigError, NoteApiError
from .routers import files as files_router
from .routers import sync as sync_router
from .routers import verify as verify_router
from .scheduler import start_scheduler, stop_scheduler
from .settings import get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "sync", "description": "Manual sync, sync status and stored calendar listing."},
    {"name": "auth", "description": "Password verification for manual sync."},
    {"name": "feeds", "description": "Calendar feed downloads for calendar clients."},
]

_settings = get_settings()

logging.basicConfig(
    level=_settings.log_level,
    format="[%(asctime)s] [%(levelname)-7s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    task = start_scheduler(get_settings())
    try:
        yield
    finally:
        await stop_scheduler(task)


app = FastAPI(
    title="Blinko ICS Sync",
    description="Publishes Blinko todo notes as a subscribable iCalendar feed.",
    version="0.1.0",
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_body(error: str, message: str, detail=None) -> dict:
    return {"error": error, "message": message, "detail": detail}


# Global exception handlers for consistent JSON errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "detail": [... pydantic/fastapi error details ...],
            "message": "Request validation failed"
        }
    """
    return JSONResponse(
        status_code=422,
        content=_error_body("ValidationError", "Request validation failed", jsonable_encoder(exc.errors())),
    )


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
    """The note API returned something that is not a list of todos."""
    return JSONResponse(status_code=400, content=_error_body("InvalidInput", str(exc)))


@app.exception_handler(NoteApiError)
async def note_api_error_handler(request: Request, exc: NoteApiError) -> JSONResponse:
    """
    Map note API failures: configuration problems are ours (500), upstream failures are 502.
    """
    if isinstance(exc, NoteApiConfigError):
        return JSONResponse(status_code=500, content=_error_body("NoteApiConfigError", str(exc)))
    return JSONResponse(
        status_code=502,
        content=_error_body("NoteApiError", str(exc), {"upstreamStatus": exc.status_code}),
    )


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health.
    """
    return {"message": "Healthy", "backend": _settings.persistence_backend}


# Include routers; the feed download route matches any path segment, so it goes last
app.include_router(sync_router.router)
app.include_router(verify_router.router)
app.include_router(files_router.router)
