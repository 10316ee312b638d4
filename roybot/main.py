from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from contextlib import asynccontextmanager
import logging

from roybot.core.utils.rate_limiter import limiter
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from roybot.core.config import settings, setup_logging
from roybot.db.chat_log import ChatLogStore
from roybot.db.exceptions import DatabaseConnectionError, DatabaseError, InvalidFieldError
from roybot.db.session import ConnectionManager
from roybot.routers.chat import router as chat_router
from roybot.routers.entries import conversations_router, exercises_router
from roybot.routers.users import router as users_router
from roybot.services.ai_provider import AnthropicProvider

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Owns the process-wide resources.

    - On startup: connection pool, chat log store, AI provider client.
    - On shutdown: closes all of them.
    """
    logger.info("Starting ROY API")
    app.state.db = ConnectionManager.from_settings(settings)
    app.state.chat_log = ChatLogStore.from_settings(settings)
    app.state.ai_provider = AnthropicProvider.from_settings(settings)

    if settings.CREATE_TABLES:
        await app.state.db.create_all()
        await app.state.chat_log.create_all()
    await app.state.db.health_check()

    yield

    logger.info("Shutting down ROY API")
    if app.state.ai_provider is not None:
        await app.state.ai_provider.aclose()
    await app.state.chat_log.dispose()
    await app.state.db.dispose()

app = FastAPI(
    title="ROY API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

setup_logging(settings.LOG_LEVEL, settings.LOG_DIR)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Raw database errors stay in the server log, clients get a static message

@app.exception_handler(InvalidFieldError)
async def invalid_field_handler(request: Request, exc: InvalidFieldError):
    return JSONResponse(
        status_code=422,
        content={"detail": exc.message, "fields": list(exc.fields)},
    )

@app.exception_handler(DatabaseConnectionError)
async def database_connection_handler(request: Request, exc: DatabaseConnectionError):
    logger.error(f"Database unavailable on {request.url.path}: {exc!r} (cause: {exc.__cause__!r})")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Service temporarily unavailable. Please try again later."},
    )

@app.exception_handler(DatabaseError)
async def database_error_handler(request: Request, exc: DatabaseError):
    logger.error(f"Database error on {request.url.path}: {exc!r} (cause: {exc.__cause__!r})")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error. Please try again later."},
    )

app.include_router(chat_router)
app.include_router(users_router)
app.include_router(conversations_router)
app.include_router(exercises_router)

@app.get("/", response_class=PlainTextResponse)
@limiter.limit("10/minute")
async def root(request: Request):
    """
    Liveness check.
    """
    return "ROY API is up and running"

@app.get("/healthz")
async def health_check(request: Request):
    database = await request.app.state.db.health_check()
    return {"status": "ok" if database else "degraded", "database": database}
