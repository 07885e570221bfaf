from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from aliases.core.config import settings
from aliases.core.exceptions import (
    AliasesError,
    BackendError,
    BodyParseError,
    CorruptDefinition,
    DefinitionExists,
    DefinitionNotFound,
    DefinitionValidationError,
    EmptyAlias,
    MaxAttemptsReached,
)
from aliases.core.logging_config import configure_logging
from aliases.db.Connection import database
from aliases.api import aliases, definitions
from aliases.routers import health

logger = configure_logging()

# Checked in order; the first matching class decides the response status.
ERROR_STATUS = (
    (DefinitionValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (EmptyAlias, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (BodyParseError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (DefinitionExists, status.HTTP_409_CONFLICT),
    (DefinitionNotFound, status.HTTP_404_NOT_FOUND),
    (MaxAttemptsReached, status.HTTP_503_SERVICE_UNAVAILABLE),
    (BackendError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (CorruptDefinition, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Application '{settings.PROJECT_NAME}' starting up.")
    database.verify_redis_connection()
    yield
    logger.info("Shutting down gracefully...")
    database.pool.disconnect()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Idempotent, collision-free aliases for internal identifiers",
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(definitions.router)
app.include_router(aliases.router)


@app.exception_handler(AliasesError)
async def aliases_exception_handler(request: Request, exc: AliasesError):
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for cls, status_code in ERROR_STATUS:
        if isinstance(exc, cls):
            code = status_code
            break

    if code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({code}): {exc}")
    return JSONResponse(status_code=code, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
