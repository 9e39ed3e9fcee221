import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from rentals.api.dependencies import get_engine
from rentals.api.routers.health import router as health_router
from rentals.api.routers.items import router as items_router
from rentals.api.routers.ratings import router as ratings_router
from rentals.api.routers.requests import router as requests_router
from rentals.config import get_settings
from rentals.domain.errors import DomainError
from rentals.infrastructure.db.engine import create_schema

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "REQUEST_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "ITEM_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CALENDAR_CONFLICT": status.HTTP_409_CONFLICT,
    "INVALID_STATE_TRANSITION": status.HTTP_409_CONFLICT,
    "DUPLICATE_REQUEST": status.HTTP_409_CONFLICT,
    "OPTIMISTIC_LOCK_ERROR": status.HTTP_409_CONFLICT,
    "ITEM_UNAVAILABLE": status.HTTP_409_CONFLICT,
    "INVALID_DATE_RANGE": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "VALIDATION_ERROR": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "INVALID_PRICE": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "INVALID_SCORE": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "RECORD_DECODE_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.use_in_memory:
        yield
        return
    engine = get_engine()
    await create_schema(engine)
    yield
    await engine.dispose()

app = FastAPI(
    title="Rental Ledger API",
    version="0.1.0",
    lifespan=lifespan
)


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    status_code = ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST)
    if status_code >= 500:
        logger.error(
            "Stored record could not be decoded",
            exc_info=exc,
            extra={"code": exc.code, "path": request.url.path},
        )
    else:
        logger.info(
            "Domain error",
            extra={"code": exc.code, "path": request.url.path, "method": request.method},
        )
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "code": exc.code})


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler to prevent stack trace exposure to clients.
    Unhandled exceptions are logged with an error_id the client can report.
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception occurred",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "method": request.method,
            "client_host": request.client.host if request.client else None,
        }
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "message": "An unexpected error occurred. Please contact support with the error_id if the issue persists."
        }
    )


app.include_router(health_router, tags=["Health"])
app.include_router(items_router, prefix="/api/v1", tags=["Items"])
app.include_router(requests_router, prefix="/api/v1", tags=["Requests"])
app.include_router(ratings_router, prefix="/api/v1", tags=["Ratings"])
