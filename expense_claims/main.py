"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from expense_claims.config import settings
from expense_claims.database import engine, init_db, close_db, get_db
from expense_claims.api import claims, documents
from expense_claims.middleware import LoggingMiddleware
from expense_claims.utils.document_store import DocumentStore, get_document_store
from expense_claims.utils.logging_config import setup_logging, get_logger
from expense_claims.utils.rate_limit import limiter
from expense_claims.utils.readiness import wait_for_database
from expense_claims.exceptions import ExpenseClaimsException, StorageUnavailableException
from expense_claims.exception_handlers import (
    expense_claims_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    sqlalchemy_exception_handler,
    generic_exception_handler,
)

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gate startup on the database, then prepare the schema.

    The server only starts accepting requests once this yields, so no
    request can reach an uninitialized schema.

    Args:
        app: FastAPI application instance
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    try:
        await wait_for_database(
            engine,
            max_attempts=settings.DB_READY_MAX_ATTEMPTS,
            interval=settings.DB_READY_INTERVAL_SECONDS,
        )
    except StorageUnavailableException:
        logger.critical("Startup aborted: database is unavailable")
        await close_db(engine)
        raise

    if settings.AUTO_CREATE_SCHEMA:
        await init_db(engine)

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")
    await close_db(engine)
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Employee expense claim submission and review service",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter state
app.state.limiter = limiter

# Register global exception handlers
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(ExpenseClaimsException, expense_claims_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LoggingMiddleware)


@app.get("/health", tags=["health"])
async def health_check(
    db: AsyncSession = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    """
    Report database connectivity and upload directory state.

    Returns:
        200 when the database answers, 503 otherwise
    """
    health_status = {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": {"connected": False, "status": "unknown"},
        "storage": {"available": False, "path": str(store.root_dir)},
    }

    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        health_status["database"]["connected"] = True
        health_status["database"]["status"] = "healthy"
    except SQLAlchemyError as e:
        health_status["status"] = "unhealthy"
        health_status["database"]["status"] = f"error: {str(e)}"
        logger.error(f"Health check - database error: {str(e)}")

    if store.root_dir.is_dir():
        health_status["storage"]["available"] = True
    else:
        if health_status["status"] == "healthy":
            health_status["status"] = "degraded"
        logger.warning(f"Health check - upload directory missing: {store.root_dir}")

    status_code = 503 if health_status["status"] == "unhealthy" else 200
    return JSONResponse(status_code=status_code, content=health_status)


@app.get("/", tags=["root"])
async def root():
    """Service banner."""
    return JSONResponse(
        content={
            "message": f"Welcome to {settings.APP_NAME} API",
            "version": settings.APP_VERSION,
            "docs": "/docs",
        }
    )


# Include routers
app.include_router(claims.router, prefix=settings.API_PREFIX)
app.include_router(documents.router, prefix=settings.API_PREFIX)

# Promoted documents are served as static files
app.mount(
    settings.UPLOADS_URL_PREFIX,
    StaticFiles(directory=str(get_document_store().root_dir)),
    name="uploads",
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "expense_claims.main:app",
        host="0.0.0.0",
        port=3007,
        reload=settings.DEBUG,
        timeout_graceful_shutdown=30,
    )
