# fintrack/main.py
import os
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from fintrack.api.v1.api import api_router
from fintrack.core.config import Settings, get_settings
from fintrack.core.database import AppContext, Base
from fintrack.core.errors import AppError, InternalError
from fintrack.crud.category import seed_default_categories
import fintrack.models  # noqa: F401  registers the tables on Base.metadata

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _validation_message(exc: RequestValidationError) -> str:
    """First field error, e.g. ``amount: Input should be greater than or equal to 0.01``"""
    errors = exc.errors()
    if not errors:
        return "Invalid input"
    first = errors[0]
    location = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    message = first.get("msg", "Invalid input")
    return f"{location}: {message}" if location else message


async def init_database(context: AppContext) -> None:
    """Create tables when asked to, then make sure the system categories exist"""
    if context.settings.AUTO_CREATE_TABLES:
        async with context.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("✅ Database tables created")

    async with context.session_factory() as session:
        await seed_default_categories(session)
        await session.commit()


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if isinstance(exc, InternalError):
            logger.error(f"Internal error on {request.method} {request.url.path}: {exc.detail}")
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return error_response(400, _validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
        return error_response(500, "Database error")

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        return error_response(500, "Internal server error")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    context = AppContext.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_database(context)
        logger.info(f"✅ {settings.APP_NAME} started ({settings.ENVIRONMENT})")
        yield
        await context.engine.dispose()
        logger.info("Database engine disposed")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Authentication", "description": "Register, log in and inspect the current token"},
            {"name": "User Management", "description": "User profile operations"},
        ],
    )
    app.state.context = context

    # CORS Configuration
    origins = [
        settings.FRONTEND_URL,
        "http://localhost:3000",  # Local development
    ]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # ------------------------------------------------------------
    # ROOT ENDPOINT
    # ------------------------------------------------------------
    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information"""
        return {"success": True, "message": f"{settings.APP_NAME} is running!", "version": settings.VERSION}

    # ------------------------------------------------------------
    # HEALTH CHECK ENDPOINT
    # ------------------------------------------------------------
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Liveness plus a database round trip"""
        try:
            async with context.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            database = "connected"
        except SQLAlchemyError as e:
            logger.warning(f"Health check database failure: {e}")
            database = "unavailable"

        return {
            "success": True,
            "data": {
                "status": "healthy" if database == "connected" else "degraded",
                "database": database,
                "version": settings.VERSION,
                "environment": settings.ENVIRONMENT,
            },
        }

    # ------------------------------------------------------------
    # BUSINESS LOGIC ROUTES
    # ------------------------------------------------------------
    app.include_router(api_router, prefix="/api/v1")

    return app


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("fintrack.main:create_app", factory=True, host="0.0.0.0", port=port, reload=False)
