from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException
from contextlib import asynccontextmanager
import logging

from datetime import datetime
from lawconnect.core.config import settings
from lawconnect.core.logging import bind_request, setup_logging, unbind_request
from lawconnect.core.errors import (
    AppError,
    app_error_handler,
    duplicate_key_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)

# Configure logging
setup_logging(level=settings.LOG_LEVEL)
from lawconnect.db.mongodb import connect_to_mongo, close_mongo_connection, ensure_indexes
from lawconnect.services.ai import AIService
from lawconnect.api.api import api_router

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.mongo_client = await connect_to_mongo()
    await ensure_indexes(app.state.mongo_client[settings.DATABASE_NAME])
    app.state.ai_service = AIService()
    yield
    await app.state.ai_service.close()
    await close_mongo_connection(app.state.mongo_client)

def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        lifespan=lifespan
    )

    # Register Exception Handlers
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Set all CORS enabled origins
    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def bind_log_context(request: Request, call_next):
        token = bind_request(request.url.path)
        try:
            return await call_next(request)
        finally:
            unbind_request(token)

    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/health")
    async def health_check(request: Request):
        """
        Check the database connection and the AI client.
        """
        health_status = {
            "status": "healthy",
            "database_connected": False,
            "ai_client_ready": False,
            "timestamp": datetime.utcnow().isoformat()
        }

        # 1. Check MongoDB Connection
        try:
            client = getattr(request.app.state, "mongo_client", None)
            if client:
                await client.admin.command('ping')
                health_status["database_connected"] = True
            else:
                health_status["status"] = "unhealthy"
        except Exception as e:
            logger.error(f"Health check failed for MongoDB: {e}")
            health_status["status"] = "unhealthy"

        # 2. Check AI client
        ai_service = getattr(request.app.state, "ai_service", None)
        if ai_service and not ai_service.client.is_closed:
            health_status["ai_client_ready"] = True
        else:
            health_status["status"] = "unhealthy"

        if health_status["status"] == "unhealthy":
            return JSONResponse(status_code=503, content=health_status)

        return health_status

    return app

app = create_app()
