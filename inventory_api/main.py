from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from inventory_api.api import auth_router, chat_router, products_router
from inventory_api.config import get_settings
from inventory_api.core.exceptions import (
    AppError, ConfigurationError, INTERNAL_ERROR_MESSAGE, public_detail, status_code_for
)
from inventory_api.models.database import init_db
from inventory_api.services.ai_client import build_text_generator
from inventory_api.services.memory import ConversationMemory

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Missing dependencies stop a production process; development keeps going
    try:
        init_db()
    except SQLAlchemyError:
        if settings.is_production:
            raise
        logger.warning("Database is not reachable; requests will fail until it is", exc_info=True)

    try:
        app.state.text_generator = build_text_generator(settings)
    except ConfigurationError as exc:
        if settings.is_production:
            raise
        logger.warning("AI assistant disabled: %s", exc.detail)
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Per-user product inventory with an AI assistant",
    version=settings.VERSION,
    lifespan=lifespan
)
app.state.conversation_memory = ConversationMemory(settings.CONVERSATION_HISTORY_LIMIT)
app.state.text_generator = None

# Cookies carry the session, so origins must be explicit
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Exception handlers
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=status_code_for(exc),
        content={"detail": public_detail(exc)}
    )

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = "Invalid request"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{location}: {first.get('msg')}" if location else first.get("msg", detail)
    return JSONResponse(status_code=400, content={"detail": detail})

@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"detail": INTERNAL_ERROR_MESSAGE}
    )

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": INTERNAL_ERROR_MESSAGE}
    )

# Include routers
app.include_router(auth_router, prefix=f"{settings.API_PREFIX}/auth", tags=["auth"])
app.include_router(products_router, prefix=f"{settings.API_PREFIX}/products", tags=["products"])
app.include_router(chat_router, prefix=f"{settings.API_PREFIX}/analytics", tags=["analytics"])

@app.get("/")
async def root():
    return {"message": "Welcome to the Inventory API"}

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "ai_configured": bool(settings.GEMINI_API_KEY),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
