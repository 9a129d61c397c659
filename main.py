"""
LLM Chat Bridge - FastAPI application proxying chat turns to OpenAI-compatible LLM endpoints.
Featuring in-memory chat storage, response caching, Wikipedia context augmentation and background title generation.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Config
from middleware import RequestLoggingMiddleware
from routes import actions, chats, health, messages
from services.health import ConnectionMonitor
from services.store import ChatStore
from services.title_generator import TitleGenerator
from utils.cache import all_caches
from utils.http_client import HTTPClientManager
from utils.logger import app_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    app.state.store = ChatStore()
    app.state.title_generator = TitleGenerator(app.state.store)
    app.state.monitor = ConnectionMonitor()

    for cache in all_caches():
        cache.start_cleanup()

    if Config.HEALTH_MONITORING_ENABLED:
        app.state.monitor.start_monitoring()

    app_logger.info(f"{Config.APP_TITLE} started ({Config.ENV})")
    yield

    await app.state.title_generator.cancel_all()
    await app.state.monitor.stop_monitoring()
    for cache in all_caches():
        await cache.stop_cleanup()
    await HTTPClientManager.close_all()


def format_validation_errors(errors: list[dict]) -> str:
    """Join pydantic errors as 'field: message' pairs."""
    parts = []
    for error in errors:
        loc = [str(part) for part in error.get('loc', []) if part != 'body']
        field = ".".join(loc) or 'body'
        parts.append(f"{field}: {error.get('msg', 'Invalid value')}")
    return "Validation error: " + "; ".join(parts)


app = FastAPI(title=Config.APP_TITLE, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with user-friendly messages"""
    errors = exc.errors()
    app_logger.error(f"Validation error for {request.url}")
    app_logger.debug(f"Errors: {errors}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": format_validation_errors(errors)},
    )


#root endpoint
@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {"message": "LLM Chat Bridge Server is running"}

app.include_router(chats.router, tags=["chats"])
app.include_router(messages.router, tags=["messages"])
app.include_router(actions.router, tags=["actions"])
app.include_router(health.router, tags=["health"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
