"""
Route handlers for health, model listing and runtime diagnostics.
"""
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from config import Config
from models.api_models import HealthResponse, LogLevelRequest, ModelInfo
from services.health import ConnectionMonitor, get_connection_monitor, now_ms
from services.model_registry import ModelRegistry
from utils.logger import get_logger, set_log_level

router = APIRouter(prefix="/api")
logger = get_logger("routes.health")


@router.get("/health", response_model=HealthResponse, response_model_exclude_none=True)
async def health(monitor: ConnectionMonitor = Depends(get_connection_monitor)):
    """Local model server status with troubleshooting recommendations."""
    connection = await monitor.get_status_with_refresh()
    return HealthResponse(
        lmStudio=connection,
        recommendations=monitor.get_recommendations(connection),
        timestamp=now_ms()
    )


@router.get("/models", response_model=list[ModelInfo])
async def list_models():
    """List the selectable models."""
    return [
        ModelInfo(
            display_name=model.display_name,
            api_name=model.api_name,
            provider=model.provider.value,
            supports_images=model.supports_images,
            supports_web=model.supports_web
        )
        for model in ModelRegistry.list_models()
    ]


@router.post("/debug/log-level", include_in_schema=Config.is_development())
async def change_log_level(request: LogLevelRequest):
    """Change the log level at runtime. Available in development only."""
    if not Config.is_development():
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": "Not found"})

    try:
        set_log_level(request.level or "")
    except ValueError as e:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": str(e)})

    logger.info(f"Log level changed to {request.level}")
    return {"message": f"Log level set to {request.level}", "level": request.level}

