"""
Provider routing: resolves the outbound URL and headers for a model.
"""
import re
from typing import Optional

from config import Config
from models.api_models import ApiSettings
from models.chat_models import ApiConfiguration, Provider
from services.model_registry import ModelRegistry
from utils.constants import Patterns
from utils.logger import get_logger

logger = get_logger("provider")


def _completions_url(base_url: str) -> str:
    return base_url.rstrip('/') + '/chat/completions'


def configure_api_for_provider(model_name: Optional[str], settings: Optional[ApiSettings] = None) -> ApiConfiguration:
    """
    Build the URL and headers for a chat-completions request.

    A missing API key is not an error: the request goes out unauthenticated
    and the provider rejects it.

    Args:
        model_name: Display or API name of the model
        settings: User settings carrying base URLs and keys

    Returns:
        ApiConfiguration with url and headers
    """
    settings = settings or ApiSettings()
    provider = ModelRegistry.get_provider(model_name)
    headers = {"Content-Type": "application/json"}

    if provider == Provider.OPENROUTER:
        url = _completions_url(settings.open_router_base_url or Config.OPENROUTER_BASE_URL)
        api_key = settings.open_router_api_key or Config.OPENROUTER_API_KEY
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
            headers["HTTP-Referer"] = Config.OPENROUTER_REFERER
            headers["X-Title"] = Config.OPENROUTER_TITLE

    elif provider == Provider.DEEPSEEK:
        url = _completions_url(settings.deepseek_base_url or Config.DEEPSEEK_BASE_URL)
        api_key = settings.deepseek_api_key or Config.DEEPSEEK_API_KEY
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

    else:
        url = settings.api_url or Config.DEFAULT_API_URL

    if "Authorization" not in headers and provider != Provider.LOCAL:
        logger.warning(f"No API key for {provider.value}; sending unauthenticated request")

    return ApiConfiguration(url=url, headers=headers)


def remove_thinking_tags(text: str) -> str:
    """Remove <think>...</think> reasoning spans and any stray think tags."""
    if not text:
        return ""
    text = re.sub(Patterns.THINK_BLOCK, '', text)
    text = re.sub(Patterns.THINK_TAG, '', text)
    return text.strip()
