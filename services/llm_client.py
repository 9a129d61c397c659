"""
Client for OpenAI-compatible chat-completions endpoints.
"""
from typing import Optional

import httpx

from config import Config
from models.api_models import ApiSettings
from services.model_registry import ModelRegistry
from services.provider import configure_api_for_provider, remove_thinking_tags
from utils.errors import ErrorKind, ProviderError
from utils.http_client import HTTPClientManager
from utils.logger import get_logger
from utils.retry import retry_with_backoff, with_timeout

logger = get_logger("llm")


class LLMClient:
    """Sends chat-completion requests to the provider that serves a model."""

    @staticmethod
    def build_request_body(api_model_name: str, messages: list[dict], temperature: float,
                           max_tokens: int) -> dict:
        return {
            "model": api_model_name,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": False
        }

    @staticmethod
    def parse_completion(data: dict) -> str:
        """
        Extract the assistant text from a completion payload.

        Raises:
            ProviderError: If the payload has no choices[0].message.content
        """
        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices or not isinstance(choices, list):
            raise ProviderError("Invalid API response format: choices not found", ErrorKind.VALIDATION)

        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not content:
            raise ProviderError("Invalid API response format: message.content not found", ErrorKind.VALIDATION)

        return content

    @staticmethod
    async def complete(
        model_name: Optional[str],
        messages: list[dict],
        settings: Optional[ApiSettings] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None
    ) -> str:
        """
        Run one chat completion with deadline and retry policy applied.

        Args:
            model_name: Display or API name of the model
            messages: Conversation as role/content dicts
            settings: User settings (provider URLs, keys, defaults)
            temperature: Overrides settings.temperature
            max_tokens: Overrides settings.max_tokens
            timeout: Overrides the model-size based deadline

        Returns:
            Assistant text with thinking tags removed

        Raises:
            ProviderError: When the provider cannot produce an answer
        """
        settings = settings or ApiSettings()
        api_model_name = ModelRegistry.get_api_model_name(model_name)
        api_config = configure_api_for_provider(model_name, settings)
        deadline = Config.get_request_timeout(api_model_name, timeout)

        body = LLMClient.build_request_body(
            api_model_name,
            messages,
            settings.temperature if temperature is None else temperature,
            settings.max_tokens if max_tokens is None else max_tokens
        )

        async def attempt() -> str:
            client = HTTPClientManager.get_llm_client()
            try:
                response = await with_timeout(
                    client.post(api_config.url, json=body, headers=api_config.headers),
                    deadline
                )
            except httpx.HTTPError as e:
                raise ProviderError.from_exception(e) from e

            if response.status_code >= 400:
                logger.error(f"API error response: {response.status_code} {response.text[:200]}")
                raise ProviderError.from_status(response.status_code, response.text)

            try:
                data = response.json()
            except ValueError as e:
                raise ProviderError("Invalid API response: body is not JSON", ErrorKind.VALIDATION) from e

            return LLMClient.parse_completion(data)

        logger.info(f"Sending request to model: {api_model_name} ({len(messages)} messages)")
        content = await retry_with_backoff(attempt)
        content = remove_thinking_tags(content)
        logger.info(f"Response received from model {api_model_name}: {len(content)} characters")

        return content
