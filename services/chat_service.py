"""
Chat service containing core chat processing logic.
Handles context augmentation, provider calls and response post-processing.
"""
import re
from typing import Optional

from config import Config
from models.api_models import ApiSettings, Message
from services.keyword_service import KeywordService
from services.llm_client import LLMClient
from services.model_registry import ModelRegistry
from services.provider import remove_thinking_tags
from services.wikipedia import WikipediaService
from utils.cache import get_response_cache, make_cache_key
from utils.constants import (
    DEFAULT_SYSTEM_PROMPT,
    IMPROVE_TEXT_INLINE_PROMPT,
    IMPROVE_TEXT_SYSTEM_PROMPT,
    WIKIPEDIA_CONTEXT_PROMPT,
    WIKIPEDIA_UNAVAILABLE,
    Patterns
)
from utils.errors import ProviderError, user_facing_error
from utils.logger import get_logger

logger = get_logger("chat")


class ChatService:
    """Service for handling chat logic."""

    @staticmethod
    def build_messages(history: list[Message], system_prompt: Optional[str] = DEFAULT_SYSTEM_PROMPT) -> list[dict]:
        """Map stored messages to provider role/content dicts, oldest first."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        for message in history:
            messages.append({
                "role": "user" if message.is_user_message else "assistant",
                "content": message.content
            })

        return messages

    @staticmethod
    def clean_response(text: str) -> str:
        """Remove thinking tags and a trailing 'undefined' artifact."""
        text = remove_thinking_tags(text)
        return re.sub(Patterns.TRAILING_UNDEFINED, '', text).strip()

    @staticmethod
    def last_user_question(history: list[Message]) -> Optional[str]:
        for message in reversed(history):
            if message.is_user_message:
                return message.content
        return None

    @staticmethod
    async def get_web_context(question: str, model_name: Optional[str], settings: ApiSettings) -> str:
        """
        Wikipedia context for a question.

        Results supplied by the client are used as-is. Search failures never
        propagate; they degrade to a short notice in the prompt.
        """
        if settings.web_search_results:
            logger.info("Using web search results supplied with the request")
            return settings.web_search_results

        try:
            results = await WikipediaService.search_with_keywords(
                question, Config.WIKIPEDIA_DEFAULT_LIMIT, model_name, settings
            )
        except ProviderError as e:
            logger.error(f"Wikipedia search failed: {e}")
            return WIKIPEDIA_UNAVAILABLE
        except Exception as e:
            logger.exception(f"Unexpected error during Wikipedia search: {e}")
            return WIKIPEDIA_UNAVAILABLE

        return WikipediaService.format_results_for_ai(results)

    @staticmethod
    async def generate_ai_response(history: list[Message], model_name: Optional[str],
                                   settings: Optional[ApiSettings] = None) -> str:
        """
        Produce the assistant reply for a conversation.

        Args:
            history: Messages of the chat, oldest first, ending with the user turn
            model_name: Display or API name of the selected model
            settings: User settings sent with the request

        Returns:
            Reply text. Provider failures are returned as a user-facing message
            instead of raising.
        """
        settings = settings or ApiSettings()
        model = ModelRegistry.resolve(model_name)
        use_web = settings.web_search_enabled and model.supports_web

        conversation = ChatService.build_messages(history, system_prompt=None)
        cache = get_response_cache()
        cache_key = make_cache_key(conversation, model.api_name, use_web)

        cached = cache.get(cache_key)
        if cached is not None:
            logger.info(f"Cache HIT: response for {model.display_name}")
            return cached

        system_prompt = DEFAULT_SYSTEM_PROMPT
        question = ChatService.last_user_question(history)
        if use_web and question:
            context = await ChatService.get_web_context(question, model.display_name, settings)
            system_prompt += WIKIPEDIA_CONTEXT_PROMPT.format(wikipedia_results=context)

        if model.supports_system_prompt:
            messages = [{"role": "system", "content": system_prompt}] + conversation
        else:
            # Models without a system role get the instructions in the first user turn
            messages = ChatService._inline_system_prompt(conversation, system_prompt)

        try:
            content = await LLMClient.complete(model.display_name, messages, settings)
        except ProviderError as e:
            logger.error(f"Error calling {model.display_name}: {e}")
            return user_facing_error(e, model.display_name)

        content = ChatService.clean_response(content)
        if not content:
            logger.warning(f"Empty response from {model.display_name}")
            return user_facing_error(ProviderError("Empty response"), model.display_name)

        cache.set(cache_key, content)
        return content

    @staticmethod
    def _inline_system_prompt(conversation: list[dict], system_prompt: str) -> list[dict]:
        messages = [dict(message) for message in conversation]
        for message in messages:
            if message["role"] == "user":
                message["content"] = f"{system_prompt}\n\n{message['content']}"
                break
        else:
            messages.insert(0, {"role": "user", "content": system_prompt})
        return messages

    @staticmethod
    async def improve_text(text: str, model_name: Optional[str], settings: Optional[ApiSettings] = None,
                           temperature: Optional[float] = None) -> str:
        """
        Rewrite a prompt so that it is clearer and more specific.

        Raises:
            ProviderError: If the model call fails
        """
        model = ModelRegistry.resolve(model_name)

        if model.supports_system_prompt:
            messages = [
                {"role": "system", "content": IMPROVE_TEXT_SYSTEM_PROMPT},
                {"role": "user", "content": text}
            ]
        else:
            messages = [{"role": "user", "content": IMPROVE_TEXT_INLINE_PROMPT.format(text=text)}]

        logger.info(f"Improving text with {model.display_name}")
        improved = await LLMClient.complete(model.display_name, messages, settings, temperature=temperature)
        return ChatService.clean_response(improved)

    @staticmethod
    async def extract_keywords(text: str, model_name: Optional[str] = None,
                               settings: Optional[ApiSettings] = None) -> list[str]:
        """Keywords for a text; the first three words when the model is unavailable."""
        try:
            keywords = await KeywordService.extract(text, model_name, settings)
        except ProviderError as e:
            logger.error(f"Error extracting keywords: {e}")
            return KeywordService.fallback_keywords(text)

        return keywords or KeywordService.fallback_keywords(text)
