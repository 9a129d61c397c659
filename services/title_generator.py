"""
Background chat title generation.
"""
import asyncio
import re
from typing import Optional

from fastapi import Request

from config import Config
from models.api_models import ApiSettings
from services.llm_client import LLMClient
from services.provider import remove_thinking_tags
from services.store import ChatStore
from utils.constants import TITLE_PROMPT, Patterns
from utils.errors import ProviderError
from utils.logger import get_logger

logger = get_logger("titles")


class TitleGenerator:
    """
    Generates short chat titles from the first user message.

    Each running job is an asyncio.Task kept per chat id until it finishes,
    so callers can await or cancel it.
    """

    def __init__(self, store: ChatStore, delay: float = Config.TITLE_GENERATION_DELAY):
        self.store = store
        self.delay = delay
        self._tasks: dict[str, asyncio.Task] = {}

    @staticmethod
    def is_default_title(title: str) -> bool:
        return title in (Config.DEFAULT_CHAT_TITLE, Config.FALLBACK_CHAT_TITLE)

    @staticmethod
    def fallback_title(message: str) -> str:
        """First three significant words of the message, or its first three words."""
        words = re.sub(Patterns.PUNCTUATION, '', message).split()
        significant = [word for word in words if len(word) > 2][:3]
        if significant:
            return " ".join(significant)

        return " ".join(message.split()[:3]) or Config.FALLBACK_CHAT_TITLE

    @staticmethod
    def finalize_title(raw: str) -> str:
        """Strip thinking tags and quotes, capitalize, and cap the length."""
        title = remove_thinking_tags(raw)
        title = re.sub(Patterns.SURROUNDING_QUOTES, '', title).strip()
        if not title:
            return Config.FALLBACK_CHAT_TITLE

        title = title[0].upper() + title[1:]
        if len(title) > Config.TITLE_MAX_LENGTH:
            title = title[:Config.TITLE_MAX_LENGTH - 3] + "..."
        return title

    @staticmethod
    async def generate(message: str, model_name: Optional[str] = None,
                       settings: Optional[ApiSettings] = None) -> str:
        """Ask the model for a title, falling back to words of the message."""
        prompt = TITLE_PROMPT.format(message=message[:Config.TITLE_SOURCE_CHARS])
        try:
            raw = await LLMClient.complete(model_name, [{"role": "user", "content": prompt}], settings)
        except ProviderError as e:
            logger.warning(f"Title generation failed, using fallback: {e}")
            return TitleGenerator.finalize_title(TitleGenerator.fallback_title(message))

        return TitleGenerator.finalize_title(raw)

    def should_generate(self, chat_id: str, settings: Optional[ApiSettings]) -> bool:
        """True for the first user message of a chat that still has its default title."""
        if settings is not None and not settings.auto_generate_title:
            return False

        chat = self.store.get_chat(chat_id)
        if chat is None or not self.is_default_title(chat.title):
            return False

        return self.store.count_user_messages(chat_id) == 1

    def schedule(self, chat_id: str, message: str, model_name: Optional[str] = None,
                 settings: Optional[ApiSettings] = None) -> asyncio.Task:
        """Start title generation for a chat and return its task."""
        existing = self._tasks.get(chat_id)
        if existing is not None and not existing.done():
            return existing

        task = asyncio.create_task(self._run(chat_id, message, model_name, settings))
        self._tasks[chat_id] = task
        task.add_done_callback(lambda done: self._forget(chat_id, done))
        return task

    def _forget(self, chat_id: str, task: asyncio.Task) -> None:
        if self._tasks.get(chat_id) is task:
            del self._tasks[chat_id]

    async def _run(self, chat_id: str, message: str, model_name: Optional[str],
                   settings: Optional[ApiSettings]) -> Optional[str]:
        await asyncio.sleep(self.delay)

        title = await self.generate(message, model_name, settings)

        chat = self.store.get_chat(chat_id)
        if chat is None:
            logger.debug(f"Chat {chat_id} was deleted before its title was ready")
            return None
        if not self.is_default_title(chat.title):
            logger.debug(f"Chat {chat_id} was renamed meanwhile, keeping '{chat.title}'")
            return chat.title

        self.store.update_chat(chat_id, title=title)
        logger.info(f"Generated title for chat {chat_id}: '{title}'")
        return title

    def pending(self) -> list[str]:
        return [chat_id for chat_id, task in self._tasks.items() if not task.done()]

    async def wait(self, chat_id: str) -> Optional[str]:
        """Await the title job of a chat. Returns None when none is running."""
        task = self._tasks.get(chat_id)
        if task is None:
            return None
        return await task

    async def cancel_all(self) -> None:
        """Cancel every running title job."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()


def get_title_generator(request: Request) -> TitleGenerator:
    """FastAPI dependency returning the application's title generator."""
    return request.app.state.title_generator
