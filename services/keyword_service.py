"""
Keyword extraction with an LLM.
Turns a free-form question into 2-4 Wikipedia search terms.
"""
import json
import re
from typing import Optional

from config import Config
from models.api_models import ApiSettings
from services.llm_client import LLMClient
from services.provider import remove_thinking_tags
from utils.cache import get_keyword_cache
from utils.constants import KEYWORD_EXTRACTION_PROMPT, Patterns
from utils.logger import get_logger

logger = get_logger("keywords")


class KeywordService:
    """Service for extracting search keywords from text."""

    @staticmethod
    def parse_keywords(content: str) -> list[str]:
        """
        Parse a model reply into keywords.

        Prefers the first JSON array in the reply; otherwise splits on commas
        and newlines. Quotes and thinking tags are stripped.
        """
        content = remove_thinking_tags(content)
        keywords: list = []

        match = re.search(Patterns.JSON_ARRAY, content)
        if match:
            try:
                keywords = json.loads(match.group(0))
            except json.JSONDecodeError:
                keywords = []

        if not match or not isinstance(keywords, list) or not keywords:
            keywords = [
                part.strip(' []') for part in re.split(Patterns.KEYWORD_SPLIT, content)
                if part.strip(' []')
            ]

        cleaned = []
        for keyword in keywords:
            if not isinstance(keyword, str):
                continue
            keyword = re.sub(Patterns.SURROUNDING_QUOTES, '', keyword).strip()
            keyword = remove_thinking_tags(keyword)
            if keyword:
                cleaned.append(keyword)

        return cleaned

    @staticmethod
    def fallback_keywords(text: str) -> list[str]:
        """First three words of the text."""
        return text.split()[:3]

    @staticmethod
    async def extract(text: str, model_name: Optional[str] = None,
                      settings: Optional[ApiSettings] = None) -> list[str]:
        """
        Ask the model for keywords describing the text.

        Args:
            text: Text to analyze
            model_name: Model used for extraction
            settings: User settings for provider routing

        Returns:
            Keywords without '#' prefix, possibly empty

        Raises:
            ProviderError: If the model call fails
        """
        cache = get_keyword_cache()
        cache_key = f"{model_name or ''}:{text}"
        cached = cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Keyword cache HIT for '{text[:40]}'")
            return list(cached)

        prompt = KEYWORD_EXTRACTION_PROMPT.format(text=text)

        content = await LLMClient.complete(
            model_name,
            [{"role": "user", "content": prompt}],
            settings,
            temperature=Config.KEYWORD_TEMPERATURE
        )

        keywords = KeywordService.parse_keywords(content)
        if not keywords:
            logger.warning(f"Model returned no usable keywords for '{text[:40]}'")
            return []

        logger.info(f"Extracted keywords: {', '.join(keywords)}")
        cache.set(cache_key, keywords)
        return keywords
