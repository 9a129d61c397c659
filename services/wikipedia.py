"""
Wikipedia context augmentation.
Extracts keywords from a question, searches Wikipedia for each one and
formats the combined results with numbered citations for the model prompt.
"""
import asyncio
import math
import re
from typing import Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from config import Config
from models.api_models import ApiSettings
from models.chat_models import WikipediaPage
from services.keyword_service import KeywordService
from utils.cache import get_wikipedia_cache
from utils.constants import Patterns, WIKIPEDIA_NO_RESULTS
from utils.errors import ErrorKind, ProviderError
from utils.html_parser import HTMLParser
from utils.http_client import HTTPClientManager
from utils.logger import get_logger

logger = get_logger("wikipedia")


class WikipediaService:
    """Service for searching Wikipedia and preparing results for the model."""

    @staticmethod
    def extract_hashtags(question: str) -> list[str]:
        """Hashtag phrases written by the user, in order, with '#' prefix."""
        return ['#' + tag.strip() for tag in re.findall(Patterns.HASHTAG, question) if tag.strip()]

    @staticmethod
    async def extract_keywords(question: str, model_name: Optional[str] = None,
                               settings: Optional[ApiSettings] = None) -> list[str]:
        """
        Resolve the search keywords for a question.

        Hashtags in the question win over model extraction. Keywords always
        carry a '#' prefix and at most Config.WIKIPEDIA_MAX_QUERIES are returned.
        If the model call fails the question itself becomes the only keyword.
        """
        hashtags = WikipediaService.extract_hashtags(question)
        if hashtags:
            logger.info(f"Using hashtags specified by the user: {', '.join(hashtags)}")
            return hashtags[:Config.WIKIPEDIA_MAX_QUERIES]

        logger.info("No hashtags found, using the model for extraction")
        try:
            keywords = await KeywordService.extract(question, model_name, settings)
        except ProviderError as e:
            logger.error(f"Error during keyword extraction: {e}")
            return ['#' + question[:Config.WIKIPEDIA_FALLBACK_QUERY_LENGTH]]

        formatted = [kw if kw.startswith('#') else '#' + kw for kw in keywords]
        return formatted[:Config.WIKIPEDIA_MAX_QUERIES]

    @staticmethod
    async def search(query: str, limit: int = Config.WIKIPEDIA_DEFAULT_LIMIT) -> list[WikipediaPage]:
        """
        Search Wikipedia pages.

        Args:
            query: Search text, optionally '#'-prefixed
            limit: Maximum number of pages

        Returns:
            Pages in relevance order

        Raises:
            ProviderError: On HTTP or transport failure, or a malformed body
        """
        clean_query = query[1:] if query.startswith('#') else query

        cache = get_wikipedia_cache()
        cache_key = f"{clean_query.lower()}:{limit}"
        cached = cache.get(cache_key)
        if cached is not None:
            logger.info(f"Cache HIT: wikipedia | '{clean_query[:50]}'")
            return list(cached)

        logger.info(f"Searching Wikipedia: \"{clean_query}\" (limit: {limit})")

        # Spacing requests out avoids 429 Too Many Requests
        await asyncio.sleep(Config.WIKIPEDIA_REQUEST_DELAY)

        client = HTTPClientManager.get_wikipedia_client()
        try:
            response = await client.get(
                Config.WIKIPEDIA_SEARCH_URL,
                params={"q": clean_query, "limit": limit}
            )
        except httpx.HTTPError as e:
            raise ProviderError.from_exception(e) from e

        if response.status_code != 200:
            logger.error(f"Wikipedia API error: {response.status_code}")
            raise ProviderError.from_status(response.status_code, response.text[:200])

        try:
            payload = response.json()
            pages = [WikipediaPage.model_validate(page) for page in payload.get("pages") or []]
        except (ValueError, AttributeError, ValidationError) as e:
            logger.error(f"Unexpected Wikipedia response for \"{clean_query}\": {e}")
            raise ProviderError(
                f"Invalid Wikipedia response: {e}", ErrorKind.VALIDATION, body=response.text[:200]
            ) from e

        if pages:
            logger.info(f"Found {len(pages)} results for \"{clean_query}\"")
        else:
            logger.warning(f"No results found for \"{clean_query}\"")

        cache.set(cache_key, pages)
        return pages

    @staticmethod
    async def search_with_keywords(
        question: str,
        limit: int = Config.WIKIPEDIA_DEFAULT_LIMIT,
        model_name: Optional[str] = None,
        settings: Optional[ApiSettings] = None
    ) -> list[WikipediaPage]:
        """
        Search Wikipedia once per extracted keyword and merge the results.

        Keywords are searched one after another with a pause in between.
        A failing keyword is skipped. Results are de-duplicated by page id
        and truncated to the overall limit.
        """
        try:
            keywords = await WikipediaService.extract_keywords(question, model_name, settings)
            logger.info(f"Extracted keywords: {', '.join(keywords)}")

            if not keywords:
                logger.warning("No keywords found, using the entire question")
                return await WikipediaService.search(question, limit)

            per_keyword_limit = math.ceil(limit / len(keywords))
            all_results: list[WikipediaPage] = []

            for keyword in keywords:
                await asyncio.sleep(Config.WIKIPEDIA_KEYWORD_DELAY)
                try:
                    results = await WikipediaService.search(keyword, per_keyword_limit)
                except ProviderError as e:
                    logger.error(f"Error in search for \"{keyword}\": {e}")
                    continue
                all_results.extend(results)

            unique_results = WikipediaService.deduplicate(all_results)[:limit]
            logger.info(f"Search completed: {len(unique_results)} unique combined results")
            return unique_results

        except Exception as e:
            logger.error(f"Error in Wikipedia search with keywords: {e}")
            logger.warning("Falling back to standard search using the entire question")
            # ProviderError from here is turned into the unavailable notice by the chat service
            return await WikipediaService.search(question, limit)

    @staticmethod
    def deduplicate(results: list[WikipediaPage]) -> list[WikipediaPage]:
        """Keep the first occurrence of each page id."""
        seen: set[int] = set()
        unique = []
        for result in results:
            if result.id not in seen:
                seen.add(result.id)
                unique.append(result)
        return unique

    @staticmethod
    def article_url(page: WikipediaPage) -> str:
        return Config.WIKIPEDIA_ARTICLE_URL + quote(page.key, safe="-_.!~*'()")

    @staticmethod
    def format_results_for_ai(results: list[WikipediaPage]) -> str:
        """
        Format search results as markdown context with a citations section.

        The citations list always has at least Config.WIKIPEDIA_MIN_CITATIONS
        lines; when there are fewer results the last one is repeated.
        """
        if not results:
            logger.warning("No results to format for AI")
            return WIKIPEDIA_NO_RESULTS

        lines = ["### Relevant Results from Wikipedia\n\n"]

        for index, result in enumerate(results, 1):
            url = WikipediaService.article_url(result)
            lines.append(f"{index}. **[{result.title}]({url})**\n\n")

            if result.description:
                lines.append(f"   *{result.description}*\n\n")

            if result.excerpt:
                lines.append(f"   {HTMLParser.clean_excerpt(result.excerpt)}\n\n")

            lines.append(f"   [Read the full article]({url})\n\n")

        lines.append("### Citations:\n")
        for index, result in enumerate(results, 1):
            lines.append(f"[{index}]: [{result.title}]({WikipediaService.article_url(result)})\n")

        last = results[-1]
        last_url = WikipediaService.article_url(last)
        for index in range(len(results) + 1, Config.WIKIPEDIA_MIN_CITATIONS + 1):
            lines.append(f"[{index}]: [{last.title}]({last_url})\n")

        lines.append("\n")
        formatted = "".join(lines)
        logger.debug(f"Formatted result: {len(formatted)} characters")
        return formatted
