"""
HTTP client utilities with connection pooling.
Provides reusable httpx clients for LLM providers and Wikipedia.
"""
import httpx
from config import Config


class HTTPClientManager:
    """Manages shared httpx clients with connection pooling."""

    _llm_client: httpx.AsyncClient | None = None
    _wikipedia_client: httpx.AsyncClient | None = None

    @classmethod
    def get_llm_client(cls) -> httpx.AsyncClient:
        """
        Get or create a shared httpx client for chat-completion requests.

        Features:
        - Connection pooling (reuses TCP connections)
        - No client-level timeout; callers apply a per-model deadline

        Returns:
            Configured httpx.AsyncClient for provider calls
        """
        if cls._llm_client is None:
            limits = httpx.Limits(
                max_connections=20,
                max_keepalive_connections=5,
                keepalive_expiry=30.0
            )

            cls._llm_client = httpx.AsyncClient(
                timeout=None,
                limits=limits,
                http2=True
            )

        return cls._llm_client

    @classmethod
    def get_wikipedia_client(cls) -> httpx.AsyncClient:
        """
        Get or create a shared httpx client for Wikipedia searches.

        Features:
        - Identifying User-Agent, as required by the Wikimedia API policy
        - Automatic redirect following

        Returns:
            Configured httpx.AsyncClient for Wikipedia requests
        """
        if cls._wikipedia_client is None:
            cls._wikipedia_client = httpx.AsyncClient(
                timeout=Config.WIKIPEDIA_TIMEOUT,
                follow_redirects=True,
                headers={"User-Agent": Config.WIKIPEDIA_USER_AGENT},
                http2=True
            )

        return cls._wikipedia_client

    @classmethod
    async def close_all(cls) -> None:
        """
        Close all managed clients and clean up connections.
        """
        if cls._llm_client is not None:
            await cls._llm_client.aclose()
            cls._llm_client = None

        if cls._wikipedia_client is not None:
            await cls._wikipedia_client.aclose()
            cls._wikipedia_client = None
