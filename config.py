"""
Configuration module for the LLM Chat Bridge application.
Handles environment variables and application settings.
"""
import os
import re
from dotenv import load_dotenv

from utils.logger import app_logger

load_dotenv()


class Config:
    """Application configuration class."""

    # Application Settings
    APP_TITLE: str = "LLM Chat Bridge"
    ENV: str = os.getenv("APP_ENV", "production")
    DEFAULT_USER_ID: int = 1
    DEFAULT_CHAT_TITLE: str = "New Chat"
    FALLBACK_CHAT_TITLE: str = "New conversation"
    WELCOME_MESSAGE: str = (
        "Good afternoon, how can I help you today?\n\n"
        "You can ask me anything. I'm here to help you find information, "
        "write content or solve problems."
    )

    # Provider endpoints
    DEFAULT_API_URL: str = os.getenv("LOCAL_API_URL", "http://127.0.0.1:1234/v1/chat/completions")
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    DEEPSEEK_BASE_URL: str = "https://api.deepseek.com/v1"
    OPENROUTER_REFERER: str = "https://localhost:3000"
    OPENROUTER_TITLE: str = "LLMChat"

    # Server-side fallback keys (request settings take precedence)
    OPENROUTER_API_KEY: str = os.getenv("OPENROUTER_API_KEY", "")
    DEEPSEEK_API_KEY: str = os.getenv("DEEPSEEK_API_KEY", "")

    # Completion defaults
    DEFAULT_TEMPERATURE: float = 0.7
    DEFAULT_MAX_TOKENS: int = -1
    KEYWORD_TEMPERATURE: float = 0.1

    # Timeouts (in seconds)
    DEFAULT_TIMEOUT: float = 3600.0
    LARGE_MODEL_TIMEOUT: float = 7200.0
    WIKIPEDIA_TIMEOUT: float = 15.0

    # Models at or above this many billion parameters get the long timeout
    LARGE_MODEL_THRESHOLD: float = 12.0

    # Retry policy
    MAX_RETRIES: int = 3
    RETRY_INITIAL_DELAY: float = 1.0

    # Wikipedia
    WIKIPEDIA_SEARCH_URL: str = "https://en.wikipedia.org/w/rest.php/v1/search/page"
    WIKIPEDIA_ARTICLE_URL: str = "https://en.wikipedia.org/wiki/"
    WIKIPEDIA_USER_AGENT: str = "LLMChatBridge/1.0 (https://localhost) httpx"
    WIKIPEDIA_DEFAULT_LIMIT: int = 10
    WIKIPEDIA_MAX_QUERIES: int = 3
    WIKIPEDIA_MIN_CITATIONS: int = 4
    WIKIPEDIA_REQUEST_DELAY: float = 0.5
    WIKIPEDIA_KEYWORD_DELAY: float = 1.0
    WIKIPEDIA_FALLBACK_QUERY_LENGTH: int = 50

    # Cache policies: (max_size, ttl seconds, cleanup interval seconds)
    RESPONSE_CACHE_POLICY = (100, 60 * 60, 5 * 60)
    KEYWORD_CACHE_POLICY = (50, 30 * 60, 5 * 60)
    WIKIPEDIA_CACHE_POLICY = (100, 24 * 60 * 60, 10 * 60)

    # Connection monitor
    HEALTH_MONITORING_ENABLED: bool = os.getenv("HEALTH_MONITORING", "true").lower() == "true"
    HEALTH_CHECK_INTERVAL: float = 30.0
    HEALTH_REQUEST_TIMEOUT: float = 5.0
    HEALTH_SLOW_LATENCY_MS: int = 5000

    # Title generation
    TITLE_GENERATION_DELAY: float = 0.5
    TITLE_MAX_LENGTH: int = 30
    TITLE_SOURCE_CHARS: int = 100

    @classmethod
    def extract_model_param_size(cls, model_name: str) -> float | None:
        """Extract parameter size from model name."""
        pattern = r'(\d+\.?\d*)b\b'
        match = re.search(pattern, model_name.lower())

        if match:
            return float(match.group(1))

        return None

    @classmethod
    def is_large_model(cls, model_name: str, threshold: float = LARGE_MODEL_THRESHOLD) -> bool:
        """Detect if the model is large (at or above threshold parameters)."""
        param_size = cls.extract_model_param_size(model_name)
        if param_size is not None:
            return param_size >= threshold

        return False

    @classmethod
    def get_request_timeout(cls, model_name: str, custom_timeout: float | None = None) -> float:
        """
        Get the outbound request deadline for a model.
        Large models get double the default.
        """
        if custom_timeout:
            return custom_timeout

        return cls.LARGE_MODEL_TIMEOUT if cls.is_large_model(model_name) else cls.DEFAULT_TIMEOUT

    @classmethod
    def is_development(cls) -> bool:
        return cls.ENV == "development"

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and log warnings for missing optional settings."""
        if not cls.OPENROUTER_API_KEY:
            app_logger.warning(
                "OPENROUTER_API_KEY not set; OpenRouter models need a key in the request settings"
            )

        if not cls.DEEPSEEK_API_KEY:
            app_logger.warning(
                "DEEPSEEK_API_KEY not set; Deepseek models need a key in the request settings"
            )


Config.validate()
