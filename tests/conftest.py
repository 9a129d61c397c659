import pytest
from unittest.mock import patch


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def clear_caches():
    """Global caches must not leak entries between tests."""
    from utils.cache import all_caches
    for cache in all_caches():
        cache.clear()
    yield
    for cache in all_caches():
        cache.clear()


@pytest.fixture(autouse=True)
def no_delays(monkeypatch):
    """Remove rate-limit pauses so tests run instantly."""
    from config import Config
    monkeypatch.setattr(Config, "WIKIPEDIA_REQUEST_DELAY", 0)
    monkeypatch.setattr(Config, "WIKIPEDIA_KEYWORD_DELAY", 0)


@pytest.fixture
def no_retry_sleep():
    """Patch the backoff sleep and expose the recorded delays."""
    with patch("utils.retry.asyncio.sleep") as mock_sleep:
        yield mock_sleep


@pytest.fixture
def llm_client_builder():
    from tests.fixtures.mock_clients import LLMClientBuilder
    return LLMClientBuilder()


@pytest.fixture
def mock_llm_client(llm_client_builder):
    """LLM client answering every request with the same text."""
    return llm_client_builder.build()


@pytest.fixture
def mock_wikipedia_client():
    from tests.fixtures.mock_clients import WikipediaClientBuilder
    return WikipediaClientBuilder().build()


@pytest.fixture
def store():
    from services.store import ChatStore
    return ChatStore()


@pytest.fixture
def chat_with_messages(store):
    """A chat holding the welcome message and one user question."""
    from config import Config
    chat = store.create_chat(Config.DEFAULT_USER_ID, Config.DEFAULT_CHAT_TITLE)
    store.create_message(chat.id, Config.WELCOME_MESSAGE, is_user_message=False)
    store.create_message(chat.id, "What is the capital of France?")
    return chat


@pytest.fixture
def test_app(store, monkeypatch):
    """FastAPI app with all routers, a fresh store and no background monitoring."""
    from fastapi import FastAPI
    from fastapi.exceptions import RequestValidationError
    from main import validation_exception_handler
    from middleware import RequestLoggingMiddleware
    from routes import actions, chats, health, messages
    from services.health import ConnectionMonitor
    from services.title_generator import TitleGenerator

    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(chats.router)
    app.include_router(messages.router)
    app.include_router(actions.router)
    app.include_router(health.router)

    app.state.store = store
    app.state.title_generator = TitleGenerator(store, delay=0)
    app.state.monitor = ConnectionMonitor()
    return app


@pytest.fixture
def configured_app(test_app, mock_llm_client):
    """Test client with the LLM provider mocked out."""
    from fastapi.testclient import TestClient

    with patch("services.llm_client.HTTPClientManager.get_llm_client", return_value=mock_llm_client), \
         TestClient(test_app) as client:
        yield client
