import asyncio
import pytest
from unittest.mock import AsyncMock, patch

from config import Config
from models.api_models import ApiSettings
from services.title_generator import TitleGenerator
from utils.errors import ErrorKind, ProviderError


@pytest.fixture
def generator(store):
    return TitleGenerator(store, delay=0)


@pytest.mark.parametrize("raw, expected", [
    ("<think>short title</think>capital of france", "Capital of france"),
    ('"Paris Question"', "Paris Question"),
    ("A title that is definitely longer than thirty characters", "A title that is definitely ..."),
    ("<think>only thoughts</think>", Config.FALLBACK_CHAT_TITLE),
])
def test_finalize_title(raw, expected):
    assert TitleGenerator.finalize_title(raw) == expected


@pytest.mark.parametrize("message, expected", [
    ("What is the capital of France?", "What the capital"),
    ("Hi, do it", "Hi, do it"),
    ("", Config.FALLBACK_CHAT_TITLE),
])
def test_fallback_title(message, expected):
    assert TitleGenerator.fallback_title(message) == expected


def test_finalize_title_respects_max_length():
    assert len(TitleGenerator.finalize_title("x" * 100)) == Config.TITLE_MAX_LENGTH


@pytest.mark.anyio
async def test_scheduled_job_updates_default_title(generator, store, chat_with_messages):
    """Given a chat with the default title, the scheduled job should set the generated title."""
    with patch("services.title_generator.LLMClient.complete", new_callable=AsyncMock,
               return_value="french capital"):
        task = generator.schedule(chat_with_messages.id, "What is the capital of France?")
        title = await task

    assert title == "French capital"
    assert store.get_chat(chat_with_messages.id).title == "French capital"


@pytest.mark.anyio
async def test_scheduled_job_uses_fallback_when_model_fails(generator, store, chat_with_messages):
    with patch("services.title_generator.LLMClient.complete", new_callable=AsyncMock,
               side_effect=ProviderError("down", ErrorKind.NETWORK)):
        await generator.schedule(chat_with_messages.id, "What is the capital of France?")

    assert store.get_chat(chat_with_messages.id).title == "What the capital"


@pytest.mark.anyio
async def test_generate_fallback_is_capitalized_and_capped():
    """Given a failing model, the fallback title should get the same capitalization and length cap."""
    with patch("services.title_generator.LLMClient.complete", new_callable=AsyncMock,
               side_effect=ProviderError("down", ErrorKind.NETWORK)):
        title = await TitleGenerator.generate("extraordinarily longwinded conversation about things")

    assert title == "Extraordinarily longwinded ..."
    assert len(title) == Config.TITLE_MAX_LENGTH


@pytest.mark.anyio
async def test_finished_jobs_are_forgotten(generator, chat_with_messages):
    """Given a completed job, the generator should no longer track it."""
    with patch("services.title_generator.LLMClient.complete", new_callable=AsyncMock,
               return_value="french capital"):
        task = generator.schedule(chat_with_messages.id, "What is the capital of France?")
        assert await generator.wait(chat_with_messages.id) == "French capital"

    await asyncio.sleep(0)

    assert task.done()
    assert generator.pending() == []
    assert await generator.wait(chat_with_messages.id) is None


@pytest.mark.anyio
async def test_scheduled_job_keeps_title_renamed_meanwhile(store, chat_with_messages):
    generator = TitleGenerator(store, delay=0.01)

    with patch("services.title_generator.LLMClient.complete", new_callable=AsyncMock,
               return_value="generated"):
        task = generator.schedule(chat_with_messages.id, "What is the capital of France?")
        store.update_chat(chat_with_messages.id, title="My own title")
        await task

    assert store.get_chat(chat_with_messages.id).title == "My own title"


@pytest.mark.anyio
async def test_scheduled_job_skips_deleted_chat(generator, store, chat_with_messages):
    with patch("services.title_generator.LLMClient.complete", new_callable=AsyncMock,
               return_value="generated"):
        task = generator.schedule(chat_with_messages.id, "question")
        store.delete_chat(chat_with_messages.id)
        assert await task is None


def test_should_generate_only_for_first_user_message(generator, store, chat_with_messages):
    assert generator.should_generate(chat_with_messages.id, ApiSettings()) is True
    assert generator.should_generate(chat_with_messages.id, ApiSettings(auto_generate_title=False)) is False

    store.create_message(chat_with_messages.id, "Second question")
    assert generator.should_generate(chat_with_messages.id, ApiSettings()) is False


def test_should_generate_skips_custom_titles(generator, store, chat_with_messages):
    store.update_chat(chat_with_messages.id, title="Custom")
    assert generator.should_generate(chat_with_messages.id, None) is False


@pytest.mark.anyio
async def test_cancel_all_stops_pending_jobs(store, chat_with_messages):
    generator = TitleGenerator(store, delay=10)

    generator.schedule(chat_with_messages.id, "question")
    await asyncio.sleep(0)
    assert generator.pending() == [chat_with_messages.id]

    await generator.cancel_all()

    assert generator.pending() == []
    assert store.get_chat(chat_with_messages.id).title == Config.DEFAULT_CHAT_TITLE
