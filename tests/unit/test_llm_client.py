import httpx
import pytest
from unittest.mock import patch

from config import Config
from models.api_models import ApiSettings
from services.llm_client import LLMClient
from utils.errors import ErrorKind, ProviderError


@pytest.fixture
def patched_llm(llm_client_builder):
    def _patch():
        return patch(
            "services.llm_client.HTTPClientManager.get_llm_client",
            return_value=llm_client_builder.build()
        )
    return _patch


@pytest.mark.anyio
async def test_complete_posts_openai_compatible_body(llm_client_builder, patched_llm):
    llm_client_builder.set_default("<think>hmm</think>Bonjour!")

    with patched_llm():
        content = await LLMClient.complete(
            "Llama 3.1 8b Instruct",
            [{"role": "user", "content": "Say hello in French"}],
            ApiSettings(temperature=0.3, max_tokens=256)
        )

    assert content == "Bonjour!"
    request = llm_client_builder.requests[0]
    assert request["url"] == Config.DEFAULT_API_URL
    assert request["json"] == {
        "model": "meta-llama-3.1-8b-instruct",
        "messages": [{"role": "user", "content": "Say hello in French"}],
        "temperature": 0.3,
        "max_tokens": 256,
        "stream": False,
    }


@pytest.mark.anyio
async def test_complete_explicit_temperature_overrides_settings(llm_client_builder, patched_llm):
    with patched_llm():
        await LLMClient.complete("Qwen3 4b", [], ApiSettings(temperature=0.9), temperature=0.1)

    assert llm_client_builder.requests[0]["json"]["temperature"] == 0.1


@pytest.mark.anyio
async def test_complete_retries_server_errors(llm_client_builder, patched_llm, no_retry_sleep):
    """Given a 503 followed by success, the call should be retried once and succeed."""
    llm_client_builder.set_response(1, "overloaded", status_code=503)
    llm_client_builder.set_default("recovered")

    with patched_llm():
        content = await LLMClient.complete("Qwen3 4b", [{"role": "user", "content": "hi"}])

    assert content == "recovered"
    assert llm_client_builder.call_count == 2
    no_retry_sleep.assert_awaited_once_with(Config.RETRY_INITIAL_DELAY)


@pytest.mark.anyio
async def test_complete_does_not_retry_auth_errors(llm_client_builder, patched_llm, no_retry_sleep):
    llm_client_builder.set_response(1, "invalid api key", status_code=401)

    with patched_llm():
        with pytest.raises(ProviderError) as exc_info:
            await LLMClient.complete("GPT-4o Mini", [{"role": "user", "content": "hi"}])

    assert exc_info.value.kind is ErrorKind.AUTH
    assert "invalid api key" in str(exc_info.value)
    assert llm_client_builder.call_count == 1


@pytest.mark.anyio
async def test_complete_wraps_transport_errors(llm_client_builder, patched_llm, no_retry_sleep):
    request = httpx.Request("POST", Config.DEFAULT_API_URL)
    for call_num in (1, 2, 3):
        llm_client_builder.set_response(call_num, error=httpx.ConnectError("refused", request=request))

    with patched_llm():
        with pytest.raises(ProviderError) as exc_info:
            await LLMClient.complete("Qwen3 4b", [{"role": "user", "content": "hi"}])

    assert exc_info.value.kind is ErrorKind.NETWORK
    assert llm_client_builder.call_count == Config.MAX_RETRIES


@pytest.mark.parametrize("payload", [
    {},
    {"choices": []},
    {"choices": [{"message": {}}]},
    {"choices": [{"text": "legacy"}]},
])
def test_parse_completion_rejects_malformed_payloads(payload):
    with pytest.raises(ProviderError) as exc_info:
        LLMClient.parse_completion(payload)

    assert exc_info.value.kind is ErrorKind.VALIDATION
