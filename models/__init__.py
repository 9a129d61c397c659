"""
Models package exports.
"""
from models.api_models import (
    ApiSettings,
    Chat,
    Message,
    CreateChatRequest,
    UpdateChatRequest,
    SendMessageRequest,
    SendMessageResponse,
    UpdateMessageRequest,
    ImproveTextRequest,
    ImproveTextResponse,
    ExtractKeywordsRequest,
    ExtractKeywordsResponse,
    ConnectionStatus,
    HealthResponse,
)
from models.chat_models import Provider, ModelConfig, ApiConfiguration, WikipediaPage

__all__ = [
    'ApiSettings',
    'Chat',
    'Message',
    'CreateChatRequest',
    'UpdateChatRequest',
    'SendMessageRequest',
    'SendMessageResponse',
    'UpdateMessageRequest',
    'ImproveTextRequest',
    'ImproveTextResponse',
    'ExtractKeywordsRequest',
    'ExtractKeywordsResponse',
    'ConnectionStatus',
    'HealthResponse',
    'Provider',
    'ModelConfig',
    'ApiConfiguration',
    'WikipediaPage',
]
