"""
Pydantic data models for API requests and responses.
JSON field names are camelCase; Python attributes are snake_case.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from config import Config


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiSettings(CamelModel):
    """User-controlled settings sent along with each request. Persisted client-side only."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    api_url: Optional[str] = None
    temperature: float = Config.DEFAULT_TEMPERATURE
    max_tokens: int = Config.DEFAULT_MAX_TOKENS
    stream: bool = False
    animation_speed: Optional[float] = None
    auto_generate_title: bool = True
    web_search_enabled: bool = False
    web_search_results: Optional[str] = None
    default_model: Optional[str] = None

    # OpenRouter settings
    open_router_api_key: Optional[str] = None
    open_router_base_url: Optional[str] = None

    # Deepseek settings
    deepseek_api_key: Optional[str] = None
    deepseek_base_url: Optional[str] = None


class Chat(CamelModel):
    """Chat record."""
    id: str
    user_id: int
    title: str
    created_at: datetime


class Message(CamelModel):
    """Chat message record."""
    id: int
    chat_id: str
    content: str
    is_user_message: bool
    created_at: datetime


class CreateChatRequest(CamelModel):
    title: str = Field(..., min_length=1)


class UpdateChatRequest(CamelModel):
    title: Optional[str] = Field(None, min_length=1)


class SendMessageRequest(CamelModel):
    """A user turn: persisted, answered by the selected model, answer persisted."""
    chat_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    is_user_message: bool = True
    model_name: Optional[str] = None
    api_settings: Optional[ApiSettings] = None


class SendMessageResponse(CamelModel):
    user_message: Message
    ai_response_message: Optional[Message] = None


class UpdateMessageRequest(CamelModel):
    content: str = Field(..., min_length=1)


class ImproveTextRequest(CamelModel):
    text: Optional[str] = None
    model_name: Optional[str] = None
    temperature: Optional[float] = None
    api_settings: Optional[ApiSettings] = None


class ImproveTextResponse(CamelModel):
    improved_text: str


class ExtractKeywordsRequest(CamelModel):
    text: Optional[str] = None
    model_name: Optional[str] = None
    max_tokens: Optional[int] = None
    api_settings: Optional[ApiSettings] = None


class ExtractKeywordsResponse(CamelModel):
    keywords: List[str]


class LogLevelRequest(CamelModel):
    level: Optional[str] = None


class ConnectionStatus(CamelModel):
    """State of the local model server as last observed."""
    is_connected: bool = False
    last_checked: int = 0
    latency: Optional[int] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    lmStudio: ConnectionStatus
    recommendations: List[str]
    timestamp: int


class ModelInfo(CamelModel):
    display_name: str
    api_name: str
    provider: str
    supports_images: bool
    supports_web: bool
