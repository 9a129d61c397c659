"""
Data models for chat processing.
Contains model registry entries, provider routing and Wikipedia search results.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict


class Provider(str, Enum):
    """Upstream LLM backends."""
    LOCAL = "local"
    OPENROUTER = "openrouter"
    DEEPSEEK = "deepseek"


@dataclass(frozen=True)
class ModelConfig:
    """Static description of a selectable model."""
    display_name: str
    api_name: str
    provider: Provider = Provider.LOCAL
    supports_images: bool = False
    supports_web: bool = True
    supports_system_prompt: bool = True


@dataclass
class ApiConfiguration:
    """Resolved outbound endpoint for one request."""
    url: str
    headers: dict[str, str] = field(default_factory=dict)


class WikipediaPage(BaseModel):
    """One page returned by the Wikipedia REST search endpoint."""
    model_config = ConfigDict(extra="ignore")

    id: int
    key: str
    title: str
    excerpt: Optional[str] = None
    matched_title: Optional[str] = None
    anchor: Optional[str] = None
    description: Optional[str] = None
    thumbnail: Optional[dict] = None
