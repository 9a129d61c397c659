"""
Static registry of selectable models.
Maps display names to API names, providers and capability flags.
"""
from typing import Optional

from models.chat_models import ModelConfig, Provider


class ModelRegistry:
    """Lookup table for the models the UI can offer."""

    MODELS: tuple[ModelConfig, ...] = (
        ModelConfig("Qwen3 0.6b", "qwen3-0.6b"),
        ModelConfig("Qwen3 4b", "qwen3-4b"),
        ModelConfig("Deepseek R1 Distill Llama 8b", "deepseek-r1-distill-llama-8b"),
        ModelConfig("Llama 3.1 8b Instruct", "meta-llama-3.1-8b-instruct"),
        ModelConfig(
            "Gemma 3 12b it", "gemma-3-12b-it-qat",
            supports_images=True, supports_system_prompt=False
        ),
        ModelConfig(
            "GPT-4o Mini", "openai/gpt-4o-mini",
            provider=Provider.OPENROUTER, supports_images=True
        ),
        ModelConfig(
            "Llama 3.3 70b Instruct", "meta-llama/llama-3.3-70b-instruct",
            provider=Provider.OPENROUTER
        ),
        ModelConfig("Deepseek Chat", "deepseek-chat", provider=Provider.DEEPSEEK),
        ModelConfig(
            "Deepseek Reasoner", "deepseek-reasoner",
            provider=Provider.DEEPSEEK, supports_web=False
        ),
    )

    DEFAULT_MODEL: str = MODELS[0].display_name

    _by_name: dict[str, ModelConfig] = {
        **{m.api_name: m for m in MODELS},
        **{m.display_name: m for m in MODELS},
    }

    @classmethod
    def get_model(cls, name: Optional[str]) -> Optional[ModelConfig]:
        """Find a model by display name or API name."""
        if not name:
            return None
        return cls._by_name.get(name)

    @classmethod
    def resolve(cls, name: Optional[str]) -> ModelConfig:
        """Find a model, falling back to the default model for unknown names."""
        return cls.get_model(name) or cls._by_name[cls.DEFAULT_MODEL]

    @classmethod
    def get_api_model_name(cls, name: Optional[str]) -> str:
        return cls.resolve(name).api_name

    @classmethod
    def get_provider(cls, name: Optional[str]) -> Provider:
        return cls.resolve(name).provider

    @classmethod
    def supports_web(cls, name: Optional[str]) -> bool:
        return cls.resolve(name).supports_web

    @classmethod
    def list_models(cls) -> list[ModelConfig]:
        return list(cls.MODELS)
