"""
LLM configuration
Parses and validates the provider table from settings
"""
# Standard library imports
from typing import Dict

# Third-party imports
from pydantic import BaseModel

# Local imports
from config import settings


class LLMModelConfig(BaseModel):
    """One model offered by a provider"""
    id: str
    name: str


class LLMProviderConfig(BaseModel):
    """Provider endpoint and credentials"""
    api_key: str
    base_url: str
    models: Dict[str, LLMModelConfig]


class LLMConfig(BaseModel):
    """Provider table plus the default text and image models"""
    providers: Dict[str, LLMProviderConfig]
    default_provider: str
    default_model_key: str
    default_image_model_key: str


def load_llm_config() -> LLMConfig:
    """
    Build LLMConfig from settings

    A provider without its own api_key falls back to GEMINI_API_KEY.

    Returns:
        LLMConfig
    """
    providers = {}

    for name, cfg in settings.LLM_PROVIDERS.items():
        providers[name] = LLMProviderConfig(
            api_key=cfg.get("api_key") or settings.GEMINI_API_KEY,
            base_url=cfg["base_url"],
            models={
                k: LLMModelConfig(**v)
                for k, v in cfg["models"].items()
            }
        )

    return LLMConfig(
        providers=providers,
        default_provider=settings.DEFAULT_LLM_PROVIDER,
        default_model_key=settings.DEFAULT_LLM_MODEL_KEY,
        default_image_model_key=settings.DEFAULT_IMAGE_MODEL_KEY,
    )


llm_config = load_llm_config()
