"""
LLM client
Thin wrapper over AsyncOpenAI for OpenAI-compatible providers
"""
# Standard library imports
import logging
from typing import Optional, List, Dict

# Third-party imports
from openai import AsyncOpenAI

# Local imports
from exceptions import ConfigurationError
from .config import llm_config, LLMConfig

logger = logging.getLogger(__name__)


class LLMClient:
    """LLM client with per provider/model client caching"""

    def __init__(self, config: Optional[LLMConfig] = None):
        """
        Args:
            config: LLM config, the global one when None
        """
        self._config = config or llm_config
        self._clients: Dict[tuple[str, str], AsyncOpenAI] = {}

    def _get_client(self, provider: str, model_key: str) -> tuple[AsyncOpenAI, str]:
        """
        Get the client for a provider and model

        Args:
            provider: provider name
            model_key: model key

        Returns:
            (AsyncOpenAI client, model id)

        Raises:
            ConfigurationError: unknown provider/model or missing API key
        """
        if provider not in self._config.providers:
            raise ConfigurationError(cause=f"LLM provider '{provider}' is not configured")

        cfg = self._config.providers[provider]

        if model_key not in cfg.models:
            raise ConfigurationError(cause=f"Model '{model_key}' is not configured for provider '{provider}'")

        if not cfg.api_key:
            raise ConfigurationError(cause="GEMINI_API_KEY environment variable is required")

        model_cfg = cfg.models[model_key]
        cache_key = (provider, model_key)

        if cache_key not in self._clients:
            self._clients[cache_key] = AsyncOpenAI(
                api_key=cfg.api_key,
                base_url=cfg.base_url,
                max_retries=0,
            )
            logger.info(f"Created LLM client: provider={provider}, model={model_cfg.name}")

        return self._clients[cache_key], model_cfg.id

    async def chat(
        self,
        messages: List[Dict[str, str]],
        provider: Optional[str] = None,
        model_key: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        timeout: int = 30,
    ) -> str:
        """
        Send a chat completion request

        Args:
            messages: [{"role": "user", "content": "..."}]
            provider: provider name, default provider when None
            model_key: model key, default text model when None
            temperature: sampling temperature
            max_tokens: completion token cap

        Returns:
            reply text, empty string when the model returned none
        """
        provider = provider or self._config.default_provider
        model_key = model_key or self._config.default_model_key

        client, model_id = self._get_client(provider, model_key)

        try:
            logger.debug(f"Sending LLM request: provider={provider}, model={model_id}")
            response = await client.chat.completions.create(
                model=model_id,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout=timeout,
            )
        except Exception as e:
            logger.warning(f"LLM API call failed: {str(e)}")
            raise

        if not response.choices:
            return ""
        content = response.choices[0].message.content or ""
        logger.debug(f"LLM response length: {len(content)} chars")
        return content

    async def generate_image(
        self,
        prompt: str,
        provider: Optional[str] = None,
        model_key: Optional[str] = None,
        timeout: int = 60,
    ) -> Optional[str]:
        """
        Request a single image

        Returns:
            base64 payload of the first image, or None when the response has none
        """
        provider = provider or self._config.default_provider
        model_key = model_key or self._config.default_image_model_key

        client, model_id = self._get_client(provider, model_key)

        try:
            logger.debug(f"Sending image request: provider={provider}, model={model_id}")
            response = await client.images.generate(
                model=model_id,
                prompt=prompt,
                n=1,
                response_format="b64_json",
                timeout=timeout,
            )
        except Exception as e:
            logger.warning(f"Image API call failed: {str(e)}")
            raise

        if not response.data:
            return None
        return response.data[0].b64_json
