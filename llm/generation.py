"""
Card generation client
Message rewrite and cover image generation with retry and error translation
"""
# Standard library imports
import asyncio
import base64
import binascii
import logging
import re
from typing import Awaitable, Callable, Optional, TypeVar

# Third-party imports
import openai

# Local imports
from config import settings
from exceptions import (
    ConfigurationError,
    GenerationFailed,
    HolidayCardError,
    UpstreamContentBlocked,
)
from prompt import (
    CONTENT_BLOCKED_MARKER,
    COVER_IMAGE_PROMPT,
    MESSAGE_REWRITE_PROMPT,
    VIBE_IMAGE_DESCRIPTIONS,
    VIBE_INSTRUCTIONS,
)
from .client import LLMClient
from .retry import RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")

_DATA_URL_PREFIX = re.compile(r"^data:image/\w+;base64,")
_SURROUNDING_QUOTES = re.compile(r"^[\"']|[\"']$")


def _vibe_key(vibe) -> str:
    return getattr(vibe, "value", vibe)


def clean_rewrite(text: str) -> str:
    """
    Validate and tidy the model's rewrite

    Raises:
        UpstreamContentBlocked: the model flagged the message as unsafe
        GenerationFailed: the model returned nothing
    """
    text = (text or "").strip()
    if CONTENT_BLOCKED_MARKER in text or "content blocked" in text.lower():
        raise UpstreamContentBlocked(cause="AI blocked the content as unsafe")

    text = _SURROUNDING_QUOTES.sub("", text).strip()
    if not text:
        raise GenerationFailed(cause="Text data not found in response")
    return text


def decode_image_payload(payload: Optional[str]) -> bytes:
    """
    Decode a base64 image, with or without a data URL prefix

    Raises:
        GenerationFailed: payload missing or not valid base64
    """
    if not payload or not isinstance(payload, str):
        raise GenerationFailed(cause="Image data not found in response")

    data = _DATA_URL_PREFIX.sub("", payload.strip())
    try:
        image = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise GenerationFailed(cause=f"Malformed image payload: {str(e)}") from e

    if not image:
        raise GenerationFailed(cause="Image payload is empty")
    return image


class GenerationClient:
    """Text rewrite and cover generation against the configured provider"""

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.llm = llm_client or LLMClient()
        self.policy = policy or RetryPolicy(max_attempts=settings.GENERATION_MAX_ATTEMPTS)
        self._sleep = sleep

    async def _run(self, operation: Callable[[], Awaitable[T]], label: str) -> T:
        """Retry operation, then map SDK failures onto our error taxonomy"""
        try:
            return await call_with_retry(operation, self.policy, label, sleep=self._sleep)
        except HolidayCardError:
            raise
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            logger.error(f"AI service rejected credentials while trying to {label}: {str(e)}")
            raise ConfigurationError(cause=f"AI service rejected credentials: {str(e)}") from e
        except openai.APIError as e:
            logger.error(f"AI service refused to {label}: {str(e)}")
            raise GenerationFailed(cause=str(e)) from e

    async def rewrite_text(self, message: str, vibe: str, occasion: str) -> str:
        """
        Rewrite a moderated message in the chosen vibe

        Args:
            message: moderated, PII-scrubbed message
            vibe: warm/funny/fancy/chaotic
            occasion: occasion display name

        Returns:
            rewritten message
        """
        prompt = MESSAGE_REWRITE_PROMPT.format(
            vibe_instruction=VIBE_INSTRUCTIONS[_vibe_key(vibe)],
            occasion=occasion,
            blocked_marker=CONTENT_BLOCKED_MARKER,
            message=message,
        )

        async def attempt() -> str:
            reply = await self.llm.chat(
                messages=[{"role": "user", "content": prompt}],
                temperature=0.8,
            )
            return clean_rewrite(reply)

        return await self._run(attempt, "rewrite message")

    async def generate_image(self, vibe: str, occasion: str) -> bytes:
        """
        Generate a cover image

        Returns:
            raw image bytes
        """
        prompt = COVER_IMAGE_PROMPT.format(
            vibe_description=VIBE_IMAGE_DESCRIPTIONS[_vibe_key(vibe)],
            occasion=occasion,
        )

        async def attempt() -> bytes:
            payload = await self.llm.generate_image(prompt)
            return decode_image_payload(payload)

        image = await self._run(attempt, "generate cover image")
        logger.info(f"Cover image generated, size: {len(image)} bytes")
        return image
