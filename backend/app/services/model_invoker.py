"""
Model Invoker — one call to an external text-generation model.

WHAT THIS DOES:
Given a model identifier, a prompt, an output token budget and a sampling
temperature, returns the generated text or raises ModelInvocationError.

HOW IT WORKS:
OpenRouter exposes an OpenAI-compatible chat completions API, so we use the
official AsyncOpenAI client with base_url pointed at OpenRouter. The prompt
is sent as a single user message.

FAILURE MODEL:
Every failure is reported as ModelInvocationError with a readable message:
- API key not configured (checked per call, not at startup)
- Upstream non-2xx status (401 and 429 get their own wording)
- Timeout or connection error
- Empty or malformed response body
Callers only decide "succeeded or not", so the cause lives in the message.

NO RETRY:
The client is built with max_retries=0. A failed call is final.

USAGE:
    invoker = ModelInvoker()
    text = await invoker.invoke(
        "meta-llama/llama-3.1-8b-instruct",
        "Argue for the topic: ...",
        max_output_tokens=300,
        temperature=0.7,
    )
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx
import openai
from openai import AsyncOpenAI

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)


class ModelInvocationError(Exception):
    """Any failure while calling a model. The message is safe to show to users."""


class BaseModelInvoker(ABC):
    """
    Abstract base class for model invocation.

    Implementations must raise ModelInvocationError for every failure and
    never retry on their own.
    """

    @abstractmethod
    async def invoke(
        self,
        model_id: str,
        prompt: str,
        max_output_tokens: int,
        temperature: float,
    ) -> str:
        pass


class ModelInvoker(BaseModelInvoker):
    """
    Calls chat models through OpenRouter.

    The AsyncOpenAI client is created lazily on first use so that a missing
    API key only surfaces when a debate actually needs a model.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            settings: Application settings (defaults to get_settings())
            http_client: Optional httpx client handed to AsyncOpenAI (tests
                use one with a MockTransport)
        """
        self.settings = settings or get_settings()
        self._http_client = http_client
        self._client: Optional[AsyncOpenAI] = None

    def _is_api_key_configured(self) -> bool:
        key = self.settings.openrouter_api_key
        return bool(key and key.strip())

    def _get_client(self) -> AsyncOpenAI:
        """Get or create the OpenAI client (lazy initialization)."""
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.settings.openrouter_api_key,
                base_url=self.settings.openrouter_base_url,
                timeout=self.settings.model_timeout_seconds,
                max_retries=0,
                default_headers={
                    "HTTP-Referer": self.settings.openrouter_referer,
                    "X-Title": self.settings.openrouter_app_title,
                },
                http_client=self._http_client,
            )
        return self._client

    async def invoke(
        self,
        model_id: str,
        prompt: str,
        max_output_tokens: int,
        temperature: float,
    ) -> str:
        """
        Generate text for a prompt.

        Args:
            model_id: Provider model identifier (e.g., "qwen/qwen-2.5-7b-instruct")
            prompt: Full prompt text
            max_output_tokens: Upper bound on generated tokens
            temperature: Sampling temperature

        Returns:
            Generated text, stripped of surrounding whitespace

        Raises:
            ModelInvocationError: on any failure (see module docstring)
        """
        if not self._is_api_key_configured():
            raise ModelInvocationError(
                "OpenRouter API key is not configured. Set OPENROUTER_API_KEY."
            )

        client = self._get_client()
        logger.info(f"Calling model {model_id} (max_tokens={max_output_tokens}, temperature={temperature})")

        try:
            response = await client.chat.completions.create(
                model=model_id,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_output_tokens,
                temperature=temperature,
            )
        except openai.APITimeoutError as e:
            logger.error(f"Model {model_id} timed out: {e}")
            raise ModelInvocationError("Model call timed out.") from e
        except openai.APIConnectionError as e:
            logger.error(f"Model {model_id} connection failed: {e}")
            raise ModelInvocationError(f"Could not reach the model provider: {e}") from e
        except openai.APIStatusError as e:
            logger.error(f"Model {model_id} returned HTTP {e.status_code}: {e.message}")
            if e.status_code == 401:
                raise ModelInvocationError("API key is invalid.") from e
            if e.status_code == 429:
                raise ModelInvocationError("API rate limit exceeded. Try again later.") from e
            raise ModelInvocationError(f"API call failed with status {e.status_code}.") from e
        except openai.OpenAIError as e:
            logger.error(f"Model {model_id} call failed: {e}")
            raise ModelInvocationError(f"API call failed: {e}") from e
        except ValueError as e:
            # Body claimed JSON but did not parse
            logger.error(f"Model {model_id} returned an unreadable body: {e}")
            raise ModelInvocationError("Could not get a response from the AI model.") from e

        text = _extract_text(response)
        if text is None:
            logger.error(f"Model {model_id} returned an empty or malformed response")
            raise ModelInvocationError("Could not get a response from the AI model.")

        logger.info(f"Model {model_id} returned {len(text)} characters")
        return text

    async def close(self):
        """Close the underlying HTTP connections."""
        if self._client is not None:
            await self._client.close()
            self._client = None


def _extract_text(response) -> Optional[str]:
    """Pull the first choice's content out of a chat completion, or None."""
    choices = getattr(response, "choices", None)
    if not choices:
        return None
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    if not isinstance(content, str) or not content.strip():
        return None
    return content.strip()
