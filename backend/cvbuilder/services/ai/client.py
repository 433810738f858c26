"""
OpenAI Chat Client - Retrying text generation for the CV services

Every AI feature (extraction, tailoring, cover letters) goes through
AIService.generate_content(), which sends a single user prompt to the
chat completions API and returns the response text.

Retry policy:
    - Up to ``ai_max_retries`` attempts (default 3)
    - Rate-limit (429) responses wait ``rate_limit_delay`` seconds
    - Other failures wait ``retry_delay`` * attempt seconds
    - Each call is bounded by ``ai_timeout_seconds``

After the last attempt the error surfaces as AIServiceError (HTTP 502),
or AITimeoutError (HTTP 504) when every attempt timed out.
"""

import asyncio
import logging
import time
from typing import Optional

from openai import AsyncOpenAI, APITimeoutError, RateLimitError

from cvbuilder.config import get_settings
from cvbuilder.errors import APIError
from cvbuilder.middleware.metrics import record_ai_latency

logger = logging.getLogger(__name__)

TEST_PROMPT = "Hello, are you working?"


class AIServiceError(APIError):
    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message, status_code=status_code)


class AITimeoutError(AIServiceError):
    def __init__(self, message: str = "AI service timed out. Please try again."):
        super().__init__(message, status_code=504)


def get_openai_client() -> AsyncOpenAI:
    settings = get_settings()
    # Retries are handled by AIService so attempts and backoff stay visible in logs
    return AsyncOpenAI(api_key=settings.openai_api_key, max_retries=0)


class AIService:
    """
    Thin retrying wrapper around the chat completions endpoint.

    Attributes:
        client: AsyncOpenAI client (created on first use unless injected)
        model: Chat model name
        max_retries: Total attempts per prompt
        timeout: Per-attempt timeout in seconds
    """

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        max_retries: Optional[int] = None,
        timeout: Optional[float] = None,
        retry_delay: float = 1.0,
        rate_limit_delay: float = 40.0,
    ):
        settings = get_settings()
        self._client = client
        self.model = model or settings.openai_model
        self.max_retries = max_retries or settings.ai_max_retries
        self.timeout = timeout or settings.ai_timeout_seconds
        self.retry_delay = retry_delay
        self.rate_limit_delay = rate_limit_delay

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    async def _complete(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            timeout=self.timeout,
        )
        return response.choices[0].message.content or ""

    async def generate_content(self, prompt: str, operation: str = "generate") -> str:
        """
        Send a prompt and return the model's text.

        Args:
            prompt: Full prompt text
            operation: Label for latency metrics (e.g. "extract_cv")

        Raises:
            AIServiceError: all attempts failed
            AITimeoutError: all attempts timed out
        """
        if self._client is None and not get_settings().openai_api_key:
            raise AIServiceError("OPENAI_API_KEY not configured", status_code=503)

        last_error: Optional[Exception] = None
        timeouts = 0

        for attempt in range(1, self.max_retries + 1):
            start = time.perf_counter()
            try:
                logger.info(f"AI request {attempt}/{self.max_retries} ({operation}, model={self.model})")
                text = await asyncio.wait_for(self._complete(prompt), timeout=self.timeout)
                record_ai_latency(operation, time.perf_counter() - start)
                return text

            except RateLimitError as e:
                last_error = e
                logger.warning(f"AI rate limit hit on attempt {attempt}, waiting {self.rate_limit_delay}s")
                if attempt < self.max_retries:
                    await asyncio.sleep(self.rate_limit_delay)

            except (asyncio.TimeoutError, APITimeoutError) as e:
                last_error = e
                timeouts += 1
                logger.warning(f"AI request timed out on attempt {attempt} after {self.timeout}s")
                if attempt < self.max_retries:
                    await asyncio.sleep(self.retry_delay * attempt)

            except Exception as e:
                last_error = e
                logger.warning(f"AI request failed on attempt {attempt}: {e}")
                if attempt < self.max_retries:
                    await asyncio.sleep(self.retry_delay * attempt)

        if timeouts == self.max_retries:
            raise AITimeoutError()
        raise AIServiceError(
            f"AI content generation failed after {self.max_retries} attempts: {last_error}"
        )

    async def test_connection(self) -> str:
        try:
            return await self.generate_content(TEST_PROMPT, operation="test")
        except AIServiceError as e:
            raise AIServiceError(f"AI service test failed: {e.message}", status_code=e.status_code) from e


_service_instance: Optional[AIService] = None


def get_ai_service() -> AIService:
    """Process-wide AIService, used as a FastAPI dependency."""
    global _service_instance

    if _service_instance is None:
        _service_instance = AIService()

    return _service_instance
