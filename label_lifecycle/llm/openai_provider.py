# label_lifecycle/llm/openai_provider.py
"""
OpenAI oracle implementation.
"""

from __future__ import annotations

import logging
from typing import Optional

from openai import APIConnectionError, APIError, APITimeoutError, OpenAI, RateLimitError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from label_lifecycle.config import get_settings
from label_lifecycle.errors import ConfigurationError, UpstreamError
from label_lifecycle.llm.base import OracleRequest, OracleResponse, TextOracle
from label_lifecycle.logging_config import log_llm_call

logger = logging.getLogger(__name__)

# Transient failures worth another attempt
RETRYABLE_ERRORS = (APITimeoutError, APIConnectionError, RateLimitError)


class OpenAIOracle(TextOracle):
    """OpenAI chat-completions oracle."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize OpenAI oracle.

        Args:
            api_key: OpenAI API key. If not provided, uses OPENAI_API_KEY setting.
            model: Model to use. If not provided, uses CLASSIFICATION_MODEL setting.
            timeout: Per-request timeout in seconds.

        Raises:
            ConfigurationError: no API key available
        """
        settings = get_settings()
        self._api_key = api_key or settings.OPENAI_API_KEY
        if not self._api_key:
            raise ConfigurationError(
                "OpenAI API key required. Set OPENAI_API_KEY env var or pass api_key."
            )

        self._model = model or settings.CLASSIFICATION_MODEL
        self._client = OpenAI(
            api_key=self._api_key,
            timeout=timeout or settings.ORACLE_TIMEOUT_SECONDS,
            max_retries=0,  # retries handled by tenacity below
        )

    @property
    def name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        reraise=True,
    )
    def _chat_completion(self, request: OracleRequest):
        """Make a chat completion request, retrying transient errors."""
        return self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": request.system_instruction},
                {"role": "user", "content": request.user_prompt},
            ],
            temperature=request.temperature,
            max_tokens=request.max_tokens,
            response_format={"type": "json_object"},
        )

    def complete(self, request: OracleRequest) -> OracleResponse:
        """Run a completion, converting SDK errors into UpstreamError."""
        try:
            with log_llm_call(self.name, self._model, request.call_type) as metrics:
                response = self._chat_completion(request)
                if response.usage:
                    metrics["tokens_in"] = response.usage.prompt_tokens
                    metrics["tokens_out"] = response.usage.completion_tokens
        except APIError as e:
            raise UpstreamError(f"OpenAI request failed: {e}") from e

        content = ""
        if response.choices:
            content = (response.choices[0].message.content or "").strip()
        if not content:
            raise UpstreamError("OpenAI returned an empty response")

        return OracleResponse(
            content=content,
            model=self._model,
            tokens_in=metrics["tokens_in"],
            tokens_out=metrics["tokens_out"],
        )
