# label_lifecycle/llm/__init__.py
"""
Text-classification oracle abstraction layer.

Usage:
    from label_lifecycle.llm import get_oracle

    oracle = get_oracle()  # Uses LLM_PROVIDER setting
    response = oracle.complete(OracleRequest(system_instruction, user_prompt))
"""

from __future__ import annotations

from typing import Optional

from label_lifecycle.config import get_settings
from label_lifecycle.errors import ConfigurationError
from label_lifecycle.llm.base import OracleRequest, OracleResponse, TextOracle

__all__ = [
    "OracleRequest",
    "OracleResponse",
    "TextOracle",
    "get_oracle",
]


def get_oracle(
    provider_name: Optional[str] = None,
    **kwargs,
) -> TextOracle:
    """
    Factory function to get an oracle instance.

    Args:
        provider_name: Provider to use ('openai').
                      If not provided, uses LLM_PROVIDER setting (default: 'openai')
        **kwargs: Additional arguments passed to the provider constructor

    Returns:
        Configured TextOracle instance

    Raises:
        ConfigurationError: unknown provider name, or provider is missing credentials
    """
    name = provider_name or get_settings().LLM_PROVIDER
    name = name.lower().strip()

    if name == "openai":
        from label_lifecycle.llm.openai_provider import OpenAIOracle

        return OpenAIOracle(**kwargs)

    raise ConfigurationError(f"Unknown LLM provider: {name}. Available: openai")
