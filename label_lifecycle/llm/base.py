# label_lifecycle/llm/base.py
"""
Base interface for text-classification oracles.

The engine treats the model as an opaque function from a prompt pair to a
text response. Parsing and validation of that response belong to the
callers (classifier, promotion evaluator).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class OracleRequest:
    """A single system + user prompt exchange."""
    system_instruction: str
    user_prompt: str
    temperature: float = 0.1
    max_tokens: int = 500
    call_type: str = "completion"  # for logging: "classify_video", "evaluate_label"


@dataclass
class OracleResponse:
    """Raw completion text plus usage."""
    content: str
    model: str
    tokens_in: int = 0
    tokens_out: int = 0

    @property
    def tokens(self) -> int:
        return self.tokens_in + self.tokens_out


class TextOracle(ABC):
    """Abstract base class for text-completion providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name (e.g., 'openai')."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model being used (e.g., 'gpt-4o-mini')."""
        pass

    @abstractmethod
    def complete(self, request: OracleRequest) -> OracleResponse:
        """
        Run one completion.

        Args:
            request: Prompts and sampling parameters

        Returns:
            OracleResponse with the raw text

        Raises:
            UpstreamError: transport failure after retries, or empty response
        """
        pass
