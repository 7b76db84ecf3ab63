"""
AI Gateway — Abstract LLM Service Interface
============================================

What:  The contract of the operation surface consumed by the rest of the product.
Why:   Callers depend on six operations, not on Gemini. A different provider,
       or a canned fake in tests, only needs to implement this class.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ai_gateway.schemas.requests import Attachment, PreferenceProfile


class LLMService(ABC):
    """
    Abstract interface for the generative-text operations.

    Contract:
        - Each operation returns the model's plain text exactly once
          (no streaming, no partial results)
        - Quota exhaustion on one key is handled inside the implementation
        - PoolExhaustedError means "overloaded, try later"
        - Any other upstream error propagates unmodified
    """

    @abstractmethod
    async def chat(
        self,
        message: str,
        context: Optional[str] = None,
        attachments: Optional[Sequence[Attachment]] = None,
        preferences: Optional[PreferenceProfile] = None,
    ) -> str:
        """Conversational reply, optionally grounded in notes context and files."""
        ...

    @abstractmethod
    async def summarize(
        self,
        text: str,
        max_length: int = 300,
        preferences: Optional[PreferenceProfile] = None,
    ) -> str:
        """Sectioned summary of about max_length words."""
        ...

    @abstractmethod
    async def create_note(
        self, text: str, preferences: Optional[PreferenceProfile] = None
    ) -> str:
        """Hierarchical note with goal, sections, insights and action items."""
        ...

    @abstractmethod
    async def explain(
        self, text: str, preferences: Optional[PreferenceProfile] = None
    ) -> str:
        """Four-part explanation: definition, analogy, mechanism, significance."""
        ...

    @abstractmethod
    async def improve_writing(
        self,
        text: str,
        style: str = "professional",
        preferences: Optional[PreferenceProfile] = None,
    ) -> str:
        """Full rewrite of text in the given style, without commentary."""
        ...

    @abstractmethod
    async def translate(
        self,
        text: str,
        target_language: str,
        preferences: Optional[PreferenceProfile] = None,
    ) -> str:
        """Translation preserving formatting and untranslatable terms."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the provider is reachable with the configured credentials.

        Returns: True if reachable, False otherwise. Never raises.
        """
        ...
