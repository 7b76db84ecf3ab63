"""
AI Gateway — Services Layer
============================

Service Inventory:
    - LLMService (abstract): Contract of the six operations
    - GeminiService: Gemini implementation of that contract
    - FailoverOrchestrator: Key rotation engine shared by all operations
    - CredentialPool / RotationState: The key pool and its health state
"""

from ai_gateway.services.gemini_service import (
    GeminiService,
    create_gemini_service,
    get_gemini_service,
    preference_options,
)
from ai_gateway.services.llm_base import LLMService

__all__ = [
    "GeminiService",
    "LLMService",
    "create_gemini_service",
    "get_gemini_service",
    "preference_options",
]
