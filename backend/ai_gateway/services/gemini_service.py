"""
AI Gateway — Google Gemini Service Implementation
==================================================

What:  The operation surface: chat, summarize, create_note, explain,
       improve_writing and translate, backed by Google Gemini.
Why:   Product code asks for "summarize this", not for a key, a model and a
       temperature. This class hides all three.
How:   Every operation has the same shape:
           role + task → compose() → prompt template → select_tier()
           → FailoverOrchestrator.run() with a closure making one call
Who:   Created once per process; shared by every request handler.

Resilience Strategy:
    1. Pool of API keys; a quota error on one rotates to the next
    2. Keys that hit their quota are skipped until the reset window elapses
    3. When every key is exhausted: one fixed cooldown, then another sweep
    4. Non-quota errors are raised immediately, untouched
"""

import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence

from ai_gateway.config import Settings, settings as default_settings
from ai_gateway.exceptions import ValidationError
from ai_gateway.schemas.requests import Attachment, OperationRequest, PreferenceProfile
from ai_gateway.services import prompts
from ai_gateway.services.credentials import CredentialPool
from ai_gateway.services.failover import FailoverOrchestrator
from ai_gateway.services.instructions import TONE_HINTS, compose
from ai_gateway.services.llm_base import LLMService
from ai_gateway.services.model_handle import ContentPart, GeminiClientCache, ModelHandle
from ai_gateway.services.tiers import select_tier

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCES = PreferenceProfile(
    tone="professional",
    response_length="detailed",
    expertise="intermediate",
)


class GeminiService(LLMService):
    """
    Gemini-backed implementation of the six operations.

    Args:
        orchestrator: Failover engine owning the pool and its rotation state
        settings:     Provides the model id of each tier
    """

    def __init__(self, orchestrator: FailoverOrchestrator, settings: Settings = default_settings):
        self.orchestrator = orchestrator
        self.settings = settings

    # ── Operations ────────────────────────────────────────────────────────

    async def chat(
        self,
        message: str,
        context: Optional[str] = None,
        attachments: Optional[Sequence[Attachment]] = None,
        preferences: Optional[PreferenceProfile] = None,
    ) -> str:
        _require_text(message, "message")
        instruction = compose(prompts.CHAT_ROLE, prompts.CHAT_TASK, preferences)
        parts: List[ContentPart] = [prompts.chat_prompt(message, context)]
        parts.extend(attachments or ())
        return await self._generate("chat", instruction, parts)

    async def summarize(
        self,
        text: str,
        max_length: int = 300,
        preferences: Optional[PreferenceProfile] = None,
    ) -> str:
        _require_text(text, "text")
        if max_length <= 0:
            raise ValidationError(
                f"max_length must be positive, got {max_length}", field="max_length"
            )
        instruction = compose(prompts.SUMMARIZE_ROLE, prompts.SUMMARIZE_TASK, preferences)
        prompt = prompts.SUMMARIZE_TEMPLATE.format(max_length=max_length, text=text)
        return await self._generate("summarize", instruction, [prompt])

    async def create_note(
        self, text: str, preferences: Optional[PreferenceProfile] = None
    ) -> str:
        _require_text(text, "text")
        instruction = compose(prompts.NOTE_ROLE, prompts.NOTE_TASK, preferences)
        prompt = prompts.NOTE_TEMPLATE.format(text=text)
        return await self._generate("create_note", instruction, [prompt])

    async def explain(
        self, text: str, preferences: Optional[PreferenceProfile] = None
    ) -> str:
        _require_text(text, "text")
        instruction = compose(prompts.EXPLAIN_ROLE, prompts.EXPLAIN_TASK, preferences)
        prompt = prompts.EXPLAIN_TEMPLATE.format(text=text)
        return await self._generate("explain", instruction, [prompt])

    async def improve_writing(
        self,
        text: str,
        style: str = "professional",
        preferences: Optional[PreferenceProfile] = None,
    ) -> str:
        _require_text(text, "text")
        description = prompts.STYLE_DESCRIPTIONS.get(style)
        if description is None:
            raise ValidationError(
                f"Unknown writing style '{style}'. "
                f"Allowed: {', '.join(sorted(prompts.STYLE_DESCRIPTIONS))}",
                field="style",
            )
        instruction = compose(
            prompts.IMPROVE_ROLE,
            prompts.IMPROVE_TASK.format(style=description),
            preferences,
        )
        prompt = prompts.IMPROVE_TEMPLATE.format(style=description, text=text)
        return await self._generate("improve_writing", instruction, [prompt])

    async def translate(
        self,
        text: str,
        target_language: str,
        preferences: Optional[PreferenceProfile] = None,
    ) -> str:
        _require_text(text, "text")
        _require_text(target_language, "target_language")
        language = target_language.strip()
        if preferences is not None:
            # The target language decides the output language
            preferences = preferences.model_copy(update={"language": None})
        instruction = compose(
            prompts.TRANSLATE_ROLE,
            prompts.TRANSLATE_TASK.format(language=language),
            preferences,
        )
        prompt = prompts.TRANSLATE_TEMPLATE.format(language=language, text=text)
        return await self._generate("translate", instruction, [prompt])

    async def run(self, request: OperationRequest) -> str:
        """Execute a transient OperationRequest by dispatching on its operation name."""
        op = request.operation
        prefs = request.preferences
        if op == "chat":
            return await self.chat(request.text, request.context, request.attachments, prefs)
        if op == "summarize":
            return await self.summarize(request.text, request.max_length, prefs)
        if op == "create_note":
            return await self.create_note(request.text, prefs)
        if op == "explain":
            return await self.explain(request.text, prefs)
        if op == "improve_writing":
            return await self.improve_writing(request.text, request.style, prefs)
        return await self.translate(request.text, request.target_language or "", prefs)

    # ── Health ────────────────────────────────────────────────────────────

    async def health_check(self) -> bool:
        """
        Check if Gemini is reachable with the first configured key.

        How: lists models (no token cost). Returns False on any error.
        """
        credential = self.orchestrator.pool.credential_at(0)
        try:
            client = self.orchestrator.client_factory(credential)
            await client.aio.models.list(config={"page_size": 1})
            return True
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False

    # ── Internals ─────────────────────────────────────────────────────────

    async def _generate(
        self, operation: str, system_instruction: str, parts: Sequence[ContentPart]
    ) -> str:
        binding = select_tier(operation, self.settings)
        fallback = prompts.EMPTY_RESPONSES[operation]

        async def call(handle: ModelHandle) -> str:
            text = await handle.generate(system_instruction, parts)
            return text or fallback

        return await self.orchestrator.run(call, operation, binding)


def _require_text(value: Optional[str], field: str) -> None:
    if value is None or not value.strip():
        raise ValidationError(f"'{field}' must not be empty", field=field)


def preference_options() -> Dict[str, Any]:
    """Accepted preference values and the product defaults, for UI pickers."""
    return {
        "available_options": {
            "tone": list(TONE_HINTS),
            "response_length": ["concise", "detailed", "comprehensive"],
            "expertise": ["beginner", "intermediate", "expert"],
        },
        "default_preferences": DEFAULT_PREFERENCES.model_dump(exclude_none=True),
    }


def create_gemini_service(settings: Settings = default_settings) -> GeminiService:
    """
    Build the service from settings.

    Raises:
        ConfigurationError: no API key configured
    """
    pool = CredentialPool.from_settings(settings)
    orchestrator = FailoverOrchestrator.from_settings(
        settings,
        pool,
        client_factory=GeminiClientCache(request_timeout=settings.request_timeout),
    )
    logger.info(
        "GeminiService initialized with %d key(s), fast=%s, deep=%s",
        pool.size,
        settings.gemini_fast_model,
        settings.gemini_deep_model,
    )
    return GeminiService(orchestrator, settings)


@lru_cache(maxsize=1)
def get_gemini_service() -> GeminiService:
    """Process-wide instance; rotation state must be shared by every request."""
    return create_gemini_service()
