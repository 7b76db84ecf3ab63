"""
AI Gateway — Bound Model Handles
=================================

What:  A handle binds one credential's client to one tier's model id and
       generation parameters. Operation closures receive a handle and make
       exactly one upstream call through it.
Why two variants: the failover engine never needs to inspect an untyped
       model object; the handle's class says which tier it belongs to and its
       parameters are frozen.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, ClassVar, Dict, Sequence, Union

from google import genai
from google.genai import types

from ai_gateway.schemas.requests import Attachment
from ai_gateway.services.credentials import Credential
from ai_gateway.services.tiers import GenerationParams, ModelTier, TierBinding

logger = logging.getLogger(__name__)

ContentPart = Union[str, Attachment]
ClientFactory = Callable[[Credential], genai.Client]


@dataclass(frozen=True)
class ModelHandle:
    """Base handle. Use FastModelHandle or DeepModelHandle."""
    tier: ClassVar[ModelTier]

    credential_index: int
    model_id: str
    params: GenerationParams
    client: genai.Client

    async def generate(self, system_instruction: str, parts: Sequence[ContentPart]) -> str:
        """
        Send one generate_content request and return its plain text.

        Raises whatever the SDK raises; classification happens in the
        failover engine.
        """
        start_time = time.time()
        response = await self.client.aio.models.generate_content(
            model=self.model_id,
            contents=[types.Content(role="user", parts=[_to_part(p) for p in parts])],
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                temperature=self.params.temperature,
                top_p=self.params.top_p,
                top_k=self.params.top_k,
                max_output_tokens=self.params.max_output_tokens,
            ),
        )
        text = (response.text or "").strip()
        logger.debug(
            "%s call to %s completed in %.0fms, %d chars",
            self.tier.value,
            self.model_id,
            (time.time() - start_time) * 1000,
            len(text),
        )
        return text


@dataclass(frozen=True)
class FastModelHandle(ModelHandle):
    tier: ClassVar[ModelTier] = ModelTier.FAST


@dataclass(frozen=True)
class DeepModelHandle(ModelHandle):
    tier: ClassVar[ModelTier] = ModelTier.DEEP


HANDLE_TYPES = {
    ModelTier.FAST: FastModelHandle,
    ModelTier.DEEP: DeepModelHandle,
}


def bind_handle(binding: TierBinding, credential: Credential, client: genai.Client) -> ModelHandle:
    handle_cls = HANDLE_TYPES[binding.tier]
    return handle_cls(
        credential_index=credential.index,
        model_id=binding.model_id,
        params=binding.params,
        client=client,
    )


class GeminiClientCache:
    """
    One genai.Client per credential, created on first use.

    Clients are reused across requests; the pool never changes after
    startup so entries are never evicted.
    """

    def __init__(self, request_timeout: int = 60):
        self._timeout_ms = request_timeout * 1000
        self._clients: Dict[int, genai.Client] = {}
        self._lock = threading.Lock()

    def __call__(self, credential: Credential) -> genai.Client:
        with self._lock:
            client = self._clients.get(credential.index)
            if client is None:
                client = genai.Client(
                    api_key=credential.api_key,
                    http_options=types.HttpOptions(timeout=self._timeout_ms),
                )
                self._clients[credential.index] = client
                logger.debug("Created Gemini client for %s (%s)", credential.label, credential.masked)
            return client


def _to_part(part: ContentPart) -> types.Part:
    if isinstance(part, Attachment):
        return types.Part.from_bytes(data=part.data, mime_type=part.mime_type)
    return types.Part.from_text(text=part)
