"""
AI Gateway — Credential Pool
=============================

What:  Immutable, indexed collection of interchangeable Gemini API keys.
Why:   Free-tier keys are rate limited individually; pooling several lets the
       failover engine keep serving while one of them is exhausted.
How:   Built once from Settings at startup. Never mutated afterwards, so reads
       need no locking. Index arithmetic belongs to the caller.
"""

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence, Tuple

from ai_gateway.config import Settings
from ai_gateway.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    """One API key plus its position in the pool."""
    index: int
    api_key: str = field(repr=False)

    @property
    def label(self) -> str:
        # 1-based, safe to log
        return f"key #{self.index + 1}"

    @property
    def masked(self) -> str:
        if len(self.api_key) <= 8:
            return "****"
        return f"{self.api_key[:4]}...{self.api_key[-4:]}"


class CredentialPool:
    """
    Read-only pool of credentials.

    Contract:
        size              → number of credentials (always >= 1)
        credential_at(i)  → the credential at index i (caller validates i)
    """

    def __init__(self, api_keys: Sequence[str]):
        if not api_keys:
            raise ConfigurationError(
                "No Gemini API keys configured. Set GEMINI_API_KEY "
                "(and optionally GEMINI_API_KEY_1, GEMINI_API_KEY_2, ...)."
            )
        self._credentials: Tuple[Credential, ...] = tuple(
            Credential(index=i, api_key=key) for i, key in enumerate(api_keys)
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, environ: Optional[Mapping[str, str]] = None
    ) -> "CredentialPool":
        """Build the pool at startup; raises ConfigurationError if no key is set."""
        settings.validate_required_for_production(environ)
        pool = cls(settings.api_keys(environ))
        logger.info("Credential pool initialized with %d key(s)", pool.size)
        return pool

    @property
    def size(self) -> int:
        return len(self._credentials)

    def credential_at(self, index: int) -> Credential:
        return self._credentials[index]

    def __len__(self) -> int:
        return self.size

    def __iter__(self):
        return iter(self._credentials)
