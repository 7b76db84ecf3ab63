"""
AI Gateway — Failover Orchestrator
===================================

What:  Runs one logical upstream call against the credential pool, rotating
       to the next key whenever the current one reports quota exhaustion.
Why:   One exhausted key must not fail every user, and a broken request must
       not be retried on every key. The distinction between a quota error
       (rotate) and everything else (stop) is the whole point.
How:   Each attempt returns an explicit outcome: Success, RecoverableFailure
       or FatalFailure. Tenacity drives the attempt loop off that outcome.

Attempt Flow:
    entry        → reset unhealthy set if the reset window elapsed
    budget       → 2 × pool size attempts
    each attempt → select key (skip unhealthy) → bind handle → invoke
        Success            → return result, cursor unchanged
        RecoverableFailure → mark key, rotate; if the whole pool is now
                             exhausted: clear set and cool down before retrying
        FatalFailure       → re-raise the original exception, no retry
    budget spent → PoolExhaustedError

Concurrency:
    Shared state lives in RotationState behind its lock. The cooldown is an
    await in the request that triggered it; other requests keep running.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar, Union

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_result,
    stop_after_attempt,
)

from ai_gateway.config import Settings
from ai_gateway.exceptions import PoolExhaustedError
from ai_gateway.services.credentials import CredentialPool
from ai_gateway.services.model_handle import ClientFactory, ModelHandle, bind_handle
from ai_gateway.services.rotation import RotationState
from ai_gateway.services.tiers import TierBinding

logger = logging.getLogger(__name__)

T = TypeVar("T")

QUOTA_STATUS_CODES = frozenset({429})
QUOTA_STATUS_NAMES = frozenset({"RESOURCE_EXHAUSTED"})
QUOTA_MESSAGE_MARKERS = (
    "quota",
    "rate limit",
    "rate-limit",
    "resource exhausted",
    "resource_exhausted",
    "too many requests",
    "429",
)


# ══════════════════════════════════════════════════════════════════════════
# Attempt Outcomes
# ══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    credential_index: int


@dataclass(frozen=True)
class RecoverableFailure:
    error: BaseException
    credential_index: int
    pool_exhausted: bool = False


@dataclass(frozen=True)
class FatalFailure:
    error: BaseException
    credential_index: int


AttemptOutcome = Union[Success, RecoverableFailure, FatalFailure]


def is_quota_error(error: BaseException) -> bool:
    """
    Decide whether an upstream error means "this key is out of quota".

    Checks, in order: numeric status (google.genai APIError.code, or
    status_code on HTTP-style errors), the provider's status name, then the
    message text. Authentication and permission errors are NOT quota errors.
    """
    for attr in ("code", "status_code"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and value in QUOTA_STATUS_CODES:
            return True

    status = getattr(error, "status", None)
    if isinstance(status, str) and status.upper() in QUOTA_STATUS_NAMES:
        return True

    message = str(getattr(error, "message", None) or error).lower()
    return any(marker in message for marker in QUOTA_MESSAGE_MARKERS)


# ══════════════════════════════════════════════════════════════════════════
# Orchestrator
# ══════════════════════════════════════════════════════════════════════════

class FailoverOrchestrator:
    """
    Credential failover engine shared by every operation.

    Args:
        pool:           Read-only credential pool
        state:          Shared rotation state for that pool
        client_factory: Returns the provider client for a credential
        cooldown:       Seconds to pause after the whole pool hit its quota
        sleep:          Awaitable sleep; injected by tests
    """

    def __init__(
        self,
        pool: CredentialPool,
        state: RotationState,
        client_factory: ClientFactory,
        cooldown: float = 3.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if state.pool_size != pool.size:
            raise ValueError("rotation state and credential pool sizes differ")
        self.pool = pool
        self.state = state
        self.client_factory = client_factory
        self.cooldown = cooldown
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        pool: CredentialPool,
        client_factory: ClientFactory,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> "FailoverOrchestrator":
        state = RotationState(pool.size, reset_window=settings.failover_reset_window)
        return cls(pool, state, client_factory, cooldown=settings.failover_cooldown, sleep=sleep)

    @property
    def retry_budget(self) -> int:
        # Two full sweeps of the pool
        return 2 * self.pool.size

    async def run(
        self,
        operation: Callable[[ModelHandle], Awaitable[T]],
        label: str,
        binding: TierBinding,
    ) -> T:
        """
        Execute operation with failover.

        Args:
            operation: Closure making exactly one upstream call with the handle
            label:     Operation name for logs
            binding:   Tier binding (model id + generation params)

        Returns:
            Whatever operation returns on the first successful attempt.

        Raises:
            PoolExhaustedError: every attempt in the budget hit a quota limit
            Exception:          any non-quota upstream error, unmodified
        """
        request_id = str(uuid.uuid4())[:8]
        self.state.reset_if_stale()
        budget = self.retry_budget

        retryer = AsyncRetrying(
            stop=stop_after_attempt(budget),
            retry=retry_if_result(lambda outcome: isinstance(outcome, RecoverableFailure)),
            wait=self._wait_after,
            before_sleep=self._log_cooldown,
            sleep=self._pause,
        )

        try:
            outcome = await retryer(self._attempt, operation, label, binding, request_id)
        except RetryError as e:
            last = e.last_attempt.result() if e.last_attempt else None
            logger.error(
                "[%s] %s failed: all %d attempts hit quota limits",
                request_id,
                label,
                budget,
            )
            raise PoolExhaustedError(
                attempts=budget,
                retry_after=int(self.cooldown) or None,
                operation=label,
                context={"request_id": request_id},
            ) from (last.error if last else None)

        if isinstance(outcome, FatalFailure):
            raise outcome.error
        return outcome.value

    async def _attempt(
        self,
        operation: Callable[[ModelHandle], Awaitable[T]],
        label: str,
        binding: TierBinding,
        request_id: str,
    ) -> AttemptOutcome:
        selection = self.state.select()
        if selection.swept:
            logger.warning(
                "[%s] Every API key was marked exhausted; cooling down %.1fs before %s",
                request_id,
                self.cooldown,
                label,
            )
            await self._pause(self.cooldown)

        credential = self.pool.credential_at(selection.index)
        handle = bind_handle(binding, credential, self.client_factory(credential))

        try:
            value = await operation(handle)
        except Exception as e:
            if not is_quota_error(e):
                logger.error(
                    "[%s] %s failed with %s on %s: %s",
                    request_id,
                    label,
                    binding.model_id,
                    credential.label,
                    str(e),
                )
                return FatalFailure(error=e, credential_index=credential.index)

            exhausted = self.state.record_quota_failure(credential.index)
            logger.warning(
                "[%s] %s hit quota on %s (%s): %s",
                request_id,
                label,
                credential.label,
                binding.model_id,
                str(e),
            )
            return RecoverableFailure(
                error=e,
                credential_index=credential.index,
                pool_exhausted=exhausted,
            )

        self.state.record_success(credential.index)
        logger.info(
            "[%s] %s succeeded with %s (%s)",
            request_id,
            label,
            binding.model_id,
            credential.label,
        )
        return Success(value=value, credential_index=credential.index)

    def _wait_after(self, retry_state: RetryCallState) -> float:
        outcome = retry_state.outcome.result() if retry_state.outcome else None
        if isinstance(outcome, RecoverableFailure) and outcome.pool_exhausted:
            return self.cooldown
        return 0.0

    def _log_cooldown(self, retry_state: RetryCallState) -> None:
        if retry_state.next_action and retry_state.next_action.sleep > 0:
            logger.warning(
                "All %d API keys exhausted; waiting %.1fs before retry",
                self.pool.size,
                retry_state.next_action.sleep,
            )

    async def _pause(self, seconds: float) -> None:
        if seconds > 0:
            await self._sleep(seconds)
