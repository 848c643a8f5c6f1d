"""Best-effort side effects with an explicit outcome record.

Organization writes trigger follow-up work (owner-role assignment, title card
generation) whose failure must never fail the write itself. Each piece of
follow-up work runs through ``run_side_effect`` which retries it according to
a tenacity policy and reports a ``SideEffectResult`` instead of raising.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal

from tenacity import (
    AsyncRetrying,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_none,
)

from richhabits.core.config import Settings
from richhabits.core.metrics import record_side_effect
from richhabits.core.structured_logging import log_json

logger = logging.getLogger(__name__)

SideEffectStatus = Literal["succeeded", "skipped", "failed"]
SideEffectFn = Callable[[], Awaitable[None]]


class SideEffectSkipped(Exception):
    """Raised by a side effect whose preconditions are not met."""


@dataclass(frozen=True)
class SideEffectResult:
    name: str
    status: SideEffectStatus
    attempts: int
    detail: str | None = None


async def run_side_effect(
    name: str,
    fn: SideEffectFn,
    *,
    max_attempts: int = 1,
    backoff_seconds: float = 0.0,
    backoff_max_seconds: float = 0.0,
) -> SideEffectResult:
    """Run ``fn`` with retries and return its outcome.

    ``SideEffectSkipped`` ends the effect immediately as ``skipped``. Any
    other exception is retried until ``max_attempts`` is exhausted and then
    recorded as ``failed``.
    """
    if backoff_seconds > 0 and backoff_max_seconds > 0:
        wait = wait_exponential(multiplier=backoff_seconds, max=backoff_max_seconds)
    elif backoff_seconds > 0:
        wait = wait_exponential(multiplier=backoff_seconds)
    else:
        wait = wait_none()

    attempts = 0
    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max(1, max_attempts)),
            wait=wait,
            retry=retry_if_not_exception_type(SideEffectSkipped),
            reraise=True,
        ):
            with attempt:
                attempts = attempt.retry_state.attempt_number
                await fn()
    except SideEffectSkipped as exc:
        result = SideEffectResult(name=name, status="skipped", attempts=attempts, detail=str(exc))
        log_json(logger, logging.INFO, "side_effect_skipped", side_effect=name, reason=str(exc))
    except Exception as exc:
        detail = f"{exc.__class__.__name__}: {exc}"
        result = SideEffectResult(name=name, status="failed", attempts=attempts, detail=detail)
        log_json(
            logger,
            logging.WARNING,
            "side_effect_failed",
            side_effect=name,
            attempts=attempts,
            error=detail,
        )
    else:
        result = SideEffectResult(name=name, status="succeeded", attempts=attempts)

    record_side_effect(name, result.status)
    return result


class PostCommitHooks:
    """Ordered list of side effects to run once the transaction committed."""

    def __init__(
        self,
        *,
        max_attempts: int = 1,
        backoff_seconds: float = 0.0,
        backoff_max_seconds: float = 0.0,
    ):
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.backoff_max_seconds = backoff_max_seconds
        self._hooks: list[tuple[str, SideEffectFn]] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> PostCommitHooks:
        return cls(
            max_attempts=settings.side_effect_max_attempts,
            backoff_seconds=settings.side_effect_backoff_seconds,
            backoff_max_seconds=settings.side_effect_backoff_max_seconds,
        )

    def add(self, name: str, fn: SideEffectFn) -> None:
        self._hooks.append((name, fn))

    def __len__(self) -> int:
        return len(self._hooks)

    async def run(self) -> list[SideEffectResult]:
        results = []
        for name, fn in self._hooks:
            results.append(
                await run_side_effect(
                    name,
                    fn,
                    max_attempts=self.max_attempts,
                    backoff_seconds=self.backoff_seconds,
                    backoff_max_seconds=self.backoff_max_seconds,
                )
            )
        self._hooks.clear()
        return results
