"""Bounded send-with-retry loop shared by the email and SMS dispatchers.

Mental model refresher:
- A provider call either returns a response or raises.
- A response that is not "accepted" is retried until attempts run out.
- A raised fault stops the loop at once; it is never retried.
- Attempts are issued back-to-back (no backoff, no jitter).
- The outcome keeps the reason so callers can log it, but the public
  dispatcher methods only hand back `outcome.success`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

Attempt = Callable[[], "str | None"]
"""One provider call. Returns None when accepted, else a rejection reason."""


@dataclass(frozen=True)
class DispatchOutcome:
    success: bool
    attempts: int = 0
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.success


def send_with_retry(attempt: Attempt, retries: int) -> DispatchOutcome:
    """Run `attempt` until it is accepted or `retries` calls have been made."""
    success = False
    remaining = retries
    attempts = 0
    last_rejection: str | None = None

    while not success and remaining > 0:
        attempts += 1
        try:
            last_rejection = attempt()
        except Exception as exc:
            return fault_outcome(exc, attempts=attempts)
        success = last_rejection is None
        remaining -= 1

    if success:
        return DispatchOutcome(success=True, attempts=attempts)
    if attempts == 0:
        return DispatchOutcome(success=False, attempts=0, reason="no attempts allowed")
    return DispatchOutcome(
        success=False,
        attempts=attempts,
        reason=f"exhausted: {last_rejection}",
    )


def fault_outcome(exc: Exception, *, attempts: int = 0) -> DispatchOutcome:
    return DispatchOutcome(
        success=False,
        attempts=attempts,
        reason=f"fault: {type(exc).__name__}: {exc}",
    )


def mask_recipient(to: str) -> str:
    """`"person@example.com"` -> `"p***@example.com"`, `"08031234567"` -> `"***4567"`."""
    local, at, domain = to.partition("@")
    if at:
        return f"{local[:1]}***@{domain}"
    return f"***{to[-4:]}" if len(to) > 4 else "***"


def log_outcome(channel: str, to: str, outcome: DispatchOutcome) -> None:
    """Emit the outcome reason; the public boolean result drops it."""
    masked = mask_recipient(to)
    if outcome.success:
        logger.debug("[SENT] channel=%s to=%s attempts=%d", channel, masked, outcome.attempts)
        return
    logger.warning(
        "[NOT SENT] channel=%s to=%s attempts=%d reason=%s",
        channel,
        masked,
        outcome.attempts,
        outcome.reason,
    )
