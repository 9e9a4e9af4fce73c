"""Attempt limits for the unauthenticated auth endpoints.

Counts live in process memory: they reset on restart and are not shared
between workers.
"""

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordRequestForm

from parkboard.config import settings
from parkboard.core.exceptions import RateLimitError

logger = logging.getLogger(__name__)

# Bound on tracked identifiers before expired windows are swept.
_PRUNE_THRESHOLD = 10_000


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """Fixed-window counter: ``max_attempts`` per identifier per window."""

    def __init__(
        self,
        max_attempts: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}

    def check(self, identifier: str) -> tuple[bool, int]:
        """Record an attempt. Returns ``(allowed, retry_after_seconds)``."""
        now = self._clock()
        window = self._windows.get(identifier)

        if window is None or now >= window.reset_at:
            if len(self._windows) >= _PRUNE_THRESHOLD:
                self._prune(now)
            self._windows[identifier] = _Window(count=1, reset_at=now + self.window_seconds)
            return True, 0

        if window.count >= self.max_attempts:
            return False, max(1, math.ceil(window.reset_at - now))

        window.count += 1
        return True, 0

    def reset(self) -> None:
        self._windows.clear()

    def _prune(self, now: float) -> None:
        expired = [key for key, window in self._windows.items() if now >= window.reset_at]
        for key in expired:
            del self._windows[key]


signup_limiter = RateLimiter(
    settings.auth_rate_limit_attempts, settings.auth_rate_limit_window_seconds
)
login_limiter = RateLimiter(
    settings.auth_rate_limit_attempts, settings.auth_rate_limit_window_seconds
)


def _enforce(limiter: RateLimiter, identifier: str, action: str) -> None:
    if not settings.rate_limit_enabled:
        return

    allowed, retry_after = limiter.check(identifier)
    if not allowed:
        logger.warning("Rate limit reached for %s attempts", action)
        minutes = math.ceil(retry_after / 60)
        raise RateLimitError(
            f"Too many {action} attempts. Please try again in {minutes} minutes.",
            retry_after=retry_after,
        )


def _identifier(email: object, request: Request) -> str:
    if isinstance(email, str) and email.strip():
        return email.strip().lower()
    return request.client.host if request.client else "unknown"


async def limit_signup(request: Request) -> None:
    # The body has already been read and cached by the time dependencies run.
    try:
        body = await request.json()
    except ValueError:
        # Empty body; field validation reports it.
        body = None
    email = body.get("email") if isinstance(body, dict) else None
    _enforce(signup_limiter, _identifier(email, request), "signup")


async def limit_login(
    request: Request,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
) -> None:
    _enforce(login_limiter, _identifier(form_data.username, request), "login")
