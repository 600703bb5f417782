"""
Login throttling against password guessing.

In-memory sliding window keyed by client IP. Each worker process keeps its
own window; a shared store would be needed to throttle across workers.
"""
import logging
import time
from typing import Dict, List, Tuple

from fastapi import Request

from pharmasales.core.config import settings
from pharmasales.core.exceptions import BusinessError

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window counter per client id."""

    def __init__(self, requests: int = 10, window: int = 300):
        """
        Args:
            requests: Maximum requests allowed in window
            window: Time window in seconds
        """
        self.requests = requests
        self.window = window
        self.clients: Dict[str, List[float]] = {}

    def is_allowed(self, client_id: str, now: float | None = None) -> Tuple[bool, int]:
        """
        Record one hit for client_id if it is under the limit.

        Returns:
            (allowed, remaining)
        """
        now = time.time() if now is None else now
        cutoff = now - self.window
        self._prune(cutoff)
        timestamps = [ts for ts in self.clients.get(client_id, []) if ts > cutoff]

        if len(timestamps) >= self.requests:
            self.clients[client_id] = timestamps
            return False, 0

        timestamps.append(now)
        self.clients[client_id] = timestamps
        return True, self.requests - len(timestamps)

    def _prune(self, cutoff: float) -> None:
        # Drop clients whose newest hit has left the window
        stale = [key for key, hits in self.clients.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self.clients[key]

    def reset(self, client_id: str | None = None) -> None:
        if client_id is None:
            self.clients.clear()
        else:
            self.clients.pop(client_id, None)


login_limiter = RateLimiter(
    requests=settings.LOGIN_RATE_LIMIT_ATTEMPTS,
    window=settings.LOGIN_RATE_LIMIT_WINDOW_SECONDS,
)


def limit_login_attempts(request: Request) -> None:
    """Dependency for POST /api/auth/login."""
    client_ip = request.client.host if request.client else "unknown"
    allowed, _ = login_limiter.is_allowed(f"ip:{client_ip}")
    if not allowed:
        logger.warning(f"Login rate limit exceeded for {client_ip}")
        raise BusinessError.rate_limit_exceeded(
            f"Too many login attempts. Try again in {settings.LOGIN_RATE_LIMIT_WINDOW_SECONDS} seconds."
        )
