"""
Rate limiting dependency.

Provides per-client rate limiting for API endpoints.
"""

from fastapi import Request, Response, HTTPException, status
from typing import Dict
import time
from collections import defaultdict, deque

from shared.utils.logger import setup_logger

logger = setup_logger(__name__)


class RateLimiter:
    """
    Simple in-memory rate limiter.

    Uses sliding window algorithm to track requests.
    State is per process; run behind a shared limiter when scaling out.
    """

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: int = 900,
        enabled: bool = True,
        trust_proxy_headers: bool = False,
    ):
        """
        Initialize rate limiter with request tracking.

        Args:
            max_requests: Requests allowed per window
            window_seconds: Window length in seconds
            enabled: When False every request is allowed
            trust_proxy_headers: Read the client address from X-Forwarded-For
        """
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.enabled = enabled
        self.trust_proxy_headers = trust_proxy_headers
        # Format: {client_id: deque([timestamp1, timestamp2, ...])}
        self.requests: Dict[str, deque] = defaultdict(deque)
        self._last_sweep = time.time()

    def is_allowed(self, client_id: str) -> bool:
        """
        Check if request is allowed under rate limit.

        Args:
            client_id: Client identifier (IP address)

        Returns:
            True if request is allowed, False otherwise
        """
        if not self.enabled:
            return True

        current_time = time.time()
        window_start = current_time - self.window_seconds

        if current_time - self._last_sweep >= self.window_seconds:
            self._sweep(window_start)
            self._last_sweep = current_time

        client_requests = self.requests[client_id]

        # Remove requests outside the current window
        while client_requests and client_requests[0] < window_start:
            client_requests.popleft()

        if len(client_requests) >= self.max_requests:
            logger.warning(
                f"Rate limit exceeded for {client_id}: "
                f"{len(client_requests)} requests in {self.window_seconds}s window"
            )
            return False

        client_requests.append(current_time)
        return True

    def get_remaining_requests(self, client_id: str) -> int:
        """
        Get remaining requests for client.

        Args:
            client_id: Client identifier

        Returns:
            Number of remaining requests
        """
        window_start = time.time() - self.window_seconds
        recent = [t for t in self.requests.get(client_id, ()) if t >= window_start]
        return max(0, self.max_requests - len(recent))

    def _sweep(self, window_start: float) -> None:
        """Drop clients with no requests inside the current window."""
        stale = [cid for cid, stamps in self.requests.items() if not stamps or stamps[-1] < window_start]
        for cid in stale:
            del self.requests[cid]
        if stale:
            logger.debug(f"Rate limiter dropped {len(stale)} idle clients")


def get_client_id(request: Request) -> str:
    """
    Get client identifier for rate limiting.

    Uses the peer address. The first X-Forwarded-For hop is used instead
    only when the limiter trusts proxy headers.
    """
    limiter: RateLimiter = request.app.state.rate_limiter
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded and limiter.trust_proxy_headers:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


async def check_rate_limit(request: Request, response: Response) -> None:
    """
    Rate limiting dependency.

    Allowed responses carry X-RateLimit-Limit and X-RateLimit-Remaining.

    Raises:
        HTTPException: 429 if the client exceeded its window
    """
    limiter: RateLimiter = request.app.state.rate_limiter
    client_id = get_client_id(request)

    if not limiter.is_allowed(client_id):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests from this IP, please try again later.",
            headers={"Retry-After": str(limiter.window_seconds)},
        )

    if limiter.enabled:
        response.headers["X-RateLimit-Limit"] = str(limiter.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(limiter.get_remaining_requests(client_id))
