from fastapi import Request
from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from ticketing import constant_file
from ticketing.errors import APIError
from ticketing.logger import get_logger

logger = get_logger(__name__)

# Shared by every limiter in the process
storage = MemoryStorage()
limiter = FixedWindowRateLimiter(storage)


class RateLimit:
    """FastAPI dependency allowing `limit` hits per client IP within one scope."""

    def __init__(self, limit: str, scope: str, message: str):
        self.item = parse(limit)
        self.scope = scope
        self.message = message

    async def __call__(self, request: Request = None):
        # Websocket handshakes carry no Request
        if request is None or not constant_file.rate_limit_enabled:
            return
        client = request.client.host if request.client else "anonymous"
        if not limiter.hit(self.item, self.scope, client):
            logger.warning("Rate limit %s exceeded by %s", self.scope, client)
            raise APIError(self.message, 429)


general_limiter = RateLimit(
    constant_file.general_rate_limit, "general",
    "Too many requests from this IP, please try again after 10 minutes",
)
login_limiter = RateLimit(
    constant_file.login_rate_limit, "login",
    "Too many login attempts, please try again after 15 minutes",
)
registration_limiter = RateLimit(
    constant_file.registration_rate_limit, "registration",
    "Too many accounts created from this IP, please try again after an hour",
)
sensitive_limiter = RateLimit(
    constant_file.sensitive_rate_limit, "sensitive",
    "Too many requests for sensitive operations, please try again after an hour",
)


def reset_limits():
    storage.reset()
