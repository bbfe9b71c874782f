"""Fixed-window rate limiting (limits library) with named policies and an admin bypass."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Request
from limits import RateLimitItem, parse
from limits.storage import MemoryStorage, Storage
from limits.strategies import FixedWindowRateLimiter

from app.core.config import Settings
from app.core.errors import TooManyRequests

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RatePolicy:
    """One named limit. per_user policies key by user id when the caller is authenticated."""

    name: str
    item: RateLimitItem
    message: str
    per_user: bool = False

    @property
    def window(self) -> str:
        unit = self.item.GRANULARITY.name
        multiples = self.item.multiples
        return f"{multiples} {unit}{'s' if multiples != 1 else ''}"


def build_policies(settings: Settings) -> dict[str, RatePolicy]:
    """Policies from settings: general, auth, password_reset, strict."""
    return {
        "general": RatePolicy(
            name="general",
            item=parse(settings.RATE_LIMIT_GENERAL),
            message="Too many requests from this IP, please try again later.",
        ),
        "auth": RatePolicy(
            name="auth",
            item=parse(settings.RATE_LIMIT_AUTH),
            message="Too many attempts, please try again later.",
        ),
        "password_reset": RatePolicy(
            name="password_reset",
            item=parse(settings.RATE_LIMIT_PASSWORD_RESET),
            message="Too many password reset attempts, please try again later.",
        ),
        "strict": RatePolicy(
            name="strict",
            item=parse(settings.RATE_LIMIT_STRICT),
            message="Too many requests to sensitive endpoints, please try again later.",
            per_user=True,
        ),
    }


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RateLimiter:
    """
    Counter state for every policy. Lives on the application context, so each
    app instance (and each test) has its own windows.
    """

    def __init__(self, settings: Settings, storage: Storage | None = None) -> None:
        self.enabled = settings.RATE_LIMIT_ENABLED
        self.policies = build_policies(settings)
        self.storage = storage or MemoryStorage()
        self._strategy = FixedWindowRateLimiter(self.storage)

    def check(
        self,
        policy_name: str,
        request: Request,
        user_id: int | None = None,
        is_admin: bool = False,
    ) -> None:
        """
        Count one request against policy_name; raise TooManyRequests when the window is full.

        Per-user policies skip admins and key by user id, falling back to the client IP.
        """
        if not self.enabled:
            return
        policy = self.policies[policy_name]
        ip = client_ip(request)
        if policy.per_user and is_admin:
            return
        if policy.per_user and user_id is not None:
            key = f"user:{user_id}"
        else:
            key = f"ip:{ip}"

        if self._strategy.hit(policy.item, policy.name, key):
            return

        reset_at = self._strategy.get_window_stats(policy.item, policy.name, key).reset_time
        logger.warning(
            "Rate limit exceeded",
            extra={"policy": policy.name, "key": key, "path": request.url.path},
        )
        raise TooManyRequests(
            message=policy.message,
            details={
                "retryAfter": policy.window,
                "limit": policy.item.amount,
                "window": policy.window,
                "ip": ip,
                "endpoint": request.url.path,
            },
            headers={"Retry-After": str(max(1, int(reset_at - time.time())))},
        )


def rate_limit(policy_name: str) -> Callable[[Request], None]:
    """Dependency factory for IP-keyed policies."""

    def dependency(request: Request) -> None:
        request.app.state.context.limiter.check(policy_name, request)

    return dependency
