"""
Rate limiting throttles for the vote and join endpoints.
"""

from django.conf import settings
from rest_framework.throttling import SimpleRateThrottle


class LoadTestBypassMixin:
    """Mixin to bypass rate limiting for load tests."""

    def allow_request(self, request, view):
        """Check if request should bypass rate limiting."""
        if getattr(settings, "DISABLE_RATE_LIMITING", False):
            return True

        # The load test header only counts where load testing is explicitly allowed
        if getattr(settings, "ALLOW_LOAD_TEST_BYPASS", False) and request.META.get("HTTP_X_LOAD_TEST") == "true":
            return True

        return super().allow_request(request, view)


class ClientRateThrottle(LoadTestBypassMixin, SimpleRateThrottle):
    """Throttle keyed by user id when authenticated, else by client IP."""

    def get_cache_key(self, request, view):
        if request.user and request.user.is_authenticated:
            ident = f"user:{request.user.pk}"
        else:
            ident = f"ip:{self.get_ident(request)}"
        return self.cache_format % {"scope": self.scope, "ident": ident}


class VoteCastRateThrottle(ClientRateThrottle):
    scope = "vote_cast"


class EventJoinRateThrottle(ClientRateThrottle):
    scope = "event_join"
