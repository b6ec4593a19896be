from __future__ import annotations

from typing import List, Optional

from .models import Attempt, Capability


class EnrichmentError(RuntimeError):
    pass


class ProviderUnavailable(EnrichmentError):
    """
    The provider was not configured or not admitted by the rate limiter.
    Non-fatal: the orchestrator moves on to the next provider.
    """

    def __init__(self, provider: str, reason: str):
        super().__init__(f"{provider} unavailable: {reason}")
        self.provider = provider
        self.reason = reason


class ProviderInvocationFailed(EnrichmentError):
    """
    The provider call failed, timed out, or returned nothing usable.
    Non-fatal: the orchestrator moves on to the next provider.
    """

    def __init__(self, provider: str, reason: str):
        super().__init__(f"{provider} failed: {reason}")
        self.provider = provider
        self.reason = reason


class AllProvidersExhausted(EnrichmentError):
    def __init__(self, capability: Capability, attempts: Optional[List[Attempt]] = None):
        self.capability = capability
        self.attempts = list(attempts or [])
        tried = ", ".join(f"{a.provider}={a.outcome}" for a in self.attempts) or "no providers configured"
        super().__init__(f"All {capability.value} services failed ({tried})")
