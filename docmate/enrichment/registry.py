from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .models import Capability

PLACEHOLDER_PREFIX = "YOUR_"


@dataclass(frozen=True)
class RateLimit:
    max_requests: int = 10
    window_ms: int = 60_000


def is_configured(value: Optional[str]) -> bool:
    """
    A credential counts as configured when it is non-empty and not one of the
    `YOUR_...` placeholders shipped in sample configuration.
    """
    if not value or not value.strip():
        return False
    return not value.strip().upper().startswith(PLACEHOLDER_PREFIX)


class Provider:
    """
    One concrete backend for one capability.

    Subclasses set `capability`, `name` and `default_priority`, and implement
    `invoke` (one external call returning the raw, provider-shaped response)
    and `normalize` (raw response -> canonical result, or None when the
    response holds no usable result). `is_available` must be a pure
    configuration check; it is called on every resolve.
    """

    capability: Capability
    name: str = "provider"
    default_priority: int = 100

    def __init__(self, priority: Optional[int] = None, rate_limit: Optional[RateLimit] = None):
        self.priority = self.default_priority if priority is None else priority
        self.rate_limit = rate_limit or RateLimit()

    @property
    def key(self) -> str:
        return f"{self.capability.value}:{self.name}"

    def is_available(self) -> bool:
        return True

    async def invoke(self, request: Any) -> Any:
        raise NotImplementedError

    def normalize(self, raw: Any, request: Any) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.key} priority={self.priority}>"


class ProviderRegistry:
    """
    Ranked provider chains per capability, plus at most one baseline provider
    per capability. A baseline is local and always succeeds: it is the
    degraded fallback of a first-success chain and the guaranteed tail of a
    fan-out.
    """

    def __init__(self):
        self._providers: List[Provider] = []
        self._baselines: Dict[Capability, Provider] = {}

    def register(self, provider: Provider) -> Provider:
        self._providers.append(provider)
        return provider

    def set_baseline(self, capability: Capability, provider: Provider) -> Provider:
        self._baselines[capability] = provider
        return provider

    def baseline(self, capability: Capability) -> Optional[Provider]:
        return self._baselines.get(capability)

    def providers(self, capability: Capability) -> List[Provider]:
        return [p for p in self._providers if p.capability == capability]

    def resolve(self, capability: Capability) -> List[Provider]:
        # sorted() is stable, so equal priorities keep registration order.
        available = [p for p in self.providers(capability) if p.is_available()]
        return sorted(available, key=lambda p: p.priority)

    def describe(self) -> Dict[str, List[Dict[str, Any]]]:
        described: Dict[str, List[Dict[str, Any]]] = {}
        for capability in Capability:
            entries = [
                {"name": p.name, "priority": p.priority, "available": p.is_available()}
                for p in sorted(self.providers(capability), key=lambda p: p.priority)
            ]
            baseline = self.baseline(capability)
            if baseline is not None:
                entries.append({"name": baseline.name, "priority": None, "available": True})
            if entries:
                described[capability.value] = entries
        return described
