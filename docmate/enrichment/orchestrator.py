from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional

from ..config import DEFAULT_PROVIDER_TIMEOUT
from .errors import AllProvidersExhausted, ProviderInvocationFailed, ProviderUnavailable
from .models import Capability, OrchestrationReport
from .rate_limit import SlidingWindowRateLimiter
from .registry import Provider, ProviderRegistry

logger = logging.getLogger(__name__)


class FallbackOrchestrator:
    """
    Runs capability requests against the ranked providers of a registry.

    First-success requests walk the chain strictly one provider at a time and
    stop at the first usable result. Fan-out requests call every admitted
    provider concurrently, wait for all of them, and merge the successes in
    priority order before appending the baseline. Provider failures never
    escape; only exhaustion of a chain without a baseline does.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        rate_limiter: Optional[SlidingWindowRateLimiter] = None,
        provider_timeout: Optional[float] = DEFAULT_PROVIDER_TIMEOUT,
    ):
        self.registry = registry
        self.rate_limiter = rate_limiter or SlidingWindowRateLimiter()
        self.provider_timeout = provider_timeout

    async def first_success(
        self,
        capability: Capability,
        request: Any,
        fallback: Optional[Provider] = None,
        report: Optional[OrchestrationReport] = None,
    ) -> Any:
        report = report if report is not None else OrchestrationReport(capability)
        for provider in self.registry.resolve(capability):
            try:
                result = await self._call(provider, request)
            except ProviderUnavailable as exc:
                report.record(provider.name, "unavailable", exc.reason)
                logger.warning("%s: %s skipped (%s)", capability.value, provider.name, exc.reason)
                continue
            except ProviderInvocationFailed as exc:
                report.record(provider.name, "failed", exc.reason)
                logger.warning("%s: %s failed (%s)", capability.value, provider.name, exc.reason)
                continue
            report.record(provider.name, "success")
            return result

        fallback = fallback or self.registry.baseline(capability)
        if fallback is None:
            logger.error("%s: all providers exhausted %s", capability.value, report.summary())
            raise AllProvidersExhausted(capability, report.attempts)

        result = fallback.normalize(await fallback.invoke(request), request)
        if hasattr(result, "degraded"):
            result.degraded = True
        report.record(fallback.name, "success", "local fallback")
        report.degraded = True
        logger.info("%s: degraded to %s", capability.value, fallback.name)
        return result

    async def fan_out(
        self,
        capability: Capability,
        request: Any,
        baseline: Optional[Provider] = None,
        report: Optional[OrchestrationReport] = None,
    ) -> List[Any]:
        report = report if report is not None else OrchestrationReport(capability)
        providers = self.registry.resolve(capability)
        outcomes = await asyncio.gather(
            *(self._call(provider, request) for provider in providers),
            return_exceptions=True,
        )

        merged: List[Any] = []
        for provider, outcome in zip(providers, outcomes):
            if isinstance(outcome, ProviderUnavailable):
                report.record(provider.name, "unavailable", outcome.reason)
                logger.warning("%s: %s skipped (%s)", capability.value, provider.name, outcome.reason)
            elif isinstance(outcome, ProviderInvocationFailed):
                report.record(provider.name, "failed", outcome.reason)
                logger.warning("%s: %s failed (%s)", capability.value, provider.name, outcome.reason)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                report.record(provider.name, "success")
                merged.extend(_as_list(outcome))

        baseline = baseline or self.registry.baseline(capability)
        if baseline is not None:
            merged.extend(_as_list(baseline.normalize(await baseline.invoke(request), request)))
            report.record(baseline.name, "success", "baseline")
        return merged

    async def _call(self, provider: Provider, request: Any) -> Any:
        limit = provider.rate_limit
        if not self.rate_limiter.try_admit(provider.key, limit.max_requests, limit.window_ms):
            raise ProviderUnavailable(provider.name, "rate limited")

        try:
            if self.provider_timeout:
                raw = await asyncio.wait_for(provider.invoke(request), timeout=self.provider_timeout)
            else:
                raw = await provider.invoke(request)
        except asyncio.TimeoutError as exc:
            raise ProviderInvocationFailed(provider.name, f"timed out after {self.provider_timeout}s") from exc
        except (ProviderUnavailable, ProviderInvocationFailed):
            raise
        except Exception as exc:  # noqa: BLE001
            raise ProviderInvocationFailed(provider.name, str(exc) or type(exc).__name__) from exc

        try:
            result = provider.normalize(raw, request)
        except Exception as exc:  # noqa: BLE001
            raise ProviderInvocationFailed(provider.name, f"malformed response: {exc}") from exc
        if result is None:
            raise ProviderInvocationFailed(provider.name, "no result")
        return result


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]
