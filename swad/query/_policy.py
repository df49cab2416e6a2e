"""
Query policy — fetch behaviour configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timedelta


@dataclass(frozen=True, slots=True)
class Policy:
    """
    Query fetch policy.

    Fluent builder pattern — chain methods to configure.

    Example:
        policy = (
            Policy()
            .with_retries(2)
            .with_retry_delay(seconds=0.5)
            .with_stale_after(minutes=5)
        )

        profile_policy = Policy().without_retry()

    Note: Immutable — each method returns a new Policy.

    retries: automatic retries after a failed fetch. Zero means a failure is
    reported as-is; use it when "absent" and "transient error" must not be
    blurred by silent refetching.

    stale_after: optional age after which cached data is refetched on read.
    None means data only goes stale through invalidation.
    """

    retries: int = 3
    retry_delay: timedelta = timedelta(seconds=1)
    backoff_factor: float = 2.0
    max_retry_delay: timedelta = timedelta(seconds=30)
    stale_after: timedelta | None = None

    def with_retries(self, times: int) -> Policy:
        if times < 0:
            raise ValueError("retries must be >= 0")
        return replace(self, retries=times)

    def without_retry(self) -> Policy:
        return replace(self, retries=0)

    def with_retry_delay(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
        backoff_factor: float | None = None,
    ) -> Policy:
        """
        Set the delay before the first retry, and optionally the backoff factor.

        Example:
            .with_retry_delay(seconds=0.2, backoff_factor=3)
        """
        delay = delta if delta is not None else timedelta(seconds=seconds or 0)
        return replace(
            self,
            retry_delay=delay,
            backoff_factor=backoff_factor if backoff_factor is not None else self.backoff_factor,
        )

    def with_stale_after(
        self,
        *,
        seconds: float | None = None,
        minutes: float | None = None,
        delta: timedelta | None = None,
    ) -> Policy:
        if delta is not None:
            stale = delta
        else:
            total = (seconds or 0) + (minutes or 0) * 60
            stale = timedelta(seconds=total) if total > 0 else None
        return replace(self, stale_after=stale)

    def delays(self) -> list[float]:
        """Sleep before each retry, in seconds."""
        out: list[float] = []
        delay = self.retry_delay.total_seconds()
        cap = self.max_retry_delay.total_seconds()
        for _ in range(self.retries):
            out.append(min(delay, cap))
            delay *= self.backoff_factor
        return out


__all__ = ("Policy",)
