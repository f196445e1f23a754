"""Minimum spacing between outbound model calls, plus throttle backoff.

A single RateGate serializes every call made through it: each request waits
until ``delay_between_requests_ms`` has passed since the previous one. When
the endpoint answers with a throttle signal the same request is retried after
a longer backoff, up to ``max_attempts`` attempts in total.

Callers that overlap, such as concurrent HTTP requests sharing one gate, queue
on a lock held across the wait and the timestamp update, so their calls are
still spaced apart.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Awaitable, Callable, Optional, Protocol, TypeVar

from termslens.analysis.errors import ThrottledError
from termslens.analysis.models import RateGateStatus
from termslens.observability.events import EventSink, LoggingEventSink
from termslens.settings.config import RateLimitConfig

T = TypeVar("T")


class Clock(Protocol):
    def now(self) -> float: ...

    async def sleep(self, seconds: float) -> None: ...


class MonotonicClock:
    """Wall-independent clock backed by time.monotonic and asyncio.sleep."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class RateGate:
    def __init__(
        self,
        delay_between_requests_ms: int = 30_000,
        max_attempts: int = 2,
        backoff_multiplier: float = 2.0,
        jitter_ms: int = 0,
        requests_per_day: int = 50,
        clock: Optional[Clock] = None,
        events: Optional[EventSink] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.delay_between_requests_ms = delay_between_requests_ms
        self.max_attempts = max_attempts
        self.backoff_multiplier = backoff_multiplier
        self.jitter_ms = jitter_ms
        self.requests_per_day = requests_per_day
        self.clock = clock or MonotonicClock()
        self.events = events or LoggingEventSink()
        self._rng = rng or random.Random()
        self.last_request_time: Optional[float] = None
        self.request_count = 0
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(
        cls,
        config: RateLimitConfig,
        clock: Optional[Clock] = None,
        events: Optional[EventSink] = None,
    ) -> RateGate:
        return cls(
            delay_between_requests_ms=config.delay_between_requests_ms,
            max_attempts=config.max_attempts,
            backoff_multiplier=config.backoff_multiplier,
            jitter_ms=config.jitter_ms,
            requests_per_day=config.requests_per_day,
            clock=clock,
            events=events,
        )

    @property
    def delay_seconds(self) -> float:
        return self.delay_between_requests_ms / 1000

    async def acquire(self) -> None:
        """Wait out the remaining spacing, then record a granted request."""
        async with self._lock:
            if self.last_request_time is not None:
                elapsed = self.clock.now() - self.last_request_time
                wait = self.delay_seconds - elapsed
                if wait > 0:
                    self.events.emit("rate_gate.wait", wait_ms=int(wait * 1000))
                    await self.clock.sleep(wait)

            self.last_request_time = self.clock.now()
            self.request_count += 1
        self.events.emit(
            "rate_gate.acquired",
            request_count=self.request_count,
            requests_per_day=self.requests_per_day,
        )
        if self.request_count > self.requests_per_day:
            self.events.emit(
                "rate_gate.daily_limit_exceeded",
                level=logging.WARNING,
                request_count=self.request_count,
                requests_per_day=self.requests_per_day,
            )

    def _backoff_seconds(self) -> float:
        backoff = self.delay_seconds * self.backoff_multiplier
        if self.jitter_ms:
            backoff += self._rng.uniform(0, self.jitter_ms) / 1000
        return backoff

    async def call(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` behind the gate, retrying on throttle signals."""
        for attempt in range(1, self.max_attempts + 1):
            await self.acquire()
            try:
                return await operation()
            except ThrottledError as exc:
                if attempt >= self.max_attempts:
                    self.events.emit(
                        "rate_gate.throttle_exhausted",
                        level=logging.ERROR,
                        attempts=attempt,
                        error=str(exc),
                    )
                    raise
                backoff = self._backoff_seconds()
                self.events.emit(
                    "rate_gate.throttled",
                    level=logging.WARNING,
                    attempt=attempt,
                    backoff_ms=int(backoff * 1000),
                )
                await self.clock.sleep(backoff)
        raise AssertionError("unreachable")  # pragma: no cover

    def status(self) -> RateGateStatus:
        return RateGateStatus(
            request_count=self.request_count,
            requests_per_day=self.requests_per_day,
            delay_between_requests_ms=self.delay_between_requests_ms,
            daily_limit_exceeded=self.request_count > self.requests_per_day,
        )
