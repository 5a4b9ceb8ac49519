import asyncio
import time
from datetime import datetime, timezone
from contextlib import contextmanager
from typing import Iterator, Optional, Dict, Any, Protocol
import logging


@contextmanager
def timed(logger: logging.Logger, name: str, **kv: Dict[str, Any]) -> Iterator[None]:
    """
    Usage:
      with timed(logger, "search.query", chunk=3):
          ...
    Emits one INFO on exit: "<name>.done ms=<int> key=val ..."
    """
    t0 = time.perf_counter()
    try:
        yield
    finally:
        dt_ms = int((time.perf_counter() - t0) * 1000)
        suffix = "".join(f" {k}={v}" for k, v in kv.items())
        logger.info("%s.done ms=%d%s", name, dt_ms, suffix)


class Clock(Protocol):
    def monotonic(self) -> float: ...

    def now(self) -> float: ...

    async def sleep(self, seconds: float) -> None: ...


class SystemClock:
    """Wall-clock implementation backed by time + asyncio."""

    def monotonic(self) -> float:
        return time.monotonic()

    def now(self) -> float:
        return time.time()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class Pacer:
    """
    Keeps a fixed gap between paced calls.

    The first `wait()` never blocks. Later calls sleep for whatever is left of
    `interval` since the previous paced call finished (`done()`), or since the
    previous `wait()` returned when `done()` was not called.
    """

    def __init__(self, interval: float, clock: Optional[Clock] = None) -> None:
        self._interval = max(0.0, float(interval))
        self._clock = clock or SystemClock()
        self._last: Optional[float] = None

    @property
    def interval(self) -> float:
        return self._interval

    async def wait(self) -> float:
        """Block until the next call is allowed; returns the seconds slept."""
        slept = 0.0
        if self._last is not None and self._interval > 0:
            remaining = self._interval - (self._clock.monotonic() - self._last)
            if remaining > 0:
                await self._clock.sleep(remaining)
                slept = remaining
        self._last = self._clock.monotonic()
        return slept

    def done(self) -> None:
        """Mark the end of the paced call; the gap is measured from here."""
        self._last = self._clock.monotonic()

    def reset(self) -> None:
        self._last = None


def utc_now(clock: Optional[Clock] = None) -> datetime:
    return datetime.fromtimestamp((clock or SystemClock()).now(), tz=timezone.utc)
