"""Frame clocks and delays that drive spin animation.

The engine never reads wall-clock time itself. It awaits ``next_frame()``
on whatever clock it was given and treats the returned value as a
millisecond timestamp, so tests can drive spins with synthetic time.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Protocol

from spinwheel.config import FRAME_RATE

Sleeper = Callable[[float], Awaitable[None]]


class FrameClock(Protocol):
    """Source of display-frame timestamps."""

    async def next_frame(self) -> float:
        """Wait for the next frame and return its timestamp in milliseconds."""
        ...


class AsyncioFrameClock:
    """Real-time frame clock backed by the running event loop."""

    def __init__(self, fps: int = FRAME_RATE):
        self.interval = 1.0 / max(1, fps)

    async def next_frame(self) -> float:
        await asyncio.sleep(self.interval)
        return asyncio.get_running_loop().time() * 1000.0


class SteppedFrameClock:
    """Synthetic clock: every frame advances time by a fixed step.

    Only yields to the event loop between frames, so a full spin completes
    without real waiting.
    """

    def __init__(self, step_ms: float = 16.0, start_ms: float = 0.0):
        self.step_ms = step_ms
        self.now = start_ms
        self.frames = 0

    async def next_frame(self) -> float:
        await asyncio.sleep(0)
        timestamp = self.now
        self.now += self.step_ms
        self.frames += 1
        return timestamp


async def asyncio_sleep_ms(ms: float) -> None:
    """Production sleeper for presentation delays."""
    await asyncio.sleep(max(0.0, ms) / 1000.0)


async def instant_sleep(ms: float) -> None:
    """Sleeper that skips the delay but still yields control."""
    await asyncio.sleep(0)
