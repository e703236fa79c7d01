"""Timed wheel spins: draw a winner, then animate the pointer onto it.

A spin is split into three pieces:

- ``plan_spin`` draws the outcome and works out the rotation target,
  turn count and duration up front.
- ``advance_spin`` is a pure frame step: given the plan, the previous frame
  and a timestamp it returns the next frame plus the events to emit.
- ``SpinEngine`` wires those to a frame clock and an event handler, and
  owns the wheel's rotation and busy flag.
"""

import asyncio
import math
import random

from pydantic import BaseModel

from spinwheel.clock import AsyncioFrameClock, FrameClock
from spinwheel.draw import RandomSource, draw_segment
from spinwheel.events import (
    EventHandler,
    FrameEvent,
    NullEventHandler,
    SpinEvent,
    TickEvent,
    dispatch,
)
from spinwheel.logging import get_logger
from spinwheel.models import (
    Candidate,
    CandidateId,
    Partition,
    SpinResult,
    SpinSettings,
    WeightMode,
)
from spinwheel.partition import (
    TAU,
    build_partition,
    find_segment_index,
    normalize_angle,
    pointer_angle,
)
from spinwheel.presets import DEFAULT_SPIN_SETTINGS

log = get_logger(__name__)

# Fraction of the winning segment's span kept clear at each edge when
# choosing where the pointer stops
LANDING_MARGIN = 0.05


class SpinInProgressError(RuntimeError):
    """Raised when a spin is requested while another one is animating."""


class WinnerMismatchError(RuntimeError):
    """Raised when the settled pointer disagrees with the drawn winner."""


class WheelState(BaseModel):
    """Mutable state owned by one engine instance."""
    rotation: float = 0.0
    spinning: bool = False


class SpinPlan(BaseModel):
    """Everything decided before the first frame of a spin."""
    partition: Partition
    drawn_candidate_id: CandidateId
    drawn_index: int
    final_angle: float
    turns: int
    duration: float
    start_rotation: float
    target_rotation: float


class SpinFrame(BaseModel):
    """Animation state after a frame has been processed."""
    started_at: float | None = None
    rotation: float
    progress: float = 0.0
    tick_index: int | None = None

    @property
    def done(self) -> bool:
        return self.progress >= 1.0


def ease_out_cubic(x: float) -> float:
    """Decelerating curve: fast start, gentle stop."""
    return 1 - (1 - x) ** 3


def plan_spin(
    partition: Partition,
    rotation: float,
    settings: SpinSettings,
    rng: RandomSource,
) -> SpinPlan:
    """Draw the outcome and compute the rotation that lands on it.

    The pointer stops at a random point inside the winning segment. The
    rotation increment is a whole number of turns plus whatever is needed
    to bring that point under the pointer from the current phase, and is
    never less than ``min_spins`` full turns.

    Turns are whole numbers drawn from ``[ceil(min_spins), floor(max_spins)]``.
    When fractional bounds leave no whole number between them (say 2.5 and
    2.9), the count rounds up to ``ceil(min_spins)`` and may exceed
    ``max_spins``.

    Args:
        partition: Non-degenerate wheel partition
        rotation: Current wheel rotation in radians
        settings: Spin bounds (normalized before use)
        rng: Random source for the draw, landing point, turns and duration

    Returns:
        The spin plan

    Raises:
        ValueError: If the partition has nothing to draw from
    """
    settings = settings.normalized()
    segment = draw_segment(partition.segments, partition.total_weight, rng)
    if segment is None or partition.is_degenerate:
        raise ValueError("Cannot plan a spin over an empty partition")

    offset = LANDING_MARGIN + rng.random() * (1 - 2 * LANDING_MARGIN)
    final_angle = segment.start_angle + segment.span * offset

    min_turns = math.ceil(settings.min_spins)
    max_turns = math.floor(settings.max_spins)
    if max_turns < min_turns:
        # No whole turn count fits the bounds; round up so min_spins still holds
        max_turns = min_turns
    turns = min(max_turns, min_turns + int(rng.random() * (max_turns - min_turns + 1)))

    duration = settings.min_duration + rng.random() * (settings.max_duration - settings.min_duration)

    # Rotating the wheel forward moves the pointer backward through the partition
    increment = turns * TAU + normalize_angle(pointer_angle(rotation) - final_angle)
    minimum_rotation = settings.min_spins * TAU
    while increment < minimum_rotation:
        increment += TAU

    return SpinPlan(
        partition=partition,
        drawn_candidate_id=segment.candidate_id,
        drawn_index=segment.index,
        final_angle=final_angle,
        turns=turns,
        duration=duration,
        start_rotation=rotation,
        target_rotation=rotation + increment,
    )


def advance_spin(
    plan: SpinPlan,
    frame: SpinFrame,
    timestamp: float,
) -> tuple[SpinFrame, list[SpinEvent]]:
    """Compute the next animation frame.

    The first frame fixes the start time. Rotation follows an ease-out
    cubic curve and snaps to the exact target once progress reaches 1.
    A tick is emitted only when the segment under the pointer changes.

    Args:
        plan: The spin plan
        frame: Previous frame (or the initial frame)
        timestamp: Frame timestamp in milliseconds

    Returns:
        Tuple of (next frame, events to emit)
    """
    started_at = frame.started_at if frame.started_at is not None else timestamp
    elapsed = timestamp - started_at
    progress = min(max(elapsed / plan.duration, 0.0), 1.0)

    if progress >= 1.0:
        rotation = plan.target_rotation
    else:
        eased = ease_out_cubic(progress)
        rotation = plan.start_rotation + (plan.target_rotation - plan.start_rotation) * eased

    segments = plan.partition.segments
    events: list[SpinEvent] = [FrameEvent(segments=segments, rotation=rotation, progress=progress)]

    index = find_segment_index(segments, pointer_angle(rotation))
    if index != frame.tick_index:
        events.append(TickEvent(candidate_id=segments[index].candidate_id, segment_index=index))

    next_frame = SpinFrame(
        started_at=started_at,
        rotation=rotation,
        progress=progress,
        tick_index=index,
    )
    return next_frame, events


def settle_spin(plan: SpinPlan, frame: SpinFrame) -> SpinResult:
    """Resolve the winner from where the pointer actually stopped.

    Raises:
        WinnerMismatchError: If it differs from the winner drawn in the plan
    """
    segments = plan.partition.segments
    index = find_segment_index(segments, pointer_angle(frame.rotation))
    winner_id = segments[index].candidate_id
    if index != plan.drawn_index:
        log.error(
            "winner_mismatch",
            drawn=plan.drawn_candidate_id,
            settled=winner_id,
            final_angle=plan.final_angle,
            pointer=pointer_angle(frame.rotation),
        )
        raise WinnerMismatchError(
            f"Pointer settled on {winner_id!r} but {plan.drawn_candidate_id!r} was drawn"
        )
    return SpinResult(
        winning_candidate_id=winner_id,
        settled_rotation=normalize_angle(frame.rotation),
    )


class SpinEngine:
    """Single-flight spin orchestrator for one wheel.

    Only one spin may animate at a time; a request made while the wheel is
    turning is rejected with ``SpinInProgressError`` rather than queued.
    Spins cannot be cancelled once started.
    """

    def __init__(
        self,
        clock: FrameClock | None = None,
        rng: RandomSource | None = None,
        event_handler: EventHandler | None = None,
    ):
        """Initialize the engine.

        Args:
            clock: Frame clock driving the animation (real time if None)
            rng: Random source for draws (a fresh ``random.Random`` if None)
            event_handler: Receiver for frame/tick/settled events
        """
        self.clock = clock or AsyncioFrameClock()
        self.rng = rng or random.Random()
        self.event_handler = event_handler or NullEventHandler()
        self.state = WheelState()

    @property
    def is_spinning(self) -> bool:
        return self.state.spinning

    @property
    def rotation(self) -> float:
        return self.state.rotation

    def spin(
        self,
        candidates: list[Candidate],
        weight_mode: WeightMode = WeightMode.NORMAL,
        settings: SpinSettings | None = None,
    ) -> "asyncio.Task[SpinResult]":
        """Start a spin and return a task that resolves when it settles.

        Must be called from inside a running event loop. The reentrancy
        check happens immediately, before any task is scheduled.

        Args:
            candidates: Candidates in wheel order
            weight_mode: Normal or inverse weighting
            settings: Spin bounds (``DEFAULT_SPIN_SETTINGS`` if None)

        Returns:
            Task resolving to the SpinResult

        Raises:
            SpinInProgressError: If a spin is already animating
        """
        if self.state.spinning:
            log.warning("spin_rejected", reason="spin_in_progress")
            raise SpinInProgressError("A spin is already in progress")

        loop = asyncio.get_running_loop()
        partition = build_partition(candidates, weight_mode)
        if partition.is_degenerate:
            log.info("spin_skipped", reason="degenerate_partition", candidates=len(candidates))
            return loop.create_task(self._settle_without_spinning())

        plan = plan_spin(partition, self.state.rotation, settings or DEFAULT_SPIN_SETTINGS, self.rng)
        self.state.spinning = True
        log.info(
            "spin_started",
            candidates=len(candidates),
            weight_mode=str(weight_mode),
            turns=plan.turns,
            duration_ms=round(plan.duration),
        )
        return loop.create_task(self._animate(plan))

    async def _settle_without_spinning(self) -> SpinResult:
        result = SpinResult(winning_candidate_id=None, settled_rotation=self.state.rotation)
        self.event_handler.on_settled(result=result)
        return result

    async def _animate(self, plan: SpinPlan) -> SpinResult:
        frame = SpinFrame(rotation=plan.start_rotation)
        try:
            while not frame.done:
                timestamp = await self.clock.next_frame()
                frame, events = advance_spin(plan, frame, timestamp)
                self.state.rotation = frame.rotation
                for event in events:
                    dispatch(self.event_handler, event)
            result = settle_spin(plan, frame)
        finally:
            self.state.spinning = False

        self.state.rotation = result.settled_rotation
        log.info("spin_settled", winner=result.winning_candidate_id, turns=plan.turns)
        self.event_handler.on_settled(result=result)
        return result
