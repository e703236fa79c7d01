"""Event system for decoupling the engine from presentation.

The engine and the knockout controller report progress through an
``EventHandler``. Terminal output, sound, or a web socket bridge can
subscribe by implementing the methods they care about; everything else
can use ``NullEventHandler``.

Events are also available as tagged values (``WheelEvent``) so a consumer
can treat them as a stream, which is what ``RecordingEventHandler`` does.
"""

from typing import Any, Literal, Protocol

from pydantic import BaseModel, Field

from spinwheel.models import CandidateId, Segment, SpinResult


class FrameEvent(BaseModel):
    kind: Literal["frame"] = "frame"
    segments: list[Segment]
    rotation: float
    progress: float


class TickEvent(BaseModel):
    kind: Literal["tick"] = "tick"
    candidate_id: CandidateId
    segment_index: int


class SettledEvent(BaseModel):
    kind: Literal["settled"] = "settled"
    winning_candidate_id: CandidateId | None
    settled_rotation: float


class RoundStartedEvent(BaseModel):
    kind: Literal["round_started"] = "round_started"
    round_number: int
    remaining: int
    is_final: bool
    odds: dict[CandidateId, float] = Field(default_factory=dict)


class EliminatedEvent(BaseModel):
    kind: Literal["eliminated"] = "eliminated"
    candidate_id: CandidateId
    order: int
    remaining: int


class ChampionEvent(BaseModel):
    kind: Literal["champion"] = "champion"
    candidate_id: CandidateId
    order: int


class InconclusiveEvent(BaseModel):
    kind: Literal["inconclusive"] = "inconclusive"
    remaining: list[CandidateId]


SpinEvent = FrameEvent | TickEvent
WheelEvent = (
    FrameEvent
    | TickEvent
    | SettledEvent
    | RoundStartedEvent
    | EliminatedEvent
    | ChampionEvent
    | InconclusiveEvent
)


class EventHandler(Protocol):
    """Protocol for handlers that receive engine and tournament events."""

    def on_frame(
        self,
        segments: list[Segment],
        rotation: float,
        progress: float,
        **kwargs: Any
    ) -> None:
        """Called once per animation frame with the data needed to redraw.

        Args:
            segments: Current partition segments
            rotation: Current wheel rotation in radians
            progress: Linear animation progress (0.0 to 1.0)
            **kwargs: Additional context
        """
        ...

    def on_tick(
        self,
        candidate_id: CandidateId,
        segment_index: int,
        **kwargs: Any
    ) -> None:
        """Called when the pointer crosses into a different segment.

        Args:
            candidate_id: Candidate now under the pointer
            segment_index: Index of that candidate's segment
            **kwargs: Additional context
        """
        ...

    def on_settled(
        self,
        result: SpinResult,
        **kwargs: Any
    ) -> None:
        """Called when a spin comes to rest (or resolves without spinning).

        Args:
            result: The settled spin result
            **kwargs: Additional context
        """
        ...

    def on_round_started(
        self,
        round_number: int,
        remaining: int,
        is_final: bool,
        odds: dict[CandidateId, float],
        **kwargs: Any
    ) -> None:
        """Called before each knockout round spins.

        Args:
            round_number: 1-based round number
            remaining: Candidates still in the pool
            is_final: True when two candidates remain
            odds: Elimination probability per remaining candidate
            **kwargs: Additional context
        """
        ...

    def on_eliminated(
        self,
        candidate_id: CandidateId,
        order: int,
        remaining: int,
        **kwargs: Any
    ) -> None:
        """Called when a knockout round removes a candidate.

        Args:
            candidate_id: The eliminated candidate
            order: Elimination order, starting at 1
            remaining: Pool size after the removal
            **kwargs: Additional context
        """
        ...

    def on_champion(
        self,
        candidate_id: CandidateId,
        order: int,
        **kwargs: Any
    ) -> None:
        """Called once when the last candidate standing is known.

        Args:
            candidate_id: The champion
            order: The order value following the final elimination
            **kwargs: Additional context
        """
        ...

    def on_inconclusive(
        self,
        remaining: list[CandidateId],
        **kwargs: Any
    ) -> None:
        """Called when a knockout stops with more than one candidate left.

        Args:
            remaining: Ids still in the pool
            **kwargs: Additional context
        """
        ...


class NullEventHandler:
    """Null event handler that does nothing.

    Useful as a default when no event handling is needed.
    """

    def on_frame(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_tick(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_settled(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_round_started(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_eliminated(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_champion(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_inconclusive(self, *args: Any, **kwargs: Any) -> None:
        pass


class RecordingEventHandler:
    """Collects every event as a tagged ``WheelEvent`` value.

    Frame events are dropped unless ``record_frames`` is set, since a
    single spin produces hundreds of them.
    """

    def __init__(self, record_frames: bool = False):
        self.record_frames = record_frames
        self.events: list[WheelEvent] = []

    def of_kind(self, kind: str) -> list[WheelEvent]:
        return [event for event in self.events if event.kind == kind]

    def on_frame(self, segments: list[Segment], rotation: float, progress: float, **kwargs: Any) -> None:
        if self.record_frames:
            self.events.append(FrameEvent(segments=segments, rotation=rotation, progress=progress))

    def on_tick(self, candidate_id: CandidateId, segment_index: int, **kwargs: Any) -> None:
        self.events.append(TickEvent(candidate_id=candidate_id, segment_index=segment_index))

    def on_settled(self, result: SpinResult, **kwargs: Any) -> None:
        self.events.append(SettledEvent(
            winning_candidate_id=result.winning_candidate_id,
            settled_rotation=result.settled_rotation,
        ))

    def on_round_started(
        self,
        round_number: int,
        remaining: int,
        is_final: bool,
        odds: dict[CandidateId, float],
        **kwargs: Any
    ) -> None:
        self.events.append(RoundStartedEvent(
            round_number=round_number,
            remaining=remaining,
            is_final=is_final,
            odds=odds,
        ))

    def on_eliminated(self, candidate_id: CandidateId, order: int, remaining: int, **kwargs: Any) -> None:
        self.events.append(EliminatedEvent(candidate_id=candidate_id, order=order, remaining=remaining))

    def on_champion(self, candidate_id: CandidateId, order: int, **kwargs: Any) -> None:
        self.events.append(ChampionEvent(candidate_id=candidate_id, order=order))

    def on_inconclusive(self, remaining: list[CandidateId], **kwargs: Any) -> None:
        self.events.append(InconclusiveEvent(remaining=remaining))


def dispatch(handler: EventHandler, event: SpinEvent) -> None:
    """Deliver a frame-step event value to the matching handler method."""
    if isinstance(event, FrameEvent):
        handler.on_frame(segments=event.segments, rotation=event.rotation, progress=event.progress)
    elif isinstance(event, TickEvent):
        handler.on_tick(candidate_id=event.candidate_id, segment_index=event.segment_index)
