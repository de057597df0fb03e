"""State of a single resize drag gesture."""

from typing import Optional, Union

from ..models.event import CalendarEvent
from ..utils.date_utils import InstantLike
from ..utils.exceptions import CalendarGridError, MalformedInputError
from .validator import DEFAULT_SNAP_INTERVAL, ResizeEdge, ResizeOutcome, build_resize_update


class ResizeGesture:
    """Tracks the candidates of one drag, from pointer-down to pointer-up.

    Every pointer move is validated; the last valid candidate is what gets
    committed. Once committed or cancelled the gesture holds no state.
    """

    def __init__(
        self,
        event: CalendarEvent,
        edge: Union[ResizeEdge, str],
        preserve_time: bool = True,
        snap_interval_minutes: int = DEFAULT_SNAP_INTERVAL,
    ):
        self.event = event
        try:
            self.edge = ResizeEdge(edge)
        except ValueError as e:
            raise MalformedInputError(f"Unknown resize edge: {edge!r}") from e
        self.preserve_time = preserve_time
        self.snap_interval_minutes = snap_interval_minutes
        self.finished = False
        self._candidate: Optional[ResizeOutcome] = None
        self._last: Optional[ResizeOutcome] = None

    @property
    def candidate(self) -> Optional[ResizeOutcome]:
        """Last valid candidate seen so far."""
        return self._candidate

    def move(self, target: InstantLike) -> ResizeOutcome:
        """Validate the instant under the pointer."""
        if self.finished:
            raise CalendarGridError("Resize gesture already finished")

        outcome = build_resize_update(
            self.event,
            target,
            self.edge,
            preserve_time=self.preserve_time,
            snap_interval_minutes=self.snap_interval_minutes,
        )
        self._last = outcome
        if outcome.ok:
            self._candidate = outcome
        return outcome

    def commit(self) -> Optional[ResizeOutcome]:
        """
        End the gesture.

        Returns:
            The last valid candidate, else the last rejection, else None if
            the pointer never moved
        """
        outcome = self._candidate or self._last
        self._reset()
        return outcome

    def cancel(self) -> None:
        """Abort the gesture and discard any candidate."""
        self._reset()

    def _reset(self) -> None:
        self.finished = True
        self._candidate = None
        self._last = None
