# request_coalescer.py
# State machine that keeps at most one directions request in flight.
# Call request() as often as you like (e.g. while a marker is dragged); only
# the newest pending request is issued once the running one finishes.

import logging
import threading
from concurrent.futures import Future
from enum import Enum
from typing import Callable, Optional, Tuple

from .models import Point, RouteResult

logger = logging.getLogger(__name__)


class CoalescerState(Enum):
    IDLE         = "idle"
    IN_FLIGHT    = "in_flight"
    QUEUED_RETRY = "queued_retry"


class RequestCoalescer:
    """
    Wraps a RoutingMachine so that overlapping requests collapse into one.

    Usage:
        coalescer = RequestCoalescer(machine, on_result=show, on_error=log)
        coalescer.request(a, b)        # issued immediately
        coalescer.request(a, c)        # queued
        coalescer.request(a, d)        # replaces (a, c) in the queue

    Every completed request is reported, including one made stale by a newer
    request; the queued request is issued right after.

    Args:
        machine:   Anything with get_directions(a, b) -> Future.
        on_result: Called with (RouteResult, (a, b)) on success.
        on_error:  Called with (Exception, (a, b)) on failure.
    """

    def __init__(
        self,
        machine,
        on_result: Callable[[RouteResult, Tuple[Point, Point]], None],
        on_error: Optional[Callable[[BaseException, Tuple[Point, Point]], None]] = None,
    ) -> None:
        self._machine = machine
        self._on_result = on_result
        self._on_error = on_error
        self._lock = threading.Lock()
        self._state = CoalescerState.IDLE
        self._pending: Optional[Tuple[Point, Point]] = None

    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> CoalescerState:
        return self._state

    @property
    def pending(self) -> Optional[Tuple[Point, Point]]:
        return self._pending

    # ------------------------------------------------------------------
    # Core method
    # ------------------------------------------------------------------

    def request(self, a: Point, b: Point) -> bool:
        """
        Ask for directions from a to b.

        Returns:
            True if the request was issued now, False if it was queued.
        """
        with self._lock:
            if self._state != CoalescerState.IDLE:
                self._pending = (a, b)
                self._state = CoalescerState.QUEUED_RETRY
                logger.debug(f"Directions request queued: {a} → {b}")
                return False
            self._state = CoalescerState.IN_FLIGHT
        self._issue((a, b))
        return True

    def _issue(self, points: Tuple[Point, Point]) -> None:
        try:
            future = self._machine.get_directions(*points)
        except Exception:
            # Nothing is in flight if the machine refused the request
            with self._lock:
                self._pending = None
                self._state = CoalescerState.IDLE
            logger.exception(f"Could not issue directions request {points[0]} → {points[1]}")
            raise
        future.add_done_callback(lambda f: self._finished(f, points))

    def _finished(self, future: Future, points: Tuple[Point, Point]) -> None:
        error = future.exception()
        try:
            if error is None:
                self._on_result(future.result(), points)
            elif self._on_error is not None:
                self._on_error(error, points)
            else:
                logger.error(f"Directions request {points[0]} → {points[1]} failed: {error}")
        finally:
            with self._lock:
                queued = self._pending
                self._pending = None
                self._state = CoalescerState.IN_FLIGHT if queued else CoalescerState.IDLE
            if queued:
                self._issue(queued)
