from concurrent.futures import Future

import pytest

from navigation.site_router.errors import AdapterError
from navigation.site_router.models import RouteResult
from navigation.site_router.request_coalescer import CoalescerState, RequestCoalescer

A, B, C, D = (0.0, 0.0), (0.001, 0.0), (0.002, 0.0), (0.003, 0.0)


class ManualMachine:
    """Hands out futures the test completes by hand."""

    def __init__(self):
        self.requests = []
        self.futures = []

    def get_directions(self, a, b):
        future = Future()
        self.requests.append((a, b))
        self.futures.append(future)
        return future


@pytest.fixture
def machine():
    return ManualMachine()


@pytest.fixture
def delivered():
    return {"results": [], "errors": []}


@pytest.fixture
def coalescer(machine, delivered):
    return RequestCoalescer(
        machine,
        on_result=lambda result, points: delivered["results"].append((result, points)),
        on_error=lambda error, points: delivered["errors"].append((error, points)),
    )


def test_first_request_is_issued_immediately(coalescer, machine):
    assert coalescer.state == CoalescerState.IDLE

    assert coalescer.request(A, B) is True

    assert machine.requests == [(A, B)]
    assert coalescer.state == CoalescerState.IN_FLIGHT


def test_requests_while_in_flight_collapse_to_newest(coalescer, machine, delivered):
    coalescer.request(A, B)

    assert coalescer.request(A, C) is False
    assert coalescer.request(A, D) is False
    assert coalescer.state == CoalescerState.QUEUED_RETRY
    assert coalescer.pending == (A, D)
    assert machine.requests == [(A, B)]

    first = RouteResult(geometry=[A, B])
    machine.futures[0].set_result(first)

    assert delivered["results"] == [(first, (A, B))]
    assert machine.requests == [(A, B), (A, D)]
    assert coalescer.state == CoalescerState.IN_FLIGHT
    assert coalescer.pending is None

    second = RouteResult(geometry=[A, D])
    machine.futures[1].set_result(second)

    assert delivered["results"][-1] == (second, (A, D))
    assert coalescer.state == CoalescerState.IDLE


def test_error_is_reported_and_queue_still_drains(coalescer, machine, delivered):
    coalescer.request(A, B)
    coalescer.request(A, C)

    error = AdapterError(503, "Service Unavailable")
    machine.futures[0].set_exception(error)

    assert delivered["errors"] == [(error, (A, B))]
    assert machine.requests[-1] == (A, C)
    assert coalescer.state == CoalescerState.IN_FLIGHT


def test_failing_result_handler_does_not_wedge_state(machine):
    def explode(result, points):
        raise RuntimeError("ui went away")

    coalescer = RequestCoalescer(machine, on_result=explode)
    coalescer.request(A, B)
    coalescer.request(A, C)

    machine.futures[0].set_result(RouteResult())

    assert machine.requests[-1] == (A, C)
    assert coalescer.state == CoalescerState.IN_FLIGHT


class ClosedMachine:
    """Refuses work the way a shut-down executor does."""

    def get_directions(self, a, b):
        raise RuntimeError("cannot schedule new futures after shutdown")


def test_refused_request_leaves_coalescer_idle():
    coalescer = RequestCoalescer(ClosedMachine(), on_result=lambda result, points: None)

    with pytest.raises(RuntimeError):
        coalescer.request(A, B)

    assert coalescer.state == CoalescerState.IDLE
    assert coalescer.pending is None


def test_refused_queued_request_leaves_coalescer_idle(coalescer, machine, delivered, monkeypatch):
    coalescer.request(A, B)
    coalescer.request(A, C)

    def refuse(a, b):
        raise RuntimeError("cannot schedule new futures after shutdown")
    monkeypatch.setattr(machine, "get_directions", refuse)

    machine.futures[0].set_result(RouteResult(geometry=[A, B]))

    assert delivered["results"] == [(RouteResult(geometry=[A, B]), (A, B))]
    assert coalescer.state == CoalescerState.IDLE
    assert coalescer.pending is None
