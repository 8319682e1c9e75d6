"""Tests for the ordering flow and scan payload parsing."""

import pytest

from cafe_checkin.exceptions import FlowError, ParseError
from cafe_checkin.flow import OrderingFlow, parse_scan_payload


def _inactive(flow):
    state = flow.state
    return not state.active and state.cafe_id is None and state.bean_id is None


def test_happy_path_reaches_brew_order():
    flow = OrderingFlow()

    flow.start()
    assert flow.scan_complete("cafe-1") is True
    flow.select_bean("bean-1")

    state = flow.state
    assert state.active
    assert state.step == "brew-order"
    assert state.cafe_id == "cafe-1"
    assert state.bean_id == "bean-1"


def test_new_flow_is_inactive():
    assert _inactive(OrderingFlow())


@pytest.mark.parametrize("steps", [0, 1, 2, 3])
def test_cancel_from_any_state(steps):
    flow = OrderingFlow()
    actions = [flow.start, lambda: flow.scan_complete("cafe-1"), lambda: flow.select_bean("bean-1")]
    for action in actions[:steps]:
        action()

    flow.cancel()

    assert _inactive(flow)
    assert flow.step == "scan"


def test_start_clears_previous_session():
    flow = OrderingFlow()
    flow.start()
    flow.scan_complete("cafe-1")
    flow.select_bean("bean-1")

    flow.start()

    assert flow.state.active
    assert flow.step == "scan"
    assert flow.cafe_id is None
    assert flow.bean_id is None


def test_stale_scan_result_is_ignored():
    flow = OrderingFlow()
    flow.start()
    flow.scan_complete("cafe-1")
    flow.select_bean("bean-1")
    before = flow.state

    assert flow.scan_complete("cafe-2") is False
    assert flow.state == before


def test_scan_result_ignored_when_inactive():
    flow = OrderingFlow()

    assert flow.scan_complete("cafe-1") is False
    assert _inactive(flow)


def test_select_bean_out_of_sequence_raises():
    flow = OrderingFlow()
    flow.start()

    with pytest.raises(FlowError):
        flow.select_bean("bean-1")


def test_back_steps_through_the_flow():
    flow = OrderingFlow()
    flow.start()
    flow.scan_complete("cafe-1")
    flow.select_bean("bean-1")

    flow.back()
    assert flow.step == "bean-select"
    assert flow.cafe_id == "cafe-1"
    assert flow.bean_id is None

    flow.back()
    assert flow.step == "scan"
    assert flow.cafe_id is None
    assert flow.state.active

    flow.back()
    assert _inactive(flow)


def test_scan_error_is_recorded_and_cleared():
    flow = OrderingFlow()
    flow.start()

    flow.report_scan_error("camera unavailable")
    assert flow.state.scan_error == "camera unavailable"
    assert flow.step == "scan"

    flow.scan_complete("cafe-1")
    assert flow.state.scan_error is None


@pytest.mark.parametrize(
    "payload,expected",
    [
        ("https://example.com/cafe/42", "42"),
        ("https://example.com/cafe/42/", "42"),
        ("https://example.com/cafe/artisan%20lab?table=3", "artisan lab"),
        ("  7  ", "7"),
        ("cafe-1", "cafe-1"),
    ],
)
def test_parse_scan_payload(payload, expected):
    assert parse_scan_payload(payload) == expected


@pytest.mark.parametrize("payload", ["", "   ", None, "https://example.com/", "https://example.com"])
def test_parse_scan_payload_rejects_unusable_payloads(payload):
    with pytest.raises(ParseError):
        parse_scan_payload(payload)
