import pytest
import sys
from datetime import date
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shift_board.data_manager import (
    TimeOffStatus, ValidationError, NotFoundError, InvalidTransitionError
)
from shift_board.request_logic import TimeOffManager


@pytest.fixture
def time_off():
    return TimeOffManager()


def test_request_approve_then_deny_fails(time_off):
    request = time_off.request("bob", date(2024, 6, 1), date(2024, 6, 3))
    assert request.status is TimeOffStatus.PENDING
    assert request.days == 3

    time_off.decide(request.id, TimeOffStatus.APPROVED)
    assert request.status is TimeOffStatus.APPROVED

    with pytest.raises(InvalidTransitionError):
        time_off.decide(request.id, TimeOffStatus.DENIED)
    assert time_off.get_request(request.id).status is TimeOffStatus.APPROVED


def test_denied_is_terminal(time_off):
    request = time_off.request("bob", date(2024, 6, 1), date(2024, 6, 1))
    time_off.decide(request.id, "Denied")
    with pytest.raises(InvalidTransitionError):
        time_off.decide(request.id, "Approved")
    assert request.status is TimeOffStatus.DENIED


def test_end_before_start_rejected(time_off):
    with pytest.raises(ValidationError):
        time_off.request("bob", date(2024, 6, 3), date(2024, 6, 1))
    assert time_off.list_requests() == []


def test_single_day_request_allowed(time_off):
    request = time_off.request("bob", date(2024, 6, 3), date(2024, 6, 3))
    assert request.days == 1


def test_decide_unknown_id(time_off):
    with pytest.raises(NotFoundError):
        time_off.decide(99, TimeOffStatus.APPROVED)


@pytest.mark.parametrize("decision", [TimeOffStatus.PENDING, "Pending", "approved", "Maybe"])
def test_decide_rejects_non_terminal_or_unknown_decision(time_off, decision):
    request = time_off.request("bob", date(2024, 6, 1), date(2024, 6, 2))
    with pytest.raises(ValidationError):
        time_off.decide(request.id, decision)
    assert request.status is TimeOffStatus.PENDING


def test_listing_helpers(time_off):
    first = time_off.request("bob", date(2024, 6, 1), date(2024, 6, 2))
    second = time_off.request("carol", date(2024, 6, 5), date(2024, 6, 6))
    third = time_off.request("bob", date(2024, 7, 1), date(2024, 7, 2))
    time_off.decide(second.id, TimeOffStatus.APPROVED)

    assert time_off.list_requests() == [first, second, third]
    assert time_off.requests_for("bob") == [first, third]
    assert time_off.pending_requests() == [first, third]
    assert len({first.id, second.id, third.id}) == 3


def test_request_to_dict(time_off):
    request = time_off.request("bob", date(2024, 6, 1), date(2024, 6, 3))
    assert request.to_dict() == {
        "id": request.id,
        "employeeName": "bob",
        "startDate": "2024-06-01",
        "endDate": "2024-06-03",
        "days": 3,
        "status": "Pending"
    }
