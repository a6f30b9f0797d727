"""
Request Lifecycles for Shift Board

Time-off requests move from Pending to Approved or Denied. Shift trade
offers move from Pending to Accepted and leave the pending pool at the same
moment.
"""

import itertools
import logging
from datetime import date, datetime
from typing import List, Optional, Union

from .data_manager import (
    Shift, TimeOffRequest, TimeOffStatus, ShiftTradeRequest, TradeStatus, as_date,
    ValidationError, NotFoundError, InvalidTransitionError, SelfTradeError
)

logger = logging.getLogger(__name__)


class TimeOffManager:
    """Ordered collection of time-off requests and their status transitions"""

    DECISIONS = (TimeOffStatus.APPROVED, TimeOffStatus.DENIED)

    def __init__(self):
        self._requests: List[TimeOffRequest] = []
        self._ids = itertools.count(1)

    def request(self, employee_name: str, start_date: Union[date, datetime],
                end_date: Union[date, datetime]) -> TimeOffRequest:
        """Create a pending request; the range is inclusive on both ends"""
        start, end = as_date(start_date), as_date(end_date)
        if end < start:
            raise ValidationError(
                f"End date {end.isoformat()} is before start date {start.isoformat()}"
            )

        request = TimeOffRequest(
            id=next(self._ids),
            employee_name=employee_name,
            start_date=start,
            end_date=end
        )
        self._requests.append(request)
        logger.info(f"{employee_name} requested time off {start.isoformat()} to {end.isoformat()} (request {request.id})")
        return request

    def get_request(self, request_id: int) -> TimeOffRequest:
        for request in self._requests:
            if request.id == request_id:
                return request
        raise NotFoundError(f"Time-off request {request_id} not found")

    def decide(self, request_id: int, decision: Union[TimeOffStatus, str]) -> TimeOffRequest:
        """Approve or deny a pending request"""
        try:
            status = TimeOffStatus(decision)
        except ValueError:
            raise ValidationError(f"Unknown decision: {decision!r}")
        if status not in self.DECISIONS:
            raise ValidationError(f"Decision must be Approved or Denied, not {status.value}")

        request = self.get_request(request_id)
        if request.status is not TimeOffStatus.PENDING:
            logger.warning(f"Request {request_id} is already {request.status.value}")
            raise InvalidTransitionError(
                f"Request {request_id} is {request.status.value}, only Pending requests can be decided"
            )

        request.status = status
        logger.info(f"Time-off request {request_id} for {request.employee_name} {status.value.lower()}")
        return request

    def list_requests(self) -> List[TimeOffRequest]:
        return list(self._requests)

    def requests_for(self, employee_name: str) -> List[TimeOffRequest]:
        return [r for r in self._requests if r.employee_name == employee_name]

    def pending_requests(self) -> List[TimeOffRequest]:
        return [r for r in self._requests if r.status is TimeOffStatus.PENDING]


class ShiftTradeManager:
    """Pool of pending trade offers plus the history of accepted ones"""

    def __init__(self):
        self._pending: List[ShiftTradeRequest] = []
        self._accepted: List[ShiftTradeRequest] = []
        self._ids = itertools.count(1)

    def offer(self, employee_name: str, shift: Shift) -> ShiftTradeRequest:
        """Offer one of the employee's own shifts for someone else to cover"""
        if shift.employee_name != employee_name:
            raise ValidationError(
                f"Shift {shift.id} belongs to {shift.employee_name}, not {employee_name}"
            )
        if any(t.shift.id == shift.id for t in self._pending):
            raise ValidationError(f"Shift {shift.id} is already offered for trade")

        trade = ShiftTradeRequest(id=next(self._ids), employee_name=employee_name, shift=shift)
        self._pending.append(trade)
        logger.info(f"{employee_name} offered shift {shift.id} for trade (trade {trade.id})")
        return trade

    def get_trade(self, trade_id: int) -> ShiftTradeRequest:
        """Look up a pending trade"""
        for trade in self._pending:
            if trade.id == trade_id:
                return trade
        raise NotFoundError(f"Trade {trade_id} not found")

    def accept(self, trade_id: int, covering_employee: str) -> ShiftTradeRequest:
        """Cover a pending trade and take it out of the pending pool"""
        trade = self.get_trade(trade_id)
        if covering_employee == trade.employee_name:
            raise SelfTradeError("You cannot cover your own shift.")
        if trade.status is not TradeStatus.PENDING:
            raise InvalidTransitionError(f"Trade {trade_id} is {trade.status.value}")

        trade.cover_employee = covering_employee
        trade.status = TradeStatus.ACCEPTED
        self._pending.remove(trade)
        self._accepted.append(trade)
        logger.info(
            f"Shift covered: {trade.shift.time} on {trade.shift.date.isoformat()} "
            f"by {covering_employee} (trade {trade_id})"
        )
        return trade

    def pending_trades(self) -> List[ShiftTradeRequest]:
        return list(self._pending)

    def available_to_cover(self, current_user: Optional[str]) -> List[ShiftTradeRequest]:
        return [t for t in self._pending if t.employee_name != current_user]

    def accepted_trades(self) -> List[ShiftTradeRequest]:
        return list(self._accepted)
