"""
Application Context for Shift Board

Wires the repositories, the authenticator, the request lifecycles and the
exporters together, and checks the session role before each operation.
"""

import sys
import copy
import json
import logging
from pathlib import Path
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .data_manager import (
    DataManager, DEFAULT_SETTINGS, Role, Weekday, Shift, Availability, UserAccount,
    TimeOffRequest, TimeOffStatus, ShiftTradeRequest, ConfigurationError, ValidationError
)
from .authenticator import Authenticator
from .request_logic import TimeOffManager, ShiftTradeManager
from .reporting import ExportManager

logger = logging.getLogger(__name__)


def setup_logging(log_dir: Optional[Union[str, Path]] = None, level: int = logging.INFO):
    """Setup application logging; a dated log file is written when log_dir is given"""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"shift_board_{datetime.now().strftime('%Y%m%d')}.log"
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )

    return logging.getLogger(__name__)


def load_settings(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a JSON settings file and merge it over the defaults"""
    settings_file = Path(path)
    settings = copy.deepcopy(DEFAULT_SETTINGS)
    if not settings_file.exists():
        logger.info(f"No settings file at {settings_file}, using defaults")
        return settings

    try:
        with open(settings_file, 'r', encoding='utf-8') as f:
            overrides = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        raise ConfigurationError(f"Could not read settings file {settings_file}: {e}")

    if not isinstance(overrides, dict):
        raise ConfigurationError(f"Settings file {settings_file} must hold a JSON object")

    settings.update(overrides)
    try:
        Weekday.parse(settings["weekStartsOn"])
    except ValidationError as e:
        raise ConfigurationError(f"Invalid weekStartsOn in {settings_file}: {e}")
    return settings


class ShiftBoardApp:
    """Single owner of all Shift Board state"""

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        self.data_manager = DataManager(settings)
        self.auth = Authenticator(self.data_manager.users)
        self.time_off = TimeOffManager()
        self.trades = ShiftTradeManager()
        self.export_manager = ExportManager(self.data_manager, self.time_off, self.trades)
        logger.info(f"Shift Board {self.data_manager.get_setting('appVersion')} initialized")

    @classmethod
    def from_settings_file(cls, path: Union[str, Path]) -> "ShiftBoardApp":
        return cls(load_settings(path))

    @property
    def current_user(self) -> Optional[str]:
        return self.auth.current_user

    @property
    def current_role(self) -> Optional[Role]:
        return self.auth.current_role

    # Authentication
    def register(self, email: str, password: str) -> UserAccount:
        return self.auth.register(email, password)

    def sign_in(self, email: str, password: str) -> Role:
        return self.auth.authenticate(email, password)

    def sign_out(self):
        self.auth.sign_out()

    # Shifts
    def create_shift(self, employee_name: str, day: Union[date, datetime], time: str,
                     position: str, section: str) -> Shift:
        self.auth.require_role(Role.MANAGER)
        return self.data_manager.shifts.create_shift(employee_name, day, time, position, section)

    def shifts_on(self, day: Union[date, datetime]) -> List[Shift]:
        self.auth.require_role()
        return self.data_manager.shifts.shifts_for_date(day)

    def my_shifts(self) -> List[Shift]:
        session = self.auth.require_role()
        return self.data_manager.shifts.shifts_for_employee(session.user)

    def week_view(self, reference_day: Optional[Union[date, datetime]] = None) -> List[Tuple[date, List[Shift]]]:
        self.auth.require_role()
        return self.data_manager.shifts.week_of(reference_day or date.today())

    def is_highlighted(self, shift: Shift) -> bool:
        """True when the shift belongs to the signed-in user"""
        return self.data_manager.shifts.is_own_shift(shift, self.current_user)

    # Availability
    def submit_availability(self, week: Mapping[Union[Weekday, str], str],
                            employee_name: Optional[str] = None) -> Availability:
        session = self.auth.require_role(Role.EMPLOYEE)
        return self.data_manager.availability.submit(employee_name or session.user, week)

    def list_availability(self) -> List[Availability]:
        self.auth.require_role(Role.MANAGER)
        return self.data_manager.availability.list_all()

    # Time off
    def request_time_off(self, start_date: Union[date, datetime],
                         end_date: Union[date, datetime]) -> TimeOffRequest:
        session = self.auth.require_role(Role.EMPLOYEE)
        return self.time_off.request(session.user, start_date, end_date)

    def decide_time_off(self, request_id: int, decision: Union[TimeOffStatus, str]) -> TimeOffRequest:
        self.auth.require_role(Role.MANAGER)
        return self.time_off.decide(request_id, decision)

    def time_off_requests(self) -> List[TimeOffRequest]:
        """All requests for managers, own requests for employees"""
        session = self.auth.require_role()
        if session.is_manager:
            return self.time_off.list_requests()
        return self.time_off.requests_for(session.user)

    # Shift trades
    def offer_shift(self, shift_id: int) -> ShiftTradeRequest:
        session = self.auth.require_role(Role.EMPLOYEE)
        shift = self.data_manager.shifts.get_shift(shift_id)
        return self.trades.offer(session.user, shift)

    def accept_trade(self, trade_id: int) -> ShiftTradeRequest:
        session = self.auth.require_role(Role.EMPLOYEE)
        return self.trades.accept(trade_id, session.user)

    def available_to_cover(self) -> List[ShiftTradeRequest]:
        session = self.auth.require_role(Role.EMPLOYEE)
        return self.trades.available_to_cover(session.user)

    def pending_trades(self) -> List[ShiftTradeRequest]:
        self.auth.require_role(Role.MANAGER)
        return self.trades.pending_trades()

    # Exports
    def export_roster(self, format_type: str, output_path: str,
                      reference_day: Optional[Union[date, datetime]] = None) -> bool:
        session = self.auth.require_role(Role.MANAGER)
        return self.export_manager.export_roster(format_type, output_path, reference_day, session.user)

    def export_all(self, reference_day: Union[date, datetime],
                   output_dir: Optional[str] = None) -> Dict[str, bool]:
        self.auth.require_role(Role.MANAGER)
        return self.export_manager.batch_export(reference_day, output_dir)

    def week_summary(self, reference_day: Optional[Union[date, datetime]] = None) -> str:
        self.auth.require_role(Role.MANAGER)
        return self.export_manager.report_generator.create_week_summary(reference_day or date.today())
