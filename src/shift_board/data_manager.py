"""
Data Manager for Shift Board

Holds the in-memory repositories for user accounts, shifts and weekly
availability, plus the application settings. Also defines the error
hierarchy and the record types shared by the rest of the package.
"""

import copy
import itertools
import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Any, Iterator, Mapping, Tuple, Union
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class ShiftBoardError(Exception):
    """Base exception for Shift Board operations"""
    pass


class ValidationError(ShiftBoardError):
    """Raised when input is empty, malformed or inconsistent"""
    pass


class DuplicateUserError(ShiftBoardError):
    """Raised when registering an email that already exists"""
    pass


class InvalidCredentialsError(ShiftBoardError):
    """Raised when the email or password does not match"""
    pass


class NotFoundError(ShiftBoardError):
    """Raised when an id does not refer to a known record"""
    pass


class InvalidTransitionError(ShiftBoardError):
    """Raised when a request is not in the state the operation expects"""
    pass


class SelfTradeError(ShiftBoardError):
    """Raised when an employee tries to cover their own trade offer"""
    pass


class PermissionDeniedError(ShiftBoardError):
    """Raised when the session role may not perform an operation"""
    pass


class ConfigurationError(ShiftBoardError):
    """Raised when the settings file cannot be used"""
    pass


class Role(Enum):
    MANAGER = "manager"
    EMPLOYEE = "employee"


class Weekday(Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def short_name(self) -> str:
        return self.value[:3].capitalize()

    @classmethod
    def parse(cls, value: Union["Weekday", str]) -> "Weekday":
        """Accept a Weekday, a full day name or a three-letter abbreviation"""
        if isinstance(value, Weekday):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for day in cls:
                if key == day.value or key == day.value[:3]:
                    return day
        raise ValidationError(f"Unknown day of week: {value!r}")

    @classmethod
    def from_date(cls, day: date) -> "Weekday":
        return list(cls)[day.weekday()]


class TimeOffStatus(Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    DENIED = "Denied"


class TradeStatus(Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"


@dataclass(frozen=True)
class UserAccount:
    """A registered login. Email is stored case-folded."""
    email: str
    password: str
    role: Role

    def to_dict(self) -> Dict[str, Any]:
        # no password
        return {"email": self.email, "role": self.role.value}


@dataclass(frozen=True)
class Shift:
    """A single shift assigned to one employee"""
    id: int
    employee_name: str
    date: date
    time: str  # free-text label, e.g. "9-5"
    position: str
    section: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employeeName": self.employee_name,
            "date": self.date.isoformat(),
            "time": self.time,
            "position": self.position,
            "section": self.section
        }


@dataclass
class Availability:
    """Weekly availability for one employee, free text per day"""
    employee_name: str
    week: Dict[Weekday, str] = field(default_factory=lambda: {day: "" for day in Weekday})

    def for_day(self, day: Weekday) -> str:
        return self.week.get(day, "")

    def to_dict(self) -> Dict[str, Any]:
        data = {"employeeName": self.employee_name}
        for day in Weekday:
            data[day.value] = self.for_day(day)
        return data


@dataclass
class TimeOffRequest:
    id: int
    employee_name: str
    start_date: date
    end_date: date
    status: TimeOffStatus = TimeOffStatus.PENDING

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employeeName": self.employee_name,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "days": self.days,
            "status": self.status.value
        }


@dataclass
class ShiftTradeRequest:
    id: int
    employee_name: str
    shift: Shift
    status: TradeStatus = TradeStatus.PENDING
    cover_employee: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employeeName": self.employee_name,
            "shiftId": self.shift.id,
            "shiftDate": self.shift.date.isoformat(),
            "shiftTime": self.shift.time,
            "position": self.shift.position,
            "section": self.shift.section,
            "status": self.status.value,
            "coverEmployee": self.cover_employee
        }


def normalize_email(email: str) -> str:
    return email.strip().casefold()


def as_date(value: Union[date, datetime]) -> date:
    """Reduce a datetime to its calendar day"""
    if isinstance(value, datetime):
        return value.date()
    return value


DEFAULT_SETTINGS: Dict[str, Any] = {
    "appVersion": "1.0.0",
    "weekStartsOn": "sunday",
    "seedAccounts": [
        {"email": "manager", "password": "manager1!", "role": "manager"}
    ],
    "exportDir": "exports"
}


class UserDirectory:
    """In-memory map of case-folded email to account"""

    def __init__(self):
        self._accounts: Dict[str, UserAccount] = {}

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, email: str) -> bool:
        return normalize_email(email) in self._accounts

    def get(self, email: str) -> Optional[UserAccount]:
        return self._accounts.get(normalize_email(email))

    def add(self, email: str, password: str, role: Role = Role.EMPLOYEE) -> UserAccount:
        """Insert a new account; the caller validates the input"""
        key = normalize_email(email)
        if key in self._accounts:
            raise DuplicateUserError(f"User already exists: {key}")
        account = UserAccount(email=key, password=password, role=role)
        self._accounts[key] = account
        return account

    def accounts(self) -> List[UserAccount]:
        return list(self._accounts.values())


class ShiftStore:
    """Ordered collection of shifts. Shifts are never changed once created."""

    def __init__(self, week_starts_on: Weekday = Weekday.SUNDAY):
        self._shifts: List[Shift] = []
        self._ids = itertools.count(1)
        self.week_starts_on = week_starts_on

    def __len__(self) -> int:
        return len(self._shifts)

    def __iter__(self) -> Iterator[Shift]:
        return iter(list(self._shifts))

    def create_shift(self, employee_name: str, day: Union[date, datetime], time: str,
                     position: str, section: str) -> Shift:
        """Create a shift. Role checks belong to the caller."""
        shift = Shift(
            id=next(self._ids),
            employee_name=employee_name,
            date=as_date(day),
            time=time,
            position=position,
            section=section
        )
        self._shifts.append(shift)
        logger.info(f"Created shift {shift.id} for {employee_name} on {shift.date.isoformat()}")
        return shift

    def get_shift(self, shift_id: int) -> Shift:
        for shift in self._shifts:
            if shift.id == shift_id:
                return shift
        raise NotFoundError(f"Shift {shift_id} not found")

    def shifts_for_date(self, day: Union[date, datetime]) -> List[Shift]:
        target = as_date(day)
        return [s for s in self._shifts if s.date == target]

    def shifts_for_employee(self, employee_name: str) -> List[Shift]:
        # Exact match; see is_own_shift for the case-insensitive variant
        return [s for s in self._shifts if s.employee_name == employee_name]

    def start_of_week(self, reference_day: Union[date, datetime]) -> date:
        day = as_date(reference_day)
        first = list(Weekday).index(self.week_starts_on)
        offset = (day.weekday() - first) % 7
        return day - timedelta(days=offset)

    def week_of(self, reference_day: Union[date, datetime]) -> List[Tuple[date, List[Shift]]]:
        """Seven (day, shifts) pairs for the week containing reference_day"""
        start = self.start_of_week(reference_day)
        week = []
        for offset in range(7):
            day = start + timedelta(days=offset)
            week.append((day, self.shifts_for_date(day)))
        return week

    @staticmethod
    def is_own_shift(shift: Shift, user: Optional[str]) -> bool:
        """Case-insensitive owner check used for highlighting"""
        if not user:
            return False
        return shift.employee_name.lower() == user.lower()


class AvailabilityStore:
    """Latest weekly availability per employee; last write wins"""

    def __init__(self):
        self._entries: Dict[str, Availability] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def submit(self, employee_name: str, week: Mapping[Union[Weekday, str], str]) -> Availability:
        """Replace the employee's availability with the given week"""
        days = {day: "" for day in Weekday}
        for key, text in week.items():
            days[Weekday.parse(key)] = text if text is not None else ""

        availability = Availability(employee_name=employee_name, week=days)
        replaced = employee_name in self._entries
        self._entries[employee_name] = availability
        logger.info(f"{'Replaced' if replaced else 'Stored'} availability for {employee_name}")
        return availability

    def get(self, employee_name: str) -> Optional[Availability]:
        return self._entries.get(employee_name)

    def list_all(self) -> List[Availability]:
        return [self._entries[name] for name in sorted(self._entries)]


class DataManager:
    """Owns the in-memory repositories and the application settings"""

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        self.settings = self._merge_settings(settings or {})
        self.users = UserDirectory()
        self.shifts = ShiftStore(week_starts_on=Weekday.parse(self.settings["weekStartsOn"]))
        self.availability = AvailabilityStore()
        self._seed_accounts()

    def _merge_settings(self, overrides: Dict[str, Any]) -> Dict[str, Any]:
        """Merge with defaults to ensure all keys exist"""
        settings = copy.deepcopy(DEFAULT_SETTINGS)
        settings.update(copy.deepcopy(overrides))
        try:
            Weekday.parse(settings["weekStartsOn"])
        except ValidationError as e:
            raise ConfigurationError(f"Invalid weekStartsOn setting: {e}")
        return settings

    def _seed_accounts(self):
        """Create the built-in accounts listed in the settings"""
        for entry in self.settings.get("seedAccounts", []):
            try:
                role = Role(entry.get("role", Role.EMPLOYEE.value))
                email = entry["email"]
                password = entry["password"]
            except (KeyError, ValueError) as e:
                raise ConfigurationError(f"Invalid seed account {entry!r}: {e}")
            if email in self.users:
                logger.warning(f"Skipping duplicate seed account {email}")
                continue
            self.users.add(email, password, role)
            logger.info(f"Seeded {role.value} account {normalize_email(email)}")

    # Settings Management
    def get_setting(self, key: str, default=None):
        """Get application setting"""
        return self.settings.get(key, default)

    def set_setting(self, key: str, value):
        """Set application setting"""
        if key == "weekStartsOn":
            try:
                self.shifts.week_starts_on = Weekday.parse(value)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid weekStartsOn setting: {e}")
        self.settings[key] = value
