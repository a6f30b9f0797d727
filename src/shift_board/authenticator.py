"""
Authentication for Shift Board

Registers accounts in the user directory, checks credentials and keeps the
identity and role of whoever is signed in.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .data_manager import (
    UserDirectory, UserAccount, Role, normalize_email,
    ValidationError, DuplicateUserError, InvalidCredentialsError, PermissionDeniedError
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """Identity of the signed-in user"""
    user: str
    role: Role

    @property
    def is_manager(self) -> bool:
        return self.role is Role.MANAGER


class Authenticator:
    """Checks credentials against the directory and tracks the session"""

    def __init__(self, directory: UserDirectory):
        self.directory = directory
        self.session: Optional[Session] = None

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    @property
    def current_user(self) -> Optional[str]:
        return self.session.user if self.session else None

    @property
    def current_role(self) -> Optional[Role]:
        return self.session.role if self.session else None

    def register(self, email: str, password: str) -> UserAccount:
        """Register a new employee account"""
        if not email or not email.strip() or not password:
            raise ValidationError("Email and password cannot be empty.")
        if email in self.directory:
            logger.warning(f"Registration rejected, {normalize_email(email)} already exists")
            raise DuplicateUserError("User already exists.")

        account = self.directory.add(email, password, Role.EMPLOYEE)
        logger.info(f"Registered employee account {account.email}")
        return account

    def authenticate(self, email: str, password: str) -> Role:
        """Sign in and return the account role"""
        account = self.directory.get(email or "")
        if account is None or account.password != password:
            logger.warning(f"Failed sign-in for {normalize_email(email or '')}")
            raise InvalidCredentialsError("Invalid credentials. Try again.")

        self.session = Session(user=account.email, role=account.role)
        logger.info(f"{account.email} signed in as {account.role.value}")
        return account.role

    def sign_out(self):
        if self.session:
            logger.info(f"{self.session.user} signed out")
        self.session = None

    def require_role(self, *roles: Role) -> Session:
        """Return the session if its role is one of roles (any role when none given)"""
        if self.session is None:
            raise PermissionDeniedError("Sign in required.")
        if roles and self.session.role not in roles:
            allowed = ", ".join(r.value for r in roles)
            raise PermissionDeniedError(
                f"{self.session.role.value} may not perform this action (requires {allowed})"
            )
        return self.session
