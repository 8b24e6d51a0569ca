"""
Account registration, login and session validation.

Sessions are stateless: a signed token carries the user id, and a token is only
accepted while its signature and expiry check out and the account still exists.
"""
import logging
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from inventory_api.config import Settings
from inventory_api.core import security
from inventory_api.core.exceptions import InvalidCredentialsError, ValidationError
from inventory_api.models.users import User, UserRole
from inventory_api.schemas.users import UserCreate
from inventory_api.services.users import UserService

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class AuthService:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.user_service = UserService(db)

    def validate_signup_data(self, data: UserCreate) -> UserRole:
        if not data.username or not data.email or not data.password:
            raise ValidationError("Username, email and password are required")

        if len(data.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

        if data.role is None:
            return UserRole.USER
        try:
            return UserRole(data.role)
        except ValueError:
            raise ValidationError('Role must be either "admin" or "user"')

    def register(self, data: UserCreate) -> Tuple[User, str]:
        """Create an account and return it with a freshly signed session token."""
        role = self.validate_signup_data(data)

        # Checked before hashing so conflicts do not pay the bcrypt cost
        self.user_service.ensure_available(data.username, data.email)

        user = self.user_service.create_user(
            username=data.username,
            email=data.email,
            password_hash=security.hash_password(data.password),
            role=role,
        )
        logger.info("Registered user %s", user.id)
        return user, self.issue_token(user)

    def login(self, email: Optional[str], password: Optional[str]) -> Tuple[User, str]:
        user = self.user_service.get_user_by_email(email) if email else None
        if not user:
            logger.info("Rejected login attempt")
            raise InvalidCredentialsError()

        if not password or not security.verify_password(password, user.password_hash):
            logger.info("Rejected login attempt")
            raise InvalidCredentialsError()

        logger.info("User %s logged in", user.id)
        return user, self.issue_token(user)

    def issue_token(self, user: User) -> str:
        return security.create_access_token(user.id, self.settings)

    def get_profile(self, user_id: str) -> User:
        return self.user_service.get_user(user_id)

    def validate_session(self, token: Optional[str]) -> User:
        user_id = security.decode_access_token(token, self.settings)
        return self.user_service.get_user(user_id)
