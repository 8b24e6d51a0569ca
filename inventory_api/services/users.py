from sqlalchemy.orm import Session
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from typing import List, Optional

from inventory_api.models.users import User, UserRole
from inventory_api.core.exceptions import ConflictError, NotFoundError

USERNAME_TAKEN = "Username is already taken"
EMAIL_TAKEN = "Email already registered"

class UserService:
    def __init__(self, db: Session):
        self.db = db

    def create_user(self, username: str, email: str, password_hash: str,
                    role: UserRole = UserRole.USER) -> User:
        """Insert an account; callers check availability first with ensure_available."""
        try:
            db_user = User(
                username=username,
                email=email,
                password_hash=password_hash,
                role=role
            )
            self.db.add(db_user)
            self.db.commit()
            self.db.refresh(db_user)
            return db_user
        except IntegrityError:
            # Lost a race with a concurrent registration
            self.db.rollback()
            self.ensure_available(username, email)
            raise

    def ensure_available(self, username: str, email: str) -> None:
        """Raise ConflictError if either field is in use; a username clash is reported first."""
        existing = self.find_conflicts(username, email)
        if any(user.username == username for user in existing):
            raise ConflictError(USERNAME_TAKEN)
        if any(user.email == email for user in existing):
            raise ConflictError(EMAIL_TAKEN)

    def find_conflicts(self, username: str, email: str) -> List[User]:
        return self.db.query(User).filter(
            or_(User.username == username, User.email == email)
        ).all()

    def get_user(self, user_id: str) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User")
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()
