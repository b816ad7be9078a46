"""Service for registering and looking up users."""

from __future__ import annotations

from uuid import uuid4

from passlib.context import CryptContext

from quizdeck.core.exceptions import DuplicateError
from quizdeck.core.models import User

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


class UserRepository:
    """Keeps user accounts in memory. Emails are unique, compared case-insensitively."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}

    def register(self, name: str, email: str, password: str, role: str = "user") -> User:
        normalized = email.strip().lower()
        if self.get_by_email(normalized) is not None:
            raise DuplicateError("User already exists")
        user = User(
            id=uuid4().hex,
            name=name.strip(),
            email=normalized,
            password_hash=hash_password(password),
            role=role,
        )
        self._users[user.id] = user
        return user

    def get(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def get_by_email(self, email: str) -> User | None:
        normalized = email.strip().lower()
        return next((u for u in self._users.values() if u.email == normalized), None)

    def update(
        self,
        user_id: str,
        name: str | None = None,
        email: str | None = None,
        avatar: str | None = None,
    ) -> User:
        user = self._users[user_id]
        if email is not None:
            normalized = email.strip().lower()
            if normalized != user.email and self.get_by_email(normalized) is not None:
                raise DuplicateError("Email already in use")
            user.email = normalized
        if name:
            user.name = name.strip()
        if avatar is not None:
            user.avatar = avatar
        return user
