"""Signed access tokens for API callers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from quizdeck.core.exceptions import AuthenticationError
from quizdeck.core.models import User
from quizdeck.utils.settings import Settings


class TokenService:
    """Issues and verifies HS256 tokens whose subject is the user id."""

    def __init__(self, settings: Settings) -> None:
        self._secret = settings.JWT_SECRET_KEY
        self._algorithm = settings.JWT_ALGORITHM
        self._expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    def create_access_token(self, user: User, expires_delta: timedelta | None = None) -> str:
        expire = datetime.now(timezone.utc) + (expires_delta or self._expires)
        to_encode = {"sub": user.id, "role": user.role, "exp": expire}
        return jwt.encode(to_encode, self._secret, algorithm=self._algorithm)

    def verify_token(self, token: str) -> str:
        """Return the user id carried by ``token``."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as exc:
            raise AuthenticationError("Token is not valid") from exc
        user_id = payload.get("sub")
        if not user_id:
            raise AuthenticationError("Token is not valid")
        return user_id
