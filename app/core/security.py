"""Security utilities for JWT and password handling."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.exceptions import HashingException, InvalidTokenException

Clock = Callable[[], datetime]

ACCESS_TOKEN_TYPE = "access"


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from the database."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class PasswordHasher:
    """Salted one-way password hashing backed by bcrypt."""

    def __init__(self, rounds: int = 12):
        """Initialize hasher with the bcrypt cost factor."""
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )
        self._dummy_hash: str | None = None

    def hash(self, password: str) -> str:
        """
        Hash a password.

        Raises:
            HashingException: If the bcrypt backend fails
        """
        try:
            return self._context.hash(password)
        except Exception as e:
            raise HashingException() from e

    def verify(self, password: str | None, password_hash: str | None) -> bool:
        """Verify a password against a hash. Never raises."""
        if not password or not password_hash:
            return False

        try:
            return self._context.verify(password, password_hash)
        except Exception:
            return False

    def verify_dummy(self, password: str | None) -> bool:
        """Run a full verify against a throwaway hash and report a mismatch.

        Used for unknown accounts, which then take as long to reject as a
        wrong password.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("dummy-password-for-timing")
        self.verify(password or "x", self._dummy_hash)
        return False


class TokenService:
    """Issue and verify signed admin access tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_hours: int = 24,
        clock: Clock = utcnow,
    ):
        """Initialize token service with signing configuration."""
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._clock = clock
        self.expires_in = timedelta(hours=expire_hours)

    def issue(self, admin_id: UUID | str) -> str:
        """
        Create a JWT access token for an admin.

        Args:
            admin_id: Admin account identifier

        Returns:
            Encoded JWT token
        """
        now = self._clock()
        to_encode: dict[str, Any] = {
            "sub": str(admin_id),
            "type": ACCESS_TOKEN_TYPE,
            "iat": now,
            "exp": now + self.expires_in,
        }

        return jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> UUID:
        """
        Decode and validate a JWT access token.

        Args:
            token: JWT token to decode

        Returns:
            Admin ID carried by the token

        Raises:
            InvalidTokenException: If the token is malformed, mis-signed or expired
        """
        try:
            # Expiry is checked below against the injected clock
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            raise InvalidTokenException() from e

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise InvalidTokenException()

        exp = payload.get("exp")
        if not isinstance(exp, int) or exp < int(self._clock().timestamp()):
            raise InvalidTokenException("Token has expired.")

        sub = payload.get("sub")
        if not isinstance(sub, str):
            raise InvalidTokenException()

        try:
            return UUID(sub)
        except ValueError as e:
            raise InvalidTokenException() from e
