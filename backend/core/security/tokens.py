"""
JWT token service for authentication.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

# Registered claims managed by the service; never taken from the caller
_RESERVED_CLAIMS = {"sub", "exp", "iat", "type"}


@dataclass
class TokenPayload:
    """JWT token payload structure."""

    sub: str  # Subject (user email)
    exp: datetime  # Expiration time
    iat: datetime  # Issued at
    type: str  # Token type: always "access"
    email: str | None = None
    claims: dict[str, Any] = field(default_factory=dict)  # Remaining submitted claims


class TokenService:
    """Service for creating and validating JWT access tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 60,
    ):
        """
        Initialize the token service.

        Args:
            secret_key: Secret key for signing tokens
            algorithm: JWT algorithm (default: HS256)
            access_token_expire_minutes: Access token expiration in minutes
        """
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._access_token_expire_minutes = access_token_expire_minutes

    @property
    def expires_in(self) -> int:
        """Access token lifetime in seconds."""
        return self._access_token_expire_minutes * 60

    def create_access_token(self, email: str, **claims: Any) -> str:
        """
        Create an access token from identity claims.

        The identity behind ``email`` is assumed to have been verified by the
        upstream identity provider; no credential check happens here.

        Args:
            email: Subject email, stored as both ``sub`` and ``email``
            **claims: Extra claims to embed (reserved claims are ignored)

        Returns:
            Encoded JWT access token
        """
        now = datetime.now(UTC)
        expire = now + timedelta(minutes=self._access_token_expire_minutes)

        payload = {k: v for k, v in claims.items() if k not in _RESERVED_CLAIMS and v is not None}
        payload.update(
            {
                "sub": email,
                "email": email,
                "exp": expire,
                "iat": now,
                "type": "access",
            }
        )

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def decode_token(self, token: str) -> TokenPayload | None:
        """
        Decode and validate a JWT token.

        Args:
            token: JWT token to decode

        Returns:
            TokenPayload if valid, None if invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
            )

            for required in ("sub", "exp", "type"):
                if required not in payload:
                    raise JWTError(f"Missing required field: {required}")

            return TokenPayload(
                sub=payload["sub"],
                exp=datetime.fromtimestamp(payload["exp"], tz=UTC),
                iat=datetime.fromtimestamp(payload.get("iat", 0), tz=UTC),
                type=payload["type"],
                email=payload.get("email") or payload["sub"],
                claims={
                    k: v for k, v in payload.items() if k not in _RESERVED_CLAIMS | {"email"}
                },
            )
        except JWTError:
            return None

    def verify_access_token(self, token: str) -> TokenPayload | None:
        """
        Verify an access token.

        Args:
            token: JWT token to verify

        Returns:
            TokenPayload if valid access token, None otherwise
        """
        payload = self.decode_token(token)
        if payload and payload.type == "access":
            return payload
        return None
