"""Signed, expiring bearer tokens (HS256 JWT)."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from ridehail.auth.models import TokenType, User
from ridehail.settings import AuthSettings

logger = logging.getLogger(__name__)


class TokenService:
    def __init__(
        self,
        settings: AuthSettings,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._secret_key = settings.secret_key
        self._algorithm = settings.algorithm
        self._lifetimes: dict[TokenType, timedelta] = {
            "access": timedelta(minutes=settings.access_token_minutes),
            "refresh": timedelta(minutes=settings.refresh_token_minutes),
        }
        self._clock = clock or (lambda: datetime.now(UTC))

    def issue(self, user: User, token_type: TokenType = "access") -> str:
        issued_at = self._clock()
        claims = {
            "sub": user.id,
            "email": user.email,
            "role": user.role.value,
            "type": token_type,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._lifetimes[token_type]).timestamp()),
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def decode(self, token: str, expected_type: TokenType = "access") -> dict[str, Any] | None:
        """Verify signature, expiry and token type. Returns the claims or None."""
        try:
            claims: dict[str, Any] = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            logger.debug("Rejected token: %s", e)
            return None

        # Expiry is checked against the injected clock rather than wall time
        exp = claims.get("exp")
        if not isinstance(exp, int) or exp <= int(self._clock().timestamp()):
            logger.debug("Rejected expired token for sub=%s", claims.get("sub"))
            return None
        if claims.get("type") != expected_type or not claims.get("sub"):
            return None
        return claims
