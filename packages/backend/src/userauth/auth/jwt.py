"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. A token
carries the user name (`sub`), issued-at (`iat`), expiry (`exp`) and the
issuer (`iss`), signed with HMAC over a process-wide secret. Any change to
header, payload or signature breaks verification.

There is exactly one token type: no refresh tokens, no revocation.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

import jwt

from userauth.errors import ConfigurationError

Clock = Callable[[], datetime]

REQUIRED_CLAIMS = ["sub", "iat", "exp", "iss"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenFailure(str, Enum):
    MALFORMED = "malformed"
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"


class TokenError(Exception):
    """Raised when a presented token fails verification."""

    def __init__(self, reason: TokenFailure, detail: str = ""):
        self.reason = reason
        super().__init__(detail or reason.value)


@dataclass(frozen=True)
class TokenClaims:
    user: str
    issued_at: datetime
    expires_at: datetime
    issuer: str


def _require_secret(secret: Optional[str]) -> str:
    if not secret:
        raise ConfigurationError("Token signing secret is not configured")
    return secret


class TokenIssuer:
    """Signs bearer tokens for an authenticated user."""

    def __init__(
        self,
        secret: str,
        issuer: str,
        ttl: timedelta = timedelta(days=2),
        algorithm: str = "HS256",
        clock: Clock = utcnow,
    ):
        self._secret = _require_secret(secret)
        self.issuer = issuer
        self.ttl = ttl
        self.algorithm = algorithm
        self._clock = clock

    def issue(self, user: str, ttl: Optional[timedelta] = None) -> str:
        """Create a signed token for `user`.

        `ttl` overrides the configured lifetime (a negative ttl yields a
        token that is already expired, which is handy in tests).
        """
        now = self._clock()
        payload = {
            "sub": user,
            "iat": int(now.timestamp()),
            "exp": int((now + (ttl if ttl is not None else self.ttl)).timestamp()),
            "iss": self.issuer,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)


class TokenValidator:
    """Checks structure, then signature, then expiry.

    Learn: PyJWT verifies the signature before it looks at any claim, so
    a token that is both tampered and expired reports INVALID_SIGNATURE.
    PyJWT's own time checks (exp, iat, nbf) are switched off because they
    read the wall clock; expiry is checked here against the injected clock
    so verification is a pure function of (token, secret, now).
    """

    def __init__(
        self,
        secret: str,
        issuer: str,
        algorithm: str = "HS256",
        clock: Clock = utcnow,
    ):
        self._secret = _require_secret(secret)
        self.issuer = issuer
        self.algorithm = algorithm
        self._clock = clock

    def verify(self, token: str, now: Optional[datetime] = None) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": REQUIRED_CLAIMS,
                },
            )
        except jwt.InvalidSignatureError:
            raise TokenError(TokenFailure.INVALID_SIGNATURE)
        except jwt.InvalidTokenError as e:
            # DecodeError, missing claims, wrong issuer
            raise TokenError(TokenFailure.MALFORMED, str(e))

        if not isinstance(payload["sub"], str) or not all(
            isinstance(payload[k], int) for k in ("iat", "exp")
        ):
            raise TokenError(TokenFailure.MALFORMED, "Unexpected claim types")

        current = now or self._clock()
        expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        if current > expires_at:
            raise TokenError(TokenFailure.EXPIRED)

        return TokenClaims(
            user=payload["sub"],
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=expires_at,
            issuer=payload["iss"],
        )
