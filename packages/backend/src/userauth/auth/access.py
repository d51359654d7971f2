"""Request-time access control.

Learn: AccessControl is the gate between the HTTP layer and the token
validator. It only knows about the Authorization header value and the
validated claims; it never touches the database.
"""

from typing import Optional

from userauth.auth.jwt import TokenClaims, TokenError, TokenFailure, TokenValidator
from userauth.errors import AuthError, AuthFailure

_FAILURE_MAP = {
    TokenFailure.MALFORMED: AuthFailure.MALFORMED_TOKEN,
    TokenFailure.INVALID_SIGNATURE: AuthFailure.INVALID_SIGNATURE,
    TokenFailure.EXPIRED: AuthFailure.EXPIRED,
}


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    """Return the token part of `Bearer <token>`, or None."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


class AccessControl:
    def __init__(self, validator: TokenValidator):
        self.validator = validator

    def authorize(self, authorization: Optional[str]) -> TokenClaims:
        """Validate the bearer token in an Authorization header value.

        Raises AuthError with the reason matching the token failure.
        """
        token = extract_bearer(authorization)
        if token is None:
            raise AuthError(AuthFailure.MISSING_TOKEN)
        try:
            return self.validator.verify(token)
        except TokenError as e:
            raise AuthError(_FAILURE_MAP[e.reason])

    @staticmethod
    def require_identity(claims: TokenClaims, expected: str) -> bool:
        """Exact identity match. There is no role hierarchy."""
        return claims.user == expected
