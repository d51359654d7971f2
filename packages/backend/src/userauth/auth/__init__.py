"""Authentication and authorization core.

Learn: Three small pieces, composed by AuthService and the API layer:
1. PasswordHasher → bcrypt hash/verify (salted, tunable cost)
2. TokenIssuer / TokenValidator → signed JWT bearer tokens
3. AccessControl → Authorization header → verified claims → identity checks

Tokens are stateless: validity is signature + expiry, no revocation list.
"""

from userauth.auth.access import AccessControl
from userauth.auth.jwt import TokenClaims, TokenError, TokenFailure, TokenIssuer, TokenValidator
from userauth.auth.password import PasswordHasher

__all__ = [
    "AccessControl",
    "PasswordHasher",
    "TokenClaims",
    "TokenError",
    "TokenFailure",
    "TokenIssuer",
    "TokenValidator",
]
