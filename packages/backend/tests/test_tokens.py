"""TokenIssuer / TokenValidator tests.

Learn: Validation order matters: structure, then signature, then expiry.
Tampering is tested on both the payload and the signature segment.
"""

import base64
import json
import os
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from userauth.auth.jwt import TokenError, TokenFailure, TokenIssuer, TokenValidator
from userauth.errors import ConfigurationError

TEST_SECRET = os.environ["USERAUTH_JWT_SECRET"]


def _b64url(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def _reason(validator, token, **kwargs):
    with pytest.raises(TokenError) as exc:
        validator.verify(token, **kwargs)
    return exc.value.reason


def test_round_trip(issuer, validator):
    token = issuer.issue("u")
    claims = validator.verify(token)
    assert claims.user == "u"
    assert claims.issuer == issuer.issuer
    assert claims.expires_at > claims.issued_at


def test_default_ttl_is_two_days(validator):
    issuer = TokenIssuer(secret=TEST_SECRET, issuer=validator.issuer)
    claims = validator.verify(issuer.issue("u"))
    assert claims.expires_at - claims.issued_at == timedelta(days=2)


def test_ttl_override(issuer, validator):
    claims = validator.verify(issuer.issue("u", ttl=timedelta(minutes=5)))
    assert claims.expires_at - claims.issued_at == timedelta(minutes=5)


def test_expired_token(issuer, validator):
    token = issuer.issue("u", ttl=timedelta(seconds=-1))
    assert _reason(validator, token) == TokenFailure.EXPIRED


def test_expiry_boundary_uses_injected_now(issuer, validator):
    token = issuer.issue("u", ttl=timedelta(hours=1))
    claims = validator.verify(token)

    # Valid exactly at expiry, invalid one second later
    assert validator.verify(token, now=claims.expires_at).user == "u"
    later = claims.expires_at + timedelta(seconds=1)
    assert _reason(validator, token, now=later) == TokenFailure.EXPIRED


def test_tampered_signature(issuer, validator):
    header, payload, sig = issuer.issue("u").split(".")
    i = len(sig) // 2
    flipped = "A" if sig[i] != "A" else "B"
    tampered = f"{header}.{payload}.{sig[:i]}{flipped}{sig[i + 1:]}"
    assert _reason(validator, tampered) == TokenFailure.INVALID_SIGNATURE


def test_tampered_payload(issuer, validator):
    """Swapping the claims for `admin` keeps structure but breaks the signature."""
    header, payload, sig = issuer.issue("alice").split(".")
    now = int(datetime.now(timezone.utc).timestamp())
    forged = _b64url({"sub": "admin", "iat": now, "exp": now + 3600, "iss": issuer.issuer})
    assert _reason(validator, f"{header}.{forged}.{sig}") == TokenFailure.INVALID_SIGNATURE


def test_signature_checked_before_expiry(issuer, validator):
    header, payload, sig = issuer.issue("u", ttl=timedelta(seconds=-10)).split(".")
    i = len(sig) // 2
    flipped = "A" if sig[i] != "A" else "B"
    tampered = f"{header}.{payload}.{sig[:i]}{flipped}{sig[i + 1:]}"
    assert _reason(validator, tampered) == TokenFailure.INVALID_SIGNATURE


def test_wrong_secret(validator):
    other = TokenIssuer(secret="another-secret-0123456789abcdefghij", issuer=validator.issuer)
    assert _reason(validator, other.issue("u")) == TokenFailure.INVALID_SIGNATURE


@pytest.mark.parametrize("token", ["", "not-a-token", "a.b", "a.b.c", "....."])
def test_malformed_tokens(validator, token):
    assert _reason(validator, token) == TokenFailure.MALFORMED


def test_wrong_issuer_is_malformed(validator):
    other = TokenIssuer(secret=TEST_SECRET, issuer="someone-else")
    assert _reason(validator, other.issue("u")) == TokenFailure.MALFORMED


def test_missing_secret_is_configuration_error():
    with pytest.raises(ConfigurationError):
        TokenIssuer(secret="", issuer="userauth")
    with pytest.raises(ConfigurationError):
        TokenValidator(secret="", issuer="userauth")


def test_verification_ignores_wall_clock(validator):
    """A token minted by a clock running ahead verifies at an injected later now."""
    ahead = datetime.now(timezone.utc) + timedelta(hours=1)
    future_issuer = TokenIssuer(
        secret=TEST_SECRET, issuer=validator.issuer, clock=lambda: ahead
    )
    token = future_issuer.issue("u", ttl=timedelta(minutes=10))

    claims = validator.verify(token, now=ahead + timedelta(seconds=1))
    assert claims.user == "u"
    assert claims.issued_at == datetime.fromtimestamp(int(ahead.timestamp()), tz=timezone.utc)

    later = ahead + timedelta(minutes=11)
    assert _reason(validator, token, now=later) == TokenFailure.EXPIRED


def test_nbf_claim_is_not_checked_against_wall_clock(validator):
    ahead = int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp())
    token = jwt.encode(
        {"sub": "u", "iat": ahead, "exp": ahead + 600, "nbf": ahead, "iss": validator.issuer},
        TEST_SECRET,
        algorithm="HS256",
    )
    now = datetime.fromtimestamp(ahead + 1, tz=timezone.utc)
    assert validator.verify(token, now=now).user == "u"
