"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks. The cost
factor (log2 rounds) is configurable; 12 takes ~100ms per hash on modern
hardware, 4 is the floor bcrypt accepts and is what the tests use.

bcrypt only reads the first 72 bytes of its input. Longer passwords are
refused outright rather than truncated, otherwise two passwords sharing a
72-byte prefix would verify against each other's hash.

Hashing is CPU-bound. On the asyncio server the *_async variants push
the work to a thread so concurrent logins don't queue behind each other.
"""

import asyncio

import bcrypt
import structlog

from userauth.errors import HashingError

logger = structlog.get_logger()

BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """Salted one-way hashing with a fixed cost factor."""

    def __init__(self, cost_factor: int = 12):
        if not 4 <= cost_factor <= 31:
            raise ValueError("bcrypt cost factor must be between 4 and 31")
        self.cost_factor = cost_factor

    def hash(self, password: str) -> str:
        """Hash a password. Every call uses a fresh salt.

        Raises HashingError for empty or over-long input, or if bcrypt
        itself fails.
        """
        if not password:
            raise HashingError("Password must not be empty")
        pw_bytes = password.encode("utf-8")
        if len(pw_bytes) > BCRYPT_MAX_BYTES:
            raise HashingError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
        try:
            salt = bcrypt.gensalt(rounds=self.cost_factor)
            return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")
        except (ValueError, TypeError) as e:
            logger.error("password.hash_failed", error_type=type(e).__name__)
            raise HashingError() from e

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time check of a password against a stored hash.

        Never raises: a mismatch and a malformed stored hash both return
        False. The malformed case is logged since it means bad data in the
        store, not a wrong password. A password over 72 bytes can never
        have been hashed, so it is a mismatch.
        """
        pw_bytes = password.encode("utf-8")
        if len(pw_bytes) > BCRYPT_MAX_BYTES:
            return False
        try:
            return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
        except (ValueError, TypeError, AttributeError):
            logger.warning("password.malformed_hash")
            return False

    async def hash_async(self, password: str) -> str:
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self.verify, password, password_hash)
