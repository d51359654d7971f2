"""userauth — minimal user-account service.

Register a user, log in with a password to receive a bearer token,
and list users (admin only). The interesting part is the auth core:
bcrypt password hashing, signed JWT issuance and token validation.
"""

__version__ = "0.1.0"
