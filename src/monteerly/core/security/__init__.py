"""Security utilities.

Re-exports all security-related functions for convenience.
"""

from monteerly.core.security.crypto import (
    DUMMY_PASSWORD_HASH,
    SESSION_TOKEN_TYPE,
    create_session_token,
    decode_federated_token,
    decode_session_token,
    hash_password,
    verify_password,
)

__all__ = [
    "DUMMY_PASSWORD_HASH",
    "SESSION_TOKEN_TYPE",
    "create_session_token",
    "decode_federated_token",
    "decode_session_token",
    "hash_password",
    "verify_password",
]
