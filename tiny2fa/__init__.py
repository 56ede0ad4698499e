"""
tiny2fa
=======

Time-based one-time passwords (RFC 6238 / RFC 4226, HMAC-SHA1, 30 s, 6 digits)
with secrets stored per scope in a YAML config file.

>>> from tiny2fa import hotp, current_counter, totp_display
>>> totp_display(hotp(b"12345678901234567890", current_counter(59)))
287082
"""

from tiny2fa.errors import (
    ClockError,
    DecodeError,
    StoreIOError,
    Tiny2faError,
    UninitializedScopeError,
)
from tiny2fa.otp_core import (
    current_counter,
    decode_secret,
    format_code,
    hotp,
    totp,
    totp_display,
)
from tiny2fa.keystore import FileKeyStore, KeyStore, MemoryKeyStore

__all__ = [
    "ClockError",
    "DecodeError",
    "StoreIOError",
    "Tiny2faError",
    "UninitializedScopeError",
    "current_counter",
    "decode_secret",
    "format_code",
    "hotp",
    "totp",
    "totp_display",
    "FileKeyStore",
    "KeyStore",
    "MemoryKeyStore",
]
