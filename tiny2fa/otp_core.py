"""
otp_core.py — Core TOTP / HOTP library for tiny2fa.

Pure functions only: no argparse, no file I/O. The CLI and the key store
live in their own modules and hand this module an already-loaded secret.

Algorithm (fixed parameters, RFC 6238 defaults):
- HOTP: Truncate(HMAC-SHA1(key, counter as 8 big-endian bytes)) -> 31-bit int
- TOTP: HOTP with counter = floor((now - T0) / 30)
- Display: value % 10^6, zero-padded to 6 characters
"""

from typing import Optional, Tuple
import base64
import hmac
import hashlib
import struct
import time

from tiny2fa.errors import ClockError, DecodeError
from tiny2fa.log import logger

# --- Config / constants ----------------------------------------------------
DIGITS = 6            # displayed code length
INTERVAL = 30         # TOTP step (seconds)
TIME_OFFSET = 0       # T0, unix seconds
MAX_COUNTER = 2 ** 64 - 1


# --- Base32 ----------------------------------------------------------------
def decode_secret(encoded: str) -> bytes:
    """
    Decode a base32 secret (RFC 4648 alphabet, '=' padded) into key bytes.

    Lower-case letters are accepted. Leading/trailing whitespace is ignored.

    Raises:
        DecodeError: invalid characters or malformed padding.
    """
    try:
        return base64.b32decode(encoded.strip(), casefold=True)
    except ValueError as e:
        # binascii.Error subclasses ValueError; non-ASCII str raises ValueError
        raise DecodeError(f"Unable to decode key: {e}") from e


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(i: int) -> bytes:
    """Counter as the 8-byte big-endian message RFC 4226 hashes."""
    if not 0 <= i <= MAX_COUNTER:
        raise ValueError(f"counter out of range: {i}")
    return struct.pack(">Q", i)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    RFC 4226 dynamic truncation.

    The low nibble of the last byte picks a 4-byte window. For a 20-byte
    SHA-1 digest the offset is at most 15, so the window ends at index 18.
    The top bit is cleared, leaving a 31-bit unsigned value.
    """
    offset = hmac_digest[-1] & 0x0F
    code = ((hmac_digest[offset] & 0x7F) << 24 |
            (hmac_digest[offset + 1] & 0xFF) << 16 |
            (hmac_digest[offset + 2] & 0xFF) << 8 |
            (hmac_digest[offset + 3] & 0xFF))
    return code


# --- TOTP engine -----------------------------------------------------------
def current_counter(now: int, time_offset: int = TIME_OFFSET, interval: int = INTERVAL) -> int:
    """
    Time step counter: (now - time_offset) // interval.

    Raises:
        ClockError: now is earlier than time_offset.
        ValueError: interval is not positive.
    """
    if interval <= 0:
        raise ValueError(f"interval must be positive, got {interval}")
    if now < time_offset:
        raise ClockError(f"current time {now} is before time offset {time_offset}")
    return (now - time_offset) // interval


def hotp(key: bytes, counter: int) -> int:
    """
    HOTP value for a raw key and counter (RFC 4226, before the modulo step).

    Steps:
    1. Message = 8-byte big-endian counter
    2. HMAC-SHA1(key, message) -> 20-byte digest
    3. Dynamic truncate -> 31-bit integer

    Same key and counter always give the same value.
    """
    digest = hmac.new(key, int_to_bytes(counter), hashlib.sha1).digest()
    return dynamic_truncate(digest)


def totp_display(hotp_value: int, digits: int = DIGITS) -> int:
    """Reduce a HOTP value to its last `digits` decimal digits."""
    return hotp_value % (10 ** digits)


def format_code(value: int, digits: int = DIGITS) -> str:
    """Zero-padded rendering, e.g. 42 -> '000042'."""
    return str(value).zfill(digits)


def totp(
    secret_b32: str,
    timestamp: Optional[int] = None,
    time_offset: int = TIME_OFFSET,
    interval: int = INTERVAL,
) -> Tuple[str, int]:
    """
    Full TOTP pipeline for a stored base32 secret.

    Arguments:
        secret_b32: base32 secret as stored
        timestamp: unix seconds (None -> time.time())
        time_offset: T0
        interval: step length in seconds

    Returns:
        (code, remaining_seconds)
        - code: zero-padded 6-digit string
        - remaining_seconds: seconds until the next step

    Raises:
        DecodeError: secret is not valid base32
        ClockError: timestamp is before time_offset
    """
    key = decode_secret(secret_b32)
    timestamp = int(time.time()) if timestamp is None else int(timestamp)
    counter = current_counter(timestamp, time_offset, interval)
    value = hotp(key, counter)
    code = format_code(totp_display(value))
    remaining = interval - ((timestamp - time_offset) % interval)
    logger.debug("TOTP: time=%d, counter=%d, truncated=%d, remaining=%ds",
                 timestamp, counter, value, remaining)
    return code, remaining
