import hashlib
import hmac

import pyotp
import pytest

from tiny2fa import otp_core
from tiny2fa.errors import ClockError, DecodeError

RFC_KEY = b"12345678901234567890"
RFC_KEY_B32 = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"

# RFC 4226 Appendix D, "Truncated" decimal column
RFC4226_TRUNCATED = [
    1284755224,
    1094287082,
    137359152,
    1726969429,
    1640338314,
    868254676,
    1918287922,
    82162583,
    673399871,
    645520489,
]

# RFC 6238 Appendix B (SHA-1), last six digits of the 8-digit codes
RFC6238_SHA1 = [
    (59, "287082"),
    (1111111109, "081804"),
    (1111111111, "050471"),
    (1234567890, "005924"),
    (2000000000, "279037"),
    (20000000000, "353130"),
]


@pytest.mark.parametrize("counter,expected", list(enumerate(RFC4226_TRUNCATED)))
def test_hotp_rfc4226_vectors(counter: int, expected: int) -> None:
    assert otp_core.hotp(RFC_KEY, counter) == expected


@pytest.mark.parametrize("timestamp,expected", RFC6238_SHA1)
def test_totp_rfc6238_vectors(timestamp: int, expected: str) -> None:
    code, _ = otp_core.totp(RFC_KEY_B32, timestamp)
    assert code == expected


def test_hotp_is_deterministic() -> None:
    key = otp_core.decode_secret("JBSWY3DPEHPK3PXP")
    for counter in (0, 1, 55_000_000, otp_core.MAX_COUNTER):
        assert otp_core.hotp(key, counter) == otp_core.hotp(key, counter)


def test_hotp_rejects_unpackable_counter() -> None:
    with pytest.raises(ValueError):
        otp_core.hotp(RFC_KEY, -1)
    with pytest.raises(ValueError):
        otp_core.hotp(RFC_KEY, otp_core.MAX_COUNTER + 1)


@pytest.mark.parametrize("offset", range(16))
def test_dynamic_truncate_window_stays_in_digest(offset: int) -> None:
    digest = bytes(range(0x80, 0x80 + 19)) + bytes([0xF0 | offset])
    assert len(digest) == 20
    assert offset + 4 <= len(digest) - 1

    expected = int.from_bytes(digest[offset:offset + 4], "big") & 0x7FFFFFFF
    assert otp_core.dynamic_truncate(digest) == expected
    assert 0 <= expected <= 0x7FFFFFFF


def test_hotp_truncation_matches_manual_hmac() -> None:
    digest = hmac.new(RFC_KEY, (7).to_bytes(8, "big"), hashlib.sha1).digest()
    offset = digest[19] & 0x0F
    expected = int.from_bytes(digest[offset:offset + 4], "big") & 0x7FFFFFFF
    assert otp_core.hotp(RFC_KEY, 7) == expected


@pytest.mark.parametrize("value", [0, 999999, 1000000, 1284755224, 0x7FFFFFFF])
def test_totp_display_range(value: int) -> None:
    shown = otp_core.totp_display(value)
    assert 0 <= shown <= 999999
    assert shown == value % 1_000_000


def test_format_code_zero_pads() -> None:
    assert otp_core.format_code(42) == "000042"
    assert otp_core.format_code(287082) == "287082"
    assert otp_core.format_code(otp_core.totp_display(82162583)) == "162583"


def test_current_counter_steps_every_interval() -> None:
    assert otp_core.current_counter(0) == 0
    assert otp_core.current_counter(29) == 0
    assert otp_core.current_counter(30) == 1
    assert otp_core.current_counter(59) == 1
    assert otp_core.current_counter(60) == 2

    previous = otp_core.current_counter(1_700_000_000)
    for now in range(1_700_000_001, 1_700_000_121):
        counter = otp_core.current_counter(now)
        assert counter >= previous
        if now % 30 == 0:
            assert counter == previous + 1
        else:
            assert counter == previous
        previous = counter


def test_current_counter_with_offset() -> None:
    assert otp_core.current_counter(100, time_offset=40) == 2
    assert otp_core.current_counter(40, time_offset=40) == 0


def test_current_counter_before_offset_fails() -> None:
    with pytest.raises(ClockError):
        otp_core.current_counter(5, time_offset=10)


def test_current_counter_rejects_bad_interval() -> None:
    with pytest.raises(ValueError):
        otp_core.current_counter(100, interval=0)


def test_decode_secret() -> None:
    assert otp_core.decode_secret("JBSWY3DPEHPK3PXP") == b"Hello!\xde\xad\xbe\xef"
    assert otp_core.decode_secret(RFC_KEY_B32) == RFC_KEY
    assert otp_core.decode_secret("MZXW6===") == b"foo"
    assert otp_core.decode_secret("  MZXW6===\n") == b"foo"


def test_decode_secret_accepts_lower_case() -> None:
    assert otp_core.decode_secret("mzxw6===") == b"foo"
    assert otp_core.decode_secret("jbswy3dpehpk3pxp") == otp_core.decode_secret("JBSWY3DPEHPK3PXP")
    code, _ = otp_core.totp("jbswy3dpehpk3pxp", 59)
    assert code == otp_core.totp("JBSWY3DPEHPK3PXP", 59)[0]


@pytest.mark.parametrize("bad", ["1230", "MZXW6", "MZXW6=", "MZXW1===", "mzxw1===", "JBSWY3DPEHPK3PX!"])
def test_decode_secret_rejects_invalid(bad: str) -> None:
    with pytest.raises(DecodeError):
        otp_core.decode_secret(bad)


def test_totp_invalid_secret_raises_decode_error() -> None:
    with pytest.raises(DecodeError):
        otp_core.totp("1230", 1_700_000_000)


def test_totp_remaining_seconds() -> None:
    _, remaining = otp_core.totp(RFC_KEY_B32, 60)
    assert remaining == 30
    _, remaining = otp_core.totp(RFC_KEY_B32, 89)
    assert remaining == 1


@pytest.mark.parametrize("timestamp", [0, 59, 1_111_111_109, 1_700_000_000, 1_700_000_029])
def test_totp_matches_pyotp(timestamp: int) -> None:
    secret = "JBSWY3DPEHPK3PXP"
    code, _ = otp_core.totp(secret, timestamp)
    assert code == pyotp.TOTP(secret).at(timestamp)


@pytest.mark.parametrize("counter", [0, 1, 2, 1000, 56_666_666])
def test_hotp_matches_pyotp(counter: int) -> None:
    key = otp_core.decode_secret(RFC_KEY_B32)
    shown = otp_core.format_code(otp_core.totp_display(otp_core.hotp(key, counter)))
    assert shown == pyotp.HOTP(RFC_KEY_B32).at(counter)
