"""
errors.py — exception hierarchy for tiny2fa.

Every error is terminal for a single invocation; the CLI catches
``Tiny2faError`` and reports the message on stderr.
"""


class Tiny2faError(Exception):
    """Base class for all tiny2fa errors."""


class DecodeError(Tiny2faError, ValueError):
    """The secret is not valid padded RFC 4648 base32."""


class ClockError(Tiny2faError, ValueError):
    """The current time lies before the TOTP time offset (T0)."""


class UninitializedScopeError(Tiny2faError, KeyError):
    """No key has been stored for the requested scope."""

    def __init__(self, scope: str):
        self.scope = scope
        super().__init__(scope)

    def __str__(self) -> str:
        # KeyError would repr() the argument
        return f"scope {self.scope} is not initialized. Use tiny2fa init <secret>"


class StoreIOError(Tiny2faError, OSError):
    """Reading or writing the key store failed, or its document is malformed."""
