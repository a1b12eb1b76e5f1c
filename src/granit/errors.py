from typing import Optional


class GranitError(ValueError):
    """Base class for all cipher failures."""


class EmptyKeyError(GranitError):
    """Raised when a transposition key contains no usable letters."""


class ImpossiblePlaintextError(GranitError):
    """
    Raised when a decrypted number stream cannot be a real GRANIT plaintext.

    `reason` is a short machine readable code, e.g. "truncated-code" or
    "unterminated-number-mode"; the message explains it for humans.
    """

    def __init__(self, reason: str, message: Optional[str] = None) -> None:
        self.reason = reason
        super().__init__(message or reason)


class KeyLengthWarning(UserWarning):
    """Issued when a transposition key is shorter than the advised length."""
