"""Errors raised while ingesting payment callbacks."""

from __future__ import annotations


class PayCallbackError(RuntimeError):
    """Base class for callback ingestion failures."""


class PayNotificationDecodingError(PayCallbackError):
    """The payload cannot be parsed, verified or decrypted, or its order is unknown."""


class NotifyMessageStorageError(PayCallbackError):
    """The audit record for an inbound callback could not be written."""


class PaymentConfigurationError(PayCallbackError):
    """Account, merchant or certificate configuration is missing or invalid."""


class UnsupportedNotificationError(PayCallbackError, NotImplementedError):
    """The callback requires a capability this build does not provide."""


class MiniProgramApiError(PayCallbackError):
    """The mini-program server API answered with a non-zero ``errcode``."""

    def __init__(self, message: str, *, errcode: int | None = None) -> None:
        super().__init__(message)
        self.errcode = errcode


__all__ = [
    "MiniProgramApiError",
    "NotifyMessageStorageError",
    "PayCallbackError",
    "PayNotificationDecodingError",
    "PaymentConfigurationError",
    "UnsupportedNotificationError",
]
