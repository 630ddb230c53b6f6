"""Exception types raised by the limit store.

Every failure a caller can see is a ``LimitStoreError``. Storage failures
carry a ``retryable`` flag so callers can tell a lock timeout apart from a
broken database without inspecting SQLAlchemy exceptions themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar


@dataclass
class LimitStoreError(Exception):
    """Base error for limit store failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured context for logs.
    """

    code: str
    message: str
    details: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)


class ChannelLimitNotFoundError(LimitStoreError):
    """Raised when a channel has no current limit."""


class InvalidInputError(LimitStoreError):
    """Raised when an identifier, limit or setting is malformed.

    Value bounds belong to the caller (see ``LimitBounds``). The store itself
    only rejects non-positive limits, because 0 marks a removal in the edit log.
    """


class StorageError(LimitStoreError):
    """Raised when the database fails. The write, if any, was rolled back."""

    retryable: ClassVar[bool] = False


class TransientStorageError(StorageError):
    """Connection loss, lock or pool timeout, or a conflicting concurrent write."""

    retryable: ClassVar[bool] = True


class FatalStorageError(StorageError):
    """Missing schema, corrupt database or any other unrecoverable failure."""
