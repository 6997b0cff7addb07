from __future__ import annotations

from typing import Optional

from .enums import AttendanceErrorKind


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AttendanceError(DomainError):
    """Storage failure while reading or writing attendance records.

    Never fatal: every operation can be retried with the same natural key.
    """

    kind: AttendanceErrorKind = AttendanceErrorKind.FETCH

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class FetchError(AttendanceError):
    kind = AttendanceErrorKind.FETCH


class WriteError(AttendanceError):
    kind = AttendanceErrorKind.WRITE
