"""
textdelta.errors — exceptions raised by the change algebra.

Everything here signals a broken contract (a negative length, a slice
outside the change, a change that does not fit its document).  The
algebra is deterministic, so none of these are worth retrying.
"""

from __future__ import annotations


class DeltaError(ValueError):
    """Base class for textdelta errors."""

    def __init__(self, message: str, *, reason: str = "invalid") -> None:
        super().__init__(message)
        self.reason = reason

    def details(self) -> dict[str, object]:
        return {"reason": self.reason, "message": str(self)}


class InvalidOperationError(DeltaError):
    """An operation was built (or requested) with an impossible value."""

    def __init__(self, message: str, *, reason: str = "invalid_operation", value: object = None) -> None:
        super().__init__(message, reason=reason)
        self.value = value

    def details(self) -> dict[str, object]:
        payload = super().details()
        payload["value"] = self.value
        return payload


class SliceRangeError(DeltaError, IndexError):
    """Raised when a range falls outside the change it is taken from."""

    def __init__(self, message: str, *, start: int, end: int | None, length: int) -> None:
        super().__init__(message, reason="slice_out_of_range")
        self.start = start
        self.end = end
        self.length = length

    def details(self) -> dict[str, object]:
        payload = super().details()
        payload.update(start=self.start, end=self.end, length=self.length)
        return payload


class ApplyError(DeltaError):
    """Raised when a change reaches past the end of the text it is applied to."""

    def __init__(self, message: str, *, position: int, text_length: int) -> None:
        super().__init__(message, reason="apply_overflow")
        self.position = position
        self.text_length = text_length

    def details(self) -> dict[str, object]:
        payload = super().details()
        payload.update(position=self.position, text_length=self.text_length)
        return payload


class MalformedRecordError(DeltaError):
    """A serialized record matched no operation shape (strict mode only)."""

    def __init__(self, message: str, *, record: object, index: int) -> None:
        super().__init__(message, reason="malformed_record")
        self.record = record
        self.index = index

    def details(self) -> dict[str, object]:
        payload = super().details()
        payload.update(record=self.record, index=self.index)
        return payload


__all__ = [
    "DeltaError",
    "InvalidOperationError",
    "SliceRangeError",
    "ApplyError",
    "MalformedRecordError",
]
