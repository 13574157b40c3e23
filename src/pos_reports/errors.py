"""Exceptions raised while composing a report."""

from typing import Optional


class ReportError(Exception):
    """Base class for report composition failures."""


class InvalidRecordError(ReportError, ValueError):
    """A record cannot be turned into a row, even with placeholder values."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        record_index: Optional[int] = None,
    ):
        self.field = field
        self.record_index = record_index
        if record_index is not None:
            message = f"record {record_index}: {message}"
        super().__init__(message)


class RenderPrimitiveFailure(ReportError):
    """The drawing backend failed while painting or serializing the document."""
