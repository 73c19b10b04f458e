from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from .enums import ErrorCode

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Envelope returned across component boundaries.

    Expected business outcomes (no match, duplicate check-in, ...) travel as a
    failed result with an ``error_code``; only unexpected faults raise.
    """

    success: bool
    data: Optional[T] = None
    error_code: Optional[ErrorCode] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Optional[T] = None, message: Optional[str] = None) -> "Result[T]":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, code: ErrorCode, message: Optional[str] = None, data: Any = None) -> "Result[T]":
        return cls(success=False, data=data, error_code=code, message=message)

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            out["data"] = self.data
        if self.error_code is not None:
            out["errorCode"] = self.error_code.value
        if self.message:
            out["message"] = self.message
        return out
