"""Success/failure envelope returned by command handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, Iterable, Optional, TypeVar

from django.utils import timezone  # type: ignore

T = TypeVar("T")


class ErrorCode:
    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    BUSINESS_RULE = "business_rule"
    INVALID_STATE = "invalid_state"
    UNAVAILABLE = "unavailable"
    INTERNAL = "internal_error"


@dataclass
class ResultDto(Generic[T]):
    success: bool
    data: Optional[T] = None
    message: str = ""
    errors: list[str] = field(default_factory=list)
    error_code: Optional[str] = None
    timestamp: datetime = field(default_factory=timezone.now)

    @classmethod
    def ok(cls, data: Optional[T] = None, message: str = "Operation completed successfully") -> "ResultDto[T]":
        return cls(success=True, data=data, message=message)

    @classmethod
    def failure(cls, message: str, error_code: str = ErrorCode.BUSINESS_RULE) -> "ResultDto[T]":
        return cls(success=False, message=message, errors=[message], error_code=error_code)

    @classmethod
    def failed(
        cls,
        errors: Iterable[str],
        message: str = "Operation failed",
        error_code: str = ErrorCode.VALIDATION,
    ) -> "ResultDto[T]":
        return cls(success=False, message=message, errors=list(errors), error_code=error_code)

    @classmethod
    def from_error(cls, exc) -> "ResultDto[T]":
        """Build a failure from an :class:`ApplicationError`."""
        return cls(success=False, message=exc.message, errors=exc.errors, error_code=exc.error_code)

    @property
    def is_success(self) -> bool:
        return self.success

    def to_dict(self) -> dict[str, Any]:
        data = self.data
        if data is not None and not isinstance(data, (str, int, float, bool, dict, list)):
            data = str(data)
        return {
            "success": self.success,
            "data": data,
            "message": self.message,
            "errors": self.errors,
            "error_code": self.error_code,
            "timestamp": self.timestamp.isoformat(),
        }
