"""Application-level exceptions raised by command handlers.

Handlers either return a failed :class:`~shared.application.result.ResultDto`
for an expected failure or raise one of these; the handler boundary turns
a raised error into a failed result with the matching ``error_code``.
"""

from __future__ import annotations

from typing import Iterable


class ApplicationError(Exception):
    """Base class for expected, user-facing failures."""

    error_code = "application_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def errors(self) -> list[str]:
        return [self.message]


class NotFoundError(ApplicationError):
    """The requested entity does not exist (or is soft-deleted)."""

    error_code = "not_found"

    def __init__(self, entity: str, key):
        super().__init__(f"{entity} ({key}) was not found")
        self.entity = entity
        self.key = key


class ForbiddenError(ApplicationError):
    """The current user is not allowed to perform the operation."""

    error_code = "forbidden"

    def __init__(self, message: str = "You are not allowed to perform this operation"):
        super().__init__(message)


class BusinessRuleError(ApplicationError):
    """A business rule rejected the operation."""

    error_code = "business_rule"

    def __init__(self, rule: str, message: str):
        super().__init__(message)
        self.rule = rule


class ValidationError(ApplicationError):
    """Command input is invalid. Carries every collected message."""

    error_code = "validation_error"

    def __init__(self, errors: Iterable[str]):
        self._errors = list(errors)
        super().__init__("; ".join(self._errors) or "Invalid input")

    @property
    def errors(self) -> list[str]:
        return list(self._errors)


class UnavailableError(ApplicationError):
    """A resource or an external service cannot serve the request right now."""

    error_code = "unavailable"
