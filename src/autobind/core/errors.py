"""Typed domain failures.

Expected failures travel as ``Err(DomainError)`` values. Invariant violations
inside the rating path are defects and are raised instead.
"""

from enum import Enum
from typing import Any

from beartype import beartype
from pydantic import BaseModel, ConfigDict, Field


class ErrorCategory(str, Enum):
    """How a caller should react to a failure."""

    VALIDATION = "validation"
    STATE = "state"
    DEPENDENCY = "dependency"
    NOT_FOUND = "not_found"


class ErrorCode(str, Enum):
    INVALID_FORMAT = "INVALID_FORMAT"
    CHECKSUM_MISMATCH = "CHECKSUM_MISMATCH"
    COVERAGE_BELOW_STATE_MINIMUM = "COVERAGE_BELOW_STATE_MINIMUM"
    INVALID_DRIVER = "INVALID_DRIVER"
    INVALID_PAYMENT_DETAILS = "INVALID_PAYMENT_DETAILS"
    QUOTE_EXPIRED = "QUOTE_EXPIRED"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    BIND_ALREADY_IN_PROGRESS = "BIND_ALREADY_IN_PROGRESS"
    ALREADY_BOUND = "ALREADY_BOUND"
    PAYMENT_DECLINED = "PAYMENT_DECLINED"
    DEPENDENCY_UNAVAILABLE = "DEPENDENCY_UNAVAILABLE"
    QUOTE_NOT_FOUND = "QUOTE_NOT_FOUND"
    POLICY_NOT_FOUND = "POLICY_NOT_FOUND"
    POLICY_NOT_YET_EFFECTIVE = "POLICY_NOT_YET_EFFECTIVE"
    REFERENCE_EXHAUSTED = "REFERENCE_EXHAUSTED"


class DomainError(BaseModel):
    """A failure that names the offending fields or states."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    code: ErrorCode
    category: ErrorCategory
    message: str = Field(..., min_length=1)
    fields: list[str] = Field(default_factory=list)
    violations: list[dict[str, Any]] = Field(default_factory=list)
    current_state: str | None = None
    attempted_state: str | None = None

    @classmethod
    @beartype
    def validation(
        cls,
        code: ErrorCode,
        message: str,
        *,
        fields: list[str] | None = None,
        violations: list[dict[str, Any]] | None = None,
    ) -> "DomainError":
        return cls(
            code=code,
            category=ErrorCategory.VALIDATION,
            message=message,
            fields=fields or [],
            violations=violations or [],
        )

    @classmethod
    @beartype
    def state(
        cls,
        code: ErrorCode,
        message: str,
        *,
        current_state: str | None = None,
        attempted_state: str | None = None,
    ) -> "DomainError":
        return cls(
            code=code,
            category=ErrorCategory.STATE,
            message=message,
            current_state=current_state,
            attempted_state=attempted_state,
        )

    @classmethod
    @beartype
    def dependency(cls, message: str, *, fields: list[str] | None = None) -> "DomainError":
        return cls(
            code=ErrorCode.DEPENDENCY_UNAVAILABLE,
            category=ErrorCategory.DEPENDENCY,
            message=message,
            fields=fields or [],
        )

    @classmethod
    @beartype
    def not_found(cls, code: ErrorCode, message: str, *, field: str) -> "DomainError":
        return cls(
            code=code,
            category=ErrorCategory.NOT_FOUND,
            message=message,
            fields=[field],
        )


class PremiumInvariantError(RuntimeError):
    """A computed premium fell outside the sanity band.

    This is a defect in rating data or logic, never a caller error.
    """

    def __init__(self, message: str, *, final_total: Any, base_premium: Any) -> None:
        super().__init__(message)
        self.final_total = final_total
        self.base_premium = base_premium
