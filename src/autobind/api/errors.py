"""Map domain failures onto HTTP responses."""

from typing import NoReturn

from beartype import beartype
from fastapi import HTTPException, status

from ..core.errors import DomainError, ErrorCategory, ErrorCode

CATEGORY_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 422,
    ErrorCategory.STATE: status.HTTP_409_CONFLICT,
    ErrorCategory.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCategory.DEPENDENCY: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@beartype
def status_for(error: DomainError) -> int:
    if error.code == ErrorCode.PAYMENT_DECLINED:
        return status.HTTP_402_PAYMENT_REQUIRED
    return CATEGORY_STATUS[error.category]


@beartype
def raise_domain_error(error: DomainError) -> NoReturn:
    raise HTTPException(status_code=status_for(error), detail=error.model_dump(mode="json"))
