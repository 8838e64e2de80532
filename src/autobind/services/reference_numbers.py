"""Human-readable reference numbers.

References are random, not sequential, over an alphabet without visually
ambiguous characters (no 0/O, 1/I/L). Callers retry on insert conflict.
"""

import secrets
from collections.abc import Awaitable, Callable
from typing import Final

from beartype import beartype

from ..core.errors import DomainError, ErrorCode
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok

logger = get_logger(__name__)

REFERENCE_ALPHABET: Final = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
REFERENCE_BODY_LENGTH: Final = 8
QUOTE_PREFIX: Final = "DZ"
POLICY_PREFIX: Final = "PL"

ReferenceGenerator = Callable[[str], str]


@beartype
def generate_reference(prefix: str) -> str:
    body = "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_BODY_LENGTH))
    return f"{prefix}{body}"


@beartype
async def insert_with_unique_reference(
    prefix: str,
    insert: Callable[[str], Awaitable[bool]],
    *,
    max_attempts: int,
    generator: ReferenceGenerator = generate_reference,
) -> Ok[str] | Err[DomainError]:
    """Generate references until ``insert`` accepts one.

    ``insert`` builds and stores the record for a candidate reference and
    returns False when that reference is already taken.
    """
    for attempt in range(1, max_attempts + 1):
        candidate = generator(prefix)
        if await insert(candidate):
            return Ok(candidate)
        logger.warning(
            "Reference %s already taken (attempt %d of %d)", candidate, attempt, max_attempts
        )
    return Err(
        DomainError.state(
            ErrorCode.REFERENCE_EXHAUSTED,
            f"Could not allocate a unique {prefix} reference after {max_attempts} attempts",
        )
    )
