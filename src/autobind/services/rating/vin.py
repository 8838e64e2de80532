# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""VIN format and check-digit validation.

Validation is purely structural. A well-formed VIN that no decoder knows is
still valid here; decoding is the VIN-decoder collaborator's job.
"""

import re
from typing import Final

from beartype import beartype

from ...core.errors import DomainError, ErrorCode
from ...core.result_types import Err, Ok

VIN_PATTERN: Final = re.compile(r"^[A-HJ-NPR-Z0-9]{17}$")
VIN_WEIGHTS: Final = (8, 7, 6, 5, 4, 3, 2, 10, 0, 9, 8, 7, 6, 5, 4, 3, 2)
CHECK_DIGIT_POSITION: Final = 8

TRANSLITERATION: Final[dict[str, int]] = {
    "A": 1, "B": 2, "C": 3, "D": 4, "E": 5, "F": 6, "G": 7, "H": 8,
    "J": 1, "K": 2, "L": 3, "M": 4, "N": 5, "P": 7, "R": 9,
    "S": 2, "T": 3, "U": 4, "V": 5, "W": 6, "X": 7, "Y": 8, "Z": 9,
}  # fmt: skip


@beartype
def transliterate(char: str) -> int:
    """Map a VIN character to its numeric value."""
    if char.isdigit():
        return int(char)
    return TRANSLITERATION[char]


@beartype
def compute_check_digit(vin: str) -> str:
    """Check digit for a 17-character, well-formed VIN."""
    total = sum(transliterate(ch) * w for ch, w in zip(vin, VIN_WEIGHTS, strict=True))
    remainder = total % 11
    return "X" if remainder == 10 else str(remainder)


@beartype
def validate_vin(vin: str, *, field: str = "vin") -> Ok[str] | Err[DomainError]:
    """Validate a VIN and return its normalized form.

    Fails with ``INVALID_FORMAT`` when the string is not 17 characters of
    A-Z/0-9 without I, O or Q, and with ``CHECKSUM_MISMATCH`` when the ninth
    character disagrees with the weighted checksum.
    """
    normalized = vin.strip().upper()
    if not VIN_PATTERN.match(normalized):
        return Err(
            DomainError.validation(
                ErrorCode.INVALID_FORMAT,
                "VIN must be 17 characters using A-Z and 0-9, excluding I, O and Q",
                fields=[field],
            )
        )

    expected = compute_check_digit(normalized)
    actual = normalized[CHECK_DIGIT_POSITION]
    if actual != expected:
        return Err(
            DomainError.validation(
                ErrorCode.CHECKSUM_MISMATCH,
                f"VIN check digit is {actual!r}, expected {expected!r}",
                fields=[field],
            )
        )
    return Ok(normalized)


@beartype
def is_valid_vin(vin: str) -> bool:
    return validate_vin(vin).is_ok()
