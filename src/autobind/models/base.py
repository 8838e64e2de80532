# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Base Pydantic model configuration for all domain models.

Every domain model is immutable: a state change produces a new instance
through ``model_copy(update=...)`` and is persisted with a compare-and-set.
"""

from uuid import UUID, uuid4

from beartype import beartype
from pydantic import BaseModel, ConfigDict, Field


@beartype
class BaseModelConfig(BaseModel):
    """Base model with strict validation and immutability."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
        use_enum_values=False,
    )


@beartype
class IdentifiableModel(BaseModelConfig):
    """Base model carrying a generated identifier."""

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
