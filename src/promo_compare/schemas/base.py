"""Base schema configuration for all Pydantic models.

Usage:
    - APIRequest: incoming request bodies (extra fields ignored)
    - APIResponse: outgoing response bodies (extra fields forbidden)
    - DomainModel: immutable values passed between the matching, caching
      and aggregation stages; serialised with the same camelCase aliases so
      the HTTP layer can return them as-is
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _BaseSchema(BaseModel):
    """Private base schema with common configuration."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
        validate_default=True,
        serialize_by_alias=True,
    )


class APIRequest(_BaseSchema):
    """Base class for incoming API request schemas."""

    model_config = ConfigDict(
        extra="ignore",
    )


class APIResponse(_BaseSchema):
    """Base class for outgoing API response schemas."""

    model_config = ConfigDict(
        extra="forbid",
    )


class DomainModel(_BaseSchema):
    """Base class for immutable domain values."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )
