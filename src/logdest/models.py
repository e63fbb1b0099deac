"""Base Pydantic models.

This module defines the foundational model classes used by identities,
policy statements, configuration documents and runtime settings.
"""

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchemaModel(BaseModel):
    """Base immutable model.

    Design principles enforced by this model:
        - Immutability: values can not be modified after creation, so an
          identity or a statement embedded into a template can not drift
          between construction and synthesis.
        - Strict schema validation: unknown or extra fields are rejected
          to avoid silent errors caused by typos.

    Arbitrary types are allowed so that fields can hold deferred cells.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    Design principles enforced by this model:
        - Immutability: resolved settings can not be modified after creation.
        - Tolerant schema handling: unknown environment variables are ignored.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )
