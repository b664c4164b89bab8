"""Base model class for cache models."""

from pydantic import BaseModel, ConfigDict


class CacheModel(BaseModel):
    """Base model for immutable cache values."""

    model_config = ConfigDict(frozen=True, from_attributes=True)
