"""Base Pydantic models for kvconfig.

This module provides the base model class that all kvconfig Pydantic models
inherit from. It establishes consistent configuration across all models:

- Strict field validation (no extra fields allowed)
- Immutable instances, safe to share between concurrent resolutions

Example:
    >>> from kvconfig.models import KvBaseModel
    >>>
    >>> class CacheSettings(KvBaseModel):
    ...     cache: bool = False
    >>>
    >>> CacheSettings(cache=True).model_dump()
    {'cache': True}
"""

from pydantic import BaseModel, ConfigDict


class KvBaseModel(BaseModel):
    """Base model for all kvconfig Pydantic models.

    - extra="forbid": Rejects any fields not defined in the model
    - frozen=True: Makes instances immutable
    """

    model_config = ConfigDict(extra="forbid", frozen=True)
