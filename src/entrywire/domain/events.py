from typing import Any, Type

from pydantic import BaseModel, ConfigDict

from entrywire.domain.enums import Lifetime


class Resolving(BaseModel):
    """Emitted before an entry is resolved on a cache miss."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    dependency_type: Type
    lifetime: Lifetime


class Resolved(BaseModel):
    """Emitted after an entry was resolved on a cache miss.

    Attributes:
        was_cached: Whether the entry kept the instance after resolution.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    dependency_type: Type
    lifetime: Lifetime
    instance: Any
    was_cached: bool


class Injecting(BaseModel):
    """Emitted before a class is constructed through the injector."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    target: Type


class Injected(BaseModel):
    """Emitted after a class was constructed through the injector."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    target: Type
    instance: Any
