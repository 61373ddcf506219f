"""
Domain layer - Core business logic and models.

This layer contains the fundamental business rules and models for dependency injection.
It has no dependencies on other layers.
"""

from .enums import Lifetime, ParamKind, TypeCategory
from .events import Injected, Injecting, Resolved, Resolving
from .exceptions import (
    CircularDependencyError,
    DIException,
    DuplicateEntryError,
    EntryNotFoundError,
    InjectionError,
    InvalidInstanceError,
    ResolverNotFoundError,
)
from .interfaces import IContainer, IObserver, IReflector
from .markers import Parent
from .models import ContainerOptions, ContextBinding, Entry, ParamSpec, is_instance_of

# Rebuild Pydantic models to resolve forward references
Entry.model_rebuild()

__all__ = [
    # Enums
    "Lifetime",
    "ParamKind",
    "TypeCategory",
    # Events
    "Resolving",
    "Resolved",
    "Injecting",
    "Injected",
    # Exceptions
    "DIException",
    "EntryNotFoundError",
    "DuplicateEntryError",
    "ResolverNotFoundError",
    "InvalidInstanceError",
    "InjectionError",
    "CircularDependencyError",
    # Interfaces
    "IContainer",
    "IObserver",
    "IReflector",
    # Markers
    "Parent",
    # Models
    "Entry",
    "ParamSpec",
    "ContextBinding",
    "ContainerOptions",
    "is_instance_of",
]
