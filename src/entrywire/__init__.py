"""
entrywire: Type-hint based Dependency Injection container with auto-wiring,
lifetimes, extenders and contextual bindings.

Public API exports for the entrywire package.
"""

# Application exports
from entrywire.application.container import Container
from entrywire.application.context_registry import ContextBuilder

# Domain exports
from entrywire.domain.enums import Lifetime
from entrywire.domain.exceptions import (
    CircularDependencyError,
    DIException,
    DuplicateEntryError,
    EntryNotFoundError,
    InjectionError,
    InvalidInstanceError,
    ResolverNotFoundError,
)
from entrywire.domain.interfaces import IContainer, IObserver
from entrywire.domain.markers import Parent
from entrywire.domain.models import ContainerOptions

# Infrastructure exports
from entrywire.infrastructure.observers import LoggingObserver

__version__ = "0.1.0"

__all__ = [
    # Container
    "Container",
    "ContainerOptions",
    "ContextBuilder",
    "IContainer",
    # Observers
    "IObserver",
    "LoggingObserver",
    # Enums and markers
    "Lifetime",
    "Parent",
    # Exceptions
    "DIException",
    "EntryNotFoundError",
    "DuplicateEntryError",
    "ResolverNotFoundError",
    "InvalidInstanceError",
    "InjectionError",
    "CircularDependencyError",
]
