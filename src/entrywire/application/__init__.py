"""
Application layer - Use cases and orchestration.

This layer contains the use cases that orchestrate domain objects.
It depends only on the Domain layer.
"""

from .container import Container
from .context_registry import ContextBuilder, ContextRegistry
from .entry_store import EntryStore
from .injector import Injector
from .reflector import Reflector
from .resolution_guard import ResolutionGuard

__all__ = [
    "Container",
    "ContextBuilder",
    "ContextRegistry",
    "EntryStore",
    "Injector",
    "Reflector",
    "ResolutionGuard",
]
