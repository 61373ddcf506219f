"""Application layer - Circular dependency detection."""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List, Type

from entrywire.domain import CircularDependencyError

logger = logging.getLogger(__name__)


class _Frame:
    __slots__ = ("dependency_type", "claimed")

    def __init__(self, dependency_type: Type, claimed: bool) -> None:
        self.dependency_type = dependency_type
        self.claimed = claimed


class ResolutionGuard:
    """Detects circular dependencies during resolution.

    Uses thread-local storage to track the types currently being resolved.
    Two kinds of frames share one stack:

    - ``resolving(T)`` is entered by the container around an entry's resolver.
    - ``injecting(T)`` is entered by the injector around constructor autowiring.

    When the injector constructs the very type whose entry is being resolved
    (the default resolver of ``bind(T)``), it claims the open ``resolving``
    frame instead of pushing a second one. Any other repeat of a type already
    on the stack is a circular dependency.

    Attributes:
        _local: Thread-local storage for resolution stacks.
    """

    def __init__(self) -> None:
        """Initialize the guard with thread-local storage."""
        self._local = threading.local()

    def _get_stack(self) -> List[_Frame]:
        """Get the current thread's resolution stack."""
        if not hasattr(self._local, "stack"):
            self._local.stack = []
        return self._local.stack

    @property
    def chain(self) -> List[Type]:
        """Types currently being resolved on this thread, outermost first."""
        return [frame.dependency_type for frame in self._get_stack()]

    def is_empty(self) -> bool:
        return not self._get_stack()

    def _check(self, dependency_type: Type) -> None:
        stack = self._get_stack()
        if any(frame.dependency_type is dependency_type for frame in stack):
            chain = [frame.dependency_type for frame in stack] + [dependency_type]
            error = CircularDependencyError(chain)
            logger.warning("%s", error)
            raise error

    @contextmanager
    def resolving(self, dependency_type: Type) -> Iterator[None]:
        """Guard the resolution of a registered entry.

        Raises:
            CircularDependencyError: If the type is already being resolved.
        """
        self._check(dependency_type)
        stack = self._get_stack()
        stack.append(_Frame(dependency_type, claimed=False))
        try:
            yield
        finally:
            stack.pop()

    @contextmanager
    def injecting(self, dependency_type: Type) -> Iterator[None]:
        """Guard the autowiring of a class constructor.

        Raises:
            CircularDependencyError: If the type is already being constructed.
        """
        stack = self._get_stack()
        top = stack[-1] if stack else None
        if top is not None and top.dependency_type is dependency_type and not top.claimed:
            top.claimed = True
            try:
                yield
            finally:
                top.claimed = False
            return

        self._check(dependency_type)
        stack.append(_Frame(dependency_type, claimed=True))
        try:
            yield
        finally:
            stack.pop()

    def clear(self) -> None:
        """Clear the current thread's stack."""
        if hasattr(self._local, "stack"):
            self._local.stack.clear()
