from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Type, TypeVar

from entrywire.domain.enums import Lifetime
from entrywire.domain.models import Entry, ParamSpec

T = TypeVar("T")


class IContainer(ABC):
    """Abstract interface for dependency injection container operations."""

    @abstractmethod
    def get(self, dependency_type: Type[T]) -> T:
        """Return the cached or freshly resolved instance of a registered type.

        Args:
            dependency_type: The registered type.
        """

    @abstractmethod
    def make(self, dependency_type: Type[T], /, *args: Any, **kwargs: Any) -> T:
        """Resolve a registered type, or construct it through the injector.

        Args:
            dependency_type: The type to resolve.
            *args: Explicit positional constructor arguments.
            **kwargs: Explicit keyword constructor arguments.
        """

    @abstractmethod
    def inject(self, dependency_type: Type[T], /, *args: Any, **kwargs: Any) -> T:
        """Construct a class, autowiring the parameters not given explicitly.

        Args:
            dependency_type: The class to construct.
            *args: Explicit positional constructor arguments.
            **kwargs: Explicit keyword constructor arguments.
        """

    @abstractmethod
    def call(self, function: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
        """Invoke a callable, autowiring the parameters not given explicitly.

        Args:
            function: The callable to invoke.
            *args: Explicit positional arguments.
            **kwargs: Explicit keyword arguments.
        """

    @abstractmethod
    def has(self, dependency_type: Type) -> bool:
        """Check whether an entry exists for the type."""

    @abstractmethod
    def get_entry(self, dependency_type: Type) -> Entry:
        """Return the entry registered for the type."""

    @abstractmethod
    def set(
        self,
        dependency_type: Type[T],
        resolver: Optional[Callable[["IContainer"], T]] = None,
        lifetime: Lifetime = Lifetime.TRANSIENT,
    ) -> None:
        """Register a resolver for the type with the given lifetime.

        Args:
            dependency_type: The type to register.
            resolver: Factory receiving the container. Defaults to autowiring the type itself.
            lifetime: How long resolved instances are kept.
        """

    @abstractmethod
    def extend(self, dependency_type: Type[T], extender: Callable[[T, "IContainer"], T]) -> "IContainer":
        """Attach an extender to the type's entry.

        Args:
            dependency_type: The type to extend.
            extender: Receives the instance and the container, returns the (possibly wrapped) instance.
        """

    @abstractmethod
    def unset(self, dependency_type: Type) -> bool:
        """Remove the type's entry."""

    @abstractmethod
    def clear_scoped(self) -> int:
        """Drop every cached Scoped instance."""

    @abstractmethod
    def create_scope(self) -> "IContainer":
        """Create a child container with its own Scoped instances."""


class IObserver(ABC):
    """Receives notifications around resolution and injection.

    Return values are ignored; implementations must not raise for ordinary
    notifications.
    """

    @abstractmethod
    def on_resolving(self, dependency_type: Type, lifetime: Lifetime) -> None:
        """Called before a registered entry is resolved on a cache miss."""

    @abstractmethod
    def on_resolved(self, dependency_type: Type, lifetime: Lifetime, instance: Any, was_cached: bool) -> None:
        """Called after a registered entry was resolved on a cache miss."""

    @abstractmethod
    def on_injecting(self, dependency_type: Type) -> None:
        """Called before a class is constructed through the injector."""

    @abstractmethod
    def on_injected(self, dependency_type: Type, instance: Any) -> None:
        """Called after a class was constructed through the injector."""


class IReflector(ABC):
    """Abstract interface for parameter discovery."""

    @abstractmethod
    def parameters_of(self, target: Callable[..., Any]) -> Optional[List[ParamSpec]]:
        """Describe the parameters of a class constructor or callable.

        Args:
            target: A class or any callable.

        Returns:
            Parameters in declaration order, receiver excluded, or ``None`` for
            classes whose signature cannot be inspected. Such classes receive
            explicit arguments unchanged.

        Raises:
            InjectionError: If the annotations cannot be evaluated.
        """
