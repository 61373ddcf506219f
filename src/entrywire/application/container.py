import logging
import threading
from contextlib import nullcontext
from typing import Any, Callable, ContextManager, Dict, Optional, Type, TypeVar

from entrywire.application.context_registry import ContextBuilder, ContextRegistry
from entrywire.application.entry_store import EntryStore
from entrywire.application.injector import Injector
from entrywire.application.resolution_guard import ResolutionGuard
from entrywire.domain import (
    ContainerOptions,
    Entry,
    IContainer,
    InvalidInstanceError,
    IObserver,
    IReflector,
    Lifetime,
    is_instance_of,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Container(IContainer):
    """Main dependency injection container.

    Composes the entry store and the injector. Supports transient, scoped and
    singleton lifetimes, extenders, contextual overrides and auto-wiring.

    Attributes:
        _options: Container configuration.
        _entries: Registered entries.
        _guard: Circular dependency guard shared with the injector.
        _injector: Component responsible for auto-wiring constructors and callables.
        _observer: Optional sink notified around resolution and injection.
        _lock: Re-entrant lock when ``options.thread_safe`` is set, otherwise a no-op.
    """

    def __init__(
        self,
        options: Optional[ContainerOptions] = None,
        observer: Optional[IObserver] = None,
        reflector: Optional[IReflector] = None,
        entries: Optional[EntryStore] = None,
        contexts: Optional[ContextRegistry] = None,
    ) -> None:
        """Initialize the container.

        Args:
            options: Container configuration. Defaults to ``ContainerOptions()``.
            observer: Optional observer notified on cache-miss resolutions and injections.
            reflector: Parameter discovery strategy. Defaults to ``Reflector()``.
            entries: Pre-populated entry store.
            contexts: Pre-populated contextual overrides.
        """
        self._options = options or ContainerOptions()
        self._entries = entries if entries is not None else EntryStore()
        self._guard = ResolutionGuard()
        self._injector = Injector(
            reflector=reflector,
            contexts=contexts if contexts is not None else ContextRegistry(),
            guard=self._guard,
            autowire=self._options.autowire,
        )
        self._observer = observer
        self._lock: ContextManager[Any] = threading.RLock() if self._options.thread_safe else nullcontext()

    @property
    def options(self) -> ContainerOptions:
        return self._options

    @property
    def observer(self) -> Optional[IObserver]:
        return self._observer

    def get(self, dependency_type: Type[T]) -> T:
        """Return the cached or freshly resolved instance of a registered type.

        Observer hooks fire only when the entry is actually resolved, so a
        singleton notifies once no matter how often it is requested.

        Args:
            dependency_type: The registered type.

        Returns:
            The instance.

        Raises:
            EntryNotFoundError: If the type is not registered.
            ResolverNotFoundError: If the type was only extended.
            InvalidInstanceError: If the resolver or an extender returned a foreign type.
            CircularDependencyError: If the type is already being resolved.

        Example:
            >>> container.singleton(Clock, lambda c: SystemClock())
            >>> container.get(Clock) is container.get(Clock)
            True
        """
        with self._lock:
            entry = self._entries.get(dependency_type)
            if entry.is_cached():
                return entry.get_instance(self)

            with self._guard.resolving(dependency_type):
                if self._observer is not None:
                    self._observer.on_resolving(dependency_type, entry.lifetime)

                instance = entry.get_instance(self)

                if self._observer is not None:
                    self._observer.on_resolved(dependency_type, entry.lifetime, instance, entry.is_cached())

            return instance

    def set(
        self,
        dependency_type: Type[T],
        resolver: Optional[Callable[[IContainer], T]] = None,
        lifetime: Lifetime = Lifetime.TRANSIENT,
    ) -> None:
        """Register a resolver for the type.

        Args:
            dependency_type: The type to register.
            resolver: Factory receiving the container. Defaults to auto-wiring the type itself.
            lifetime: How long resolved instances are kept.

        Raises:
            DuplicateEntryError: If the type already has a resolver.
        """
        if resolver is None:

            def resolver(c: IContainer) -> T:
                return c.inject(dependency_type)

        with self._lock:
            entry = Entry(dependency_type=dependency_type)
            entry.set_resolver(resolver, lifetime)
            self._entries.set(dependency_type, entry)

    def bind(self, dependency_type: Type[T], resolver: Optional[Callable[[IContainer], T]] = None) -> None:
        """Register a transient: a new instance on every resolution."""
        self.set(dependency_type, resolver, Lifetime.TRANSIENT)

    def scoped(self, dependency_type: Type[T], resolver: Optional[Callable[[IContainer], T]] = None) -> None:
        """Register a scoped type: cached until ``clear_scoped`` is called."""
        self.set(dependency_type, resolver, Lifetime.SCOPED)

    def singleton(self, dependency_type: Type[T], resolver: Optional[Callable[[IContainer], T]] = None) -> None:
        """Register a singleton: cached for the life of the container."""
        self.set(dependency_type, resolver, Lifetime.SINGLETON)

    def instance(self, dependency_type: Type[T], instance: T) -> None:
        """Register an existing instance as a singleton.

        Raises:
            InvalidInstanceError: If ``instance`` is not an instance of ``dependency_type``.
            DuplicateEntryError: If the type already has a resolver.
        """
        if not is_instance_of(instance, dependency_type):
            raise InvalidInstanceError(dependency_type, instance)
        self.set(dependency_type, lambda c: instance, Lifetime.SINGLETON)

    def register_singletons(self, dependencies: Dict[Type, Callable[[IContainer], Any]]) -> None:
        """Register multiple singleton dependencies at once.

        Args:
            dependencies: Dictionary mapping dependency types to builder functions.
                         Each builder receives the container and returns an instance.

        Example:
            >>> container.register_singletons({
            ...     DatabaseConfig: lambda c: DatabaseConfig.from_env(),
            ...     DatabaseConnection: lambda c: DatabaseConnection(c.get(DatabaseConfig)),
            ... })
        """
        for dependency_type, builder in dependencies.items():
            self.singleton(dependency_type, builder)

    def register_transients(self, dependencies: Dict[Type, Callable[[IContainer], Any]]) -> None:
        """Register multiple transient dependencies at once."""
        for dependency_type, builder in dependencies.items():
            self.bind(dependency_type, builder)

    def register_scoped(self, dependencies: Dict[Type, Callable[[IContainer], Any]]) -> None:
        """Register multiple scoped dependencies at once."""
        for dependency_type, builder in dependencies.items():
            self.scoped(dependency_type, builder)

    def extend(self, dependency_type: Type[T], extender: Callable[[T, IContainer], T]) -> "Container":
        """Attach an extender to the type's entry.

        The type does not need to be registered yet: a resolver-less entry is
        created and hands its extenders over once a resolver is registered.

        Returns:
            The container, for chaining.

        Raises:
            InvalidInstanceError: If the entry is cached and the extender returns a foreign type.
        """
        with self._lock:
            entry = self._entries.find(dependency_type)
            if entry is None:
                entry = self._entries.set(dependency_type, Entry(dependency_type=dependency_type))
            entry.extend(extender, self)
        return self

    def when_resolving(self, consumer_type: Type) -> ContextBuilder:
        """Bind overrides applied only while ``consumer_type`` is constructed.

        Example:
            >>> container.when_resolving(ReportService).provide(Clock, FrozenClock())
        """
        return self._injector.contexts.bind(consumer_type)

    def make(self, dependency_type: Type[T], /, *args: Any, **kwargs: Any) -> T:
        """Resolve a registered type, or construct it through the injector.

        Explicit arguments always bypass the entry and its cache.
        """
        if not args and not kwargs and self.has(dependency_type):
            return self.get(dependency_type)
        return self.inject(dependency_type, *args, **kwargs)

    def inject(self, dependency_type: Type[T], /, *args: Any, **kwargs: Any) -> T:
        """Construct a class through the injector, ignoring any registration for it.

        Raises:
            InjectionError: If the arguments cannot be assembled.
            CircularDependencyError: If the class is already being constructed.
        """
        with self._lock:
            if self._observer is not None:
                self._observer.on_injecting(dependency_type)

            instance = self._injector.create(self, dependency_type, args, kwargs)

            if self._observer is not None:
                self._observer.on_injected(dependency_type, instance)
            return instance

    def call(self, function: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
        """Invoke a callable with auto-wired arguments. Entries' caches are only read through ``get``."""
        with self._lock:
            return self._injector.invoke(self, function, args, kwargs)

    def has(self, dependency_type: Type) -> bool:
        return self._entries.has(dependency_type)

    def get_entry(self, dependency_type: Type) -> Entry:
        """Return the entry registered for the type.

        Raises:
            EntryNotFoundError: If the type is not registered.
        """
        return self._entries.get(dependency_type)

    def unset(self, dependency_type: Type) -> bool:
        """Remove the type's entry. Returns whether an entry existed."""
        with self._lock:
            return self._entries.remove(dependency_type)

    def pull(self, dependency_type: Type[T]) -> T:
        """Resolve the type, then remove its entry."""
        with self._lock:
            instance = self.get(dependency_type)
            self.unset(dependency_type)
            return instance

    def clear_scoped(self) -> int:
        """Drop every cached Scoped instance. Returns how many were dropped."""
        with self._lock:
            return self._entries.clear_scoped()

    def create_scope(self) -> "Container":
        """Create a child container with its own Scoped instances.

        The child shares this container's Singleton entries (and their cached
        instances), its observer and its lock. Scoped and transient entries and
        the contextual overrides are copied, so registrations made in the child
        never reach this container.

        Returns:
            New container inheriting this container's registrations.

        Example:
            >>> scope = container.create_scope()
            >>> scope.get(RequestContext) is scope.get(RequestContext)
            True
            >>> scope.get(RequestContext) is container.get(RequestContext)
            False
        """
        with self._lock:
            scope = Container(
                options=self._options,
                observer=self._observer,
                reflector=self._injector.reflector,
                entries=self._entries.scope_copy(),
                contexts=self._injector.contexts.copy(),
            )
        scope._lock = self._lock
        return scope

    def clear(self) -> None:
        """Clear all registrations, contextual overrides and cached instances.

        Useful for testing or resetting the container state.
        """
        with self._lock:
            self._entries.clear()
            self._injector.contexts.clear()
            self._guard.clear()
        logger.debug("Container cleared")

    def get_registry_copy(self) -> EntryStore:
        """Copy the registered entries, without cached instances."""
        return self._entries.copy()

    def get_context_copy(self) -> ContextRegistry:
        """Copy the contextual overrides."""
        return self._injector.contexts.copy()
