from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field

from entrywire.domain.enums import Lifetime, ParamKind, TypeCategory
from entrywire.domain.exceptions import InvalidInstanceError, ResolverNotFoundError

if TYPE_CHECKING:
    from entrywire.domain.interfaces import IContainer


def is_instance_of(instance: Any, dependency_type: Type) -> bool:
    """Check ``instance`` against ``dependency_type``.

    Protocols that are not ``@runtime_checkable`` cannot be checked with
    ``isinstance`` and are accepted as-is.
    """
    if getattr(dependency_type, "_is_protocol", False) and not getattr(dependency_type, "_is_runtime_protocol", False):
        return True
    return isinstance(instance, dependency_type)


class Entry(BaseModel):
    """Registration record for one dependency type.

    Holds the resolver, its lifetime, the cached instance (for cacheable
    lifetimes) and the ordered chain of extenders applied on resolution.

    Attributes:
        dependency_type: The type the entry is registered under.
        lifetime: How long resolved instances are kept.
        resolver: Factory receiving the container. ``None`` for entries created only by ``extend``.
        extenders: Decorators applied in registration order to every resolved instance.
        cached_instance: Last resolved instance for Singleton or Scoped lifetimes.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    dependency_type: Type = Field(..., description="The dependency type the entry is registered under.")
    lifetime: Lifetime = Field(default=Lifetime.TRANSIENT, description="The lifetime of resolved instances.")
    resolver: Optional[Callable[["IContainer"], Any]] = Field(
        default=None,
        description="The builder function creating an instance from the container.",
    )
    extenders: List[Callable[[Any, "IContainer"], Any]] = Field(
        default_factory=list,
        description="Extenders applied to every resolved instance, in order.",
    )
    cached_instance: Optional[Any] = Field(
        default=None,
        description="Cached instance for Singleton or Scoped lifetimes.",
    )

    def set_resolver(self, resolver: Callable[["IContainer"], Any], lifetime: Lifetime) -> None:
        """Attach or overwrite the resolver and lifetime.

        The cached instance, if any, is left untouched.
        """
        self.resolver = resolver
        self.lifetime = lifetime

    def get_instance(self, container: "IContainer") -> Any:
        """Return the cached instance or resolve, extend and (if cacheable) cache a new one.

        Args:
            container: Container handed to the resolver and extenders.

        Raises:
            ResolverNotFoundError: If the entry has no resolver.
            InvalidInstanceError: If the resolver or an extender returns a foreign type.
        """
        if self.is_cached():
            return self.cached_instance

        if self.resolver is None:
            raise ResolverNotFoundError(self.dependency_type)

        instance = self._validate(self.resolver(container))
        for extender in self.extenders:
            instance = self._validate(extender(instance, container))

        if self.lifetime.is_cacheable:
            self.cached_instance = instance
        return instance

    def extend(self, extender: Callable[[Any, "IContainer"], Any], container: "IContainer") -> None:
        """Append an extender.

        An already cached instance is passed through the new extender only, so
        earlier extensions are preserved without a full re-resolution. An
        extender rejected by that instance is not kept.
        """
        if self.is_cached():
            self.cached_instance = self._validate(extender(self.cached_instance, container))
        self.extenders.append(extender)

    def unset_instance(self) -> bool:
        """Drop the cached instance. Returns whether one was present."""
        if self.cached_instance is None:
            return False
        self.cached_instance = None
        return True

    def is_resolvable(self) -> bool:
        return self.resolver is not None

    def is_extended(self) -> bool:
        return len(self.extenders) > 0

    def is_cached(self) -> bool:
        return self.cached_instance is not None and self.lifetime.is_cacheable

    def fresh_copy(self) -> "Entry":
        """Copy resolver, lifetime and extenders without the cached instance."""
        return Entry(
            dependency_type=self.dependency_type,
            lifetime=self.lifetime,
            resolver=self.resolver,
            extenders=list(self.extenders),
        )

    def _validate(self, instance: Any) -> Any:
        if not is_instance_of(instance, self.dependency_type):
            raise InvalidInstanceError(self.dependency_type, instance)
        return instance


class ParamSpec(BaseModel):
    """Reflected description of one constructor or callable parameter.

    Attributes:
        name: Parameter name.
        position: Zero-based position in the parameter list (receiver excluded).
        kind: How the parameter accepts arguments.
        category: Classification of the declared type.
        declared_type: Concrete class to inject when ``category`` is ``CLASS``.
        annotation: The evaluated annotation, kept for diagnostics.
        nullable: Whether the annotation was ``Optional[...]``.
        has_default: Whether the parameter declares a default value.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    position: int
    kind: ParamKind
    category: TypeCategory
    declared_type: Optional[Type] = None
    annotation: Any = None
    nullable: bool = False
    has_default: bool = False

    @property
    def is_variadic(self) -> bool:
        return self.kind in (ParamKind.VAR_POSITIONAL, ParamKind.VAR_KEYWORD)

    @property
    def accepts_position(self) -> bool:
        return self.kind in (ParamKind.POSITIONAL_ONLY, ParamKind.POSITIONAL_OR_KEYWORD)

    @property
    def accepts_name(self) -> bool:
        return self.kind in (ParamKind.POSITIONAL_OR_KEYWORD, ParamKind.KEYWORD_ONLY)

    @property
    def is_injectable(self) -> bool:
        return self.category == TypeCategory.CLASS and self.declared_type is not None


class ContextBinding(BaseModel):
    """Overrides applied only while ``consumer_type`` itself is being constructed.

    Attributes:
        consumer_type: The class the overrides belong to.
        provided: Instances keyed by the parameter type they satisfy.
        args: Argument values keyed by parameter position.
        kwargs: Argument values keyed by parameter name.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    consumer_type: Type
    provided: Dict[Type, Any] = Field(default_factory=dict)
    args: Dict[int, Any] = Field(default_factory=dict)
    kwargs: Dict[str, Any] = Field(default_factory=dict)


class ContainerOptions(BaseModel):
    """Container configuration.

    Attributes:
        thread_safe: Serialize every container operation behind one re-entrant lock.
        autowire: Construct unregistered concrete classes while filling parameters.
    """

    model_config = ConfigDict(frozen=True)

    thread_safe: bool = Field(default=False, description="Guard container operations with a re-entrant lock.")
    autowire: bool = Field(default=True, description="Autowire unregistered concrete classes.")
