from typing import Any, List, Type


def _name_of(target: Any) -> str:
    return getattr(target, "__name__", None) or repr(target)


class DIException(Exception):
    """Base exception for DI-related errors."""


class EntryNotFoundError(DIException):
    """Raised when looking up a type that has no entry in the container.

    Attributes:
        dependency_type: The type that was looked up.
    """

    def __init__(self, dependency_type: Type) -> None:
        self.dependency_type = dependency_type
        super().__init__(f"{_name_of(dependency_type)} is not registered.")


class DuplicateEntryError(DIException):
    """Raised when registering a resolver for a type that already has one.

    Attributes:
        dependency_type: The type being registered twice.
    """

    def __init__(self, dependency_type: Type) -> None:
        self.dependency_type = dependency_type
        super().__init__(f"Cannot register class: {_name_of(dependency_type)}. Entry already exists.")


class ResolverNotFoundError(DIException):
    """Raised when resolving an entry that only carries extenders.

    This occurs when ``extend`` was called for a type that was never given a
    resolver through ``bind``, ``singleton``, ``scoped`` or ``instance``.

    Attributes:
        dependency_type: The type whose entry has no resolver.
    """

    def __init__(self, dependency_type: Type) -> None:
        self.dependency_type = dependency_type
        super().__init__(f"No resolver registered for {_name_of(dependency_type)}. It was only extended.")


class InvalidInstanceError(DIException):
    """Raised when a resolver or extender returns a value of the wrong type.

    Attributes:
        dependency_type: The type the entry is registered under.
        instance: The offending value.
    """

    def __init__(self, dependency_type: Type, instance: Any) -> None:
        self.dependency_type = dependency_type
        self.instance = instance
        super().__init__(
            f"Expected: instance of {_name_of(dependency_type)}. Got: {_name_of(type(instance))}."
        )


class InjectionError(DIException):
    """Raised when arguments for a class or callable cannot be assembled.

    This occurs when:
    - A parameter is untyped, union-typed or built-in-typed and has no default.
    - A contextual ``provide`` binding matches no constructor parameter.
    - An explicit argument key matches no parameter.
    - A required class-typed parameter is neither registered nor instantiable.

    Attributes:
        target: The class or callable being injected.
        reason: Description of the failure.
    """

    def __init__(self, target: Any, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"[{_name_of(target) if target is not None else 'Non-Class'}] {reason}")


class CircularDependencyError(DIException):
    """Raised when a circular dependency is detected.

    Attributes:
        dependency_chain: Types involved, in discovery order, ending with the repeated type.
    """

    def __init__(self, dependency_chain: List[Type]) -> None:
        self.dependency_chain = dependency_chain
        chain = " -> ".join(_name_of(cls) for cls in dependency_chain)
        super().__init__(f"Circular dependency detected: {chain}")
