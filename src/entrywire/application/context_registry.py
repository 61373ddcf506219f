from typing import Any, Dict, Optional, Type, TypeVar, Union

from entrywire.domain import ContextBinding

T = TypeVar("T")


class ContextBuilder:
    """Fluent builder for the overrides of one consumer.

    Example:
        >>> container.when_resolving(ReportService) \\
        ...     .provide(Clock, FrozenClock()) \\
        ...     .pass_argument("title", "Monthly")
    """

    def __init__(self, binding: ContextBinding) -> None:
        self._binding = binding

    @property
    def binding(self) -> ContextBinding:
        return self._binding

    def provide(self, dependency_type: Type[T], instance: T) -> "ContextBuilder":
        """Use ``instance`` for the consumer's parameter declared as ``dependency_type``."""
        self._binding.provided[dependency_type] = instance
        return self

    def pass_argument(self, key: Union[int, str], value: Any) -> "ContextBuilder":
        """Pass ``value`` to the parameter at position ``key`` (int) or named ``key`` (str)."""
        if isinstance(key, bool) or not isinstance(key, (int, str)):
            raise TypeError(f"Argument key must be a position or a name, got: {key!r}")
        if isinstance(key, int):
            if key < 0:
                raise ValueError(f"Argument position must not be negative, got: {key}")
            self._binding.args[key] = value
        else:
            self._binding.kwargs[key] = value
        return self

    def pass_arguments(self, *args: Any, **kwargs: Any) -> "ContextBuilder":
        """Pass positional arguments (from position 0) and keyword arguments at once."""
        for position, value in enumerate(args):
            self._binding.args[position] = value
        self._binding.kwargs.update(kwargs)
        return self


class ContextRegistry:
    """Per-consumer override table.

    Bindings only apply while their consumer itself is constructed, never to
    the consumer's nested dependencies.
    """

    def __init__(self) -> None:
        self._bindings: Dict[Type, ContextBinding] = {}

    def __contains__(self, consumer_type: object) -> bool:
        return consumer_type in self._bindings

    def bind(self, consumer_type: Type) -> ContextBuilder:
        """Return a builder accumulating overrides for ``consumer_type``."""
        binding = self._bindings.get(consumer_type)
        if binding is None:
            binding = self._bindings[consumer_type] = ContextBinding(consumer_type=consumer_type)
        return ContextBuilder(binding)

    def get(self, consumer_type: Type) -> Optional[ContextBinding]:
        return self._bindings.get(consumer_type)

    def copy(self) -> "ContextRegistry":
        registry = ContextRegistry()
        for consumer_type, binding in self._bindings.items():
            registry._bindings[consumer_type] = ContextBinding(
                consumer_type=consumer_type,
                provided=dict(binding.provided),
                args=dict(binding.args),
                kwargs=dict(binding.kwargs),
            )
        return registry

    def clear(self) -> None:
        self._bindings.clear()
