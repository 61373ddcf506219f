import inspect
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from entrywire.application.context_registry import ContextRegistry
from entrywire.application.reflector import Reflector
from entrywire.application.resolution_guard import ResolutionGuard
from entrywire.domain import (
    ContextBinding,
    IContainer,
    InjectionError,
    IReflector,
    ParamKind,
    ParamSpec,
    TypeCategory,
)

T = TypeVar("T")

_OMITTED = object()


def _describe_annotation(annotation: Any) -> str:
    if inspect.isclass(annotation):
        return annotation.__name__
    return str(annotation).replace("typing.", "")


class Injector:
    """Autowires class constructors and callables.

    Explicit arguments are merged with the consumer's contextual overrides,
    matched against the reflected parameters, and every remaining parameter is
    filled in declaration order from (1) a contextually provided instance,
    (2) a registered entry, (3) recursive construction of a concrete class.

    Attributes:
        _reflector: Parameter discovery strategy.
        _contexts: Per-consumer overrides.
        _guard: Circular dependency guard shared with the container.
        _autowire: Whether unregistered concrete classes may be constructed.
    """

    def __init__(
        self,
        reflector: Optional[IReflector] = None,
        contexts: Optional[ContextRegistry] = None,
        guard: Optional[ResolutionGuard] = None,
        autowire: bool = True,
    ) -> None:
        self._reflector: IReflector = reflector or Reflector()
        self._contexts = contexts if contexts is not None else ContextRegistry()
        self._guard = guard or ResolutionGuard()
        self._autowire = autowire

    @property
    def reflector(self) -> IReflector:
        return self._reflector

    @property
    def contexts(self) -> ContextRegistry:
        return self._contexts

    @property
    def guard(self) -> ResolutionGuard:
        return self._guard

    def create(
        self,
        container: IContainer,
        cls: Type[T],
        args: Sequence[Any] = (),
        kwargs: Optional[Mapping[str, Any]] = None,
    ) -> T:
        """Construct ``cls``, autowiring every parameter not given explicitly.

        Explicit arguments win over the contextual arguments bound with
        ``when_resolving(cls)`` when both use the same position or name.

        Args:
            container: Container used to resolve dependencies.
            cls: The class to construct.
            args: Explicit positional arguments.
            kwargs: Explicit keyword arguments.

        Returns:
            The new instance.

        Raises:
            InjectionError: If the arguments cannot be matched or a parameter cannot be filled.
            CircularDependencyError: If ``cls`` is already being constructed.
        """
        binding = self._contexts.get(cls)

        with self._guard.injecting(cls):
            params = self._reflector.parameters_of(cls)
            if params is None:
                positional, named = self._merge_arguments(cls, binding, args, kwargs or {})
                self._contextual_injections(cls, binding, [])
                injected: List[Tuple[ParamSpec, Any]] = []
            else:
                positional, named = self._bind_context_arguments(cls, binding, params, args, kwargs or {})
                remaining = self._filter_out_arguments(cls, params, positional, named)
                injections = self._contextual_injections(cls, binding, params)
                injected = self._resolve_arguments(container, cls, remaining, injections)

        return self._construct(cls, positional, named, injected)

    def invoke(
        self,
        container: IContainer,
        function: Callable[..., T],
        args: Sequence[Any] = (),
        kwargs: Optional[Mapping[str, Any]] = None,
    ) -> T:
        """Call ``function``, autowiring every parameter not given explicitly.

        Args:
            container: Container used to resolve dependencies.
            function: Any callable.
            args: Explicit positional arguments.
            kwargs: Explicit keyword arguments.

        Returns:
            Whatever ``function`` returns.

        Raises:
            InjectionError: If the arguments cannot be matched or a parameter cannot be filled.
        """
        positional = list(args)
        named = dict(kwargs or {})
        params = self._reflector.parameters_of(function)
        injected: List[Tuple[ParamSpec, Any]] = []
        if params is not None:
            remaining = self._filter_out_arguments(function, params, positional, named)
            injected = self._resolve_arguments(container, function, remaining, {})
        return self._construct(function, positional, named, injected)

    def _merge_arguments(
        self,
        target: Type,
        binding: Optional[ContextBinding],
        args: Sequence[Any],
        kwargs: Mapping[str, Any],
    ) -> Tuple[List[Any], Dict[str, Any]]:
        if binding is None:
            return list(args), dict(kwargs)

        positions = dict(binding.args)
        positions.update(enumerate(args))
        for position in range(len(positions)):
            if position not in positions:
                raise InjectionError(
                    target,
                    f"Argument with position: {position} is missing. Positional arguments must be contiguous.",
                )

        named = dict(binding.kwargs)
        named.update(kwargs)
        return [positions[position] for position in range(len(positions))], named

    def _bind_context_arguments(
        self,
        target: Type,
        binding: Optional[ContextBinding],
        params: List[ParamSpec],
        args: Sequence[Any],
        kwargs: Mapping[str, Any],
    ) -> Tuple[List[Any], Dict[str, Any]]:
        """Merge explicit and contextual arguments against the reflected parameters.

        A contextual position right after the arguments collected so far is
        passed by position. Any later position is passed by the name of the
        parameter declared there, so the parameters before it stay autowirable.
        """
        positional = list(args)
        if binding is None:
            return positional, dict(kwargs)

        named = dict(binding.kwargs)
        named.update(kwargs)
        positional_params = [param for param in params if param.accepts_position]

        for position, value in sorted(binding.args.items()):
            if position < len(args):
                continue
            param = positional_params[position] if position < len(positional_params) else None
            if param is not None and param.name in kwargs:
                continue
            if position == len(positional):
                positional.append(value)
            elif param is None:
                raise InjectionError(target, f"Argument with position: {position} does not exist.")
            elif param.kind == ParamKind.POSITIONAL_ONLY:
                raise InjectionError(
                    target,
                    f"Positional-only argument: {param.name} cannot be passed after an omitted argument.",
                )
            elif param.name in binding.kwargs:
                raise InjectionError(target, f"Argument: {param.name} is passed both by position and by name.")
            else:
                named[param.name] = value

        return positional, named

    def _filter_out_arguments(
        self,
        target: Callable[..., Any],
        params: List[ParamSpec],
        positional: List[Any],
        named: Dict[str, Any],
    ) -> List[ParamSpec]:
        """Match explicit arguments to parameters and return the unfilled ones."""
        positional_params = [param for param in params if param.accepts_position]
        has_var_positional = any(param.kind == ParamKind.VAR_POSITIONAL for param in params)
        has_var_keyword = any(param.kind == ParamKind.VAR_KEYWORD for param in params)
        by_name = {param.name: param for param in params}

        filled = set()
        for position in range(len(positional)):
            if position < len(positional_params):
                filled.add(positional_params[position].name)
            elif not has_var_positional:
                raise InjectionError(target, f"Argument with position: {position} does not exist.")

        for name in named:
            param = by_name.get(name)
            if param is not None and param.accepts_name:
                if name in filled:
                    raise InjectionError(target, f"Argument: {name} is passed both by position and by name.")
                filled.add(name)
            elif not has_var_keyword:
                raise InjectionError(target, f"Argument with name: {name} does not exist.")

        return [param for param in params if param.name not in filled and not param.is_variadic]

    def _contextual_injections(
        self,
        target: Type,
        binding: Optional[ContextBinding],
        params: List[ParamSpec],
    ) -> Dict[Type, Any]:
        """Return the instances provided for ``target``, failing on unused ones."""
        if binding is None or not binding.provided:
            return {}

        declared = {param.declared_type for param in params if param.is_injectable}
        unused = [dependency_type for dependency_type in binding.provided if dependency_type not in declared]
        if unused:
            names = ", ".join(dependency_type.__name__ for dependency_type in unused)
            raise InjectionError(target, f"Provided injections: {names} do not exist for class: {target.__name__}.")

        return binding.provided

    def _resolve_arguments(
        self,
        container: IContainer,
        target: Callable[..., Any],
        params: List[ParamSpec],
        injections: Mapping[Type, Any],
    ) -> List[Tuple[ParamSpec, Any]]:
        resolved = []
        for param in params:
            value = self._resolve_argument(container, target, param, injections)
            if value is not _OMITTED:
                resolved.append((param, value))
        return resolved

    def _resolve_argument(
        self,
        container: IContainer,
        target: Callable[..., Any],
        param: ParamSpec,
        injections: Mapping[Type, Any],
    ) -> Any:
        if not param.is_injectable:
            if param.has_default:
                return _OMITTED
            if param.category == TypeCategory.UNTYPED:
                raise InjectionError(target, f"Argument: {param.name} must be a class or have a default value.")
            raise InjectionError(
                target,
                f"Invalid type on argument: {_describe_annotation(param.annotation)} {param.name}. "
                f"{param.category.description} are not allowed.",
            )

        dependency_type = param.declared_type

        if dependency_type in injections:
            return injections[dependency_type]

        if container.has(dependency_type):
            return container.get(dependency_type)

        if param.has_default:
            return _OMITTED

        if self._autowire and self._is_instantiable(dependency_type):
            return container.make(dependency_type)

        if param.nullable:
            return None

        raise InjectionError(
            target,
            f"Argument: {param.name} of type {dependency_type.__name__} cannot be resolved. "
            "It is not registered and cannot be instantiated.",
        )

    @staticmethod
    def _is_instantiable(dependency_type: Type) -> bool:
        if getattr(dependency_type, "_is_protocol", False):
            return False
        return inspect.isclass(dependency_type) and not inspect.isabstract(dependency_type)

    @staticmethod
    def _construct(
        target: Callable[..., T],
        positional: List[Any],
        named: Dict[str, Any],
        injected: List[Tuple[ParamSpec, Any]],
    ) -> T:
        call_args = list(positional)
        call_kwargs = dict(named)
        for param, value in injected:
            if param.kind == ParamKind.POSITIONAL_ONLY:
                if param.position != len(call_args):
                    raise InjectionError(
                        target,
                        f"Positional-only argument: {param.name} cannot be injected after an omitted argument.",
                    )
                call_args.append(value)
            else:
                call_kwargs[param.name] = value
        return target(*call_args, **call_kwargs)
