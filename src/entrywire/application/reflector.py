import functools
import inspect
import sys
import types
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Literal,
    Optional,
    Self,
    Tuple,
    Type,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from entrywire.domain import InjectionError, IReflector, ParamKind, ParamSpec, Parent, TypeCategory

_PARAM_KINDS = {
    inspect.Parameter.POSITIONAL_ONLY: ParamKind.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD: ParamKind.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.VAR_POSITIONAL: ParamKind.VAR_POSITIONAL,
    inspect.Parameter.KEYWORD_ONLY: ParamKind.KEYWORD_ONLY,
    inspect.Parameter.VAR_KEYWORD: ParamKind.VAR_KEYWORD,
}

_BUILTIN_TYPES = frozenset(
    {
        bool,
        bytearray,
        bytes,
        complex,
        dict,
        float,
        frozenset,
        int,
        list,
        object,
        set,
        str,
        tuple,
        type,
    }
)


class Reflector(IReflector):
    """Discovers parameters and their injectable types using type hints.

    Uses Python's inspect module to read signatures and ``get_type_hints`` to
    evaluate annotations, then classifies each declared type so the injector
    can decide whether a parameter may be autowired.
    """

    def parameters_of(self, target: Callable[..., Any]) -> Optional[List[ParamSpec]]:
        """Describe the parameters of a class constructor or callable.

        Args:
            target: A class or any callable.

        Returns:
            Parameters in declaration order, receiver excluded. ``None`` when the
            signature cannot be inspected (e.g. classes implemented in C).

        Raises:
            InjectionError: If the annotations cannot be evaluated.

        Example:
            >>> class UserService:
            ...     def __init__(self, repo: UserRepository, retries: int = 3):
            ...         ...
            >>> [p.category for p in Reflector().parameters_of(UserService)]
            [<TypeCategory.CLASS: 'class'>, <TypeCategory.BUILTIN: 'builtin'>]
        """
        try:
            signature = inspect.signature(target)
        except ValueError:
            if inspect.isclass(target):
                return None
            raise InjectionError(target, "Cannot inspect the signature.")
        except TypeError as e:
            raise InjectionError(target, f"Cannot inspect the signature: {e}") from e

        hints = self._type_hints(target, signature)
        declaring_class = self.declaring_class_of(target)

        return [
            self._describe(param, position, hints, declaring_class)
            for position, param in enumerate(signature.parameters.values())
        ]

    def declaring_class_of(self, target: Callable[..., Any]) -> Optional[Type]:
        """Class used to resolve ``Self`` and ``Parent`` annotations.

        For classes, the class that defines the constructor being reflected, so
        an inherited ``__init__`` keeps the meaning it has in its own class. A
        class with its own ``__signature__`` declares its parameters itself. The
        owner for bound methods and classmethods, otherwise ``None``.
        """
        if inspect.isclass(target):
            if "__signature__" in vars(target):
                return target
            source = self._annotation_source(target)
            name = getattr(source, "__name__", None)
            for klass in target.__mro__:
                member = vars(klass).get(name) if name else None
                if member is not None and getattr(member, "__func__", member) is source:
                    return klass
            return target
        owner = getattr(target, "__self__", None)
        if owner is None or isinstance(owner, types.ModuleType):
            return None
        return owner if inspect.isclass(owner) else type(owner)

    def resolve_self_parent(self, declaring_class: Optional[Type], annotation: Any) -> Optional[Type]:
        """Map ``Self`` to the declaring class and ``Parent`` to its base class.

        Returns ``None`` when there is no declaring class, or for ``Parent`` when
        the declaring class derives directly from ``object``.
        """
        if declaring_class is None:
            return None
        if annotation is Self:
            return declaring_class
        base = declaring_class.__bases__[0]
        return None if base is object else base

    def classify(self, annotation: Any, declaring_class: Optional[Type]) -> Tuple[TypeCategory, Optional[Type], bool]:
        """Classify an evaluated annotation.

        Returns:
            ``(category, declared_type, nullable)``. ``declared_type`` is only set
            for ``TypeCategory.CLASS``.
        """
        if annotation is inspect.Parameter.empty or annotation is Any:
            return TypeCategory.UNTYPED, None, False

        if annotation is Self or annotation is Parent:
            resolved = self.resolve_self_parent(declaring_class, annotation)
            if resolved is None:
                return TypeCategory.UNRESOLVED, None, False
            return TypeCategory.CLASS, resolved, False

        origin = get_origin(annotation)
        if origin is Union or origin is types.UnionType:
            members = [member for member in get_args(annotation) if member is not type(None)]
            if len(members) == 1:
                category, declared_type, _ = self.classify(members[0], declaring_class)
                return category, declared_type, True
            return TypeCategory.UNION, None, False

        if origin is Literal:
            return TypeCategory.BUILTIN, None, False

        if origin is not None:
            if origin in _BUILTIN_TYPES:
                return TypeCategory.BUILTIN, None, False
            return TypeCategory.UNSUPPORTED, None, False

        if inspect.isclass(annotation):
            if annotation in _BUILTIN_TYPES:
                return TypeCategory.BUILTIN, None, False
            return TypeCategory.CLASS, annotation, False

        return TypeCategory.UNSUPPORTED, None, False

    def _describe(
        self,
        param: inspect.Parameter,
        position: int,
        hints: Dict[str, Any],
        declaring_class: Optional[Type],
    ) -> ParamSpec:
        annotation = hints.get(param.name, inspect.Parameter.empty)
        category, declared_type, nullable = self.classify(annotation, declaring_class)
        return ParamSpec(
            name=param.name,
            position=position,
            kind=_PARAM_KINDS[param.kind],
            category=category,
            declared_type=declared_type,
            annotation=None if annotation is inspect.Parameter.empty else annotation,
            nullable=nullable,
            has_default=param.default is not inspect.Parameter.empty,
        )

    def _type_hints(self, target: Callable[..., Any], signature: inspect.Signature) -> Dict[str, Any]:
        """Evaluated annotations keyed by parameter name.

        Parameters the annotation source does not describe (pydantic models,
        classes with a custom ``__signature__``) fall back to the annotation
        carried by the signature itself.
        """
        hints = self._source_hints(target)
        missing = {
            name: param.annotation
            for name, param in signature.parameters.items()
            if name not in hints and param.annotation is not inspect.Parameter.empty
        }
        if missing:
            hints.update(self._evaluate(target, missing))
        return hints

    def _source_hints(self, target: Callable[..., Any]) -> Dict[str, Any]:
        source = self._annotation_source(target)
        if source is None:
            return {}
        try:
            return get_type_hints(source)
        except NameError as e:
            raise InjectionError(target, f"Cannot evaluate type hints: {e}") from e
        except TypeError:
            return {}

    @staticmethod
    def _evaluate(target: Callable[..., Any], annotations: Dict[str, Any]) -> Dict[str, Any]:
        """Evaluate string annotations against the module that defines ``target``."""
        module = sys.modules.get(getattr(target, "__module__", None) or "")
        globalns = dict(vars(module)) if module is not None else {}
        localns = dict(vars(target)) if inspect.isclass(target) else None
        try:
            return get_type_hints(types.SimpleNamespace(__annotations__=annotations), globalns, localns)
        except NameError as e:
            raise InjectionError(target, f"Cannot evaluate type hints: {e}") from e
        except TypeError:
            return {}

    @staticmethod
    def _annotation_source(target: Callable[..., Any]) -> Optional[Callable[..., Any]]:
        """Function whose annotations describe the parameters of ``target``."""
        if inspect.isclass(target):
            if inspect.isfunction(target.__init__):
                return target.__init__
            if inspect.isfunction(target.__new__):
                return target.__new__
            return None
        if isinstance(target, functools.partial):
            return Reflector._annotation_source(target.func)
        if inspect.isfunction(target) or inspect.ismethod(target):
            return target
        call = getattr(type(target), "__call__", None)
        return call if inspect.isfunction(call) else None
