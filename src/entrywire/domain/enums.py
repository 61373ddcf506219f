from enum import Enum


class Lifetime(str, Enum):
    """Defines the lifetime of a dependency instance.

    Attributes:
        TRANSIENT: New instance created on each resolution, never cached.
        SCOPED: Cached until the container's scoped instances are cleared (e.g., per HTTP request).
        SINGLETON: Single instance cached for the life of the container.
    """

    TRANSIENT = "transient"
    SCOPED = "scoped"
    SINGLETON = "singleton"

    def __str__(self) -> str:
        return self.value

    @property
    def is_cacheable(self) -> bool:
        """Whether instances with this lifetime are kept after resolution."""
        return self is not Lifetime.TRANSIENT


class TypeCategory(str, Enum):
    """Classification of a parameter's declared type.

    Only ``CLASS`` parameters are auto-injectable. Every other category must be
    supplied explicitly or fall back to the parameter's default value.
    """

    CLASS = "class"
    BUILTIN = "builtin"
    UNION = "union"
    UNTYPED = "untyped"
    UNRESOLVED = "unresolved"
    UNSUPPORTED = "unsupported"

    def __str__(self) -> str:
        return self.value

    @property
    def description(self) -> str:
        """Human readable label used in injection error messages."""
        return _CATEGORY_DESCRIPTIONS[self]


_CATEGORY_DESCRIPTIONS = {
    TypeCategory.CLASS: "Class types",
    TypeCategory.BUILTIN: "Built-in types",
    TypeCategory.UNION: "Union types",
    TypeCategory.UNTYPED: "Untyped parameters",
    TypeCategory.UNRESOLVED: "Unresolvable pseudo-types",
    TypeCategory.UNSUPPORTED: "Unsupported annotations",
}


class ParamKind(str, Enum):
    """How a parameter accepts its argument, mirroring ``inspect.Parameter`` kinds."""

    POSITIONAL_ONLY = "positional_only"
    POSITIONAL_OR_KEYWORD = "positional_or_keyword"
    VAR_POSITIONAL = "var_positional"
    KEYWORD_ONLY = "keyword_only"
    VAR_KEYWORD = "var_keyword"

    def __str__(self) -> str:
        return self.value
