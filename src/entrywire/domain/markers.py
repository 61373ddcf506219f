class Parent:
    """Pseudo-type annotation that stands for the declaring class's base class.

    ``typing.Self`` covers the declaring class itself. ``Parent`` resolves to the
    first entry of ``__bases__``; a class deriving directly from ``object`` has
    no parent to inject.

    Example:
        >>> class Base:
        ...     pass
        >>> class Child(Base):
        ...     def __init__(self, base: Parent):
        ...         self.base = base
        >>> container.inject(Child).base  # a Base instance
    """

    def __init__(self) -> None:
        raise TypeError("Parent is an annotation marker and cannot be instantiated.")
