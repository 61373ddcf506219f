import logging
from typing import Any, Optional, Type

from entrywire.domain import IObserver, Lifetime


class LoggingObserver(IObserver):
    """Observer that writes resolution and injection notifications to a logger.

    Attributes:
        _logger: Target logger.
        _level: Level used for every record.

    Example:
        >>> container = Container(observer=LoggingObserver())
        >>> container.singleton(Clock, lambda c: SystemClock())
        >>> container.get(Clock)  # logs "Resolving Clock (singleton)" and "Resolved Clock ..."
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.DEBUG) -> None:
        self._logger = logger or logging.getLogger("entrywire")
        self._level = level

    def on_resolving(self, dependency_type: Type, lifetime: Lifetime) -> None:
        self._logger.log(self._level, "Resolving %s (%s)", dependency_type.__name__, lifetime)

    def on_resolved(self, dependency_type: Type, lifetime: Lifetime, instance: Any, was_cached: bool) -> None:
        self._logger.log(
            self._level,
            "Resolved %s (%s) as %s, cached=%s",
            dependency_type.__name__,
            lifetime,
            type(instance).__name__,
            was_cached,
        )

    def on_injecting(self, dependency_type: Type) -> None:
        self._logger.log(self._level, "Injecting %s", dependency_type.__name__)

    def on_injected(self, dependency_type: Type, instance: Any) -> None:
        self._logger.log(self._level, "Injected %s", dependency_type.__name__)
