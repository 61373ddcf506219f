"""
Observers module.

Provides observer implementations notified around resolution and injection.
"""

from .logging_observer import LoggingObserver

__all__ = [
    "LoggingObserver",
]
