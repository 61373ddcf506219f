"""
Testing utilities module.

Provides helpers and utilities for testing applications using entrywire.
"""

from .utilities import MockScope, RecordingObserver, TestContainer, create_mock_container

__all__ = [
    "TestContainer",
    "create_mock_container",
    "MockScope",
    "RecordingObserver",
]
