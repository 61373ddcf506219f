import logging
from typing import Dict, Iterator, List, Optional, Set, Type

from entrywire.domain import DuplicateEntryError, Entry, EntryNotFoundError, Lifetime

logger = logging.getLogger(__name__)


class EntryStore:
    """Mapping from dependency type to its entry.

    Owns entry uniqueness and the bookkeeping of scoped entries used for bulk
    clearing.

    Attributes:
        _entries: Entries keyed by dependency type.
        _scoped_types: Types whose entries have the Scoped lifetime.
    """

    def __init__(self) -> None:
        self._entries: Dict[Type, Entry] = {}
        self._scoped_types: Set[Type] = set()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, dependency_type: object) -> bool:
        return dependency_type in self._entries

    def __iter__(self) -> Iterator[Type]:
        return iter(list(self._entries))

    def has(self, dependency_type: Type) -> bool:
        return dependency_type in self._entries

    def ids(self) -> List[Type]:
        return list(self._entries)

    def get(self, dependency_type: Type) -> Entry:
        """Return the entry for the type.

        Raises:
            EntryNotFoundError: If no entry exists.
        """
        entry = self._entries.get(dependency_type)
        if entry is None:
            raise EntryNotFoundError(dependency_type)
        return entry

    def find(self, dependency_type: Type) -> Optional[Entry]:
        return self._entries.get(dependency_type)

    def set(self, dependency_type: Type, entry: Entry) -> Entry:
        """Store an entry.

        An existing entry without a resolver (created by ``extend``) is
        replaced, and its extenders are placed ahead of the new entry's own.

        Args:
            dependency_type: Key for the entry.
            entry: The entry to store.

        Returns:
            The stored entry.

        Raises:
            DuplicateEntryError: If a resolvable entry already exists for the type.
        """
        existing = self._entries.get(dependency_type)
        if existing is not None:
            if existing.is_resolvable():
                raise DuplicateEntryError(dependency_type)
            entry.extenders[:0] = existing.extenders

        self._entries[dependency_type] = entry
        if entry.lifetime == Lifetime.SCOPED:
            self._scoped_types.add(dependency_type)
        else:
            self._scoped_types.discard(dependency_type)

        logger.debug("Registered %s as %s", dependency_type.__name__, entry.lifetime)
        return entry

    def remove(self, dependency_type: Type) -> bool:
        """Remove the entry and its scoped bookkeeping. Returns whether an entry existed."""
        self._scoped_types.discard(dependency_type)
        if self._entries.pop(dependency_type, None) is None:
            return False
        logger.debug("Removed entry for %s", dependency_type.__name__)
        return True

    def clear_scoped(self) -> int:
        """Unset the cached instance of every scoped entry.

        Singleton and transient entries are not touched. Scoped entries stay
        registered as scoped, so the next scope can be cleared the same way.

        Returns:
            Number of instances that were actually cached and cleared.
        """
        count = 0
        for dependency_type in self._scoped_types:
            if self._entries[dependency_type].unset_instance():
                count += 1
        logger.debug("Cleared %d scoped instance(s)", count)
        return count

    def copy(self) -> "EntryStore":
        """Copy every entry without its cached instance."""
        store = EntryStore()
        for dependency_type, entry in self._entries.items():
            store._entries[dependency_type] = entry.fresh_copy()
        store._scoped_types = set(self._scoped_types)
        return store

    def scope_copy(self) -> "EntryStore":
        """Store for a child scope.

        Singleton entries are shared with this store, so a singleton resolved in
        the scope is cached for both. Every other entry is copied without its
        cached instance.
        """
        store = EntryStore()
        for dependency_type, entry in self._entries.items():
            if entry.lifetime == Lifetime.SINGLETON:
                store._entries[dependency_type] = entry
            else:
                store._entries[dependency_type] = entry.fresh_copy()
        store._scoped_types = set(self._scoped_types)
        return store

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()
        self._scoped_types.clear()
