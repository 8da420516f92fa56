"""Index-addressed object store.

Nodes and links live in arenas: a list of slots plus a freelist of vacated
indices. Keys are small integers that stay valid for as long as the object
is stored.
"""

from typing import Callable, Generic, Iterator, List, Optional, Tuple, TypeVar

T = TypeVar("T")


class Arena(Generic[T]):
    """Slot store handing out stable integer keys.

    Attributes:
        missing: Factory for the exception raised on a lookup of an empty key.
    """

    def __init__(self, missing: Callable[[int], Exception] = KeyError) -> None:
        self._slots: List[Optional[T]] = []
        self._free: List[int] = []
        self._len = 0
        self.missing = missing

    def vacant_key(self) -> int:
        """Return the key the next insert will use."""
        if self._free:
            return self._free[-1]
        return len(self._slots)

    def insert_with(self, factory: Callable[[int], T]) -> int:
        """Insert the value built by ``factory(key)`` and return its key.

        Args:
            factory: Callable receiving the key the value will be stored under.

        Returns:
            The key of the new slot.
        """
        key = self.vacant_key()
        value = factory(key)
        if self._free:
            self._free.pop()
            self._slots[key] = value
        else:
            self._slots.append(value)
        self._len += 1
        return key

    def get(self, key: int) -> T:
        """Return the value stored under key.

        Raises:
            The exception built by ``missing`` if the slot is empty.
        """
        if isinstance(key, int) and 0 <= key < len(self._slots):
            value = self._slots[key]
            if value is not None:
                return value
        raise self.missing(key)

    def remove(self, key: int) -> T:
        """Vacate a slot, making its key available for reuse."""
        value = self.get(key)
        self._slots[key] = None
        self._free.append(key)
        self._len -= 1
        return value

    def __contains__(self, key: object) -> bool:
        return (
            isinstance(key, int)
            and 0 <= key < len(self._slots)
            and self._slots[key] is not None
        )

    def items(self) -> Iterator[Tuple[int, T]]:
        """Iterate over (key, value) pairs in key order."""
        for key, value in enumerate(self._slots):
            if value is not None:
                yield key, value

    def keys(self) -> Iterator[int]:
        for key, _ in self.items():
            yield key

    def values(self) -> Iterator[T]:
        for _, value in self.items():
            yield value

    def __iter__(self) -> Iterator[T]:
        return self.values()

    def __len__(self) -> int:
        return self._len
