"""
Ordered tables of dives and trips.

A table is a growable array kept in the order defined by its
comparison function. The tables do not sort themselves on every
mutation: callers insert at insertion_index() and call sort() after
editing sort keys.
"""

from functools import cmp_to_key
from typing import Callable, Generic, Iterator, List, TypeVar

from .constants import TABLE_GROW_STEP
from .ordering import comp_dives, comp_trips

T = TypeVar("T")


class OrderedTable(Generic[T]):
    """
    Sorted, growable collection of element references.

    Subclasses set `compare` to a three-way comparison function.
    Element lookup is by identity, never by value.
    """

    compare: Callable[[T, T], int] = None

    def __init__(self, items=None):
        self._items: List[T] = []
        self.allocated = 0
        for item in items or []:
            self.add_at(len(self._items), item)

    # ---------- sequence protocol ----------

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __getitem__(self, idx):
        return self._items[idx]

    def __setitem__(self, idx: int, item: T):
        self._items[idx] = item

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(nr={len(self._items)})"

    @property
    def nr(self) -> int:
        """Number of elements in the table."""
        return len(self._items)

    # ---------- table operations ----------

    def less(self, a: T, b: T) -> bool:
        return type(self).compare(a, b) < 0

    def grow(self) -> int:
        """
        Account for room for one more element.

        Storage is the underlying list, which resizes itself. `allocated`
        only records the capacity policy: it grows to (nr + 32) * 3 / 2
        when exhausted and is not read by any table operation. Running
        out of memory is fatal: MemoryError propagates.

        Returns:
            Allocated capacity after growing
        """
        nr = len(self._items)
        if nr >= self.allocated:
            self.allocated = (nr + TABLE_GROW_STEP) * 3 // 2
        return self.allocated

    def insertion_index(self, item: T) -> int:
        """Smallest index i with item < table[i], or nr if there is none."""
        # linear scan: also behaves sensibly on a table that is not sorted
        for i, other in enumerate(self._items):
            if self.less(item, other):
                return i
        return len(self._items)

    def add_at(self, idx: int, item: T):
        """Insert item at idx, shifting the tail to the right."""
        self.grow()
        self._items.insert(idx, item)

    def remove_at(self, idx: int) -> T:
        """Remove and return the element at idx, shifting the tail left."""
        return self._items.pop(idx)

    def index_of(self, item: T) -> int:
        """Index of item by identity, -1 if not present."""
        for i, other in enumerate(self._items):
            if other is item:
                return i
        return -1

    def insert(self, item: T) -> int:
        """Insert item at its sorted position. Returns the index used."""
        idx = self.insertion_index(item)
        self.add_at(idx, item)
        return idx

    def remove(self, item: T) -> bool:
        """Remove item if present. Returns True if it was found."""
        idx = self.index_of(item)
        if idx < 0:
            return False
        self.remove_at(idx)
        return True

    def sort(self):
        """Stable sort using the table's comparison function."""
        self._items.sort(key=cmp_to_key(type(self).compare))

    def clear(self):
        self._items.clear()

    def first(self):
        return self._items[0] if self._items else None

    def last(self):
        return self._items[-1] if self._items else None


class DiveTable(OrderedTable):
    """Dives ordered by (when, trip, id)."""

    compare = staticmethod(comp_dives)


class TripTable(OrderedTable):
    """Trips ordered by their first dive."""

    compare = staticmethod(comp_trips)
