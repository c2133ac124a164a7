"""
Seqmap: Maps That Remember Who Came First

A persistent map that walks its entries in the order keys were first
associated. Lookups and updates stay close to hash-map speed.

Three structures move together:
- the base store: key -> value, authoritative for membership
- the ordering index: sequence number -> key, defines iteration order
- the reverse index: key -> sequence number, finds a key's slot on removal

A key receives a sequence number the first time it is associated and keeps
it until it is removed. Numbers are never reused and survivors are never
renumbered. Updating a value leaves its position alone. Removing a key and
adding it back puts it at the end.

Every write returns a new map. The old one is untouched and stays usable.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, NamedTuple, Optional, Tuple, Union
import logging

from .hamt import HashTrie
from .ordering import OrderingIndex


logger = logging.getLogger(__name__)

_MISSING = object()


# =============================================================================
# ERRORS
# =============================================================================

class SeqMapError(Exception):
    """Base class for ordered map errors."""
    pass


class OddArgumentCount(SeqMapError, ValueError):
    """Raised when ordered_map() gets a key without a value."""

    def __init__(self, element: Any):
        super().__init__(f"ordered_map requires an even number of arguments, unmatched: {element!r}")
        self.element = element


class IndexOutOfRange(SeqMapError, IndexError):
    """Raised when nth() cannot resolve an index."""

    def __init__(self, index: int, reason: str = "out of range"):
        super().__init__(f"Index {index} {reason}")
        self.index = index


class UnsupportedMutation(SeqMapError, TypeError):
    """Raised when an in-place mutation is attempted on an immutable map."""

    def __init__(self, operation: str):
        super().__init__(f"OrderedMap is immutable: {operation}() is not supported, use assoc/dissoc")
        self.operation = operation


# =============================================================================
# ENTRY
# =============================================================================

class Entry(NamedTuple):
    """A key/value pair. Compares equal to a plain (key, value) tuple."""
    key: Any
    value: Any


def _unsupported(name: str) -> Callable[..., Any]:
    def method(self, *args: Any, **kwargs: Any) -> Any:
        raise UnsupportedMutation(name)
    method.__name__ = name
    method.__doc__ = f"Not supported. {name}() would mutate in place."
    return method


# =============================================================================
# ORDERED MAP
# =============================================================================

@dataclass(frozen=True, eq=False, repr=False, slots=True)
class OrderedMap(Mapping):
    """
    Persistent map iterated in first-association order.

    Build one from EMPTY, ordered_map(...) or OrderedMap.from_items(...);
    the constructor takes the raw structures and trusts them.

    Equality and hashing look at content only. Two maps with the same
    entries are equal whatever order they were built in, and metadata
    never takes part.
    """

    base: HashTrie
    ordering: OrderingIndex
    reverse: HashTrie
    next_seq: int = 0
    meta: Any = None
    _hash: Optional[int] = field(default=None, init=False)

    @classmethod
    def from_items(cls, items: Union[Mapping, Iterable[Tuple[Any, Any]]]) -> "OrderedMap":
        """Pour (key, value) pairs, or a mapping in its own iteration order, into EMPTY."""
        if isinstance(items, Mapping):
            items = items.items()
        result = EMPTY
        for key, value in items:
            result = result.assoc(key, value)
        logger.debug("Built ordered map with %d entries", len(result))
        return result

    # -------------------------------------------------------------------------
    # LOOKUP: delegated to the base store, no ordering cost
    # -------------------------------------------------------------------------

    def get(self, key: Any, default: Any = None) -> Any:
        return self.base.get(key, default)

    def __getitem__(self, key: Any) -> Any:
        value = self.base.get(key, _MISSING)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def __call__(self, key: Any, default: Any = None) -> Any:
        return self.base.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self.base

    def contains_key(self, key: Any) -> bool:
        return key in self.base

    def contains_value(self, value: Any) -> bool:
        return any(v == value for v in self.base.values())

    def entry(self, key: Any) -> Optional[Entry]:
        """The Entry for key, or None if key is absent."""
        value = self.base.get(key, _MISSING)
        if value is _MISSING:
            return None
        return Entry(key, value)

    def __len__(self) -> int:
        return len(self.base)

    def count(self) -> int:
        return len(self.base)

    # -------------------------------------------------------------------------
    # WRITES: each returns a new map
    # -------------------------------------------------------------------------

    def assoc(self, key: Any, value: Any) -> "OrderedMap":
        """
        Associate key with value.

        A key already present keeps its position; only the value changes.
        A new key is appended with the next sequence number.
        """
        if key in self.base:
            base = self.base.set(key, value)
            if base is self.base:
                return self
            return OrderedMap(base, self.ordering, self.reverse, self.next_seq, self.meta)

        seq = self.next_seq
        return OrderedMap(
            self.base.set(key, value),
            self.ordering.insert(seq, key),
            self.reverse.set(key, seq),
            seq + 1,
            self.meta,
        )

    def dissoc(self, key: Any) -> "OrderedMap":
        """
        Remove key. Returns self when key is absent.

        The sequence number is retired, not handed back: next_seq does not
        move, so a later assoc of the same key lands at the end.
        """
        seq = self.reverse.get(key, _MISSING)
        if seq is _MISSING:
            return self
        return OrderedMap(
            self.base.remove(key),
            self.ordering.remove(seq),
            self.reverse.remove(key),
            self.next_seq,
            self.meta,
        )

    def conj(self, entry: Tuple[Any, Any]) -> "OrderedMap":
        """assoc() taking a (key, value) pair."""
        key, value = entry
        return self.assoc(key, value)

    def empty(self) -> "OrderedMap":
        """The empty map, keeping this map's metadata."""
        if self.meta is None:
            return EMPTY
        return EMPTY.with_meta(self.meta)

    # -------------------------------------------------------------------------
    # ORDERED TRAVERSAL
    # -------------------------------------------------------------------------

    def __iter__(self) -> Iterator[Any]:
        for _, key in self.ordering.ascending():
            yield key

    def __reversed__(self) -> Iterator[Any]:
        for _, key in self.ordering.descending():
            yield key

    def seq(self) -> Iterator[Entry]:
        """Entries in insertion order. Each call starts a fresh walk."""
        base = self.base
        for _, key in self.ordering.ascending():
            yield Entry(key, base[key])

    def rseq(self) -> Iterator[Entry]:
        """Entries in reverse insertion order."""
        base = self.base
        for _, key in self.ordering.descending():
            yield Entry(key, base[key])

    def reduce_kv(self, fn: Callable[[Any, Any, Any], Any], init: Any) -> Any:
        """Fold fn(acc, key, value) over the entries in insertion order."""
        acc = init
        for key, value in self.seq():
            acc = fn(acc, key, value)
        return acc

    def nth(self, i: int, default: Any = _MISSING) -> Any:
        """
        Entry stored under sequence number i.

        i must lie in [0, count()) and is then used as a raw sequence
        number, not as a position among survivors. With no removals in
        this map's history the two agree. After a removal:
        - a removed number is a gap and resolves to nothing
        - a survivor numbered count() or higher cannot be reached

        Raises IndexOutOfRange on either failure unless default is given.
        """
        if 0 <= i < len(self.base):
            key = self.ordering.at(i, _MISSING)
            if key is not _MISSING:
                return Entry(key, self.base[key])
            reason = "was removed"
        else:
            reason = "out of range"
        if default is not _MISSING:
            return default
        raise IndexOutOfRange(i, reason)

    # -------------------------------------------------------------------------
    # ORDERING METADATA
    # -------------------------------------------------------------------------

    def get_ordering(self) -> Tuple[OrderingIndex, HashTrie]:
        """The (sequence -> key, key -> sequence) pair."""
        return self.ordering, self.reverse

    def with_ordering(self, ordering: OrderingIndex, reverse: Optional[HashTrie] = None) -> "OrderedMap":
        """
        Same entries, different iteration order.

        ordering must hold exactly this map's keys under distinct
        non-negative sequence numbers. reverse is derived from ordering
        when omitted, and must agree with it when given.
        """
        if reverse is None:
            reverse = HashTrie.from_items((key, seq) for seq, key in ordering.ascending())

        size = len(self.base)
        if len(ordering) != size or len(reverse) != size:
            raise ValueError(
                f"Ordering covers {len(ordering)} keys and reverse index {len(reverse)}, map has {size}"
            )
        first = ordering.first()
        if first is not None and first[0] < 0:
            raise ValueError(f"Sequence numbers must be non-negative, got {first[0]}")
        for seq, key in ordering.ascending():
            if key not in self.base:
                raise ValueError(f"Ordering names {key!r}, which is not in the map")
            if reverse.get(key, _MISSING) != seq:
                raise ValueError(f"Reverse index disagrees with ordering for {key!r}")

        last = ordering.max_seq()
        next_seq = self.next_seq if last is None else max(self.next_seq, last + 1)
        logger.debug("Replaced ordering of %d entries, next sequence number %d", size, next_seq)
        return OrderedMap(self.base, ordering, reverse, next_seq, self.meta)

    # -------------------------------------------------------------------------
    # METADATA: rides along, never compared
    # -------------------------------------------------------------------------

    def with_meta(self, meta: Any) -> "OrderedMap":
        return OrderedMap(self.base, self.ordering, self.reverse, self.next_seq, meta)

    # -------------------------------------------------------------------------
    # EQUALITY
    # -------------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if isinstance(other, OrderedMap):
            return self.base == other.base
        if isinstance(other, Mapping):
            if len(other) != len(self.base):
                return False
            for key, value in self.base.items():
                theirs = other.get(key, _MISSING)
                if theirs is _MISSING or theirs != value:
                    return False
            return True
        return NotImplemented

    def __hash__(self) -> int:
        if self._hash is None:
            object.__setattr__(self, "_hash", hash(frozenset(self.base.items())))
        return self._hash

    def __repr__(self) -> str:
        body = ", ".join(f"{k!r}: {v!r}" for k, v in self.seq())
        return f"OrderedMap({{{body}}})"

    __str__ = __repr__

    # -------------------------------------------------------------------------
    # MUTABLE-MAP SURFACE: present so generic callers fail loudly
    # -------------------------------------------------------------------------

    __setitem__ = _unsupported("__setitem__")
    __delitem__ = _unsupported("__delitem__")
    pop = _unsupported("pop")
    popitem = _unsupported("popitem")
    clear = _unsupported("clear")
    update = _unsupported("update")
    setdefault = _unsupported("setdefault")
    put = _unsupported("put")
    put_all = _unsupported("put_all")
    remove = _unsupported("remove")


EMPTY = OrderedMap(HashTrie.EMPTY, OrderingIndex.EMPTY, HashTrie.EMPTY)


# =============================================================================
# BUILDER
# =============================================================================

def ordered_map(*keyvals: Any) -> OrderedMap:
    """
    Build a map from alternating keys and values.

        ordered_map("a", 1, "b", 2)  ->  OrderedMap({'a': 1, 'b': 2})

    Repeated keys behave as repeated assoc: the first occurrence fixes the
    position, the last one the value.
    """
    if len(keyvals) % 2:
        raise OddArgumentCount(keyvals[-1])
    result = EMPTY
    for key, value in zip(keyvals[::2], keyvals[1::2]):
        result = result.assoc(key, value)
    logger.debug("Built ordered map with %d entries", len(result))
    return result
