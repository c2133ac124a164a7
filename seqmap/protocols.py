"""
Ordered traversal as a capability

Walks over parent -> child relations need a deterministic visiting order,
whatever container happens to hold the relation. This module answers
"give me your entries in order" for any registered type, including
built-in ones that cannot be given new methods.

Registered by default:
    - OrderedMap: first-association order (seq)
    - dict / Mapping: the mapping's own iteration order
    - list / tuple of pairs: as given

Usage:
    from seqmap.protocols import ordered_entries, register_ordering

    for key, value in ordered_entries(children):
        ...

    # Teach it a foreign type without touching the type
    register_ordering(SortedDict, lambda d: ((k, d[k]) for k in d))
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable, Iterator, Tuple
import logging

from .core import Entry, OrderedMap


logger = logging.getLogger(__name__)

OrderingFn = Callable[[Any], Iterable[Tuple[Any, Any]]]


def _ordered_map_entries(coll: OrderedMap) -> Iterator[Entry]:
    return coll.seq()


def _mapping_entries(coll: Mapping) -> Iterator[Entry]:
    for key, value in coll.items():
        yield Entry(key, value)


def _pair_entries(coll: Iterable[Tuple[Any, Any]]) -> Iterator[Entry]:
    for key, value in coll:
        yield Entry(key, value)


# Type -> function producing (key, value) pairs in visiting order
ORDERINGS: Dict[type, OrderingFn] = {
    OrderedMap: _ordered_map_entries,
    dict: _mapping_entries,
    Mapping: _mapping_entries,
    list: _pair_entries,
    tuple: _pair_entries,
}


def register_ordering(type_: type, fn: OrderingFn) -> None:
    """
    Extend ordered traversal to type_.

    fn receives an instance and returns its (key, value) pairs in the
    order a walk should visit them. Registering a type again replaces
    the previous function.
    """
    ORDERINGS[type_] = fn
    logger.debug("Registered ordering for %s", type_.__name__)


def get_ordering_fn(type_: type) -> OrderingFn:
    """
    Resolve the ordering function for type_.

    The most specific registered class in the MRO wins. Abstract base
    classes such as Mapping also match their virtual subclasses.
    """
    for klass in type_.__mro__:
        if klass in ORDERINGS:
            return ORDERINGS[klass]
    for klass, fn in ORDERINGS.items():
        if issubclass(type_, klass):
            return fn
    raise TypeError(
        f"No ordering registered for {type_.__name__}. "
        f"Available: {[t.__name__ for t in ORDERINGS]}"
    )


def ordered_entries(coll: Any) -> Iterator[Entry]:
    """Entries of coll in deterministic visiting order. Unknown types fail here, not on first next()."""
    fn = get_ordering_fn(type(coll))
    return (Entry(key, value) for key, value in fn(coll))


def ordered_keys(coll: Any) -> Iterator[Any]:
    for key, _ in ordered_entries(coll):
        yield key


def ordered_values(coll: Any) -> Iterator[Any]:
    for _, value in ordered_entries(coll):
        yield value
