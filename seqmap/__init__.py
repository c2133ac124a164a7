"""
Seqmap: Persistent Maps in First-Association Order

Hash-map lookups, deterministic walks, and no mutation.

    m = ordered_map("b", 2, "a", 1)
    m2 = m.assoc("c", 3).dissoc("b")
    list(m2.seq())   # [Entry(key='a', value=1), Entry(key='c', value=3)]
    list(m.seq())    # m is unchanged

Built from three persistent structures:
    - HashTrie: key -> value, and key -> sequence number
    - OrderingIndex: sequence number -> key, in ascending order

The protocols module extends ordered traversal to dicts, mappings and
pair lists, so walkers can accept any of them.
"""

import logging

__version__ = "0.1.0"

from .core import (
    # Errors
    SeqMapError,
    OddArgumentCount,
    IndexOutOfRange,
    UnsupportedMutation,

    # The map
    Entry,
    OrderedMap,
    EMPTY,

    # Builder
    ordered_map,
)

from .hamt import HashTrie
from .ordering import OrderingIndex

# Import protocols submodule
from . import protocols
from .protocols import ordered_entries, register_ordering

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Version
    "__version__",

    # Errors
    "SeqMapError",
    "OddArgumentCount",
    "IndexOutOfRange",
    "UnsupportedMutation",

    # The map
    "Entry",
    "OrderedMap",
    "EMPTY",
    "ordered_map",

    # Persistent structures
    "HashTrie",
    "OrderingIndex",

    # Traversal capability
    "protocols",
    "ordered_entries",
    "register_ordering",
]
