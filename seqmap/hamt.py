"""
HashTrie: a persistent hash array mapped trie

The base store of an ordered map, and its reverse index. Holds key -> value
associations with no opinion about order.

Every write copies only the path from the root to the touched slot.
Everything else is shared with the trie it was derived from, so an old
trie stays valid and unchanged for as long as someone holds it.

Layout:
- _BitmapNode: up to 32 slots, a bitmap says which are occupied
- _Leaf: one key/value pair, remembers its full hash
- _CollisionNode: several leaves whose full hashes are identical

Each level consumes BITS bits of the hash. Depth is bounded by the hash
width, so lookups are O(log32 n).
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Tuple


# =============================================================================
# CONSTANTS
# =============================================================================

BITS = 5                # hash bits consumed per level
WIDTH = 1 << BITS       # slots per bitmap node
MASK = WIDTH - 1
HASH_MASK = (1 << 64) - 1

_MISSING = object()


def _hash(key: Any) -> int:
    # Negative hashes are folded into the unsigned 64-bit range.
    return hash(key) & HASH_MASK


def _fragment(h: int, shift: int) -> int:
    return (h >> shift) & MASK


def _same_key(a: Any, b: Any) -> bool:
    return a is b or a == b


# =============================================================================
# NODES
# =============================================================================

class _Leaf:
    __slots__ = ("hash", "key", "value")

    def __init__(self, h: int, key: Any, value: Any):
        self.hash = h
        self.key = key
        self.value = value


class _CollisionNode:
    __slots__ = ("hash", "leaves")

    def __init__(self, h: int, leaves: Tuple[_Leaf, ...]):
        self.hash = h
        self.leaves = leaves


class _BitmapNode:
    __slots__ = ("bitmap", "children")

    def __init__(self, bitmap: int, children: tuple):
        self.bitmap = bitmap
        self.children = children


_EMPTY_ROOT = _BitmapNode(0, ())


def _merge(first: _Leaf, second: _Leaf, shift: int):
    """Build the smallest subtree holding two leaves that met in one slot."""
    if first.hash == second.hash:
        return _CollisionNode(first.hash, (first, second))

    a = _fragment(first.hash, shift)
    b = _fragment(second.hash, shift)
    if a == b:
        return _BitmapNode(1 << a, (_merge(first, second, shift + BITS),))
    children = (first, second) if a < b else (second, first)
    return _BitmapNode((1 << a) | (1 << b), children)


def _lookup(node, h: int, key: Any, default: Any) -> Any:
    shift = 0
    while True:
        if isinstance(node, _CollisionNode):
            if node.hash == h:
                for leaf in node.leaves:
                    if _same_key(leaf.key, key):
                        return leaf.value
            return default

        bit = 1 << _fragment(h, shift)
        if not node.bitmap & bit:
            return default
        child = node.children[(node.bitmap & (bit - 1)).bit_count()]
        if isinstance(child, _Leaf):
            if child.hash == h and _same_key(child.key, key):
                return child.value
            return default
        node = child
        shift += BITS


def _assoc(node, shift: int, h: int, key: Any, value: Any):
    """
    Returns (new_node, added). new_node is node itself when nothing changed;
    added is True when the key was not present before.
    """
    if isinstance(node, _CollisionNode):
        if node.hash == h:
            for i, leaf in enumerate(node.leaves):
                if _same_key(leaf.key, key):
                    if leaf.value is value:
                        return node, False
                    leaves = node.leaves[:i] + (_Leaf(h, key, value),) + node.leaves[i + 1:]
                    return _CollisionNode(h, leaves), False
            return _CollisionNode(h, node.leaves + (_Leaf(h, key, value),)), True
        # A different hash reached this collision: push it one level down.
        wrapper = _BitmapNode(1 << _fragment(node.hash, shift), (node,))
        return _assoc(wrapper, shift, h, key, value)

    bit = 1 << _fragment(h, shift)
    idx = (node.bitmap & (bit - 1)).bit_count()

    if not node.bitmap & bit:
        children = node.children[:idx] + (_Leaf(h, key, value),) + node.children[idx:]
        return _BitmapNode(node.bitmap | bit, children), True

    child = node.children[idx]
    if isinstance(child, _Leaf):
        if child.hash == h and _same_key(child.key, key):
            if child.value is value:
                return node, False
            new_child, added = _Leaf(h, key, value), False
        else:
            new_child, added = _merge(child, _Leaf(h, key, value), shift + BITS), True
    else:
        new_child, added = _assoc(child, shift + BITS, h, key, value)
        if new_child is child:
            return node, False

    children = node.children[:idx] + (new_child,) + node.children[idx + 1:]
    return _BitmapNode(node.bitmap, children), added


def _without(node, shift: int, h: int, key: Any):
    """
    Returns the node with key removed: node itself when key is absent,
    None when the node became empty, or a bare leaf when a subtree
    collapsed to a single entry.
    """
    if isinstance(node, _CollisionNode):
        if node.hash != h:
            return node
        for i, leaf in enumerate(node.leaves):
            if _same_key(leaf.key, key):
                leaves = node.leaves[:i] + node.leaves[i + 1:]
                if len(leaves) == 1:
                    return leaves[0]
                return _CollisionNode(h, leaves)
        return node

    bit = 1 << _fragment(h, shift)
    if not node.bitmap & bit:
        return node
    idx = (node.bitmap & (bit - 1)).bit_count()
    child = node.children[idx]

    if isinstance(child, _Leaf):
        if not (child.hash == h and _same_key(child.key, key)):
            return node
        new_child = None
    else:
        new_child = _without(child, shift + BITS, h, key)
        if new_child is child:
            return node

    if new_child is None:
        bitmap = node.bitmap & ~bit
        children = node.children[:idx] + node.children[idx + 1:]
        if shift == 0:
            return _BitmapNode(bitmap, children) if bitmap else _EMPTY_ROOT
        if not bitmap:
            return None
        if len(children) == 1 and isinstance(children[0], _Leaf):
            return children[0]
        return _BitmapNode(bitmap, children)

    if shift > 0 and len(node.children) == 1 and isinstance(new_child, _Leaf):
        return new_child
    children = node.children[:idx] + (new_child,) + node.children[idx + 1:]
    return _BitmapNode(node.bitmap, children)


def _leaves(node) -> Iterator[_Leaf]:
    if isinstance(node, _Leaf):
        yield node
    elif isinstance(node, _CollisionNode):
        yield from node.leaves
    else:
        for child in node.children:
            yield from _leaves(child)


# =============================================================================
# HASH TRIE: The public persistent map
# =============================================================================

class HashTrie:
    """
    Persistent key -> value map.

    Writes return a new trie; the receiver is never modified.
    Iteration follows hash order, which is stable for a given trie
    but unrelated to insertion order.
    """

    __slots__ = ("_root", "_size")

    EMPTY: "HashTrie"

    def __init__(self, root=_EMPTY_ROOT, size: int = 0):
        self._root = root
        self._size = size

    @classmethod
    def from_items(cls, items: Iterable[Tuple[Any, Any]]) -> "HashTrie":
        trie = cls.EMPTY
        for key, value in items:
            trie = trie.set(key, value)
        return trie

    # -------------------------------------------------------------------------
    # READS
    # -------------------------------------------------------------------------

    def get(self, key: Any, default: Any = None) -> Any:
        return _lookup(self._root, _hash(key), key, default)

    def __getitem__(self, key: Any) -> Any:
        value = _lookup(self._root, _hash(key), key, _MISSING)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def __contains__(self, key: Any) -> bool:
        return _lookup(self._root, _hash(key), key, _MISSING) is not _MISSING

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Any]:
        for leaf in _leaves(self._root):
            yield leaf.key

    def items(self) -> Iterator[Tuple[Any, Any]]:
        for leaf in _leaves(self._root):
            yield leaf.key, leaf.value

    def values(self) -> Iterator[Any]:
        for leaf in _leaves(self._root):
            yield leaf.value

    # -------------------------------------------------------------------------
    # WRITES: each returns a new trie
    # -------------------------------------------------------------------------

    def set(self, key: Any, value: Any) -> "HashTrie":
        """Associate key with value. Returns self if key already maps to this exact value."""
        root, added = _assoc(self._root, 0, _hash(key), key, value)
        if root is self._root:
            return self
        return HashTrie(root, self._size + 1 if added else self._size)

    def remove(self, key: Any) -> "HashTrie":
        """Drop key. Raises KeyError if it is absent."""
        root = _without(self._root, 0, _hash(key), key)
        if root is self._root:
            raise KeyError(key)
        return HashTrie(root, self._size - 1)

    def discard(self, key: Any) -> "HashTrie":
        """Drop key if present, otherwise return self."""
        root = _without(self._root, 0, _hash(key), key)
        if root is self._root:
            return self
        return HashTrie(root, self._size - 1)

    # -------------------------------------------------------------------------
    # COMPARISON
    # -------------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, HashTrie):
            return NotImplemented
        if self._size != other._size:
            return False
        for key, value in self.items():
            theirs = other.get(key, _MISSING)
            if theirs is _MISSING or theirs != value:
                return False
        return True

    def __repr__(self) -> str:
        body = ", ".join(f"{k!r}: {v!r}" for k, v in self.items())
        return f"HashTrie({{{body}}})"


HashTrie.EMPTY = HashTrie()
