"""
OrderingIndex: sequence number -> key, kept in ascending order

A persistent AVL tree. Sequence numbers only ever grow, so a plain array
would do for appends, but removals would then have to shift everything
after the hole. The tree removes in O(log n) and leaves the gap where it is.

Writes copy the search path and rebalance on the way up. Untouched
subtrees are shared with the previous index.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, List, Optional, Tuple


# =============================================================================
# NODES
# =============================================================================

class _Node:
    __slots__ = ("seq", "key", "left", "right", "height")

    def __init__(self, seq: int, key: Any, left: Optional["_Node"], right: Optional["_Node"]):
        self.seq = seq
        self.key = key
        self.left = left
        self.right = right
        self.height = max(_height(left), _height(right)) + 1


def _height(node: Optional[_Node]) -> int:
    return node.height if node is not None else 0


def _rotate_right(seq: int, key: Any, left: _Node, right: Optional[_Node]) -> _Node:
    return _Node(left.seq, left.key, left.left, _Node(seq, key, left.right, right))


def _rotate_left(seq: int, key: Any, left: Optional[_Node], right: _Node) -> _Node:
    return _Node(right.seq, right.key, _Node(seq, key, left, right.left), right.right)


def _balance(seq: int, key: Any, left: Optional[_Node], right: Optional[_Node]) -> _Node:
    """Build a node, rotating if the subtrees differ in height by more than one."""
    diff = _height(left) - _height(right)
    if diff > 1:
        if _height(left.left) < _height(left.right):
            left = _rotate_left(left.seq, left.key, left.left, left.right)
        return _rotate_right(seq, key, left, right)
    if diff < -1:
        if _height(right.right) < _height(right.left):
            right = _rotate_right(right.seq, right.key, right.left, right.right)
        return _rotate_left(seq, key, left, right)
    return _Node(seq, key, left, right)


def _insert(node: Optional[_Node], seq: int, key: Any) -> Tuple[_Node, bool]:
    if node is None:
        return _Node(seq, key, None, None), True
    if seq < node.seq:
        left, added = _insert(node.left, seq, key)
        return _balance(node.seq, node.key, left, node.right), added
    if seq > node.seq:
        right, added = _insert(node.right, seq, key)
        return _balance(node.seq, node.key, node.left, right), added
    return _Node(seq, key, node.left, node.right), False


def _remove_min(node: _Node) -> Optional[_Node]:
    if node.left is None:
        return node.right
    return _balance(node.seq, node.key, _remove_min(node.left), node.right)


def _remove(node: Optional[_Node], seq: int) -> Optional[_Node]:
    if node is None:
        raise KeyError(seq)
    if seq < node.seq:
        return _balance(node.seq, node.key, _remove(node.left, seq), node.right)
    if seq > node.seq:
        return _balance(node.seq, node.key, node.left, _remove(node.right, seq))

    if node.left is None:
        return node.right
    if node.right is None:
        return node.left
    successor = node.right
    while successor.left is not None:
        successor = successor.left
    return _balance(successor.seq, successor.key, node.left, _remove_min(node.right))


# =============================================================================
# ORDERING INDEX
# =============================================================================

class OrderingIndex:
    """
    Persistent ordered map from integer sequence number to key.

    at(seq) looks up a raw sequence number. It does not count survivors:
    after a removal, at(i) is not the i-th entry.
    """

    __slots__ = ("_root", "_size")

    EMPTY: "OrderingIndex"

    def __init__(self, root: Optional[_Node] = None, size: int = 0):
        self._root = root
        self._size = size

    @classmethod
    def from_items(cls, pairs: Iterable[Tuple[int, Any]]) -> "OrderingIndex":
        index = cls.EMPTY
        for seq, key in pairs:
            index = index.insert(seq, key)
        return index

    # -------------------------------------------------------------------------
    # WRITES
    # -------------------------------------------------------------------------

    def insert(self, seq: int, key: Any) -> "OrderingIndex":
        """Place key at seq, replacing whatever key sat there."""
        root, added = _insert(self._root, seq, key)
        return OrderingIndex(root, self._size + 1 if added else self._size)

    def remove(self, seq: int) -> "OrderingIndex":
        """Drop seq. Raises KeyError if no key sits at seq."""
        return OrderingIndex(_remove(self._root, seq), self._size - 1)

    # -------------------------------------------------------------------------
    # READS
    # -------------------------------------------------------------------------

    def at(self, seq: int, default: Any = None) -> Any:
        node = self._root
        while node is not None:
            if seq < node.seq:
                node = node.left
            elif seq > node.seq:
                node = node.right
            else:
                return node.key
        return default

    def __contains__(self, seq: object) -> bool:
        node = self._root
        while node is not None:
            if seq < node.seq:
                node = node.left
            elif seq > node.seq:
                node = node.right
            else:
                return True
        return False

    def __len__(self) -> int:
        return self._size

    @property
    def height(self) -> int:
        return _height(self._root)

    def ascending(self) -> Iterator[Tuple[int, Any]]:
        stack: List[_Node] = []
        node = self._root
        while stack or node is not None:
            if node is not None:
                stack.append(node)
                node = node.left
            else:
                node = stack.pop()
                yield node.seq, node.key
                node = node.right

    def descending(self) -> Iterator[Tuple[int, Any]]:
        stack: List[_Node] = []
        node = self._root
        while stack or node is not None:
            if node is not None:
                stack.append(node)
                node = node.right
            else:
                node = stack.pop()
                yield node.seq, node.key
                node = node.left

    __iter__ = ascending

    def first(self) -> Optional[Tuple[int, Any]]:
        """Lowest (seq, key), or None when empty."""
        node = self._root
        if node is None:
            return None
        while node.left is not None:
            node = node.left
        return node.seq, node.key

    def last(self) -> Optional[Tuple[int, Any]]:
        """Highest (seq, key), or None when empty."""
        node = self._root
        if node is None:
            return None
        while node.right is not None:
            node = node.right
        return node.seq, node.key

    def max_seq(self) -> Optional[int]:
        last = self.last()
        return last[0] if last is not None else None

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, OrderingIndex):
            return NotImplemented
        return self._size == other._size and list(self.ascending()) == list(other.ascending())

    def __repr__(self) -> str:
        return f"OrderingIndex({list(self.ascending())!r})"


OrderingIndex.EMPTY = OrderingIndex()
