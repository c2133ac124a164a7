"""
Tests for the persistent hash trie.
Run with: python -m pytest tests/ -v
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from seqmap import HashTrie


class Clash:
    """A key whose hash is fixed, to force full-hash collisions."""

    def __init__(self, name, h=42):
        self.name = name
        self.h = h

    def __hash__(self):
        return self.h

    def __eq__(self, other):
        return isinstance(other, Clash) and self.name == other.name

    def __repr__(self):
        return f"Clash({self.name})"


class TestHashTrie:
    """Test basic reads and writes."""

    def test_empty(self):
        trie = HashTrie.EMPTY
        assert len(trie) == 0
        assert trie.get("a") is None
        assert "a" not in trie
        assert list(trie) == []

    def test_set_and_get(self):
        trie = HashTrie.EMPTY.set("a", 1).set("b", 2)
        assert len(trie) == 2
        assert trie.get("a") == 1
        assert trie["b"] == 2
        assert trie.get("c", "nope") == "nope"

    def test_getitem_missing_raises(self):
        with pytest.raises(KeyError):
            HashTrie.EMPTY["a"]

    def test_overwrite_keeps_size(self):
        trie = HashTrie.EMPTY.set("a", 1).set("a", 2)
        assert len(trie) == 1
        assert trie["a"] == 2

    def test_set_identical_value_returns_self(self):
        value = object()
        trie = HashTrie.EMPTY.set("a", value)
        assert trie.set("a", value) is trie

    def test_persistence(self):
        t1 = HashTrie.EMPTY.set("a", 1)
        t2 = t1.set("b", 2)
        t3 = t2.remove("a")

        assert dict(t1.items()) == {"a": 1}
        assert dict(t2.items()) == {"a": 1, "b": 2}
        assert dict(t3.items()) == {"b": 2}

    def test_remove_missing_raises(self):
        with pytest.raises(KeyError):
            HashTrie.EMPTY.set("a", 1).remove("b")

    def test_discard_missing_returns_self(self):
        trie = HashTrie.EMPTY.set("a", 1)
        assert trie.discard("b") is trie

    def test_many_keys(self):
        trie = HashTrie.from_items((i, i * i) for i in range(5000))
        assert len(trie) == 5000
        assert all(trie[i] == i * i for i in range(5000))

        for i in range(0, 5000, 2):
            trie = trie.remove(i)
        assert len(trie) == 2500
        assert 2 not in trie
        assert trie[3] == 9
        assert sorted(trie) == list(range(1, 5000, 2))

    def test_remove_everything(self):
        trie = HashTrie.from_items((f"k{i}", i) for i in range(300))
        for i in range(300):
            trie = trie.remove(f"k{i}")
        assert len(trie) == 0
        assert list(trie.items()) == []

    def test_negative_hashes(self):
        trie = HashTrie.EMPTY.set(-1, "a").set(-2, "b")
        assert trie[-1] == "a"
        assert trie[-2] == "b"

    def test_equality(self):
        a = HashTrie.from_items([("x", 1), ("y", 2)])
        b = HashTrie.from_items([("y", 2), ("x", 1)])
        c = HashTrie.from_items([("x", 1), ("y", 3)])
        assert a == b
        assert a != c


class TestCollisions:
    """Keys with identical full hashes share a collision node."""

    def test_colliding_keys_coexist(self):
        a, b, c = Clash("a"), Clash("b"), Clash("c")
        trie = HashTrie.EMPTY.set(a, 1).set(b, 2).set(c, 3)

        assert len(trie) == 3
        assert trie[Clash("a")] == 1
        assert trie[Clash("b")] == 2
        assert trie[Clash("c")] == 3

    def test_update_in_collision(self):
        trie = HashTrie.EMPTY.set(Clash("a"), 1).set(Clash("b"), 2)
        trie = trie.set(Clash("a"), 10)
        assert len(trie) == 2
        assert trie[Clash("a")] == 10

    def test_remove_from_collision(self):
        trie = HashTrie.EMPTY.set(Clash("a"), 1).set(Clash("b"), 2).set(Clash("c"), 3)
        trie = trie.remove(Clash("b"))
        assert len(trie) == 2
        assert Clash("b") not in trie
        trie = trie.remove(Clash("a"))
        assert len(trie) == 1
        assert trie[Clash("c")] == 3

    def test_different_hash_next_to_collision(self):
        trie = HashTrie.EMPTY.set(Clash("a"), 1).set(Clash("b"), 2)
        # Same low bits as the collision, different full hash
        other = Clash("z", h=42 + (1 << 40))
        trie = trie.set(other, 3)

        assert len(trie) == 3
        assert trie[other] == 3
        assert trie[Clash("a")] == 1
        trie = trie.remove(other)
        assert trie[Clash("b")] == 2
        assert other not in trie

    def test_absent_key_with_colliding_hash(self):
        trie = HashTrie.EMPTY.set(Clash("a"), 1)
        assert Clash("b") not in trie
        assert trie.discard(Clash("b")) is trie


# Run with pytest
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
