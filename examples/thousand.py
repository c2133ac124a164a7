#!/usr/bin/env python3
"""
Seqmap: A Thousand Keys, In Order

This demo walks through the contract:
- Entries come back in the order keys first arrived
- Updates keep their place, removals leave a permanent gap
- Every write is a new map; the old one never changes
"""

import sys
import os

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from seqmap import (
    EMPTY,
    IndexOutOfRange,
    OrderedMap,
    ordered_map,
)
from seqmap.protocols import ordered_keys


def print_header(title: str) -> None:
    print("\n" + "=" * 70)
    print(title)
    print("=" * 70)


def print_section(num: int, title: str) -> None:
    print(f"\n[{num}] {title}\n")


# =============================================================================
# PART 1: THE CONTRACT
# =============================================================================

def demonstrate_order():
    """A handful of keys, updated and removed."""

    print_header("SEQMAP: ORDER THAT SURVIVES CHANGE")

    # -------------------------------------------------------------------------
    print_section(1, "INSERTION ORDER")
    # -------------------------------------------------------------------------

    parents = ordered_map("root", None, "left", "root", "right", "root")
    print(f"   {parents}")
    print(f"   Keys walk in the order they arrived: {list(parents)}")

    # -------------------------------------------------------------------------
    print_section(2, "UPDATES KEEP THEIR PLACE")
    # -------------------------------------------------------------------------

    moved = parents.assoc("left", "right")
    print(f"   After assoc('left', 'right'): {moved}")
    print(f"   Original untouched:           {parents}")

    # -------------------------------------------------------------------------
    print_section(3, "REMOVAL LEAVES A GAP")
    # -------------------------------------------------------------------------

    pruned = parents.dissoc("root")
    print(f"   After dissoc('root'):   {pruned}")
    print(f"   Next sequence number:   {pruned.next_seq}")
    try:
        pruned.nth(0)
    except IndexOutOfRange as e:
        print(f"   nth(0) -> {e}")

    back = pruned.assoc("root", None)
    print(f"   Re-added 'root' lands at the end: {list(back)}")
    print(f"   Equal to the original anyway:     {back == parents}")

    return parents


# =============================================================================
# PART 2: SCALE
# =============================================================================

def demonstrate_scale():
    """A thousand keys."""

    print_header("A THOUSAND KEYS")

    print_section(4, "BUILDING A0..A999")

    big = OrderedMap.from_items((f"A{i}", i) for i in range(1000))
    first_ten = [entry for _, entry in zip(range(10), big.seq())]

    print(f"   Count:        {big.count()}")
    print(f"   First ten:    {[tuple(e) for e in first_ten]}")
    print(f"   nth(999):     {tuple(big.nth(999))}")
    print(f"   Sum via seq:  {sum(v for _, v in big.seq())}")
    print(f"   Sum via fold: {big.reduce_kv(lambda acc, k, v: acc + v, 0)}")
    print(f"   First keys:   {list(ordered_keys(big))[:3]}")
    print(f"   First values: {list(big.values())[:3]}")

    # -------------------------------------------------------------------------
    print_section(5, "STRUCTURAL SHARING")
    # -------------------------------------------------------------------------

    smaller = big
    for i in range(0, 1000, 2):
        smaller = smaller.dissoc(f"A{i}")

    print(f"   Removed every even key: {smaller.count()} left")
    print(f"   The original still has: {big.count()}")
    print(f"   Ordering depth:         {smaller.ordering.height}")

    return big


# =============================================================================
# MAIN
# =============================================================================

if __name__ == "__main__":
    demonstrate_order()
    demonstrate_scale()
    print(f"\n   Empty map: {EMPTY}\n")
