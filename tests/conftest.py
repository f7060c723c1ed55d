"""
Shared pytest fixtures for the 2-3 tree and stock ledger tests.
"""

import pytest

from pricetree.ledger import StockLedger
from pricetree.models.sortedcontainers import TwoThreeTree


def _check_node(tree: TwoThreeTree, index: int, depth: int, leaf_depths: set, seen: list) -> list:
    """Check one subtree and return its leaf indices in order."""
    seen.append(index)
    node = tree._arena[index]
    if node.is_leaf:
        assert node.size == 1
        leaf_depths.add(depth)
        return [index]

    children = [c for c in (node.left, node.middle, node.right) if c is not None]
    assert node.left is not None and node.middle is not None, "internal node with < 2 children"
    leaves = []
    for child in children:
        assert tree._arena[child].parent == index
        leaves.extend(_check_node(tree, child, depth + 1, leaf_depths, seen))

    assert node.size == sum(tree._arena[c].size for c in children)
    assert node.size == len(leaves)
    assert node.key == max(tree._arena[leaf].key for leaf in leaves)
    return leaves


def assert_tree_invariants(tree: TwoThreeTree) -> None:
    """Verify balance, cached keys and sizes, and the leaf list."""
    assert tree._arena[tree._root].parent is None

    leaf_depths: set = set()
    seen: list = []
    leaves = _check_node(tree, tree._root, 0, leaf_depths, seen)
    assert len(leaf_depths) == 1, f"leaves at depths {leaf_depths}"

    # Leaf list matches the in-order leaf sequence
    walked = []
    index = tree._head
    while index is not None:
        walked.append(index)
        index = tree._arena[index].next
    assert walked == leaves
    assert walked[0] == tree._head and walked[-1] == tree._tail

    back = []
    index = tree._tail
    while index is not None:
        back.append(index)
        index = tree._arena[index].prev
    assert back == list(reversed(walked))

    keys = [tree._arena[leaf].key for leaf in walked]
    assert all(a < b for a, b in zip(keys, keys[1:])), "keys not strictly ascending"
    assert len(walked) == tree.size() + 2

    # No freed or orphaned slots left behind
    assert len(tree._arena) == len(seen)


@pytest.fixture
def check_invariants():
    """Provide the structural invariant checker."""
    return assert_tree_invariants


@pytest.fixture
def int_tree():
    """Provide a fresh integer-keyed tree."""
    return TwoThreeTree(0)


@pytest.fixture
def populated_tree():
    """Provide an integer-keyed tree holding 0..99 mapped to their squares."""
    tree = TwoThreeTree(0)
    for i in range(100):
        tree.insert(i, i * i)
    return tree


@pytest.fixture
def ledger():
    """Provide an empty StockLedger."""
    return StockLedger()


@pytest.fixture
def sample_ledger():
    """Provide a ledger with a handful of stocks."""
    ledger = StockLedger()
    ledger.add_stock("AAPL", 1, 150.0)
    ledger.add_stock("GOOG", 2, 120.0)
    ledger.add_stock("MSFT", 3, 300.0)
    ledger.add_stock("AMZN", 4, 120.0)
    ledger.add_stock("TSLA", 5, 200.0)
    return ledger
