import pytest

from avl.avl_model import AVLModel
from bst.bst_model import BSTModel
from core import invariants
from core.animation import Color
from core.config import AnimationConfig
from core.errors import TreeInvariantError
from rbtree.rb_model import RedBlackModel


def _build(model, values):
    tree = model()
    for value in values:
        tree.insert(value)
    return tree


def test_healthy_trees_pass():
    for model in (BSTModel, AVLModel, RedBlackModel):
        _build(model, [4, 2, 6, 1, 3, 5, 7]).validate()
    assert invariants.check_red_black(_build(RedBlackModel, [4, 2, 6, 1, 3, 5, 7])) == 2
    assert invariants.check_red_black(RedBlackModel()) == 0


def test_order_violation_is_reported():
    bst = _build(BSTModel, [5, 3, 8])
    bst._nodes[bst.search(3).node_id]["value"] = 9
    with pytest.raises(TreeInvariantError, match="not less than 5"):
        invariants.check_bst_order(bst)


def test_broken_parent_link_is_reported():
    bst = _build(BSTModel, [5, 3, 8])
    bst._nodes[bst.search(8).node_id]["parent"] = None
    with pytest.raises(TreeInvariantError, match="points back"):
        invariants.check_parent_links(bst)


def test_orphaned_node_is_reported():
    bst = _build(BSTModel, [5, 3])
    root = bst._nodes[bst.root_id]
    root["left"] = None
    with pytest.raises(TreeInvariantError, match="not reachable"):
        invariants.check_parent_links(bst)


def test_stale_avl_height_is_reported():
    avl = _build(AVLModel, [2, 1, 3])
    avl._nodes[avl.root_id]["height"] = 5
    with pytest.raises(TreeInvariantError, match="stores height 5"):
        avl.validate()


def test_unbalanced_avl_is_reported():
    avl = _build(AVLModel, [1])
    root_id = avl.root_id
    two = avl._make_node(2, parent=root_id)
    three = avl._make_node(3, parent=two["id"])
    avl._nodes[root_id]["right"] = two["id"]
    two["right"] = three["id"]
    two["height"] = 2
    avl._nodes[root_id]["height"] = 3
    with pytest.raises(TreeInvariantError, match="balance factor -2"):
        invariants.check_avl_balance(avl)


def test_red_root_is_reported():
    rb = _build(RedBlackModel, [1])
    rb._nodes[rb.root_id]["color"] = Color.RED
    with pytest.raises(TreeInvariantError, match="Root"):
        invariants.check_red_black(rb)


def test_red_red_is_reported():
    rb = _build(RedBlackModel, [2, 1, 3, 4])
    three_id = rb.search(3).node_id
    rb._nodes[three_id]["color"] = Color.RED
    with pytest.raises(TreeInvariantError, match="red right child"):
        invariants.check_red_black(rb)


def test_black_height_mismatch_is_reported():
    rb = _build(RedBlackModel, [2, 1, 3])
    rb._nodes[rb.search(1).node_id]["color"] = Color.BLACK
    with pytest.raises(TreeInvariantError, match="black-heights"):
        invariants.check_red_black(rb)


def test_checked_config_validates_after_mutation(monkeypatch):
    calls = []
    rb = RedBlackModel(AnimationConfig(check_invariants=True))
    monkeypatch.setattr(rb, "validate", lambda: calls.append("validate"))
    rb.insert(1)
    rb.insert(1)
    rb.search(1)
    rb.delete(1)
    assert calls == ["validate", "validate"]


def test_rotation_without_child_is_a_bug():
    avl = _build(AVLModel, [1])
    with pytest.raises(TreeInvariantError, match="needs a left child"):
        avl._rotate_right(avl.root_id, avl._new_log())
