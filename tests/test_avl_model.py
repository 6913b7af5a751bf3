import math
import random

import pytest

from core.animation import HighlightState, StepType


def _shape(tree):
    root = tree.node(tree.root_id)
    left = tree.value_of(root["left"]) if root["left"] is not None else None
    right = tree.value_of(root["right"]) if root["right"] is not None else None
    return root["value"], left, right


def _messages(outcome):
    return [step.message for step in outcome.animations if step.type is StepType.UPDATE_STATUS]


@pytest.mark.parametrize(
    "values, case",
    [
        ([10, 20, 30], "Right-Right case detected at 10"),
        ([30, 10, 20], "Left-Right case detected at 30"),
        ([30, 20, 10], "Left-Left case detected at 30"),
        ([10, 30, 20], "Right-Left case detected at 10"),
    ],
)
def test_three_inserts_rebalance_to_20(make_tree, values, case):
    avl = make_tree("avl", values[:2])
    outcome = avl.insert(values[2])

    assert _shape(avl) == (20, 10, 30)
    assert case in _messages(outcome)
    root = avl.node(avl.root_id)
    assert root["height"] == 2
    assert avl.node(root["left"])["parent"] == avl.root_id
    assert avl.node(root["right"])["parent"] == avl.root_id


def test_double_rotation_emits_both_rotations_in_order(make_tree):
    avl = make_tree("avl", [30, 10])
    outcome = avl.insert(20)
    rotations = [m for m in _messages(outcome) if "rotation at node" in m]
    assert rotations == ["Left rotation at node 10", "Right rotation at node 30"]

    pivots = [step for step in outcome.animations if step.state is HighlightState.PIVOT]
    assert [avl.value_of(step.node_id) for step in pivots] == [20, 20]


def test_balance_factor_reported_while_unwinding(make_tree):
    avl = make_tree("avl", [10])
    outcome = avl.insert(5)
    assert "Balance factor at 10: 1" in _messages(outcome)
    assert avl.balance_factor(avl.root_id) == 1
    assert avl.height_of(None) == 0


def test_delete_uses_left_child_balance_for_single_rotation(make_tree):
    avl = make_tree("avl", [20, 10, 30, 5])
    avl.delete(30)
    assert _shape(avl) == (10, 5, 20)


def test_delete_uses_left_child_balance_for_double_rotation(make_tree):
    avl = make_tree("avl", [20, 10, 30, 15])
    outcome = avl.delete(30)
    assert _shape(avl) == (15, 10, 20)
    assert "Left-Right case detected at 20" in _messages(outcome)


def test_delete_mirror_cases(make_tree):
    avl = make_tree("avl", [20, 10, 30, 40])
    avl.delete(10)
    assert _shape(avl) == (30, 20, 40)

    avl = make_tree("avl", [20, 10, 30, 25])
    avl.delete(10)
    assert _shape(avl) == (25, 20, 30)


def test_delete_two_children_keeps_node_id(make_tree):
    avl = make_tree("avl", [20, 10, 30, 25, 35])
    root_id = avl.root_id
    avl.delete(20)
    assert avl.root_id == root_id
    assert avl.value_of(root_id) == 25
    assert avl.inorder_traversal().result == [10, 25, 30, 35]


def test_delete_missing_value(make_tree):
    avl = make_tree("avl", [1, 2, 3])
    before = avl.snapshot()
    outcome = avl.delete(99)
    assert outcome.changed is False
    assert "Value 99 not found" in _messages(outcome)
    assert avl.snapshot() == before


def test_duplicate_insert_is_skipped(make_tree):
    avl = make_tree("avl", [1, 2, 3])
    outcome = avl.insert(2)
    assert outcome.changed is False
    assert "2 already exists, skipping" in _messages(outcome)
    assert len(avl) == 3


def test_sorted_inserts_stay_logarithmic(make_tree):
    avl = make_tree("avl", range(200))
    assert avl.height <= math.ceil(1.44 * math.log2(200 + 2))
    assert avl.inorder_traversal().result == list(range(200))


@pytest.mark.parametrize("seed", [3, 17, 2024])
def test_random_sequences_keep_height_bound(make_tree, seed):
    rng = random.Random(seed)
    avl = make_tree("avl")
    present = set()
    for _ in range(400):
        value = rng.randint(-100, 100)
        if value in present and rng.random() < 0.6:
            avl.delete(value)
            present.discard(value)
        else:
            avl.insert(value)
            present.add(value)
        n = len(avl)
        assert n == len(present)
        assert avl.height <= math.ceil(1.44 * math.log2(n + 2))
    assert list(avl) == sorted(present)
