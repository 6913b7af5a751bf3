from core.animation import HighlightState, StepType
from bst.bst_model import BSTModel


def _children(tree, value):
    node = tree.node(tree.search(value).node_id)
    left = tree.value_of(node["left"]) if node["left"] is not None else None
    right = tree.value_of(node["right"]) if node["right"] is not None else None
    return left, right


def test_insert_builds_ordered_structure(make_tree):
    bst = make_tree("bst", [5, 3, 7, 2, 4, 6, 8])
    assert bst.value_of(bst.root_id) == 5
    assert _children(bst, 5) == (3, 7)
    assert _children(bst, 3) == (2, 4)
    assert bst.inorder_traversal().result == [2, 3, 4, 5, 6, 7, 8]


def test_delete_leaf_then_search_misses(make_tree):
    bst = make_tree("bst", [5, 3, 7, 2, 4, 6, 8])
    outcome = bst.delete(2)
    assert outcome.changed
    assert outcome.tree is bst
    assert bst.inorder_traversal().result == [3, 4, 5, 6, 7, 8]
    assert bst.search(2).found is False


def test_duplicate_insert_reports_and_keeps_tree(make_tree):
    bst = make_tree("bst", [5, 3, 7])
    before = bst.snapshot()
    outcome = bst.insert(3)
    assert outcome.changed is False
    assert bst.snapshot() == before
    assert outcome.animations[-1].message == "Value 3 already exists in the tree"


def test_delete_two_children_copies_successor_into_node(make_tree):
    bst = make_tree("bst", [5, 3, 7, 6, 8])
    seven_id = bst.search(7).node_id
    eight_id = bst.search(8).node_id

    bst.delete(7)

    assert bst.node(seven_id)["value"] == 8
    assert eight_id not in bst.node_ids()
    assert bst.inorder_traversal().result == [3, 5, 6, 8]
    messages = [step.message for step in bst.delete(5).animations if step.type is StepType.UPDATE_STATUS]
    assert "Replacing 5 with 6" in messages


def test_delete_root_with_single_child_promotes_child(make_tree):
    bst = make_tree("bst", [5, 7, 6])
    bst.delete(5)
    root = bst.node(bst.root_id)
    assert root["value"] == 7
    assert root["parent"] is None
    assert bst.node(root["left"])["parent"] == bst.root_id


def test_delete_missing_value_is_not_an_error(make_tree):
    bst = make_tree("bst", [5, 3])
    outcome = bst.delete(9)
    assert outcome.changed is False
    assert outcome.animations[-1].message == "9 not found for deletion"
    assert len(bst) == 2


def test_search_highlights_path_before_result():
    bst = BSTModel()
    for value in [5, 3, 7, 2, 4]:
        bst.insert(value)
    ids = {value: bst.search(value).node_id for value in (5, 3, 4)}

    outcome = bst.search(4)

    highlights = [
        (step.node_id, step.state)
        for step in outcome.animations
        if step.type is StepType.HIGHLIGHT_NODE
    ]
    assert highlights == [
        (ids[5], HighlightState.SEARCHING),
        (ids[3], HighlightState.SEARCHING),
        (ids[4], HighlightState.SEARCHING),
        (ids[4], HighlightState.FOUND),
    ]
    assert outcome.animations[-1].message == "Found 4!"


def test_search_miss_ends_with_status():
    bst = BSTModel()
    bst.insert(1)
    outcome = bst.search(10)
    assert outcome.found is False
    assert outcome.node_id is None
    assert outcome.animations[-1].message == "10 not found in the tree"


def test_degenerate_tree_traverses_without_recursion_limit():
    size = 1500
    bst = BSTModel()
    bst.load_snapshot(
        {
            "root": 0,
            "nodes": [
                {"id": i, "value": i, "left": None, "right": i + 1 if i + 1 < size else None}
                for i in range(size)
            ],
        }
    )
    assert bst.height == size
    assert bst.inorder_traversal().result == list(range(size))
    assert bst.postorder_traversal().result == list(reversed(range(size)))
    bst.validate()
