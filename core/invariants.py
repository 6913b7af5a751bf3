"""
Structural validators shared by the engines and the test-suite.

Every check walks the whole tree and raises ``TreeInvariantError`` naming the
first offending node. They are O(n) and meant for debug runs and tests.
"""

from typing import Dict, List, Optional, Tuple

from core.animation import Color
from core.errors import TreeInvariantError


def _walk(tree) -> List[int]:
    """Preorder ids reachable from the root."""
    order: List[int] = []
    root = tree.root_id
    if root is None:
        return order
    stack = [root]
    seen = set()
    while stack:
        node_id = stack.pop()
        if node_id in seen:
            raise TreeInvariantError(f"Node {node_id} is reachable twice (cycle or shared child)")
        seen.add(node_id)
        order.append(node_id)
        node = tree.node(node_id)
        for child in (node["right"], node["left"]):
            if child is not None:
                stack.append(child)
    return order


def check_parent_links(tree):
    root = tree.root_id
    if root is not None and tree.node(root)["parent"] is not None:
        raise TreeInvariantError(f"Root {root} has parent {tree.node(root)['parent']}")

    reachable = _walk(tree)
    for node_id in reachable:
        node = tree.node(node_id)
        for side in ("left", "right"):
            child_id = node[side]
            if child_id is None:
                continue
            if tree.node(child_id)["parent"] != node_id:
                raise TreeInvariantError(
                    f"{side} child {child_id} of node {node_id} points back at "
                    f"{tree.node(child_id)['parent']}"
                )

    if len(reachable) != len(tree):
        raise TreeInvariantError(
            f"{len(tree) - len(reachable)} node(s) are stored but not reachable from the root"
        )


def check_bst_order(tree):
    root = tree.root_id
    if root is None:
        return
    # (node id, exclusive lower bound, exclusive upper bound)
    stack: List[Tuple[int, Optional[object], Optional[object]]] = [(root, None, None)]
    while stack:
        node_id, low, high = stack.pop()
        node = tree.node(node_id)
        value = node["value"]
        if low is not None and not low < value:
            raise TreeInvariantError(f"Node {node_id} ({value}) is not greater than {low}")
        if high is not None and not value < high:
            raise TreeInvariantError(f"Node {node_id} ({value}) is not less than {high}")
        if node["left"] is not None:
            stack.append((node["left"], low, value))
        if node["right"] is not None:
            stack.append((node["right"], value, high))


def check_avl_balance(tree):
    heights: Dict[Optional[int], int] = {None: 0}
    # reversed preorder sees children before their parent
    for node_id in reversed(_walk(tree)):
        node = tree.node(node_id)
        left = heights[node["left"]]
        right = heights[node["right"]]
        height = 1 + max(left, right)
        if node["height"] != height:
            raise TreeInvariantError(
                f"Node {node_id} ({node['value']}) stores height {node['height']}, actual {height}"
            )
        if abs(left - right) > 1:
            raise TreeInvariantError(
                f"Node {node_id} ({node['value']}) has balance factor {left - right}"
            )
        heights[node_id] = height


def check_red_black(tree) -> int:
    """Returns the black-height of the tree (null leaves not counted)."""
    root = tree.root_id
    if root is None:
        return 0
    if tree.node(root)["color"] is not Color.BLACK:
        raise TreeInvariantError(f"Root {root} is {tree.node(root)['color']}")

    black_heights: Dict[Optional[int], int] = {None: 0}
    for node_id in reversed(_walk(tree)):
        node = tree.node(node_id)
        color = node["color"]
        if color not in (Color.RED, Color.BLACK):
            raise TreeInvariantError(f"Node {node_id} has invalid color {color!r}")

        for side in ("left", "right"):
            child_id = node[side]
            if color is Color.RED and child_id is not None and tree.node(child_id)["color"] is Color.RED:
                raise TreeInvariantError(
                    f"Red node {node_id} ({node['value']}) has red {side} child {child_id}"
                )

        left = black_heights[node["left"]]
        right = black_heights[node["right"]]
        if left != right:
            raise TreeInvariantError(
                f"Node {node_id} ({node['value']}) has black-heights {left} (left) and {right} (right)"
            )
        black_heights[node_id] = left + (1 if color is Color.BLACK else 0)

    return black_heights[root]
