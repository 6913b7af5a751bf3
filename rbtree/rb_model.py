"""
Red-Black tree engine.

Properties kept after every public operation:

1. every node is red or black
2. the root is black
3. empty child slots count as black
4. a red node never has a red child
5. every root-to-empty-slot path crosses the same number of black nodes

Rotations relink the grandparent slot themselves (and move the root when
needed) because the fix-up loops walk upwards through parent links instead
of returning subtrees to a caller.
"""

import logging
from typing import Optional

from core import invariants
from core.animation import Color, HighlightState
from core.errors import TreeInvariantError
from core.results import MutationResult
from core.tree_base import BaseTreeModel

logger = logging.getLogger(__name__)

RED = Color.RED
BLACK = Color.BLACK


def _opposite(side: str) -> str:
    return "right" if side == "left" else "left"


class RedBlackModel(BaseTreeModel):
    kind = "rbtree"
    display_name = "Red-Black Tree"
    node_defaults = {"color": RED}

    def color_of(self, node_id: Optional[int]) -> Color:
        return BLACK if node_id is None else self._nodes[node_id]["color"]

    def _set_color(self, node_id: int, color: Color, log):
        self._nodes[node_id]["color"] = color
        log.recolor(node_id, color)

    # ---------- Rotations ----------

    def _rotate(self, node_id: int, direction: str, log):
        """``direction`` is the way ``node_id`` moves: "left" lifts its right child."""
        riser_side = _opposite(direction)
        riser_id = self._require_child(node_id, riser_side)
        node = self._nodes[node_id]
        log.status(f"{direction.capitalize()} rotation at node {node['value']}", brief=True)

        parent_id = node["parent"]
        slot = self._side_of(node_id)

        self._link(node_id, riser_side, self._nodes[riser_id][direction])
        self._link(parent_id, slot, riser_id)
        self._link(riser_id, direction, node_id)

        log.highlight(riser_id, HighlightState.PIVOT)
        return riser_id

    # ---------- Insert ----------

    def insert(self, value) -> MutationResult:
        log = self._new_log()
        log.status(f"Inserting {value} into {self.display_name}", brief=True)

        if self._root is None:
            node = self._make_node(value)
            self._root = node["id"]
            log.highlight(node["id"], HighlightState.INSERTED)
            self._set_color(node["id"], BLACK, log)
            log.status(f"Inserted {value} as black root", brief=True)
            logger.debug("rbtree insert %r as root", value)
            return self._finish(log, changed=True)

        parent_id, existing_id = self._descend(value, log)
        if existing_id is not None:
            log.status(f"{value} already exists, skipping", brief=True)
            logger.debug("rbtree insert %r: duplicate", value)
            return self._finish(log, changed=False)

        side = "left" if value < self._nodes[parent_id]["value"] else "right"
        node = self._make_node(value)
        self._link(parent_id, side, node["id"])

        log.highlight(node["id"], HighlightState.INSERTED)
        log.status(f"Inserted {value} as red node, checking balance...", brief=True)
        self._fix_insert(node["id"], log)

        logger.debug("rbtree insert %r: done, root is %r", value, self._nodes[self._root]["value"])
        return self._finish(log, changed=True)

    def _fix_insert(self, node_id: int, log):
        nodes = self._nodes
        while True:
            parent_id = nodes[node_id]["parent"]
            if parent_id is None or nodes[parent_id]["color"] is not RED:
                break

            grand_id = nodes[parent_id]["parent"]
            if grand_id is None:
                raise TreeInvariantError(f"Red node {nodes[parent_id]['value']} is the root")

            parent_side = self._side_of(parent_id)
            outer = _opposite(parent_side)
            uncle_id = nodes[grand_id][outer]

            if self.color_of(uncle_id) is RED:
                log.status("Uncle is red, recoloring parent, uncle, and grandparent")
                self._set_color(parent_id, BLACK, log)
                self._set_color(uncle_id, BLACK, log)
                self._set_color(grand_id, RED, log)
                node_id = grand_id
                continue

            if self._side_of(node_id) != parent_side:
                label = "Left-Right" if parent_side == "left" else "Right-Left"
                log.status(f"{label} case: rotate {parent_side} at parent")
                self._rotate(parent_id, parent_side, log)
                # the old parent now hangs below node and carries on as the cursor
                node_id, parent_id = parent_id, node_id

            label = "Left-Left" if parent_side == "left" else "Right-Right"
            log.status(f"{label} case: recolor and rotate {outer}")
            self._set_color(parent_id, BLACK, log)
            self._set_color(grand_id, RED, log)
            self._rotate(grand_id, outer, log)

        root_id = self._root
        if nodes[root_id]["color"] is not BLACK:
            self._set_color(root_id, BLACK, log)
            log.status("Root recolored to black", brief=True)

    # ---------- Delete ----------

    def delete(self, value) -> MutationResult:
        log = self._new_log()
        log.status(f"Deleting {value} from {self.display_name}", brief=True)

        _, target_id = self._descend(value, log)
        if target_id is None:
            log.status(f"Value {value} not found")
            logger.debug("rbtree delete %r: not found", value)
            return self._finish(log, changed=False)

        log.highlight(target_id, HighlightState.FOUND)
        target = self._nodes[target_id]

        if target["left"] is not None and target["right"] is not None:
            succ_id = self._find_min(target["right"])
            succ_value = self._nodes[succ_id]["value"]
            log.highlight(succ_id, HighlightState.PIVOT)
            log.status(f"Replaced {value} with successor {succ_value}", brief=True)
            target["value"] = succ_value
            target_id = succ_id

        removed = self._nodes[target_id]
        child_id = removed["left"] if removed["left"] is not None else removed["right"]
        parent_id = removed["parent"]
        side = self._side_of(target_id)

        log.status(f"Splicing out node {removed['value']}", brief=True)
        self._link(parent_id, side, child_id)
        self._drop(target_id)

        if removed["color"] is BLACK and self._root is not None:
            self._fix_delete(child_id, parent_id, side, log)

        log.status(f"Deleted {value} successfully")
        logger.debug("rbtree delete %r: removed node %s", value, target_id)
        return self._finish(log, changed=True)

    def _fix_delete(self, node_id: Optional[int], parent_id: Optional[int], side: Optional[str], log):
        """
        ``node_id`` carries the extra black. It may be None when a black leaf
        was spliced out; ``parent_id``/``side`` then say where the empty slot is.
        """
        nodes = self._nodes
        while node_id != self._root and self.color_of(node_id) is BLACK:
            if node_id is not None:
                parent_id = nodes[node_id]["parent"]
                side = self._side_of(node_id)
            far = _opposite(side)

            sibling_id = nodes[parent_id][far]
            if sibling_id is None:
                raise TreeInvariantError(
                    f"Double-black slot under {nodes[parent_id]['value']} has no sibling"
                )

            if nodes[sibling_id]["color"] is RED:
                log.status("Sibling is red: recolor sibling and parent, rotate at parent")
                self._set_color(sibling_id, BLACK, log)
                self._set_color(parent_id, RED, log)
                self._rotate(parent_id, side, log)
                sibling_id = nodes[parent_id][far]

            sibling = nodes[sibling_id]
            if self.color_of(sibling[side]) is BLACK and self.color_of(sibling[far]) is BLACK:
                log.status("Sibling has two black children: recolor sibling red, move up")
                self._set_color(sibling_id, RED, log)
                node_id = parent_id
                continue

            if self.color_of(sibling[far]) is BLACK:
                log.status("Sibling's far child is black: recolor and rotate at sibling")
                self._set_color(sibling[side], BLACK, log)
                self._set_color(sibling_id, RED, log)
                self._rotate(sibling_id, far, log)
                sibling_id = nodes[parent_id][far]
                sibling = nodes[sibling_id]

            log.status("Sibling's far child is red: recolor and rotate at parent")
            self._set_color(sibling_id, nodes[parent_id]["color"], log)
            self._set_color(parent_id, BLACK, log)
            self._set_color(sibling[far], BLACK, log)
            self._rotate(parent_id, side, log)
            node_id = self._root

        if node_id is not None and nodes[node_id]["color"] is not BLACK:
            self._set_color(node_id, BLACK, log)

    def validate(self):
        super().validate()
        invariants.check_red_black(self)
