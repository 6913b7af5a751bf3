import logging
from typing import Optional, Tuple

from core import invariants
from core.animation import HighlightState
from core.results import MutationResult
from core.tree_base import BaseTreeModel

logger = logging.getLogger(__name__)

CASE_NAMES = {
    "LL": "Left-Left",
    "RR": "Right-Right",
    "LR": "Left-Right",
    "RL": "Right-Left",
}

_NO_VALUE = object()


class AVLModel(BaseTreeModel):
    """
    Height-balanced BST. Heights are recomputed bottom-up while the recursion
    unwinds; rotations hand the new subtree root back to the caller, which
    links it into the grandparent slot (or makes it the tree root).
    """

    kind = "avl"
    display_name = "AVL Tree"
    node_defaults = {"height": 1}

    # ---------- Height bookkeeping ----------

    def height_of(self, node_id: Optional[int]) -> int:
        return 0 if node_id is None else self._nodes[node_id]["height"]

    def balance_factor(self, node_id: Optional[int]) -> int:
        if node_id is None:
            return 0
        node = self._nodes[node_id]
        return self.height_of(node["left"]) - self.height_of(node["right"])

    def _update_height(self, node_id: int):
        node = self._nodes[node_id]
        node["height"] = 1 + max(self.height_of(node["left"]), self.height_of(node["right"]))

    # ---------- Rotations ----------

    def _rotate_right(self, y_id: int, log) -> int:
        """
        Before:        After:
            y            x
           / \\          / \\
          x  T3   -->  T1  y
         / \\              / \\
        T1 T2            T2 T3
        """
        x_id = self._require_child(y_id, "left")
        y, x = self._nodes[y_id], self._nodes[x_id]
        log.status(f"Right rotation at node {y['value']}", brief=True)

        t2 = x["right"]
        x["parent"] = y["parent"]
        x["right"] = y_id
        y["parent"] = x_id
        y["left"] = t2
        if t2 is not None:
            self._nodes[t2]["parent"] = y_id

        # y moved down, so its height must be settled before x's
        self._update_height(y_id)
        self._update_height(x_id)

        log.highlight(x_id, HighlightState.PIVOT)
        return x_id

    def _rotate_left(self, x_id: int, log) -> int:
        y_id = self._require_child(x_id, "right")
        x, y = self._nodes[x_id], self._nodes[y_id]
        log.status(f"Left rotation at node {x['value']}", brief=True)

        t2 = y["left"]
        y["parent"] = x["parent"]
        y["left"] = x_id
        x["parent"] = y_id
        x["right"] = t2
        if t2 is not None:
            self._nodes[t2]["parent"] = x_id

        self._update_height(x_id)
        self._update_height(y_id)

        log.highlight(y_id, HighlightState.PIVOT)
        return y_id

    def _rebalance(self, node_id: int, log, inserted=_NO_VALUE) -> int:
        self._update_height(node_id)
        node = self._nodes[node_id]
        balance = self.balance_factor(node_id)
        log.status(f"Balance factor at {node['value']}: {balance}", brief=True)

        if -1 <= balance <= 1:
            return node_id

        case = self._classify(node_id, balance, inserted)
        log.status(f"{CASE_NAMES[case]} case detected at {node['value']}", brief=True)
        logger.debug("avl %s rotation at %r", case, node["value"])

        if case == "LL":
            return self._rotate_right(node_id, log)
        if case == "RR":
            return self._rotate_left(node_id, log)
        if case == "LR":
            self._link(node_id, "left", self._rotate_left(node["left"], log))
            return self._rotate_right(node_id, log)
        self._link(node_id, "right", self._rotate_right(node["right"], log))
        return self._rotate_left(node_id, log)

    def _classify(self, node_id: int, balance: int, inserted) -> str:
        """
        After an insert the new value tells outer from inner grandchild; after
        a delete there is no such value, so the heavy child's balance decides.
        """
        node = self._nodes[node_id]
        if balance > 1:
            if inserted is _NO_VALUE:
                outer = self.balance_factor(node["left"]) >= 0
            else:
                outer = inserted < self._nodes[node["left"]]["value"]
            return "LL" if outer else "LR"

        if inserted is _NO_VALUE:
            outer = self.balance_factor(node["right"]) <= 0
        else:
            outer = inserted > self._nodes[node["right"]]["value"]
        return "RR" if outer else "RL"

    # ---------- Insert ----------

    def insert(self, value) -> MutationResult:
        log = self._new_log()
        log.status(f"Inserting {value} into {self.display_name}", brief=True)

        new_root, inserted = self._insert_node(self._root, value, log, None)
        self._link(None, None, new_root)

        if inserted:
            log.status(f"Inserted {value} successfully")
        logger.debug("avl insert %r: %s", value, "inserted" if inserted else "duplicate")
        return self._finish(log, changed=inserted)

    def _insert_node(self, node_id, value, log, parent_id) -> Tuple[int, bool]:
        if node_id is None:
            node = self._make_node(value, parent=parent_id)
            log.highlight(node["id"], HighlightState.INSERTED)
            log.status(f"Inserted {value}", brief=True)
            return node["id"], True

        node = self._nodes[node_id]
        log.highlight(node_id, HighlightState.VISITING)

        if value < node["value"]:
            log.status(f"{value} < {node['value']}, going left", brief=True)
            child_id, inserted = self._insert_node(node["left"], value, log, node_id)
            self._link(node_id, "left", child_id)
        elif value > node["value"]:
            log.status(f"{value} > {node['value']}, going right", brief=True)
            child_id, inserted = self._insert_node(node["right"], value, log, node_id)
            self._link(node_id, "right", child_id)
        else:
            log.status(f"{value} already exists, skipping", brief=True)
            return node_id, False

        if not inserted:
            return node_id, False
        return self._rebalance(node_id, log, inserted=value), True

    # ---------- Delete ----------

    def delete(self, value) -> MutationResult:
        log = self._new_log()
        log.status(f"Deleting {value} from {self.display_name}", brief=True)

        new_root, removed = self._delete_node(self._root, value, log)
        self._link(None, None, new_root)

        if removed:
            log.status(f"Deleted {value} successfully")
        logger.debug("avl delete %r: %s", value, "removed" if removed else "not found")
        return self._finish(log, changed=removed)

    def _delete_node(self, node_id, value, log) -> Tuple[Optional[int], bool]:
        if node_id is None:
            log.status(f"Value {value} not found", brief=True)
            return None, False

        node = self._nodes[node_id]
        log.highlight(node_id, HighlightState.VISITING)

        if value < node["value"]:
            child_id, removed = self._delete_node(node["left"], value, log)
            self._link(node_id, "left", child_id)
        elif value > node["value"]:
            child_id, removed = self._delete_node(node["right"], value, log)
            self._link(node_id, "right", child_id)
        else:
            log.highlight(node_id, HighlightState.FOUND)

            if node["left"] is None or node["right"] is None:
                child_id = node["left"] if node["left"] is not None else node["right"]
                if child_id is None:
                    log.status(f"Removing leaf node {node['value']}", brief=True)
                else:
                    log.status(f"Removing {node['value']}, promoting its only child", brief=True)
                self._drop(node_id)
                return child_id, True

            succ_id = self._find_min(node["right"])
            succ_value = self._nodes[succ_id]["value"]
            log.highlight(succ_id, HighlightState.PIVOT)
            log.status(f"Replacing {node['value']} with successor {succ_value}", brief=True)
            node["value"] = succ_value
            child_id, removed = self._delete_node(node["right"], succ_value, log)
            self._link(node_id, "right", child_id)

        if not removed:
            return node_id, False
        return self._rebalance(node_id, log), True

    def validate(self):
        super().validate()
        invariants.check_avl_balance(self)
