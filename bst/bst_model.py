import logging

from core.animation import HighlightState
from core.results import MutationResult
from core.tree_base import BaseTreeModel

logger = logging.getLogger(__name__)


class BSTModel(BaseTreeModel):
    """
    简单的二叉搜索树数据模型：不做任何平衡，只维护有序性与父指针。
    """

    kind = "bst"
    display_name = "Binary Search Tree"

    def insert(self, value) -> MutationResult:
        log = self._new_log()
        log.status(f"Inserting {value} into {self.display_name}", brief=True)

        if self._root is None:
            node = self._make_node(value)
            self._root = node["id"]
            log.highlight(node["id"], HighlightState.INSERTED)
            log.status(f"Inserted {value} as root node")
            logger.debug("bst insert %r as root (node %s)", value, node["id"])
            return self._finish(log, changed=True)

        parent_id, existing_id = self._descend(value, log)
        if existing_id is not None:
            log.status(f"Value {value} already exists in the tree")
            logger.debug("bst insert %r: duplicate of node %s", value, existing_id)
            return self._finish(log, changed=False)

        parent = self._nodes[parent_id]
        side = "left" if value < parent["value"] else "right"
        node = self._make_node(value)
        self._link(parent_id, side, node["id"])

        log.highlight(node["id"], HighlightState.INSERTED)
        log.status(f"Inserted {value} as {side} child of {parent['value']}")
        logger.debug("bst insert %r under %r (%s)", value, parent["value"], side)
        return self._finish(log, changed=True)

    def delete(self, value) -> MutationResult:
        log = self._new_log()
        log.status(f"Deleting {value}", brief=True)

        parent_id, target_id = self._descend(value, log)
        if target_id is None:
            log.status(f"{value} not found for deletion")
            logger.debug("bst delete %r: not found", value)
            return self._finish(log, changed=False)

        log.highlight(target_id, HighlightState.DELETING)
        target = self._nodes[target_id]

        # 2 children → 用右子树最左节点的值覆盖，再删除该后继节点
        if target["left"] is not None and target["right"] is not None:
            succ_id = self._find_min(target["right"])
            successor = self._nodes[succ_id]
            log.highlight(succ_id, HighlightState.PIVOT)
            log.status(f"Replacing {value} with {successor['value']}")
            target["value"] = successor["value"]
            target_id, target = succ_id, successor
            parent_id = target["parent"]

        # 0 or 1 child
        if target["left"] is None and target["right"] is None:
            log.status(f"Deleting leaf node {target['value']}")
            replacement = None
        elif target["left"] is None:
            log.status(f"Deleting {target['value']} (only right child)")
            replacement = target["right"]
        else:
            log.status(f"Deleting {target['value']} (only left child)")
            replacement = target["left"]

        self._replace_child(parent_id, target_id, replacement)
        self._drop(target_id)

        log.status(f"Deleted {value} successfully")
        logger.debug("bst delete %r: removed node %s", value, target_id)
        return self._finish(log, changed=True)
