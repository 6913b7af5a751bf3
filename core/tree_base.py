import logging
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from core import invariants
from core.animation import AnimationToolkit, Color, HighlightState, NodePosition, StepLog
from core.config import AnimationConfig
from core.errors import SnapshotError, TreeInvariantError
from core.results import MutationResult, SearchResult, TraversalResult

logger = logging.getLogger(__name__)

TRAVERSAL_ORDERS = {
    "inorder": "Left-Root-Right",
    "preorder": "Root-Left-Right",
    "postorder": "Left-Right-Root",
}


class BaseTreeModel:
    """
    Shared part of the tree engines. Nodes live in an id-keyed arena of plain
    dicts; ``left``/``right``/``parent`` hold node ids, never node objects, so
    views and steps can refer to "this node" across restructuring.
    """

    kind = "tree"
    display_name = "Tree"
    # Extra per-node fields an engine needs, with their initial values.
    node_defaults: Dict[str, Any] = {}

    def __init__(self, config: Optional[AnimationConfig] = None):
        self.config = config or AnimationConfig()
        self.toolkit = AnimationToolkit(self.config)
        self._nodes: Dict[int, Dict[str, Any]] = {}
        self._root: Optional[int] = None
        self._next_id = 0

    # ---------- Read-only accessors ----------

    @property
    def root_id(self) -> Optional[int]:
        return self._root

    @property
    def height(self) -> int:
        if self._root is None:
            return 0
        best = 0
        stack = [(self._root, 1)]
        while stack:
            node_id, depth = stack.pop()
            best = max(best, depth)
            node = self._nodes[node_id]
            for child in (node["left"], node["right"]):
                if child is not None:
                    stack.append((child, depth + 1))
        return best

    def __len__(self):
        return len(self._nodes)

    def __contains__(self, value):
        return self._find_node(value) is not None

    def __iter__(self) -> Iterator[Any]:
        for node_id in self._visit_order("inorder"):
            yield self._nodes[node_id]["value"]

    def node(self, node_id: int) -> Mapping[str, Any]:
        return MappingProxyType(self._nodes[node_id])

    def value_of(self, node_id: int):
        node = self._nodes.get(node_id)
        return node["value"] if node else None

    def node_ids(self) -> List[int]:
        return list(self._nodes)

    # ---------- Bulk helpers ----------

    def clear(self):
        self._nodes.clear()
        self._root = None
        self._next_id = 0

    def create_from_iterable(self, values):
        self.clear()
        steps = []
        for value in values:
            steps.extend(self.insert(value).animations)
        return steps

    def insert(self, value) -> MutationResult:
        raise NotImplementedError

    def delete(self, value) -> MutationResult:
        raise NotImplementedError

    # ---------- Search ----------

    def search(self, value) -> SearchResult:
        log = self._new_log()
        log.status(f"Searching for {value} in {self.display_name}", brief=True)

        _, found_id = self._descend(value, log, HighlightState.SEARCHING)
        if found_id is None:
            log.status(f"{value} not found in the tree")
            logger.debug("%s search %r: miss", self.kind, value)
            return SearchResult(False, log.steps)

        log.highlight(found_id, HighlightState.FOUND)
        log.status(f"Found {value}!")
        logger.debug("%s search %r: node %s", self.kind, value, found_id)
        return SearchResult(True, log.steps, found_id)

    # ---------- Traversals ----------

    def traverse(self, order: str) -> TraversalResult:
        if order not in TRAVERSAL_ORDERS:
            raise ValueError(f"Unknown traversal order: {order!r}")

        log = self._new_log()
        result: List[Any] = []
        log.status(f"Starting {order} traversal ({TRAVERSAL_ORDERS[order]})", brief=True)

        for node_id in self._visit_order(order):
            node = self._nodes[node_id]
            log.highlight(node_id, HighlightState.VISITED, duration=self.config.show_value_ms)
            log.show_value(node_id, node["value"])
            result.append(node["value"])

        joined = " → ".join(str(value) for value in result)
        log.status(f"{order.capitalize()} traversal complete: {joined}")
        return TraversalResult(result, log.steps)

    def inorder_traversal(self) -> TraversalResult:
        return self.traverse("inorder")

    def preorder_traversal(self) -> TraversalResult:
        return self.traverse("preorder")

    def postorder_traversal(self) -> TraversalResult:
        return self.traverse("postorder")

    def _visit_order(self, order: str) -> List[int]:
        # explicit stacks so a degenerate BST cannot hit the recursion limit
        visited: List[int] = []
        if self._root is None:
            return visited

        if order == "inorder":
            stack: List[int] = []
            current = self._root
            while stack or current is not None:
                while current is not None:
                    stack.append(current)
                    current = self._nodes[current]["left"]
                current = stack.pop()
                visited.append(current)
                current = self._nodes[current]["right"]
            return visited

        stack = [self._root]
        while stack:
            node_id = stack.pop()
            visited.append(node_id)
            node = self._nodes[node_id]
            if order == "preorder":
                children = (node["right"], node["left"])
            else:
                children = (node["left"], node["right"])
            stack.extend(child for child in children if child is not None)

        if order == "postorder":
            # root-right-left reversed is left-right-root
            visited.reverse()
        return visited

    # ---------- Snapshots ----------

    def snapshot(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "root": self._root,
            "next_id": self._next_id,
            "nodes": [dict(node) for node in self._nodes.values()],
        }

    def load_snapshot(self, snapshot):
        """
        Replace the tree with ``snapshot``. The snapshot is rebuilt and
        validated on a scratch tree first, so a rejected snapshot leaves this
        tree as it was.
        """
        kind = snapshot.get("kind", self.kind)
        if kind != self.kind:
            raise SnapshotError(f"Cannot load a {kind} snapshot into a {self.kind} tree")

        rebuilt: Dict[int, Dict[str, Any]] = {}
        max_id = -1
        for info in snapshot.get("nodes", []):
            try:
                node_id = info["id"]
                value = info["value"]
            except KeyError as exc:
                raise SnapshotError(f"Snapshot node is missing {exc.args[0]!r}") from None
            if node_id in rebuilt:
                raise SnapshotError(f"Duplicate node id {node_id}")
            node = {
                "id": node_id,
                "value": value,
                "left": info.get("left"),
                "right": info.get("right"),
                "parent": None,
                "x": info.get("x", 0),
                "y": info.get("y", 0),
            }
            for key, default in self.node_defaults.items():
                node[key] = info.get(key, default)
            if "color" in node:
                try:
                    node["color"] = Color(node["color"])
                except ValueError:
                    raise SnapshotError(f"Node {node_id} has invalid color {node['color']!r}") from None
            rebuilt[node_id] = node
            max_id = max(max_id, node_id)

        # parent links are derived from the child links, never copied
        for node in rebuilt.values():
            for side in ("left", "right"):
                child_id = node[side]
                if child_id is None:
                    continue
                child = rebuilt.get(child_id)
                if child is None:
                    raise SnapshotError(f"Node {node['id']} points at unknown node {child_id}")
                if child["parent"] is not None:
                    raise SnapshotError(f"Node {child_id} has more than one parent")
                child["parent"] = node["id"]

        root = snapshot.get("root")
        if root is None:
            if rebuilt:
                raise SnapshotError("Snapshot has nodes but no root")
        else:
            if root not in rebuilt:
                raise SnapshotError(f"Root {root} is not among the snapshot nodes")
            if rebuilt[root]["parent"] is not None:
                raise SnapshotError(f"Root {root} has a parent")

        scratch = type(self)(self.config)
        scratch._nodes = rebuilt
        scratch._root = root
        if len(scratch._visit_order("preorder")) != len(rebuilt):
            raise SnapshotError("Snapshot contains nodes unreachable from the root")
        try:
            scratch.validate()
        except TreeInvariantError as exc:
            raise SnapshotError(f"Snapshot is not a valid {self.display_name}: {exc}") from exc

        self._nodes = rebuilt
        self._root = root
        self._next_id = max(snapshot.get("next_id", 0), max_id + 1)
        logger.debug("%s loaded snapshot with %d node(s)", self.kind, len(rebuilt))

    def clone(self):
        """Deep, structurally independent copy with the same ids, values and metadata."""
        twin = type(self)(self.config)
        twin.load_snapshot(self.snapshot())
        return twin

    def get_tree_data(self) -> Dict[str, List[Dict[str, Any]]]:
        nodes: List[Dict[str, Any]] = []
        edges: List[Dict[str, Any]] = []

        for node_id in self._visit_order("preorder"):
            node = self._nodes[node_id]
            color = node.get("color")
            nodes.append(
                {
                    "id": node_id,
                    "value": node["value"],
                    "color": color.value if color is not None else None,
                    "height": node.get("height"),
                    "x": node["x"],
                    "y": node["y"],
                }
            )
            for side in ("left", "right"):
                if node[side] is not None:
                    edges.append({"from": node_id, "to": node[side], "type": side})

        return {"nodes": nodes, "edges": edges}

    # ---------- Validation ----------

    def validate(self):
        invariants.check_parent_links(self)
        invariants.check_bst_order(self)

    # ---------- Internal helpers ----------

    def _new_log(self) -> StepLog:
        return StepLog(self.toolkit)

    def _finish(self, log: StepLog, changed: bool) -> MutationResult:
        if changed:
            positions = self._assign_positions()
            if positions:
                log.reposition(positions)
            if self.config.check_invariants:
                self.validate()
        return MutationResult(self, log.steps, changed)

    def _assign_positions(self) -> List[NodePosition]:
        """Logical grid: x is the inorder rank, y the depth."""
        positions: List[NodePosition] = []
        stack: List[Tuple[int, int]] = []
        current, depth = self._root, 0
        while stack or current is not None:
            while current is not None:
                stack.append((current, depth))
                current = self._nodes[current]["left"]
                depth += 1
            current, depth = stack.pop()
            node = self._nodes[current]
            node["x"] = len(positions)
            node["y"] = depth
            positions.append(NodePosition(current, node["x"], node["y"]))
            current = node["right"]
            depth += 1
        return positions

    def _make_node(self, value, parent: Optional[int] = None) -> Dict[str, Any]:
        node_id = self._next_id
        self._next_id += 1
        node = {
            "id": node_id,
            "value": value,
            "left": None,
            "right": None,
            "parent": parent,
            "x": 0,
            "y": 0,
        }
        node.update(self.node_defaults)
        self._nodes[node_id] = node
        return node

    def _descend(self, value, log: StepLog, state=HighlightState.VISITING):
        """
        Walk from the root towards ``value``. Returns (last parent id, id of
        the node holding ``value`` or None).
        """
        parent_id = None
        current = self._root
        while current is not None:
            node = self._nodes[current]
            log.highlight(current, state)
            if value < node["value"]:
                log.status(f"{value} < {node['value']}, going left", brief=True)
                parent_id, current = current, node["left"]
            elif value > node["value"]:
                log.status(f"{value} > {node['value']}, going right", brief=True)
                parent_id, current = current, node["right"]
            else:
                return parent_id, current
        return parent_id, None

    def _find_node(self, value) -> Optional[int]:
        current = self._root
        while current is not None:
            node = self._nodes[current]
            if value < node["value"]:
                current = node["left"]
            elif value > node["value"]:
                current = node["right"]
            else:
                return current
        return None

    def _find_min(self, node_id: int) -> int:
        while self._nodes[node_id]["left"] is not None:
            node_id = self._nodes[node_id]["left"]
        return node_id

    def _link(self, parent_id: Optional[int], side: str, child_id: Optional[int]):
        """Put ``child_id`` in ``parent_id``'s slot and keep its parent link in step."""
        if parent_id is None:
            self._root = child_id
        else:
            self._nodes[parent_id][side] = child_id
        if child_id is not None:
            self._nodes[child_id]["parent"] = parent_id

    def _side_of(self, node_id: int) -> Optional[str]:
        parent_id = self._nodes[node_id]["parent"]
        if parent_id is None:
            return None
        parent = self._nodes[parent_id]
        if parent["left"] == node_id:
            return "left"
        if parent["right"] == node_id:
            return "right"
        raise TreeInvariantError(f"Node {node_id} is not a child of its parent {parent_id}")

    def _replace_child(self, parent_id, old_child_id, new_child_id):
        side = None if parent_id is None else self._side_of(old_child_id)
        self._link(parent_id, side, new_child_id)

    def _require_child(self, node_id: int, side: str) -> int:
        child_id = self._nodes[node_id][side]
        if child_id is None:
            raise TreeInvariantError(
                f"Rotation at {self._nodes[node_id]['value']} needs a {side} child"
            )
        return child_id

    def _drop(self, node_id: int):
        del self._nodes[node_id]
