"""
Command line front end for the tree engines.

Examples::

    python main.py --tree avl insert:10,20,30 inorder
    python main.py --tree rbtree --steps insert:10,30,20 delete:10
    python main.py --cases test-cases/cases.json

The input layer accepts integers in [-999, 999]; the engines themselves take
any ordered key.
"""

import argparse
import json
import logging
import re
import sys
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from core.animation import AnimationStep
from core.config import AnimationConfig, load_config
from core.errors import TreeVisualizerError
from core.registry import TREE_TYPES, create_tree

logger = logging.getLogger(__name__)

MIN_VALUE = -999
MAX_VALUE = 999
VALUE_OPERATIONS = ("insert", "delete", "search")
TRAVERSALS = ("inorder", "preorder", "postorder")


class InputError(TreeVisualizerError, ValueError):
    """Raised for operations or values the input layer refuses."""


@dataclass
class OperationRecord:
    op: str
    value: Optional[int] = None
    animations: List[AnimationStep] = field(default_factory=list)
    changed: Optional[bool] = None
    found: Optional[bool] = None
    result: Optional[List[Any]] = None

    def summary(self) -> str:
        if self.op == "insert":
            outcome = "inserted" if self.changed else "already present"
        elif self.op == "delete":
            outcome = "deleted" if self.changed else "not found"
        elif self.op == "search":
            outcome = "found" if self.found else "not found"
        else:
            return f"{self.op}: {', '.join(str(v) for v in self.result)}"
        return f"{self.op} {self.value}: {outcome}"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"op": self.op}
        if self.value is not None:
            data["value"] = self.value
        for key in ("changed", "found", "result"):
            if getattr(self, key) is not None:
                data[key] = getattr(self, key)
        data["animations"] = [step.to_dict() for step in self.animations]
        return data


# ---------- Input parsing ----------

def coerce_value(raw) -> int:
    if isinstance(raw, bool):
        raise InputError(f"Value must be an integer, got {raw!r}")
    if isinstance(raw, int):
        value = raw
    else:
        try:
            value = int(str(raw).strip())
        except ValueError:
            raise InputError(f"Value must be an integer, got {raw!r}") from None
    if not MIN_VALUE <= value <= MAX_VALUE:
        raise InputError(f"Value {value} is outside [{MIN_VALUE}, {MAX_VALUE}]")
    return value


def parse_sequence(text: str) -> List[int]:
    if not text:
        return []
    normalized = text.replace("，", ",")
    tokens = [part.strip() for part in re.split(r"[,\s]+", normalized) if part.strip()]
    return [coerce_value(tok) for tok in tokens]


def parse_operation(token: str) -> List[Tuple[str, Optional[int]]]:
    name, _, argument = token.partition(":")
    name = name.strip().lower()

    if name in TRAVERSALS:
        if argument.strip():
            raise InputError(f"{name} takes no value: {token!r}")
        return [(name, None)]

    if name in VALUE_OPERATIONS:
        values = parse_sequence(argument)
        if not values:
            raise InputError(f"{name} needs at least one value, e.g. {name}:5")
        return [(name, value) for value in values]

    raise InputError(f"Unknown operation: {token!r}")


# ---------- Execution ----------

def apply_operation(tree, op: str, value: Optional[int] = None) -> OperationRecord:
    if op == "insert":
        outcome = tree.insert(value)
        return OperationRecord(op, value, outcome.animations, changed=outcome.changed)
    if op == "delete":
        outcome = tree.delete(value)
        return OperationRecord(op, value, outcome.animations, changed=outcome.changed)
    if op == "search":
        outcome = tree.search(value)
        return OperationRecord(op, value, outcome.animations, found=outcome.found)
    if op in TRAVERSALS:
        outcome = tree.traverse(op)
        return OperationRecord(op, animations=outcome.animations, result=outcome.result)
    raise InputError(f"Unknown operation: {op!r}")


def render_levels(tree) -> str:
    """Level-by-level rendering, missing children shown as ``·``."""
    if tree.root_id is None:
        return "<empty>"

    def label(node_id):
        node = tree.node(node_id)
        color = node.get("color")
        return f"{node['value']}{color.value[0].upper()}" if color is not None else str(node["value"])

    lines: List[str] = []
    queue = deque([tree.root_id])
    while queue:
        level = [queue.popleft() for _ in range(len(queue))]
        lines.append(" ".join("·" if node_id is None else label(node_id) for node_id in level))

        next_level = []
        for node_id in level:
            if node_id is None:
                next_level.extend((None, None))
            else:
                node = tree.node(node_id)
                next_level.extend((node["left"], node["right"]))
        if all(node_id is None for node_id in next_level):
            break
        queue.extend(next_level)
    return "\n".join(lines)


# ---------- Case files ----------

def load_cases(path) -> List[Dict[str, Any]]:
    path = Path(path)
    if not path.exists():
        raise InputError(f"Case file not found: {path}")
    try:
        cases = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise InputError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(cases, list):
        raise InputError("Case file must contain a list of cases")
    for index, case in enumerate(cases):
        _check_case(case, index)
    return cases


def _check_case(case, index: int) -> None:
    where = f"Case {index + 1}"
    if not isinstance(case, dict):
        raise InputError(f"{where} must be an object, got {type(case).__name__}")
    steps = case.get("steps", [])
    if not isinstance(steps, list):
        raise InputError(f"{where}: steps must be a list")
    for step in steps:
        if not isinstance(step, list) or not step or len(step) > 2:
            raise InputError(f"{where}: each step must be [op] or [op, value], got {step!r}")
    expect = case.get("expect")
    if not isinstance(expect, dict):
        raise InputError(f"{where}: missing expect object")
    for key in ("type", "value"):
        if key not in expect:
            raise InputError(f"{where}: expect is missing {key!r}")
    if expect["type"] == "search" and "target" not in expect:
        raise InputError(f"{where}: search expect needs a target")


def run_case(case: Dict[str, Any], config: AnimationConfig) -> Tuple[bool, Any, Any]:
    """Returns (passed, expected, actual)."""
    tree = create_tree(case.get("tree", "bst"), config)
    for step in case.get("steps", []):
        op, *args = step
        if op in VALUE_OPERATIONS and not args:
            raise InputError(f"{op} step needs a value: {step!r}")
        apply_operation(tree, op, coerce_value(args[0]) if args else None)

    expect = case["expect"]
    kind = expect["type"]
    if kind in TRAVERSALS:
        actual = tree.traverse(kind).result
    elif kind == "search":
        actual = tree.search(coerce_value(expect["target"])).found
    elif kind == "size":
        actual = len(tree)
    else:
        raise InputError(f"Unknown expect type: {kind!r}")
    return actual == expect["value"], expect["value"], actual


def run_cases(path, config: AnimationConfig) -> int:
    cases = load_cases(path)
    failures = 0
    for index, case in enumerate(cases):
        name = case.get("name", f"case {index + 1}")
        passed, expected, actual = run_case(case, config)
        if passed:
            print(f"PASS {name}")
        else:
            failures += 1
            print(f"FAIL {name}: expected {expected!r}, got {actual!r}")
    print(f"{len(cases) - failures}/{len(cases)} cases passed")
    return 0 if failures == 0 else 1


# ---------- Entry point ----------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run BST / AVL / Red-Black tree operations and print their animation steps.",
    )
    parser.add_argument(
        "operations",
        nargs="*",
        metavar="OP",
        help="insert:V[,V...], delete:V[,V...], search:V, inorder, preorder or postorder.",
    )
    parser.add_argument("--tree", choices=sorted(TREE_TYPES), default="bst")
    parser.add_argument("--config", help="TOML file with an [animation] table.")
    parser.add_argument("--speed", type=float, help="Playback speed multiplier (0.5 - 3.0).")
    parser.add_argument("--format", choices=("text", "json"), default="text", dest="output_format")
    parser.add_argument("--steps", action="store_true", help="Print every animation step.")
    parser.add_argument("--cases", help="Run a JSON case file instead of OPs.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
    )
    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.WARNING))


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    try:
        config = load_config(args.config) if args.config else AnimationConfig()
        if args.speed is not None:
            config = config.with_speed(args.speed)
    except TreeVisualizerError as error:
        logger.error("%s", error)
        return 2

    if args.cases:
        try:
            return run_cases(args.cases, config)
        except TreeVisualizerError as error:
            logger.error("%s", error)
            return 2

    if not args.operations:
        parser.error("no operations given")

    try:
        operations = [item for token in args.operations for item in parse_operation(token)]
    except InputError as error:
        parser.error(str(error))

    tree = create_tree(args.tree, config)
    logger.info("Running %d operation(s) on %s", len(operations), tree.display_name)
    try:
        records = [apply_operation(tree, op, value) for op, value in operations]
    except TreeVisualizerError as error:
        logger.error("%s", error)
        return 1

    if args.output_format == "json":
        print(
            json.dumps(
                {
                    "tree": tree.kind,
                    "operations": [record.to_dict() for record in records],
                    "treeData": tree.get_tree_data(),
                },
                ensure_ascii=False,
            )
        )
        return 0

    for record in records:
        print(record.summary())
        if args.steps:
            for step in record.animations:
                print(f"  {step.describe()}")
    print(f"{tree.display_name}: {len(tree)} node(s), height {tree.height}")
    print(render_levels(tree))
    return 0


if __name__ == "__main__":
    sys.exit(main())
