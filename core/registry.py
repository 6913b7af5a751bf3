from typing import Dict, Optional, Type

from avl.avl_model import AVLModel
from bst.bst_model import BSTModel
from core.config import AnimationConfig
from core.errors import TreeVisualizerError
from core.tree_base import BaseTreeModel
from rbtree.rb_model import RedBlackModel

TREE_TYPES: Dict[str, Type[BaseTreeModel]] = {
    BSTModel.kind: BSTModel,
    AVLModel.kind: AVLModel,
    RedBlackModel.kind: RedBlackModel,
}


class UnknownTreeTypeError(TreeVisualizerError, KeyError):
    pass


def is_valid_tree_type(kind: str) -> bool:
    return kind in TREE_TYPES


def display_name(kind: str) -> str:
    model = TREE_TYPES.get(kind)
    return model.display_name if model else "Unknown Tree Type"


def create_tree(kind: str, config: Optional[AnimationConfig] = None) -> BaseTreeModel:
    try:
        model = TREE_TYPES[kind]
    except KeyError:
        raise UnknownTreeTypeError(
            f"Unknown tree type {kind!r} (expected one of: {', '.join(TREE_TYPES)})"
        ) from None
    return model(config)
