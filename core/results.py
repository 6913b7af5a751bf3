from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Optional

from core.animation import AnimationStep

if TYPE_CHECKING:
    from core.tree_base import BaseTreeModel


@dataclass
class MutationResult:
    """Outcome of insert/delete. ``changed`` is False for duplicates and misses."""
    tree: "BaseTreeModel"
    animations: List[AnimationStep] = field(default_factory=list)
    changed: bool = False


@dataclass
class SearchResult:
    found: bool
    animations: List[AnimationStep] = field(default_factory=list)
    node_id: Optional[int] = None


@dataclass
class TraversalResult:
    result: List[Any] = field(default_factory=list)
    animations: List[AnimationStep] = field(default_factory=list)
