from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from core.config import AnimationConfig


class StepType(str, Enum):
    UPDATE_STATUS = "update-status"
    HIGHLIGHT_NODE = "highlight-node"
    RECOLOR_NODE = "recolor-node"
    REPOSITION = "reposition"
    SHOW_VALUE = "show-value"


class HighlightState(str, Enum):
    DEFAULT = "default"
    CURRENT = "current"
    PATH = "path"
    VISITED = "visited"
    VISITING = "visiting"
    SEARCHING = "searching"
    PIVOT = "pivot"
    FOUND = "found"
    INSERTED = "inserted"
    DELETING = "deleting"


class Color(str, Enum):
    RED = "red"
    BLACK = "black"


@dataclass(frozen=True)
class NodePosition:
    node_id: int
    x: float
    y: float

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.node_id, "x": self.x, "y": self.y}


@dataclass(frozen=True)
class AnimationStep:
    """
    One observable event of a tree operation. Steps are pure data: the
    engines only produce them, an external player decides how to show them.
    """

    type: StepType
    duration: int
    message: Optional[str] = None
    node_id: Optional[int] = None
    state: Optional[HighlightState] = None
    color: Optional[Color] = None
    value: Any = None
    node_updates: Tuple[NodePosition, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type.value, "duration": self.duration}
        if self.type is StepType.UPDATE_STATUS:
            data["message"] = self.message
        elif self.type is StepType.HIGHLIGHT_NODE:
            data["nodeId"] = self.node_id
            data["state"] = self.state.value
        elif self.type is StepType.RECOLOR_NODE:
            data["nodeId"] = self.node_id
            data["color"] = self.color.value
        elif self.type is StepType.SHOW_VALUE:
            data["nodeId"] = self.node_id
            data["value"] = self.value
        elif self.type is StepType.REPOSITION:
            data["nodeUpdates"] = [pos.to_dict() for pos in self.node_updates]
        return data

    def describe(self) -> str:
        if self.type is StepType.UPDATE_STATUS:
            detail = self.message
        elif self.type is StepType.HIGHLIGHT_NODE:
            detail = f"node {self.node_id} -> {self.state.value}"
        elif self.type is StepType.RECOLOR_NODE:
            detail = f"node {self.node_id} -> {self.color.value}"
        elif self.type is StepType.SHOW_VALUE:
            detail = f"node {self.node_id} = {self.value}"
        else:
            detail = f"{len(self.node_updates)} node(s)"
        return f"[{self.type.value}] {detail} ({self.duration} ms)"


class AnimationToolkit:
    """
    Builds ``AnimationStep`` records for the engines. Each step type has a
    base duration in ``AnimationConfig``; the toolkit divides it by the
    playback speed so callers never scale durations themselves.
    """

    def __init__(self, config: Optional[AnimationConfig] = None):
        self.config = config or AnimationConfig()

    def _duration(self, base_ms):
        return self.config.scale_duration(base_ms)

    def status(self, message: str, brief: bool = False, duration: Optional[int] = None):
        if duration is None:
            duration = self.config.brief_status_ms if brief else self.config.status_ms
        return AnimationStep(StepType.UPDATE_STATUS, self._duration(duration), message=message)

    def highlight(self, node_id: int, state=HighlightState.CURRENT, duration: Optional[int] = None):
        state = HighlightState(state)
        if duration is None:
            duration = self.config.pivot_ms if state is HighlightState.PIVOT else self.config.highlight_ms
        return AnimationStep(
            StepType.HIGHLIGHT_NODE, self._duration(duration), node_id=node_id, state=state
        )

    def recolor(self, node_id: int, color, duration: Optional[int] = None):
        if duration is None:
            duration = self.config.recolor_ms
        return AnimationStep(
            StepType.RECOLOR_NODE, self._duration(duration), node_id=node_id, color=Color(color)
        )

    def show_value(self, node_id: int, value, duration: Optional[int] = None):
        if duration is None:
            duration = self.config.show_value_ms
        return AnimationStep(StepType.SHOW_VALUE, self._duration(duration), node_id=node_id, value=value)

    def reposition(self, updates: Iterable[NodePosition], duration: Optional[int] = None):
        if duration is None:
            duration = self.config.reposition_ms
        return AnimationStep(
            StepType.REPOSITION, self._duration(duration), node_updates=tuple(updates)
        )


class StepLog:
    """
    Append-only list of steps for a single operation. Helpers receive the
    log explicitly and append to it in execution order.
    """

    def __init__(self, toolkit: AnimationToolkit):
        self.toolkit = toolkit
        self._steps: List[AnimationStep] = []

    def __len__(self):
        return len(self._steps)

    @property
    def steps(self) -> List[AnimationStep]:
        return list(self._steps)

    def append(self, step: AnimationStep):
        self._steps.append(step)
        return step

    def extend(self, steps: Iterable[AnimationStep]):
        self._steps.extend(steps)

    def status(self, message, brief=False, duration=None):
        return self.append(self.toolkit.status(message, brief=brief, duration=duration))

    def highlight(self, node_id, state=HighlightState.CURRENT, duration=None):
        return self.append(self.toolkit.highlight(node_id, state, duration=duration))

    def recolor(self, node_id, color, duration=None):
        return self.append(self.toolkit.recolor(node_id, color, duration=duration))

    def show_value(self, node_id, value, duration=None):
        return self.append(self.toolkit.show_value(node_id, value, duration=duration))

    def reposition(self, updates, duration=None):
        return self.append(self.toolkit.reposition(updates, duration=duration))
