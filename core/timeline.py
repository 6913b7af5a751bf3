"""Post-processing helpers for finished step lists (delays, timing, checks)."""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from core.animation import AnimationStep, StepType

COMPLEXITY_MULTIPLIERS = {
    "simple": 0.5,
    "medium": 1.0,
    "complex": 1.5,
    "very-complex": 2.0,
}


@dataclass(frozen=True)
class DelayedStep:
    step: AnimationStep
    delay: int


@dataclass(frozen=True)
class TimedStep:
    step: AnimationStep
    start: int
    end: int


def combine_animations(*sequences: Iterable[AnimationStep]) -> List[AnimationStep]:
    combined: List[AnimationStep] = []
    for sequence in sequences:
        combined.extend(sequence)
    return combined


def add_delay(steps: Sequence[AnimationStep], delay: int = 500) -> List[DelayedStep]:
    return [DelayedStep(step, index * delay) for index, step in enumerate(steps)]


def create_timed_sequence(
    steps: Sequence[AnimationStep], base_delay: int = 0, gap: int = 100
) -> List[TimedStep]:
    """Lay steps out back to back, each starting ``gap`` ms after the previous one ends."""
    timed: List[TimedStep] = []
    current = base_delay
    for step in steps:
        timed.append(TimedStep(step, current, current + step.duration))
        current += step.duration + gap
    return timed


def total_duration(steps: Iterable[AnimationStep]) -> int:
    return sum(step.duration for step in steps)


def validate_animation_step(step) -> Tuple[bool, Optional[str]]:
    if not isinstance(step, AnimationStep):
        return False, f"Not an animation step: {step!r}"

    try:
        step_type = StepType(step.type)
    except ValueError:
        return False, f"Invalid animation type: {step.type}"

    if isinstance(step.duration, bool) or not isinstance(step.duration, int) or step.duration <= 0:
        return False, "Duration must be a positive integer"

    if step_type is StepType.UPDATE_STATUS and not step.message:
        return False, "Missing required field: message"
    if step_type in (StepType.HIGHLIGHT_NODE, StepType.RECOLOR_NODE, StepType.SHOW_VALUE):
        if step.node_id is None:
            return False, "Missing required field: node_id"
    if step_type is StepType.HIGHLIGHT_NODE and step.state is None:
        return False, "Missing required field: state"
    if step_type is StepType.RECOLOR_NODE and step.color is None:
        return False, "Missing required field: color"
    if step_type is StepType.REPOSITION and not step.node_updates:
        return False, "Missing required field: node_updates"

    return True, None


def complexity_duration(complexity: str, base: int = 1000) -> int:
    return round(base * COMPLEXITY_MULTIPLIERS.get(complexity, 1.0))
