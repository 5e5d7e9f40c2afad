"""Withdrawal stage machine - ordered checkpoints a withdrawal passes through"""

from typing import List, Sequence
from ccb_gateway.domain.models import Stage, StageTransition
from ccb_gateway.domain.exceptions import ValidationError, StageAlreadyCompletedError

STAGE_NAMES = tuple(f"stage{i}" for i in range(1, 11))


def build_stages(count: int, confirmed: int = 1) -> List[Stage]:
    """
    Generate the ordered stage list for a new withdrawal.

    Args:
        count: Number of stages, 1 to len(STAGE_NAMES)
        confirmed: Leading stages marked complete at creation (default 1:
            the debit itself confirms stage1)

    Example:
        build_stages(3) → [stage1 ✓, stage2, stage3]
    """
    if not 1 <= count <= len(STAGE_NAMES):
        raise ValidationError("stage_count", f"Stage count must be between 1 and {len(STAGE_NAMES)}")
    if not 0 <= confirmed <= count:
        raise ValidationError("confirmed", "Confirmed stages cannot exceed stage count")

    return [Stage(name=name, completed=i < confirmed) for i, name in enumerate(STAGE_NAMES[:count])]


def stage_index(stages: Sequence[Stage], name: str) -> int:
    for i, stage in enumerate(stages):
        if stage.name == name:
            return i
    raise ValidationError("current_stage", f"Stage {name} is not part of this withdrawal")


def advance_stage(stages: Sequence[Stage], current_stage: str) -> StageTransition:
    """
    Complete the current stage and point at the next one.

    The current stage must not already be complete; a repeated call without
    intervening progress is rejected rather than replayed. Stages are never
    reverted, so only the entry at current_stage changes.

    Raises:
        StageAlreadyCompletedError: current stage is already complete
        ValidationError: current_stage does not name an entry
    """
    index = stage_index(stages, current_stage)
    if stages[index].completed:
        raise StageAlreadyCompletedError(current_stage)

    next_stage = stages[index + 1].name if index < len(stages) - 1 else None
    return StageTransition(completed_stage=current_stage, next_stage=next_stage)


def apply_transition(stages: Sequence[Stage], transition: StageTransition) -> List[Stage]:
    """Return a new stage list with the transition's stage marked complete"""
    return [
        Stage(name=s.name, completed=s.completed or s.name == transition.completed_stage)
        for s in stages
    ]


def is_consistent(stages: Sequence[Stage], current_stage: str) -> bool:
    """Every stage before current_stage is complete and none after it is"""
    index = stage_index(stages, current_stage)
    return all(s.completed for s in stages[:index]) and not any(s.completed for s in stages[index + 1:])
