"""
Choice gating and resolution.

A choice is available when its conditions pass under its logic operator.
Resolution re-checks availability itself, so a gated choice can never
reach the action processor no matter what the caller thought it saw.
else_actions are carried on the model but nothing fires them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .actions import apply_actions
from .conditions import evaluate_all

if TYPE_CHECKING:
    from ..state.schema import Choice, GameState, Scene, StaticProject


@dataclass
class ChoiceResolution:
    """Outcome of resolving one choice."""
    choice_id: str
    applied: bool  # False when the choice was gated; state is then unchanged
    state: "GameState"


@dataclass
class ChoiceOption:
    """A scene choice paired with its current availability, for front ends."""
    choice: "Choice"
    available: bool

    @property
    def id(self) -> str:
        return self.choice.id

    @property
    def text(self) -> str:
        return self.choice.text


def is_available(choice: "Choice", state: "GameState", project: "StaticProject") -> bool:
    """Whether the player may take this choice now."""
    return evaluate_all(choice.conditions, state, project, logic=choice.logic_operator)


def resolve_choice(choice: "Choice", state: "GameState", project: "StaticProject") -> ChoiceResolution:
    """Apply a choice's actions if, and only if, it is available."""
    if not is_available(choice, state, project):
        return ChoiceResolution(choice_id=choice.id, applied=False, state=state)
    return ChoiceResolution(
        choice_id=choice.id,
        applied=True,
        state=apply_actions(choice.actions, state, project),
    )


def available_choices(
    scene: "Scene | None",
    state: "GameState",
    project: "StaticProject",
) -> list[ChoiceOption]:
    """Every choice on the scene with its availability, in authored order."""
    if scene is None:
        return []
    return [ChoiceOption(choice=c, available=is_available(c, state, project)) for c in scene.choices]
