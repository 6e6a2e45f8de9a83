"""
Narrative rules as pure functions.

Every function takes the current GameState (and the StaticProject it plays)
and returns a value or a new GameState; nothing here mutates its inputs or
raises for authored data.
"""

from .conditions import evaluate, evaluate_all
from .actions import apply_actions, apply_action
from .choices import (
    ChoiceOption,
    ChoiceResolution,
    available_choices,
    is_available,
    resolve_choice,
)
from .navigation import current_scene, is_ending, navigate, record_visit
from .quests import quest_status
from .triggers import MAX_TRIGGER_PASSES, TriggerSweep, resolve_triggers

__all__ = [
    # Conditions
    "evaluate",
    "evaluate_all",
    # Actions
    "apply_actions",
    "apply_action",
    # Choices
    "ChoiceOption",
    "ChoiceResolution",
    "available_choices",
    "is_available",
    "resolve_choice",
    # Navigation
    "current_scene",
    "is_ending",
    "navigate",
    "record_visit",
    # Quests
    "quest_status",
    # Triggers
    "MAX_TRIGGER_PASSES",
    "TriggerSweep",
    "resolve_triggers",
]
