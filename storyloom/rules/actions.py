"""
Action processing as a pure fold.

apply_actions(actions, state, project) -> new GameState

Actions run strictly in author order, each one seeing the result of the
previous. The input state is never mutated: every handler returns a copy
with fresh collections for the fields it touches. An action that cannot
apply (blank target, unknown type, scene/quest not in the project,
non-numeric arithmetic) is skipped and the rest of the batch still runs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Iterable

from ..state.schema import ActionType, QuestStatus
from . import navigation, quests
from .conditions import current_relationship
from .values import add_numbers, as_flag

if TYPE_CHECKING:
    from ..state.schema import GameState, RuleAction, StaticProject

logger = logging.getLogger(__name__)

# Handler: (action, state, project) -> new state (or the same state when skipped)
ActionHandler = Callable[["RuleAction", "GameState", "StaticProject"], "GameState"]

# Action types that do not need a target id
_UNTARGETED = {ActionType.STOP_SOUND.value}


def apply_actions(
    actions: Iterable["RuleAction"],
    state: "GameState",
    project: "StaticProject",
) -> "GameState":
    """
    Apply an ordered action list and return the resulting state.

    Args:
        actions: Authored actions, applied in order
        state: State before the batch (left untouched)
        project: Static project for scene/quest/character lookups

    Returns:
        State after every applicable action
    """
    for action in actions:
        state = apply_action(action, state, project)
    return state


def apply_action(action: "RuleAction", state: "GameState", project: "StaticProject") -> "GameState":
    """Apply one action; skipped actions return the state unchanged."""
    handler = _HANDLERS.get(action.type)
    if handler is None:
        logger.debug(f"Skipping action {action.id or '?'}: unknown type {action.type!r}")
        return state
    if not action.target_id and action.type not in _UNTARGETED:
        logger.debug(f"Skipping {action.type} action {action.id or '?'}: no target")
        return state
    return handler(action, state, project)


# ─── Inventory & party ──────────────────────────────────────

def _give_item(action, state, project):
    if action.target_id in state.inventory:
        return state
    return state.replace(inventory=[*state.inventory, action.target_id])


def _remove_item(action, state, project):
    if action.target_id not in state.inventory:
        return state
    inventory = list(state.inventory)
    inventory.remove(action.target_id)  # First occurrence only
    return state.replace(inventory=inventory)


def _join_party(action, state, project):
    if action.target_id in state.party:
        return state
    return state.replace(party=[*state.party, action.target_id])


def _leave_party(action, state, project):
    if action.target_id not in state.party:
        return state
    return state.replace(party=[m for m in state.party if m != action.target_id])


# ─── Variables & relationships ──────────────────────────────

def _mod_variable(action, state, project):
    current = state.variable_values.get(action.target_id)
    total = add_numbers(0 if current is None else current, 0 if action.value is None else action.value)
    if total is None:
        logger.debug(f"Skipping mod_variable on {action.target_id}: non-numeric operand")
        return state
    return state.replace(variable_values={**state.variable_values, action.target_id: total})


def _mod_relationship(action, state, project):
    current = current_relationship(state, project, action.target_id)
    total = add_numbers(current, 0 if action.value is None else action.value)
    if total is None:
        logger.debug(f"Skipping mod_relationship on {action.target_id}: non-numeric operand")
        return state
    return state.replace(relationships={**state.relationships, action.target_id: total})


def _set_flag(action, state, project):
    return state.replace(flags={**state.flags, action.target_id: as_flag(action.value)})


# ─── Scene & audio ──────────────────────────────────────────

def _change_scene(action, state, project):
    if project.get_scene(action.target_id) is None:
        logger.debug(f"Skipping change_scene: scene {action.target_id!r} not in project")
        return state
    return navigation.navigate(state, action.target_id)


def _play_sound(action, state, project):
    return state.replace(current_track_url=action.target_id)


def _stop_sound(action, state, project):
    return state.replace(current_track_url=None)


# ─── Quests ─────────────────────────────────────────────────

def _with_quest(state, quest_id, instance):
    if instance is None:
        return state
    return state.replace(quest_states={**state.quest_states, quest_id: instance})


def _start_quest(action, state, project):
    quest = project.get_quest(action.target_id)
    if quest is None:
        logger.debug(f"Skipping start_quest: quest {action.target_id!r} not in project")
        return state
    existing = state.quest_states.get(action.target_id)
    return _with_quest(state, action.target_id, quests.start_instance(quest, existing))


def _advance_quest(action, state, project):
    quest = project.get_quest(action.target_id)
    if quest is None:
        logger.debug(f"Skipping advance_quest: quest {action.target_id!r} not in project")
        return state
    instance = state.quest_states.get(action.target_id)
    return _with_quest(state, action.target_id, quests.advance_instance(quest, instance))


def _end_quest(action, state, project):
    instance = state.quest_states.get(action.target_id)
    return _with_quest(state, action.target_id, quests.finish_instance(instance, QuestStatus.COMPLETED))


def _fail_quest(action, state, project):
    instance = state.quest_states.get(action.target_id)
    return _with_quest(state, action.target_id, quests.finish_instance(instance, QuestStatus.FAILED))


_HANDLERS: dict[str, ActionHandler] = {
    ActionType.GIVE_ITEM.value: _give_item,
    ActionType.REMOVE_ITEM.value: _remove_item,
    ActionType.MOD_VARIABLE.value: _mod_variable,
    ActionType.MOD_RELATIONSHIP.value: _mod_relationship,
    ActionType.JOIN_PARTY.value: _join_party,
    ActionType.LEAVE_PARTY.value: _leave_party,
    ActionType.CHANGE_SCENE.value: _change_scene,
    ActionType.PLAY_SOUND.value: _play_sound,
    ActionType.STOP_SOUND.value: _stop_sound,
    ActionType.START_QUEST.value: _start_quest,
    ActionType.END_QUEST.value: _end_quest,
    ActionType.FAIL_QUEST.value: _fail_quest,
    ActionType.ADVANCE_QUEST.value: _advance_quest,
    ActionType.SET_FLAG.value: _set_flag,
}


def is_known_action(action_type: str) -> bool:
    """Whether the processor has a handler for this type."""
    return action_type in _HANDLERS
