"""
Condition evaluation as pure functions.

evaluate(condition, state, project) -> bool never raises. Anything the
evaluator cannot interpret (unknown type, unknown operator, blank target)
evaluates to True, so a half-authored condition never locks the player out.
The project validator reports those cases to authors instead.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from ..state.schema import ConditionOperator, ConditionType, LogicOperator, QuestStatus
from .values import compare

if TYPE_CHECKING:
    from ..state.schema import GameState, RuleCondition, StaticProject

logger = logging.getLogger(__name__)


def evaluate(condition: "RuleCondition", state: "GameState", project: "StaticProject") -> bool:
    """
    Evaluate a single condition against the current state.

    Args:
        condition: The authored condition
        state: Current game state
        project: Static project (for character defaults)

    Returns:
        Whether the condition holds
    """
    if not condition.target_id:
        return True

    evaluator = _EVALUATORS.get(condition.type)
    if evaluator is None:
        logger.debug(f"Condition type {condition.type!r} unknown, failing open")
        return True

    result = evaluator(condition, state, project)
    if result is None:
        logger.debug(
            f"Operator {condition.operator!r} not valid for {condition.type} condition, failing open"
        )
        return True
    return result


def evaluate_all(
    conditions: Iterable["RuleCondition"],
    state: "GameState",
    project: "StaticProject",
    logic: str = LogicOperator.AND.value,
) -> bool:
    """
    Combine a condition list.

    AND: every condition holds (an empty list holds).
    OR: any condition holds, and an empty list also holds.
    Any logic value other than OR is treated as AND.
    """
    results = [evaluate(c, state, project) for c in conditions]
    if logic == LogicOperator.OR:
        return not results or any(results)
    return all(results)


# ─── Per-type evaluators ────────────────────────────────────
# Each returns None when the operator is not one it understands.

def _evaluate_variable(condition, state, project) -> bool | None:
    current = state.variable_values.get(condition.target_id, 0)
    return compare(current, condition.operator, condition.value)


def _evaluate_item(condition, state, project) -> bool | None:
    held = condition.target_id in state.inventory
    if condition.operator == ConditionOperator.HAS:
        return held
    if condition.operator == ConditionOperator.HAS_NOT:
        return not held
    return None


def _evaluate_relationship(condition, state, project) -> bool | None:
    return compare(current_relationship(state, project, condition.target_id), condition.operator, condition.value)


def _evaluate_quest(condition, state, project) -> bool | None:
    instance = state.quest_states.get(condition.target_id)
    if condition.operator == ConditionOperator.QUEST_STAGE:
        return instance is not None and condition.value in instance.current_stage_ids
    if condition.operator in (ConditionOperator.QUEST_STATUS, ConditionOperator.EQ):
        status = instance.status if instance else QuestStatus.NOT_STARTED
        return status.value == condition.value
    return None


def _evaluate_scene(condition, state, project) -> bool | None:
    if condition.operator == ConditionOperator.AT_SCENE:
        return state.current_scene_id == condition.target_id
    return None


def _evaluate_flag(condition, state, project) -> bool | None:
    is_set = state.flags.get(condition.target_id, False)
    if condition.operator == ConditionOperator.SET:
        return is_set
    if condition.operator == ConditionOperator.NOT_SET:
        return not is_set
    return None


_EVALUATORS = {
    ConditionType.VARIABLE.value: _evaluate_variable,
    ConditionType.ITEM.value: _evaluate_item,
    ConditionType.RELATIONSHIP.value: _evaluate_relationship,
    ConditionType.QUEST.value: _evaluate_quest,
    ConditionType.SCENE.value: _evaluate_scene,
    ConditionType.FLAG.value: _evaluate_flag,
}


def current_relationship(state: "GameState", project: "StaticProject", character_id: str):
    """Relationship score, falling back to the character's authored start value."""
    if character_id in state.relationships:
        return state.relationships[character_id]
    character = project.get_character(character_id)
    return character.initial_relationship if character else 0
