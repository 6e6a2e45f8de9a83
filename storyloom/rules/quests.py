"""
Quest progression state machine.

    not_started (absent) → active → completed | failed

Transitions only happen through quest actions (start_quest, advance_quest,
end_quest, fail_quest). Terminal instances never change again; every
transition function returns None when it has nothing to do, so callers
can leave state untouched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..state.schema import QuestInstance, QuestStatus

if TYPE_CHECKING:
    from ..state.schema import GameState, Quest


def quest_status(state: "GameState", quest_id: str) -> QuestStatus:
    """Status of a quest, NOT_STARTED if it has no instance."""
    instance = state.quest_states.get(quest_id)
    return instance.status if instance else QuestStatus.NOT_STARTED


def start_instance(quest: "Quest", existing: QuestInstance | None = None) -> QuestInstance | None:
    """
    Begin (or restart) a quest at its initial stages.

    An active instance is restarted from the top; a finished one is left alone.
    """
    if existing is not None and existing.is_terminal:
        return None
    return QuestInstance(
        status=QuestStatus.ACTIVE,
        current_stage_ids=list(quest.initial_stage_ids),
    )


def advance_instance(quest: "Quest", instance: QuestInstance | None) -> QuestInstance | None:
    """
    Move past the first current stage.

    The pointer follows the stage's first next_stage_ids entry. Branching
    quests diverge through separate, differently-gated advance actions.
    A stage with no successors (or a pointer that no longer resolves)
    completes the quest.
    """
    if instance is None or instance.is_terminal:
        return None

    stage = quest.get_stage(instance.current_stage_ids[0]) if instance.current_stage_ids else None
    if stage is not None and stage.next_stage_ids:
        return QuestInstance(
            status=QuestStatus.ACTIVE,
            current_stage_ids=[stage.next_stage_ids[0]],
        )
    return QuestInstance(
        status=QuestStatus.COMPLETED,
        current_stage_ids=list(instance.current_stage_ids),
    )


def finish_instance(instance: QuestInstance | None, status: QuestStatus) -> QuestInstance | None:
    """Close an active instance as completed or failed."""
    if instance is None or instance.is_terminal:
        return None
    return QuestInstance(status=status, current_stage_ids=list(instance.current_stage_ids))
