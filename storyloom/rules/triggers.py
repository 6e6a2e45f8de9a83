"""
Character trigger resolution.

After every batch of actions the session sweeps all character triggers:

1. Triggers are ordered by priority (highest first); ties keep character
   order, then trigger order within the character.
2. A trigger fires when all of its conditions hold against the state as it
   stands at that moment, including effects of triggers fired earlier in
   the sweep. Its actions go through the action processor.
3. A one-time trigger records its id in triggered_ids and is never
   evaluated again.

Cascades: one trigger's actions can satisfy another's conditions, so the
sweep repeats in passes until a pass fires nothing. Each trigger fires at
most once per sweep, and the sweep stops after MAX_TRIGGER_PASSES passes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .actions import apply_actions
from .conditions import evaluate_all

if TYPE_CHECKING:
    from ..state.schema import Character, CharacterTrigger, GameState, StaticProject

logger = logging.getLogger(__name__)


MAX_TRIGGER_PASSES = 5


@dataclass
class TriggerSweep:
    """Result of a trigger sweep."""
    state: "GameState"
    fired: list[str] = field(default_factory=list)  # Trigger ids in firing order
    passes: int = 0
    truncated: bool = False  # Pass limit hit with triggers still eligible

    @property
    def has_effects(self) -> bool:
        return bool(self.fired)


def ordered_triggers(project: "StaticProject") -> list[tuple["Character", "CharacterTrigger"]]:
    """All triggers in evaluation order (sorted() is stable, so ties keep authored order)."""
    pairs = [(character, trigger) for character in project.characters for trigger in character.triggers]
    return sorted(pairs, key=lambda pair: -pair[1].priority)


def is_eligible(trigger: "CharacterTrigger", state: "GameState") -> bool:
    """False once a one-time trigger has fired."""
    return not (trigger.is_one_time and trigger.id in state.triggered_ids)


def resolve_triggers(
    state: "GameState",
    project: "StaticProject",
    max_passes: int = MAX_TRIGGER_PASSES,
) -> TriggerSweep:
    """
    Run a full trigger sweep.

    Args:
        state: State right after an action batch
        project: Static project holding the characters
        max_passes: Pass limit for cascading triggers

    Returns:
        TriggerSweep with the final state and what fired
    """
    candidates = ordered_triggers(project)
    sweep = TriggerSweep(state=state)
    if not candidates:
        return sweep

    fired_this_sweep: set[int] = set()

    while sweep.passes < max_passes:
        sweep.passes += 1
        fired_in_pass = False

        for index, (character, trigger) in enumerate(candidates):
            if index in fired_this_sweep or not is_eligible(trigger, sweep.state):
                continue
            if not evaluate_all(trigger.conditions, sweep.state, project):
                continue

            next_state = apply_actions(trigger.actions, sweep.state, project)
            if trigger.is_one_time:
                next_state = next_state.replace(triggered_ids=[*next_state.triggered_ids, trigger.id])

            sweep.state = next_state
            sweep.fired.append(trigger.id)
            fired_this_sweep.add(index)
            fired_in_pass = True
            logger.debug(f"Trigger {trigger.id} ({character.id}) fired on pass {sweep.passes}")

        if not fired_in_pass:
            return sweep

    # Out of passes: anything still ready to fire is dropped for this sweep
    sweep.truncated = any(
        index not in fired_this_sweep
        and is_eligible(trigger, sweep.state)
        and evaluate_all(trigger.conditions, sweep.state, project)
        for index, (_, trigger) in enumerate(candidates)
    )
    if sweep.truncated:
        logger.warning(f"Trigger sweep stopped after {max_passes} passes with triggers still pending")
    return sweep
