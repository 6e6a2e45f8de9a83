"""
Play session lifecycle.

The SessionController is the single owner of a session's GameState. Every
operation reads the current value, runs the pure rules over it, and swaps
in the result; nothing else holds a mutable reference to world state.

    controller = SessionController(project, store=MemoryBlobStore())
    controller.start()
    controller.choose("c_open_door")
    await controller.save()
"""

import logging
from dataclasses import dataclass, field

from ..interface.commands import execute_debug_command
from ..rules.actions import apply_actions
from ..rules.choices import ChoiceOption, available_choices, is_available, resolve_choice
from ..rules.conditions import evaluate_all
from ..rules.navigation import current_scene, is_ending, record_visit
from ..rules.triggers import MAX_TRIGGER_PASSES, resolve_triggers
from ..systems.validation import ProjectValidator, ValidationIssue
from .codec import deserialize, serialize
from .errors import (
    ChoiceNotFoundError,
    NoActiveSessionError,
    ProjectError,
    SaveLoadError,
    StateDecodeError,
)
from .event_bus import EventBus, EventType, get_event_bus
from .schema import GameState, RuleAction, Scene, StaticProject
from .store import BlobStore, MemoryBlobStore

logger = logging.getLogger(__name__)

DEFAULT_SAVE_KEY = "quicksave"


@dataclass
class StepOutcome:
    """What a player step (choice or item use) did."""
    applied: bool
    state: GameState
    fired_triggers: list[str] = field(default_factory=list)
    truncated: bool = False  # Trigger sweep hit its pass limit
    reason: str = ""  # Why nothing was applied


class SessionController:
    """
    Owns one play session over a project snapshot.

    Persistence is delegated to a BlobStore implementation:
    - JsonFileBlobStore for production (file-based)
    - MemoryBlobStore for testing (in-memory)

    Lifecycle:
    - start() -> fresh state at the project's start scene
    - choose() / use_item() / execute_debug_command() -> new state
    - reset() -> start over from the same snapshot
    - save() / load() -> async round trip through the store
    """

    def __init__(
        self,
        project: StaticProject,
        store: BlobStore | None = None,
        *,
        bus: EventBus | None = None,
        max_trigger_passes: int = MAX_TRIGGER_PASSES,
        save_key: str = DEFAULT_SAVE_KEY,
    ):
        """
        Initialize with a project.

        Args:
            project: Authored project; snapshotted on each start()
            store: BlobStore for save/load (defaults to in-memory)
            bus: Event bus (defaults to the global one)
            max_trigger_passes: Cascade limit for trigger sweeps
            save_key: Default save slot
        """
        self._source_project = project
        self._project: StaticProject | None = None
        self._state: GameState | None = None
        self.store: BlobStore = store if store is not None else MemoryBlobStore()
        self.bus = bus or get_event_bus()
        self.max_trigger_passes = max_trigger_passes
        self.save_key = save_key

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def state(self) -> GameState | None:
        """Current state, or None before start()."""
        return self._state

    @property
    def project(self) -> StaticProject:
        """The snapshot the session plays (the source project before start())."""
        return self._project or self._source_project

    @property
    def is_active(self) -> bool:
        return self._state is not None

    def _require_state(self) -> GameState:
        if self._state is None:
            raise NoActiveSessionError("No active session. Call start() first.")
        return self._state

    def current_scene(self) -> Scene | None:
        return current_scene(self._require_state(), self.project)

    def choices(self) -> list[ChoiceOption]:
        """Choices on the current scene with availability."""
        state = self._require_state()
        return available_choices(current_scene(state, self.project), state, self.project)

    def is_finished(self) -> bool:
        return is_ending(self.current_scene())

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> GameState:
        """
        Begin a session at the project's start scene.

        Takes a fresh snapshot of the project so later edits to the source
        project do not leak into the running session.

        Raises:
            ProjectError: project has no usable start scene
        """
        project = self._source_project.snapshot()
        start_id = project.start_scene_id
        if not start_id or project.get_scene(start_id) is None:
            raise ProjectError(f"Project has no valid start scene: {start_id!r}")

        self._project = project
        self._state = GameState(
            current_scene_id=start_id,
            variable_values={v.id: v.default_value for v in project.variables},
            current_track_url=project.settings.global_soundtrack_url,
        )
        logger.info(f"Session started for project {project.id or project.name!r} at {start_id}")
        self._emit(EventType.SESSION_STARTED, scene_id=start_id)
        return self._state

    def reset(self) -> GameState:
        """Start over from the beginning. A failed restart keeps the current session."""
        state = self.start()
        self._emit(EventType.SESSION_RESET, scene_id=state.current_scene_id)
        return state

    def stop(self) -> None:
        """End the session, dropping its state."""
        self._state = None
        self._project = None

    def pause(self) -> GameState:
        state = self._require_state()
        if not state.is_paused:
            self._state = state.replace(is_paused=True)
            self._emit(EventType.SESSION_PAUSED)
        return self._state

    def resume(self) -> GameState:
        state = self._require_state()
        if state.is_paused:
            self._state = state.replace(is_paused=False)
            self._emit(EventType.SESSION_RESUMED)
        return self._state

    # -------------------------------------------------------------------------
    # Player steps
    # -------------------------------------------------------------------------

    def choose(self, choice_id: str) -> StepOutcome:
        """
        Resolve a choice on the current scene.

        The choice is re-checked for availability; a gated choice leaves the
        state untouched. Otherwise its actions apply, the scene it was made
        in is pushed to history, and character triggers are swept.

        Raises:
            ChoiceNotFoundError: choice_id is not on the current scene
        """
        state = self._require_state()
        if state.is_paused:
            return StepOutcome(applied=False, state=state, reason="paused")

        scene = current_scene(state, self.project)
        choice = scene.get_choice(choice_id) if scene else None
        if choice is None:
            raise ChoiceNotFoundError(state.current_scene_id, choice_id)

        resolution = resolve_choice(choice, state, self.project)
        if not resolution.applied:
            logger.debug(f"Choice {choice_id} is unavailable; nothing applied")
            return StepOutcome(applied=False, state=state, reason="unavailable")

        next_state = record_visit(resolution.state, state.current_scene_id)
        outcome = self._settle(state, next_state)
        self._emit(EventType.CHOICE_RESOLVED, choice_id=choice_id, scene_id=state.current_scene_id)
        return outcome

    def use_item(self, item_id: str) -> StepOutcome:
        """
        Use an inventory item.

        The item must be held, authored as usable, and pass its use
        conditions. Its use actions apply; a consumable item is then removed.
        """
        state = self._require_state()
        if state.is_paused:
            return StepOutcome(applied=False, state=state, reason="paused")

        item = self.project.get_item(item_id)
        if item is None or item_id not in state.inventory:
            return StepOutcome(applied=False, state=state, reason="not held")
        if not item.is_usable:
            return StepOutcome(applied=False, state=state, reason="not usable")
        if not evaluate_all(item.use_conditions, state, self.project):
            return StepOutcome(applied=False, state=state, reason="conditions not met")

        actions = list(item.use_actions)
        if item.is_consumable:
            actions.append(RuleAction(type="remove_item", target_id=item_id))

        outcome = self._settle(state, apply_actions(actions, state, self.project))
        self._emit(EventType.ITEM_USED, item_id=item_id)
        return outcome

    def is_choice_available(self, choice_id: str) -> bool:
        state = self._require_state()
        scene = current_scene(state, self.project)
        choice = scene.get_choice(choice_id) if scene else None
        return choice is not None and is_available(choice, state, self.project)

    def execute_debug_command(self, command: str) -> str:
        """Run a debug console command. Never raises."""
        if self._state is None:
            return "No active session"
        before = self._state
        after, reply = execute_debug_command(command, before)
        if after is not before:
            self._settle(before, after)
        self._emit(EventType.DEBUG_COMMAND, command=command, reply=reply)
        return reply

    def _settle(self, before: GameState, after: GameState) -> StepOutcome:
        """Sweep triggers over a freshly mutated state and commit the result."""
        sweep = resolve_triggers(after, self.project, max_passes=self.max_trigger_passes)
        self._state = sweep.state
        self._emit_changes(before, sweep.state)
        for trigger_id in sweep.fired:
            self._emit(EventType.TRIGGER_FIRED, trigger_id=trigger_id)
        return StepOutcome(
            applied=True,
            state=sweep.state,
            fired_triggers=list(sweep.fired),
            truncated=sweep.truncated,
        )

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def save(self, key: str | None = None) -> None:
        """
        Write the current state to the store.

        Raises:
            SaveLoadError: the store rejected the write
        """
        state = self._require_state()
        key = key or self.save_key
        try:
            await self.store.set(key, serialize(state))
        except (OSError, ValueError) as e:
            logger.warning(f"Save to {key!r} failed: {e}")
            raise SaveLoadError(key, str(e)) from e
        logger.info(f"Saved session to {key!r}")
        self._emit(EventType.STATE_SAVED, key=key)

    async def load(self, key: str | None = None) -> bool:
        """
        Replace the current state with a saved one.

        Returns False (and changes nothing) when the slot is empty.

        Raises:
            SaveLoadError: the store failed or the saved state is corrupt
        """
        key = key or self.save_key
        try:
            text = await self.store.get(key)
        except (OSError, ValueError) as e:
            logger.warning(f"Load from {key!r} failed: {e}")
            raise SaveLoadError(key, str(e)) from e

        if text is None:
            return False

        try:
            state = deserialize(text)
        except StateDecodeError as e:
            logger.warning(f"Save slot {key!r} is corrupt: {e}")
            raise SaveLoadError(key, str(e)) from e

        if self._project is None:
            self._project = self._source_project.snapshot()
        self._state = state
        logger.info(f"Loaded session from {key!r}")
        self._emit(EventType.STATE_LOADED, key=key, scene_id=state.current_scene_id)
        return True

    async def delete_save(self, key: str | None = None) -> None:
        """
        Remove a save slot. Missing slots are ignored.

        Raises:
            SaveLoadError: the store rejected the key or failed
        """
        key = key or self.save_key
        try:
            await self.store.remove(key)
        except (OSError, ValueError) as e:
            logger.warning(f"Delete of {key!r} failed: {e}")
            raise SaveLoadError(key, str(e)) from e
        logger.info(f"Deleted save {key!r}")

    # -------------------------------------------------------------------------
    # Tooling
    # -------------------------------------------------------------------------

    def validate(self) -> list[ValidationIssue]:
        """Advisory checks over the project."""
        return ProjectValidator().validate(self.project)

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def _emit(self, event_type: EventType, **data) -> None:
        self.bus.emit(event_type, project_id=self.project.id, **data)

    def _emit_changes(self, before: GameState, after: GameState) -> None:
        if before.current_scene_id != after.current_scene_id:
            self._emit(
                EventType.SCENE_CHANGED,
                before=before.current_scene_id,
                after=after.current_scene_id,
            )
        for quest_id, instance in after.quest_states.items():
            previous = before.quest_states.get(quest_id)
            if previous is None or previous.status != instance.status:
                self._emit(
                    EventType.QUEST_STATUS_CHANGED,
                    quest_id=quest_id,
                    before=previous.status.value if previous else "not_started",
                    after=instance.status.value,
                )
