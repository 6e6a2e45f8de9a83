"""
Pydantic models for StoryLoom projects and play sessions.

Two roots live here:
- StaticProject: the authored story (scenes, quests, characters, ...),
  read-only for the length of a session
- GameState: the session's world state, replaced wholesale on every change

Field names are snake_case; every model also accepts and emits the camelCase
keys used by the authoring tool's JSON export (startSceneId, nextStageIds, ...).
Entities reference each other by id only, so scene and stage graphs may cycle.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from pydantic.alias_generators import to_camel


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------
# Type fields on conditions/actions stay plain strings so unknown authored
# types load fine; these enums are the vocabulary the rules understand.

class SceneType(str, Enum):
    NORMAL = "normal"
    CHOICE = "choice"
    END = "end"


class ConditionType(str, Enum):
    VARIABLE = "variable"
    ITEM = "item"
    RELATIONSHIP = "relationship"
    QUEST = "quest"
    SCENE = "scene"
    FLAG = "flag"


class ConditionOperator(str, Enum):
    EQ = "eq"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"
    HAS = "has"
    HAS_NOT = "has_not"
    SET = "set"
    NOT_SET = "not_set"
    AT_SCENE = "at_scene"
    QUEST_STATUS = "quest_status"
    QUEST_STAGE = "quest_stage"


class ActionType(str, Enum):
    GIVE_ITEM = "give_item"
    REMOVE_ITEM = "remove_item"
    MOD_VARIABLE = "mod_variable"
    MOD_RELATIONSHIP = "mod_relationship"
    JOIN_PARTY = "join_party"
    LEAVE_PARTY = "leave_party"
    CHANGE_SCENE = "change_scene"
    PLAY_SOUND = "play_sound"
    STOP_SOUND = "stop_sound"
    START_QUEST = "start_quest"
    END_QUEST = "end_quest"
    FAIL_QUEST = "fail_quest"
    ADVANCE_QUEST = "advance_quest"
    SET_FLAG = "set_flag"


class LogicOperator(str, Enum):
    AND = "AND"
    OR = "OR"


class QuestStatus(str, Enum):
    NOT_STARTED = "not_started"  # Never stored; an absent instance reads as this
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_QUEST_STATUSES = frozenset({QuestStatus.COMPLETED, QuestStatus.FAILED})

# Authored scalar payload of a condition or action
RuleValue = str | int | float | bool | None


class LoomModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# -----------------------------------------------------------------------------
# Rules
# -----------------------------------------------------------------------------

class RuleCondition(LoomModel):
    """Predicate over world state."""
    id: str = ""
    type: str  # ConditionType value; unknown types evaluate to true
    target_id: str | None = None
    operator: str = ConditionOperator.EQ.value
    value: RuleValue = None


class RuleAction(LoomModel):
    """Declarative world-state mutation."""
    id: str = ""
    type: str  # ActionType value; unknown types are skipped
    target_id: str | None = None
    value: RuleValue = None
    volume: float | None = None  # Audio hint for play_sound, unused by the engine


# -----------------------------------------------------------------------------
# Story content
# -----------------------------------------------------------------------------

class Choice(LoomModel):
    """Player-selectable option on a scene."""
    id: str
    text: str = ""
    conditions: list[RuleCondition] = Field(default_factory=list)
    logic_operator: str = LogicOperator.AND.value
    actions: list[RuleAction] = Field(default_factory=list)
    else_actions: list[RuleAction] = Field(default_factory=list)  # Reserved, never executed


class Scene(LoomModel):
    """Narrative node. Type is UI metadata and never gates transitions."""
    id: str
    title: str = ""
    type: str = SceneType.NORMAL.value
    content: str = ""
    choices: list[Choice] = Field(default_factory=list)
    background_url: str = ""
    ambient_url: str | None = None
    tags: list[str] = Field(default_factory=list)

    def get_choice(self, choice_id: str) -> Choice | None:
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None


class QuestStage(LoomModel):
    """Node in a quest's own progression graph."""
    id: str
    title: str = ""
    description: str = ""
    conditions: list[RuleCondition] = Field(default_factory=list)
    completion_actions: list[RuleAction] = Field(default_factory=list)
    next_stage_ids: list[str] = Field(default_factory=list)


class Quest(LoomModel):
    """Authored quest with a stage graph."""
    id: str
    name: str = ""
    description: str = ""
    stages: list[QuestStage] = Field(default_factory=list)
    initial_stage_ids: list[str] = Field(default_factory=list)

    # Carried for round-tripping authored data; the engine never fires these
    start_conditions: list[RuleCondition] = Field(default_factory=list)
    on_start_actions: list[RuleAction] = Field(default_factory=list)
    on_complete_actions: list[RuleAction] = Field(default_factory=list)
    on_fail_actions: list[RuleAction] = Field(default_factory=list)

    def get_stage(self, stage_id: str) -> QuestStage | None:
        for stage in self.stages:
            if stage.id == stage_id:
                return stage
        return None


class CharacterTrigger(LoomModel):
    """Automatic rule owned by a character, checked after every state change."""
    id: str
    name: str = ""
    conditions: list[RuleCondition] = Field(default_factory=list)
    actions: list[RuleAction] = Field(default_factory=list)
    is_one_time: bool = False
    priority: int = 0  # Higher fires first


class Character(LoomModel):
    id: str
    name: str = ""
    role: str = ""
    description: str = ""
    initial_relationship: int | float = 0
    triggers: list[CharacterTrigger] = Field(default_factory=list)


class Item(LoomModel):
    id: str
    name: str = ""
    description: str = ""
    category: str = "misc"
    is_usable: bool = False
    is_consumable: bool = False
    use_conditions: list[RuleCondition] = Field(default_factory=list)
    use_actions: list[RuleAction] = Field(default_factory=list)


class ProjectVariable(LoomModel):
    id: str
    name: str = ""
    type: str = "number"  # boolean, number, string, list, timer
    default_value: Any = 0

    # Declared by the editor; no reset mechanism consumes them
    is_temporary: bool = False
    reset_after_scenes: int = 0


class ProjectSettings(LoomModel):
    """Authoring settings. Unknown editor keys are kept as extras."""
    model_config = ConfigDict(extra="allow")

    is_published: bool = False
    default_language: str = "en"
    global_soundtrack_url: str | None = None  # Track playing when a session starts


class StaticProject(LoomModel):
    """
    Authored story content.

    Collections are lists as authored; id lookups go through indexes built
    once at validation time. The first entity wins on duplicate ids (the
    validator reports duplicates).
    """
    id: str = ""
    name: str = ""
    description: str = ""
    start_scene_id: str = ""
    scenes: list[Scene] = Field(default_factory=list)
    quests: list[Quest] = Field(default_factory=list)
    characters: list[Character] = Field(default_factory=list)
    items: list[Item] = Field(default_factory=list)
    variables: list[ProjectVariable] = Field(default_factory=list)
    settings: ProjectSettings = Field(default_factory=ProjectSettings)

    _scene_index: dict[str, Scene] = PrivateAttr(default_factory=dict)
    _quest_index: dict[str, Quest] = PrivateAttr(default_factory=dict)
    _character_index: dict[str, Character] = PrivateAttr(default_factory=dict)
    _item_index: dict[str, Item] = PrivateAttr(default_factory=dict)
    _variable_index: dict[str, ProjectVariable] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context) -> None:
        """Build id indexes."""
        self._scene_index = _index(self.scenes)
        self._quest_index = _index(self.quests)
        self._character_index = _index(self.characters)
        self._item_index = _index(self.items)
        self._variable_index = _index(self.variables)

    def get_scene(self, scene_id: str | None) -> Scene | None:
        return self._scene_index.get(scene_id) if scene_id else None

    def get_quest(self, quest_id: str | None) -> Quest | None:
        return self._quest_index.get(quest_id) if quest_id else None

    def get_character(self, character_id: str | None) -> Character | None:
        return self._character_index.get(character_id) if character_id else None

    def get_item(self, item_id: str | None) -> Item | None:
        return self._item_index.get(item_id) if item_id else None

    def get_variable(self, variable_id: str | None) -> ProjectVariable | None:
        return self._variable_index.get(variable_id) if variable_id else None

    def snapshot(self) -> "StaticProject":
        """Deep copy for a session, detached from later edits."""
        return self.model_validate(self.model_dump(by_alias=True))


def _index(entities: list) -> dict:
    index = {}
    for entity in entities:
        index.setdefault(entity.id, entity)
    return index


# -----------------------------------------------------------------------------
# Session state
# -----------------------------------------------------------------------------

class QuestInstance(LoomModel):
    """Runtime state of one started quest."""
    status: QuestStatus = QuestStatus.ACTIVE
    current_stage_ids: list[str] = Field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_QUEST_STATUSES


class GameState(LoomModel):
    """
    Complete world state of a play session.

    Treated as a value: the rules never mutate an instance in place, they
    return a copy with fresh collections for whatever changed. Lists with
    set semantics (inventory, party, triggered_ids) keep insertion order.
    """
    schema_version: str = "1.0.0"

    current_scene_id: str
    history: list[str] = Field(default_factory=list)  # Scenes a choice was made in
    inventory: list[str] = Field(default_factory=list)
    party: list[str] = Field(default_factory=list)
    variable_values: dict[str, Any] = Field(default_factory=dict)
    relationships: dict[str, int | float] = Field(default_factory=dict)
    quest_states: dict[str, QuestInstance] = Field(default_factory=dict)
    triggered_ids: list[str] = Field(default_factory=list)  # One-time triggers already fired
    flags: dict[str, bool] = Field(default_factory=dict)
    current_track_url: str | None = None  # Single global ambient track
    is_paused: bool = False

    def replace(self, **changes: Any) -> "GameState":
        """Return a shallow copy with the given fields swapped out."""
        return self.model_copy(update=changes)
