"""State management for StoryLoom sessions."""

from .schema import (
    StaticProject,
    Scene,
    Choice,
    RuleCondition,
    RuleAction,
    Quest,
    QuestStage,
    QuestInstance,
    QuestStatus,
    Character,
    CharacterTrigger,
    Item,
    ProjectVariable,
    ProjectSettings,
    GameState,
    SceneType,
    ConditionType,
    ConditionOperator,
    ActionType,
    LogicOperator,
)
from .errors import (
    StoryLoomError,
    ProjectError,
    StateDecodeError,
    SaveLoadError,
    NoActiveSessionError,
    ChoiceNotFoundError,
)
from .codec import serialize, deserialize, load_project
from .store import BlobStore, JsonFileBlobStore, MemoryBlobStore
from .event_bus import (
    EventBus,
    EventType,
    GameEvent,
    get_event_bus,
    reset_event_bus,
)
from .manager import SessionController, StepOutcome

__all__ = [
    # Schema
    "StaticProject",
    "Scene",
    "Choice",
    "RuleCondition",
    "RuleAction",
    "Quest",
    "QuestStage",
    "QuestInstance",
    "QuestStatus",
    "Character",
    "CharacterTrigger",
    "Item",
    "ProjectVariable",
    "ProjectSettings",
    "GameState",
    "SceneType",
    "ConditionType",
    "ConditionOperator",
    "ActionType",
    "LogicOperator",
    # Errors
    "StoryLoomError",
    "ProjectError",
    "StateDecodeError",
    "SaveLoadError",
    "NoActiveSessionError",
    "ChoiceNotFoundError",
    # Codec
    "serialize",
    "deserialize",
    "load_project",
    # Store
    "BlobStore",
    "JsonFileBlobStore",
    "MemoryBlobStore",
    # Events
    "EventBus",
    "EventType",
    "GameEvent",
    "get_event_bus",
    "reset_event_bus",
    # Session
    "SessionController",
    "StepOutcome",
]
