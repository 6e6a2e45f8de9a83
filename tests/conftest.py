"""
Pytest fixtures for StoryLoom tests.

Provides a small sample project, in-memory stores, and a started session.
"""

import pytest
from pathlib import Path

# Add project root to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from storyloom.state import (
    EventBus,
    GameState,
    MemoryBlobStore,
    SessionController,
    StaticProject,
    reset_event_bus,
)


# Authored in the camelCase shape the editor exports
SAMPLE_PROJECT = {
    "id": "p_test",
    "name": "The Vault",
    "startSceneId": "s_start",
    "scenes": [
        {
            "id": "s_start",
            "title": "Antechamber",
            "type": "choice",
            "content": "A sealed door. A keycard on the floor.",
            "choices": [
                {
                    "id": "c_stare",
                    "text": "Stare into the void",
                    "actions": [
                        {"id": "a1", "type": "mod_variable", "targetId": "sanity", "value": -20},
                    ],
                },
                {
                    "id": "c_take_card",
                    "text": "Take the keycard",
                    "actions": [{"id": "a2", "type": "give_item", "targetId": "keycard"}],
                },
                {
                    "id": "c_door",
                    "text": "Open the door",
                    "conditions": [
                        {"id": "k1", "type": "item", "targetId": "keycard", "operator": "has"},
                    ],
                    "actions": [{"id": "a3", "type": "change_scene", "targetId": "s_hall"}],
                },
                {
                    "id": "c_job",
                    "text": "Accept the job",
                    "actions": [{"id": "a4", "type": "start_quest", "targetId": "q_job"}],
                },
            ],
        },
        {
            "id": "s_hall",
            "title": "Hall",
            "type": "normal",
            "content": "Mira waits by the pillars.",
            "choices": [
                {
                    "id": "c_report",
                    "text": "Report progress",
                    "actions": [{"id": "a5", "type": "advance_quest", "targetId": "q_job"}],
                },
                {
                    "id": "c_leave",
                    "text": "Leave",
                    "actions": [{"id": "a6", "type": "change_scene", "targetId": "s_end"}],
                },
            ],
        },
        {"id": "s_end", "title": "Outside", "type": "end", "content": "Fresh air."},
    ],
    "quests": [
        {
            "id": "q_job",
            "name": "The Job",
            "stages": [
                {"id": "A", "title": "Get inside", "nextStageIds": ["B"]},
                {"id": "B", "title": "Report back", "nextStageIds": []},
            ],
            "initialStageIds": ["A"],
        },
    ],
    "characters": [
        {
            "id": "mira",
            "name": "Mira",
            "initialRelationship": 10,
            "triggers": [
                {
                    "id": "t_mira_welcome",
                    "name": "Welcome",
                    "conditions": [
                        {"id": "m1", "type": "scene", "targetId": "s_hall", "operator": "at_scene"},
                    ],
                    "actions": [
                        {"id": "m2", "type": "mod_relationship", "targetId": "mira", "value": 5},
                    ],
                    "isOneTime": True,
                    "priority": 5,
                },
            ],
        },
        {"id": "vex", "name": "Vex"},
    ],
    "items": [
        {"id": "keycard", "name": "Keycard"},
        {
            "id": "medkit",
            "name": "Medkit",
            "isUsable": True,
            "isConsumable": True,
            "useActions": [{"id": "u1", "type": "mod_variable", "targetId": "sanity", "value": 10}],
        },
        {
            "id": "lamp",
            "name": "Lamp",
            "isUsable": True,
            "useConditions": [
                {"id": "u2", "type": "flag", "targetId": "has_oil", "operator": "set"},
            ],
            "useActions": [{"id": "u3", "type": "set_flag", "targetId": "lit"}],
        },
    ],
    "variables": [
        {"id": "sanity", "name": "Sanity", "type": "number", "defaultValue": 100},
        {"id": "alias", "name": "Alias", "type": "string", "defaultValue": "ghost"},
    ],
    "settings": {"globalSoundtrackUrl": "audio/theme.ogg"},
}


@pytest.fixture(autouse=True)
def fresh_event_bus():
    """Keep the global event bus from leaking between tests."""
    reset_event_bus()
    yield
    reset_event_bus()


@pytest.fixture
def project():
    """Sample project with a gated door, a two-stage quest and a trigger."""
    return StaticProject.model_validate(SAMPLE_PROJECT)


@pytest.fixture
def state():
    """Fresh state at the start scene."""
    return GameState(
        current_scene_id="s_start",
        variable_values={"sanity": 100, "alias": "ghost"},
    )


@pytest.fixture
def memory_store():
    """In-memory blob store for testing."""
    return MemoryBlobStore()


@pytest.fixture
def bus():
    """Private event bus."""
    return EventBus()


@pytest.fixture
def session(project, memory_store, bus):
    """Started session over the sample project."""
    controller = SessionController(project, store=memory_store, bus=bus)
    controller.start()
    return controller
