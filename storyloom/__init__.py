"""
StoryLoom: rule engine for branching interactive fiction.

Scenes linked by choices, gated by conditions over world state and
resolved into declarative actions, with quests and character triggers
layered on top.
"""

from .state import (
    GameState,
    SessionController,
    StaticProject,
    load_project,
)

__version__ = "0.1.0"

__all__ = [
    "GameState",
    "SessionController",
    "StaticProject",
    "load_project",
]
