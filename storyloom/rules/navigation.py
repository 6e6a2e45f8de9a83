"""
Scene navigation over the story graph.

Scenes link to each other by id through change_scene actions; scene type
(normal/choice/end) is presentation metadata and never blocks a move.
History is an append-only stack of the scenes the player chose from.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..state.schema import SceneType

if TYPE_CHECKING:
    from ..state.schema import GameState, Scene, StaticProject


def navigate(state: "GameState", scene_id: str) -> "GameState":
    """Return a state positioned at scene_id."""
    if state.current_scene_id == scene_id:
        return state
    return state.replace(current_scene_id=scene_id)


def record_visit(state: "GameState", scene_id: str) -> "GameState":
    """Push scene_id onto the visit history."""
    return state.replace(history=[*state.history, scene_id])


def current_scene(state: "GameState", project: "StaticProject") -> "Scene | None":
    return project.get_scene(state.current_scene_id)


def is_ending(scene: "Scene | None") -> bool:
    """An end scene with nothing left to choose (or no scene at all)."""
    if scene is None:
        return True
    return scene.type == SceneType.END and not scene.choices
