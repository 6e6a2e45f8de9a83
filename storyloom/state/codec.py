"""
GameState <-> text codec and project loading.

serialize/deserialize round-trip every GameState field:
    deserialize(serialize(state)) == state
"""

import json
from pathlib import Path

import yaml
from pydantic import ValidationError

from .errors import ProjectError, StateDecodeError
from .schema import GameState, StaticProject


def serialize(state: GameState) -> str:
    """Encode a game state as a JSON string (camelCase keys)."""
    return state.model_dump_json(by_alias=True)


def deserialize(text: str) -> GameState:
    """
    Decode a game state produced by serialize().

    Raises:
        StateDecodeError: text is not a valid serialized state
    """
    try:
        return GameState.model_validate_json(text)
    except ValidationError as e:
        raise StateDecodeError(f"Invalid game state: {e.error_count()} error(s)") from e


def load_project(path: Path | str) -> StaticProject:
    """
    Load an authored project from a JSON or YAML file.

    Raises:
        ProjectError: file missing, unparseable, or not a project
    """
    path = Path(path)
    if not path.exists():
        raise ProjectError(f"Project file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ProjectError(f"Could not read project {path.name}: {e}") from e

    if not isinstance(data, dict):
        raise ProjectError(f"Project {path.name} must contain a mapping")

    try:
        return StaticProject.model_validate(data)
    except ValidationError as e:
        raise ProjectError(f"Project {path.name} is invalid: {e}") from e
