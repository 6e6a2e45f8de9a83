"""
Boundary exceptions.

The rule engine never raises for authored data; these exist only where the
session meets callers and storage.
"""


class StoryLoomError(Exception):
    """Base class for StoryLoom boundary errors."""
    pass


class ProjectError(StoryLoomError):
    """Project cannot be loaded or cannot start a session."""
    pass


class StateDecodeError(StoryLoomError):
    """Serialized game state is malformed."""
    pass


class SaveLoadError(StoryLoomError):
    """Save or load against the blob store failed."""
    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Save slot '{key}': {reason}")


class NoActiveSessionError(StoryLoomError):
    """Session operation attempted before start()."""
    pass


class ChoiceNotFoundError(StoryLoomError):
    """Choice id does not belong to the current scene."""
    def __init__(self, scene_id: str, choice_id: str):
        self.scene_id = scene_id
        self.choice_id = choice_id
        super().__init__(f"Choice '{choice_id}' not found in scene '{scene_id}'.")
