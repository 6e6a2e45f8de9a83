"""
Project validator for StoryLoom.

Pure function: validate(project) -> list[ValidationIssue].
No state mutation, no side effects, no globals.

Checks are advisory. The engine plays any project it can load; broken
references just fail open or get skipped at runtime. The validator tells
the author where that will happen before a player finds it.
"""

from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import TYPE_CHECKING, Iterator

from pydantic import BaseModel

from ..rules.actions import is_known_action
from ..state.schema import ActionType, ConditionType, SceneType

if TYPE_CHECKING:
    from ..state.schema import RuleAction, RuleCondition, StaticProject


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ValidationIssue(BaseModel):
    """One finding, pointing at the entity it concerns."""
    id: str
    severity: Severity
    message: str
    target_id: str | None = None


_KNOWN_CONDITIONS = {t.value for t in ConditionType}


class ProjectValidator:
    """
    Runs every check over a project and collects the issues.

    Each check is a generator method; validate() chains them in order,
    so issues come out grouped by check.
    """

    def validate(self, project: "StaticProject") -> list[ValidationIssue]:
        checks = [
            self._check_start_scene,
            self._check_duplicate_ids,
            self._check_choice_scenes,
            self._check_quests,
            self._check_rule_references,
            self._check_else_actions,
        ]
        issues: list[ValidationIssue] = []
        for check in checks:
            issues.extend(check(project))
        return issues

    # ─── Scenes ──────────────────────────────────────────────────

    def _check_start_scene(self, project: "StaticProject") -> Iterator[ValidationIssue]:
        if not project.start_scene_id:
            yield ValidationIssue(
                id="err_start",
                severity=Severity.ERROR,
                message="Project has no start scene.",
            )
        elif project.get_scene(project.start_scene_id) is None:
            yield ValidationIssue(
                id="err_start",
                severity=Severity.ERROR,
                message=f'Start scene "{project.start_scene_id}" does not exist.',
                target_id=project.start_scene_id,
            )

    def _check_choice_scenes(self, project: "StaticProject") -> Iterator[ValidationIssue]:
        for scene in project.scenes:
            if scene.type == SceneType.CHOICE.value and len(scene.choices) < 2:
                yield ValidationIssue(
                    id=f"err_ch_{scene.id}",
                    severity=Severity.WARNING,
                    message=f'Scene "{scene.title}" needs 2+ choices.',
                    target_id=scene.id,
                )

    def _check_duplicate_ids(self, project: "StaticProject") -> Iterator[ValidationIssue]:
        collections = {
            "scene": project.scenes,
            "quest": project.quests,
            "character": project.characters,
            "item": project.items,
            "variable": project.variables,
        }
        for kind, entities in collections.items():
            counts = Counter(entity.id for entity in entities)
            for entity_id, count in counts.items():
                if count > 1:
                    yield ValidationIssue(
                        id=f"err_dup_{kind}_{entity_id}",
                        severity=Severity.ERROR,
                        message=f'Duplicate {kind} id "{entity_id}" ({count} times).',
                        target_id=entity_id,
                    )

    # ─── Quests ──────────────────────────────────────────────────

    def _check_quests(self, project: "StaticProject") -> Iterator[ValidationIssue]:
        for quest in project.quests:
            if not quest.stages:
                yield ValidationIssue(
                    id=f"err_q_{quest.id}",
                    severity=Severity.ERROR,
                    message=f'Quest "{quest.name}" has no stages.',
                    target_id=quest.id,
                )
                continue

            if not quest.initial_stage_ids:
                yield ValidationIssue(
                    id=f"err_q_init_{quest.id}",
                    severity=Severity.WARNING,
                    message=f'Quest "{quest.name}" has no initial stage.',
                    target_id=quest.id,
                )

            for stage_id in quest.initial_stage_ids:
                if quest.get_stage(stage_id) is None:
                    yield ValidationIssue(
                        id=f"err_q_init_{quest.id}_{stage_id}",
                        severity=Severity.ERROR,
                        message=f'Quest "{quest.name}" starts at unknown stage "{stage_id}".',
                        target_id=quest.id,
                    )

            for stage in quest.stages:
                for next_id in stage.next_stage_ids:
                    if quest.get_stage(next_id) is None:
                        yield ValidationIssue(
                            id=f"err_q_edge_{quest.id}_{stage.id}_{next_id}",
                            severity=Severity.ERROR,
                            message=(
                                f'Stage "{stage.id}" of quest "{quest.name}" '
                                f'leads to unknown stage "{next_id}".'
                            ),
                            target_id=quest.id,
                        )

    # ─── Rules ───────────────────────────────────────────────────

    def _rule_sites(self, project: "StaticProject") -> Iterator[tuple[str, list["RuleCondition"], list["RuleAction"]]]:
        """Every place conditions and actions are authored, with an owner id."""
        for scene in project.scenes:
            for choice in scene.choices:
                yield choice.id, choice.conditions, choice.actions
        for character in project.characters:
            for trigger in character.triggers:
                yield trigger.id, trigger.conditions, trigger.actions
        for item in project.items:
            yield item.id, item.use_conditions, item.use_actions

    def _check_rule_references(self, project: "StaticProject") -> Iterator[ValidationIssue]:
        for owner_id, conditions, actions in self._rule_sites(project):
            for condition in conditions:
                if condition.type not in _KNOWN_CONDITIONS:
                    yield ValidationIssue(
                        id=f"warn_cond_{owner_id}_{condition.id}",
                        severity=Severity.WARNING,
                        message=f'Unknown condition type "{condition.type}" always passes.',
                        target_id=owner_id,
                    )

            for action in actions:
                if not is_known_action(action.type):
                    yield ValidationIssue(
                        id=f"warn_act_{owner_id}_{action.id}",
                        severity=Severity.WARNING,
                        message=f'Unknown action type "{action.type}" is ignored.',
                        target_id=owner_id,
                    )
                elif (
                    action.type == ActionType.CHANGE_SCENE.value
                    and project.get_scene(action.target_id) is None
                ):
                    yield ValidationIssue(
                        id=f"warn_goto_{owner_id}_{action.id}",
                        severity=Severity.WARNING,
                        message=f'change_scene points at unknown scene "{action.target_id}".',
                        target_id=owner_id,
                    )

    def _check_else_actions(self, project: "StaticProject") -> Iterator[ValidationIssue]:
        for scene in project.scenes:
            for choice in scene.choices:
                if choice.else_actions:
                    yield ValidationIssue(
                        id=f"info_else_{choice.id}",
                        severity=Severity.INFO,
                        message=f'Choice "{choice.text}" has else actions, which never run.',
                        target_id=choice.id,
                    )
