"""
Display and rendering helpers for the StoryLoom debug console.

Handles theming, scene panels, choice lists, and state tables.
"""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..rules.choices import ChoiceOption
from ..rules.values import format_value
from ..state.schema import GameState, Scene, StaticProject
from ..systems.validation import Severity, ValidationIssue


# Shared console instance
console = Console()

# -----------------------------------------------------------------------------
# Theme
# -----------------------------------------------------------------------------

THEME = {
    "primary": "steel_blue",
    "secondary": "grey70",
    "warning": "dark_goldenrod",
    "danger": "dark_red",
    "accent": "cyan",
    "dim": "dim",
    "text": "grey85",
}

SEVERITY_STYLES = {
    Severity.INFO: THEME["secondary"],
    Severity.WARNING: THEME["warning"],
    Severity.ERROR: THEME["danger"],
}


# -----------------------------------------------------------------------------
# Scenes
# -----------------------------------------------------------------------------

def render_scene(scene: Scene | None, options: list[ChoiceOption]) -> None:
    """Print the current scene and its numbered choices."""
    if scene is None:
        console.print(f"[{THEME['danger']}]Current scene is missing from the project.[/{THEME['danger']}]")
        return

    title = f"[bold {THEME['primary']}]{escape(scene.title or scene.id)}[/bold {THEME['primary']}]"
    if scene.type != "normal":
        title += f" [{THEME['dim']}]({escape(scene.type)})[/{THEME['dim']}]"
    console.print(Panel(escape(scene.content or ""), title=title, border_style=THEME["primary"]))

    if not options:
        console.print(f"[{THEME['dim']}]The End.[/{THEME['dim']}]")
        return

    lines = []
    for i, option in enumerate(options, 1):
        if option.available:
            lines.append(f"[{THEME['accent']}]{i}.[/{THEME['accent']}] {escape(option.text)}")
        else:
            lines.append(f"[{THEME['dim']}]{i}. {escape(option.text)} (locked)[/{THEME['dim']}]")
    console.print(Panel("\n".join(lines), border_style=THEME["primary"], padding=(0, 1)))


# -----------------------------------------------------------------------------
# State
# -----------------------------------------------------------------------------

def render_state(state: GameState, project: StaticProject) -> None:
    """Print the world state as a table."""
    table = Table(title="World State", border_style=THEME["primary"])
    table.add_column("Field", style=THEME["accent"])
    table.add_column("Value", style=THEME["text"])

    table.add_row("Scene", escape(state.current_scene_id))
    table.add_row("History", escape(" > ".join(state.history)) or "-")
    table.add_row("Inventory", escape(", ".join(state.inventory)) or "-")
    table.add_row("Party", escape(", ".join(state.party)) or "-")

    for variable_id, value in state.variable_values.items():
        variable = project.get_variable(variable_id)
        label = variable.name if variable and variable.name else variable_id
        table.add_row(escape(f"var {label}"), escape(format_value(value)))

    for character_id, value in state.relationships.items():
        table.add_row(escape(f"rel {character_id}"), escape(format_value(value)))

    for quest_id, instance in state.quest_states.items():
        stages = ", ".join(instance.current_stage_ids)
        table.add_row(escape(f"quest {quest_id}"), escape(f"{instance.status.value} [{stages}]"))

    for flag_id, value in state.flags.items():
        table.add_row(escape(f"flag {flag_id}"), escape(format_value(value)))

    table.add_row("Track", escape(state.current_track_url or "-"))
    if state.is_paused:
        table.add_row("Paused", "yes")

    console.print(table)


def render_issues(issues: list[ValidationIssue]) -> None:
    """Print validator findings, or an all-clear line."""
    if not issues:
        console.print(f"[{THEME['accent']}]No issues found.[/{THEME['accent']}]")
        return

    table = Table(title="Validation", border_style=THEME["primary"])
    table.add_column("Severity")
    table.add_column("Target", style=THEME["dim"])
    table.add_column("Message")
    for issue in issues:
        style = SEVERITY_STYLES[issue.severity]
        table.add_row(
            f"[{style}]{issue.severity.value}[/{style}]",
            escape(issue.target_id or ""),
            escape(issue.message),
        )
    console.print(table)
