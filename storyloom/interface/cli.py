"""
Command-line debug console for StoryLoom.

Plays a project in the terminal: numbers pick choices, slash commands
manage the session, and anything else goes to the debug command protocol.
"""

import asyncio
import argparse
import logging
import sys
from pathlib import Path

from rich.markup import escape
from rich.prompt import Prompt

from ..state import (
    JsonFileBlobStore,
    ProjectError,
    SaveLoadError,
    SessionController,
    get_event_bus,
    load_project,
)
from .config import load_config
from .renderer import console, THEME, render_scene, render_state, render_issues

logger = logging.getLogger(__name__)


HELP_TEXT = (
    "Pick a choice by number. Commands: /save [slot], /load [slot], /reset, "
    "/validate, /state, /use <item>, /pause, /resume, /help, /quit. "
    "Anything else is sent to the debug console (e.g. 'set sanity 50')."
)


def handle_command(controller: SessionController, line: str) -> bool:
    """
    Run one slash command.

    Returns:
        False when the console should exit
    """
    parts = line.split()
    cmd = parts[0].lower()
    args = parts[1:]

    if cmd in ("/quit", "/exit"):
        return False

    if cmd == "/save":
        try:
            asyncio.run(controller.save(args[0] if args else None))
            console.print(f"[{THEME['dim']}]Saved.[/{THEME['dim']}]")
        except SaveLoadError as e:
            console.print(f"[{THEME['danger']}]{escape(str(e))}[/{THEME['danger']}]")
    elif cmd == "/load":
        try:
            if asyncio.run(controller.load(args[0] if args else None)):
                render_scene(controller.current_scene(), controller.choices())
            else:
                console.print(f"[{THEME['warning']}]No save in that slot.[/{THEME['warning']}]")
        except SaveLoadError as e:
            console.print(f"[{THEME['danger']}]{escape(str(e))}[/{THEME['danger']}]")
    elif cmd == "/reset":
        controller.reset()
        render_scene(controller.current_scene(), controller.choices())
    elif cmd == "/validate":
        render_issues(controller.validate())
    elif cmd == "/state":
        render_state(controller.state, controller.project)
    elif cmd == "/use":
        if not args:
            console.print(f"[{THEME['warning']}]Usage: /use <item id>[/{THEME['warning']}]")
        else:
            outcome = controller.use_item(args[0])
            if outcome.applied:
                render_scene(controller.current_scene(), controller.choices())
            else:
                console.print(f"[{THEME['warning']}]Cannot use {escape(args[0])}: {escape(outcome.reason)}[/{THEME['warning']}]")
    elif cmd == "/pause":
        controller.pause()
        console.print(f"[{THEME['dim']}]Paused.[/{THEME['dim']}]")
    elif cmd == "/resume":
        controller.resume()
        console.print(f"[{THEME['dim']}]Resumed.[/{THEME['dim']}]")
    elif cmd == "/help":
        console.print(f"[{THEME['dim']}]{HELP_TEXT}[/{THEME['dim']}]")
    else:
        console.print(f"[{THEME['warning']}]Unknown command: {escape(cmd)}[/{THEME['warning']}]")
    return True


def handle_choice(controller: SessionController, number: int) -> None:
    """Resolve the numbered choice on the current scene."""
    options = controller.choices()
    if not 1 <= number <= len(options):
        console.print(f"[{THEME['warning']}]No choice {number}.[/{THEME['warning']}]")
        return

    outcome = controller.choose(options[number - 1].id)
    if not outcome.applied:
        console.print(f"[{THEME['warning']}]That choice is {escape(outcome.reason)}.[/{THEME['warning']}]")
        return

    for trigger_id in outcome.fired_triggers:
        console.print(f"[{THEME['dim']}]Trigger fired: {escape(trigger_id)}[/{THEME['dim']}]")
    render_scene(controller.current_scene(), controller.choices())


def handle_debug(controller: SessionController, line: str) -> None:
    """Send a line to the debug console and print the reply."""
    reply = controller.execute_debug_command(line)
    console.print(f"[{THEME['secondary']}]{escape(reply)}[/{THEME['secondary']}]")


def run(controller: SessionController) -> None:
    """Main input loop."""
    render_scene(controller.current_scene(), controller.choices())

    while True:
        try:
            line = Prompt.ask(f"[{THEME['accent']}]>[/{THEME['accent']}]").strip()
        except (KeyboardInterrupt, EOFError):
            console.print(f"\n[{THEME['dim']}]Use /quit to exit[/{THEME['dim']}]")
            break

        if not line:
            continue

        if line.startswith("/"):
            if not handle_command(controller, line):
                break
        elif line.isdigit():
            handle_choice(controller, int(line))
        else:
            handle_debug(controller, line)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="StoryLoom - interactive fiction debug console")
    parser.add_argument("project", help="Path to a project .json or .yaml file")
    parser.add_argument(
        "--data-dir", "-d",
        default=".",
        help="Directory holding .storyloom_config.json",
    )
    parser.add_argument(
        "--validate", "-v",
        action="store_true",
        help="Validate the project and exit",
    )
    args = parser.parse_args(argv)

    config = load_config(args.data_dir)
    logging.basicConfig(
        level=getattr(logging, str(config["log_level"]).upper(), logging.WARNING),
        format='%(asctime)s [%(levelname)s] %(message)s',
    )

    try:
        project = load_project(args.project)
    except ProjectError as e:
        console.print(f"[{THEME['danger']}]{escape(str(e))}[/{THEME['danger']}]")
        return 1

    bus = get_event_bus()
    bus.on_any(lambda event: logger.debug(f"event {event}"))

    controller = SessionController(
        project,
        store=JsonFileBlobStore(Path(args.data_dir) / config["save_dir"]),
        bus=bus,
        max_trigger_passes=config["max_trigger_passes"],
        save_key=config["quicksave_key"],
    )

    if args.validate:
        issues = controller.validate()
        render_issues(issues)
        return 1 if any(issue.severity.value == "error" for issue in issues) else 0

    try:
        controller.start()
    except ProjectError as e:
        console.print(f"[{THEME['danger']}]{escape(str(e))}[/{THEME['danger']}]")
        return 1

    console.print(f"[bold {THEME['primary']}]{escape(project.name or project.id)}[/bold {THEME['primary']}]")
    console.print(f"[{THEME['dim']}]Type /help for commands.[/{THEME['dim']}]\n")
    run(controller)
    return 0


if __name__ == "__main__":
    sys.exit(main())
