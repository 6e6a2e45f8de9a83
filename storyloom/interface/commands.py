"""
Debug command protocol.

Text commands typed into the debugger console:

    set <variableId> <value>   assign a variable; value is read as a
                               number, then true/false, else raw text

Anything else replies "Unknown: <command>". Commands never raise; the
reply string is always meant for display.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..rules.values import coerce_literal, format_value

if TYPE_CHECKING:
    from ..state.schema import GameState


def execute_debug_command(command: str, state: "GameState") -> tuple["GameState", str]:
    """
    Run one debug command.

    Args:
        command: Raw command line
        state: Current game state

    Returns:
        (new state, reply). The state is the input unchanged unless the
        command modified something.
    """
    args = command.strip().split()
    base = args[0].lower() if args else ""

    if base == "set" and len(args) >= 3:
        variable_id = args[1]
        value = coerce_literal(args[2])
        new_state = state.replace(variable_values={**state.variable_values, variable_id: value})
        return new_state, f"Variable {variable_id} set to {format_value(value)}"

    return state, f"Unknown: {base}"
