"""Debug console, debug command protocol and user config."""
