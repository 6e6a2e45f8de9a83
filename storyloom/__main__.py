"""
Run the StoryLoom debug console.

Usage:
    python -m storyloom path/to/project.json
"""

import sys

from .interface.cli import main

if __name__ == "__main__":
    sys.exit(main())
