"""Speedflow installer.

Downloads the Speedflow bundle from the Speednet GitLab into `.claude/` of
the current project, after making sure the project is a Git repository whose
committed `.gitignore` excludes `.claude/`.

Core design goals:
- One fixed, linear pipeline; the first failure ends the run
- Nothing is written into the project before the safety checks pass
- Scratch state is always removed, including on interrupt
- Centralized logging
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
