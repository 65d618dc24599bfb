"""Repository safety checks that gate every write into the project.

Order matters and the chain stops at the first failure:

1. the project must be inside a Git work tree;
2. `.gitignore` must ignore the target directory (appended if missing);
3. `.gitignore` must have no uncommitted changes.

Nothing here commits on the user's behalf.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from ..errors import PreconditionError
from ..installer_config import InstallerConfig
from .gitops import is_inside_work_tree, status_porcelain

logger = logging.getLogger(__name__)

GITIGNORE = ".gitignore"

# Receives the offending status line, returns True once the user says they committed.
ConfirmRetry = Callable[[str], bool]


@dataclass(frozen=True)
class GitSafetyResult:
    inside_work_tree: bool
    ignore_added: bool
    ignore_committed: bool

    @property
    def certified(self) -> bool:
        return self.inside_work_tree and self.ignore_committed


def check_repository(project_dir: Path, cfg: InstallerConfig) -> None:
    if is_inside_work_tree(str(project_dir)):
        logger.debug("Git work tree detected at %s", project_dir)
        return
    raise PreconditionError(
        "SECURITY REQUIREMENT: Must be in Git repository",
        remediation=[
            "Speedflow requires Git version control so that:",
            f"  - {cfg.ignore_pattern} files are never committed by accident",
            f"  - the {GITIGNORE} protection is committed",
            "Initialize a repository first:",
            "  git init",
            "  git add .",
            "  git commit -m 'Initial commit'",
            "Or clone your existing client repository:",
            "  git clone <your-client-repo-url> .",
            "Then re-run the Speedflow installer.",
        ],
    )


def has_ignore_pattern(text: str, pattern: str) -> bool:
    """True if a line ignores the whole directory: `.claude`, `.claude/`, `.claude/*` or `.claude/**`.

    A leading `/` is allowed. Lines naming a subpath such as `.claude/agents/`
    do not count.
    """

    bare = pattern.rstrip("/")
    accepted = {bare, f"{bare}/", f"{bare}/*", f"{bare}/**"}
    return any(line.strip().lstrip("/") in accepted for line in text.splitlines())


def ensure_ignore_pattern(project_dir: Path, pattern: str) -> bool:
    """Append `pattern` to .gitignore unless present. Returns True if added."""

    path = project_dir / GITIGNORE
    text = path.read_text(encoding="utf-8") if path.exists() else ""
    if has_ignore_pattern(text, pattern):
        logger.info("%s already in %s", pattern, GITIGNORE)
        return False

    prefix = "" if not text or text.endswith("\n") else "\n"
    with path.open("a", encoding="utf-8") as f:
        f.write(f"{prefix}{pattern}\n")
    logger.info("Added %s to %s", pattern, GITIGNORE)
    return True


def _uncommitted_error(status: str, pattern: str) -> PreconditionError:
    return PreconditionError(
        f"SECURITY REQUIREMENT: {GITIGNORE} must be committed",
        remediation=[
            "This prevents accidentally committing Speedflow files to the client repository.",
            f"Git status shows: {status}",
            f"Commit {GITIGNORE} now:",
            f"  git add {GITIGNORE}",
            f"  git commit -m 'Add {pattern.rstrip('/')} to gitignore'",
            "Then re-run the Speedflow installer.",
        ],
    )


def check_ignore_committed(
    project_dir: Path,
    cfg: InstallerConfig,
    *,
    confirm_retry: Optional[ConfirmRetry] = None,
) -> None:
    """Require a clean .gitignore, allowing one confirm-and-recheck round."""

    status = status_porcelain(str(project_dir), GITIGNORE)
    logger.debug("git status for %s: %r", GITIGNORE, status)
    if not status:
        return

    if confirm_retry is None or not confirm_retry(status):
        raise _uncommitted_error(status, cfg.ignore_pattern)

    status = status_porcelain(str(project_dir), GITIGNORE)
    logger.debug("git status for %s after retry: %r", GITIGNORE, status)
    if status:
        raise _uncommitted_error(status, cfg.ignore_pattern)


def enforce_git_safety(
    project_dir: Path,
    cfg: InstallerConfig,
    *,
    confirm_retry: Optional[ConfirmRetry] = None,
) -> GitSafetyResult:
    check_repository(project_dir, cfg)
    added = ensure_ignore_pattern(project_dir, cfg.ignore_pattern)
    check_ignore_committed(project_dir, cfg, confirm_retry=confirm_retry)
    logger.info("Git safety requirements met - safe to proceed")
    return GitSafetyResult(inside_work_tree=True, ignore_added=added, ignore_committed=True)
