from __future__ import annotations

import logging
from typing import List, Optional

from .command import CmdResult, run_cmd
from .versions import TagVersion, parse_ls_remote_tags

logger = logging.getLogger(__name__)

C_LOCALE = {"LC_ALL": "C"}


def is_inside_work_tree(cwd: str) -> bool:
    r = run_cmd(["git", "rev-parse", "--is-inside-work-tree"], check=False, cwd=cwd)
    return r.returncode == 0 and r.stdout.strip() == "true"


def status_porcelain(cwd: str, path: str) -> str:
    """Pending working-tree changes for a single path ('' when committed)."""

    r = run_cmd(["git", "status", "--porcelain", "--", path], check=False, cwd=cwd)
    if r.returncode != 0:
        # Status unavailable counts as "not committed".
        return r.stderr.strip() or f"git status exited {r.returncode}"
    return r.stdout.strip()


def list_remote_tags(remote_url: str, *, timeout: float | None = None) -> List[TagVersion]:
    r = run_cmd(["git", "ls-remote", "--tags", remote_url], timeout=timeout)
    return parse_ls_remote_tags(r.stdout)


def clone(
    remote_url: str,
    dest: str,
    *,
    branch: Optional[str] = None,
    shallow: bool = False,
) -> CmdResult:
    argv = ["git", "clone", "--quiet"]
    if shallow:
        argv += ["--depth", "1"]
    if branch:
        argv += ["--branch", branch]
    argv += [remote_url, dest]
    # Missing refs are recognized from stderr, which must not be localized.
    return run_cmd(argv, env=C_LOCALE)


def checkout(repo_dir: str, ref: str) -> None:
    run_cmd(["git", "-C", repo_dir, "checkout", "--quiet", ref])


def short_head(repo_dir: str) -> Optional[str]:
    r = run_cmd(["git", "-C", repo_dir, "rev-parse", "--short", "HEAD"], check=False)
    sha = r.stdout.strip()
    return sha if r.returncode == 0 and sha else None
