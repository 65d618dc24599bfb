from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.precondition import enforce_git_safety
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)


class GitSafetyStep:
    step_id = "20_git_safety"
    title = "Ensuring Git safety"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        result = enforce_git_safety(ctx.project_dir, ctx.cfg, confirm_retry=ctx.confirm_retry)
        state["git_safety"] = {
            "inside_work_tree": result.inside_work_tree,
            "ignore_added": result.ignore_added,
            "ignore_committed": result.ignore_committed,
            "certified": result.certified,
        }
        return state
