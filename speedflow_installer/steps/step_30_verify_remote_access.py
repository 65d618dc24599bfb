from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import RemoteAccessError
from ..lib.fetcher import ssh_remediation
from ..lib.probe import check_remote_access
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)


class VerifyRemoteAccessStep:
    step_id = "30_verify_remote_access"
    title = "Verifying GitLab access"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        if not check_remote_access(ctx.cfg, timeout=ctx.cfg.ssh_timeout):
            raise RemoteAccessError(
                f"SSH access to {ctx.cfg.git_host} failed",
                remediation=ssh_remediation(ctx.cfg),
            )
        logger.info("SSH access to %s verified", ctx.cfg.git_host)
        state["remote"] = {"host": ctx.cfg.git_host, "reachable": True}
        return state
