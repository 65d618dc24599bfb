from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import StructureError
from ..lib.verify import verify_installation
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)


class VerifyInstallationStep:
    step_id = "50_verify_installation"
    title = "Verifying installation"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        result = verify_installation(
            ctx.target,
            required_dir=ctx.cfg.required_dir,
            required_file=ctx.cfg.required_file,
        )
        if not result.ok:
            raise StructureError(
                "Installation verification failed",
                remediation=[
                    f"Missing from {ctx.cfg.target_dir}/: {', '.join(result.missing)}",
                    "The fetched bundle does not have the expected layout; contact the Speedflow maintainers.",
                ],
            )
        state["verify"] = {"ok": True, "agent_count": result.agent_count}
        logger.info("Speedflow installed successfully (%d agents)", result.agent_count)
        return state
