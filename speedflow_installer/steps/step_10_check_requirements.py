from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import EnvironmentCheckError
from ..lib.assistant import install_assistant_cli
from ..lib.probe import is_windows, probe_assistant, probe_git, probe_node, probe_os
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)


class CheckRequirementsStep:
    step_id = "10_check_requirements"
    title = "Checking system requirements"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        os_finding = probe_os()
        if not os_finding.ok:
            if is_windows():
                raise EnvironmentCheckError(
                    "Windows detected - WSL required!",
                    remediation=[
                        "Windows users must use WSL (Windows Subsystem for Linux):",
                        "  1. Install WSL: wsl --install",
                        "  2. Restart computer",
                        "  3. Run installer from WSL terminal",
                        "Guide: https://docs.microsoft.com/en-us/windows/wsl/install",
                    ],
                )
            raise EnvironmentCheckError(
                os_finding.detail,
                remediation=["Speedflow supports Linux, macOS, and Windows WSL only."],
            )

        if not probe_git().ok:
            raise EnvironmentCheckError(
                "Missing required commands: git",
                remediation=["Please install missing commands and try again."],
            )

        assistant = probe_assistant(ctx.cfg.assistant_command)
        installed_now = False
        if not assistant.ok:
            logger.warning("Claude Code CLI not found - attempting installation...")
            logger.info("Note: Claude Code requires Node.js %d+", ctx.cfg.node_min_major)
            install_assistant_cli(ctx.cfg)
            installed_now = True

        node = probe_node(ctx.cfg.node_min_major)
        state["requirements"] = {
            "os": os_finding.detail,
            "assistant_installed_now": installed_now,
            "node": node.status,
        }
        logger.info("System requirements met")
        return state
