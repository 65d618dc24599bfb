from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from ..errors import EnvironmentCheckError
from ..installer_config import InstallerConfig
from .command import CommandError, command_exists, run_cmd
from .probe import is_wsl

logger = logging.getLogger(__name__)


def install_assistant_cli(cfg: InstallerConfig, *, platform_name: Optional[str] = None) -> None:
    """Install the assistant CLI via Homebrew (macOS) or the vendor script."""

    plat = platform_name or sys.platform
    manual = [f"Please install manually: {cfg.assistant_manual_url}"]

    try:
        if plat == "darwin" and command_exists("brew"):
            logger.info("Installing %s via Homebrew...", cfg.assistant_command)
            run_cmd(["brew", "install", cfg.assistant_brew_formula])
        elif plat == "darwin" or plat.startswith("linux") or is_wsl():
            logger.info("Installing %s via %s...", cfg.assistant_command, cfg.assistant_install_script)
            run_cmd(["sh", "-c", f"curl -fsSL {cfg.assistant_install_script} | sh"])
        else:
            raise EnvironmentCheckError(
                "Automatic Claude Code installation not supported on this OS",
                remediation=manual,
            )
    except CommandError as e:
        raise EnvironmentCheckError("Claude Code CLI installation failed", remediation=manual) from e

    if not command_exists(cfg.assistant_command):
        raise EnvironmentCheckError("Claude Code CLI installation failed", remediation=manual)
    logger.info("Claude Code CLI installed successfully")


def launch_assistant(cfg: InstallerConfig) -> None:
    """Replace this process with the assistant CLI."""

    logger.info("Launching %s", cfg.assistant_command)
    os.execvp(cfg.assistant_command, [cfg.assistant_command])
