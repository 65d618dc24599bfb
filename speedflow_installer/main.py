from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .console import PlainConsole, RichConsole
from .errors import InstallCancelled, InstallerError
from .installer_config import load_installer_config
from .lib.assistant import launch_assistant
from .lib.command import command_exists
from .lib.updates import check_for_updates
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .orchestrator import Installer, is_interactive
from .request import InstallationRequest, normalize_version

logger = logging.getLogger(__name__)

EPILOG = """\
Examples:
  speedflow-install                    # Normal installation
  speedflow-install --debug            # Installation with debug logs
  speedflow-install --version 1.0.1    # Install specific version
  speedflow-install --check-update     # Check for updates only

Support:
  Slack: #speedflow-support
"""


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="speedflow-install",
        description="Speedflow Installer",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("--debug", action="store_true", help="Enable debug mode (verbose logging)")
    p.add_argument("--check-update", action="store_true", help="Check for available updates and exit")
    p.add_argument(
        "--auto-update",
        dest="auto_update",
        action="store_const",
        const=True,
        default=None,
        help="Enable auto-update (default: ask user)",
    )
    p.add_argument(
        "--no-auto-update",
        dest="auto_update",
        action="store_const",
        const=False,
        help="Disable auto-update",
    )
    p.add_argument(
        "--version",
        "--force-version",
        dest="version",
        default=None,
        metavar="X.Y.Z",
        help="Force install specific version",
    )
    p.add_argument("--silent", "--update", dest="silent", action="store_true", help="Silent (non-interactive) mode")
    p.add_argument(
        "--existing",
        choices=["backup", "remove", "cancel"],
        default=None,
        help="What to do with an existing installation (default: ask; backup in silent mode)",
    )
    p.add_argument("--config", default=None, help="Installer config (YAML)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to installer log")
    return p


def parse_request(argv: Optional[List[str]] = None) -> InstallationRequest:
    args, unknown = build_parser().parse_known_args(argv)
    if unknown:
        logger.debug("Ignoring unrecognized arguments: %s", unknown)
    return InstallationRequest(
        version_pin=normalize_version(args.version),
        auto_update=args.auto_update,
        silent=bool(args.silent),
        debug=bool(args.debug),
        check_update=bool(args.check_update),
        on_existing=args.existing,
        config_path=args.config,
        log_path=args.log,
    )


def main(argv: Optional[List[str]] = None) -> int:
    request = parse_request(argv)
    interactive = is_interactive(request)

    log_path = configure_logging(
        log_path=request.log_path or DEFAULT_LOG_PATH,
        level=logging.DEBUG if request.debug else logging.INFO,
        also_console=(not interactive) or request.debug,
    )
    logger.debug("Request: %s", request)

    ui = RichConsole() if interactive else PlainConsole()
    project_dir = Path.cwd()

    try:
        cfg = load_installer_config(request.config_path)
    except (OSError, ValueError, RuntimeError) as e:
        ui.error(InstallerError(f"Could not load installer config: {e}"), log_path)
        return 1

    try:
        if request.check_update:
            ui.info("Checking for Speedflow updates...")
            ui.update_status(check_for_updates(cfg, project_dir / cfg.target_dir))
            return 0

        Installer(request, cfg, ui, project_dir=project_dir).run()
    except InstallCancelled as e:
        ui.info(str(e))
        return 0
    except InstallerError as e:
        logger.debug("Installer failed", exc_info=True)
        ui.error(e, log_path)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130

    if ui.ask_launch():
        if command_exists(cfg.assistant_command):
            launch_assistant(cfg)
        else:
            ui.info(f"Claude Code CLI not found after installation. Please run: {cfg.assistant_command}")
    elif interactive:
        ui.info(f"Claude Code CLI ready when you need it! To start later: {cfg.assistant_command}")
    return 0
