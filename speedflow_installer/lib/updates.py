from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from ..installer_config import InstallerConfig
from .command import CommandError
from .gitops import list_remote_tags
from .versions import is_newer, latest_tag

logger = logging.getLogger(__name__)

UpdateState = Literal["up_to_date", "available", "unknown", "not_installed"]

CONFIG_FILENAME = "config.json"


@dataclass(frozen=True)
class UpdateStatus:
    state: UpdateState
    installed: Optional[str]
    latest: Optional[str]


def read_installed_version(target: Path) -> Optional[str]:
    path = target / CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return None
    version = data.get("version") if isinstance(data, dict) else None
    return str(version) if version else None


def check_for_updates(cfg: InstallerConfig, target: Path) -> UpdateStatus:
    """Compare the installed version with the newest remote tag. Never installs."""

    installed = read_installed_version(target)
    try:
        newest = latest_tag(list_remote_tags(cfg.remote_url, timeout=cfg.ls_remote_timeout))
    except CommandError as e:
        logger.warning("Could not check for updates: %s", e)
        newest = None

    if newest is None:
        return UpdateStatus(state="unknown", installed=installed, latest=None)
    if installed is None:
        return UpdateStatus(state="not_installed", installed=None, latest=newest.version)
    if is_newer(newest.version, installed):
        return UpdateStatus(state="available", installed=installed, latest=newest.version)
    return UpdateStatus(state="up_to_date", installed=installed, latest=newest.version)
