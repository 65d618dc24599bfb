from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

ExistingChoice = Literal["backup", "remove", "cancel"]


def normalize_version(value: Optional[str]) -> Optional[str]:
    """Strip whitespace and a leading 'v'; empty means no pin."""

    if value is None:
        return None
    v = value.strip()
    if v[:1] in {"v", "V"}:
        v = v[1:]
    return v or None


@dataclass(frozen=True)
class InstallationRequest:
    """What the user asked for in this run.

    Built once from the command line. Interactive answers (auto-update,
    existing-install choice) are folded in with dataclasses.replace before
    the pipeline starts.
    """

    version_pin: Optional[str] = None
    auto_update: Optional[bool] = None
    silent: bool = False
    debug: bool = False
    check_update: bool = False
    on_existing: Optional[ExistingChoice] = None
    config_path: Optional[str] = None
    log_path: Optional[str] = None

    @property
    def auto_update_value(self) -> str:
        return "true" if self.auto_update else "false"
