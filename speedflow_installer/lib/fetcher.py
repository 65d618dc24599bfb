from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..errors import RemoteAccessError, StructureError, VersionNotFoundError
from ..installer_config import InstallerConfig
from ..request import InstallationRequest
from .command import CommandError
from .gitops import checkout, clone, list_remote_tags, short_head
from .versions import TagVersion, latest_tag

logger = logging.getLogger(__name__)

BUNDLE_DIRNAME = "core"

_MISSING_REF_RE = re.compile(
    r"(Remote branch .* not found|couldn't find remote ref|not found in upstream)",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ResolvedVersion:
    version: Optional[str]
    ref: Optional[str]
    pinned: bool


@dataclass(frozen=True)
class FetchedBundle:
    path: Path
    version: str
    ref: Optional[str]


def ssh_remediation(cfg: InstallerConfig) -> List[str]:
    return [
        "SSH key setup required:",
        "  1. Generate SSH key: ssh-keygen -t ed25519",
        f"  2. Add key to GitLab: {cfg.web_url}/-/profile/keys",
        "  3. Re-run installer",
    ]


def pinned_ref(version: str) -> str:
    return f"v{version}"


def resolve_version(request: InstallationRequest, cfg: InstallerConfig) -> ResolvedVersion:
    """Pick the version to fetch.

    A pin is used as-is and the remote tag list is never read. Otherwise the
    highest X.Y.Z tag wins (numeric ordering, so 1.10.0 > 1.9.9). A remote
    without version tags resolves to the default branch.
    """

    if request.version_pin:
        return ResolvedVersion(
            version=request.version_pin,
            ref=pinned_ref(request.version_pin),
            pinned=True,
        )

    try:
        tags: List[TagVersion] = list_remote_tags(cfg.remote_url, timeout=cfg.ls_remote_timeout)
    except CommandError as e:
        raise RemoteAccessError(
            "Failed to list Speedflow versions on the remote",
            remediation=ssh_remediation(cfg),
        ) from e

    newest = latest_tag(tags)
    if newest is None:
        logger.warning("No version tags on %s, using default branch", cfg.remote_url)
        return ResolvedVersion(version=None, ref=None, pinned=False)

    logger.info("Latest version on remote: %s", newest.tag)
    return ResolvedVersion(version=newest.version, ref=newest.tag, pinned=False)


def fetch_bundle(
    request: InstallationRequest,
    cfg: InstallerConfig,
    scratch: Path,
) -> FetchedBundle:
    """Clone the bundle into the scratch workspace. No retries."""

    resolved = resolve_version(request, cfg)
    dest = scratch / BUNDLE_DIRNAME

    try:
        if resolved.pinned:
            logger.info("Installing pinned version: %s", resolved.ref)
            clone(cfg.remote_url, str(dest), branch=resolved.ref, shallow=True)
        else:
            clone(cfg.remote_url, str(dest))
            if resolved.ref:
                checkout(str(dest), resolved.ref)
    except CommandError as e:
        if resolved.pinned and _MISSING_REF_RE.search(e.stderr or ""):
            raise VersionNotFoundError(
                f"Version {resolved.ref} not found on {cfg.remote_url}",
                remediation=[
                    "Check the version number; available versions are the repository tags.",
                    "Run without --version to install the latest release.",
                ],
            ) from e
        what = f"at version {resolved.ref}" if resolved.pinned else ""
        raise RemoteAccessError(
            " ".join(p for p in ["Failed to clone repository", what] if p),
            remediation=["Check your SSH key configuration and repository access.", *ssh_remediation(cfg)],
        ) from e

    if not dest.is_dir():
        raise StructureError(
            "Repository structure not found",
            remediation=["The fetched bundle is malformed; contact the Speedflow maintainers."],
        )

    version = resolved.version
    if version is None:
        sha = short_head(str(dest))
        version = f"dev-{sha}" if sha else "dev"

    logger.info("Fetched Speedflow %s into %s", version, dest)
    return FetchedBundle(path=dest, version=version, ref=resolved.ref)
