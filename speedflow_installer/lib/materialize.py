from __future__ import annotations

import logging
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..errors import InstallerError, StructureError
from ..request import ExistingChoice

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".template"
TEMPLATES_DIRNAME = "templates"

PLACEHOLDERS = ("VERSION", "AUTO_UPDATE", "INSTALLED_AT")


def marker(name: str) -> str:
    return "{{" + name + "}}"


def installed_at(now: Optional[float] = None) -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(now))


def placeholder_values(*, version: str, auto_update: str, timestamp: str) -> Dict[str, str]:
    return {"VERSION": version, "AUTO_UPDATE": auto_update, "INSTALLED_AT": timestamp}


@dataclass(frozen=True)
class MaterializeResult:
    target: Path
    backup: Optional[Path]
    copied: List[str]
    rendered: List[str]


def backup_path_for(target: Path, now: Optional[float] = None) -> Path:
    stamp = time.strftime("%Y%m%d_%H%M%S", time.localtime(now))
    candidate = target.with_name(f"{target.name}.backup.{stamp}")
    n = 1
    while candidate.exists():
        candidate = target.with_name(f"{target.name}.backup.{stamp}_{n}")
        n += 1
    return candidate


def clear_existing(target: Path, choice: Optional[ExistingChoice]) -> Optional[Path]:
    """Back up or remove a previous installation. Returns the backup path, if any."""

    if not target.exists():
        return None

    if choice == "backup":
        backup = backup_path_for(target)
        logger.info("Backing up existing installation to %s", backup.name)
        target.rename(backup)
        return backup
    if choice == "remove":
        logger.info("Removing existing installation %s", target)
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        else:
            target.unlink()
        return None

    raise InstallerError(
        f"Existing installation found at {target} and no backup/remove choice was made",
        remediation=["Re-run with --existing backup or --existing remove."],
    )


def copy_bundle(src: Path, dst: Path, *, exclude: Iterable[str]) -> List[str]:
    """Copy top-level entries of the bundle (hidden ones too) except `exclude`."""

    if not src.is_dir():
        raise StructureError(f"Fetched bundle missing: {src}")

    skip = set(exclude)
    dst.mkdir(parents=True, exist_ok=True)
    copied: List[str] = []
    for item in sorted(src.iterdir(), key=lambda p: p.name):
        if item.name in skip:
            continue
        out = dst / item.name
        if item.is_dir() and not item.is_symlink():
            shutil.copytree(item, out, symlinks=True, dirs_exist_ok=True)
        else:
            shutil.copy2(item, out, follow_symlinks=False)
        copied.append(item.name)
    logger.info("Copied %d bundle entries into %s", len(copied), dst)
    return copied


def substitute_placeholders(data: bytes, values: Dict[str, str]) -> bytes:
    for name, value in values.items():
        data = data.replace(marker(name).encode("utf-8"), value.encode("utf-8"))
    return data


def render_file(path: Path, values: Dict[str, str]) -> bool:
    """Substitute placeholders in place. Returns True if the file changed.

    Works on bytes, so binary or non-UTF-8 templates pass through untouched.
    """

    original = path.read_bytes()
    rendered = substitute_placeholders(original, values)
    assert not any(marker(n).encode("utf-8") in rendered for n in values), f"unresolved placeholder in {path}"
    if rendered == original:
        return False
    path.write_bytes(rendered)
    return True


def render_templates(src: Path, dst: Path, values: Dict[str, str]) -> List[str]:
    """Write templates/**/X.template as dst/**/X with placeholders substituted."""

    templates = src / TEMPLATES_DIRNAME
    if not templates.is_dir():
        logger.info("No %s directory in bundle", TEMPLATES_DIRNAME)
        return []

    rendered: List[str] = []
    for item in sorted(templates.rglob(f"*{TEMPLATE_SUFFIX}")):
        if not item.is_file():
            continue
        rel = item.relative_to(templates)
        out = dst / rel.with_name(rel.name[: -len(TEMPLATE_SUFFIX)])
        out.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(item, out)
        render_file(out, values)
        rendered.append(str(out.relative_to(dst)))
        logger.info("Created %s", out.relative_to(dst))
    return rendered


def materialize(
    bundle: Path,
    target: Path,
    *,
    choice: Optional[ExistingChoice],
    exclude: Iterable[str],
    values: Dict[str, str],
) -> MaterializeResult:
    backup = clear_existing(target, choice)
    copied = copy_bundle(bundle, target, exclude=exclude)
    rendered = render_templates(bundle, target, values)
    return MaterializeResult(target=target, backup=backup, copied=copied, rendered=rendered)
