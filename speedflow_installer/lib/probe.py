"""Read-only host checks shown on the welcome screen.

Each probe returns a ProbeFinding and touches nothing but the process table
(and, for the remote probe, one short SSH connection).
"""

from __future__ import annotations

import logging
import os
import re
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Literal, Optional

from ..installer_config import InstallerConfig
from .command import command_exists, run_cmd

logger = logging.getLogger(__name__)

Status = Literal["ok", "warn", "fail"]

WINDOWS_PLATFORMS = ("win32", "cygwin", "msys")


@dataclass(frozen=True)
class ProbeFinding:
    name: str
    label: str
    status: Status
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "ok"


ProbeReport = Dict[str, ProbeFinding]


def is_wsl(environ: Optional[Dict[str, str]] = None) -> bool:
    env = os.environ if environ is None else environ
    return bool(env.get("WSL_DISTRO_NAME"))


def is_windows(
    platform_name: Optional[str] = None,
    environ: Optional[Dict[str, str]] = None,
) -> bool:
    env = os.environ if environ is None else environ
    return (platform_name or sys.platform).startswith(WINDOWS_PLATFORMS) or bool(env.get("WINDIR"))


def probe_os(
    platform_name: Optional[str] = None,
    environ: Optional[Dict[str, str]] = None,
) -> ProbeFinding:
    plat = platform_name or sys.platform
    label = "Operating System (Linux/macOS/WSL)"
    if is_wsl(environ):
        return ProbeFinding("os", label, "ok", "WSL")
    if plat.startswith("linux"):
        return ProbeFinding("os", label, "ok", "Linux")
    if plat == "darwin":
        return ProbeFinding("os", label, "ok", "macOS")
    if is_windows(plat, environ):
        return ProbeFinding("os", label, "fail", "Windows detected, WSL required")
    return ProbeFinding("os", label, "fail", f"Unsupported OS: {plat}")


def probe_git() -> ProbeFinding:
    if command_exists("git"):
        return ProbeFinding("git", "Git installed", "ok")
    return ProbeFinding("git", "Git installed", "fail", "git not found on PATH")


def parse_node_major(version_output: str) -> Optional[int]:
    m = re.search(r"v?(\d+)\.", version_output.strip())
    return int(m.group(1)) if m else None


def probe_node(min_major: int = 18) -> ProbeFinding:
    label = f"Node.js {min_major}+"
    if not command_exists("node"):
        return ProbeFinding("node", label, "fail", "node not found")
    r = run_cmd(["node", "--version"], check=False, timeout=10)
    major = parse_node_major(r.stdout)
    if major is None:
        return ProbeFinding("node", label, "warn", "could not read node version")
    if major >= min_major:
        return ProbeFinding("node", label, "ok", r.stdout.strip())
    return ProbeFinding("node", label, "warn", f"{r.stdout.strip()} is older than {min_major}")


def probe_assistant(command: str = "claude") -> ProbeFinding:
    label = "Claude Code CLI (will install if missing)"
    if command_exists(command):
        return ProbeFinding("assistant", label, "ok")
    return ProbeFinding("assistant", label, "warn", f"{command} not found")


def check_remote_access(cfg: InstallerConfig, *, timeout: int) -> bool:
    """SSH to the Git host and look for its greeting.

    `ssh -T` against a Git host exits non-zero even when the key is accepted,
    so only the greeting counts.
    """

    r = run_cmd(
        [
            "ssh",
            "-T",
            f"git@{cfg.git_host}",
            "-o",
            f"ConnectTimeout={timeout}",
            "-o",
            "StrictHostKeyChecking=no",
            "-o",
            "BatchMode=yes",
        ],
        check=False,
        timeout=timeout + 5,
    )
    return cfg.greeting in r.output


def probe_remote(cfg: InstallerConfig) -> ProbeFinding:
    label = f"{cfg.git_host} SSH access"
    if check_remote_access(cfg, timeout=cfg.probe_timeout):
        return ProbeFinding("remote", label, "ok")
    return ProbeFinding("remote", label, "fail", "no greeting from host")


def build_probes(cfg: InstallerConfig) -> Dict[str, Callable[[], ProbeFinding]]:
    return {
        "os": probe_os,
        "git": probe_git,
        "node": lambda: probe_node(cfg.node_min_major),
        "assistant": lambda: probe_assistant(cfg.assistant_command),
        "remote": lambda: probe_remote(cfg),
    }


PROBE_ORDER: List[str] = ["os", "git", "node", "assistant", "remote"]


def _safe(name: str, fn: Callable[[], ProbeFinding]) -> ProbeFinding:
    try:
        return fn()
    except Exception as e:
        logger.warning("Probe %s failed: %s", name, e)
        return ProbeFinding(name, name, "fail", str(e))


def iter_probes(
    cfg: InstallerConfig,
    probes: Optional[Dict[str, Callable[[], ProbeFinding]]] = None,
) -> Iterator[ProbeFinding]:
    """Run all probes concurrently, yielding findings as each completes.

    The pool is joined before the generator finishes, so the phase lasts as
    long as the slowest probe.
    """

    table = probes if probes is not None else build_probes(cfg)
    with ThreadPoolExecutor(max_workers=max(1, len(table)), thread_name_prefix="probe") as pool:
        futures = {pool.submit(_safe, name, fn): name for name, fn in table.items()}
        for fut in as_completed(futures):
            finding = fut.result()
            logger.info("Probe %s: %s %s", finding.name, finding.status, finding.detail)
            yield finding
