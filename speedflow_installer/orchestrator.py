from __future__ import annotations

import logging
import os
import shutil
import signal
import sys
import tempfile
import threading
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, TextIO

from . import __version__
from .errors import InstallCancelled
from .installer_config import InstallerConfig
from .lib.probe import iter_probes
from .pipeline import InstallCtx, PipelineResult, Step, run_pipeline
from .request import InstallationRequest
from .steps import (
    CheckRequirementsStep,
    GitSafetyStep,
    InstallBundleStep,
    VerifyInstallationStep,
    VerifyRemoteAccessStep,
)

logger = logging.getLogger(__name__)

SCRATCH_PREFIX = "speedflow-install-"

_TERMINATING_SIGNALS = [s for s in ("SIGTERM", "SIGHUP") if hasattr(signal, s)]


def build_steps() -> List[Step]:
    # Local safety checks run before anything touches the network.
    return [
        CheckRequirementsStep(),
        GitSafetyStep(),
        VerifyRemoteAccessStep(),
        InstallBundleStep(),
        VerifyInstallationStep(),
    ]


def is_interactive(
    request: InstallationRequest,
    stream: Optional[TextIO] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> bool:
    """Decide the rendering strategy. Called once, at startup."""

    env = os.environ if environ is None else environ
    out = stream if stream is not None else sys.stdout
    if request.silent or env.get("TERM", "") == "dumb":
        return False
    isatty = getattr(out, "isatty", None)
    return bool(isatty and isatty())


def _raise_on_signal(signum: int, frame: Any) -> None:
    logger.warning("Received signal %s, aborting", signum)
    raise SystemExit(128 + signum)


@contextmanager
def scratch_workspace(prefix: str = SCRATCH_PREFIX) -> Iterator[Path]:
    """A temp dir removed exactly once on every exit path.

    SIGINT already raises KeyboardInterrupt; SIGTERM/SIGHUP are turned into
    SystemExit for the lifetime of the workspace so the same cleanup runs.
    """

    path = Path(tempfile.mkdtemp(prefix=prefix))
    logger.debug("Created scratch workspace %s", path)

    previous: Dict[int, Any] = {}
    if threading.current_thread() is threading.main_thread():
        for name in _TERMINATING_SIGNALS:
            signum = getattr(signal, name)
            previous[signum] = signal.signal(signum, _raise_on_signal)

    try:
        yield path
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
        if path.exists():
            try:
                shutil.rmtree(path)
                logger.debug("Removed scratch workspace %s", path)
            except OSError as e:
                logger.warning("Could not remove scratch workspace %s: %s", path, e)


class Installer:
    """Runs one installation: welcome, questions, then the fixed pipeline."""

    def __init__(
        self,
        request: InstallationRequest,
        cfg: InstallerConfig,
        ui: Any,
        *,
        project_dir: Path,
        steps: Optional[Sequence[Step]] = None,
    ) -> None:
        self.request = request
        self.cfg = cfg
        self.ui = ui
        self.project_dir = project_dir
        self.steps = list(steps) if steps is not None else build_steps()

    @property
    def target(self) -> Path:
        return self.project_dir / self.cfg.target_dir

    def welcome(self) -> None:
        self.ui.welcome(__version__)
        if self.ui.interactive:
            report = self.ui.show_probes(iter_probes(self.cfg))
            failing = [f.label for f in report.values() if f.status == "fail"]
            if failing:
                # Display only; the requirements step makes the binding decision.
                logger.warning("Prechecks failed: %s", ", ".join(failing))
            self.ui.wait_to_continue()

    def resolve_request(self) -> InstallationRequest:
        """Fold interactive answers into the request before anything runs."""

        request = self.request
        choice = request.on_existing
        if self.target.exists():
            if choice is None:
                choice = self.ui.ask_existing(self.target)
            if choice == "cancel":
                raise InstallCancelled("Installation cancelled by user")
        elif choice == "cancel":
            choice = None

        auto_update = request.auto_update
        if auto_update is None:
            auto_update = self.ui.ask_auto_update()

        return replace(request, on_existing=choice, auto_update=auto_update)

    def run(self) -> PipelineResult:
        self.welcome()
        request = self.resolve_request()
        logger.debug("Resolved request: %s", request)

        confirm_retry = self.ui.confirm_commit if self.ui.interactive else None
        with scratch_workspace() as scratch:
            ctx = InstallCtx(
                request=request,
                cfg=self.cfg,
                project_dir=self.project_dir,
                scratch=scratch,
                confirm_retry=confirm_retry,
            )
            result = run_pipeline(ctx=ctx, state={}, steps=self.steps, reporter=self.ui)

        self.ui.success(result.state, self.cfg.target_dir)
        return result
