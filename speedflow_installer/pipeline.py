from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ContextManager, Dict, List, Optional, Protocol, Sequence

from .installer_config import InstallerConfig
from .lib.precondition import ConfirmRetry
from .request import InstallationRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallCtx:
    request: InstallationRequest
    cfg: InstallerConfig
    project_dir: Path
    scratch: Path
    confirm_retry: Optional[ConfirmRetry] = None

    @property
    def target(self) -> Path:
        return self.project_dir / self.cfg.target_dir


class Step(Protocol):
    """A single pipeline step. Raises on failure; never retries."""

    step_id: str
    title: str

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


class StepReporter(Protocol):
    def step(self, step: Step) -> ContextManager[None]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    exe = state.setdefault("execution", {})
    completed = exe.setdefault("completed_steps", [])
    if step_id not in completed:
        completed.append(step_id)


def is_step_completed(state: Dict[str, Any], step_id: str) -> bool:
    exe = state.get("execution") or {}
    return step_id in (exe.get("completed_steps") or [])


def run_pipeline(
    *,
    ctx: InstallCtx,
    state: Dict[str, Any],
    steps: Sequence[Step],
    reporter: StepReporter,
) -> PipelineResult:
    """Run steps strictly in order; the first failure aborts the rest."""

    ran: List[str] = []

    for step in steps:
        state.setdefault("execution", {})["current_step"] = step.step_id
        logger.debug("Running step %s", step.step_id)
        with reporter.step(step):
            state = step.run(ctx, state)
        mark_step_completed(state, step.step_id)
        ran.append(step.step_id)

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran)
