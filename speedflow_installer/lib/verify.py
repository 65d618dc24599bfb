from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List


@dataclass(frozen=True)
class VerifyResult:
    ok: bool
    missing: List[str]
    agent_count: int


def verify_installation(target: Path, *, required_dir: str, required_file: str) -> VerifyResult:
    missing: List[str] = []
    agents = target / required_dir
    if not agents.is_dir():
        missing.append(f"{required_dir}/")
    if not (target / required_file).is_file():
        missing.append(required_file)

    count = sum(1 for _ in agents.iterdir()) if agents.is_dir() else 0
    return VerifyResult(ok=not missing, missing=missing, agent_count=count)
