"""
Pytest configuration and fixtures for the Speedflow installer tests.

External commands never run: `run_cmd` is replaced by a scripted FakeRunner
and `shutil.which` by a fake PATH. Filesystem work uses real temp dirs.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Set

import pytest

from speedflow_installer.installer_config import InstallerConfig
from speedflow_installer.lib.command import CmdResult, CommandError
from speedflow_installer.logging_utils import reset_logging

SHA = "0123456789abcdef0123456789abcdef01234567"

CONFIG_TEMPLATE = (
    '{\n  "version": "{{VERSION}}",\n  "auto_update": {{AUTO_UPDATE}},\n'
    '  "installed_at": "{{INSTALLED_AT}}"\n}\n'
)
SETTINGS_TEMPLATE = '{\n  "permissions": {"allow": ["Bash(git status)"]}\n}\n'


class FakeRunner:
    """Stand-in for run_cmd. The most recently added matching rule wins."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.envs: List[Optional[dict]] = []
        self._rules: list = []

    def on(
        self,
        *prefix: str,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        effect: Optional[Callable[[List[str]], None]] = None,
    ) -> "FakeRunner":
        self._rules.insert(0, (list(prefix), returncode, stdout, stderr, effect))
        return self

    def __call__(self, argv, *, check=True, env=None, cwd=None, input_text=None, timeout=None) -> CmdResult:
        argv = list(argv)
        self.calls.append(argv)
        self.envs.append(dict(env) if env else None)
        rc, out, err = 0, "", ""
        for prefix, r, o, e, effect in self._rules:
            if argv[: len(prefix)] == prefix:
                if effect is not None:
                    effect(argv)
                rc, out, err = r, o, e
                break
        if check and rc != 0:
            raise CommandError(argv, rc, err)
        return CmdResult(argv=argv, returncode=rc, stdout=out, stderr=err)

    def calls_for(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if c[: len(prefix)] == list(prefix)]

    def envs_for(self, *prefix: str) -> List[Optional[dict]]:
        return [e for c, e in zip(self.calls, self.envs) if c[: len(prefix)] == list(prefix)]

    def called(self, *prefix: str) -> bool:
        return bool(self.calls_for(*prefix))


def ls_remote_output(tags: Iterable[str]) -> str:
    lines = []
    for tag in tags:
        lines.append(f"{SHA}\trefs/tags/{tag}")
        lines.append(f"{SHA}\trefs/tags/{tag}^{{}}")
    return "\n".join(lines) + ("\n" if lines else "")


def make_bundle(dest: Path, *, agents: Iterable[str] = ("reviewer.md", "architect.md"), settings: bool = True) -> Path:
    """Lay out a fetched Speedflow checkout."""

    dest.mkdir(parents=True, exist_ok=True)
    (dest / ".git").mkdir()
    (dest / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    (dest / "install.sh").write_text("#!/bin/bash\n")
    (dest / "README.md").write_text("# Speedflow\n")
    (dest / ".mcp.json").write_text("{}\n")
    agents_dir = dest / "agents"
    agents_dir.mkdir()
    for name in agents:
        (agents_dir / name).write_text(f"# {name}\n")
    (dest / "commands").mkdir()
    (dest / "commands" / "speedflow-review-pr.md").write_text("Review the PR\n")
    templates = dest / "templates"
    templates.mkdir()
    (templates / "config.json.template").write_text(CONFIG_TEMPLATE)
    if settings:
        (templates / "settings.local.json.template").write_text(SETTINGS_TEMPLATE)
    return dest


def clone_creates_bundle(**kwargs) -> Callable[[List[str]], None]:
    return lambda argv: make_bundle(Path(argv[-1]), **kwargs)


@pytest.fixture(autouse=True)
def clean_logging():
    yield
    reset_logging()


@pytest.fixture
def cfg() -> InstallerConfig:
    return InstallerConfig()


@pytest.fixture
def fake_runner(monkeypatch) -> FakeRunner:
    runner = FakeRunner()
    for mod in ("gitops", "probe", "assistant"):
        monkeypatch.setattr(f"speedflow_installer.lib.{mod}.run_cmd", runner)
    return runner


@pytest.fixture
def path_tools(monkeypatch) -> Set[str]:
    """Executables visible on the fake PATH; mutate the set to change it."""

    available = {"git", "ssh", "node", "claude"}
    monkeypatch.setattr(
        "shutil.which",
        lambda name, *args, **kwargs: f"/usr/bin/{name}" if name in available else None,
    )
    return available


@pytest.fixture
def scratch_root(tmp_path, monkeypatch) -> Path:
    """Redirect tempfile so leftover scratch workspaces are visible."""

    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


@pytest.fixture
def project(tmp_path, monkeypatch) -> Path:
    p = tmp_path / "client-project"
    p.mkdir()
    (p / ".gitignore").write_text("node_modules/\n")
    monkeypatch.chdir(p)
    return p


@pytest.fixture
def healthy_remote(fake_runner, path_tools) -> FakeRunner:
    """A Git repo with a committed .gitignore and a reachable remote tagged 1.0.0 and 1.1.0."""

    fake_runner.on("git", "rev-parse", "--is-inside-work-tree", stdout="true\n")
    fake_runner.on("git", "status", "--porcelain", stdout="")
    fake_runner.on("node", "--version", stdout="v20.11.0\n")
    fake_runner.on("ssh", "-T", returncode=1, stderr="Welcome to GitLab, @dev!\n")
    fake_runner.on("git", "ls-remote", "--tags", stdout=ls_remote_output(["v1.0.0", "v1.1.0"]))
    fake_runner.on("git", "clone", effect=clone_creates_bundle())
    fake_runner.on("git", "-C")
    return fake_runner
