from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional

DEFAULT_EXCLUDES = frozenset({".git", "install.sh", "README.md"})


@dataclass(frozen=True)
class InstallerConfig:
    raw: Dict[str, Any] = field(default_factory=dict)

    def _section(self, name: str) -> Dict[str, Any]:
        return self.raw.get(name) or {}

    @property
    def git_host(self) -> str:
        return str(self._section("remote").get("host") or "gitlab.speednet.pl")

    @property
    def repo(self) -> str:
        return str(self._section("remote").get("repo") or "speedflow/core")

    @property
    def web_url(self) -> str:
        return str(self._section("remote").get("web_url") or f"https://{self.git_host}")

    @property
    def remote_url(self) -> str:
        return f"git@{self.git_host}:{self.repo}.git"

    @property
    def greeting(self) -> str:
        return str(self._section("remote").get("greeting") or "Welcome")

    @property
    def ssh_timeout(self) -> int:
        return int(self._section("remote").get("ssh_timeout") or 10)

    @property
    def ls_remote_timeout(self) -> int:
        return int(self._section("remote").get("ls_remote_timeout") or 60)

    @property
    def probe_timeout(self) -> int:
        return int(self._section("remote").get("probe_timeout") or 5)

    @property
    def target_dir(self) -> str:
        return str(self._section("target").get("dir") or ".claude")

    @property
    def ignore_pattern(self) -> str:
        return str(self._section("target").get("ignore_pattern") or f"{self.target_dir}/")

    @property
    def required_dir(self) -> str:
        return str(self._section("target").get("required_dir") or "agents")

    @property
    def required_file(self) -> str:
        return str(self._section("target").get("required_file") or "settings.local.json")

    @property
    def bundle_excludes(self) -> FrozenSet[str]:
        excludes = self._section("bundle").get("exclude")
        if excludes is None:
            return DEFAULT_EXCLUDES
        return frozenset(str(e) for e in excludes)

    @property
    def assistant_command(self) -> str:
        return str(self._section("assistant").get("command") or "claude")

    @property
    def assistant_install_script(self) -> str:
        return str(self._section("assistant").get("install_script") or "https://claude.ai/install.sh")

    @property
    def assistant_brew_formula(self) -> str:
        return str(self._section("assistant").get("brew_formula") or "claude")

    @property
    def assistant_manual_url(self) -> str:
        return str(self._section("assistant").get("manual_url") or "https://claude.ai/code")

    @property
    def node_min_major(self) -> int:
        return int(self._section("runtime").get("node_min_major") or 18)


def load_installer_config(path: Optional[str]) -> InstallerConfig:
    """Load the YAML installer config; no path means built-in defaults."""

    if not path:
        return InstallerConfig()

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("installer config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the installer config") from e

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"{p.name}: {e}") from e
    if not isinstance(raw, dict):
        raise ValueError(f"{p.name} must contain a mapping/object")

    return InstallerConfig(raw=raw)
