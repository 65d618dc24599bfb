"""
Tests for the read-only host probes.
"""

import time

from speedflow_installer.lib.probe import (
    PROBE_ORDER,
    ProbeFinding,
    check_remote_access,
    is_windows,
    iter_probes,
    parse_node_major,
    probe_node,
    probe_os,
)


class TestProbeOs:
    def test_supported_platforms(self) -> None:
        assert probe_os("linux", {}).detail == "Linux"
        assert probe_os("darwin", {}).detail == "macOS"
        assert probe_os("linux", {"WSL_DISTRO_NAME": "Ubuntu"}).detail == "WSL"

    def test_windows_and_unknown_fail(self) -> None:
        win = probe_os("win32", {})
        assert win.status == "fail"
        assert "WSL" in win.detail
        assert probe_os("sunos5", {}).status == "fail"

    def test_windir_counts_as_windows(self) -> None:
        finding = probe_os("sunos5", {"WINDIR": "C:\\Windows"})
        assert finding.status == "fail"
        assert "WSL" in finding.detail
        assert is_windows("sunos5", {"WINDIR": "C:\\Windows"})
        assert not is_windows("linux", {})


class TestProbeNode:
    def test_parse_major(self) -> None:
        assert parse_node_major("v20.11.0\n") == 20
        assert parse_node_major("garbage") is None

    def test_tri_state(self, fake_runner, path_tools) -> None:
        fake_runner.on("node", "--version", stdout="v20.11.0\n")
        assert probe_node(18).status == "ok"

        fake_runner.on("node", "--version", stdout="v16.20.2\n")
        assert probe_node(18).status == "warn"

        path_tools.discard("node")
        assert probe_node(18).status == "fail"


class TestRemoteAccess:
    def test_greeting_counts_even_with_nonzero_exit(self, fake_runner, cfg) -> None:
        fake_runner.on("ssh", "-T", returncode=1, stderr="Welcome to GitLab, @dev!\n")
        assert check_remote_access(cfg, timeout=10)
        argv = fake_runner.calls_for("ssh")[0]
        assert argv[2] == "git@gitlab.speednet.pl"
        assert "BatchMode=yes" in argv
        assert "ConnectTimeout=10" in argv

    def test_no_greeting_is_failure(self, fake_runner, cfg) -> None:
        fake_runner.on("ssh", "-T", returncode=255, stderr="git@gitlab.speednet.pl: Permission denied (publickey).\n")
        assert not check_remote_access(cfg, timeout=10)

    def test_timeout_is_failure(self, fake_runner, cfg) -> None:
        fake_runner.on("ssh", "-T", returncode=124)
        assert not check_remote_access(cfg, timeout=5)


class TestIterProbes:
    def test_all_findings_yielded(self, healthy_remote, cfg) -> None:
        findings = {f.name: f for f in iter_probes(cfg)}
        assert sorted(findings) == sorted(PROBE_ORDER)
        assert findings["remote"].ok
        assert findings["node"].ok

    def test_crashing_probe_reported_as_failure(self, cfg) -> None:
        def boom() -> ProbeFinding:
            raise OSError("no process table")

        findings = list(iter_probes(cfg, {"os": boom, "git": lambda: ProbeFinding("git", "Git", "ok")}))
        by_name = {f.name: f for f in findings}
        assert by_name["os"].status == "fail"
        assert by_name["git"].ok

    def test_probes_run_concurrently(self, cfg) -> None:
        def slow(name):
            def run() -> ProbeFinding:
                time.sleep(0.3)
                return ProbeFinding(name, name, "ok")

            return run

        started = time.monotonic()
        findings = list(iter_probes(cfg, {name: slow(name) for name in PROBE_ORDER}))
        elapsed = time.monotonic() - started

        assert len(findings) == 5
        assert elapsed < 1.0
