"""
Tests for the repository safety chain.
"""

import pytest

from speedflow_installer.errors import PreconditionError
from speedflow_installer.lib.precondition import (
    check_ignore_committed,
    enforce_git_safety,
    ensure_ignore_pattern,
    has_ignore_pattern,
)


@pytest.fixture
def repo(fake_runner):
    fake_runner.on("git", "rev-parse", "--is-inside-work-tree", stdout="true\n")
    fake_runner.on("git", "status", "--porcelain", stdout="")
    return fake_runner


class TestCheckRepository:
    def test_outside_work_tree_is_fatal_and_touches_nothing(self, fake_runner, cfg, tmp_path) -> None:
        fake_runner.on(
            "git", "rev-parse", returncode=128,
            stderr="fatal: not a git repository (or any of the parent directories): .git\n",
        )
        with pytest.raises(PreconditionError) as exc:
            enforce_git_safety(tmp_path, cfg)
        assert "Git repository" in str(exc.value)
        assert any("git init" in line for line in exc.value.remediation)
        assert not (tmp_path / ".gitignore").exists()
        assert not fake_runner.called("git", "status")


class TestIgnorePattern:
    def test_recognized_spellings(self) -> None:
        for text in (
            ".claude/\n",
            "/.claude/\n",
            ".claude\n",
            "dist/\n  .claude/  \n",
            ".claude/*\n",
            ".claude/**\n",
            "/.claude/**\n",
        ):
            assert has_ignore_pattern(text, ".claude/"), text
        assert not has_ignore_pattern(".claude/agents/\n", ".claude/")
        assert not has_ignore_pattern("# .claude/\n", ".claude/")

    def test_appends_when_missing(self, tmp_path) -> None:
        (tmp_path / ".gitignore").write_text("node_modules/")
        assert ensure_ignore_pattern(tmp_path, ".claude/") is True
        assert (tmp_path / ".gitignore").read_text() == "node_modules/\n.claude/\n"

    def test_creates_gitignore(self, tmp_path) -> None:
        assert ensure_ignore_pattern(tmp_path, ".claude/") is True
        assert (tmp_path / ".gitignore").read_text() == ".claude/\n"

    def test_glob_spelling_left_alone(self, tmp_path) -> None:
        (tmp_path / ".gitignore").write_text(".claude/*\n")
        assert ensure_ignore_pattern(tmp_path, ".claude/") is False
        assert (tmp_path / ".gitignore").read_text() == ".claude/*\n"

    def test_present_pattern_left_alone(self, tmp_path) -> None:
        (tmp_path / ".gitignore").write_text(".claude/\n")
        assert ensure_ignore_pattern(tmp_path, ".claude/") is False
        assert ensure_ignore_pattern(tmp_path, ".claude/") is False
        assert (tmp_path / ".gitignore").read_text() == ".claude/\n"


class TestIgnoreCommitted:
    def test_clean_status_passes(self, repo, cfg, tmp_path) -> None:
        check_ignore_committed(tmp_path, cfg)
        assert repo.calls_for("git", "status") == [["git", "status", "--porcelain", "--", ".gitignore"]]

    def test_dirty_without_prompt_is_fatal(self, repo, cfg, tmp_path) -> None:
        repo.on("git", "status", "--porcelain", stdout=" M .gitignore\n")
        with pytest.raises(PreconditionError) as exc:
            check_ignore_committed(tmp_path, cfg)
        assert any("git add .gitignore" in line for line in exc.value.remediation)

    def test_one_recheck_after_confirmation(self, repo, cfg, tmp_path) -> None:
        repo.on("git", "status", "--porcelain", stdout="?? .gitignore\n")
        prompts = []

        def confirm(status):
            prompts.append(status)
            repo.on("git", "status", "--porcelain", stdout="")
            return True

        check_ignore_committed(tmp_path, cfg, confirm_retry=confirm)
        assert prompts == ["?? .gitignore"]
        assert len(repo.calls_for("git", "status")) == 2

    def test_still_dirty_after_recheck_is_fatal(self, repo, cfg, tmp_path) -> None:
        repo.on("git", "status", "--porcelain", stdout=" M .gitignore\n")
        prompts = []
        with pytest.raises(PreconditionError):
            check_ignore_committed(tmp_path, cfg, confirm_retry=lambda s: prompts.append(s) or True)
        assert len(prompts) == 1
        assert len(repo.calls_for("git", "status")) == 2

    def test_declined_prompt_does_not_recheck(self, repo, cfg, tmp_path) -> None:
        repo.on("git", "status", "--porcelain", stdout=" M .gitignore\n")
        with pytest.raises(PreconditionError):
            check_ignore_committed(tmp_path, cfg, confirm_retry=lambda s: False)
        assert len(repo.calls_for("git", "status")) == 1


class TestEnforceGitSafety:
    def test_certifies_after_adding_pattern(self, repo, cfg, tmp_path) -> None:
        result = enforce_git_safety(tmp_path, cfg)
        assert result.certified
        assert result.ignore_added
        assert ".claude/" in (tmp_path / ".gitignore").read_text()

    def test_just_added_pattern_still_needs_commit(self, repo, cfg, tmp_path) -> None:
        repo.on("git", "status", "--porcelain", stdout="?? .gitignore\n")
        with pytest.raises(PreconditionError):
            enforce_git_safety(tmp_path, cfg)
        assert ".claude/" in (tmp_path / ".gitignore").read_text()
