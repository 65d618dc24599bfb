"""Two renderings of the same install run.

PlainConsole is for silent/non-interactive runs: no prompts, plain log lines.
RichConsole draws the banner, the live precheck table, prompts and per-step
spinners. Neither changes what the pipeline does or in which order.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

from rich.align import Align
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.status import Status
from rich.table import Table
from rich.text import Text

from .errors import InstallerError
from .lib.probe import PROBE_ORDER, ProbeFinding, ProbeReport
from .lib.updates import UpdateStatus
from .request import ExistingChoice

logger = logging.getLogger(__name__)

ICONS = {"ok": "✅", "warn": "⚠️", "fail": "❌"}
PENDING = "⏳"

_EXISTING_CHOICES: Dict[str, ExistingChoice] = {"1": "backup", "2": "remove", "3": "cancel"}


def describe_update(status: UpdateStatus) -> str:
    if status.state == "unknown":
        return "Could not check for updates (no network or no tags)"
    if status.state == "not_installed":
        return f"Speedflow is not installed here; latest version is v{status.latest}"
    if status.state == "available":
        return f"Update available: v{status.latest} (current: v{status.installed})"
    return f"Speedflow is up to date (v{status.installed})"


def next_steps(state: Dict[str, Any], target_dir: str) -> List[str]:
    agents = (state.get("verify") or {}).get("agent_count", 0)
    return [
        "Next steps:",
        "  1. Start Claude Code CLI: claude",
        "  2. Use Speedflow commands: /speedflow-review-pr",
        "  3. Access Speedflow agents automatically",
        f"Files installed in {target_dir}/ ({agents} AI agents)",
    ]


class PlainConsole:
    interactive = False

    def welcome(self, version: str) -> None:
        logger.info("Speedflow installer v%s", version)

    def show_probes(self, findings: Iterable[ProbeFinding]) -> ProbeReport:
        report: ProbeReport = {}
        for f in findings:
            report[f.name] = f
            logger.info("%s %s %s", ICONS[f.status], f.label, f.detail)
        return report

    def ask_existing(self, target: Path) -> ExistingChoice:
        logger.warning("Existing installation found in %s; backing it up", target.name)
        return "backup"

    def ask_auto_update(self) -> bool:
        return False

    def ask_launch(self) -> bool:
        return False

    @contextmanager
    def step(self, step: Any) -> Iterator[None]:
        logger.info("%s...", step.title)
        try:
            yield
        except BaseException:
            logger.error("%s - Failed!", step.title)
            raise
        logger.info("%s - Complete!", step.title)

    def success(self, state: Dict[str, Any], target_dir: str) -> None:
        logger.info("Ready to use Speedflow with Claude Code!")
        for line in next_steps(state, target_dir):
            logger.info("%s", line)

    def info(self, message: str) -> None:
        logger.info("%s", message)

    def error(self, exc: InstallerError, log_path: Optional[str] = None) -> None:
        logger.error("%s", exc)
        for line in exc.remediation:
            logger.error("  %s", line)
        if log_path:
            logger.error("Details: %s", log_path)

    def update_status(self, status: UpdateStatus) -> None:
        logger.info("%s", describe_update(status))


class RichConsole:
    interactive = True

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()
        self._status: Optional[Status] = None

    def welcome(self, version: str) -> None:
        self.console.clear()
        title = Text("SPEEDFLOW", style="bold blue")
        subtitle = Text.assemble(("by Speednet", "blue"), "\n", (f"installer v{version}", "yellow"))
        body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
        self.console.print(Panel(body, border_style="blue", padding=(1, 4)))
        self.console.print("[blue]System Requirements Check:[/blue]\n")

    def _probe_table(self, report: ProbeReport, labels: Dict[str, str]) -> Table:
        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column("Status", no_wrap=True)
        table.add_column("Check", style="white")
        table.add_column("Details", style="dim")
        for name in PROBE_ORDER:
            f = report.get(name)
            if f is None:
                table.add_row(PENDING, labels.get(name, name), "")
            else:
                table.add_row(ICONS[f.status], f.label, f.detail)
        return table

    def show_probes(self, findings: Iterable[ProbeFinding]) -> ProbeReport:
        report: ProbeReport = {}
        labels = {
            "os": "Operating System (Linux/macOS/WSL)",
            "git": "Git installed",
            "node": "Node.js",
            "assistant": "Claude Code CLI",
            "remote": "GitLab SSH access",
        }
        with Live(self._probe_table(report, labels), console=self.console, refresh_per_second=8) as live:
            for f in findings:
                report[f.name] = f
                live.update(self._probe_table(report, labels))
        return report

    def wait_to_continue(self) -> None:
        Prompt.ask("\nPress Enter to continue with installation", default="", show_default=False, console=self.console)
        self.console.clear()

    def ask_existing(self, target: Path) -> ExistingChoice:
        self.console.print(f"\n[yellow]⚠️  Existing Speedflow installation found in {target.name}/[/yellow]\n")
        self.console.print("Choose an option:")
        self.console.print("  1) Backup current installation and install fresh")
        self.console.print("  2) Remove current installation and install fresh")
        self.console.print("  3) Exit without changes\n")
        answer = Prompt.ask("Enter your choice", choices=list(_EXISTING_CHOICES), console=self.console)
        return _EXISTING_CHOICES[answer]

    def ask_auto_update(self) -> bool:
        self.console.print("\n[yellow]Auto-Update Configuration:[/yellow]")
        self.console.print("• Speedflow can automatically check for updates when Claude starts")
        self.console.print("• Updates require manual confirmation")
        self.console.print("• You can change this later in .claude/config.json\n")
        return Confirm.ask("Enable auto-update checking?", default=True, console=self.console)

    def confirm_commit(self, status: str) -> bool:
        # Called from inside a step; the spinner must not redraw over the prompt.
        spinner = self._status
        if spinner is not None:
            spinner.stop()
        try:
            self.console.print(f"\n[red]❌ .gitignore must be committed[/red] (git status: {status})")
            self.console.print("   git add .gitignore")
            self.console.print("   git commit -m 'Add .claude to gitignore'\n")
            return Confirm.ask("Committed? Check again", default=True, console=self.console)
        finally:
            if spinner is not None:
                spinner.start()

    def ask_launch(self) -> bool:
        self.console.print("\n[yellow]🚀 Launch Claude Code CLI now?[/yellow]")
        self.console.print("• Claude Code is ready with Speedflow enhancements")
        self.console.print("• You'll need to approve directory trust (choose 'Yes, proceed')\n")
        return Confirm.ask("Start Claude Code CLI?", default=True, console=self.console)

    @contextmanager
    def step(self, step: Any) -> Iterator[None]:
        status = self.console.status(f"[blue]{step.title}...[/blue]", spinner="dots")
        self._status = status
        try:
            with status:
                yield
        except BaseException:
            self.console.print(f"[red]❌[/red] {step.title} - Failed!")
            raise
        finally:
            self._status = None
        self.console.print(f"[green]✅[/green] {step.title} - Complete!")

    def success(self, state: Dict[str, Any], target_dir: str) -> None:
        self.console.print("\n[green]✅ Ready to use Speedflow with Claude Code! 🎯[/green]\n")
        for line in next_steps(state, target_dir):
            self.console.print(line)

    def info(self, message: str) -> None:
        self.console.print(f"[blue]ℹ️  {message}[/blue]")

    def error(self, exc: InstallerError, log_path: Optional[str] = None) -> None:
        self.console.print(f"\n[red]❌ {exc}[/red]\n")
        for line in exc.remediation:
            self.console.print(f"   {line}", markup=False, highlight=False)
        self.console.print("\n   Need help? Slack: #speedflow-support")
        if log_path:
            self.console.print(f"   Log: {log_path}", style="dim")

    def update_status(self, status: UpdateStatus) -> None:
        style = "yellow" if status.state == "available" else "green"
        self.console.print(f"[{style}]{describe_update(status)}[/{style}]")
