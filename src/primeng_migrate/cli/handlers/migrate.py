"""
Run Command Handler.

This module implements the logic for the `primeng-migrate run` command.
It orchestrates:
1. Configuration loading (TOML + CLI overrides).
2. The git preflight and the rule-by-rule run via the Engine.
3. The summary table, the optional JSON report and the follow-up reminders.
"""

from pathlib import Path
from typing import List, Optional

from rich.markup import escape
from rich.table import Table

from primeng_migrate.config import RuntimeConfig
from primeng_migrate.core.change_set import MigrationReport
from primeng_migrate.core.engine import POST_MIGRATION_REMINDERS, MigrationEngine
from primeng_migrate.enums import StepStatus
from primeng_migrate.errors import MigrationError
from primeng_migrate.utils.console import console, log_error, log_info, log_success, log_warning

_STATUS_LABELS = {
  StepStatus.NO_MATCHES: "[dim]no matches[/dim]",
  StepStatus.DECLINED: "[yellow]declined[/yellow]",
  StepStatus.DRY_RUN: "[cyan]dry run[/cyan]",
  StepStatus.APPLIED: "[green]applied[/green]",
  StepStatus.COMMITTED: "[green]committed[/green]",
  StepStatus.FAILED: "[bold red]failed[/bold red]",
}


def load_config(
  path: Path,
  groups: Optional[List[str]] = None,
  assume_yes: bool = False,
  no_commit: bool = False,
  skip_git_check: bool = False,
  dry_run: bool = False,
  source_dirs: Optional[List[str]] = None,
) -> RuntimeConfig:
  """
  Resolves configuration from TOML, letting only flags that were given override it.

  Args:
      path: Project root.
      groups: Selected group keys, or None.
      assume_yes: ``--yes`` was given.
      no_commit: ``--no-commit`` was given.
      skip_git_check: ``--skip-git-check`` was given.
      dry_run: ``--dry-run`` was given.
      source_dirs: Directories given with ``--source-dir``, or None.

  Returns:
      RuntimeConfig: The resolved configuration.

  Raises:
      ValueError: If the configuration file or a group key is invalid.
  """
  return RuntimeConfig.load(
    root=path,
    source_dirs=source_dirs,
    groups=groups,
    assume_yes=True if assume_yes else None,
    commit=False if no_commit else None,
    git_check=False if skip_git_check else None,
    dry_run=True if dry_run else None,
  )


def handle_run(
  path: Path,
  groups: Optional[List[str]] = None,
  assume_yes: bool = False,
  no_commit: bool = False,
  skip_git_check: bool = False,
  dry_run: bool = False,
  source_dirs: Optional[List[str]] = None,
  include_manifests: bool = False,
  json_report: Optional[Path] = None,
) -> int:
  """
  Handles the 'run' command execution.

  Args:
      path: Angular project root.
      groups: Rule groups to run (None runs all).
      assume_yes: Apply every step without asking.
      no_commit: Write files but skip git commits.
      skip_git_check: Start even if the work tree is dirty.
      dry_run: Print diffs only.
      source_dirs: Directories below the root to scan.
      include_manifests: Also run the package.json and angular.json steps.
      json_report: Optional path to dump the report JSON.

  Returns:
      int: Exit code (0 for success, 1 if the run aborted or a step failed).
  """
  if not path.is_dir():
    log_error(f"Project root not found: [path]{escape(str(path))}[/path]")
    return 1

  try:
    config = load_config(path, groups, assume_yes, no_commit, skip_git_check, dry_run, source_dirs)
  except ValueError as e:
    log_error(escape(str(e)))
    return 1

  if config.dry_run:
    log_info("Dry run: no files will be written and nothing will be committed.")

  engine = MigrationEngine(config)
  try:
    report = engine.run(include_manifests=include_manifests)
  except MigrationError as e:
    log_error(escape(str(e)))
    return 1

  if json_report:
    _write_json_report(report, json_report)

  if report.aborted:
    log_error(f"Migration aborted: {report.abort_reason}")
    return 1

  _print_run_summary(report)

  if not config.dry_run:
    console.print("\n[bold]Next steps:[/bold]")
    for reminder in POST_MIGRATION_REMINDERS:
      console.print(f"  - {reminder}")

  return 1 if report.failed else 0


def _write_json_report(report: MigrationReport, path: Path) -> None:
  """
  Saves the report as JSON. A failure is logged, not raised.

  Args:
      report: The finished run.
      path: Destination file.
  """
  try:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wt", encoding="utf-8") as f:
      f.write(report.to_json())
    log_info(f"Report saved to [path]{escape(str(path))}[/path]")
  except OSError as e:
    log_error(escape(f"Failed to write report: {e}"))


def _print_run_summary(report: MigrationReport) -> None:
  """
  Renders a summary table of the steps that found something to change.

  Args:
      report: The finished run.
  """
  active = [s for s in report.steps if s.status != StepStatus.NO_MATCHES]

  if not active:
    log_success("Nothing to migrate: no file matched any rule.")
    return

  table = Table(title="Migration Report")
  table.add_column("Step", style="magenta")
  table.add_column("Status", justify="center")
  table.add_column("Files", justify="right")
  table.add_column("Issues", style="red")

  for step in active:
    issues = "; ".join(step.errors)
    if step.diagnostics:
      issues = "; ".join(filter(None, [issues, f"{len(step.diagnostics)} note(s) for manual review"]))
    status = _STATUS_LABELS.get(step.status, step.status.value)
    table.add_row(step.step_id, status, str(len(step.files)), escape(issues))

  console.print(table)

  diagnostics = [d for s in report.steps for d in s.diagnostics]
  for note in diagnostics:
    log_warning(escape(note))

  console.print(
    f"\n[bold]Summary:[/bold] {len(report.changed_files)} file(s) changed, {report.commit_count} commit(s)."
  )
