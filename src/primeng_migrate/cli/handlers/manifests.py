"""
Manifest Command Handlers.

Implements `primeng-migrate deps` (package.json) and `primeng-migrate theme`
(angular.json). Both run a single engine step behind the same git preflight
as a full run.
"""

from pathlib import Path

from rich.markup import escape

from primeng_migrate.cli.handlers.migrate import load_config
from primeng_migrate.core.change_set import StepResult
from primeng_migrate.core.engine import MigrationEngine
from primeng_migrate.enums import StepStatus
from primeng_migrate.utils.console import log_error


def _prepare(path: Path, assume_yes: bool, no_commit: bool, skip_git_check: bool):
  if not path.is_dir():
    log_error(f"Project root not found: [path]{escape(str(path))}[/path]")
    return None
  try:
    config = load_config(path, assume_yes=assume_yes, no_commit=no_commit, skip_git_check=skip_git_check)
  except ValueError as e:
    log_error(escape(str(e)))
    return None

  engine = MigrationEngine(config)
  if not engine.preflight():
    return None
  return engine


def _exit_code(result: StepResult) -> int:
  return 1 if result.status == StepStatus.FAILED else 0


def handle_deps(path: Path, assume_yes: bool = False, no_commit: bool = False, skip_git_check: bool = False) -> int:
  """
  Handles the 'deps' command.

  Args:
      path: Angular project root.
      assume_yes: Apply without asking.
      no_commit: Skip the git commit.
      skip_git_check: Start even if the work tree is dirty.

  Returns:
      int: Exit code (0 for success, 1 on failure).
  """
  engine = _prepare(path, assume_yes, no_commit, skip_git_check)
  if engine is None:
    return 1
  return _exit_code(engine.update_dependencies())


def handle_theme(path: Path, assume_yes: bool = False, no_commit: bool = False, skip_git_check: bool = False) -> int:
  """
  Handles the 'theme' command.

  Args:
      path: Angular project root.
      assume_yes: Apply without asking.
      no_commit: Skip the git commit.
      skip_git_check: Start even if the work tree is dirty.

  Returns:
      int: Exit code (0 for success, 1 on failure).
  """
  engine = _prepare(path, assume_yes, no_commit, skip_git_check)
  if engine is None:
    return 1
  return _exit_code(engine.remove_theme_imports())
