"""
CLI Command Handlers Facade.

This module re-exports handlers from `primeng_migrate.cli.handlers` so the
dispatcher (and tests patching it) has a single import point.
"""

from primeng_migrate.cli.handlers.migrate import handle_run, _print_run_summary, _write_json_report
from primeng_migrate.cli.handlers.listing import handle_list
from primeng_migrate.cli.handlers.manifests import handle_deps, handle_theme

# Re-export dependent classes to satisfy test patches that target this module
from primeng_migrate.core.engine import MigrationEngine
from primeng_migrate.vcs.git import GitClient

__all__ = [
  "GitClient",
  "MigrationEngine",
  "_print_run_summary",
  "_write_json_report",
  "handle_deps",
  "handle_list",
  "handle_run",
  "handle_theme",
]
