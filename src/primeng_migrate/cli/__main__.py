"""
Main Entry Point for primeng-migrate CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `primeng_migrate.cli.commands`.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from primeng_migrate.cli import commands
from primeng_migrate.rules import group_keys
from primeng_migrate import __version__


def _add_commit_flags(cmd: argparse.ArgumentParser) -> None:
  cmd.add_argument("--yes", "-y", action="store_true", help="Apply every step without asking")
  cmd.add_argument("--no-commit", action="store_true", help="Write files but do not commit them")
  cmd.add_argument(
    "--skip-git-check",
    action="store_true",
    help="Do not require a clean git work tree before starting",
  )


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="primeng-migrate: PrimeNG v17 to v18 codemod for Angular projects")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: RUN ---
  cmd_run = subparsers.add_parser("run", help="Apply migration rules to an Angular project")
  cmd_run.add_argument("path", type=Path, nargs="?", default=Path("."), help="Project root (default: .)")
  cmd_run.add_argument(
    "--group",
    dest="groups",
    action="append",
    choices=group_keys(),
    default=None,
    help="Rule group to run; repeat to select several (default: all, in table order)",
  )
  _add_commit_flags(cmd_run)
  cmd_run.add_argument("--dry-run", action="store_true", help="Print diffs without writing or committing")
  cmd_run.add_argument(
    "--source-dir",
    dest="source_dirs",
    action="append",
    default=None,
    help="Directory below the root to scan; repeatable (default: src, or from toml)",
  )
  cmd_run.add_argument(
    "--manifests",
    action="store_true",
    help="Also update package.json dependencies and angular.json theme imports",
  )
  cmd_run.add_argument("--json-report", type=Path, default=None, help="Save the step results to a JSON file")

  # --- Command: LIST ---
  cmd_list = subparsers.add_parser("list", help="Show the rule table")
  cmd_list.add_argument(
    "--group",
    dest="groups",
    action="append",
    choices=group_keys(),
    default=None,
    help="Only show this group; repeatable",
  )

  # --- Command: DEPS ---
  cmd_deps = subparsers.add_parser("deps", help="Update PrimeNG dependencies in package.json")
  cmd_deps.add_argument("path", type=Path, nargs="?", default=Path("."), help="Project root (default: .)")
  _add_commit_flags(cmd_deps)

  # --- Command: THEME ---
  cmd_theme = subparsers.add_parser("theme", help="Remove deprecated theme imports from angular.json")
  cmd_theme.add_argument("path", type=Path, nargs="?", default=Path("."), help="Project root (default: .)")
  _add_commit_flags(cmd_theme)

  args = parser.parse_args(argv)

  if args.command == "run":
    return commands.handle_run(
      args.path,
      groups=args.groups,
      assume_yes=args.yes,
      no_commit=args.no_commit,
      skip_git_check=args.skip_git_check,
      dry_run=args.dry_run,
      source_dirs=args.source_dirs,
      include_manifests=args.manifests,
      json_report=args.json_report,
    )

  elif args.command == "list":
    return commands.handle_list(args.groups)

  elif args.command == "deps":
    return commands.handle_deps(args.path, args.yes, args.no_commit, args.skip_git_check)

  elif args.command == "theme":
    return commands.handle_theme(args.path, args.yes, args.no_commit, args.skip_git_check)

  return 0


if __name__ == "__main__":
  sys.exit(main())
