"""
Enumerations for primeng-migrate.

This module defines the standard enumerations used across the codebase for
rule categorization and step bookkeeping.
"""

from enum import Enum


class RuleCategory(str, Enum):
  """
  Kind of rewrite a rule performs.

  Used for grouping in the rule listing and in JSON reports.
  """

  IMPORT_PATH = "import_path"
  MODULE_CLASS = "module_class"
  SELECTOR = "selector"
  CSS_CLASS = "css_class"
  PROPERTY = "property"
  INTERFACE = "interface"
  DIRECTIVE = "directive"
  NOTICE = "notice"  # Marks code for manual follow-up without changing behaviour


class StepStatus(str, Enum):
  """
  Outcome of a single migration step (one rule, or one manifest edit).
  """

  PENDING = "pending"
  NO_MATCHES = "no_matches"
  DECLINED = "declined"
  DRY_RUN = "dry_run"
  APPLIED = "applied"  # Files written, nothing committed
  COMMITTED = "committed"
  FAILED = "failed"
