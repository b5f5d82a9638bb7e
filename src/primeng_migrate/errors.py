"""
Exception hierarchy for primeng-migrate.

Only conditions that abort a whole run (or a whole manifest step) are raised.
Per-file read/write failures are logged and recorded on the step result instead.
"""

from typing import List, Optional


class MigrationError(Exception):
  """Base class for all primeng-migrate errors."""


class ScanError(MigrationError):
  """Raised when the project root cannot be scanned at all."""


class ManifestError(MigrationError):
  """Raised when a manifest (package.json, angular.json) cannot be read or parsed."""


class GitError(MigrationError):
  """
  Raised when a git command exits non-zero or git cannot be executed.

  Attributes:
      command (List[str]): The argv that failed.
      stderr (str): Captured standard error of the command.
  """

  def __init__(self, message: str, command: Optional[List[str]] = None, stderr: str = "") -> None:
    super().__init__(message)
    self.command = command or []
    self.stderr = stderr

  def __str__(self) -> str:
    base = super().__str__()
    if self.stderr:
      return f"{base}: {self.stderr.strip()}"
    return base
