"""
Data structures describing what a migration step changed.

`FileChangeSet` is transient: it is built by the engine's preview, then
either written back or dropped. `StepResult` and `MigrationReport` survive the
run and feed the summary table and the optional JSON report.
"""

import difflib
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from primeng_migrate.core.rule import MigrationRule
from primeng_migrate.enums import StepStatus


class FileChange(BaseModel):
  """
  Before/after content of one file matched by a rule.
  """

  path: Path
  before: str
  after: str
  matches: int = Field(0, description="Pattern occurrences in the original content.")
  diagnostics: List[str] = Field(default_factory=list, description="Notes for manual follow-up.")

  @property
  def changed(self) -> bool:
    return self.before != self.after

  def display_path(self, root: Optional[Path] = None) -> str:
    """
    Returns the path relative to `root` when possible.

    Args:
        root (Optional[Path]): Project root.

    Returns:
        str: POSIX-style path string.
    """
    if root is not None:
      try:
        return self.path.relative_to(root).as_posix()
      except ValueError:
        pass
    return self.path.as_posix()

  def diff(self, root: Optional[Path] = None) -> str:
    """
    Renders a unified diff of the change.

    Args:
        root (Optional[Path]): Project root used to shorten file names.

    Returns:
        str: The diff, or an empty string if nothing changed.
    """
    if not self.changed:
      return ""
    name = self.display_path(root)
    return "".join(
      difflib.unified_diff(
        self.before.splitlines(keepends=True),
        self.after.splitlines(keepends=True),
        fromfile=f"a/{name}",
        tofile=f"b/{name}",
      )
    )


class FileChangeSet(BaseModel):
  """
  The files whose content matched one rule, with their rewritten content.
  """

  rule: MigrationRule
  changes: List[FileChange] = Field(default_factory=list)
  errors: List[str] = Field(default_factory=list, description="Files that could not be read.")

  @property
  def changed(self) -> List[FileChange]:
    return [c for c in self.changes if c.changed]

  @property
  def changed_files(self) -> List[Path]:
    return [c.path for c in self.changed]

  @property
  def match_count(self) -> int:
    return sum(c.matches for c in self.changed)

  @property
  def diagnostics(self) -> List[str]:
    """
    Returns:
        List[str]: Every diagnostic, prefixed with its file path.
    """
    return [f"{c.path.as_posix()}: {d}" for c in self.changes for d in c.diagnostics]


class StepResult(BaseModel):
  """
  Outcome of one migration step.
  """

  step_id: str
  description: str = ""
  status: StepStatus = StepStatus.PENDING
  files: List[str] = Field(default_factory=list, description="Files written (or that would be written).")
  commit_message: Optional[str] = None
  errors: List[str] = Field(default_factory=list)
  diagnostics: List[str] = Field(default_factory=list)

  @property
  def has_errors(self) -> bool:
    return len(self.errors) > 0


class MigrationReport(BaseModel):
  """
  Ordered results of every step of a run.
  """

  steps: List[StepResult] = Field(default_factory=list)
  aborted: bool = Field(False, description="True if the run stopped before processing rules.")
  abort_reason: Optional[str] = None

  @property
  def changed_files(self) -> List[str]:
    seen = {f for s in self.steps if s.status in (StepStatus.APPLIED, StepStatus.COMMITTED) for f in s.files}
    return sorted(seen)

  @property
  def commit_count(self) -> int:
    return sum(1 for s in self.steps if s.status == StepStatus.COMMITTED)

  @property
  def has_errors(self) -> bool:
    return any(s.has_errors for s in self.steps)

  @property
  def failed(self) -> bool:
    """
    Returns:
        bool: True if the run was aborted or any step failed outright.
    """
    return self.aborted or any(s.status == StepStatus.FAILED for s in self.steps)

  def to_json(self) -> str:
    """
    Serializes the report.

    Returns:
        str: Indented JSON.
    """
    return self.model_dump_json(indent=2)
