"""
Git Collaborator.

Thin `subprocess` wrapper around the ``git`` executable. The migration only
ever needs to know whether the work tree is dirty, to stash it, and to stage
and commit a list of files with a message.
"""

import shutil
import subprocess
from pathlib import Path
from typing import Iterable, List

from primeng_migrate.errors import GitError

STASH_MESSAGE = "primeng-migrate: changes stashed before migration"


class GitClient:
  """
  Runs git commands inside a working directory.

  Attributes:
      cwd (Path): Directory commands run in (the project root).
      executable (str): Name or path of the git binary.
  """

  def __init__(self, cwd: Path, executable: str = "git") -> None:
    self.cwd = Path(cwd)
    self.executable = executable

  def _run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
    """
    Executes ``git <args>`` and captures its output.

    Args:
        *args: Git arguments.
        check (bool): Raise on non-zero exit.

    Returns:
        subprocess.CompletedProcess: The finished process.

    Raises:
        GitError: If git cannot be executed, or exits non-zero while `check` is set.
    """
    cmd = [self.executable, *args]
    try:
      proc = subprocess.run(cmd, cwd=self.cwd, capture_output=True, text=True)
    except OSError as e:
      raise GitError(f"Could not execute {self.executable}", cmd, str(e)) from e

    if check and proc.returncode != 0:
      raise GitError(f"'{' '.join(cmd)}' exited with status {proc.returncode}", cmd, proc.stderr)
    return proc

  def is_available(self) -> bool:
    return shutil.which(self.executable) is not None

  def is_repository(self) -> bool:
    """
    Returns:
        bool: True if `cwd` is inside a git work tree.
    """
    try:
      proc = self._run("rev-parse", "--is-inside-work-tree", check=False)
    except GitError:
      return False
    return proc.returncode == 0 and proc.stdout.strip() == "true"

  def has_uncommitted_changes(self) -> bool:
    """
    Checks for modified, staged or untracked files.

    Returns:
        bool: True if ``git status --porcelain`` reports anything.
    """
    return bool(self._run("status", "--porcelain").stdout.strip())

  def stash(self) -> None:
    self._run("stash", "push", "--include-untracked", "-m", STASH_MESSAGE)

  def commit_paths(self, paths: Iterable[Path], message: str) -> bool:
    """
    Stages exactly `paths` and commits them, and nothing else.

    Args:
        paths (Iterable[Path]): Files to stage.
        message (str): Commit message.

    Returns:
        bool: True if a commit was created, False if nothing ended up staged.

    Raises:
        GitError: If staging or committing fails.
    """
    pathspecs = self._pathspecs(paths)
    if not pathspecs:
      return False

    self._run("add", "--", *pathspecs)
    staged = self._run("diff", "--cached", "--name-only", "--", *pathspecs).stdout.strip()
    if not staged:
      return False

    # Entries staged outside the pathspecs stay in the index, uncommitted.
    self._run("commit", "-m", message, "--", *pathspecs)
    return True

  def _pathspecs(self, paths: Iterable[Path]) -> List[str]:
    specs = []
    base = self.cwd.resolve()
    for p in paths:
      resolved = Path(p).resolve()
      try:
        specs.append(resolved.relative_to(base).as_posix())
      except ValueError:
        specs.append(str(resolved))
    return specs
