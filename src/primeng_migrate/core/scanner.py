"""
File Tree Scanner.

Walks the configured source directories, filters files by extension and
reports which ones a rule matches. Excluded directories (``node_modules``,
``.git``...) are pruned during the walk, never descended into.

Read failures are logged and skipped; only an unusable project root raises.
"""

import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence

from rich.markup import escape

from primeng_migrate.core.rule import MigrationRule
from primeng_migrate.errors import ScanError
from primeng_migrate.utils.console import log_warning


def read_source(path: Path) -> str:
  """
  Reads a source file as UTF-8 without newline translation.

  Args:
      path (Path): File to read.

  Returns:
      str: Exact file content.

  Raises:
      OSError: If the file cannot be read.
      UnicodeDecodeError: If the file is not valid UTF-8.
  """
  with open(path, "r", encoding="utf-8", newline="") as f:
    return f.read()


def write_source(path: Path, content: str) -> None:
  """
  Writes content back as UTF-8 without newline translation.

  Raises:
      OSError: If the file cannot be written.
  """
  with open(path, "w", encoding="utf-8", newline="") as f:
    f.write(content)


class FileScanner:
  """
  Enumerates candidate files below a set of search roots.

  Attributes:
      roots (List[Path]): Directories to walk.
      exclude_dirs (set): Directory names pruned from the walk.
  """

  def __init__(self, roots: Sequence[Path], exclude_dirs: Iterable[str] = ()) -> None:
    self.roots = [Path(r) for r in roots]
    self.exclude_dirs = set(exclude_dirs)

  def check_roots(self) -> List[Path]:
    """
    Validates the search roots.

    Missing roots are reported and dropped; having none left is fatal.

    Returns:
        List[Path]: Roots that exist and are directories.

    Raises:
        ScanError: If no usable root remains.
    """
    usable = []
    for root in self.roots:
      if root.is_dir():
        usable.append(root)
      else:
        log_warning(f"Source directory not found: [path]{escape(str(root))}[/path]")
    if not usable:
      raise ScanError(f"None of the source directories exist: {', '.join(str(r) for r in self.roots)}")
    return usable

  def iter_files(self, extensions: Optional[Iterable[str]] = None) -> Iterator[Path]:
    """
    Yields files below the roots, sorted per directory, without duplicates.

    Args:
        extensions (Optional[Iterable[str]]): Suffixes to keep (e.g. '.ts'). None keeps everything.

    Yields:
        Path: Matching files.
    """
    wanted = {e.lower() for e in extensions} if extensions is not None else None
    seen = set()

    for root in self.roots:
      if not root.is_dir():
        continue
      for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in self.exclude_dirs)
        for name in sorted(filenames):
          if wanted is not None and not any(name.lower().endswith(ext) for ext in wanted):
            continue
          path = Path(dirpath) / name
          key = path.resolve()
          if key in seen:
            continue
          seen.add(key)
          yield path

  def scan(self, rule: MigrationRule, errors: Optional[List[str]] = None) -> List[Path]:
    """
    Lists files with one of the rule's extensions whose content matches it.

    Args:
        rule (MigrationRule): Rule to test.
        errors (Optional[List[str]]): Collector for read failures.

    Returns:
        List[Path]: Matching files, sorted by path.
    """
    matched = []
    for path in self.iter_files(rule.extensions):
      text = self.read(path, errors)
      if text is not None and rule.matches(text):
        matched.append(path)
    return sorted(matched)

  def read(self, path: Path, errors: Optional[List[str]] = None) -> Optional[str]:
    """
    Reads a file. A failure is logged, appended to `errors` and returned as None.

    Args:
        path (Path): File to read.
        errors (Optional[List[str]]): Collector for the failure message.

    Returns:
        Optional[str]: Content, or None if the file could not be read.
    """
    try:
      return read_source(path)
    except (OSError, UnicodeDecodeError) as e:
      message = f"Could not read {path}: {e}"
      log_warning(escape(message))
      if errors is not None:
        errors.append(message)
      return None
