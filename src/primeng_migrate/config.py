"""
Runtime Configuration Store.

`RuntimeConfig` is the single configuration value handed to the engine. It
is resolved from (lowest to highest precedence):

1. Field defaults.
2. ``[tool.primeng_migrate]`` in a ``pyproject.toml`` or the top level of a
   ``primeng-migrate.toml``, searched from the project root upwards.
3. Explicit overrides (usually CLI flags).
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from primeng_migrate.rules import group_keys

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib

CONFIG_FILENAME = "primeng-migrate.toml"
TOOL_SECTION = "primeng_migrate"

DEFAULT_EXCLUDES = ["node_modules", ".git", "dist", ".angular", "coverage"]


class RuntimeConfig(BaseModel):
  """
  Configuration for a migration run.
  """

  root: Path = Field(default_factory=Path.cwd, description="Angular project root (where package.json lives).")
  source_dirs: List[str] = Field(
    default_factory=lambda: ["src"], description="Directories below root that are scanned for source files."
  )
  exclude_dirs: List[str] = Field(
    default_factory=lambda: list(DEFAULT_EXCLUDES), description="Directory names never descended into."
  )
  groups: Optional[List[str]] = Field(None, description="Rule groups to run, in table order. None runs all.")
  assume_yes: bool = Field(False, description="Answer yes to every confirmation instead of prompting.")
  commit: bool = Field(True, description="Stage and commit each applied step with git.")
  git_check: bool = Field(True, description="Refuse to start on a dirty work tree unless changes are stashed.")
  dry_run: bool = Field(False, description="Show diffs without writing files or committing.")

  @field_validator("groups")
  @classmethod
  def validate_groups(cls, v: Optional[List[str]]) -> Optional[List[str]]:
    """
    Ensures every requested group exists in the rule table.

    Args:
        v (Optional[List[str]]): Requested group keys.

    Returns:
        Optional[List[str]]: Normalized (lowercase, deduplicated) keys.

    Raises:
        ValueError: If a key is not a known group.
    """
    if v is None:
      return None
    known = group_keys()
    cleaned: List[str] = []
    for key in v:
      k = key.lower().strip()
      if k not in known:
        raise ValueError(f"Unknown rule group: '{k}'. Known groups: {known}")
      if k not in cleaned:
        cleaned.append(k)
    return cleaned

  @property
  def search_roots(self) -> List[Path]:
    """
    Absolute directories the scanner walks.

    Returns:
        List[Path]: ``root / d`` for each configured source dir.
    """
    return [(self.root / d) for d in self.source_dirs]

  @property
  def commits_enabled(self) -> bool:
    return self.commit and not self.dry_run

  @classmethod
  def load(
    cls,
    root: Optional[Path] = None,
    source_dirs: Optional[List[str]] = None,
    groups: Optional[List[str]] = None,
    assume_yes: Optional[bool] = None,
    commit: Optional[bool] = None,
    git_check: Optional[bool] = None,
    dry_run: Optional[bool] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from TOML and applies explicit overrides.

    Args:
        root (Optional[Path]): Project root. Defaults to the current directory.
        source_dirs (Optional[List[str]]): Override for scanned directories.
        groups (Optional[List[str]]): Override for selected rule groups.
        assume_yes (Optional[bool]): Override for non-interactive mode.
        commit (Optional[bool]): Override for committing.
        git_check (Optional[bool]): Override for the dirty work tree check.
        dry_run (Optional[bool]): Override for dry-run mode.

    Returns:
        RuntimeConfig: The fully resolved configuration object.
    """
    final_root = (root or Path.cwd()).resolve()
    toml_config, _ = _load_toml_settings(final_root)

    overrides: Dict[str, Any] = {
      "source_dirs": source_dirs,
      "groups": groups,
      "assume_yes": assume_yes,
      "commit": commit,
      "git_check": git_check,
      "dry_run": dry_run,
    }

    values: Dict[str, Any] = {"root": final_root}
    for key in ("source_dirs", "exclude_dirs", "groups", "assume_yes", "commit", "git_check", "dry_run"):
      if overrides.get(key) is not None:
        values[key] = overrides[key]
      elif key in toml_config:
        values[key] = toml_config[key]

    return cls(**values)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches `start_path` and its parents for a configuration file.

  ``primeng-migrate.toml`` wins over ``pyproject.toml`` in the same directory.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    dedicated = parent / CONFIG_FILENAME
    if dedicated.is_file():
      return _read_toml(dedicated), parent

    pyproject = parent / "pyproject.toml"
    if pyproject.is_file():
      data = _read_toml(pyproject)
      section = data.get("tool", {}).get(TOOL_SECTION)
      if section is not None:
        return section, parent

  return {}, None


def _read_toml(path: Path) -> Dict[str, Any]:
  try:
    with open(path, "rb") as f:
      return tomllib.load(f)
  except (OSError, tomllib.TOMLDecodeError) as e:
    raise ValueError(f"Could not read configuration file {path}: {e}") from e
