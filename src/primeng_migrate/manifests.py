"""
Manifest Edits.

Flat key/value edits of the Angular project's JSON manifests that accompany
the source migration:

1.  ``package.json``: bump PrimeNG-related dependencies that are already
    declared (nothing is added).
2.  ``angular.json``: drop the v17 theme stylesheets under
    ``primeng/resources`` from every project's build styles.

Each function plans the edit, optionally writes it, and returns what changed
so the caller can confirm and commit.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from primeng_migrate.errors import ManifestError

PACKAGE_JSON = "package.json"
ANGULAR_JSON = "angular.json"

DEPENDENCY_SECTIONS = ("dependencies", "devDependencies")

PRIMENG_DEPENDENCIES: Dict[str, str] = {
  "primeng": "^18.0.0",
  "primeicons": "^7.0.0",
  "primeflex": "^4.0.0",
}

THEME_MARKER = "primeng/resources"


class DependencyChange(BaseModel):
  """One version bump in package.json."""

  section: str
  name: str
  old: str
  new: str

  def __str__(self) -> str:
    return f"{self.section}.{self.name}: {self.old} -> {self.new}"


class ThemeImportRemoval(BaseModel):
  """One style entry removed from angular.json."""

  project: str
  entry: str

  def __str__(self) -> str:
    return f"{self.project}: {self.entry}"


def load_json(path: Path) -> Dict[str, Any]:
  """
  Reads a JSON manifest.

  Args:
      path (Path): Manifest file.

  Returns:
      Dict[str, Any]: Parsed object.

  Raises:
      ManifestError: If the file cannot be read or is not a JSON object.
  """
  try:
    with open(path, "r", encoding="utf-8") as f:
      data = json.load(f)
  except OSError as e:
    raise ManifestError(f"Could not read {path}: {e}") from e
  except json.JSONDecodeError as e:
    raise ManifestError(f"Invalid JSON in {path}: {e}") from e

  if not isinstance(data, dict):
    raise ManifestError(f"{path} does not contain a JSON object")
  return data


def dump_json(path: Path, data: Dict[str, Any]) -> None:
  """
  Writes a manifest with 2-space indentation and a trailing newline.

  Raises:
      ManifestError: If the file cannot be written.
  """
  try:
    with open(path, "w", encoding="utf-8") as f:
      json.dump(data, f, indent=2, ensure_ascii=False)
      f.write("\n")
  except OSError as e:
    raise ManifestError(f"Could not write {path}: {e}") from e


def update_dependencies(
  root: Path,
  targets: Optional[Dict[str, str]] = None,
  write: bool = True,
) -> List[DependencyChange]:
  """
  Bumps declared PrimeNG packages in package.json.

  Args:
      root (Path): Project root containing package.json.
      targets (Optional[Dict[str, str]]): Package -> version. Defaults to `PRIMENG_DEPENDENCIES`.
      write (bool): Persist the edit. False only plans it.

  Returns:
      List[DependencyChange]: Bumps performed (or planned). Empty if package.json is missing.

  Raises:
      ManifestError: If package.json exists but is unreadable or invalid.
  """
  path = root / PACKAGE_JSON
  if not path.is_file():
    return []

  wanted = targets if targets is not None else PRIMENG_DEPENDENCIES
  data = load_json(path)
  changes: List[DependencyChange] = []

  for section in DEPENDENCY_SECTIONS:
    deps = data.get(section)
    if not isinstance(deps, dict):
      continue
    for name, version in wanted.items():
      current = deps.get(name)
      if current is None or current == version:
        continue
      changes.append(DependencyChange(section=section, name=name, old=str(current), new=version))
      deps[name] = version

  if changes and write:
    dump_json(path, data)
  return changes


def _style_input(entry: Any) -> Optional[str]:
  if isinstance(entry, str):
    return entry
  if isinstance(entry, dict) and isinstance(entry.get("input"), str):
    return entry["input"]
  return None


def remove_theme_imports(root: Path, write: bool = True) -> List[ThemeImportRemoval]:
  """
  Removes v17 theme stylesheets from every project's build styles in angular.json.

  Args:
      root (Path): Project root containing angular.json.
      write (bool): Persist the edit. False only plans it.

  Returns:
      List[ThemeImportRemoval]: Entries removed (or planned). Empty if angular.json is missing.

  Raises:
      ManifestError: If angular.json exists but is unreadable or invalid.
  """
  path = root / ANGULAR_JSON
  if not path.is_file():
    return []

  data = load_json(path)
  removed: List[ThemeImportRemoval] = []

  projects = data.get("projects")
  if not isinstance(projects, dict):
    return []

  for project_name, project in projects.items():
    options = (((project or {}).get("architect") or {}).get("build") or {}).get("options") or {}
    styles = options.get("styles")
    if not isinstance(styles, list):
      continue

    kept = []
    for entry in styles:
      value = _style_input(entry)
      if value is not None and THEME_MARKER in value:
        removed.append(ThemeImportRemoval(project=project_name, entry=value))
      else:
        kept.append(entry)
    options["styles"] = kept

  if removed and write:
    dump_json(path, data)
  return removed
