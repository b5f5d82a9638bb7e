"""
Tests for package.json and angular.json edits.
"""

import json
import pytest

from primeng_migrate.errors import ManifestError
from primeng_migrate.manifests import remove_theme_imports, update_dependencies


def _write_json(path, data):
  path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def test_declared_packages_bumped(tmp_path):
  _write_json(
    tmp_path / "package.json",
    {
      "name": "web",
      "dependencies": {"@angular/core": "^17.3.0", "primeng": "^17.18.0", "primeicons": "^6.0.1"},
      "devDependencies": {"primeflex": "^3.3.1"},
    },
  )

  changes = update_dependencies(tmp_path)

  assert [str(c) for c in changes] == [
    "dependencies.primeng: ^17.18.0 -> ^18.0.0",
    "dependencies.primeicons: ^6.0.1 -> ^7.0.0",
    "devDependencies.primeflex: ^3.3.1 -> ^4.0.0",
  ]
  text = (tmp_path / "package.json").read_text(encoding="utf-8")
  assert text.endswith("}\n")
  data = json.loads(text)
  assert data["dependencies"] == {"@angular/core": "^17.3.0", "primeng": "^18.0.0", "primeicons": "^7.0.0"}
  assert data["devDependencies"] == {"primeflex": "^4.0.0"}


def test_undeclared_packages_not_added(tmp_path):
  _write_json(tmp_path / "package.json", {"dependencies": {"primeng": "^18.0.0"}})
  before = (tmp_path / "package.json").read_text(encoding="utf-8")

  assert update_dependencies(tmp_path) == []
  assert (tmp_path / "package.json").read_text(encoding="utf-8") == before


def test_plan_only_does_not_write(tmp_path):
  _write_json(tmp_path / "package.json", {"dependencies": {"primeng": "17.0.0"}})
  before = (tmp_path / "package.json").read_text(encoding="utf-8")

  assert len(update_dependencies(tmp_path, write=False)) == 1
  assert (tmp_path / "package.json").read_text(encoding="utf-8") == before


def test_missing_manifests_yield_nothing(tmp_path):
  assert update_dependencies(tmp_path) == []
  assert remove_theme_imports(tmp_path) == []


def test_invalid_package_json_raises(tmp_path):
  (tmp_path / "package.json").write_text("{ nope", encoding="utf-8")
  with pytest.raises(ManifestError, match="Invalid JSON"):
    update_dependencies(tmp_path)


def test_non_object_manifest_raises(tmp_path):
  (tmp_path / "package.json").write_text("[]", encoding="utf-8")
  with pytest.raises(ManifestError, match="JSON object"):
    update_dependencies(tmp_path)


def test_theme_imports_removed_from_every_project(tmp_path):
  _write_json(
    tmp_path / "angular.json",
    {
      "projects": {
        "web": {
          "architect": {
            "build": {
              "options": {
                "styles": [
                  "node_modules/primeng/resources/themes/lara-light-blue/theme.css",
                  "node_modules/primeng/resources/primeng.min.css",
                  "src/styles.scss",
                ]
              }
            }
          }
        },
        "admin": {
          "architect": {
            "build": {
              "options": {
                "styles": [
                  {"input": "node_modules/primeng/resources/primeng.css", "inject": True},
                  "node_modules/primeicons/primeicons.css",
                ]
              }
            }
          }
        },
        "lib": {"projectType": "library"},
      }
    },
  )

  removed = remove_theme_imports(tmp_path)

  assert [str(r) for r in removed] == [
    "web: node_modules/primeng/resources/themes/lara-light-blue/theme.css",
    "web: node_modules/primeng/resources/primeng.min.css",
    "admin: node_modules/primeng/resources/primeng.css",
  ]
  data = json.loads((tmp_path / "angular.json").read_text(encoding="utf-8"))
  assert data["projects"]["web"]["architect"]["build"]["options"]["styles"] == ["src/styles.scss"]
  assert data["projects"]["admin"]["architect"]["build"]["options"]["styles"] == [
    "node_modules/primeicons/primeicons.css"
  ]
