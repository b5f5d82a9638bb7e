"""
Tests for MigrationEngine: step lifecycle, commits, preflight and failures.
"""

import json
import pytest
from unittest.mock import MagicMock, patch

from primeng_migrate.config import RuntimeConfig
from primeng_migrate.core.engine import MigrationEngine
from primeng_migrate.enums import StepStatus
from primeng_migrate.errors import GitError, ScanError
from primeng_migrate.rules import get_rule
from primeng_migrate.utils.prompt import AutoPrompter
from primeng_migrate.vcs.git import GitClient


@pytest.fixture
def git():
  mock = MagicMock(spec=GitClient)
  mock.is_available.return_value = True
  mock.is_repository.return_value = True
  mock.has_uncommitted_changes.return_value = False
  mock.commit_paths.return_value = True
  return mock


def _engine(root, git, answer=True, **config):
  config.setdefault("commit", False)
  return MigrationEngine(RuntimeConfig(root=root, **config), prompter=AutoPrompter(answer), git=git)


def _by_id(report):
  return {s.step_id: s for s in report.steps}


def test_untouched_tree_reports_no_changes_and_no_commits(project, write_file, git):
  write_file(project, "src/app/app.component.html", "<div>Hello</div>\n")
  write_file(project, "src/app/app.component.ts", "export class AppComponent {}\n")

  report = _engine(project, git, commit=True).run()

  assert report.steps
  assert all(s.status == StepStatus.NO_MATCHES for s in report.steps)
  assert report.changed_files == []
  assert report.commit_count == 0
  git.commit_paths.assert_not_called()


def test_calendar_module_import_fully_migrated(project, write_file, git):
  path = write_file(project, "src/app/app.module.ts", "import { CalendarModule } from 'primeng/calendar';\n")

  report = _engine(project, git, groups=["module-imports", "module-classes"]).run()

  assert path.read_text(encoding="utf-8") == "import { DatePickerModule } from 'primeng/datepicker';\n"
  steps = _by_id(report)
  assert steps["import-calendar"].status == StepStatus.APPLIED
  assert steps["module-calendarmodule"].status == StepStatus.APPLIED
  assert steps["import-dropdown"].status == StepStatus.NO_MATCHES
  assert report.changed_files == ["src/app/app.module.ts"]


def test_dropdown_selector_renamed(project, write_file, git):
  path = write_file(project, "src/app/form.component.html", '<p-dropdown [style]="x"></p-dropdown>\n')

  _engine(project, git, groups=["selectors"]).run()

  assert path.read_text(encoding="utf-8") == '<p-select [style]="x"></p-select>\n'


def test_each_rule_committed_with_its_own_message(project, write_file, git):
  html = write_file(project, "src/app/a.component.html", "<p-calendar></p-calendar>\n")

  report = _engine(project, git, commit=True, git_check=False, groups=["selectors"]).run()

  rule = get_rule("selector-p-calendar")
  git.commit_paths.assert_called_once_with([html], rule.commit_message)
  assert _by_id(report)["selector-p-calendar"].status == StepStatus.COMMITTED
  assert report.commit_count == 1


def test_git_failure_marks_step_failed_and_run_continues(project, write_file, git):
  write_file(project, "src/app/a.component.html", "<p-calendar></p-calendar>\n")
  write_file(project, "src/app/b.component.html", "<p-dropdown></p-dropdown>\n")
  git.commit_paths.side_effect = [GitError("commit failed", ["git", "commit"], "hook rejected"), True]

  report = _engine(project, git, commit=True, git_check=False, groups=["selectors"]).run()

  steps = _by_id(report)
  assert steps["selector-p-calendar"].status == StepStatus.FAILED
  assert "hook rejected" in steps["selector-p-calendar"].errors[0]
  assert steps["selector-p-dropdown"].status == StepStatus.COMMITTED
  assert report.failed
  assert report.commit_count == 1


def test_declined_step_leaves_files_untouched(project, write_file, git):
  original = "<p-sidebar></p-sidebar>\n"
  path = write_file(project, "src/app/a.component.html", original)

  engine = _engine(project, git, answer=False, groups=["selectors"])
  report = engine.run()

  assert path.read_text(encoding="utf-8") == original
  step = _by_id(report)["selector-p-sidebar"]
  assert step.status == StepStatus.DECLINED
  assert step.files == []
  assert engine.prompter.asked == ["Apply 'selector-p-sidebar' to 1 file(s)?"]


def test_dry_run_prints_diff_without_writing(project, write_file, git, recorded_console):
  original = "<p-dropdown></p-dropdown>\n"
  path = write_file(project, "src/app/a.component.html", original)

  report = _engine(project, git, commit=True, dry_run=True, groups=["selectors"]).run()

  assert path.read_text(encoding="utf-8") == original
  step = _by_id(report)["selector-p-dropdown"]
  assert step.status == StepStatus.DRY_RUN
  assert step.files == ["src/app/a.component.html"]
  assert "+<p-select></p-select>" in recorded_console.export_text()
  git.commit_paths.assert_not_called()
  git.has_uncommitted_changes.assert_not_called()


def test_write_failure_recorded_on_step(project, write_file, git):
  write_file(project, "src/app/a.component.html", "<p-dropdown></p-dropdown>\n")

  engine = _engine(project, git)
  with patch("primeng_migrate.core.engine.write_source", side_effect=OSError("disk full")):
    result = engine.run_rule(get_rule("selector-p-dropdown"))

  assert result.status == StepStatus.FAILED
  assert "disk full" in result.errors[0]


def test_diagnostics_collected_from_transforms(project, write_file, git):
  write_file(project, "src/app/a.component.html", "<p-defer>\n<p-defer>x</p-defer>\n</p-defer>\n")

  result = _engine(project, git).run_rule(get_rule("remove-p-defer"))

  assert result.status == StepStatus.NO_MATCHES
  assert len(result.diagnostics) == 1
  assert "nested" in result.diagnostics[0]


def test_dirty_tree_declined_aborts_run(project, write_file, git):
  path = write_file(project, "src/app/a.component.html", "<p-dropdown></p-dropdown>\n")
  git.has_uncommitted_changes.return_value = True

  report = _engine(project, git, answer=False, commit=True).run()

  assert report.aborted
  assert report.failed
  assert report.steps == []
  git.stash.assert_not_called()
  assert "p-dropdown" in path.read_text(encoding="utf-8")


def test_dirty_tree_stashed_when_confirmed(project, git):
  git.has_uncommitted_changes.return_value = True
  engine = _engine(project, git, commit=True)

  assert engine.preflight()
  git.stash.assert_called_once()


def test_preflight_requires_git_repository(project, git):
  git.is_repository.return_value = False
  assert not _engine(project, git, commit=True).preflight()


def test_preflight_skipped_without_commits(project, git):
  git.is_available.return_value = False
  assert _engine(project, git, commit=False).preflight()
  assert _engine(project, git, commit=True, git_check=False).preflight()


def test_missing_root_raises(tmp_path, git):
  with pytest.raises(ScanError):
    _engine(tmp_path / "nope", git).run()


def test_missing_source_dir_raises(tmp_path, git):
  with pytest.raises(ScanError):
    _engine(tmp_path, git).run()


def test_manifest_steps_run_first(project, write_file, git):
  write_file(project, "package.json", json.dumps({"dependencies": {"primeng": "^17.18.0", "rxjs": "~7.8.0"}}))

  report = _engine(project, git, groups=["directives"]).run(include_manifests=True)

  assert [s.step_id for s in report.steps[:2]] == ["package-dependencies", "theme-imports"]
  assert report.steps[0].status == StepStatus.APPLIED
  assert report.steps[1].status == StepStatus.NO_MATCHES
  data = json.loads((project / "package.json").read_text(encoding="utf-8"))
  assert data["dependencies"] == {"primeng": "^18.0.0", "rxjs": "~7.8.0"}


def test_manifest_step_commits_manifest(project, write_file, git):
  pkg = write_file(project, "package.json", json.dumps({"devDependencies": {"primeicons": "^6.0.1"}}))

  result = _engine(project, git, commit=True).update_dependencies()

  assert result.status == StepStatus.COMMITTED
  git.commit_paths.assert_called_once_with([pkg], "chore(deps): update primeng packages for v18")


def test_invalid_manifest_fails_step(project, write_file, git):
  write_file(project, "angular.json", "{ not json")

  result = _engine(project, git).remove_theme_imports()

  assert result.status == StepStatus.FAILED
  assert "Invalid JSON" in result.errors[0]


def test_scan_lists_matching_files(project, write_file, git):
  write_file(project, "src/app/a.component.ts", "import { SidebarModule } from 'primeng/sidebar';\n")
  write_file(project, "src/app/b.component.ts", "export const x = 1;\n")

  found = _engine(project, git).scan(get_rule("module-sidebarmodule"))

  assert [p.name for p in found] == ["a.component.ts"]


def test_preview_lists_files_sorted_like_scan(project, write_file, git):
  write_file(project, "src/app/z.component.html", "<p-dropdown></p-dropdown>\n")
  write_file(project, "src/app/a/b.component.html", "<p-dropdown></p-dropdown>\n")
  engine = _engine(project, git)
  rule = get_rule("selector-p-dropdown")

  previewed = [c.path for c in engine.preview(rule).changes]

  assert previewed == engine.scan(rule)
  assert [p.relative_to(project).as_posix() for p in previewed] == [
    "src/app/a/b.component.html",
    "src/app/z.component.html",
  ]
