"""
Tests for change set diffs and report aggregation.
"""

from pathlib import Path

from primeng_migrate.core.change_set import FileChange, FileChangeSet, MigrationReport, StepResult
from primeng_migrate.enums import StepStatus
from primeng_migrate.rules import get_rule


def test_diff_uses_project_relative_names():
  root = Path("/work/app")
  change = FileChange(path=root / "src" / "a.html", before="<p-sidebar>\n", after="<p-drawer>\n")

  diff = change.diff(root)

  assert diff.splitlines() == [
    "--- a/src/a.html",
    "+++ b/src/a.html",
    "@@ -1 +1 @@",
    "-<p-sidebar>",
    "+<p-drawer>",
  ]


def test_unchanged_file_has_empty_diff():
  assert FileChange(path=Path("x.ts"), before="a", after="a").diff() == ""


def test_change_set_only_counts_changed_files():
  rule = get_rule("remove-p-defer")
  changed = FileChange(path=Path("a.html"), before="x", after="y", matches=2)
  skipped = FileChange(path=Path("b.html"), before="z", after="z", matches=1, diagnostics=["line 3: nested"])
  change_set = FileChangeSet(rule=rule, changes=[changed, skipped])

  assert change_set.changed_files == [Path("a.html")]
  assert change_set.match_count == 2
  assert change_set.diagnostics == ["b.html: line 3: nested"]


def test_report_aggregates_steps():
  report = MigrationReport(
    steps=[
      StepResult(step_id="a", status=StepStatus.COMMITTED, files=["src/x.ts"]),
      StepResult(step_id="b", status=StepStatus.APPLIED, files=["src/x.ts", "src/y.html"]),
      StepResult(step_id="c", status=StepStatus.DRY_RUN, files=["src/z.scss"]),
      StepResult(step_id="d", status=StepStatus.NO_MATCHES, errors=["Could not read src/bad.html"]),
    ]
  )

  assert report.changed_files == ["src/x.ts", "src/y.html"]
  assert report.commit_count == 1
  assert report.has_errors
  assert not report.failed

  report.steps.append(StepResult(step_id="e", status=StepStatus.FAILED))
  assert report.failed
