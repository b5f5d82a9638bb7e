"""
Migration Engine.

`MigrationEngine` drives a run rule by rule. For every rule:

1.  **Scan**: read candidate files and keep those the rule matches.
2.  **Preview**: compute the rewritten content (`FileChangeSet`). A rule that
    changes nothing ends here with ``no_matches``.
3.  **Confirm**: show the file list and ask the `Prompter`.
4.  **Apply**: write changed files back. A write failure is recorded and the
    remaining files still get written.
5.  **Commit**: stage the written files and commit them with the rule's
    message (when commits are enabled).

A rule's file I/O and commit complete before the next rule starts. Only an
unusable project root (`ScanError`) or a refused git preflight stops the run.
"""

from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from rich.markup import escape

from primeng_migrate.config import RuntimeConfig
from primeng_migrate.core.change_set import FileChange, FileChangeSet, MigrationReport, StepResult
from primeng_migrate.core.rule import MigrationRule, RuleGroup
from primeng_migrate.core.scanner import FileScanner, write_source
from primeng_migrate.enums import StepStatus
from primeng_migrate.errors import GitError, ManifestError, ScanError
from primeng_migrate.manifests import ANGULAR_JSON, PACKAGE_JSON, remove_theme_imports, update_dependencies
from primeng_migrate.rules import select_groups
from primeng_migrate.utils.console import console, log_error, log_info, log_success, log_warning, print_diff
from primeng_migrate.utils.prompt import Prompter, build_prompter
from primeng_migrate.vcs.git import GitClient

POST_MIGRATION_REMINDERS = [
  "Replace PrimeNGConfig with providePrimeNG() in your application config",
  "Add the new theme imports if you removed the deprecated ones",
  "Run npm install to install the updated dependencies",
]

DEPENDENCIES_COMMIT = "chore(deps): update primeng packages for v18"
THEME_COMMIT = "refactor(primeng): remove deprecated theme imports for v18"


class MigrationEngine:
  """
  Applies rule groups to a project tree.

  Attributes:
      config (RuntimeConfig): Active configuration.
      prompter (Prompter): Source of yes/no answers.
      git (GitClient): Version control collaborator.
      scanner (FileScanner): Candidate file enumeration.
  """

  def __init__(
    self,
    config: Optional[RuntimeConfig] = None,
    prompter: Optional[Prompter] = None,
    git: Optional[GitClient] = None,
    rule_groups: Optional[Sequence[RuleGroup]] = None,
  ) -> None:
    """
    Initializes the engine.

    Args:
        config (RuntimeConfig, optional): Configuration. Defaults to ``RuntimeConfig()``.
        prompter (Prompter, optional): Explicit prompter. Defaults to the one implied by config.
        git (GitClient, optional): Git client. Defaults to one rooted at ``config.root``.
        rule_groups (Sequence[RuleGroup], optional): Rule table override. Defaults to the PrimeNG v18 table.
    """
    self.config = config or RuntimeConfig()
    self.prompter = build_prompter(self.config, prompter)
    self.git = git or GitClient(self.config.root)
    self.scanner = FileScanner(self.config.search_roots, self.config.exclude_dirs)
    self._rule_groups = rule_groups

  @property
  def groups(self) -> List[RuleGroup]:
    return select_groups(self.config.groups, available=self._rule_groups)

  def _display(self, path: Path) -> str:
    try:
      return path.relative_to(self.config.root).as_posix()
    except ValueError:
      return path.as_posix()

  # --- Scan / Preview / Apply ---

  def scan(self, rule: MigrationRule) -> List[Path]:
    """
    Lists files the rule matches.

    Args:
        rule (MigrationRule): Rule to test.

    Returns:
        List[Path]: Matching files, sorted.
    """
    return self.scanner.scan(rule)

  def preview(self, rule: MigrationRule) -> FileChangeSet:
    """
    Computes the rewritten content of every file the rule matches, sorted by path. Nothing is written.

    Args:
        rule (MigrationRule): Rule to preview.

    Returns:
        FileChangeSet: Matched files with before/after content.
    """
    change_set = FileChangeSet(rule=rule)
    for path in sorted(self.scanner.iter_files(rule.extensions)):
      text = self.scanner.read(path, change_set.errors)
      if text is None or not rule.matches(text):
        continue
      after, diagnostics = rule.apply(text, path.suffix)
      change_set.changes.append(
        FileChange(path=path, before=text, after=after, matches=rule.count(text), diagnostics=diagnostics)
      )
    return change_set

  def apply(self, change_set: FileChangeSet) -> Tuple[List[Path], List[str]]:
    """
    Writes every changed file of a change set.

    Args:
        change_set (FileChangeSet): Output of `preview`.

    Returns:
        Tuple[List[Path], List[str]]: Files written, and error messages for files that failed.
    """
    written: List[Path] = []
    errors: List[str] = []
    for change in change_set.changed:
      try:
        write_source(change.path, change.after)
      except OSError as e:
        message = f"Could not write {self._display(change.path)}: {e}"
        log_error(escape(message))
        errors.append(message)
        continue
      written.append(change.path)
    return written, errors

  # --- Orchestration ---

  def preflight(self) -> bool:
    """
    Verifies git can record the run and the work tree is clean.

    A dirty tree is stashed if the operator agrees. Skipped when commits or
    the git check are disabled.

    Returns:
        bool: True if the run may proceed.
    """
    if not self.config.commits_enabled or not self.config.git_check:
      return True

    if not self.git.is_available():
      log_error("git is not installed or not available in PATH.")
      return False
    if not self.git.is_repository():
      log_error(f"[path]{escape(str(self.config.root))}[/path] is not inside a git work tree.")
      return False

    try:
      dirty = self.git.has_uncommitted_changes()
    except GitError as e:
      log_error(escape(f"Could not check git status: {e}"))
      return False

    if not dirty:
      return True

    log_warning("There are uncommitted changes in the repository.")
    if not self.prompter.confirm("Do you want to stash these changes?", default=False):
      log_error("Please commit or stash your changes before running the migration.")
      return False

    try:
      self.git.stash()
    except GitError as e:
      log_error(escape(f"Failed to stash changes: {e}"))
      return False

    log_success("Changes stashed successfully.")
    return True

  def run(self, include_manifests: bool = False) -> MigrationReport:
    """
    Runs the selected rule groups in table order.

    Args:
        include_manifests (bool): Run the package.json and angular.json steps first.

    Returns:
        MigrationReport: Result of every step.

    Raises:
        ScanError: If the root is missing or none of the source directories exist.
    """
    report = MigrationReport()
    if not self.config.root.is_dir():
      raise ScanError(f"Project root is not a directory: {self.config.root}")
    self.scanner.check_roots()

    if not self.preflight():
      report.aborted = True
      report.abort_reason = "git preflight failed"
      return report

    if include_manifests:
      report.steps.append(self.update_dependencies())
      report.steps.append(self.remove_theme_imports())

    for group in self.groups:
      console.print(f"\n[bold]{group.title}[/bold] [dim]({group.key})[/dim] {group.description}")
      for rule in group.rules:
        report.steps.append(self.run_rule(rule))

    return report

  def run_rule(self, rule: MigrationRule) -> StepResult:
    """
    Executes scan, preview, confirm, apply and commit for a single rule.

    Args:
        rule (MigrationRule): Rule to run.

    Returns:
        StepResult: Outcome of the step.
    """
    change_set = self.preview(rule)
    result = StepResult(
      step_id=rule.id,
      description=rule.description,
      commit_message=rule.commit_message,
      errors=list(change_set.errors),
      diagnostics=change_set.diagnostics,
    )
    for note in result.diagnostics:
      log_warning(f"[rule]{rule.id}[/rule]: {escape(note)}")

    changed = change_set.changed
    if not changed:
      result.status = StepStatus.NO_MATCHES
      log_info(f"[rule]{rule.id}[/rule]: no files need changes.")
      return result

    result.files = [self._display(c.path) for c in changed]
    self._present(rule, change_set)

    if self.config.dry_run:
      for change in changed:
        print_diff(change.diff(self.config.root))
      result.status = StepStatus.DRY_RUN
      return result

    if not self.prompter.confirm(f"Apply '{rule.id}' to {len(changed)} file(s)?"):
      log_info(f"Skipping [rule]{rule.id}[/rule].")
      result.files = []
      result.status = StepStatus.DECLINED
      return result

    written, errors = self.apply(change_set)
    result.errors.extend(errors)
    result.files = [self._display(p) for p in written]
    if not written:
      result.status = StepStatus.FAILED
      return result

    result.status = StepStatus.APPLIED
    log_success(f"[rule]{rule.id}[/rule]: updated {len(written)} file(s).")
    self._commit(result, written, rule.commit_message)
    return result

  def _present(self, rule: MigrationRule, change_set: FileChangeSet) -> None:
    changed = change_set.changed
    console.print(
      f"[rule]{rule.id}[/rule] {escape(rule.description)}: "
      f"{change_set.match_count} match(es) in {len(changed)} file(s)"
    )
    for change in changed:
      console.print(f"  - [path]{escape(self._display(change.path))}[/path]")

  def _commit(self, result: StepResult, written: List[Path], message: str) -> None:
    """
    Commits written files and updates the step status.
    """
    if not self.config.commits_enabled:
      return
    try:
      committed = self.git.commit_paths(written, message)
    except GitError as e:
      log_error(escape(f"Failed to commit changes: {e}"))
      result.errors.append(str(e))
      result.status = StepStatus.FAILED
      return

    if committed:
      result.status = StepStatus.COMMITTED
      log_success(f"Changes committed with message: {escape(message)}")
    else:
      log_info("Nothing to commit.")

  # --- Manifest steps ---

  def update_dependencies(self) -> StepResult:
    """
    Bumps PrimeNG packages in package.json after confirmation.

    Returns:
        StepResult: Outcome of the step.
    """
    return self._manifest_step(
      step_id="package-dependencies",
      description="Update PrimeNG dependencies in package.json",
      manifest=PACKAGE_JSON,
      commit_message=DEPENDENCIES_COMMIT,
      planner=lambda write: [str(c) for c in update_dependencies(self.config.root, write=write)],
    )

  def remove_theme_imports(self) -> StepResult:
    """
    Removes deprecated theme stylesheets from angular.json after confirmation.

    Returns:
        StepResult: Outcome of the step.
    """
    result = self._manifest_step(
      step_id="theme-imports",
      description="Remove deprecated PrimeNG theme imports from angular.json",
      manifest=ANGULAR_JSON,
      commit_message=THEME_COMMIT,
      planner=lambda write: [str(r) for r in remove_theme_imports(self.config.root, write=write)],
    )
    if result.status in (StepStatus.APPLIED, StepStatus.COMMITTED):
      log_warning("You may need to add the new theme imports manually. See the PrimeNG v18 documentation.")
    return result

  def _manifest_step(
    self,
    step_id: str,
    description: str,
    manifest: str,
    commit_message: str,
    planner: Callable[[bool], List[str]],
  ) -> StepResult:
    result = StepResult(step_id=step_id, description=description, commit_message=commit_message)
    path = self.config.root / manifest

    if not path.is_file():
      log_warning(f"{manifest} not found. Skipping.")
      result.status = StepStatus.NO_MATCHES
      return result

    try:
      planned = planner(False)
    except ManifestError as e:
      log_error(escape(str(e)))
      result.errors.append(str(e))
      result.status = StepStatus.FAILED
      return result

    if not planned:
      log_info(f"{manifest}: nothing to update.")
      result.status = StepStatus.NO_MATCHES
      return result

    console.print(f"[rule]{step_id}[/rule] {description}:")
    for line in planned:
      console.print(f"  - {escape(line)}")
    result.files = [manifest]

    if self.config.dry_run:
      result.status = StepStatus.DRY_RUN
      return result

    if not self.prompter.confirm(f"Apply these changes to {manifest}?"):
      log_info(f"Skipping {manifest} update.")
      result.files = []
      result.status = StepStatus.DECLINED
      return result

    try:
      planner(True)
    except ManifestError as e:
      log_error(escape(str(e)))
      result.errors.append(str(e))
      result.files = []
      result.status = StepStatus.FAILED
      return result

    result.status = StepStatus.APPLIED
    log_success(f"Updated {manifest}.")
    self._commit(result, [path], commit_message)
    return result
