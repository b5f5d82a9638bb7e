"""
primeng-migrate Package.

A codemod that migrates the source files of an Angular project from PrimeNG
v17 to v18: renamed packages, modules, component tags, CSS classes, bindings
and interfaces, applied rule by rule with optional git commits.

Usage
-----

Programmatic Run
^^^^^^^^^^^^^^^^

.. code-block:: python

    import primeng_migrate as pm

    report = pm.migrate("path/to/angular-app", groups=["module-imports", "selectors"])
    print(report.changed_files)

Advanced Usage (Engine)
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from primeng_migrate import MigrationEngine, RuntimeConfig

    config = RuntimeConfig(root=Path("app"), commit=False, dry_run=True)
    engine = MigrationEngine(config)
    report = engine.run()
"""

from pathlib import Path
from typing import List, Optional, Union

from primeng_migrate.config import RuntimeConfig
from primeng_migrate.core.change_set import MigrationReport, StepResult
from primeng_migrate.core.engine import MigrationEngine
from primeng_migrate.core.rule import MigrationRule, RuleGroup
from primeng_migrate.errors import GitError, ManifestError, MigrationError, ScanError
from primeng_migrate.rules import RULE_GROUPS

__version__ = "0.1.0"


def migrate(
  root: Union[str, Path],
  groups: Optional[List[str]] = None,
  assume_yes: bool = True,
  commit: bool = False,
  dry_run: bool = False,
) -> MigrationReport:
  """
  Runs the PrimeNG v18 rule table against a project.

  Programmatic runs answer yes to every confirmation and do not commit unless
  asked to. The git preflight check only runs when `commit` is set.

  Args:
      root (Union[str, Path]): Angular project root.
      groups (List[str], optional): Rule group keys to run. None runs all of them.
      assume_yes (bool): Answer yes to every confirmation.
      commit (bool): Commit each applied rule with git.
      dry_run (bool): Compute changes without writing.

  Returns:
      MigrationReport: Result of every step.

  Raises:
      ScanError: If the project cannot be scanned.
      ValueError: If a group key is unknown.
  """
  config = RuntimeConfig(
    root=Path(root).resolve(),
    groups=groups,
    assume_yes=assume_yes,
    commit=commit,
    git_check=commit,
    dry_run=dry_run,
  )
  return MigrationEngine(config).run()


__all__ = [
  "GitError",
  "ManifestError",
  "MigrationEngine",
  "MigrationError",
  "MigrationReport",
  "MigrationRule",
  "RULE_GROUPS",
  "RuleGroup",
  "RuntimeConfig",
  "ScanError",
  "StepResult",
  "__version__",
  "migrate",
]
