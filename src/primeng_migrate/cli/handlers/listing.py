"""
List Command Handler.

Renders the rule table as a Rich table, one section per group.
"""

from typing import List, Optional

from rich.markup import escape
from rich.table import Table

from primeng_migrate.rules import select_groups
from primeng_migrate.utils.console import console


def handle_list(groups: Optional[List[str]] = None) -> int:
  """
  Handles the 'list' command.

  Args:
      groups: Group keys to show. None shows the whole table.

  Returns:
      int: Exit code (always 0).
  """
  table = Table(title="PrimeNG v17 -> v18 Rules")
  table.add_column("Group", style="bold")
  table.add_column("Rule", style="magenta")
  table.add_column("Category")
  table.add_column("Files", style="cyan")
  table.add_column("Description")

  for group in select_groups(groups):
    for i, rule in enumerate(group.rules):
      table.add_row(
        group.key if i == 0 else "",
        rule.id,
        rule.category.value,
        " ".join(sorted(rule.extensions)),
        escape(rule.description),
      )
    table.add_section()

  console.print(table)
  return 0
