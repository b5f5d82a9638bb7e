"""
Rule Table Package.

Exposes the canonical PrimeNG v17 -> v18 rule table and lookup helpers.
"""

from typing import List, Optional, Sequence

from primeng_migrate.core.rule import MigrationRule, RuleGroup
from primeng_migrate.rules.catalog import RULE_GROUPS, _RULES_BY_ID


def group_keys() -> List[str]:
  """
  Returns:
      List[str]: Keys of all rule groups, in execution order.
  """
  return [g.key for g in RULE_GROUPS]


def get_group(key: str) -> RuleGroup:
  """
  Looks up a rule group by key.

  Args:
      key (str): Group key (e.g. 'selectors').

  Returns:
      RuleGroup: The matching group.

  Raises:
      KeyError: If no such group exists.
  """
  for group in RULE_GROUPS:
    if group.key == key:
      return group
  raise KeyError(f"Unknown rule group: '{key}'")


def get_rule(rule_id: str) -> MigrationRule:
  """
  Looks up a rule by id.

  Raises:
      KeyError: If no such rule exists.
  """
  try:
    return _RULES_BY_ID[rule_id]
  except KeyError:
    raise KeyError(f"Unknown rule: '{rule_id}'") from None


def select_groups(
  keys: Optional[Sequence[str]] = None,
  available: Optional[Sequence[RuleGroup]] = None,
) -> List[RuleGroup]:
  """
  Selects groups by key while keeping table order.

  The order of `keys` is irrelevant; groups always run in table order so that
  rule interactions stay the documented ones.

  Args:
      keys (Optional[Sequence[str]]): Keys to keep. None keeps every group.
      available (Optional[Sequence[RuleGroup]]): Table to select from. Defaults to `RULE_GROUPS`.

  Returns:
      List[RuleGroup]: Selected groups.
  """
  table = list(available if available is not None else RULE_GROUPS)
  if keys is None:
    return table
  wanted = set(keys)
  return [g for g in table if g.key in wanted]


def all_rules() -> List[MigrationRule]:
  """
  Returns:
      List[MigrationRule]: Every rule of the table, flattened in execution order.
  """
  return [rule for group in RULE_GROUPS for rule in group.rules]


__all__ = [
  "RULE_GROUPS",
  "MigrationRule",
  "RuleGroup",
  "all_rules",
  "get_group",
  "get_rule",
  "group_keys",
  "select_groups",
]
