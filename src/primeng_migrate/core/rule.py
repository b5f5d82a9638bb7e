"""
Rule Definitions.

A `MigrationRule` is one old-pattern -> new-pattern substitution restricted
to a set of file extensions. Rules are plain data, built once when the rule
table is imported and never mutated.

Two flavours exist:

- **Template rules** carry a ``replacement`` string (``\\1`` / ``\\g<name>``
  group references) applied with ``re.sub`` to every match.
- **Transform rules** carry a ``transform`` callable for rewrites a single
  substitution cannot express (class removal, element unwrapping). The
  ``pattern`` then only decides which files are candidates.

An optional ``guard`` is a second pattern the whole file must match before
the rule touches it (e.g. "this file imports `Message` from primeng/api").
"""

import re
from typing import Callable, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from primeng_migrate.enums import RuleCategory

# (text, file suffix) -> (new text, diagnostics)
Transform = Callable[[str, str], Tuple[str, List[str]]]

_ID_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class MigrationRule(BaseModel):
  """
  A single text substitution applied to files with matching extensions.
  """

  model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

  id: str = Field(..., description="Unique kebab-case identifier.")
  category: RuleCategory = Field(..., description="Kind of rewrite, used for listing.")
  pattern: str = Field(..., description="Regular expression locating text to rewrite.")
  replacement: Optional[str] = Field(None, description="re.sub template. Mutually exclusive with transform.")
  transform: Optional[Transform] = Field(None, description="Custom rewrite. Mutually exclusive with replacement.")
  extensions: FrozenSet[str] = Field(..., description="File suffixes the rule applies to (e.g. '.ts').")
  description: str = Field(..., description="Human readable summary.")
  commit_message: str = Field(..., description="Message used when committing this rule's changes.")
  flags: int = Field(0, description="re flags for pattern and guard.")
  guard: Optional[str] = Field(None, description="Pattern the whole file must contain for the rule to apply.")

  @field_validator("id")
  @classmethod
  def validate_id(cls, v: str) -> str:
    if not _ID_PATTERN.match(v):
      raise ValueError(f"Rule id must be kebab-case: '{v}'")
    return v

  @field_validator("extensions")
  @classmethod
  def validate_extensions(cls, v: FrozenSet[str]) -> FrozenSet[str]:
    if not v:
      raise ValueError("A rule needs at least one file extension.")
    for ext in v:
      if not ext.startswith("."):
        raise ValueError(f"Extensions must start with '.': '{ext}'")
    return frozenset(e.lower() for e in v)

  @model_validator(mode="after")
  def validate_action(self) -> "MigrationRule":
    """
    Ensures exactly one of ``replacement`` / ``transform`` is set and patterns compile.
    """
    if (self.replacement is None) == (self.transform is None):
      raise ValueError(f"Rule '{self.id}' must define exactly one of 'replacement' or 'transform'.")
    try:
      re.compile(self.pattern, self.flags)
      if self.guard:
        re.compile(self.guard, self.flags)
    except re.error as e:
      raise ValueError(f"Rule '{self.id}' has an invalid pattern: {e}") from e
    return self

  @property
  def regex(self) -> "re.Pattern[str]":
    # re keeps its own compile cache
    return re.compile(self.pattern, self.flags)

  @property
  def guard_regex(self) -> Optional["re.Pattern[str]"]:
    return re.compile(self.guard, self.flags) if self.guard else None

  def applies_to(self, filename: str) -> bool:
    """
    Checks whether a file name has one of the rule's extensions.

    Args:
        filename (str): File name or path string.

    Returns:
        bool: True if the suffix is handled by this rule.
    """
    lowered = filename.lower()
    return any(lowered.endswith(ext) for ext in self.extensions)

  def matches(self, text: str) -> bool:
    """
    Checks the guard (if any) and searches for the pattern.

    Args:
        text (str): Full file content.

    Returns:
        bool: True if the rule would consider this content.
    """
    guard = self.guard_regex
    if guard is not None and not guard.search(text):
      return False
    return self.regex.search(text) is not None

  def count(self, text: str) -> int:
    """
    Counts pattern occurrences in content that passes the guard.

    Args:
        text (str): Full file content.

    Returns:
        int: Number of non-overlapping matches (0 if the guard fails).
    """
    guard = self.guard_regex
    if guard is not None and not guard.search(text):
      return 0
    return sum(1 for _ in self.regex.finditer(text))

  def apply(self, text: str, suffix: str = "") -> Tuple[str, List[str]]:
    """
    Rewrites content.

    Content that does not pass `matches` is returned unchanged.

    Args:
        text (str): Full file content.
        suffix (str): Suffix of the file being rewritten (e.g. '.scss'); transforms may branch on it.

    Returns:
        Tuple[str, List[str]]: The new content and any diagnostics for manual follow-up.
    """
    if not self.matches(text):
      return text, []
    if self.transform is not None:
      return self.transform(text, suffix.lower())
    return self.regex.sub(self.replacement, text), []


class RuleGroup(BaseModel):
  """
  An ordered set of related rules, run together as one menu entry.
  """

  model_config = ConfigDict(frozen=True)

  key: str = Field(..., description="Stable identifier used on the command line.")
  title: str
  description: str
  rules: Tuple[MigrationRule, ...]
