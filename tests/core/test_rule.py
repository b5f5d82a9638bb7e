"""
Tests for MigrationRule validation and application.
"""

import pytest
from pydantic import ValidationError

from primeng_migrate.core.rule import MigrationRule, RuleGroup
from primeng_migrate.enums import RuleCategory


def _rule(**overrides):
  fields = dict(
    id="sample-rule",
    category=RuleCategory.MODULE_CLASS,
    pattern=r"(?<![\w$])OldName(?![\w$])",
    replacement="NewName",
    extensions=frozenset({".ts"}),
    description="OldName -> NewName",
    commit_message="refactor: rename OldName",
  )
  fields.update(overrides)
  return MigrationRule(**fields)


def test_replacement_rule_rewrites_every_match():
  rule = _rule()
  text, notes = rule.apply("const a: OldName = new OldName();")
  assert text == "const a: NewName = new NewName();"
  assert notes == []


def test_word_boundaries_protect_longer_names():
  rule = _rule()
  assert not rule.matches("OldNameService; MyOldName; $OldName")


def test_apply_without_match_returns_input_untouched():
  rule = _rule()
  original = "nothing to see\r\n"
  text, notes = rule.apply(original)
  assert text is original
  assert notes == []


def test_count_reports_occurrences():
  assert _rule().count("OldName OldName x OldName") == 3


def test_applies_to_is_case_insensitive():
  rule = _rule(extensions=frozenset({".TS"}))
  assert rule.extensions == frozenset({".ts"})
  assert rule.applies_to("src/app/app.module.TS")
  assert not rule.applies_to("src/app/app.component.html")


def test_guard_blocks_files_without_trigger():
  rule = _rule(guard=r"from\s+'lib'")
  assert not rule.matches("let x: OldName;")
  assert rule.count("let x: OldName;") == 0
  assert rule.apply("let x: OldName;") == ("let x: OldName;", [])

  guarded = "import { OldName } from 'lib';\nlet x: OldName;"
  assert rule.apply(guarded)[0] == "import { NewName } from 'lib';\nlet x: NewName;"


def test_transform_receives_lowercased_suffix():
  seen = []

  def transform(text, suffix):
    seen.append(suffix)
    return text.upper(), ["note"]

  rule = _rule(replacement=None, transform=transform)
  assert rule.apply("OldName", ".SCSS") == ("OLDNAME", ["note"])
  assert seen == [".scss"]


def test_rule_needs_exactly_one_action():
  with pytest.raises(ValidationError, match="exactly one"):
    _rule(replacement=None)
  with pytest.raises(ValidationError, match="exactly one"):
    _rule(transform=lambda t, s: (t, []))


def test_invalid_pattern_rejected():
  with pytest.raises(ValidationError, match="invalid pattern"):
    _rule(pattern="(unclosed")


def test_id_must_be_kebab_case():
  with pytest.raises(ValidationError, match="kebab-case"):
    _rule(id="Not_Kebab")


def test_extensions_need_leading_dot():
  with pytest.raises(ValidationError):
    _rule(extensions=frozenset({"ts"}))
  with pytest.raises(ValidationError):
    _rule(extensions=frozenset())


def test_rules_are_frozen():
  rule = _rule()
  with pytest.raises(ValidationError):
    rule.pattern = "x"


def test_rule_group_keeps_order():
  first = _rule(id="first")
  second = _rule(id="second")
  group = RuleGroup(key="g", title="G", description="d", rules=(first, second))
  assert [r.id for r in group.rules] == ["first", "second"]
