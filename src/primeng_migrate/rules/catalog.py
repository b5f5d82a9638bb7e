"""
PrimeNG v17 -> v18 Rule Table.

The canonical, ordered table of migration rules. Groups run in the order of
`RULE_GROUPS`; rules inside a group run in listed order.

Ordering constraints:

- ``module-imports`` rewrites only the module specifier, ``module-classes``
  rewrites only the identifiers, so the two compose in either order.
- ``selectors`` runs before ``css-classes``; the stylesheet prefix renames
  require a leading dot and never see template tags.
- Patterns end in a name-terminating lookahead so a rule's output is never
  matched by the same rule again.
"""

import re
from typing import Dict, List, Tuple

from primeng_migrate.core.rule import MigrationRule, RuleGroup
from primeng_migrate.core.transforms import (
  DEFER_IMPORT_PATTERN,
  MESSAGES_TAG_PATTERN,
  TAG_CONTENT,
  comment_out_defer_imports,
  remove_css_class,
  rename_messages,
  report_defer_directives,
  unwrap_defer,
)
from primeng_migrate.enums import RuleCategory

TS = frozenset({".ts"})
HTML = frozenset({".html"})
TEMPLATES = frozenset({".html", ".ts"})
STYLES = frozenset({".css", ".scss"})
MARKUP_AND_STYLES = frozenset({".html", ".css", ".scss"})

# old module path -> new module path
_RENAMED_PACKAGES: List[Tuple[str, str]] = [
  ("calendar", "datepicker"),
  ("dropdown", "select"),
  ("inputswitch", "toggleswitch"),
  ("overlaypanel", "popover"),
  ("sidebar", "drawer"),
  ("tabview", "tabs"),
  ("messages", "message"),
  ("inlinemessage", "message"),
]

_RENAMED_MODULES: List[Tuple[str, str]] = [
  ("CalendarModule", "DatePickerModule"),
  ("DropdownModule", "SelectModule"),
  ("InputSwitchModule", "ToggleSwitchModule"),
  ("OverlayPanelModule", "PopoverModule"),
  ("SidebarModule", "DrawerModule"),
  ("TabViewModule", "TabsModule"),
  ("MessagesModule", "MessageModule"),
  ("InlineMessageModule", "MessageModule"),
]

# old tag -> new tag, re flags
_RENAMED_SELECTORS: List[Tuple[str, str, int]] = [
  ("p-calendar", "p-datepicker", 0),
  ("p-dropdown", "p-select", 0),
  ("p-inputSwitch", "p-toggleSwitch", 0),
  ("p-overlayPanel", "p-popover", 0),
  ("p-sidebar", "p-drawer", 0),
  # Both p-tabView and p-tabview are found in the wild
  ("p-tabView", "p-tabs", re.IGNORECASE),
  ("p-messages", "p-message", 0),
  ("p-inlineMessage", "p-message", 0),
  ("p-selectButton", "p-selectbutton", 0),
]

# Component style prefixes, matched in stylesheets as `.p-old`, `.p-old-*`
_RENAMED_STYLE_PREFIXES: List[Tuple[str, str]] = [
  ("p-calendar", "p-datepicker"),
  ("p-dropdown", "p-select"),
  ("p-inputswitch", "p-toggleswitch"),
  ("p-overlaypanel", "p-popover"),
  ("p-sidebar", "p-drawer"),
  ("p-tabview", "p-tabs"),
  ("p-messages", "p-message"),
  ("p-inlinemessage", "p-message"),
]

_RENAMED_CLASSES: List[Tuple[str, str]] = [
  ("p-component", "p-element"),
  ("p-inputtext", "p-input"),
]

_REMOVED_CLASSES = ["p-link", "p-highlight", "p-fluid"]


def _import_path_rule(old: str, new: str) -> MigrationRule:
  return MigrationRule(
    id=f"import-{old}",
    category=RuleCategory.IMPORT_PATH,
    pattern=rf"(\bfrom\s+)(['\"])primeng/{old}\2",
    replacement=rf"\g<1>\g<2>primeng/{new}\g<2>",
    extensions=TS,
    description=f"Import path 'primeng/{old}' -> 'primeng/{new}'",
    commit_message=f"refactor(primeng): update primeng/{old} imports to primeng/{new} for v18",
  )


def _module_rule(old: str, new: str) -> MigrationRule:
  return MigrationRule(
    id=f"module-{old.lower()}",
    category=RuleCategory.MODULE_CLASS,
    pattern=rf"(?<![\w$]){old}(?![\w$])",
    replacement=new,
    extensions=TS,
    description=f"{old} -> {new}",
    commit_message=f"refactor(primeng): update {old} to {new} for v18",
  )


def _selector_rule(old: str, new: str, flags: int = 0) -> MigrationRule:
  return MigrationRule(
    id=f"selector-{old.lower()}",
    category=RuleCategory.SELECTOR,
    pattern=rf"(</?|\bselector:\s*['\"]){old}(?![\w-])",
    replacement=rf"\g<1>{new}",
    flags=flags,
    extensions=TEMPLATES,
    description=f"<{old}> -> <{new}>",
    commit_message=f"refactor(primeng): update {old} to {new} for v18",
  )


def _messages_rule() -> MigrationRule:
  return MigrationRule(
    id="selector-p-messages",
    category=RuleCategory.SELECTOR,
    pattern=MESSAGES_TAG_PATTERN,
    transform=rename_messages,
    extensions=TEMPLATES,
    description="<p-messages> -> <p-message> (flagged for review)",
    commit_message="refactor(primeng): update p-messages to p-message for v18",
  )


def _style_prefix_rule(old: str, new: str) -> MigrationRule:
  return MigrationRule(
    id=f"style-{old}",
    category=RuleCategory.CSS_CLASS,
    pattern=rf"\.{old}(?!\w)",
    replacement=f".{new}",
    extensions=STYLES,
    description=f"Stylesheet selectors .{old}* -> .{new}*",
    commit_message=f"refactor(primeng): update .{old} styles to .{new} for v18",
  )


def _class_rename_rule(old: str, new: str) -> MigrationRule:
  return MigrationRule(
    id=f"class-{old}",
    category=RuleCategory.CSS_CLASS,
    pattern=rf"(?<![\w-]){old}(?![\w-])",
    replacement=new,
    extensions=MARKUP_AND_STYLES,
    description=f"Class {old} -> {new}",
    commit_message=f"refactor(primeng): update {old} to {new} for v18",
  )


def _class_removal_rule(name: str) -> MigrationRule:
  return MigrationRule(
    id=f"remove-{name}",
    category=RuleCategory.CSS_CLASS,
    pattern=rf"(?<![\w-]){name}(?![\w-])",
    transform=remove_css_class(name),
    extensions=MARKUP_AND_STYLES,
    description=f"Remove class {name} (removed in v18)",
    commit_message=f"refactor(primeng): remove {name} class (removed in v18)",
  )


MODULE_IMPORTS = RuleGroup(
  key="module-imports",
  title="Module Imports",
  description="Update import paths of renamed PrimeNG packages",
  rules=tuple(_import_path_rule(old, new) for old, new in _RENAMED_PACKAGES),
)

MODULE_CLASSES = RuleGroup(
  key="module-classes",
  title="Module Classes",
  description="Rename NgModule classes of renamed components",
  rules=tuple(_module_rule(old, new) for old, new in _RENAMED_MODULES),
)

SELECTORS = RuleGroup(
  key="selectors",
  title="Component Selectors",
  description="Rename component tags in templates and component selectors",
  rules=tuple(
    _messages_rule() if old == "p-messages" else _selector_rule(old, new, flags)
    for old, new, flags in _RENAMED_SELECTORS
  ),
)

CSS_CLASSES = RuleGroup(
  key="css-classes",
  title="CSS Classes",
  description="Rename or remove deprecated CSS classes",
  rules=(
    *(_class_rename_rule(old, new) for old, new in _RENAMED_CLASSES),
    MigrationRule(
      id="class-p-dialog-titlebar",
      category=RuleCategory.CSS_CLASS,
      pattern=r"(?<![\w-])p-dialog-titlebar(?!\w)",
      replacement="p-dialog-header",
      extensions=MARKUP_AND_STYLES,
      description="Class p-dialog-titlebar* -> p-dialog-header*",
      commit_message="refactor(primeng): update p-dialog-titlebar to p-dialog-header for v18",
    ),
    *(_style_prefix_rule(old, new) for old, new in _RENAMED_STYLE_PREFIXES),
    *(_class_removal_rule(name) for name in _REMOVED_CLASSES),
  ),
)

PROPERTIES = RuleGroup(
  key="properties",
  title="Component Properties",
  description="Update bindings whose syntax or name changed",
  rules=(
    MigrationRule(
      id="show-transition-options",
      category=RuleCategory.PROPERTY,
      pattern=r"\[showTransitionOptions\]=\"(?!'\.12s'\")[^\"]*\"",
      replacement="[showTransitionOptions]=\"'.12s'\"",
      extensions=HTML,
      description="[showTransitionOptions] -> v18 default '.12s'",
      commit_message="refactor(primeng): update showTransitionOptions syntax for v18",
    ),
    MigrationRule(
      id="hide-transition-options",
      category=RuleCategory.PROPERTY,
      pattern=r"\[hideTransitionOptions\]=\"(?!'\.12s'\")[^\"]*\"",
      replacement="[hideTransitionOptions]=\"'.12s'\"",
      extensions=HTML,
      description="[hideTransitionOptions] -> v18 default '.12s'",
      commit_message="refactor(primeng): update hideTransitionOptions syntax for v18",
    ),
    MigrationRule(
      id="dialog-modal",
      category=RuleCategory.PROPERTY,
      pattern=rf"(<p-dialog(?![\w-]){TAG_CONTENT}*?\s)\[modal\](?=\s*=)",
      replacement=r"\g<1>[closeOnEscape]",
      extensions=HTML,
      description="<p-dialog [modal]> -> [closeOnEscape]",
      commit_message="refactor(primeng): update Dialog modal to closeOnEscape for v18",
    ),
  ),
)

INTERFACES = RuleGroup(
  key="interfaces",
  title="Interface Names",
  description="Rename Message to ToastMessageOptions",
  rules=(
    MigrationRule(
      id="message-interface",
      category=RuleCategory.INTERFACE,
      pattern=r"(?<![\w$.'\"`])Message(?![\w$'\"`])",
      replacement="ToastMessageOptions",
      guard=r"import\s+(?:type\s+)?\{[^}]*(?<![\w$])Message(?![\w$])[^}]*\}\s*from\s*['\"]primeng/api['\"]",
      extensions=TS,
      description="Message -> ToastMessageOptions (files importing it from primeng/api)",
      commit_message="refactor(primeng): update Message type to ToastMessageOptions for v18",
    ),
  ),
)

DIRECTIVES = RuleGroup(
  key="directives",
  title="Directives",
  description="Rename pAnimate and retire the p-defer component and pDefer directive",
  rules=(
    MigrationRule(
      id="directive-panimate",
      category=RuleCategory.DIRECTIVE,
      pattern=r"(?<![\w-])pAnimate(?![\w-])",
      replacement="pAnimateOnScroll",
      extensions=HTML,
      description="pAnimate -> pAnimateOnScroll",
      commit_message="refactor(primeng): update pAnimate directive to pAnimateOnScroll for v18",
    ),
    MigrationRule(
      id="remove-p-defer",
      category=RuleCategory.DIRECTIVE,
      pattern=r"<p-defer(?![\w-])",
      transform=unwrap_defer,
      extensions=HTML,
      description="Unwrap <p-defer> (removed in v18, use Angular @defer)",
      commit_message="refactor(primeng): remove p-defer (deprecated in v18, use Angular @defer)",
    ),
    MigrationRule(
      id="notice-primeng-defer-import",
      category=RuleCategory.NOTICE,
      pattern=DEFER_IMPORT_PATTERN,
      flags=re.MULTILINE,
      transform=comment_out_defer_imports,
      extensions=TS,
      description="Comment out primeng/defer imports (removed in v18)",
      commit_message="refactor(primeng): comment out primeng/defer imports removed in v18",
    ),
    MigrationRule(
      id="notice-pdefer-directive",
      category=RuleCategory.NOTICE,
      pattern=r"(?<![\w-])pDefer(?![\w-])",
      transform=report_defer_directives,
      extensions=HTML,
      description="Report pDefer directive usages for manual migration to @defer",
      commit_message="refactor(primeng): migrate pDefer usages to Angular @defer",
    ),
  ),
)

CONFIGURATION = RuleGroup(
  key="configuration",
  title="PrimeNG Configuration",
  description="Mark PrimeNGConfig usages for manual migration to providePrimeNG()",
  rules=(
    MigrationRule(
      id="primeng-config-notice",
      category=RuleCategory.NOTICE,
      pattern=r"(?<![\w$])PrimeNGConfig(?![\w$])(?!\s*/\*\s*MIGRATION)",
      replacement="PrimeNGConfig /* MIGRATION: replace with providePrimeNG() */",
      extensions=TS,
      description="Mark PrimeNGConfig for replacement with providePrimeNG()",
      commit_message="refactor(primeng): mark PrimeNGConfig for migration to providePrimeNG",
    ),
  ),
)

RULE_GROUPS: Tuple[RuleGroup, ...] = (
  MODULE_IMPORTS,
  MODULE_CLASSES,
  SELECTORS,
  CSS_CLASSES,
  PROPERTIES,
  INTERFACES,
  DIRECTIVES,
  CONFIGURATION,
)


def _index(groups: Tuple[RuleGroup, ...]) -> Dict[str, MigrationRule]:
  index: Dict[str, MigrationRule] = {}
  for group in groups:
    for rule in group.rules:
      if rule.id in index:
        raise ValueError(f"Duplicate rule id in rule table: '{rule.id}'")
      index[rule.id] = rule
  return index


_RULES_BY_ID = _index(RULE_GROUPS)
