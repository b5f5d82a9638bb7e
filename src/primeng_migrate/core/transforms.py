"""
Custom Rewrites.

Rewrites that a single ``re.sub`` cannot express safely. Every function here
has the `Transform` signature ``(text, suffix) -> (new_text, diagnostics)``
and is idempotent: feeding its output back in yields no further change.

CSS class removal
-----------------

- In stylesheets, every selector referencing the class is dropped from its
  selector list. A rule left with no selectors is deleted together with its
  brace-matched block. Comments never count as selectors.
- A reference that only appears inside ``:not(...)`` keeps the selector: the
  negated argument can no longer match, so it is dropped from the ``:not``
  (and an emptied ``:not()`` disappears). References inside other functional
  pseudo-classes (``:is``, ``:where``, ``:has``...) are left unchanged and
  reported.
- In templates, the class token is removed from static ``class`` and
  ``styleClass`` attribute values; whitespace is collapsed and an attribute
  left empty is deleted. Dynamic references are reported, not rewritten.

p-defer unwrapping
------------------

``<p-defer>`` elements are replaced by a notice comment followed by their
children. Nested or unclosed elements are left untouched and reported.
"""

import re
from typing import List, Optional, Tuple

from primeng_migrate.core.rule import Transform

STYLESHEET_SUFFIXES = frozenset({".css", ".scss", ".sass", ".less"})

DEFER_NOTICE = "<!-- p-defer was removed in PrimeNG v18; use Angular @defer instead -->"
MESSAGES_NOTICE = "<!-- MIGRATION: p-message renders a single message; render one p-message per entry of your list -->"
DEFER_IMPORT_NOTICE = "// MIGRATION: primeng/defer was removed in PrimeNG v18; use Angular @defer blocks instead"

# One unit of a start tag body: a plain character or a whole quoted attribute value.
TAG_CONTENT = r"(?:[^>\"']|\"[^\"]*\"|'[^']*')"

DEFER_IMPORT_PATTERN = r"^([ \t]*)import\s*\{[^}]*\}\s*from\s*['\"]primeng/defer['\"];?"
MESSAGES_TAG_PATTERN = r"(</?|\bselector:\s*[\"'])p-messages(?![\w-])"

_PRELUDE = re.compile(r"[^{};]+\{")
_LEADING_WS = re.compile(r"^\s*")
_TRAILING_WS = re.compile(r"\s*$")
_COMMENT = re.compile(r"/\*.*?(?:\*/|\Z)|(?<![:\w\\])//[^\n]*", re.DOTALL)
_PSEUDO_NAME = re.compile(r":{1,2}[\w-]+$")
_COMBINATOR_CHARS = frozenset(" \t\r\n>+~")
_CLASS_ATTR = re.compile(r"(?P<ws>\s+)(?P<name>class|styleClass)=(?P<q>[\"'])(?P<value>.*?)(?P=q)", re.DOTALL)

_DEFER_START = re.compile(r"<p-defer(?![\w-])")
_DEFER_OPEN = re.compile(rf"<p-defer(?![\w-]){TAG_CONTENT}*>")
_DEFER_TAG = re.compile(rf"<p-defer(?![\w-]){TAG_CONTENT}*>|</p-defer\s*>")
_DEFER_DIRECTIVE = re.compile(r"(?<![\w-])(?:\*pDefer|\[pDefer\]|pDefer)(?![\w-])")
_DEFER_IMPORT = re.compile(DEFER_IMPORT_PATTERN, re.MULTILINE)
_MESSAGES_TAG = re.compile(MESSAGES_TAG_PATTERN)


def _line_of(text: str, offset: int) -> int:
  return text.count("\n", 0, offset) + 1


def _bare_token(class_name: str) -> "re.Pattern[str]":
  return re.compile(rf"(?<![\w-]){re.escape(class_name)}(?![\w-])")


def _selector_token(class_name: str) -> "re.Pattern[str]":
  return re.compile(rf"\.{re.escape(class_name)}(?![\w-])")


def _mask_comments(text: str) -> str:
  """
  Blanks out comments, keeping offsets and line breaks intact.
  """
  return _COMMENT.sub(lambda m: re.sub(r"[^\n]", " ", m.group(0)), text)


def _block_end(text: str, open_brace_end: int) -> int:
  """
  Finds the offset just past the brace closing the block opened right before `open_brace_end`.

  Returns:
      int: Offset after the closing brace, or -1 if the block never closes.
  """
  depth = 1
  for i in range(open_brace_end, len(text)):
    ch = text[i]
    if ch == "{":
      depth += 1
    elif ch == "}":
      depth -= 1
      if depth == 0:
        return i + 1
  return -1


def _split_top_level(text: str) -> List[Tuple[int, int]]:
  """
  Splits a comma-separated list, ignoring commas nested in parentheses or brackets.

  Returns:
      List[Tuple[int, int]]: (start, end) offsets of each item.
  """
  spans = []
  depth = 0
  start = 0
  for i, ch in enumerate(text):
    if ch in "([":
      depth += 1
    elif ch in ")]" and depth > 0:
      depth -= 1
    elif ch == "," and depth == 0:
      spans.append((start, i))
      start = i + 1
  spans.append((start, len(text)))
  return spans


def _pseudo_calls(selector: str) -> List[Tuple[str, int, int, int]]:
  """
  Lists the top-level functional pseudo-classes of a selector.

  Returns:
      List[Tuple[str, int, int, int]]: (name, start, open paren, close paren) per call.
  """
  calls = []
  depth = 0
  name, start, opened = "", 0, 0
  for i, ch in enumerate(selector):
    if ch == "(":
      if depth == 0:
        m = _PSEUDO_NAME.search(selector, 0, i)
        name = m.group(0).lstrip(":").lower() if m else ""
        start = m.start() if m else i
        opened = i
      depth += 1
    elif ch == ")" and depth > 0:
      depth -= 1
      if depth == 0:
        calls.append((name, start, opened, i))
  return calls


def _rewrite_selector(
  selector: str, masked: str, token: "re.Pattern[str]"
) -> Tuple[Optional[str], Optional[str]]:
  """
  Applies the removal policy to one selector of a selector list.

  Args:
      selector (str): Original selector text.
      masked (str): The same selector with comments blanked out.
      token (re.Pattern): Matches the removed class.

  Returns:
      Tuple[Optional[str], Optional[str]]: The selector to keep (None drops it), and
      the name of a pseudo-class that blocked the rewrite, if any.
  """
  calls = _pseudo_calls(masked)
  negated = []
  blocked = None
  for ref in token.finditer(masked):
    call = next((c for c in calls if c[2] < ref.start() < c[3]), None)
    if call is None:
      # A required class that no longer exists: the selector never matches.
      return None, None
    if call[0] == "not":
      if call not in negated:
        negated.append(call)
    elif blocked is None:
      blocked = call[0] or "()"

  if blocked is not None:
    return selector, blocked

  result = selector
  for _, start, opened, close in sorted(negated, key=lambda c: c[1], reverse=True):
    inner = masked[opened + 1 : close]
    args = [
      selector[opened + 1 + a : opened + 1 + b].strip()
      for a, b in _split_top_level(inner)
      if not token.search(inner[a:b])
    ]
    if args:
      replacement = f"{selector[start : opened + 1]}{', '.join(args)})"
    elif start == 0 or result[start - 1] in _COMBINATOR_CHARS:
      replacement = "*"
    else:
      replacement = ""
    result = result[:start] + replacement + result[close + 1 :]
  return result, None


def remove_class_from_stylesheet(text: str, class_name: str) -> Tuple[str, List[str]]:
  """
  Deletes selectors referencing `.class_name`, and rules left without selectors.

  Args:
      text (str): Stylesheet source.
      class_name (str): Class to remove, without the leading dot.

  Returns:
      Tuple[str, List[str]]: Rewritten source and diagnostics.
  """
  token = _selector_token(class_name)
  masked_text = _mask_comments(text)
  if not token.search(masked_text):
    return text, []

  out: List[str] = []
  diagnostics: List[str] = []
  pos = 0

  def _note_leftovers(start: int, end: int) -> None:
    for leftover in token.finditer(masked_text, start, end):
      diagnostics.append(
        f"line {_line_of(text, leftover.start())}: '.{class_name}' is still referenced outside a selector; "
        "review manually"
      )

  while True:
    m = _PRELUDE.search(masked_text, pos)
    if m is None:
      break

    start, brace = m.start(), m.end() - 1
    _note_leftovers(pos, start)

    masked_prelude = masked_text[start:brace]
    if not token.search(masked_prelude):
      out.append(text[pos : m.end()])
      pos = m.end()
      continue

    body_start = start + len(_LEADING_WS.match(masked_prelude).group(0))
    body_end = brace - len(_TRAILING_WS.search(masked_prelude).group(0))
    body, masked_body = text[body_start:body_end], masked_text[body_start:body_end]

    kept: List[str] = []
    for a, b in _split_top_level(masked_body):
      selector, masked_selector = body[a:b], masked_body[a:b]
      if not token.search(masked_selector):
        kept.append(selector)
        continue
      new_selector, blocked = _rewrite_selector(selector, masked_selector, token)
      if blocked is not None:
        diagnostics.append(
          f"line {_line_of(text, body_start + a + len(selector) - len(selector.lstrip()))}: "
          f"'.{class_name}' inside :{blocked}(...) left unchanged; review manually"
        )
      if new_selector is not None:
        kept.append(new_selector)

    if kept:
      out.append(text[pos:body_start] + ",".join(kept).strip() + text[body_end : m.end()])
      pos = m.end()
      continue

    end = _block_end(masked_text, m.end())
    if end < 0:
      diagnostics.append(f"line {_line_of(text, body_start)}: unbalanced block after '.{class_name}'; left unchanged")
      out.append(text[pos : m.end()])
      pos = m.end()
      continue

    # Keep the line break that separated this rule from the previous one, drop its indentation.
    lead = text[start:body_start]
    newline_at = lead.rfind("\n")
    kept_lead = lead[: newline_at + 1] if newline_at >= 0 else lead
    if text.startswith("\r\n", end):
      end += 2
    elif text.startswith("\n", end):
      end += 1

    out.append(text[pos:start] + kept_lead)
    pos = end

  _note_leftovers(pos, len(text))
  out.append(text[pos:])
  return "".join(out), diagnostics

def remove_class_from_template(text: str, class_name: str) -> Tuple[str, List[str]]:
  """
  Removes `class_name` from static ``class`` / ``styleClass`` attribute values.

  Args:
      text (str): Template source.
      class_name (str): Class token to remove.

  Returns:
      Tuple[str, List[str]]: Rewritten source and diagnostics for remaining references.
  """

  def _strip(match: "re.Match[str]") -> str:
    tokens = match.group("value").split()
    if class_name not in tokens:
      return match.group(0)
    remaining = [t for t in tokens if t != class_name]
    if not remaining:
      return ""
    q = match.group("q")
    return f"{match.group('ws')}{match.group('name')}={q}{' '.join(remaining)}{q}"

  result = _CLASS_ATTR.sub(_strip, text)

  diagnostics = [
    f"line {_line_of(result, leftover.start())}: '{class_name}' is still referenced (e.g. ngClass binding); review manually"
    for leftover in _bare_token(class_name).finditer(result)
  ]
  return result, diagnostics


def remove_css_class(class_name: str) -> Transform:
  """
  Builds a transform removing a utility class from stylesheets and templates.

  Args:
      class_name (str): The class to remove (e.g. 'p-fluid').

  Returns:
      Transform: Dispatches on the file suffix.
  """

  def _transform(text: str, suffix: str) -> Tuple[str, List[str]]:
    if suffix in STYLESHEET_SUFFIXES:
      return remove_class_from_stylesheet(text, class_name)
    return remove_class_from_template(text, class_name)

  _transform.__name__ = f"remove_css_class_{class_name.replace('-', '_')}"
  return _transform


def unwrap_defer(text: str, suffix: str = ".html") -> Tuple[str, List[str]]:
  """
  Replaces non-nested ``<p-defer>`` elements with a notice and their children.

  Args:
      text (str): Template source.
      suffix (str): Unused; present for the transform signature.

  Returns:
      Tuple[str, List[str]]: Rewritten source and diagnostics for skipped elements.
  """
  out: List[str] = []
  diagnostics: List[str] = []
  pos = 0

  while True:
    start = _DEFER_START.search(text, pos)
    if start is None:
      break

    line = _line_of(text, start.start())
    opening = _DEFER_OPEN.match(text, start.start())
    if opening is None:
      diagnostics.append(f"line {line}: <p-defer> start tag could not be parsed; left unchanged")
      out.append(text[pos : start.end()])
      pos = start.end()
      continue

    if opening.group(0).endswith("/>"):
      out.append(text[pos : opening.start()] + DEFER_NOTICE)
      pos = opening.end()
      continue

    depth = 0
    nested = False
    closing = None
    for tag in _DEFER_TAG.finditer(text, opening.start()):
      tag_text = tag.group(0)
      if tag_text.endswith("/>"):
        continue
      if tag_text.startswith("</"):
        depth -= 1
        if depth == 0:
          closing = tag
          break
      else:
        depth += 1
        if depth > 1:
          nested = True

    if closing is None:
      diagnostics.append(f"line {line}: <p-defer> is never closed; left unchanged")
      out.append(text[pos : opening.end()])
      pos = opening.end()
      continue

    if nested:
      diagnostics.append(f"line {line}: nested <p-defer> elements cannot be migrated automatically; left unchanged")
      out.append(text[pos : closing.end()])
      pos = closing.end()
      continue

    children = text[opening.end() : closing.start()]
    out.append(text[pos : opening.start()] + DEFER_NOTICE + children)
    pos = closing.end()

  out.append(text[pos:])
  return "".join(out), diagnostics


def rename_messages(text: str, suffix: str = ".html") -> Tuple[str, List[str]]:
  """
  Renames ``p-messages`` to ``p-message`` and flags every element for review.

  ``<p-message>`` renders a single message rather than a list, so each former
  ``<p-messages>`` start tag is preceded by a notice comment. Component
  ``selector: 'p-messages'`` declarations are renamed as well.

  Args:
      text (str): Template or component source.
      suffix (str): Unused; present for the transform signature.

  Returns:
      Tuple[str, List[str]]: Rewritten source and one diagnostic per start tag.
  """
  diagnostics: List[str] = []

  def _rename(match: "re.Match[str]") -> str:
    prefix = match.group(1)
    if prefix == "<":
      diagnostics.append(
        f"line {_line_of(text, match.start())}: <p-messages> became <p-message>, which shows one message; "
        "review its bindings"
      )
      return f"{MESSAGES_NOTICE}<p-message"
    return f"{prefix}p-message"

  return _MESSAGES_TAG.sub(_rename, text), diagnostics


def comment_out_defer_imports(text: str, suffix: str = ".ts") -> Tuple[str, List[str]]:
  """
  Comments out ``primeng/defer`` imports behind a notice.

  Args:
      text (str): TypeScript source.
      suffix (str): Unused; present for the transform signature.

  Returns:
      Tuple[str, List[str]]: Rewritten source and one diagnostic per import.
  """
  diagnostics: List[str] = []
  newline = "\r\n" if "\r\n" in text else "\n"

  def _comment(match: "re.Match[str]") -> str:
    diagnostics.append(
      f"line {_line_of(text, match.start())}: primeng/defer import commented out; "
      "remove DeferModule from your imports arrays"
    )
    indent = match.group(1)
    lines = [re.sub(r"^([ \t]*)", r"\g<1>// ", line) for line in match.group(0).split("\n")]
    return f"{indent}{DEFER_IMPORT_NOTICE}{newline}" + "\n".join(lines)

  return _DEFER_IMPORT.sub(_comment, text), diagnostics


def report_defer_directives(text: str, suffix: str = ".html") -> Tuple[str, List[str]]:
  """
  Reports ``pDefer`` directive usages; the content is left unchanged.

  Returns:
      Tuple[str, List[str]]: The unchanged source and one diagnostic per usage.
  """
  diagnostics = [
    f"line {_line_of(text, m.start())}: {m.group(0)} was removed in PrimeNG v18; "
    "move the deferred content into an Angular @defer block"
    for m in _DEFER_DIRECTIVE.finditer(text)
  ]
  return text, diagnostics
