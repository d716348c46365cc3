"""Message template rendering.

Templates stored in ``whatsapp_message_templates`` use a small placeholder
language:

- ``{{field}}`` is replaced by a context value (whitespace inside the braces
  is allowed).
- ``{{#if cond}}...{{else}}...{{/if}}`` keeps one branch depending on a named
  condition. ``{{else}}`` is optional and blocks may nest. Unknown conditions
  are false.
- ``{{#each list}}...{{/each}}`` repeats its body for each item of a named
  list. Inside the body ``{{field}}`` resolves against the item first and
  ``{{index}}`` is the 1-based position. Unknown lists render nothing.

Whatever placeholder is still unresolved at the end becomes the fallback
token. Substituted values never contain ``{{`` or ``}}``, so rendering an
already rendered message returns it unchanged.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

DEFAULT_FALLBACK = "N/A"

RECOGNIZED_CONDITIONS = ("has_errors", "has_warnings", "has_jobs", "all_successful", "test_mode")
RECOGNIZED_LISTS = ("error_details", "client_analysis")

# Innermost block first: the body may not open another block of the same kind
_IF_RE = re.compile(
    r"\{\{\s*#if\s+([\w.]+)\s*\}\}((?:(?!\{\{\s*#if\b).)*?)\{\{\s*/if\s*\}\}",
    re.DOTALL,
)
_EACH_RE = re.compile(
    r"\{\{\s*#each\s+([\w.]+)\s*\}\}((?:(?!\{\{\s*#each\b).)*?)\{\{\s*/each\s*\}\}",
    re.DOTALL,
)
_ELSE_RE = re.compile(r"\{\{\s*else\s*\}\}")
_PLACEHOLDER_RE = re.compile(r"\{\{\s*([^{}]*?)\s*\}\}")
# Any leftover pair, including malformed ones with braces inside
_LEFTOVER_RE = re.compile(r"\{\{.*?\}\}", re.DOTALL)


def _clean(value: Any) -> str:
    text = str(value)
    while "{{" in text or "}}" in text:
        text = text.replace("{{", "{").replace("}}", "}")
    return text


def _substitute(text: str, values: Mapping[str, Any]) -> str:
    def repl(match: re.Match) -> str:
        key = match.group(1)
        if key in values and values[key] is not None:
            return _clean(values[key])
        return match.group(0)

    return _PLACEHOLDER_RE.sub(repl, text)


def _render_conditionals(text: str, conditions: Mapping[str, bool]) -> str:
    def repl(match: re.Match) -> str:
        name, body = match.group(1), match.group(2)
        parts = _ELSE_RE.split(body, maxsplit=1)
        truthy = name in RECOGNIZED_CONDITIONS and bool(conditions.get(name, False))
        if truthy:
            return parts[0]
        return parts[1] if len(parts) > 1 else ""

    previous = None
    while previous != text:
        previous = text
        text = _IF_RE.sub(repl, text)
    return text


def _render_loops(text: str, lists: Mapping[str, Sequence[Mapping[str, Any]]]) -> str:
    def repl(match: re.Match) -> str:
        name, body = match.group(1), match.group(2)
        if name not in RECOGNIZED_LISTS:
            return ""
        chunks: List[str] = []
        for index, item in enumerate(lists.get(name) or [], start=1):
            values: Dict[str, Any] = dict(item)
            values["index"] = index
            chunks.append(_substitute(body, values))
        return "".join(chunks)

    previous = None
    while previous != text:
        previous = text
        text = _EACH_RE.sub(repl, text)
    return text


def render_template(
    template: str,
    context: Optional[Mapping[str, Any]] = None,
    *,
    conditions: Optional[Mapping[str, bool]] = None,
    lists: Optional[Mapping[str, Sequence[Mapping[str, Any]]]] = None,
    fallback: str = DEFAULT_FALLBACK,
) -> str:
    """Render ``template``.

    Args:
        template: Template body.
        context: Values for flat ``{{field}}`` placeholders.
        conditions: Truth values for ``{{#if}}`` blocks.
        lists: Item lists for ``{{#each}}`` blocks.
        fallback: Replacement for placeholders left unresolved.

    Returns:
        The rendered message, free of ``{{...}}`` placeholders.
    """
    text = _render_conditionals(template or "", conditions or {})
    text = _render_loops(text, lists or {})
    text = _substitute(text, context or {})
    token = _clean(fallback)
    while _LEFTOVER_RE.search(text):
        text = _LEFTOVER_RE.sub(lambda _m: token, text)
    return text
