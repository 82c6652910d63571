"""Template lexing and substitution.

Two passes, each driven by an explicit scanner rather than regex replacement:

1. Component references: ``{{ identifier . key }}``
2. Variables: ``{name}``

Anything the scanners do not accept is left in the output untouched.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from i18n_engine.values import render_value

MAX_REFERENCE_LENGTH = 100
MAX_VARIABLE_NAME_LENGTH = 50


@dataclass(frozen=True)
class ComponentReference:
    """A ``{{identifier.key}}`` occurrence; ``end`` is exclusive."""

    start: int
    end: int
    identifier: str
    key: str


@dataclass(frozen=True)
class VariableReference:
    """A ``{name}`` occurrence; ``end`` is exclusive."""

    start: int
    end: int
    name: str


def is_template_key(key: str) -> bool:
    """Whether strings stored under key undergo variable substitution."""
    return key.endswith(("Template", "template"))


def _is_name_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _parse_reference_body(body: str) -> Optional[tuple]:
    if len(body) > MAX_REFERENCE_LENGTH or "{" in body or "}" in body:
        return None
    parts = body.split(".")
    if len(parts) != 2:
        return None
    identifier, key = (part.strip() for part in parts)
    if not identifier or not key:
        return None
    if any(ch.isspace() for ch in identifier + key):
        return None
    return identifier, key


def scan_component_references(text: str) -> List[ComponentReference]:
    """Find every well-formed ``{{identifier.key}}`` reference in text.

    Whitespace is tolerated around the identifier, the dot and the key.
    Bodies longer than MAX_REFERENCE_LENGTH, containing braces, or not made
    of exactly two non-empty parts are skipped.
    """
    references: List[ComponentReference] = []
    position = 0
    while True:
        start = text.find("{{", position)
        if start == -1:
            break
        close = text.find("}}", start + 2)
        if close == -1:
            break
        parsed = _parse_reference_body(text[start + 2 : close])
        if parsed is None:
            position = start + 1
            continue
        identifier, key = parsed
        references.append(ComponentReference(start, close + 2, identifier, key))
        position = close + 2
    return references


def scan_variables(text: str) -> List[VariableReference]:
    """Find every ``{name}`` placeholder in text.

    Names are 1 to MAX_VARIABLE_NAME_LENGTH word characters. A placeholder
    directly preceded by ``{`` or followed by ``}`` is treated as literal, so
    ``{{name}}`` is never a variable.
    """
    references: List[VariableReference] = []
    position = 0
    length = len(text)
    while True:
        start = text.find("{", position)
        if start == -1:
            break
        cursor = start + 1
        while cursor < length and _is_name_char(text[cursor]):
            cursor += 1
        name = text[start + 1 : cursor]
        closed = cursor < length and text[cursor] == "}"
        if (
            closed
            and 0 < len(name) <= MAX_VARIABLE_NAME_LENGTH
            and not (start > 0 and text[start - 1] == "{")
            and not (cursor + 1 < length and text[cursor + 1] == "}")
        ):
            references.append(VariableReference(start, cursor + 1, name))
            position = cursor + 1
        else:
            position = start + 1
    return references


def substitute_variables(text: str, variables: Mapping[str, Any]) -> str:
    """Replace known ``{name}`` placeholders; unknown names stay verbatim."""
    pieces: List[str] = []
    position = 0
    for ref in scan_variables(text):
        if ref.name not in variables:
            continue
        pieces.append(text[position : ref.start])
        pieces.append(render_value(variables[ref.name]))
        position = ref.end
    pieces.append(text[position:])
    return "".join(pieces)


def resolve_component_references(
    text: str, resolver: Callable[[str, str], str]
) -> str:
    """Replace every component reference with resolver(identifier, key)."""
    pieces: List[str] = []
    position = 0
    for ref in scan_component_references(text):
        pieces.append(text[position : ref.start])
        pieces.append(resolver(ref.identifier, ref.key))
        position = ref.end
    pieces.append(text[position:])
    return "".join(pieces)


def merge_variables(
    constants: Optional[Mapping[str, Any]] = None,
    context_variables: Optional[Mapping[str, Any]] = None,
    caller_variables: Iterable[Optional[Mapping[str, Any]]] = (),
) -> Dict[str, Any]:
    """Build the variable table, lowest precedence first.

    Constants are overridden by context variables, which are overridden by
    caller mappings; a later caller mapping overrides an earlier one.
    """
    merged: Dict[str, Any] = {}
    merged.update(constants or {})
    merged.update(context_variables or {})
    for variables in caller_variables:
        if variables:
            merged.update(variables)
    return merged
