"""Boundary-safe values.

Queries cross into the document context as plain JSON data. Two kinds of
values need an explicit wire form:

- compiled patterns travel as a ``[source, flags]`` pair
- node references travel as ``{"subtype": "node", "objectId": n}``
"""

from __future__ import annotations

import re
from typing import Any


class PatternFlagError(ValueError):
    """Raised when a serialized pattern carries an unknown flag."""


# Flag letters use the JavaScript spelling so pairs produced elsewhere decode too.
_FLAG_LETTERS: tuple[tuple[str, int], ...] = (
    ("a", re.ASCII),
    ("i", re.IGNORECASE),
    ("m", re.MULTILINE),
    ("s", re.DOTALL),
    ("x", re.VERBOSE),
)

# No effect on a single search() call.
_IGNORED_FLAGS: frozenset[str] = frozenset("dguvy")


def flags_to_string(flags: int) -> str:
    return "".join(letter for letter, bit in _FLAG_LETTERS if flags & bit)


def flags_from_string(letters: str) -> int:
    flags = 0
    for ch in letters:
        if ch in _IGNORED_FLAGS:
            continue
        for letter, bit in _FLAG_LETTERS:
            if ch == letter:
                flags |= bit
                break
        else:
            raise PatternFlagError(f"Unknown pattern flag {ch!r} in {letters!r}")
    return flags


def is_pattern(value: Any) -> bool:
    return isinstance(value, re.Pattern)


def pattern_to_wire(pattern: re.Pattern[str]) -> list[str]:
    """Decompose a compiled pattern into its ``[source, flags]`` pair."""
    return [pattern.pattern, flags_to_string(pattern.flags)]


def pattern_from_wire(value: Any) -> re.Pattern[str]:
    """Rebuild a compiled pattern.

    Accepts a compiled pattern (returned as is), a bare source string, or a
    one or two element ``[source, flags]`` sequence.
    """
    if isinstance(value, re.Pattern):
        return value
    if isinstance(value, str):
        return re.compile(value)
    if isinstance(value, (list, tuple)) and 1 <= len(value) <= 2:
        source = value[0]
        letters = value[1] if len(value) == 2 and value[1] is not None else ""
        return re.compile(source, flags_from_string(letters))
    raise TypeError(f"Cannot build a pattern from {value!r}")


class NodeRef:
    """Reference to a node living in a document context.

    ``subtype`` is the discriminant that tells a reference apart from a query
    step when both appear in the same list.
    """

    __slots__ = ("object_id",)

    subtype: str = "node"
    object_id: int

    def __init__(self, object_id: int) -> None:
        self.object_id = object_id

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.object_id})"


def is_node_ref(value: Any) -> bool:
    return isinstance(value, NodeRef)


def ref_to_wire(ref: NodeRef | None) -> dict[str, Any] | None:
    if ref is None:
        return None
    return {"subtype": NodeRef.subtype, "objectId": ref.object_id}


def is_wire_ref(value: Any) -> bool:
    return isinstance(value, dict) and value.get("subtype") == NodeRef.subtype and "objectId" in value
