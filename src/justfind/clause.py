# Canonical clause records
# Resolves the alias keys of a raw clause mapping once, before evaluation

from __future__ import annotations

import re
from typing import Any

from .boundary import pattern_from_wire


class Clause:
    """A text predicate with every alias resolved.

    ``all_of`` and ``any_of`` hold the canonical sub-clauses of ``and`` and
    ``or``; when either is set the direct predicates are not consulted.
    """

    __slots__ = ("all_of", "any_of", "contains", "is_", "matches", "negate", "selector")

    selector: str | None
    is_: str | None
    contains: str | None
    matches: re.Pattern[str] | None
    negate: bool
    all_of: list[Clause] | None
    any_of: list[Clause] | None

    def __init__(
        self,
        selector: str | None = None,
        is_: str | None = None,
        contains: str | None = None,
        matches: re.Pattern[str] | None = None,
        negate: bool = False,
        all_of: list[Clause] | None = None,
        any_of: list[Clause] | None = None,
    ) -> None:
        self.selector = selector
        self.is_ = is_
        self.contains = contains
        self.matches = matches
        self.negate = negate
        self.all_of = all_of
        self.any_of = any_of

    def __repr__(self) -> str:
        parts = [f"{name}={getattr(self, name)!r}" for name in self.__slots__ if getattr(self, name) not in (None, False)]
        return f"Clause({', '.join(parts)})"


def _first_set(raw: dict[str, Any], *keys: str) -> Any:
    # None means unset; empty strings and False are real values
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def prepare_clause(raw: dict[str, Any] | Clause) -> Clause:
    """Map a raw clause mapping to a `Clause`.

    Alias precedence, first non-None wins:

    - ``is``, ``equals``
    - ``contains``, ``includes``
    - ``matches``, ``match``, ``regex``
    - ``isEmpty``, ``empty``
    - ``not``; when unset, ``exists: False`` means negated

    An unset ``is`` becomes ``""`` when the clause asks for emptiness.
    """
    if isinstance(raw, Clause):
        return raw

    is_empty = bool(_first_set(raw, "isEmpty", "empty"))
    is_ = _first_set(raw, "is", "equals")
    if is_ is None and is_empty:
        is_ = ""

    explicit_not = raw.get("not")
    negate = bool(explicit_not) if explicit_not is not None else raw.get("exists") is False

    matches = _first_set(raw, "matches", "match", "regex")

    all_of = raw.get("and")
    any_of = raw.get("or")

    return Clause(
        selector=raw.get("$"),
        is_=is_,
        contains=_first_set(raw, "contains", "includes"),
        matches=pattern_from_wire(matches) if matches is not None else None,
        negate=negate,
        all_of=[prepare_clause(sub) for sub in all_of] if all_of is not None else None,
        any_of=[prepare_clause(sub) for sub in any_of] if any_of is not None else None,
    )
