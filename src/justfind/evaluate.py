"""Query evaluation against a live justhtml tree.

`evaluate()` is the function a host runs inside the document context. It walks
the query steps in order, narrowing the scope to the first candidate whose
clause holds, and gives up on the first step without a match.
"""

from __future__ import annotations

import logging
from typing import Any

from justhtml import JustHTML

from .clause import Clause, prepare_clause

logger = logging.getLogger(__name__)


def first_text(node: Any) -> str | None:
    """Return the first non-blank text node in ``node``'s subtree, stripped.

    Unlike ``node.to_text()`` this never concatenates, so a stray label or
    icon text further down does not leak into the compared value.
    """
    # Iterative pre-order walk
    stack = [node]
    while stack:
        current = stack.pop()
        if current.name == "#text":
            data = current.data
            if data:
                stripped = data.strip()
                if stripped:
                    return stripped
            continue
        stack.extend(reversed(current.children or ()))
    return None


def _text_matches(text: str | None, clause: Clause) -> bool:
    if clause.is_ is not None:
        if clause.is_ == "":
            # first_text() never returns "", so emptiness means nothing was found
            if text is not None:
                return False
        elif text != clause.is_:
            return False

    if clause.contains is not None and (text is None or clause.contains not in text):
        return False

    if clause.matches is not None and (text is None or clause.matches.search(text) is None):
        return False

    return True


def holds(element: Any, clause: dict[str, Any] | Clause) -> bool:
    """Check whether ``element`` satisfies ``clause``.

    A clause selector moves the test to the first matching descendant; when
    there is none the clause fails before negation, so ``not`` over a missing
    target holds.
    """
    clause = prepare_clause(clause)

    target = element
    if clause.selector:
        found = element.query(clause.selector)
        target = found[0] if found else None

    if target is None:
        result = False
    elif clause.all_of is not None:
        result = all(holds(target, sub) for sub in clause.all_of)
    elif clause.any_of is not None:
        result = any(holds(target, sub) for sub in clause.any_of)
    else:
        result = _text_matches(first_text(target), clause)

    return not result if clause.negate else result


def _step_clause(step: dict[str, Any]) -> Clause:
    where = step.get("where")
    if where is not None:
        return prepare_clause(where)
    # Inline clause: the step's own selector must not be read as a clause selector
    return prepare_clause({key: value for key, value in step.items() if key != "$"})


def evaluate(root: Any, queries: list[Any], *, document: Any = None) -> Any | None:
    """Run ``queries`` from ``root`` (or ``document``) and return the match.

    Args:
        root: Node to start from, or None to start at ``document``
        queries: Normalized query steps
        document: Document root used when ``root`` is None

    Returns:
        The node selected by the last step, or None

    Raises:
        ValueError: If neither ``root`` nor ``document`` is given, or a
            selector is invalid
    """
    scope = root if root is not None else document
    if scope is None:
        raise ValueError("No root node or document to search")
    if isinstance(scope, JustHTML):
        scope = scope.root

    for index, step in enumerate(queries):
        if isinstance(step, str):
            step = {"$": step}

        selector = step.get("$")
        candidates = scope.query(selector) if selector else [scope]
        clause = _step_clause(step)

        for candidate in candidates:
            if holds(candidate, clause):
                scope = candidate
                break
        else:
            logger.debug("Step %d (%r): none of %d candidate(s) matched", index, selector, len(candidates))
            return None

    return scope
