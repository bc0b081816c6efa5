"""Reshape query descriptions into their boundary-safe form."""

from __future__ import annotations

from typing import Any

from .boundary import NodeRef, is_node_ref, is_pattern, pattern_to_wire


def prepare_value(value: Any) -> Any:
    """Return a copy of ``value`` with every compiled pattern decomposed.

    Mappings and sequences are rebuilt so the caller's objects are never
    mutated. Already decomposed pairs are plain lists and pass through.
    """
    if is_pattern(value):
        return pattern_to_wire(value)
    if isinstance(value, dict):
        return {key: prepare_value(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [prepare_value(item) for item in value]
    return value


def normalize(root_or_queries: Any, queries: Any = None) -> tuple[NodeRef | None, list[Any]]:
    """Split the ``find()`` arguments into a root reference and a query list.

    Accepted shapes::

        normalize(queries)
        normalize(root, queries)
        normalize([root, step, ...])

    A single step (string or mapping) is wrapped into a one-element list.
    """
    root: NodeRef | None
    if queries is None:
        root, queries = None, root_or_queries
    else:
        root = root_or_queries

    if isinstance(queries, (list, tuple)):
        steps = list(queries)
    else:
        steps = [queries]

    if steps and is_node_ref(steps[0]):
        root = steps.pop(0)

    return root, [prepare_value(step) for step in steps]


def where_query(selector: str, where: Any) -> list[dict[str, Any]]:
    """Build the one-step query used by ``find_where()``.

    Plain text stands for an exact-text clause.
    """
    if where is None:
        where = {}
    elif isinstance(where, str):
        where = {"is": where}
    return [{"$": selector, "where": prepare_value(where)}]
