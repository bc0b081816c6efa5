"""Entry points installed onto a host.

A host is anything with ``evaluate_handle(fn, *args)`` that runs ``fn`` inside
a document context and returns a node reference or None, such as `Page`.
"""

from __future__ import annotations

import logging
from types import MethodType
from typing import Any, TypeVar

from .evaluate import evaluate
from .normalize import normalize, where_query

logger = logging.getLogger(__name__)

HostT = TypeVar("HostT")


def find(host: Any, root_or_queries: Any, queries: Any = None) -> Any:
    """Find one element.

    ``find(host, queries)`` searches from the document root and
    ``find(host, root, queries)`` from ``root``. ``queries`` is a step or a
    list of steps; a root reference may also lead the list.
    """
    root, steps = normalize(root_or_queries, queries)
    logger.debug("find: %d step(s), root=%r", len(steps), root)
    return host.evaluate_handle(evaluate, root, steps)


def find_where(host: Any, root: Any, selector: Any, where: Any = None) -> Any:
    """Find the first ``selector`` match whose text satisfies ``where``.

    ``find_where(host, "h1", "Hello")`` is the rootless form. Plain text for
    ``where`` means exact text.
    """
    if isinstance(root, str):
        root, selector, where = None, root, selector
    return find(host, root, where_query(selector, where))


def install(host: HostT) -> HostT:
    """Bind `find` and `find_where` onto ``host`` and return it."""
    host.find = MethodType(find, host)  # type: ignore[attr-defined]
    host.find_where = MethodType(find_where, host)  # type: ignore[attr-defined]
    return host
