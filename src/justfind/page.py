"""Minimal document host.

A `Page` is the authoring side and a `DocumentContext` the target side. Every
call between them goes through JSON, so only plain data and node references
cross; live nodes stay in the context and are handed out as `ElementHandle`
objects.
"""

from __future__ import annotations

import inspect
import json
import logging
from itertools import count
from typing import TYPE_CHECKING, Any

from justhtml import JustHTML

from .boundary import NodeRef, is_wire_ref, ref_to_wire

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

logger = logging.getLogger(__name__)

# Queries must see the markup as written, so parser-side sanitizing is off
# unless the caller asks for it.
_UNSANITIZED: dict[str, Any] = {"sanitize": False, "safe": False}


def parse_document(html: str | bytes | None, **options: Any) -> JustHTML:
    """Parse ``html`` with `justhtml.JustHTML`, keeping every element.

    ``options`` are the parser's keyword arguments and override the defaults.
    """
    accepted = inspect.signature(JustHTML.__init__).parameters
    defaults = {key: value for key, value in _UNSANITIZED.items() if key in accepted}
    return JustHTML(html, **{**defaults, **options})


class TransportError(RuntimeError):
    """Raised when a call cannot reach the document context."""


class ElementHandle(NodeRef):
    __slots__ = ("page",)

    page: Page

    def __init__(self, page: Page, object_id: int) -> None:
        super().__init__(object_id)
        self.page = page

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ElementHandle):
            return NotImplemented
        return self.page is other.page and self.object_id == other.object_id

    def __hash__(self) -> int:
        return hash((id(self.page), self.object_id))

    def dispose(self) -> None:
        """Release the node behind this handle. Later use raises `TransportError`."""
        self.page.release(self)


class DocumentContext:
    """Owns a parsed document and the nodes handed out from it.

    Object ids come from ``ids``; a `Page` shares one counter across all of its
    contexts so an id is never handed out twice.
    """

    __slots__ = ("_handles", "_ids", "_next_id", "document")

    document: JustHTML
    _handles: dict[int, Any]
    _ids: dict[int, int]
    _next_id: Iterator[int]

    def __init__(self, html: str | bytes | None, *, ids: Iterator[int] | None = None, **options: Any) -> None:
        self.document = parse_document(html, **options)
        self._handles = {}
        self._ids = {}
        self._next_id = ids if ids is not None else count(1)

    def register(self, node: Any) -> int:
        # The handle table keeps the node alive, so id(node) stays unique
        key = id(node)
        object_id = self._ids.get(key)
        if object_id is None:
            object_id = next(self._next_id)
            self._ids[key] = object_id
            self._handles[object_id] = node
            logger.debug("Registered <%s> as object %d", node.name, object_id)
        return object_id

    def release(self, object_id: int) -> None:
        node = self._handles.pop(object_id, None)
        if node is not None:
            del self._ids[id(node)]
            logger.debug("Released object %d", object_id)

    def resolve(self, object_id: int) -> Any:
        try:
            return self._handles[object_id]
        except KeyError:
            raise TransportError(f"No node with object id {object_id} in this context") from None

    def call(self, fn: Callable[..., Any], payload: str) -> Any:
        """Decode ``payload``, run ``fn`` on the document and return its result."""
        args = [self.resolve(arg["objectId"]) if is_wire_ref(arg) else arg for arg in json.loads(payload)]
        return fn(*args, document=self.document.root)


class Page:
    """Authoring-side view of one document.

    ``options`` are passed to `justhtml.JustHTML` (``collect_errors``,
    ``strict``, ``encoding``, ...).
    """

    options: dict[str, Any]
    _context: DocumentContext | None
    _object_ids: Iterator[int]

    def __init__(self, html: str | bytes | None = None, **options: Any) -> None:
        self.options = options
        self._object_ids = count(1)
        self._context = DocumentContext(html, ids=self._object_ids, **options)

    @property
    def context(self) -> DocumentContext:
        if self._context is None:
            raise TransportError("Page has been closed")
        return self._context

    @property
    def errors(self) -> list[Any]:
        """Parse errors collected for the current document."""
        return self.context.document.errors

    def set_content(self, html: str | bytes | None) -> None:
        """Replace the document. Existing handles become stale."""
        if self._context is None:
            raise TransportError("Page has been closed")
        self._context = DocumentContext(html, ids=self._object_ids, **self.options)

    def close(self) -> None:
        self._context = None

    def _check_handle(self, handle: ElementHandle) -> None:
        if handle.page is not self:
            raise TransportError("Handle belongs to a different page")

    def _encode_args(self, args: tuple[Any, ...]) -> str:
        wire: list[Any] = []
        for arg in args:
            if isinstance(arg, NodeRef):
                if isinstance(arg, ElementHandle):
                    self._check_handle(arg)
                wire.append(ref_to_wire(arg))
            else:
                wire.append(arg)
        return json.dumps(wire)

    def evaluate(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run ``fn`` in the document context and return its result as plain data.

        ``fn`` receives the decoded ``args`` plus the document root as the
        ``document`` keyword.
        """
        context = self.context
        result = context.call(fn, self._encode_args(args))
        return json.loads(json.dumps(result))

    def evaluate_handle(self, fn: Callable[..., Any], *args: Any) -> ElementHandle | None:
        """Like `evaluate`, but ``fn`` returns a node (or None) and a handle comes back."""
        context = self.context
        node = context.call(fn, self._encode_args(args))
        if node is None:
            return None
        return ElementHandle(self, context.register(node))

    def node_for(self, handle: ElementHandle) -> Any:
        """Return the live node behind ``handle``."""
        self._check_handle(handle)
        return self.context.resolve(handle.object_id)

    def release(self, handle: ElementHandle) -> None:
        """Drop ``handle`` from the context. Releasing twice is a no-op."""
        self._check_handle(handle)
        self.context.release(handle.object_id)
