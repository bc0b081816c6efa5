from .boundary import NodeRef, PatternFlagError, pattern_from_wire, pattern_to_wire
from .clause import Clause, prepare_clause
from .evaluate import evaluate, first_text, holds
from .finder import find, find_where, install
from .normalize import normalize, where_query
from .page import DocumentContext, ElementHandle, Page, TransportError, parse_document

__all__ = [
    "Clause",
    "DocumentContext",
    "ElementHandle",
    "NodeRef",
    "Page",
    "PatternFlagError",
    "TransportError",
    "evaluate",
    "find",
    "find_where",
    "first_text",
    "holds",
    "install",
    "normalize",
    "parse_document",
    "pattern_from_wire",
    "pattern_to_wire",
    "prepare_clause",
    "where_query",
]
