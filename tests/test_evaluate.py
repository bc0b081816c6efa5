from __future__ import annotations

import re

import pytest
from justhtml import JustHTML

from justfind.evaluate import evaluate, first_text, holds
from justfind.page import parse_document


def _doc(html: str) -> JustHTML:
    return parse_document(html)


def _one(doc: JustHTML, selector: str):
    nodes = doc.query(selector)
    assert nodes, selector
    return nodes[0]


# first_text


def test_first_text_skips_blank_nodes_and_attributes() -> None:
    doc = _doc('<div id="x">\n  <img alt="Picture of a cat" title="Cat"><span>   </span><b>  Real text </b> more</div>')
    assert first_text(_one(doc, "#x")) == "Real text"


def test_first_text_of_text_node_itself() -> None:
    doc = _doc("<p>  hi  </p>")
    text_node = _one(doc, "p").children[0]
    assert first_text(text_node) == "hi"


def test_first_text_missing() -> None:
    doc = _doc('<div id="x"><img alt="only alt"><span> </span><!-- a comment --></div>')
    assert first_text(_one(doc, "#x")) is None


# holds


def test_holds_exact_and_substring() -> None:
    h1 = _one(_doc("<h1>Hello, world</h1>"), "h1")
    assert holds(h1, {"is": "Hello, world"})
    assert not holds(h1, {"is": "hello"})
    assert holds(h1, {"contains": "world"})
    assert holds(h1, {"includes": "Hello", "equals": "Hello, world"})
    assert not holds(h1, {"contains": "world", "is": "Hello"})


def test_holds_regex_forms() -> None:
    h1 = _one(_doc("<h1>Hello, world</h1>"), "h1")
    assert holds(h1, {"matches": ["^hello", "i"]})
    assert not holds(h1, {"matches": ["^hello", ""]})
    assert holds(h1, {"regex": re.compile(r"w\w+d$")})
    assert holds(h1, {"match": "world"})


def test_empty_clause_is_vacuously_true() -> None:
    div = _one(_doc("<div></div>"), "div")
    assert holds(div, {})
    assert not holds(div, {"not": True})


def test_set_predicates_fail_without_text() -> None:
    div = _one(_doc("<div><span> </span></div>"), "div")
    assert not holds(div, {"is": "x"})
    assert not holds(div, {"contains": ""})
    assert not holds(div, {"matches": [".*", ""]})


def test_is_empty() -> None:
    doc = _doc('<div id="empty"><span> </span></div><div id="full">text</div>')
    assert holds(_one(doc, "#empty"), {"isEmpty": True})
    assert holds(_one(doc, "#empty"), {"is": ""})
    assert not holds(_one(doc, "#full"), {"empty": True})
    assert holds(_one(doc, "#full"), {"isEmpty": True, "not": True})


def test_or_and_composition() -> None:
    doc = _doc('<b id="y">y</b><b id="z">z</b>')
    clause = {"or": [{"is": "x"}, {"is": "y"}]}
    assert holds(_one(doc, "#y"), clause)
    assert not holds(_one(doc, "#z"), clause)

    assert holds(_one(doc, "#y"), {"and": [{"contains": "y"}, {"not": True, "is": "x"}]})
    assert not holds(_one(doc, "#y"), {"and": [{"contains": "y"}, {"is": "x"}]})


def test_empty_composition() -> None:
    b = _one(_doc("<b>y</b>"), "b")
    assert holds(b, {"and": []})
    assert not holds(b, {"or": []})


def test_negation_applies_to_composition() -> None:
    b = _one(_doc("<b>y</b>"), "b")
    assert not holds(b, {"or": [{"is": "x"}, {"is": "y"}], "not": True})
    assert holds(b, {"and": [{"is": "x"}], "not": True})


def test_composition_ignores_direct_predicates() -> None:
    b = _one(_doc("<b>y</b>"), "b")
    # "is" is not consulted when "and"/"or" is present
    assert holds(b, {"and": [{"is": "y"}], "is": "nope"})
    assert holds(b, {"or": [{"is": "y"}], "contains": "nope"})
    # "and" wins over "or"
    assert not holds(b, {"and": [{"is": "x"}], "or": [{"is": "y"}]})


def test_clause_selector_targets_first_descendant() -> None:
    li = _one(_doc('<ul><li><a href="/docs">Docs</a><a href="/api">API</a></li></ul>'), "li")
    assert holds(li, {"$": "a", "is": "Docs"})
    assert not holds(li, {"$": "a", "is": "API"})
    assert holds(li, {"$": "a", "or": [{"is": "x"}, {"contains": "Doc"}]})


def test_absent_clause_target_satisfies_negation() -> None:
    li = _one(_doc("<ul><li>No link here</li></ul>"), "li")
    assert not holds(li, {"$": "a"})
    assert holds(li, {"$": "a", "not": True})
    assert holds(li, {"$": "a", "exists": False})
    assert holds(li, {"$": "a", "is": "Docs", "not": True})


# evaluate


def test_single_step_exact_match() -> None:
    doc = _doc("<h1>Hello, world</h1>")
    assert evaluate(doc.root, [{"$": "h1", "is": "Hello, world"}]) is _one(doc, "h1")
    assert evaluate(doc.root, [{"$": "h1", "is": "hello"}]) is None


def test_substring_and_negation() -> None:
    doc = _doc("<p>Item is in stock</p>")
    assert evaluate(doc.root, [{"$": "p", "contains": "stock", "not": True}]) is None
    assert evaluate(doc.root, [{"$": "p", "contains": "gone", "not": True}]) is _one(doc, "p")


def test_first_matching_candidate_in_document_order() -> None:
    doc = _doc("<ul><li>one</li><li>two</li><li>two</li></ul>")
    match = evaluate(doc.root, [{"$": "li", "where": {"is": "two"}}])
    assert match is doc.query("li")[1]


def test_multi_step_narrowing() -> None:
    doc = _doc('<div id="a"><span>skip</span></div><div id="b"><span>target</span></div>')
    match = evaluate(doc.root, ["#b", {"$": "span", "is": "target"}])
    assert match is _one(doc, "#b span")


def test_no_backtracking_into_earlier_steps() -> None:
    doc = _doc('<div id="a"><span>skip</span></div><div id="b"><span>target</span></div>')
    # "div" picks div#a; its span is not "target", and div#b is never tried
    assert evaluate(doc.root, ["div", {"$": "span", "is": "target"}]) is None


def test_step_without_selector_tests_current_scope() -> None:
    doc = _doc('<section id="s"><h2>Title</h2></section>')
    section = _one(doc, "#s")
    assert evaluate(section, [{"contains": "Title"}]) is section
    assert evaluate(section, [{"is": "Other"}]) is None


def test_where_takes_precedence_over_inline_clause() -> None:
    doc = _doc("<p>alpha</p><p>beta</p>")
    match = evaluate(doc.root, [{"$": "p", "is": "alpha", "where": {"is": "beta"}}])
    assert match is doc.query("p")[1]


def test_step_selector_is_not_reused_as_clause_selector() -> None:
    # Would fail if "$" were applied again inside the matched <p>
    doc = _doc("<p>alpha</p>")
    assert evaluate(doc.root, [{"$": "p", "is": "alpha"}]) is _one(doc, "p")


def test_root_defaults_to_document() -> None:
    doc = _doc("<h1>Hi</h1>")
    assert evaluate(None, ["h1"], document=doc.root) is _one(doc, "h1")
    assert evaluate(doc, ["h1"]) is _one(doc, "h1")


def test_scope_searches_descendants_only() -> None:
    doc = _doc('<div id="outer"><div id="inner">x</div></div>')
    outer = _one(doc, "#outer")
    assert evaluate(outer, ["div"]) is _one(doc, "#inner")
    assert evaluate(_one(doc, "#inner"), ["div"]) is None


def test_no_root_or_document_raises() -> None:
    with pytest.raises(ValueError):
        evaluate(None, ["h1"])


def test_invalid_selector_is_surfaced() -> None:
    doc = _doc("<h1>Hi</h1>")
    with pytest.raises(ValueError):
        evaluate(doc.root, ["h1["])


def test_deeply_nested_text_is_found() -> None:
    depth = 3000
    doc = _doc("<div>" * depth + "x" + "</div>" * depth)
    assert first_text(doc.root) == "x"
    assert evaluate(doc.root, [{"is": "x"}]) is doc.root
    assert evaluate(doc.root, [{"is": "y"}]) is None
