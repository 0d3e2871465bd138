from __future__ import annotations

import pytest
from lark import Token, Tree

from tests.support.harness import parse_program
from lox_ref.token_types import TT, Tok
from lox_ref.tree import Literal, Variable, as_tree, pretty, program_tree

LITERAL_CASES = [
    pytest.param("nil;", "nil", id="nil"),
    pytest.param("true;", "true", id="true"),
    pytest.param("false;", "false", id="false"),
    pytest.param("3;", "3", id="integral"),
    pytest.param("2.25;", "2.25", id="fraction"),
    pytest.param('"text";', "'text'", id="string"),
]


@pytest.mark.parametrize("source, text", LITERAL_CASES)
def test_literal_rendering(source: str, text: str) -> None:
    (stmt,) = parse_program(source)[0]
    tree = as_tree(stmt)
    assert tree == Tree("exprstmt", [Tree("literal", [Token("VALUE", text)])])


def test_pretty_program() -> None:
    statements, _ = parse_program("print 1;")
    assert pretty(statements) == "program\n  printstmt\n    literal\t1\n"


def test_tokens_keep_positions() -> None:
    statements, _ = parse_program("var a = 1;\nvar bb = a;")
    tree = program_tree(statements)

    names = [tok for tok in tree.scan_values(lambda v: isinstance(v, Token) and v.type == "IDENT")]
    assert [(str(t), t.line, t.column) for t in names] == [
        ("a", 1, 5),
        ("bb", 2, 5),
        ("a", 2, 10),
    ]


def test_find_data_over_program() -> None:
    statements, _ = parse_program("fun f(x) { if (x) return x; return nil; }")
    tree = program_tree(statements)

    assert len(list(tree.find_data("returnstmt"))) == 2
    assert len(list(tree.find_data("ifstmt"))) == 1
    (params,) = tree.find_data("params")
    assert [str(p) for p in params.children] == ["x"]


def test_nodes_compare_by_identity() -> None:
    a = Literal(1.0)
    b = Literal(1.0)
    assert a != b
    assert len({a: 0, b: 1}) == 2

    name = Tok(TT.IDENT, "x", None, 1)
    assert Variable(name) != Variable(name)


def test_nodes_are_frozen() -> None:
    node = Literal(1.0)
    with pytest.raises(AttributeError):
        node.value = 2.0  # type: ignore[misc]
