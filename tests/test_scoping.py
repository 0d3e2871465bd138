from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import RunStatus, make_session, run_runtime_case

SCENARIOS = [
    pytest.param(
        "var a = 1; { var a = 2; print a; } print a;",
        ["2", "1"],
        None,
        id="block-shadowing",
    ),
    pytest.param(
        'var a = "outer"; { var a = "inner"; { print a; } }',
        ["inner"],
        None,
        id="innermost-wins",
    ),
    pytest.param(
        "var a = 1; { a = 2; } print a;",
        ["2"],
        None,
        id="assign-outer-from-block",
    ),
    pytest.param(
        dedent(
            """\
            var a = "global a";
            var b = "global b";
            var c = "global c";
            {
              var a = "outer a";
              var b = "outer b";
              {
                var a = "inner a";
                print a;
                print b;
                print c;
              }
              print a;
              print b;
              print c;
            }
            print a;
            print b;
            print c;
            """
        ),
        [
            "inner a", "outer b", "global c",
            "outer a", "outer b", "global c",
            "global a", "global b", "global c",
        ],
        None,
        id="nested-scopes",
    ),
    pytest.param(
        "var a = 1; var a = 2; print a;",
        ["2"],
        None,
        id="global-redefinition",
    ),
    pytest.param(
        "var i = 0; while (i < 3) { print i; i = i + 1; }",
        ["0", "1", "2"],
        None,
        id="while-loop",
    ),
    pytest.param(
        "for (var i = 0; i < 3; i = i + 1) print i;",
        ["0", "1", "2"],
        None,
        id="for-loop",
    ),
    pytest.param(
        "var i = 10; for (var i = 0; i < 1; i = i + 1) {} print i;",
        ["10"],
        None,
        id="for-init-is-scoped",
    ),
    pytest.param(
        "var sum = 0; for (var i = 1; i <= 4; i = i + 1) { var sq = i * i; sum = sum + sq; } print sum;",
        ["30"],
        None,
        id="for-body-block-per-iteration",
    ),
    pytest.param(
        "if (nil) print 1; else if (false) print 2; else print 3;",
        ["3"],
        None,
        id="else-if-chain",
    ),
    pytest.param(
        "var x = 0; while (x < 5) x = x + 2; print x;",
        ["6"],
        None,
        id="while-single-statement",
    ),
    pytest.param(
        "{ var b = 1; } print b;",
        [],
        "Undefined variable 'b'.",
        id="block-var-not-visible-after",
    ),
    pytest.param("x = 1;", [], "Undefined variable 'x'.", id="assign-undefined-global"),
    pytest.param("print y;", [], "Undefined variable 'y'.", id="read-undefined-global"),
]


@pytest.mark.parametrize("source, expected_output, expected_error", SCENARIOS)
def test_scoping(source: str, expected_output, expected_error) -> None:
    run_runtime_case(source, expected_output, expected_error)


def test_session_state_persists_across_runs() -> None:
    session, output, _ = make_session()

    assert session.run("var a = 1;") is RunStatus.OK
    assert session.run("fun f() { var x = 2; return x + a; }") is RunStatus.OK
    assert session.run("a = 40;") is RunStatus.OK
    assert session.run("print f();") is RunStatus.OK
    assert output.lines == ["42"]


def test_session_side_table_accumulates() -> None:
    session, output, _ = make_session()

    session.run("fun outer() { var v = \"kept\"; fun get() { return v; } return get; }")
    session.run("var g = outer();")
    session.run("print g();")
    assert output.lines == ["kept"]


def test_session_reset_drops_globals() -> None:
    session, output, reporter = make_session()

    session.run("var a = 1;")
    session.reset()
    assert session.run("print a;") is RunStatus.RUNTIME_ERROR
    assert reporter.messages("runtime") == ["Undefined variable 'a'."]
    assert session.run("print clock();") is RunStatus.OK
    assert output.lines == ["1700000000250"]


def test_session_continues_after_error() -> None:
    session, output, reporter = make_session()

    assert session.run("print ;") is RunStatus.STATIC_ERROR
    assert session.had_error
    assert session.run("print 1;") is RunStatus.OK
    assert not session.had_error
    assert output.lines == ["1"]
