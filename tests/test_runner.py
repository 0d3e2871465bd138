from __future__ import annotations

import io
from pathlib import Path

import pytest

from lox_ref.runner import EX_DATAERR, EX_SOFTWARE, EX_USAGE, USAGE, exit_code, main, run_file
from lox_ref.session import RunStatus


def _script(tmp_path: Path, source: str) -> str:
    path = tmp_path / "script.lox"
    path.write_text(source, encoding="utf-8")
    return str(path)


@pytest.mark.parametrize(
    "status, code",
    [
        pytest.param(RunStatus.OK, 0, id="ok"),
        pytest.param(RunStatus.STATIC_ERROR, 65, id="static"),
        pytest.param(RunStatus.RUNTIME_ERROR, 70, id="runtime"),
    ],
)
def test_exit_code(status: RunStatus, code: int) -> None:
    assert exit_code(status) == code


def test_runs_script(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main([_script(tmp_path, "print 1 + 2;\nprint \"done\";")])

    captured = capsys.readouterr()
    assert captured.out == "3\ndone\n"
    assert captured.err == ""


@pytest.mark.parametrize(
    "source, code, stderr",
    [
        pytest.param(
            "print 1",
            EX_DATAERR,
            "[line 1] Error at end: Expect ';' after value.\n",
            id="static-error",
        ),
        pytest.param(
            "print 1;\nprint nil + 1;",
            EX_SOFTWARE,
            "Operands must be two numbers or two strings.\n[line 2]\n",
            id="runtime-error",
        ),
    ],
)
def test_error_exit_codes(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    monkeypatch: pytest.MonkeyPatch,
    source: str,
    code: int,
    stderr: str,
) -> None:
    monkeypatch.delenv("LOX_DEBUG_PY_TRACE", raising=False)

    with pytest.raises(SystemExit) as exc_info:
        main([_script(tmp_path, source)])

    assert exc_info.value.code == code
    assert capsys.readouterr().err == stderr


def test_run_file_returns_code(tmp_path: Path) -> None:
    assert run_file(_script(tmp_path, "var a = 1;")) == 0
    assert run_file(_script(tmp_path, "return;")) == EX_DATAERR


def test_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    missing = tmp_path / "nope.lox"
    assert run_file(str(missing)) == EX_USAGE
    assert "Could not read" in capsys.readouterr().err


def test_reads_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO('print "from stdin";'))
    main(["-"])
    assert capsys.readouterr().out == "from stdin\n"


@pytest.mark.parametrize(
    "argv",
    [
        pytest.param(["a.lox", "b.lox"], id="two-scripts"),
        pytest.param(["--bogus", "a.lox"], id="unknown-option"),
    ],
)
def test_usage_errors(argv, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)

    assert exc_info.value.code == EX_USAGE
    assert USAGE in capsys.readouterr().err


def test_help(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["--help"])

    assert exc_info.value.code == 0
    assert capsys.readouterr().out == USAGE + "\n"


def test_dump_ast_flag(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(["--dump-ast", _script(tmp_path, "print 1;")])

    captured = capsys.readouterr()
    assert captured.out == "1\n"
    assert captured.err.startswith("program\n")
    assert "printstmt" in captured.err


def test_dump_ast_env(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("LOX_DUMP_AST", "1")
    main([_script(tmp_path, "var a = 2;")])
    assert "vardecl" in capsys.readouterr().err


def test_py_traceback_env(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("LOX_DEBUG_PY_TRACE", "yes")
    with pytest.raises(SystemExit):
        main([_script(tmp_path, "nil();")])

    err = capsys.readouterr().err
    assert err.startswith("Can only call functions and classes.\n[line 1]\n")
    assert "Python traceback:" in err


def test_undecodable_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "bad.lox"
    path.write_bytes(b'print "\xff";')

    assert run_file(str(path)) == EX_DATAERR
    assert capsys.readouterr().err == f"Could not decode {path}: not valid UTF-8 (byte 7)\n"
