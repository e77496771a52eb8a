"""
Tests for the command line entry point and the module-level resolve().
"""

import pytest

import winimpsyms
from winimpsyms.main import main
from winimpsyms.types import DefRefMask

from conftest import FakeRunner, dump


@pytest.fixture(autouse=True)
def _in_tmp(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)


def test_report_on_stdout(three_objects, capsys):
    runner = FakeRunner(three_objects)
    assert main(["-i", "o0.o,o1.o,o2.o"], runner=runner) == 0
    out = capsys.readouterr().out
    assert out.startswith("state: Objects:\n")
    assert ' "foo":  defbase refbase defimp' in out
    assert not any(call[0] == "disassemble" for call in runner.calls)


def test_watch_prints_excerpts(three_objects, capsys):
    listings = {"o0.o": "\t\t0000000000000004:  IMAGE_REL_AMD64_REL32\tfoo\n",
                "o1.o": ""}
    runner = FakeRunner(three_objects, listings)
    assert main(["-i", "o0.o,o1.o,o2.o", "--watch", "foo"], runner=runner) == 0
    out = capsys.readouterr().out
    assert "excerpts from 'llvm-objdump-14 -ldr o0.o`" in out
    assert "=-= ref O0 off=0x4:" in out


def test_no_excerpts_flag(three_objects, capsys):
    runner = FakeRunner(three_objects)
    assert main(["-i", "o0.o,o1.o,o2.o", "--watch", "foo", "--no-excerpts"],
                runner=runner) == 0
    assert "excerpts from" not in capsys.readouterr().out


def test_output_file(three_objects, tmp_path):
    out_file = tmp_path / "report.txt"
    runner = FakeRunner(three_objects)
    assert main(["-i", "o0.o,o1.o,o2.o", "-o", str(out_file)], runner=runner) == 0
    assert out_file.read_text().startswith("state: Objects:")


def test_fatal_error_exit_status(capsys):
    details = {
        "a.o": dump("a.o", symbols=[(2, 0x0, "__imp_foo")]),
        "b.o": dump("b.o", symbols=[(1, 0x4, "__imp_foo")]),
    }
    assert main(["-i", "a.o,b.o"], runner=FakeRunner(details)) == 1
    assert capsys.readouterr().out == ""


def test_missing_inputs_is_usage_error():
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 2


def test_empty_inputs_is_usage_error():
    with pytest.raises(SystemExit) as exc:
        main(["-i", ","])
    assert exc.value.code == 2


def test_resolve(three_objects):
    model = winimpsyms.resolve(list(three_objects), watch=["foo"],
                               runner=FakeRunner(three_objects))
    assert model.disposition("foo") == (DefRefMask.DEFBASE | DefRefMask.REFBASE
                                         | DefRefMask.DEFIMP)
