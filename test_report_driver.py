#!/usr/bin/env python3
"""
Report Driver Test Script

Runs the report and comparison drivers (and the CLI on top of them) against
the sample reports, including a corrupt one that must be diagnosed without
raising.
"""

import sys
import pathlib

import pytest

# Add src to path so we can import compiler_benchmark modules
sys.path.insert(0, str(pathlib.Path(__file__).parent / "src"))

from compiler_benchmark.main import _cli
from compiler_benchmark.report.driver import (
    compare_results, format_cost_centre, report_results,
)

SAMPLES = pathlib.Path(__file__).parent / "samples"
GOLD = SAMPLES / "elm-todomvc.Gold.prof"
TEST = SAMPLES / "elm-todomvc.Test.prof"


@pytest.fixture
def corrupt_report(tmp_path) -> pathlib.Path:
    text = GOLD.read_text(encoding="utf-8").replace("190          14   35.5", "190          14   lots")
    path = tmp_path / "elm-todomvc.Gold.prof"
    path.write_text(text, encoding="utf-8")
    return path


def test_reports_configured_cost_centres(capsys):
    print("🧪 Testing report of a Gold profile...")
    results = report_results(GOLD)
    out = capsys.readouterr().out

    assert [name for name, _ in results] == ["parsing"]
    assert results[0][1].time_percent == 35.5
    assert "parsing: 35.5% time, 40.1% alloc (inherited 35.5% / 40.1%, 14 entries, Parse.Parse)" in out


def test_reports_absent_cost_centre(capsys):
    results = report_results(GOLD, ["parsing", "typecheck"])
    out = capsys.readouterr().out

    assert results[1] == ("typecheck", None)
    assert "typecheck: absent" in out


def test_parse_error_is_printed_not_raised(corrupt_report, capsys):
    print("🧪 Testing diagnosis of a corrupt profile...")
    results = report_results(corrupt_report)
    out = capsys.readouterr().out

    assert results is None
    assert (f"Error parsing profiling results from {corrupt_report}: "
            "line 20: expected numeric '%time' value, found 'lots'") in out


def test_out_of_range_field_is_printed_not_raised(tmp_path, capsys):
    path = tmp_path / "elm-todomvc.Gold.prof"
    path.write_text(GOLD.read_text(encoding="utf-8").replace("1 processor)", "0 processors)"), encoding="utf-8")

    assert report_results(path) is None
    assert f"Error parsing profiling results from {path}: line 5: expected processors" in capsys.readouterr().out


def test_undecodable_report_is_printed_not_raised(tmp_path, capsys):
    print("🧪 Testing diagnosis of a profile that is not UTF-8...")
    path = tmp_path / "elm-todomvc.Gold.prof"
    path.write_bytes(GOLD.read_bytes().replace(b"Parse.Parse", b"Parse\xffParse", 1))

    assert report_results(path) is None
    assert f"Error parsing profiling results from {path}: byte " in capsys.readouterr().out
    assert _cli(["report", str(path)]) == 0


def test_missing_file_propagates(tmp_path):
    with pytest.raises(FileNotFoundError):
        report_results(tmp_path / "nothing.prof")


def test_format_absent():
    assert format_cost_centre("codegen", None) == "codegen: absent"


def test_compare_gold_and_test(capsys):
    comparisons = compare_results(GOLD, TEST, ["parsing", "codegen", "typecheck"])
    out = capsys.readouterr().out

    parsing, codegen, typecheck = comparisons
    assert parsing.time_delta == pytest.approx(-7.1)
    assert parsing.alloc_delta == pytest.approx(-6.5)
    assert codegen.time_delta == pytest.approx(5.6)
    assert typecheck.gold is None and typecheck.test is None
    assert typecheck.time_delta is None
    assert "parsing: 35.5% -> 28.4% time (-7.1), 40.1% -> 33.6% alloc (-6.5)" in out
    assert "typecheck: gold absent, test absent" in out


def test_compare_with_corrupt_side(corrupt_report, capsys):
    assert compare_results(corrupt_report, TEST) is None
    assert "Error parsing profiling results from" in capsys.readouterr().out


def test_cli_report(capsys):
    assert _cli(["report", str(GOLD), "--names", "parsing", "codegen"]) == 0
    out = capsys.readouterr().out
    assert "parsing: 35.5% time" in out
    assert "codegen: 54.5% time" in out


def test_cli_report_corrupt_is_not_fatal(corrupt_report, capsys):
    assert _cli(["report", str(corrupt_report)]) == 0
    assert "Error parsing profiling results from" in capsys.readouterr().out


def test_cli_compare(capsys):
    assert _cli(["compare", str(GOLD), str(TEST)]) == 0
    assert "parsing: 35.5% -> 28.4% time" in capsys.readouterr().out


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
