#!/usr/bin/env python3
"""
Cost-Centre Extractor Test Script

Checks that configured cost centres are found anywhere in the tree, in the
order they were asked for, and that missing ones come back as None.
"""

import sys
import pathlib

import pytest

# Add src to path so we can import compiler_benchmark modules
sys.path.insert(0, str(pathlib.Path(__file__).parent / "src"))

from compiler_benchmark.profiling.extractor import (
    COST_CENTRE_NAMES, extract, find_cost_centre, iter_cost_centres,
)
from compiler_benchmark.profiling.parser import parse
from compiler_benchmark.schemas import CostCentreNode, ProfileHeader, ProfileReport

SAMPLES = pathlib.Path(__file__).parent / "samples"


@pytest.fixture
def gold_report() -> ProfileReport:
    return parse((SAMPLES / "elm-todomvc.Gold.prof").read_text(encoding="utf-8"))


@pytest.fixture
def ghc8_report() -> ProfileReport:
    return parse((SAMPLES / "elm-make.ghc8.prof").read_text(encoding="utf-8"))


def _node(name, number, children=(), time=0.0):
    return CostCentreNode(
        name=name, module="Test", number=number, entries=1,
        time_percent=time, alloc_percent=0.0,
        inherited_time_percent=time, inherited_alloc_percent=0.0,
        children=list(children),
    )


def _report(*roots):
    header = ProfileHeader(
        timestamp="Mon Jan  1 00:00 2018", command_line="elm-make +RTS -p -RTS",
        total_time_secs=0.0, total_ticks=0, tick_interval_us=1000,
        processors=1, total_alloc_bytes=0,
    )
    return ProfileReport(header=header, cost_centre_tree=list(roots))


def test_finds_configured_cost_centre(gold_report):
    print("🧪 Testing lookup of a single cost centre...")
    results = extract(gold_report, ["parsing"])

    assert len(results) == 1
    name, node = results[0]
    assert name == "parsing"
    assert node is not None
    assert node.name == "parsing"
    assert node.time_percent == 35.5
    print(f"✅ parsing found with {node.time_percent}% time")


def test_missing_cost_centre_is_absent(gold_report):
    results = extract(gold_report, ["parsing", "typecheck"])

    assert [name for name, _ in results] == ["parsing", "typecheck"]
    assert results[0][1] is not None
    assert results[1][1] is None


def test_preserves_order_and_length(ghc8_report):
    names = ["typecheck", "nope", "parsing", "parsing", "MAIN"]
    results = extract(ghc8_report, names)

    assert [name for name, _ in results] == names
    assert [node.name if node is not None else None for _, node in results] == [
        "typecheck", None, "parsing", "parsing", "MAIN",
    ]


def test_defaults_to_configured_names(gold_report):
    assert COST_CENTRE_NAMES == ("parsing",)
    assert [name for name, _ in extract(gold_report)] == list(COST_CENTRE_NAMES)


def test_finds_deeply_nested_cost_centre():
    """Only the deepest node carries the name; it must still be found."""
    print("🧪 Testing depth-insensitive lookup...")
    deep = _node("typecheck", 5, time=12.5)
    report = _report(
        _node("MAIN", 1, [
            _node("main", 2, [
                _node("build", 3, [
                    _node("solve", 4, [deep]),
                ]),
            ]),
        ]),
    )

    found = find_cost_centre(report, "typecheck")
    assert found == deep
    assert found.time_percent == 12.5
    print("✅ Found at depth 4")


def test_duplicate_names_resolve_in_pre_order(ghc8_report):
    """parsing appears at depth 3 (no. 840) and again below typecheck (no. 866)."""
    node = find_cost_centre(ghc8_report, "parsing")
    assert node.number == 840
    assert node.entries == 12


def test_pre_order_prefers_earlier_subtree_over_shallower_later_node():
    report = _report(
        _node("MAIN", 1, [
            _node("a", 2, [_node("target", 10)]),
            _node("target", 3),
        ]),
    )
    assert find_cost_centre(report, "target").number == 10


def test_traversal_visits_every_node_in_pre_order(ghc8_report):
    numbers = [node.number for node in iter_cost_centres(ghc8_report)]
    assert numbers == [412, 823, 701, 825, 831, 840, 852, 866, 871, 688]


def test_traversal_spans_several_roots():
    report = _report(_node("A", 1, [_node("B", 2)]), _node("C", 3))
    assert [n.name for n in iter_cost_centres(report)] == ["A", "B", "C"]


def test_extract_leaves_report_untouched(ghc8_report):
    before = ghc8_report.model_dump()
    extract(ghc8_report, ["parsing", "codegen", "missing"])
    assert ghc8_report.model_dump() == before


def test_extract_is_stable(ghc8_report):
    names = ["codegen", "parsing"]
    assert extract(ghc8_report, names) == extract(ghc8_report, names)


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
