# report/driver.py
"""
Report driver: read a saved ``.prof`` file, parse it and print the configured
cost centres.  A report that does not parse is diagnosed on stdout and the
caller carries on; it is never a fatal error.
"""
import pathlib
from typing import List, Optional, Sequence, Tuple, Union

from ..profiling.extractor import COST_CENTRE_NAMES, extract
from ..profiling.parser import ParseError, parse
from ..schemas import CostCentreComparison, CostCentreNode, ProfileReport
from ..utils.logger import get_logger

log = get_logger("ReportDriver")

PathLike = Union[str, pathlib.Path]
Extraction = List[Tuple[str, Optional[CostCentreNode]]]


def _load(result_file: PathLike) -> Optional[ProfileReport]:
    result_file = pathlib.Path(result_file)
    log.info(f"Reading profiling results from {result_file}")
    raw = result_file.read_bytes()
    try:
        report = parse(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        detail = f"byte {e.start}: invalid {e.encoding} ({e.reason})"
    except ParseError as e:
        detail = str(e)
    else:
        log.info(f"Parsed {result_file}: {report.header.total_time_secs:.2f}s, "
                 f"{len(report.cost_centre_tree)} top-level cost centre(s)")
        return report

    log.error(f"Could not parse {result_file}: {detail}")
    print(f"Error parsing profiling results from {result_file}: {detail}")
    return None


def format_cost_centre(name: str, node: Optional[CostCentreNode]) -> str:
    if node is None:
        return f"{name}: absent"
    return (f"{name}: {node.time_percent:.1f}% time, {node.alloc_percent:.1f}% alloc "
            f"(inherited {node.inherited_time_percent:.1f}% / {node.inherited_alloc_percent:.1f}%, "
            f"{node.entries} entries, {node.module})")


def format_results(results: Extraction) -> str:
    return "\n".join(format_cost_centre(name, node) for name, node in results)


def report_results(result_file: PathLike,
                   names: Sequence[str] = COST_CENTRE_NAMES) -> Optional[Extraction]:
    """Print the configured cost centres found in ``result_file``.

    Returns the (name, node-or-None) pairs, or None when the file did not
    parse. Errors reading the file itself propagate.
    """
    report = _load(result_file)
    if report is None:
        return None
    results = extract(report, names)
    missing = [name for name, node in results if node is None]
    if missing:
        log.warning(f"Cost centres not found in {result_file}: {', '.join(missing)}")
    print(format_results(results))
    return results


def _delta(gold: Optional[CostCentreNode], test: Optional[CostCentreNode],
           field: str) -> Optional[float]:
    if gold is None or test is None:
        return None
    return round(getattr(test, field) - getattr(gold, field), 6)


def compare_results(gold_file: PathLike, test_file: PathLike,
                    names: Sequence[str] = COST_CENTRE_NAMES) -> Optional[List[CostCentreComparison]]:
    """Print how each configured cost centre moved between two profiles."""
    gold_report = _load(gold_file)
    test_report = _load(test_file)
    if gold_report is None or test_report is None:
        return None

    comparisons = []
    for (name, gold), (_, test) in zip(extract(gold_report, names), extract(test_report, names)):
        comparisons.append(CostCentreComparison(
            name=name,
            gold=gold,
            test=test,
            time_delta=_delta(gold, test, "time_percent"),
            alloc_delta=_delta(gold, test, "alloc_percent"),
        ))

    for c in comparisons:
        if c.time_delta is None:
            print(f"{c.name}: gold {'present' if c.gold is not None else 'absent'}, "
                  f"test {'present' if c.test is not None else 'absent'}")
        else:
            print(f"{c.name}: {c.gold.time_percent:.1f}% -> {c.test.time_percent:.1f}% time "
                  f"({c.time_delta:+.1f}), {c.gold.alloc_percent:.1f}% -> "
                  f"{c.test.alloc_percent:.1f}% alloc ({c.alloc_delta:+.1f})")
    return comparisons
