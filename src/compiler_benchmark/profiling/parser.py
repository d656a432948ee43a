# profiling/parser.py
"""
Parser for GHC time/allocation profiling reports (``+RTS -p`` / ``-P``).

The layout is owned by the GHC runtime, so the grammar below follows what it
prints rather than anything designed here::

    <timestamp> Time and Allocation Profiling Report  (Final)

       elm-make +RTS -p -RTS

    total time  =        2.14 secs   (2138 ticks @ 1000 us, 1 processor)
    total alloc = 3,861,274,416 bytes  (excludes profiling overheads)

    COST CENTRE MODULE [SRC] %time %alloc [ticks bytes]
    <hot rows>

                                   individual      inherited
    COST CENTRE MODULE [SRC] no. entries %time %alloc %time %alloc [ticks bytes]
    <tree rows, nesting given by leading spaces>

Parsing is all-or-nothing: any deviation raises ``ParseError``.
"""
import re
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ValidationError

from ..schemas import CostCentreNode, HotCostCentre, ProfileHeader, ProfileReport

_RX_TITLE = re.compile(r"^(?P<timestamp>.+?)\s+Time and Allocation Profiling Report\s+\(\w+\)$")
_RX_TOTAL_TIME = re.compile(
    r"^total time\s*=\s*(?P<secs>\d+(?:\.\d+)?) secs\s+"
    r"\((?P<ticks>\d+) ticks @ (?P<interval>\d+) (?P<unit>us|ms), (?P<procs>\d+) processors?\)$"
)
_RX_TOTAL_ALLOC = re.compile(r"^total alloc\s*=\s*(?P<bytes>\d{1,3}(?:,\d{3})*|\d+) bytes(?:\s+\(.*\))?$")
_RX_INT = re.compile(r"\d+")
_RX_FLOAT = re.compile(r"\d+(?:\.\d+)?(?:[eE][-+]?\d+)?")

_TICK_COLUMNS = ["ticks", "bytes"]
_HOT_NUMERIC = ["%time", "%alloc"]
_TREE_NUMERIC = ["no.", "entries", "%time", "%alloc", "%time", "%alloc"]


class ParseError(Exception):
    """Raised when report text does not match the profiler's output format."""
    def __init__(self, line: int, expected: str, found: str):
        self.line = line
        self.expected = expected
        self.found = found
        super().__init__(f"line {line}: expected {expected}, found {found!r}")


class _Lines:
    """Cursor over the report's lines; line numbers are 1-based."""

    def __init__(self, text: str):
        self.lines = text.splitlines()
        self.index = 0

    @property
    def line_no(self) -> int:
        return self.index + 1

    def peek(self) -> Optional[str]:
        if self.index >= len(self.lines):
            return None
        return self.lines[self.index]

    def next(self, expected: str) -> str:
        line = self.peek()
        if line is None:
            raise ParseError(self.line_no, expected, "end of input")
        self.index += 1
        return line

    def skip_blank(self) -> None:
        while self.peek() is not None and not self.peek().strip():
            self.index += 1


class _Columns:
    """Column layout announced by a ``COST CENTRE`` header line."""

    def __init__(self, has_src: bool, numeric: List[str]):
        self.has_src = has_src
        self.numeric = numeric

    @property
    def has_ticks(self) -> bool:
        return self.numeric[-2:] == _TICK_COLUMNS


def parse(raw_text: str) -> ProfileReport:
    """Parse the full text of a ``.prof`` file into a ``ProfileReport``."""
    lines = _Lines(raw_text)
    header = _parse_header(lines)

    lines.skip_blank()
    hot_columns = _parse_column_header(lines, _HOT_NUMERIC, "hot cost centre header")
    hot_cost_centres = []
    lines.skip_blank()
    while lines.peek() is not None and lines.peek().strip() and not _is_tree_banner(lines.peek()):
        line_no = lines.line_no
        hot_cost_centres.append(_parse_hot_row(lines.next("hot cost centre row"), line_no, hot_columns))

    lines.skip_blank()
    banner = lines.next("'individual inherited' banner")
    if not _is_tree_banner(banner):
        raise ParseError(lines.line_no - 1, "'individual inherited' banner", banner)
    tree_columns = _parse_column_header(lines, _TREE_NUMERIC, "cost centre tree header")

    return ProfileReport(
        header=header,
        hot_cost_centres=hot_cost_centres,
        cost_centre_tree=_parse_tree(lines, tree_columns),
    )


def _parse_header(lines: _Lines) -> ProfileHeader:
    lines.skip_blank()
    title = lines.next("report title").strip()
    title_match = _RX_TITLE.match(title)
    if not title_match:
        raise ParseError(lines.line_no - 1, "'Time and Allocation Profiling Report' title", title)

    # The command line sits between the title and the totals and may wrap.
    command_parts = []
    while True:
        line = lines.next("'total time' line").strip()
        if not line:
            continue
        time_match = _RX_TOTAL_TIME.match(line)
        if time_match:
            time_line_no = lines.line_no - 1
            break
        if line.startswith(("total ", "COST CENTRE")):
            raise ParseError(lines.line_no - 1, "'total time' line", line)
        command_parts.append(line)

    lines.skip_blank()
    alloc_line = lines.next("'total alloc' line").strip()
    alloc_match = _RX_TOTAL_ALLOC.match(alloc_line)
    if not alloc_match:
        raise ParseError(lines.line_no - 1, "'total alloc' line", alloc_line)

    interval = int(time_match.group("interval"))
    if time_match.group("unit") == "ms":
        interval *= 1000
    return _build(ProfileHeader, time_line_no,
        timestamp=title_match.group("timestamp"),
        command_line=" ".join(command_parts),
        total_time_secs=float(time_match.group("secs")),
        total_ticks=int(time_match.group("ticks")),
        tick_interval_us=interval,
        processors=int(time_match.group("procs")),
        total_alloc_bytes=int(alloc_match.group("bytes").replace(",", "")),
    )


def _build(model, line_no: int, **fields) -> BaseModel:
    """Construct a schema model, reporting a rejected field as a ParseError on `line_no`."""
    try:
        return model(**fields)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        raise ParseError(line_no, f"{field}: {error['msg'].lower()}", str(error.get("input"))) from e


def _is_tree_banner(line: str) -> bool:
    return line.split() == ["individual", "inherited"]


def _parse_column_header(lines: _Lines, numeric: List[str], what: str) -> _Columns:
    line_no = lines.line_no
    line = lines.next(what)
    tokens = line.split()
    if tokens[:3] != ["COST", "CENTRE", "MODULE"]:
        raise ParseError(line_no, f"{what} starting 'COST CENTRE MODULE'", line.strip())

    rest = tokens[3:]
    has_src = rest[:1] == ["SRC"]
    if has_src:
        rest = rest[1:]
    columns = list(numeric)
    if rest[len(numeric):] == _TICK_COLUMNS:
        columns += _TICK_COLUMNS
    if rest != columns:
        expected = " ".join(["COST CENTRE MODULE", "[SRC]"] + numeric + ["[ticks bytes]"])
        raise ParseError(line_no, expected, line.strip())
    return _Columns(has_src, columns)


def _split_row(line: str, line_no: int, columns: _Columns) -> Tuple[str, str, Optional[str], List[str]]:
    tokens = line.split()
    width = len(columns.numeric)
    fixed = 2 + width
    if len(tokens) < fixed or (not columns.has_src and len(tokens) != fixed):
        expected = f"{fixed + int(columns.has_src)} columns"
        raise ParseError(line_no, expected, line.strip())
    src = None
    if columns.has_src:
        src = " ".join(tokens[2:-width])
        if not src:
            raise ParseError(line_no, "SRC column", line.strip())
    return tokens[0], tokens[1], src, tokens[-width:]


def _number(token: str, column: str, line_no: int, integral: bool):
    pattern = _RX_INT if integral else _RX_FLOAT
    if not pattern.fullmatch(token):
        raise ParseError(line_no, f"numeric '{column}' value", token)
    return int(token) if integral else float(token)


def _parse_hot_row(line: str, line_no: int, columns: _Columns) -> HotCostCentre:
    name, module, src, values = _split_row(line, line_no, columns)
    fields = dict(
        name=name,
        module=module,
        src=src,
        time_percent=_number(values[0], "%time", line_no, integral=False),
        alloc_percent=_number(values[1], "%alloc", line_no, integral=False),
    )
    if columns.has_ticks:
        fields["ticks"] = _number(values[2], "ticks", line_no, integral=True)
        fields["bytes"] = _number(values[3], "bytes", line_no, integral=True)
    return _build(HotCostCentre, line_no, **fields)


def _tree_row_fields(line: str, line_no: int, columns: _Columns) -> Dict:
    name, module, src, values = _split_row(line, line_no, columns)
    fields = dict(
        name=name,
        module=module,
        src=src,
        number=_number(values[0], "no.", line_no, integral=True),
        entries=_number(values[1], "entries", line_no, integral=True),
        time_percent=_number(values[2], "%time", line_no, integral=False),
        alloc_percent=_number(values[3], "%alloc", line_no, integral=False),
        inherited_time_percent=_number(values[4], "%time", line_no, integral=False),
        inherited_alloc_percent=_number(values[5], "%alloc", line_no, integral=False),
    )
    if columns.has_ticks:
        fields["ticks"] = _number(values[6], "ticks", line_no, integral=True)
        fields["bytes"] = _number(values[7], "bytes", line_no, integral=True)
    return fields


def _parse_tree(lines: _Lines, columns: _Columns) -> List[CostCentreNode]:
    rows: List[Dict] = []
    row_lines: List[int] = []
    parents: List[Optional[int]] = []
    open_rows: List[Tuple[int, int]] = []   # (indent, row index) along the current path

    while True:
        lines.skip_blank()
        if lines.peek() is None:
            break
        line_no = lines.line_no
        line = lines.next("cost centre row")
        indent = len(line) - len(line.lstrip(" "))
        while open_rows and open_rows[-1][0] >= indent:
            open_rows.pop()
        parents.append(open_rows[-1][1] if open_rows else None)
        open_rows.append((indent, len(rows)))
        rows.append(_tree_row_fields(line, line_no, columns))
        row_lines.append(line_no)

    if not rows:
        raise ParseError(lines.line_no, "at least one cost centre row", "end of input")

    # Children always follow their parent, so building back to front means
    # every child node exists before the (frozen) parent is created.
    children: List[List[CostCentreNode]] = [[] for _ in rows]
    roots: List[CostCentreNode] = []
    for index in range(len(rows) - 1, -1, -1):
        node = _build(CostCentreNode, row_lines[index], **rows[index], children=children[index][::-1])
        parent = parents[index]
        (roots if parent is None else children[parent]).append(node)
    return roots[::-1]
