# profiling/extractor.py
from typing import Iterator, List, Optional, Sequence, Tuple

from ..schemas import CostCentreNode, ProfileReport

# Names of annotated cost centres in elm-compiler and elm-make. Must be kept
# in sync with the {-# SCC "..." #-} annotations in both repositories (which
# must also agree with each other). A name missing here is never reported; a
# name missing there is reported as absent.
COST_CENTRE_NAMES: Tuple[str, ...] = (
    "parsing",
)


def iter_cost_centres(report: ProfileReport) -> Iterator[CostCentreNode]:
    """Yield every node of the tree in pre-order, children in printed order."""
    stack = list(reversed(report.cost_centre_tree))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def find_cost_centre(report: ProfileReport, name: str) -> Optional[CostCentreNode]:
    """First node called ``name`` in pre-order, or None.

    A label can appear at several depths (recursion, or the same SCC reached
    through different callers); the pre-order first hit keeps benchmark runs
    comparable with each other.
    """
    return next((node for node in iter_cost_centres(report) if node.name == name), None)


def extract(
    report: ProfileReport, names: Sequence[str] = COST_CENTRE_NAMES
) -> List[Tuple[str, Optional[CostCentreNode]]]:
    return [(name, find_cost_centre(report, name)) for name in names]
