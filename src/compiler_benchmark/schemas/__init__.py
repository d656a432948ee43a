"""
compiler_benchmark.schemas  •  Pydantic-v2 models for profiling data
--------------------------------------------------------------------
Parsed GHC time/allocation reports, cost-centre lookup results and the
repository descriptors used by the benchmark loop.  Every model is frozen:
a report is built once by the parser and only ever read afterwards.
"""
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

SCHEMA_VERSION = "1.0.0"


# --------------------------------------------------------------------------- #
# 🔸 Enumerations
# --------------------------------------------------------------------------- #
class CompilerVersion(str, Enum):
    """Which build of the Elm compiler produced a profile."""
    GOLD = "Gold"
    TEST = "Test"


# --------------------------------------------------------------------------- #
# 🔸 Parsed profile report
# --------------------------------------------------------------------------- #
class _Frozen(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class ProfileHeader(_Frozen):
    timestamp: str                           = Field(..., examples=["Sat Jun 11 14:02 2016"])
    command_line: str                        = Field(..., examples=["elm-make +RTS -p -RTS"])
    total_time_secs: float                   = Field(..., ge=0.0)
    total_ticks: int                         = Field(..., ge=0)
    tick_interval_us: int                    = Field(..., ge=0)
    processors: int                          = Field(..., ge=1)
    total_alloc_bytes: int                   = Field(..., ge=0)


class HotCostCentre(_Frozen):
    """One row of the flat summary printed above the tree."""
    name: str
    module: str
    src: Optional[str]                       = None
    time_percent: float
    alloc_percent: float
    ticks: Optional[int]                     = None   # only with +RTS -P
    bytes: Optional[int]                     = None   # only with +RTS -P


class CostCentreNode(_Frozen):
    """One row of the cost-centre tree together with its callees."""
    name: str                                = Field(..., description="SCC label or function name")
    module: str
    src: Optional[str]                       = None
    number: int                              = Field(..., ge=0, description="The report's `no.` column")
    entries: int                             = Field(..., ge=0, description="Times this cost centre was entered")
    time_percent: float                      = Field(..., description="Individual %time")
    alloc_percent: float                     = Field(..., description="Individual %alloc")
    inherited_time_percent: float
    inherited_alloc_percent: float
    ticks: Optional[int]                     = None
    bytes: Optional[int]                     = None
    children: List[CostCentreNode]           = Field(default_factory=list)


class ProfileReport(_Frozen):
    header: ProfileHeader
    hot_cost_centres: List[HotCostCentre]    = Field(default_factory=list)
    cost_centre_tree: List[CostCentreNode]   = Field(
        ..., description="Top-level nodes, normally the single MAIN node"
    )


# --------------------------------------------------------------------------- #
# 🔸 Extraction results
# --------------------------------------------------------------------------- #
class CostCentreResult(_Frozen):
    name: str
    cost_centre: Optional[CostCentreNode]    = None


class CostCentreComparison(_Frozen):
    name: str
    gold: Optional[CostCentreNode]           = None
    test: Optional[CostCentreNode]           = None
    time_delta: Optional[float]              = Field(None, description="test - gold individual %time")
    alloc_delta: Optional[float]             = Field(None, description="test - gold individual %alloc")


# --------------------------------------------------------------------------- #
# 🔸 External-facing payloads
# --------------------------------------------------------------------------- #
class Repo(_Frozen):
    project_name: str
    url: str
    branch: str                              = "master"


class ReportRequest(BaseModel):
    """Inbound object for POST /report."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    profile_text: str
    cost_centres: Optional[List[str]]        = Field(
        None, description="Defaults to the configured cost-centre names"
    )


class ReportResponse(BaseModel):
    """Outbound object returned by POST /report."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: str                      = SCHEMA_VERSION
    results: List[CostCentreResult]
