# api/routes.py
from fastapi import APIRouter, HTTPException
from ..profiling.extractor import COST_CENTRE_NAMES, extract
from ..profiling.parser import ParseError, parse
from ..schemas import CostCentreResult, ReportRequest, ReportResponse, SCHEMA_VERSION
from ..utils.logger import get_logger

log = get_logger("API")

router = APIRouter()

@router.get("/healthz")
async def health_check():
    return {
        "status": "healthy",
        "service": "compiler-benchmark",
        "version": SCHEMA_VERSION
    }

@router.post("/report", response_model=ReportResponse)
async def report(request: ReportRequest):
    names = request.cost_centres if request.cost_centres is not None else list(COST_CENTRE_NAMES)
    log.info(f"Report request: {len(request.profile_text)} characters, cost centres {names}")

    try:
        profile = parse(request.profile_text)
    except ParseError as e:
        log.error(f"Error parsing submitted profiling results: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    results = [CostCentreResult(name=name, cost_centre=node) for name, node in extract(profile, names)]
    return ReportResponse(results=results)
