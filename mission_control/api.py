from pathlib import Path

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, HTTPException, Query
from fastapi.encoders import jsonable_encoder

load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env", override=False)

from .db.repliers_client import MLSConfigError, MLSSearchError
from .models.search import (
    Adjustment,
    CMAStats,
    RankRequest,
    RankResponse,
    ScoreRequest,
    ScoreResponse,
    SearchRequest,
    SearchResponse,
    StatsRequest,
)
from .services.address import NormalizedAddress, normalize_address
from .services.scoring import rank_properties, score_breakdown
from .services.search_service import get_search_service
from .services.stats_service import calculate_cma_stats
from .utils.logging import get_logger, kv

LOGGER = get_logger("api")

app = FastAPI(title="Mission Control CMA")
router = APIRouter(prefix="/api")


@router.post("/cma/search-properties", response_model=SearchResponse)
def search_properties(req: SearchRequest):
    try:
        service = get_search_service()
    except MLSConfigError as exc:
        raise HTTPException(503, detail=str(exc))
    try:
        return service.search(req)
    except MLSSearchError as exc:
        LOGGER.error(kv("search_properties_failed", status=exc.status_code, error=exc))
        raise HTTPException(502, detail="Failed to search properties")


@router.post("/cma/score", response_model=ScoreResponse)
def score(req: ScoreRequest):
    result = score_breakdown(req.property, req.subject_property)
    return ScoreResponse(
        score=result.score,
        adjustments=[Adjustment(factor=a.factor, rule=a.rule, points=a.points) for a in result.adjustments],
    )


@router.post("/cma/rank", response_model=RankResponse)
def rank(req: RankRequest):
    items = rank_properties(req.properties, req.subject_property)
    return RankResponse(items=items, total=len(items))


@router.post("/cma/stats", response_model=CMAStats)
def stats(req: StatsRequest):
    return calculate_cma_stats(req.properties, req.subject_property)


@router.get("/address/normalize")
def normalize(address: str = Query(..., min_length=1)):
    result: NormalizedAddress = normalize_address(address)
    payload = result.model_dump()
    payload["fallback_queries"] = result.fallback_queries
    return jsonable_encoder(payload)


@router.get("/health")
def health(): return {"status": "ok"}


app.include_router(router)
