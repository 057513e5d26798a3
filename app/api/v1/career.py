import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Request, status

from app.core.config import settings
from app.core.rate_limit import rate_limit
from app.schemas.career import (
    AllAnalysesResponse,
    AnalysisResponse,
    AnalysisType,
    CodingAnalyzeRequest,
    LatestAnalysisResponse,
    PortfolioAnalyzeRequest,
    ReadinessRequest,
    ReadinessResponse,
    ReadinessScore,
    ResumeAnalyzeRequest,
)
from app.services.career_service import CareerService, get_career_service
from app.storage import AnalysisStoreError

logger = logging.getLogger(__name__)

router = APIRouter()

UserId = Annotated[str, Path(min_length=1, max_length=128, pattern=r"^[A-Za-z0-9_.:@-]+$")]


def _storage_unavailable(exc: AnalysisStoreError) -> HTTPException:
    logger.error("career_storage_error code=%s: %s", exc.code, exc)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Analysis storage is temporarily unavailable. Please try again.",
    )


@router.post("/career/{user_id}/resume/analyze", response_model=AnalysisResponse)
@rate_limit(settings.analysis_rate_limit)
async def analyze_resume(
    request: Request,
    payload: ResumeAnalyzeRequest,
    user_id: UserId,
    service: CareerService = Depends(get_career_service),
):
    _ = request
    try:
        record = service.analyze_resume(user_id, payload.resume_text, payload.target_role)
    except AnalysisStoreError as exc:
        raise _storage_unavailable(exc) from exc
    return AnalysisResponse(cached=False, record=record)


@router.post("/career/{user_id}/coding/analyze", response_model=AnalysisResponse)
@rate_limit(settings.analysis_rate_limit)
async def analyze_coding(
    request: Request,
    payload: CodingAnalyzeRequest,
    user_id: UserId,
    service: CareerService = Depends(get_career_service),
):
    _ = request
    try:
        record, cached = service.analyze_coding(user_id, payload.stats, payload.target_role, payload.force_refresh)
    except AnalysisStoreError as exc:
        raise _storage_unavailable(exc) from exc
    return AnalysisResponse(cached=cached, record=record)


@router.post("/career/{user_id}/portfolio/analyze", response_model=AnalysisResponse)
@rate_limit(settings.analysis_rate_limit)
async def analyze_portfolio(
    request: Request,
    payload: PortfolioAnalyzeRequest,
    user_id: UserId,
    service: CareerService = Depends(get_career_service),
):
    _ = request
    try:
        record, cached = service.analyze_portfolio(user_id, payload.stats, payload.target_role, payload.force_refresh)
    except AnalysisStoreError as exc:
        raise _storage_unavailable(exc) from exc
    return AnalysisResponse(cached=cached, record=record)


@router.get("/career/{user_id}/all", response_model=AllAnalysesResponse)
async def get_all_analyses(
    user_id: UserId,
    service: CareerService = Depends(get_career_service),
):
    try:
        return service.get_all(user_id)
    except AnalysisStoreError as exc:
        raise _storage_unavailable(exc) from exc


@router.post("/career/{user_id}/readiness-score", response_model=ReadinessResponse)
@rate_limit(settings.analysis_rate_limit)
async def calculate_readiness(
    request: Request,
    payload: ReadinessRequest,
    user_id: UserId,
    service: CareerService = Depends(get_career_service),
):
    _ = request
    try:
        return service.calculate_readiness(user_id, payload.target_role)
    except AnalysisStoreError as exc:
        raise _storage_unavailable(exc) from exc


@router.get("/career/{user_id}/readiness-score", response_model=ReadinessScore)
async def get_readiness(
    user_id: UserId,
    service: CareerService = Depends(get_career_service),
):
    try:
        readiness = service.get_readiness(user_id)
    except AnalysisStoreError as exc:
        raise _storage_unavailable(exc) from exc
    if readiness is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Readiness score not calculated yet.")
    return readiness


@router.get("/career/{user_id}/{analysis_type}/latest", response_model=LatestAnalysisResponse)
async def get_latest_analysis(
    analysis_type: AnalysisType,
    user_id: UserId,
    service: CareerService = Depends(get_career_service),
):
    try:
        record = service.get_latest(user_id, analysis_type)
    except AnalysisStoreError as exc:
        raise _storage_unavailable(exc) from exc
    if record is None:
        return LatestAnalysisResponse(record=None, message=f"No completed {analysis_type} analysis yet.")
    return LatestAnalysisResponse(record=record)
