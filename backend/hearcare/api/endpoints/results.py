# -*- coding: utf-8 -*-
"""Endpoints for storing and browsing a user's hearing test results."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response

from hearcare.analyzers.history import (
    build_health_profile,
    overall_status,
    trend_analysis,
    trend_data,
)
from hearcare.analyzers.results_processor import (
    ResultsProcessor,
    frequency_breakdown,
    recommendations_for,
)
from hearcare.domain.test_result import TestResult
from hearcare.models import (
    HealthProfileResponse,
    HistoryResponse,
    ProcessRequest,
    TestResultDetail,
    TestResultPayload,
    TestResultView,
    TrendPointView,
    TrendResponse,
    build_detail,
)
from hearcare.reports.pdf_report import generate_pdf_report
from hearcare.store import TestResultStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users/{user_id}", tags=["results"])

_store: Optional[TestResultStore] = None


def get_store() -> TestResultStore:
    global _store
    if _store is None:
        _store = TestResultStore()
    return _store


def _load_or_404(store: TestResultStore, user_id: str, result_id: str) -> TestResult:
    result = store.get(user_id, result_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Test result not found.")
    return result


def _detail(result: TestResult, recommendations=None) -> TestResultDetail:
    return build_detail(
        result,
        recommendations if recommendations is not None else recommendations_for(result),
        frequency_breakdown(result),
        overall_status(result),
    )


@router.post("/results", status_code=status.HTTP_201_CREATED, response_model=TestResultView)
async def create_result(
    user_id: str,
    payload: TestResultPayload,
    store: TestResultStore = Depends(get_store),
):
    """Save a finished test result."""
    result = payload.to_domain()
    try:
        result_id = store.save(user_id, result)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return TestResultView.from_domain(replace(result, id=result_id))


@router.post(
    "/results/process",
    status_code=status.HTTP_201_CREATED,
    response_model=TestResultDetail,
)
async def process_responses(
    user_id: str,
    request: ProcessRequest,
    store: TestResultStore = Depends(get_store),
):
    """Classify raw tone responses, save the outcome and return it."""
    if not request.responses:
        raise HTTPException(status_code=400, detail="At least one test response is required.")

    processor = ResultsProcessor()
    hearing_result = processor.process(item.to_domain() for item in request.responses)
    test_date = request.test_date or datetime.now(timezone.utc)
    result = processor.to_test_result(hearing_result, test_date)
    try:
        result_id = store.save(user_id, result)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    logger.info(
        "Processed %d responses for user %s into result %s",
        len(request.responses),
        user_id,
        result_id,
    )
    return _detail(replace(result, id=result_id), hearing_result.recommendations)


@router.get("/results", response_model=HistoryResponse)
async def list_results(user_id: str, store: TestResultStore = Depends(get_store)):
    """Test history, newest first."""
    results = store.history(user_id)
    return HistoryResponse(
        user_id=user_id,
        results=[TestResultView.from_domain(result) for result in results],
    )


@router.get("/results/{result_id}", response_model=TestResultDetail)
async def get_result(user_id: str, result_id: str, store: TestResultStore = Depends(get_store)):
    return _detail(_load_or_404(store, user_id, result_id))


@router.delete("/results/{result_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_result(user_id: str, result_id: str, store: TestResultStore = Depends(get_store)):
    if not store.delete(user_id, result_id):
        raise HTTPException(status_code=404, detail="Test result not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/results/{result_id}/export")
async def export_result(user_id: str, result_id: str, store: TestResultStore = Depends(get_store)):
    result = _load_or_404(store, user_id, result_id)
    pdf_bytes = generate_pdf_report(result)
    filename = f"hearcare-{result.test_date.strftime('%Y%m%d')}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=\"{filename}\""},
    )


@router.get("/trends", response_model=TrendResponse)
async def get_trends(
    user_id: str,
    frequency: int = Query(1000, gt=0),
    store: TestResultStore = Depends(get_store),
):
    results = store.history(user_id)
    points = [point for point in trend_data(results) if point.frequency == frequency]
    return TrendResponse(
        user_id=user_id,
        frequency=frequency,
        analysis=trend_analysis(results, frequency),
        points=[TrendPointView.from_domain(point) for point in points],
    )


@router.get("/profile", response_model=HealthProfileResponse)
async def get_profile(user_id: str, store: TestResultStore = Depends(get_store)):
    """Hearing health profile: latest status, band breakdown, insights and advice."""
    results = store.history(user_id)
    return HealthProfileResponse.from_domain(user_id, len(results), build_health_profile(results))
