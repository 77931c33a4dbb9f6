"""
Index range API endpoints.

Read stored ranges and trigger recalculation for single indices or the
whole cluster.
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from index_ranges.db import schemas
from index_ranges.errors import IndexEngineUnavailableError, NotFoundError, StatisticsUnavailableError
from index_ranges.services.index_range_service import IndexRangeService, get_index_range_service

router = APIRouter(prefix="/system/indices/ranges", tags=["index-ranges"])


@router.get("/", response_model=schemas.IndexRangeList)
def list_index_ranges(service: IndexRangeService = Depends(get_index_range_service)):
    ranges = service.find_all()
    return schemas.IndexRangeList(ranges=ranges, total=len(ranges))


@router.get("/search", response_model=schemas.IndexRangeList)
def search_index_ranges(
    begin: datetime = Query(...),
    end: datetime = Query(...),
    service: IndexRangeService = Depends(get_index_range_service),
):
    ranges = service.find(begin, end)
    return schemas.IndexRangeList(ranges=ranges, total=len(ranges))


@router.post("/rebuild", response_model=schemas.RebuildSummary)
def rebuild_index_ranges(
    indices: Optional[List[str]] = Body(default=None),
    service: IndexRangeService = Depends(get_index_range_service),
):
    try:
        return service.rebuild_all(indices)
    except IndexEngineUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.get("/{index_name}", response_model=schemas.IndexRange)
def get_index_range(index_name: str, service: IndexRangeService = Depends(get_index_range_service)):
    try:
        return service.get(index_name)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.post("/{index_name}/rebuild", response_model=schemas.IndexRange)
def rebuild_index_range(index_name: str, service: IndexRangeService = Depends(get_index_range_service)):
    try:
        return service.rebuild(index_name)
    except StatisticsUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
