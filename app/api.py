"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.concurrency import run_in_threadpool

from app.schemas import (
    ConfirmRequest,
    ConfirmResponse,
    ErrorResponse,
    MeasureListResponse,
    MeasureSummary,
    UploadRequest,
    UploadResponse,
)
from services.measures import MeasureService, build_default_service

router = APIRouter()

_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse},
}


def get_service() -> MeasureService:
    return build_default_service()


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses=_ERROR_RESPONSES,
    summary="Record a meter reading from a base64 photograph.",
)
async def upload_measure(
    payload: UploadRequest,
    service: MeasureService = Depends(get_service),
) -> UploadResponse:
    # Recognition blocks on the network; keep it off the event loop.
    measure = await run_in_threadpool(
        service.create_measure,
        payload.image,
        payload.customer_code,
        payload.measure_datetime,
        payload.measure_type,
    )
    return UploadResponse.from_measure(measure)


@router.patch(
    "/confirm",
    response_model=ConfirmResponse,
    responses=_ERROR_RESPONSES,
    summary="Confirm or correct the value of a reading.",
)
async def confirm_measure(
    payload: ConfirmRequest,
    service: MeasureService = Depends(get_service),
) -> ConfirmResponse:
    service.confirm_measure(payload.measure_uuid, payload.confirmed_value)
    return ConfirmResponse(success=True)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/{customer_code}/list",
    response_model=MeasureListResponse,
    responses=_ERROR_RESPONSES,
    summary="List a customer's readings of one meter type.",
)
async def list_measures(
    customer_code: str,
    measure_type: Optional[str] = Query(default=None),
    service: MeasureService = Depends(get_service),
) -> MeasureListResponse:
    measures = service.list_measures(customer_code, measure_type)
    return MeasureListResponse(
        customer_code=customer_code,
        measures=[MeasureSummary.from_measure(measure) for measure in measures],
    )
