"""Monthly emission input API router."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from karbon.core.database import get_db
from karbon.core.errors import to_http_exception
from karbon.modules.analysis.narrative import NarrativeGenerator, get_narrative_generator
from karbon.modules.emissions import service
from karbon.modules.emissions.schemas import (
    DetailCreate,
    DetailResponse,
    InputResponse,
    InputSubmit,
    InputSummary,
    ResultAnalysisResponse,
    ResultResponse,
)

router = APIRouter(tags=["emissions"])


@router.get("/companies/{company_id}/inputs", response_model=list[InputSummary])
async def list_inputs(company_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Company inputs, newest period first, with their totals when computed."""
    try:
        inputs = await service.list_inputs(db, company_id)
    except LookupError as exc:
        raise to_http_exception(exc)
    return [
        InputSummary(
            id=item.id,
            month=item.month,
            year=item.year,
            period=item.period,
            total_emission=item.result.total_emission if item.result else None,
            level=item.result.level if item.result else None,
        )
        for item in inputs
    ]


@router.post(
    "/companies/{company_id}/inputs",
    response_model=InputResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_input(
    company_id: uuid.UUID,
    body: InputSubmit,
    db: AsyncSession = Depends(get_db),
    generator: NarrativeGenerator = Depends(get_narrative_generator),
):
    """Submit a month's consumption; the result is computed in the same request."""
    try:
        return await service.submit_monthly_input(db, company_id, body, generator)
    except (LookupError, ValueError) as exc:
        raise to_http_exception(exc)


@router.get("/inputs/{input_id}", response_model=InputResponse)
async def get_input(input_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    try:
        return await service.get_input(db, input_id)
    except LookupError as exc:
        raise to_http_exception(exc)


@router.delete("/inputs/{input_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_input(input_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    try:
        await service.delete_input(db, input_id)
    except LookupError as exc:
        raise to_http_exception(exc)


@router.post(
    "/inputs/{input_id}/details",
    response_model=DetailResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_detail(
    input_id: uuid.UUID,
    body: DetailCreate,
    use_ai: bool = Query(True),
    db: AsyncSession = Depends(get_db),
    generator: NarrativeGenerator = Depends(get_narrative_generator),
):
    try:
        return await service.add_detail(
            db, input_id, body.source_id, body.value, generator, use_ai=use_ai
        )
    except (LookupError, ValueError) as exc:
        raise to_http_exception(exc)


@router.get("/inputs/{input_id}/result", response_model=ResultResponse)
async def get_result(input_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    try:
        return await service.get_result(db, input_id)
    except LookupError as exc:
        raise to_http_exception(exc)


@router.post("/inputs/{input_id}/result", response_model=ResultResponse)
async def recompute_result(
    input_id: uuid.UUID,
    use_ai: bool = Query(True),
    db: AsyncSession = Depends(get_db),
    generator: NarrativeGenerator = Depends(get_narrative_generator),
):
    """Rebuild the result from the current details."""
    try:
        return await service.compute_result(db, input_id, generator, use_ai=use_ai)
    except (LookupError, ValueError) as exc:
        raise to_http_exception(exc)


@router.get("/inputs/{input_id}/result/analysis", response_model=ResultAnalysisResponse)
async def get_result_analysis(input_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    try:
        return await service.get_result_analysis(db, input_id)
    except LookupError as exc:
        raise to_http_exception(exc)
