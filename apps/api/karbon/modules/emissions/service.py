"""Monthly emission input workflow.

An input is one company-month. Submitting it creates the input, its details
and the computed result in one transaction. The result is always rebuilt from
the current details, so the stored total never drifts from the sum of the
detail contributions.
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from karbon.core.errors import DuplicateDetail, DuplicateInput, InvalidValue, NotFound
from karbon.core.periods import current_month_year, period_key
from karbon.models.company import Company
from karbon.models.emissions import (
    EmissionInput,
    EmissionInputDetail,
    EmissionResult,
    EmissionSource,
)
from karbon.modules.analysis.actions import priority_actions
from karbon.modules.analysis.narrative import (
    DetailLine,
    NarrativeContext,
    NarrativeGenerator,
    generate_narrative,
)
from karbon.modules.classification.classifier import (
    categorize_emission_band,
    compute_level,
    level_progress,
)
from karbon.modules.companies.service import get_company_or_raise
from karbon.modules.emission_sources.service import find_source_by_name, get_source_or_raise
from karbon.modules.emissions.aggregator import (
    CATEGORY_ORDER,
    Contribution,
    aggregate_categories,
    largest_category,
)
from karbon.modules.emissions.conversion import parse_consumption
from karbon.modules.emissions.schemas import InputSubmit

logger = structlog.get_logger()


# ── Loading ──────────────────────────────────────────────────────────────────


async def get_input(db: AsyncSession, input_id: uuid.UUID) -> EmissionInput:
    """Load an input with its details, their sources and the result."""
    stmt = (
        select(EmissionInput)
        .where(EmissionInput.id == input_id)
        .execution_options(populate_existing=True)
    )
    emission_input = (await db.execute(stmt)).scalar_one_or_none()
    if emission_input is None:
        raise NotFound(f"Emission input {input_id} not found")
    return emission_input


async def list_inputs(db: AsyncSession, company_id: uuid.UUID) -> list[EmissionInput]:
    """All inputs of a company, newest period first."""
    await get_company_or_raise(db, company_id)
    stmt = (
        select(EmissionInput)
        .where(EmissionInput.company_id == company_id)
        .order_by(EmissionInput.year.desc(), EmissionInput.month.desc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def get_result(db: AsyncSession, input_id: uuid.UUID) -> EmissionResult:
    emission_input = await get_input(db, input_id)
    if emission_input.result is None:
        raise NotFound(f"No result computed for emission input {input_id}")
    return emission_input.result


# ── Result computation ───────────────────────────────────────────────────────


def _detail_lines(details: list[EmissionInputDetail]) -> list[DetailLine]:
    return [
        DetailLine(
            source_name=detail.source.name,
            unit=detail.source.unit,
            category=detail.source.category,
            value=detail.value,
            emission_value=detail.emission_value,
        )
        for detail in details
    ]


async def _build_result(
    company: Company,
    emission_input: EmissionInput,
    generator: NarrativeGenerator,
    *,
    use_ai: bool,
) -> EmissionResult:
    """Create or refresh the input's result from its current details."""
    lines = _detail_lines(emission_input.details)
    total = sum(line.emission_value for line in lines)
    breakdown = aggregate_categories(
        Contribution(line.source_name, line.category, line.emission_value) for line in lines
    )
    outcome = compute_level(company, total)
    narrative, ai_used = await generate_narrative(
        NarrativeContext(
            company_name=company.name,
            sector=company.sector,
            total_emission=total,
            details=lines,
        ),
        generator,
        use_ai=use_ai,
    )

    result = emission_input.result
    if result is None:
        result = EmissionResult(total_emission=total)
        emission_input.result = result

    result.total_emission = total
    result.level = outcome.level.value if outcome.classified else None
    result.analysis = narrative
    for category in CATEGORY_ORDER:
        setattr(result, category.value, breakdown[category.value])

    logger.info(
        "emission_result_computed",
        input_id=str(emission_input.id),
        period=emission_input.period,
        total_emission=total,
        level=result.level,
        sector_group=outcome.sector_group.value,
        ai_used=ai_used,
    )
    return result


async def compute_result(
    db: AsyncSession,
    input_id: uuid.UUID,
    generator: NarrativeGenerator,
    use_ai: bool = True,
) -> EmissionResult:
    """(Re)build total, category blocks, level and narrative for an input."""
    emission_input = await get_input(db, input_id)
    company = await get_company_or_raise(db, emission_input.company_id)
    result = await _build_result(company, emission_input, generator, use_ai=use_ai)
    await db.flush()
    await db.commit()
    return result


# ── Writes ───────────────────────────────────────────────────────────────────


async def _resolve_source(
    db: AsyncSession,
    company_id: uuid.UUID,
    source_id: uuid.UUID | None,
    source_name: str | None,
) -> EmissionSource:
    if source_id is not None:
        return await get_source_or_raise(db, source_id, company_id)
    return await find_source_by_name(db, company_id, source_name or "")


async def submit_monthly_input(
    db: AsyncSession,
    company_id: uuid.UUID,
    body: InputSubmit,
    generator: NarrativeGenerator,
) -> EmissionInput:
    """Create a month's input, its details and its result atomically."""
    company = await get_company_or_raise(db, company_id)

    default_month, default_year = current_month_year()
    month = body.month or default_month
    year = body.year or default_year
    if not 1 <= month <= 12:
        raise InvalidValue(f"month must be between 1 and 12, got {month}")

    existing = await db.execute(
        select(EmissionInput.id).where(
            EmissionInput.company_id == company_id,
            EmissionInput.year == year,
            EmissionInput.month == month,
        )
    )
    if existing.first() is not None:
        raise DuplicateInput(f"An input for {period_key(year, month)} already exists")

    details: list[EmissionInputDetail] = []
    seen: set[uuid.UUID] = set()
    for item in body.details:
        source = await _resolve_source(db, company_id, item.source_id, item.source_name)
        if source.id in seen:
            raise DuplicateDetail(
                f"Emission source '{source.name}' appears more than once in this input"
            )
        seen.add(source.id)
        value = parse_consumption(item.value)
        details.append(EmissionInputDetail(source_id=source.id, source=source, value=value))

    emission_input = EmissionInput(
        id=uuid.uuid4(), company_id=company_id, month=month, year=year, details=details
    )
    # Built while the input is still pending, so nothing is lazy-loaded
    await _build_result(company, emission_input, generator, use_ai=body.use_ai)

    db.add(emission_input)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise DuplicateInput(
            f"An input for {period_key(year, month)} already exists"
        ) from None
    await db.commit()

    logger.info(
        "emission_input_submitted",
        company_id=str(company_id),
        input_id=str(emission_input.id),
        period=emission_input.period,
        details=len(details),
    )
    return await get_input(db, emission_input.id)


async def add_detail(
    db: AsyncSession,
    input_id: uuid.UUID,
    source_id: uuid.UUID,
    raw_value: Any,
    generator: NarrativeGenerator,
    use_ai: bool = True,
) -> EmissionInputDetail:
    """Attach one detail; an existing result is recomputed in the same transaction."""
    emission_input = await get_input(db, input_id)
    source = await get_source_or_raise(db, source_id, emission_input.company_id)
    value = parse_consumption(raw_value)

    if any(detail.source_id == source.id for detail in emission_input.details):
        raise DuplicateDetail(
            f"Emission source '{source.name}' already recorded for {emission_input.period}"
        )

    detail = EmissionInputDetail(source_id=source.id, source=source, value=value)
    emission_input.details.append(detail)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise DuplicateDetail(
            f"Emission source '{source.name}' already recorded for {emission_input.period}"
        ) from None

    if emission_input.result is not None:
        company = await get_company_or_raise(db, emission_input.company_id)
        await _build_result(company, emission_input, generator, use_ai=use_ai)
        await db.flush()

    await db.commit()
    logger.info(
        "emission_detail_added",
        input_id=str(input_id),
        source_id=str(source_id),
        value=value,
    )
    return detail


async def delete_input(db: AsyncSession, input_id: uuid.UUID) -> None:
    """Delete an input together with its details and result."""
    emission_input = await get_input(db, input_id)
    await db.delete(emission_input)
    await db.commit()
    logger.info("emission_input_deleted", input_id=str(input_id))


# ── Analysis ─────────────────────────────────────────────────────────────────


async def get_result_analysis(db: AsyncSession, input_id: uuid.UUID) -> dict[str, Any]:
    """Priority actions, absolute band and level progress for a computed result."""
    emission_input = await get_input(db, input_id)
    result = emission_input.result
    if result is None:
        raise NotFound(f"No result computed for emission input {input_id}")

    company = await get_company_or_raise(db, emission_input.company_id)
    outcome = compute_level(company, result.total_emission)
    progress = None
    if outcome.intensity is not None and outcome.thresholds is not None:
        progress = level_progress(outcome.intensity, outcome.thresholds)

    breakdown = {
        category.value: getattr(result, category.value) or [] for category in CATEGORY_ORDER
    }

    return {
        "input_id": emission_input.id,
        "period": emission_input.period,
        "total_emission": result.total_emission,
        "level": result.level,
        "emission_band": categorize_emission_band(result.total_emission),
        "sector_group": outcome.sector_group.value,
        "intensity": outcome.intensity,
        "basis": outcome.basis,
        "level_progress": progress,
        "unclassifiable_reason": outcome.unclassifiable_reason,
        "largest_category": largest_category(breakdown),
        "priority_actions": priority_actions(_detail_lines(emission_input.details)),
    }
