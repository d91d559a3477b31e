"""Pricing tables (company duration ranges and seasons, location seasons) and rental quotes."""

import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.application.caller import Caller
from rentdesk.application.entities import COMPANIES, LOCATIONS
from rentdesk.application.entity_service import EntityService
from rentdesk.application.exceptions import EntityNotFoundError
from rentdesk.domain.schemas.company import CompanyRead, CompanySettings, LocationSeasonRead
from rentdesk.domain.schemas.pricing import (
    DurationRangesUpdate,
    QuoteRequest,
    QuoteResponse,
    Season,
    SeasonsUpdate,
)
from rentdesk.domain.validators.pricing_validator import (
    duration_coefficient,
    quote_price,
    season_coefficient,
    validate_duration_ranges,
    validate_seasons,
)
from rentdesk.governance.audit_logger import AuditRecorder
from rentdesk.governance.audit_models import AuditAction
from rentdesk.infrastructure.database.models import CompanyCar, LocationSeason
from rentdesk.infrastructure.database.repository import AsyncRepository
from rentdesk.security.rbac import Action

logger = logging.getLogger(__name__)


def rental_days(request: QuoteRequest) -> int:
    """Same-day rentals count as one day."""
    return max((request.end_date - request.start_date).days, 1)


class PricingService:
    """Validated pricing tables are the only ones persisted; invalid tables leave the store untouched."""

    def __init__(self, session: AsyncSession, recorder: AuditRecorder) -> None:
        self._session = session
        self._recorder = recorder
        self._companies = EntityService(COMPANIES, session, recorder)
        self._locations = EntityService(LOCATIONS, session, recorder)
        self._company_repo = AsyncRepository(COMPANIES.model)
        self._season_repo = AsyncRepository(LocationSeason)

    async def _company_for_update(self, caller: Caller, company_id: int):
        row = await self._company_repo.get_by_id(self._session, company_id)
        if row is None:
            raise EntityNotFoundError(f"company {company_id} not found")
        self._companies.authorize(caller, Action.UPDATE, row)
        return row

    async def _save_settings(self, caller: Caller, row, key: str, value: List[Dict[str, Any]]) -> CompanyRead:
        before = self._companies.snapshot(row)
        settings = dict(row.settings or {})
        settings[key] = value
        row = await self._company_repo.update(self._session, row, {"settings": settings})
        after = self._companies.snapshot(row)
        logger.info("company_settings_updated", extra={"company_id": row.id, "setting": key})
        await self._recorder.record(
            actor_id=caller.id,
            entity_type=COMPANIES.name,
            entity_id=str(row.id),
            action=AuditAction.UPDATE,
            before_state=before,
            after_state=after,
            company_id=row.id,
        )
        return CompanyRead.model_validate(row)

    async def update_durations(self, caller: Caller, company_id: int, payload: DurationRangesUpdate) -> CompanyRead:
        row = await self._company_for_update(caller, company_id)
        ordered = validate_duration_ranges(payload.ranges)
        return await self._save_settings(
            caller, row, "duration_ranges", [r.model_dump() for r in ordered]
        )

    async def update_seasons(self, caller: Caller, company_id: int, payload: SeasonsUpdate) -> CompanyRead:
        row = await self._company_for_update(caller, company_id)
        validate_seasons(payload.seasons)
        return await self._save_settings(
            caller, row, "seasons", [s.model_dump() for s in payload.seasons]
        )

    async def _location_season_rows(self, location_id: int) -> List[LocationSeason]:
        stmt = (
            select(LocationSeason)
            .where(LocationSeason.location_id == location_id)
            .order_by(LocationSeason.start_date)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def get_location_seasons(self, caller: Caller, location_id: int) -> List[LocationSeasonRead]:
        await self._locations.get(caller, location_id)
        rows = await self._location_season_rows(location_id)
        return [LocationSeasonRead.model_validate(r) for r in rows]

    async def replace_location_seasons(
        self, caller: Caller, location_id: int, payload: SeasonsUpdate
    ) -> List[LocationSeasonRead]:
        location = await AsyncRepository(LOCATIONS.model).get_by_id(self._session, location_id)
        if location is None:
            raise EntityNotFoundError(f"location {location_id} not found")
        self._locations.authorize(caller, Action.UPDATE, location)
        validate_seasons(payload.seasons)

        existing = await self._location_season_rows(location_id)
        before = {"seasons": [LocationSeasonRead.model_validate(r).model_dump(mode="json") for r in existing]}
        for row in existing:
            await self._session.delete(row)
        created = await self._season_repo.create_many(
            self._session,
            [{"location_id": location_id, **s.model_dump()} for s in payload.seasons],
        )
        result = [LocationSeasonRead.model_validate(r) for r in created]
        await self._recorder.record(
            actor_id=caller.id,
            entity_type="location_season",
            entity_id=str(location_id),
            action=AuditAction.UPDATE,
            before_state=before,
            after_state={"seasons": [r.model_dump(mode="json") for r in result]},
        )
        return result

    async def quote(self, caller: Caller, company_id: int, request: QuoteRequest) -> QuoteResponse:
        company = await self._company_repo.get_by_id(self._session, company_id)
        if company is None:
            raise EntityNotFoundError(f"company {company_id} not found")
        self._companies.authorize(caller, Action.READ, company)
        car = await self._session.get(CompanyCar, request.company_car_id)
        if car is None or car.company_id != company_id:
            raise EntityNotFoundError(f"company_car {request.company_car_id} not found")

        settings = CompanySettings.model_validate(company.settings or {})
        seasons: List[Season] = list(settings.seasons)
        if not seasons and company.location_id is not None:
            seasons = [
                Season(
                    name=r.name,
                    start_date=r.start_date,
                    end_date=r.end_date,
                    price_coefficient=r.price_coefficient,
                )
                for r in await self._location_season_rows(company.location_id)
            ]
        days = rental_days(request)
        start_mmdd = request.start_date.strftime("%m-%d")
        d_coef = duration_coefficient(settings.duration_ranges, days)
        s_coef = season_coefficient(seasons, start_mmdd)
        total = quote_price(car.price_per_day, days, start_mmdd, settings.duration_ranges, seasons)
        return QuoteResponse(
            company_car_id=car.id,
            days=days,
            price_per_day=car.price_per_day,
            duration_coefficient=d_coef,
            season_coefficient=s_coef,
            total=total,
        )
