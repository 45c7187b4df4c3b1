"""Activation plan persistence."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from ..database import Store
from ..models import Park, Plan, PlanStatus
from ..result import Result, infrastructure_error, not_found_error, validation_error
from ..schemas import ParkRead, PlanCreate, PlanRead, PlanUpdate

logger = logging.getLogger(__name__)

_PLAN_COLUMNS = [c.key for c in Plan.__table__.columns]


def _to_read(plan: Plan, with_park: bool = False) -> PlanRead:
    data = {key: getattr(plan, key) for key in _PLAN_COLUMNS}
    if with_park and plan.park is not None:
        data["park"] = ParkRead.model_validate(plan.park)
    return PlanRead.model_validate(data)


def _plan_not_found(plan_id: int) -> Result:
    return not_found_error(
        f"Plan {plan_id} not found", "PLAN_NOT_FOUND",
        ["List plans to find a valid plan id"],
    )


class PlanRepository:
    def __init__(self, store: Store):
        self.store = store

    def create(self, data: PlanCreate) -> Result[PlanRead]:
        ref = data.park_reference.strip().upper()
        now = self.store.now()
        try:
            with self.store.session() as db:
                park = db.query(Park).filter(Park.reference == ref).first()
                if park is None:
                    return not_found_error(
                        f"Park {ref} not found", "PARK_NOT_FOUND",
                        ["Run a park sync or import before planning", "Check the park reference"],
                    )
                plan = Plan(
                    park_id=park.id,
                    status=data.status.value,
                    planned_date=data.planned_date,
                    planned_time=data.planned_time,
                    duration_hours=data.duration_hours,
                    preset_id=data.preset_id,
                    notes=data.notes,
                    created_at=now,
                    updated_at=now,
                )
                db.add(plan)
                db.commit()
                logger.info(f"Created plan #{plan.id} for {ref} on {data.planned_date}")
                return Result.ok(_to_read(plan))
        except SQLAlchemyError as e:
            logger.warning(f"Plan create failed for {ref}: {e}")
            return infrastructure_error(
                f"Failed to create plan: {e}", "PLAN_CREATE_ERROR",
                ["Check database permissions"],
            )

    def find_by_id(self, plan_id: int) -> Result[Optional[PlanRead]]:
        try:
            with self.store.session() as db:
                plan = db.get(Plan, plan_id)
                return Result.ok(_to_read(plan) if plan else None)
        except SQLAlchemyError as e:
            return infrastructure_error(f"Failed to load plan {plan_id}: {e}", "PLAN_FIND_ERROR")

    def find_by_id_with_park(self, plan_id: int) -> Result[Optional[PlanRead]]:
        try:
            with self.store.session() as db:
                plan = (
                    db.query(Plan)
                    .options(joinedload(Plan.park))
                    .filter(Plan.id == plan_id)
                    .first()
                )
                return Result.ok(_to_read(plan, with_park=True) if plan else None)
        except SQLAlchemyError as e:
            return infrastructure_error(f"Failed to load plan {plan_id}: {e}", "PLAN_FIND_ERROR")

    def find_all(
        self,
        status: Optional[PlanStatus] = None,
        upcoming: bool = False,
        limit: int = 100,
        with_park: bool = False,
    ) -> Result[list[PlanRead]]:
        """List plans ordered by date then time.

        ``upcoming`` keeps plans dated today or later (by the store clock).
        """
        try:
            with self.store.session() as db:
                q = db.query(Plan)
                if with_park:
                    q = q.options(joinedload(Plan.park))
                if status is not None:
                    q = q.filter(Plan.status == PlanStatus(status).value)
                if upcoming:
                    q = q.filter(Plan.planned_date >= self.store.now().date())
                plans = (
                    q.order_by(Plan.planned_date, Plan.planned_time, Plan.id)
                    .limit(limit)
                    .all()
                )
                return Result.ok([_to_read(p, with_park=with_park) for p in plans])
        except SQLAlchemyError as e:
            logger.warning(f"Plan listing failed: {e}")
            return infrastructure_error(f"Failed to list plans: {e}", "PLAN_FIND_ERROR")

    def update(self, plan_id: int, changes: PlanUpdate) -> Result[PlanRead]:
        """Apply only the fields set on ``changes``. ``updated_at`` always advances."""
        fields = changes.model_dump(exclude_unset=True)
        for required in ("status", "planned_date"):
            if required in fields and fields[required] is None:
                return validation_error(
                    f"Plan field '{required}' cannot be cleared", "PLAN_VALIDATION_ERROR",
                )
        try:
            with self.store.session() as db:
                plan = db.get(Plan, plan_id)
                if plan is None:
                    return _plan_not_found(plan_id)
                for key, value in fields.items():
                    if isinstance(value, PlanStatus):
                        value = value.value
                    setattr(plan, key, value)
                plan.updated_at = self.store.now()
                db.commit()
                return Result.ok(_to_read(plan))
        except SQLAlchemyError as e:
            logger.warning(f"Plan update failed for #{plan_id}: {e}")
            return infrastructure_error(
                f"Failed to update plan {plan_id}: {e}", "PLAN_UPDATE_ERROR",
            )

    def delete(self, plan_id: int) -> Result[None]:
        try:
            with self.store.session() as db:
                plan = db.get(Plan, plan_id)
                if plan is None:
                    return _plan_not_found(plan_id)
                db.delete(plan)
                db.commit()
                logger.info(f"Deleted plan #{plan_id}")
                return Result.ok(None)
        except SQLAlchemyError as e:
            return infrastructure_error(
                f"Failed to delete plan {plan_id}: {e}", "PLAN_DELETE_ERROR",
            )

    def count(self) -> Result[int]:
        try:
            with self.store.session() as db:
                return Result.ok(db.query(func.count(Plan.id)).scalar() or 0)
        except SQLAlchemyError as e:
            return infrastructure_error(f"Failed to count plans: {e}", "PLAN_COUNT_ERROR")

    def last_write_time(self) -> Result[Optional[datetime]]:
        try:
            with self.store.session() as db:
                return Result.ok(db.query(func.max(Plan.updated_at)).scalar())
        except SQLAlchemyError as e:
            return infrastructure_error(
                f"Failed to read last plan write time: {e}", "PLAN_FIND_ERROR",
            )
