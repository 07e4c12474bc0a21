# app/crud/maintenance/maintenance_schedule_crud.py
import logging
from datetime import date
from typing import Optional
from uuid import UUID

from dateutil.relativedelta import relativedelta
from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.core.schemas import Lookup, UserToken
from shared.helpers.lock_registry import LockRegistry
from ...core.errors import InvalidStateTransition, NotFound, ResourceBusy, ValidationError
from ...enum.inventory_enum import MovementReason
from ...enum.maintenance_enum import MaintenanceFrequency, ScheduleStatus
from ...models.maintenance.maintenance_schedules import MaintenanceSchedule, MaintenanceSchedulePart
from ...schemas.maintenance.maintenance_schedule_schemas import (
    MaintenanceScheduleComplete,
    MaintenanceScheduleCreate,
    MaintenanceScheduleListResponse,
    MaintenanceScheduleOut,
    MaintenanceScheduleOverviewResponse,
    MaintenanceScheduleRequest,
    MaintenanceScheduleStatusUpdate,
)
from ..inventory.inventory_items_crud import get_inventory_items_by_ids
from ..inventory.inventory_ledger import apply_deltas

logger = logging.getLogger(__name__)

FREQUENCY_STEPS = {
    MaintenanceFrequency.daily.value: relativedelta(days=1),
    MaintenanceFrequency.weekly.value: relativedelta(weeks=1),
    MaintenanceFrequency.monthly.value: relativedelta(months=1),
    MaintenanceFrequency.quarterly.value: relativedelta(months=3),
    MaintenanceFrequency.semi_annually.value: relativedelta(months=6),
    MaintenanceFrequency.annually.value: relativedelta(years=1),
}

CLOSED_STATUSES = (ScheduleStatus.completed.value, ScheduleStatus.cancelled.value)

_SCHEDULE_LOCKS = LockRegistry(
    settings.LOCK_TIMEOUT_SECONDS,
    on_timeout=lambda schedule_id: ResourceBusy(f"Maintenance schedule {schedule_id} is busy, try again"),
)


# ---------------- Derived Status ----------------
def days_until_due(schedule: MaintenanceSchedule, today: Optional[date] = None) -> int:
    today = today or date.today()
    return (schedule.next_due - today).days


def compute_status(schedule: MaintenanceSchedule, today: Optional[date] = None) -> str:
    """Status as reported to callers.

    Explicit states are returned as stored; a neutral ``scheduled`` record
    becomes ``overdue`` once its due date has passed.
    """
    if schedule.status in CLOSED_STATUSES or schedule.status == ScheduleStatus.in_progress.value:
        return schedule.status
    if days_until_due(schedule, today) < 0:
        return ScheduleStatus.overdue.value
    return ScheduleStatus.scheduled.value


def is_due_soon(schedule: MaintenanceSchedule, today: Optional[date] = None) -> bool:
    if schedule.status in CLOSED_STATUSES:
        return False
    reminder_days = schedule.reminder_days if schedule.reminder_days is not None else settings.DUE_SOON_DAYS
    return 0 <= days_until_due(schedule, today) <= reminder_days


def advance_next_due(next_due: date, frequency: str, interval: int) -> Optional[date]:
    """Step ``next_due`` forward by ``interval`` periods.

    Returns None for frequencies without a calendar period (custom and
    mileage based); month arithmetic clamps to the last day of the month.
    """
    step = FREQUENCY_STEPS.get(frequency)
    if step is None:
        return None
    return next_due + step * interval


def schedule_to_out(schedule: MaintenanceSchedule, today: Optional[date] = None) -> MaintenanceScheduleOut:
    return MaintenanceScheduleOut.model_validate(schedule).model_copy(update={
        "status": compute_status(schedule, today),
        "days_until_due": days_until_due(schedule, today),
        "is_due_soon": is_due_soon(schedule, today),
    })


# ---------------- Build Filters ----------------
def build_schedule_filters(params: MaintenanceScheduleRequest, today: Optional[date] = None):
    today = today or date.today()
    filters = [MaintenanceSchedule.is_deleted == False]

    if params.status and params.status.lower() != "all":
        status = params.status.lower()
        if status == ScheduleStatus.overdue.value:
            filters.append(and_(MaintenanceSchedule.status == ScheduleStatus.scheduled.value,
                                MaintenanceSchedule.next_due < today))
        elif status == ScheduleStatus.scheduled.value:
            filters.append(and_(MaintenanceSchedule.status == ScheduleStatus.scheduled.value,
                                MaintenanceSchedule.next_due >= today))
        else:
            filters.append(MaintenanceSchedule.status == status)

    if params.frequency and params.frequency.lower() != "all":
        filters.append(MaintenanceSchedule.frequency == params.frequency.lower())

    if params.maintenance_type and params.maintenance_type.lower() != "all":
        filters.append(MaintenanceSchedule.maintenance_type == params.maintenance_type.lower())

    if params.terminal and params.terminal.lower() != "all":
        filters.append(func.lower(MaintenanceSchedule.terminal) == params.terminal.lower())

    if params.vehicle_ref:
        filters.append(MaintenanceSchedule.vehicle_ref == params.vehicle_ref)

    if params.search:
        search_term = f"%{params.search}%"
        filters.append(or_(MaintenanceSchedule.title.ilike(search_term),
                           MaintenanceSchedule.vehicle_ref.ilike(search_term)))

    return filters


# ---------------- Overview ----------------
def get_schedules_overview(db: Session, today: Optional[date] = None) -> MaintenanceScheduleOverviewResponse:
    today = today or date.today()
    schedules = db.query(MaintenanceSchedule).filter(MaintenanceSchedule.is_deleted == False).all()

    overview = {"total": len(schedules), "overdue": 0, "due_soon": 0,
                "due_this_week": 0, "in_progress": 0, "completed": 0}
    for schedule in schedules:
        status = compute_status(schedule, today)
        if status in (ScheduleStatus.overdue.value, ScheduleStatus.in_progress.value,
                      ScheduleStatus.completed.value):
            overview[status] += 1
        if is_due_soon(schedule, today):
            overview["due_soon"] += 1
        if status not in CLOSED_STATUSES and 0 <= days_until_due(schedule, today) <= 7:
            overview["due_this_week"] += 1

    return MaintenanceScheduleOverviewResponse(**overview)


# ---------------- Lookups ----------------
def schedule_frequency_lookup():
    return [
        Lookup(id=frequency.value, name=frequency.value.replace("_", " ").capitalize())
        for frequency in MaintenanceFrequency
    ]


def schedule_status_lookup():
    return [
        Lookup(id=status.value, name=status.value.replace("_", " ").capitalize())
        for status in ScheduleStatus
    ]


# ---------------- Get All ----------------
def get_schedules(db: Session, params: MaintenanceScheduleRequest,
                  today: Optional[date] = None) -> MaintenanceScheduleListResponse:
    base_query = db.query(MaintenanceSchedule).filter(*build_schedule_filters(params, today))
    total = base_query.with_entities(func.count(MaintenanceSchedule.id)).scalar()

    schedules = (
        base_query
        .order_by(MaintenanceSchedule.next_due.asc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return MaintenanceScheduleListResponse(
        schedules=[schedule_to_out(s, today) for s in schedules],
        total=total,
    )


def get_schedule_by_id(db: Session, schedule_id: UUID) -> MaintenanceSchedule:
    schedule = db.query(MaintenanceSchedule).filter(
        MaintenanceSchedule.id == schedule_id,
        MaintenanceSchedule.is_deleted == False
    ).first()
    if not schedule:
        raise NotFound("Maintenance schedule", schedule_id)
    return schedule


# ---------------- Create ----------------
def create_schedule(db: Session, payload: MaintenanceScheduleCreate,
                    current_user: Optional[UserToken] = None) -> MaintenanceScheduleOut:
    items = get_inventory_items_by_ids(db, [line.item_id for line in payload.required_parts])

    schedule = MaintenanceSchedule(
        **payload.model_dump(mode="json", exclude={"required_parts", "next_due", "reminder_days"}),
        next_due=payload.next_due,
        reminder_days=payload.reminder_days if payload.reminder_days is not None else settings.DUE_SOON_DAYS,
        status=ScheduleStatus.scheduled.value,
        created_by=current_user.user_id if current_user else None,
    )
    schedule.required_parts = [
        MaintenanceSchedulePart(
            item_id=line.item_id,
            quantity=line.quantity,
            item_name_snapshot=items[line.item_id].name,
            unit_cost_snapshot=items[line.item_id].unit_cost,
        )
        for line in payload.required_parts
    ]
    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    logger.info("Maintenance schedule %s created for vehicle %s, next due %s",
                schedule.id, schedule.vehicle_ref, schedule.next_due)
    return schedule_to_out(schedule)


# ---------------- Complete ----------------
def complete_schedule(db: Session, schedule_id: UUID, payload: MaintenanceScheduleComplete,
                      current_user: Optional[UserToken] = None,
                      today: Optional[date] = None) -> MaintenanceScheduleOut:
    """Record one completed occurrence.

    Required parts are consumed all-or-nothing. The schedule then either
    finishes (``max_occurrences`` reached) or rolls ``next_due`` forward and
    goes back to ``scheduled``.
    """
    today = today or date.today()

    with _SCHEDULE_LOCKS.hold([schedule_id]):
        schedule = get_schedule_by_id(db, schedule_id)
        db.refresh(schedule)

        if schedule.status in CLOSED_STATUSES:
            logger.warning("Maintenance schedule %s: cannot complete from %s",
                           schedule.id, schedule.status)
            raise InvalidStateTransition("maintenance schedule", schedule.status,
                                         ScheduleStatus.completed.value)

        finished = (schedule.max_occurrences is not None
                    and schedule.completed_count + 1 >= schedule.max_occurrences)

        next_due = None
        if not finished:
            next_due = payload.next_due or advance_next_due(
                schedule.next_due, schedule.frequency, schedule.interval)
            if next_due is None:
                raise ValidationError(
                    f"next_due is required to complete a {schedule.frequency} schedule")

        schedule.last_performed = payload.completed_date or today
        schedule.completed_count += 1
        schedule.actual_cost = schedule.estimated_cost
        if finished:
            schedule.status = ScheduleStatus.completed.value
        else:
            schedule.next_due = next_due
            schedule.status = ScheduleStatus.scheduled.value

        if schedule.required_parts:
            apply_deltas(
                db,
                [(part.item_id, -part.quantity) for part in schedule.required_parts],
                reason=MovementReason.maintenance.value,
                reference=str(schedule.id),
                created_by=current_user.user_id if current_user else None,
                terminal=schedule.terminal,
            )
        else:
            db.commit()

    db.refresh(schedule)
    logger.info("Maintenance schedule %s completed (%d time(s)); %s",
                schedule.id, schedule.completed_count,
                "finished" if finished else f"next due {schedule.next_due}")
    return schedule_to_out(schedule, today)


# ---------------- Status ----------------
def update_schedule_status(db: Session, schedule_id: UUID, payload: MaintenanceScheduleStatusUpdate,
                           current_user: Optional[UserToken] = None,
                           today: Optional[date] = None) -> MaintenanceScheduleOut:
    target = payload.status.value

    # completion takes the schedule lock itself
    if target == ScheduleStatus.completed.value:
        return complete_schedule(
            db, schedule_id,
            MaintenanceScheduleComplete(next_due=payload.next_due,
                                        completed_date=payload.completed_date),
            current_user=current_user, today=today,
        )

    with _SCHEDULE_LOCKS.hold([schedule_id]):
        schedule = get_schedule_by_id(db, schedule_id)
        db.refresh(schedule)
        current = schedule.status

        # overdue is derived, never set
        if target == ScheduleStatus.overdue.value or current in CLOSED_STATUSES or current == target:
            logger.warning("Maintenance schedule %s: illegal transition %s -> %s",
                           schedule.id, current, target)
            raise InvalidStateTransition("maintenance schedule", current, target)

        schedule.status = target
        db.commit()

    db.refresh(schedule)
    logger.info("Maintenance schedule %s: %s -> %s", schedule.id, current, target)
    return schedule_to_out(schedule, today)
