from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from shared.core.auth import validate_current_token
from shared.core.database import get_fleet_db as get_db
from shared.core.schemas import JsonOutResult, Lookup, UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...schemas.maintenance.maintenance_schedule_schemas import (
    MaintenanceScheduleComplete,
    MaintenanceScheduleCreate,
    MaintenanceScheduleListResponse,
    MaintenanceScheduleOut,
    MaintenanceScheduleOverviewResponse,
    MaintenanceScheduleRequest,
    MaintenanceScheduleStatusUpdate,
)
from ...crud.maintenance import maintenance_schedule_crud as crud

router = APIRouter(
    prefix="/api/maintenance-schedules",
    tags=["Maintenance Schedules"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("", response_model=JsonOutResult[MaintenanceScheduleListResponse])
def get_schedules(
        params: MaintenanceScheduleRequest = Depends(),
        db: Session = Depends(get_db)):
    return success_response(crud.get_schedules(db, params))


@router.get("/overview", response_model=JsonOutResult[MaintenanceScheduleOverviewResponse])
def overview(db: Session = Depends(get_db)):
    return success_response(crud.get_schedules_overview(db))


@router.get("/frequency-lookup", response_model=JsonOutResult[List[Lookup]])
def schedule_frequency_lookup():
    return success_response(crud.schedule_frequency_lookup())


@router.get("/status-lookup", response_model=JsonOutResult[List[Lookup]])
def schedule_status_lookup():
    return success_response(crud.schedule_status_lookup())


@router.get("/{schedule_id}", response_model=JsonOutResult[MaintenanceScheduleOut])
def get_schedule(schedule_id: UUID, db: Session = Depends(get_db)):
    schedule = crud.get_schedule_by_id(db, schedule_id)
    return success_response(crud.schedule_to_out(schedule))


@router.post("", response_model=JsonOutResult[MaintenanceScheduleOut], status_code=201)
def create_schedule(
        schedule: MaintenanceScheduleCreate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    return success_response(crud.create_schedule(db, schedule, current_user),
                            "Maintenance schedule created successfully",
                            AppStatusCode.CREATED_SUCCESSFULLY)


@router.patch("/{schedule_id}", response_model=JsonOutResult[MaintenanceScheduleOut])
def update_schedule_status(
        schedule_id: UUID,
        payload: MaintenanceScheduleStatusUpdate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    return success_response(crud.update_schedule_status(db, schedule_id, payload, current_user),
                            "Maintenance schedule updated successfully",
                            AppStatusCode.UPDATED_SUCCESSFULLY)


@router.post("/{schedule_id}/complete", response_model=JsonOutResult[MaintenanceScheduleOut])
def complete_schedule(
        schedule_id: UUID,
        payload: MaintenanceScheduleComplete,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    return success_response(crud.complete_schedule(db, schedule_id, payload, current_user),
                            "Maintenance schedule completed",
                            AppStatusCode.UPDATED_SUCCESSFULLY)
