from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.database import get_db
from auth.services.auth_service import get_current_active_user
from authz.deps import require_work_manager
from .schema import HolidayCreate, HolidaySchema, WeekScheduleUpdate, WorkingHoursUpdate, WorkOverview, WorkPolicySchema
from . import service

work_router = APIRouter(prefix="/work", tags=["Work"])


@work_router.get("/overview", response_model=WorkOverview)
def work_overview(db: Session = Depends(get_db), user=Depends(get_current_active_user)):
    return service.get_overview(db, user)


@work_router.post("/holidays", response_model=HolidaySchema, status_code=status.HTTP_201_CREATED)
def holiday_post(payload: HolidayCreate, db: Session = Depends(get_db), user=Depends(require_work_manager)):
    return service.create_holiday(db, user, payload)


@work_router.delete("/holidays/{holiday_id}")
def holiday_delete(holiday_id: int, db: Session = Depends(get_db), user=Depends(require_work_manager)):
    service.delete_holiday(db, user, holiday_id)
    return {"message": "holiday deleted"}


@work_router.put("/hours", response_model=WorkPolicySchema)
def working_hours_put(payload: WorkingHoursUpdate, db: Session = Depends(get_db), user=Depends(require_work_manager)):
    return service.update_working_hours(db, user, payload)


@work_router.put("/week", response_model=WorkPolicySchema)
def week_schedule_put(payload: WeekScheduleUpdate, db: Session = Depends(get_db), user=Depends(require_work_manager)):
    return service.update_week_schedule(db, user, payload)
