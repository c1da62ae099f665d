import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class HolidayCreate(BaseModel):
    title: str
    date: dt.date
    description: Optional[str] = None
    model_config = ConfigDict(extra="forbid")


class HolidaySchema(BaseModel):
    id: int
    title: str
    date: dt.date
    description: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class WorkingHoursUpdate(BaseModel):
    onsite_start_time: str
    onsite_end_time: str
    remote_start_time: str
    remote_end_time: str
    model_config = ConfigDict(extra="forbid")


class WeekScheduleUpdate(BaseModel):
    working_days: List[str]
    weekend_days: List[str]
    model_config = ConfigDict(extra="forbid")


class WorkPolicySchema(BaseModel):
    onsite_start_time: str
    onsite_end_time: str
    remote_start_time: str
    remote_end_time: str
    working_days: List[str]
    weekend_days: List[str]
    model_config = ConfigDict(from_attributes=True)


class WorkOverview(BaseModel):
    policy: WorkPolicySchema
    holidays: List[HolidaySchema]
