from datetime import date, datetime
from typing import List, Optional

from workdesk.schemas.common import CamelModel


class BreakOut(CamelModel):
    break_start: datetime
    break_end: Optional[datetime] = None


class AttendanceOut(CamelModel):
    id: int
    work_date: date
    login_time: Optional[datetime] = None
    logout_time: Optional[datetime] = None
    is_active_session: bool
    is_on_break: bool = False
    break_start_time: Optional[datetime] = None
    break_end_time: Optional[datetime] = None
    total_break_minutes: int
    total_working_minutes: int
    breaks: List[BreakOut] = []


class TodayAttendanceOut(CamelModel):
    attendance: Optional[AttendanceOut] = None
