from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from workdesk.config import Settings, get_settings
from workdesk.core.dependencies import get_current_user
from workdesk.database.session import get_db
from workdesk.models.user import User
from workdesk.schemas.attendance import AttendanceOut, TodayAttendanceOut
from workdesk.services import attendance_service

router = APIRouter(prefix="/api/attendance", tags=["Attendance"])


# ================= BREAKS =================
@router.post("/break/start", response_model=AttendanceOut)
def start_break(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user)
):
    now = datetime.now(timezone.utc)
    attendance = attendance_service.start_break(current_user.id, now, db, settings)
    return attendance_service.attendance_snapshot(attendance, now, db)


@router.post("/break/end", response_model=AttendanceOut)
def end_break(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user)
):
    now = datetime.now(timezone.utc)
    attendance = attendance_service.end_break(current_user.id, now, db, settings)
    return attendance_service.attendance_snapshot(attendance, now, db)


# ================= SUMMARY =================
@router.get("/today", response_model=TodayAttendanceOut)
def get_today(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user)
):
    now = datetime.now(timezone.utc)
    return {"attendance": attendance_service.get_today(current_user.id, now, db, settings)}


@router.get("/history", response_model=List[AttendanceOut])
def get_history(
    days: int = Query(7, ge=1, le=90),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user)
):
    now = datetime.now(timezone.utc)
    return attendance_service.get_history(current_user.id, days, now, db, settings)
