import logging
import math
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from workdesk.config import Settings
from workdesk.core.exceptions import ConflictError, NotFoundError
from workdesk.models.attendance import BreakLog, UserAttendance

logger = logging.getLogger(__name__)


def _ensure_aware_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def workday_timezone(settings: Settings) -> timezone:
    return timezone(timedelta(minutes=settings.WORKDAY_UTC_OFFSET_MINUTES))


def work_date_for(now: datetime, settings: Settings) -> date:
    """Calendar day of ``now`` in the work-day timezone (time truncated to midnight)."""
    return _ensure_aware_utc(now).astimezone(workday_timezone(settings)).date()


def break_minutes(break_start: datetime, break_end: datetime) -> int:
    """Whole minutes of a break, rounded up."""
    seconds = (_ensure_aware_utc(break_end) - _ensure_aware_utc(break_start)).total_seconds()
    return max(math.ceil(seconds / 60), 0)


def working_minutes(login_time: datetime, logout_time: datetime, total_break_minutes: int) -> int:
    """Elapsed minutes rounded down, minus breaks, never negative."""
    seconds = (_ensure_aware_utc(logout_time) - _ensure_aware_utc(login_time)).total_seconds()
    elapsed = math.floor(seconds / 60)
    return max(elapsed - int(total_break_minutes or 0), 0)


def _today_attendance(user_id: int, now: datetime, db: Session, settings: Settings, lock: bool = False):
    query = db.query(UserAttendance).filter(
        UserAttendance.user_id == user_id,
        UserAttendance.work_date == work_date_for(now, settings)
    )
    if lock:
        query = query.with_for_update()
    return query.first()


def _open_break(attendance: UserAttendance, db: Session):
    return db.query(BreakLog).filter(
        BreakLog.attendance_id == attendance.id,
        BreakLog.break_end == None  # noqa: E711
    ).order_by(BreakLog.break_start.desc(), BreakLog.id.desc()).first()


def _close_break(attendance: UserAttendance, log: BreakLog, now: datetime) -> int:
    minutes = break_minutes(log.break_start, now)
    log.break_end = now
    attendance.total_break_minutes = int(attendance.total_break_minutes or 0) + minutes
    attendance.break_end_time = now
    return minutes


def _segment_start(attendance: UserAttendance, fallback: datetime) -> datetime:
    return _ensure_aware_utc(attendance.session_start or attendance.login_time or fallback)


def _segment_break_minutes(attendance: UserAttendance, segment_start: datetime, now: datetime) -> int:
    """Break minutes taken since ``segment_start``; an open break runs until ``now``."""
    total = 0
    for log in attendance.breaks:
        if _ensure_aware_utc(log.break_start) < segment_start:
            continue
        total += break_minutes(log.break_start, log.break_end or now)
    return total


def _day_end(work_date: date, settings: Settings) -> datetime:
    midnight = datetime.combine(work_date + timedelta(days=1), time.min, tzinfo=workday_timezone(settings))
    return midnight.astimezone(timezone.utc)


def _close_session(attendance: UserAttendance, close_at: datetime, db: Session) -> None:
    """Close the open login segment at ``close_at`` and add its worked minutes to the day."""
    segment_start = _segment_start(attendance, close_at)
    close_at = max(_ensure_aware_utc(close_at), segment_start)

    # user logged out during a break
    log = _open_break(attendance, db)
    if log:
        _close_break(attendance, log, close_at)

    attendance.total_working_minutes = int(attendance.total_working_minutes or 0) + working_minutes(
        segment_start, close_at, _segment_break_minutes(attendance, segment_start, close_at)
    )
    attendance.logout_time = close_at
    attendance.is_active_session = False
    attendance.session_start = None
    attendance.break_start_time = None
    attendance.break_end_time = None


def _close_stale_sessions(user_id: int, now: datetime, db: Session, settings: Settings) -> int:
    """Close sessions left open on earlier days at the end of their own work day."""
    today = work_date_for(now, settings)
    stale = db.query(UserAttendance).filter(
        UserAttendance.user_id == user_id,
        UserAttendance.is_active_session == True,  # noqa: E712
        UserAttendance.work_date < today
    ).with_for_update().all()

    for attendance in stale:
        _close_session(attendance, min(_day_end(attendance.work_date, settings), now), db)
        logger.info("Closed stale attendance session for user %s on %s", user_id, attendance.work_date)
    if stale:
        db.flush()
    return len(stale)


def open_session(user_id: int, now: datetime, db: Session, settings: Settings) -> UserAttendance:
    if _close_stale_sessions(user_id, now, db, settings):
        db.commit()

    attendance = _today_attendance(user_id, now, db, settings, lock=True)

    if attendance is None:
        attendance = UserAttendance(
            user_id=user_id,
            work_date=work_date_for(now, settings),
            login_time=now,
            session_start=now,
            total_break_minutes=0,
            total_working_minutes=0,
            is_active_session=True,
        )
        db.add(attendance)
        try:
            db.commit()
        except IntegrityError:
            # another request created today's row first
            db.rollback()
            attendance = _today_attendance(user_id, now, db, settings, lock=True)
        else:
            db.refresh(attendance)
            logger.info("Opened attendance session for user %s on %s", user_id, attendance.work_date)
            return attendance

    if not attendance.is_active_session:
        attendance.is_active_session = True
        attendance.logout_time = None
        attendance.session_start = now
        if attendance.login_time is None:
            attendance.login_time = now
        db.commit()
        db.refresh(attendance)
        logger.info("Resumed attendance session for user %s on %s", user_id, attendance.work_date)

    return attendance


def start_break(user_id: int, now: datetime, db: Session, settings: Settings) -> UserAttendance:
    attendance = _today_attendance(user_id, now, db, settings, lock=True)
    if not attendance or not attendance.is_active_session:
        raise ConflictError("No active session")

    if _open_break(attendance, db):
        raise ConflictError("Break already in progress")

    db.add(BreakLog(attendance_id=attendance.id, break_start=now))
    attendance.break_start_time = now
    attendance.break_end_time = None
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Break already in progress")

    db.refresh(attendance)
    logger.info("User %s started a break", user_id)
    return attendance


def end_break(user_id: int, now: datetime, db: Session, settings: Settings) -> UserAttendance:
    attendance = _today_attendance(user_id, now, db, settings, lock=True)
    log = _open_break(attendance, db) if attendance else None
    if not log:
        raise NotFoundError("No active break")

    minutes = _close_break(attendance, log, now)
    db.commit()
    db.refresh(attendance)
    logger.info("User %s ended a break of %s minute(s)", user_id, minutes)
    return attendance


def close_session_on_logout(user_id: int, now: datetime, db: Session, settings: Settings) -> UserAttendance | None:
    """Close today's session at ``now`` and any earlier-day session at its day end."""
    _close_stale_sessions(user_id, now, db, settings)

    attendance = db.query(UserAttendance).filter(
        UserAttendance.user_id == user_id,
        UserAttendance.is_active_session == True  # noqa: E712
    ).order_by(UserAttendance.work_date.desc()).with_for_update().first()

    if attendance:
        _close_session(attendance, now, db)
    db.commit()

    if not attendance:
        return None
    db.refresh(attendance)

    logger.info(
        "Closed attendance session for user %s: %s worked, %s break minute(s)",
        user_id,
        attendance.total_working_minutes,
        attendance.total_break_minutes,
    )
    return attendance


def attendance_snapshot(attendance: UserAttendance, now: datetime, db: Session) -> dict:
    """Attendance row plus live figures for a session that is still open."""
    open_log = _open_break(attendance, db) if attendance.is_active_session else None
    break_total = int(attendance.total_break_minutes or 0)
    if open_log:
        break_total += break_minutes(open_log.break_start, now)

    worked = int(attendance.total_working_minutes or 0)
    if attendance.is_active_session and (attendance.session_start or attendance.login_time):
        segment_start = _segment_start(attendance, now)
        worked += working_minutes(
            segment_start, now, _segment_break_minutes(attendance, segment_start, now)
        )

    return {
        "id": attendance.id,
        "work_date": attendance.work_date,
        "login_time": attendance.login_time,
        "logout_time": attendance.logout_time,
        "is_active_session": attendance.is_active_session,
        "is_on_break": open_log is not None,
        "break_start_time": attendance.break_start_time,
        "break_end_time": attendance.break_end_time,
        "total_break_minutes": break_total,
        "total_working_minutes": worked,
        "breaks": [
            {"break_start": b.break_start, "break_end": b.break_end}
            for b in attendance.breaks
        ],
    }


def get_today(user_id: int, now: datetime, db: Session, settings: Settings) -> dict | None:
    attendance = _today_attendance(user_id, now, db, settings)
    if not attendance:
        return None
    return attendance_snapshot(attendance, now, db)


def get_history(user_id: int, days: int, now: datetime, db: Session, settings: Settings) -> list[dict]:
    today = work_date_for(now, settings)
    first_day = today - timedelta(days=max(days, 1) - 1)
    rows = db.query(UserAttendance).filter(
        UserAttendance.user_id == user_id,
        UserAttendance.work_date >= first_day,
        UserAttendance.work_date <= today
    ).order_by(UserAttendance.work_date.desc()).all()
    return [attendance_snapshot(row, now, db) for row in rows]
