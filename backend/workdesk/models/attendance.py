from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey,
    Index, Integer, UniqueConstraint, text
)
from sqlalchemy.orm import relationship

from workdesk.database.base import Base


class UserAttendance(Base):
    __tablename__ = "user_attendance"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # calendar day in the work-day timezone
    work_date = Column(Date, nullable=False)

    # first login of the day; session_start is the login of the open segment
    login_time = Column(DateTime(timezone=True), nullable=True)
    session_start = Column(DateTime(timezone=True), nullable=True)
    logout_time = Column(DateTime(timezone=True), nullable=True)
    total_break_minutes = Column(Integer, default=0, nullable=False)
    total_working_minutes = Column(Integer, default=0, nullable=False)
    is_active_session = Column(Boolean, default=False, nullable=False)

    # mirrors of the open / last BreakLog
    break_start_time = Column(DateTime(timezone=True), nullable=True)
    break_end_time = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User")
    breaks = relationship(
        "BreakLog",
        back_populates="attendance",
        cascade="all, delete-orphan",
        order_by="BreakLog.id"
    )

    __table_args__ = (
        UniqueConstraint("user_id", "work_date", name="uq_attendance_user_work_date"),
    )


class BreakLog(Base):
    __tablename__ = "break_logs"

    id = Column(Integer, primary_key=True)
    attendance_id = Column(
        Integer,
        ForeignKey("user_attendance.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    break_start = Column(DateTime(timezone=True), nullable=False)
    break_end = Column(DateTime(timezone=True), nullable=True)

    attendance = relationship("UserAttendance", back_populates="breaks")

    __table_args__ = (
        Index(
            "uq_break_logs_one_open_per_attendance",
            "attendance_id",
            unique=True,
            postgresql_where=text("break_end IS NULL"),
            sqlite_where=text("break_end IS NULL"),
        ),
    )
