from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from workdesk.database.base import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    name = Column(String(255), nullable=False)
    role_title = Column(String(255), nullable=True)
    department = Column(String(255), nullable=True)
    status = Column(String(32), nullable=False, default="Active")

    # users.id of a MANAGER or PROJECT_MANAGER
    manager_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="employee", foreign_keys=[user_id])
    manager = relationship("User", back_populates="managed_employees", foreign_keys=[manager_id])

    @property
    def email(self):
        return self.user.email if self.user else None

    @property
    def tasks(self):
        if not self.user:
            return []
        return [t for t in self.user.tasks_assigned if not t.is_deleted]

    @property
    def team(self):
        return list(self.user.managed_employees) if self.user else []
