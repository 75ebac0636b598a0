from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from workdesk.database.base import Base


class ExternalIdentity(Base):
    __tablename__ = "external_identities"

    id = Column(Integer, primary_key=True)
    provider = Column(String(64), nullable=False)
    subject = Column(String(255), nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User")
