"""Profile attributes owned by the profile subsystem; read by optional eligibility predicates."""
from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func

from meetmatch.db.base import Base


class UserProfile(Base):
    __tablename__ = "user_profiles"

    user_id = Column(String(64), primary_key=True)
    display_name = Column(String(128), nullable=True)
    city = Column(String(128), nullable=True)
    stage = Column(String(32), nullable=True)  # e.g. IDEA | BUILDING | DISTRIBUTING
    summary = Column(String(2000), nullable=True)  # free-text profile summary fed to the compatibility agent
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
