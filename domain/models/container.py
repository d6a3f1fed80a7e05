"""
Reusable physical freezer containers.
"""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from domain.models.database import Base


class Container(Base):
    """A reusable box; ``in_use`` is set while it backs an item in the freezer"""

    __tablename__ = "containers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    container_code = Column(String(32), unique=True, nullable=False)
    container_type_id = Column(Integer)
    is_active = Column(Boolean, nullable=False, default=True)
    in_use = Column(Boolean, nullable=False, default=False)
    note = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
