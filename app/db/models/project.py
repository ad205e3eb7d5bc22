from sqlalchemy import JSON, Column, DateTime, Integer, String, func

from app.db.base import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    # Authoritative dashboard document (camelCase JSON); computed fields are never stored.
    data = Column(JSON, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )
