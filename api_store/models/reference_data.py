from sqlalchemy import Column, String, JSON, DateTime

from api_store.db.base import Base, utcnow


class ReferenceData(Base):
    __tablename__ = "reference_data"

    id = Column(String, primary_key=True)
    email = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
