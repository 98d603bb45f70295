from sqlalchemy import Column, Integer, String, Boolean, DateTime, UniqueConstraint

from api_store.db.base import Base, utcnow


class Domain(Base):
    __tablename__ = "domains"
    __table_args__ = (UniqueConstraint("email", "domain"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False)
    domain = Column(String, nullable=False)
    verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
