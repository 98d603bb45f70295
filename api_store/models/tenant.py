from sqlalchemy import Column, String, BigInteger, DateTime, ForeignKey

from api_store.db.base import Base, utcnow


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    credit_balance = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class TenantUser(Base):
    __tablename__ = "tenant_users"

    tenant_id = Column(String, ForeignKey("tenants.id"), primary_key=True)
    email = Column(String, primary_key=True)
    role = Column(String, nullable=False, default="member")
