from sqlalchemy import Column, String, Text, BigInteger, ForeignKey

from api_store.db.base import Base


class UserPreferences(Base):
    __tablename__ = "user_preferences"

    email = Column(String, primary_key=True)
    hidden_defaults = Column(Text, nullable=False, default="")  # comma-separated endpoint ids
    credit_balance = Column(BigInteger, nullable=False, default=0)
    default_tenant_id = Column(String, ForeignKey("tenants.id"), nullable=True)
