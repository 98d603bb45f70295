from sqlalchemy import Column, String, Integer, BigInteger, Boolean, DateTime, ForeignKey

from api_store.db.base import Base, utcnow


class ApiKey(Base):
    __tablename__ = "api_keys"

    id = Column(String, primary_key=True)
    key_hash = Column(String, unique=True, nullable=False, index=True)
    key_prefix = Column(String, nullable=False)
    key_name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    tenant_id = Column(String, ForeignKey("tenants.id"), nullable=True)
    generated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_used = Column(DateTime(timezone=True), nullable=True)
    usage_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)


class ApiUsageLog(Base):
    __tablename__ = "api_usage_logs"

    id = Column(String, primary_key=True)
    key_id = Column(String, ForeignKey("api_keys.id"), nullable=False, index=True)
    email = Column(String, nullable=False)
    endpoint_path = Column(String, nullable=False)
    method = Column(String, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    response_status = Column(Integer, nullable=True)
    response_time_ms = Column(BigInteger, nullable=True)
    request_size = Column(BigInteger, nullable=True)
    response_size = Column(BigInteger, nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    request_id = Column(String, nullable=True)
    input_tokens = Column(Integer, nullable=True)
    output_tokens = Column(Integer, nullable=True)
    total_tokens = Column(Integer, nullable=True)
    model_used = Column(String, nullable=True)
