from sqlalchemy import Column, String, Text, Boolean, ForeignKey, ForeignKeyConstraint

from api_store.db.base import Base


class Endpoint(Base):
    __tablename__ = "endpoints"

    id = Column(String, primary_key=True)
    text = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    verb = Column(String, nullable=False, default="GET")
    base_url = Column(String, nullable=False)
    path = Column(String, nullable=False, default="")
    group_id = Column(String, ForeignKey("api_groups.id"), nullable=False, index=True)
    is_default = Column(Boolean, nullable=False, default=False)


class Parameter(Base):
    __tablename__ = "parameters"

    endpoint_id = Column(String, ForeignKey("endpoints.id"), primary_key=True)
    name = Column(String, primary_key=True)
    description = Column(Text, nullable=False, default="")
    required = Column(Boolean, nullable=False, default=False)


class ParameterAlternative(Base):
    __tablename__ = "parameter_alternatives"
    __table_args__ = (
        ForeignKeyConstraint(
            ["endpoint_id", "parameter_name"],
            ["parameters.endpoint_id", "parameters.name"],
        ),
    )

    endpoint_id = Column(String, primary_key=True)
    parameter_name = Column(String, primary_key=True)
    alternative = Column(String, primary_key=True)


class UserEndpoint(Base):
    __tablename__ = "user_endpoints"

    email = Column(String, primary_key=True)
    endpoint_id = Column(String, ForeignKey("endpoints.id"), primary_key=True, index=True)
