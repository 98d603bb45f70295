from sqlalchemy import Column, String, Text, Boolean, ForeignKey

from api_store.db.base import Base


class ApiGroup(Base):
    __tablename__ = "api_groups"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    base_url = Column(String, nullable=False)
    is_default = Column(Boolean, nullable=False, default=False, index=True)


class UserGroup(Base):
    __tablename__ = "user_groups"

    email = Column(String, primary_key=True)
    group_id = Column(String, ForeignKey("api_groups.id"), primary_key=True, index=True)
