"""SQLAlchemy model for the users table."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.sql import expression

from petflix.infrastructure.database import Base
from petflix.utils import now_in_app_naive_datetime


def _new_user_id() -> str:
    return str(uuid.uuid4())


class UserModel(Base):
    """Database representation of a Petflix user."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_user_id)
    username = Column(String(255), nullable=False, unique=True)
    email = Column(String(255), nullable=False, unique=True)
    notifications_enabled = Column(
        Boolean,
        nullable=False,
        default=True,
        server_default=expression.true(),
    )
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["UserModel"]
