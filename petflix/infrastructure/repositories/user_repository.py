"""Persistence layer for user data."""

from __future__ import annotations

from sqlalchemy.orm import Session

from petflix.domain.entities import User
from petflix.infrastructure.models import UserModel
from petflix.utils import ensure_app_timezone


class UserRepository:
    """Provide the user lookups notification delivery needs."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str) -> User | None:
        model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def create(self, user: User) -> User:
        model = UserModel(
            username=user.username,
            email=user.email,
            notifications_enabled=user.notifications_enabled,
        )
        if user.id is not None:
            model.id = user.id
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def set_notifications_enabled(self, user_id: str, enabled: bool) -> None:
        model = self.session.get(UserModel, user_id)
        if model is None:
            msg = f"User with id {user_id} not found"
            raise ValueError(msg)
        model.notifications_enabled = enabled
        self.session.add(model)
        self.session.commit()

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            username=model.username,
            email=model.email,
            notifications_enabled=bool(model.notifications_enabled),
            created_at=ensure_app_timezone(model.created_at),
        )
