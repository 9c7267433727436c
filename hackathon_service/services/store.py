from __future__ import annotations

import uuid
from datetime import datetime, timezone
from threading import Lock
from typing import Any

import structlog

from hackathon_service.errors import NotFoundError, ValidationError
from hackathon_service.models.schemas import Order, User

logger = structlog.get_logger(__name__)


def _is_present(value: Any) -> bool:
    """Falsy scalars (None, 0, "", false) are missing; empty lists and objects are not."""

    return isinstance(value, (list, dict)) or bool(value)


class ResourceStore:
    """In-memory users and orders (lost on restart, never evicted)."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._users: dict[str, User] = {}
        self._orders: dict[str, Order] = {}

    def list_users(self) -> list[User]:
        with self._lock:
            return list(self._users.values())

    def get_user(self, user_id: str) -> User:
        with self._lock:
            user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def create_user(self, name: str | None, email: str | None) -> User:
        if not name or not email:
            raise ValidationError("Name and email required")

        user = User(id=str(uuid.uuid4()), name=name, email=email, created_at=datetime.now(timezone.utc))
        with self._lock:
            self._users[user.id] = user

        logger.info("user.created", user_id=user.id)
        return user

    def list_orders(self) -> list[Order]:
        with self._lock:
            return list(self._orders.values())

    def create_order(self, user_id: str | None, items: Any, total: int | float | None = None) -> Order:
        if not user_id or not _is_present(items):
            raise ValidationError("userId and items required")

        order = Order(
            id=str(uuid.uuid4()),
            user_id=user_id,
            items=items,
            total=total or 0,
            status="pending",
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._orders[order.id] = order

        logger.info("order.created", order_id=order.id, user_id=user_id)
        return order
