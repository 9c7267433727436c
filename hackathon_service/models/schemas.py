from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


def _number_to_str(value: Any) -> Any:
    # JSON numbers are accepted where a string is expected; zero counts as missing.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value) if value else None
    return value


class UserCreate(_CamelModel):
    name: str | None = None
    email: str | None = None

    @field_validator("name", "email", mode="before")
    @classmethod
    def coerce_numbers(cls, value: Any) -> Any:
        return _number_to_str(value)


class User(_CamelModel):
    id: str
    name: str
    email: str
    created_at: datetime = Field(alias="createdAt")


class UsersResponse(BaseModel):
    users: list[User]
    count: int


class OrderCreate(_CamelModel):
    user_id: str | None = Field(default=None, alias="userId")
    items: Any = None
    total: int | float | None = None

    @field_validator("user_id", mode="before")
    @classmethod
    def coerce_numbers(cls, value: Any) -> Any:
        return _number_to_str(value)


class Order(_CamelModel):
    id: str
    user_id: str = Field(alias="userId")
    items: Any
    total: int | float = 0
    status: Literal["pending"] = "pending"
    created_at: datetime = Field(alias="createdAt")


class OrdersResponse(BaseModel):
    orders: list[Order]
    count: int


class MessageResponse(BaseModel):
    message: str


class SlowResponse(BaseModel):
    message: str
    delay: int


class MemoryLeakResponse(_CamelModel):
    message: str
    total_leaked: str = Field(alias="totalLeaked")


class ClearedResponse(BaseModel):
    message: str
    count: int


class MemoryUsage(BaseModel):
    leaked: str
    rss: str
    vms: str


class ChaosStatus(_CamelModel):
    memory_leak: bool = Field(alias="memoryLeak")
    artificial_latency: int = Field(alias="artificialLatency")
    cpu_spike_active: bool = Field(alias="cpuSpikeActive")
    memory: MemoryUsage
