from __future__ import annotations

import asyncio
import random

from fastapi import APIRouter, Depends

from hackathon_service.api.dependencies import apply_artificial_latency, get_metrics, get_rng, get_store
from hackathon_service.api.params import float_param, int_param
from hackathon_service.errors import InjectedError
from hackathon_service.models.schemas import (
    MessageResponse,
    Order,
    OrderCreate,
    OrdersResponse,
    SlowResponse,
    User,
    UserCreate,
    UsersResponse,
)
from hackathon_service.observability.metrics import ServiceMetrics
from hackathon_service.services.store import ResourceStore

router = APIRouter(prefix="/api", tags=["api"], dependencies=[Depends(apply_artificial_latency)])


@router.get("/users", response_model=UsersResponse)
async def list_users(store: ResourceStore = Depends(get_store)) -> UsersResponse:
    users = store.list_users()
    return UsersResponse(users=users, count=len(users))


@router.get("/users/{user_id}", response_model=User)
async def get_user(user_id: str, store: ResourceStore = Depends(get_store)) -> User:
    return store.get_user(user_id)


@router.post("/users", response_model=User, status_code=201)
async def create_user(
    payload: UserCreate | None = None,
    store: ResourceStore = Depends(get_store),
    metrics: ServiceMetrics = Depends(get_metrics),
) -> User:
    payload = payload or UserCreate()
    user = store.create_user(name=payload.name, email=payload.email)
    metrics.user_registered()
    return user


@router.get("/orders", response_model=OrdersResponse)
async def list_orders(store: ResourceStore = Depends(get_store)) -> OrdersResponse:
    orders = store.list_orders()
    return OrdersResponse(orders=orders, count=len(orders))


@router.post("/orders", response_model=Order, status_code=201)
async def create_order(
    payload: OrderCreate | None = None,
    store: ResourceStore = Depends(get_store),
    metrics: ServiceMetrics = Depends(get_metrics),
) -> Order:
    payload = payload or OrderCreate()
    order = store.create_order(user_id=payload.user_id, items=payload.items, total=payload.total)
    metrics.order_created()
    return order


@router.get("/slow", response_model=SlowResponse)
async def slow(delay: str | None = None) -> SlowResponse:
    delay_ms = int_param(delay, 2000)
    await asyncio.sleep(max(delay_ms, 0) / 1000)
    return SlowResponse(message="Slow response", delay=delay_ms)


@router.get("/random-error", response_model=MessageResponse)
async def random_error(rate: str | None = None, rng: random.Random = Depends(get_rng)) -> MessageResponse:
    if rng.random() < float_param(rate, 0.3):
        raise InjectedError("Random error")
    return MessageResponse(message="Success")
