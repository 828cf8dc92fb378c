"""FastAPI endpoints for the Ordering domain.

Order creation always goes through `OrderPlacement`, which evicts the product
cache entries for every product the order touched.
"""

from fastapi import APIRouter, Depends

from ordering.api.schemas import (
    CreateOrderRequest,
    OrderDetailsResponse,
    OrderResponse,
    UpdateStatusRequest,
)
from ordering.order.order import OrderDetails
from ordering.order.placement import OrderPlacement, build_order_placement
from ordering.order.repository import OrderRepository
from shared.database import get_database

order_router = APIRouter(prefix="/orders", tags=["orders"])


def get_order_placement() -> OrderPlacement:
    return build_order_placement()


def get_order_repository() -> OrderRepository:
    return OrderRepository(get_database())


@order_router.post("", status_code=201, response_model=OrderDetailsResponse)
def create_order(
    body: CreateOrderRequest,
    placement: OrderPlacement = Depends(get_order_placement),
) -> OrderDetailsResponse:
    placed = placement.place(body.customer_id, [item.model_dump() for item in body.items])
    return OrderDetailsResponse.model_validate(OrderDetails(order=placed.order, items=placed.items).to_dict())


@order_router.get("", response_model=list[OrderResponse])
def list_orders(repository: OrderRepository = Depends(get_order_repository)) -> list[OrderResponse]:
    return [OrderResponse.model_validate(order.to_dict()) for order in repository.get_all()]


@order_router.get("/customer/{customer_id}", response_model=list[OrderResponse])
def list_customer_orders(
    customer_id: int,
    repository: OrderRepository = Depends(get_order_repository),
) -> list[OrderResponse]:
    return [OrderResponse.model_validate(order.to_dict()) for order in repository.get_by_customer_id(customer_id)]


@order_router.get("/{order_id}", response_model=OrderDetailsResponse)
def get_order(
    order_id: int,
    repository: OrderRepository = Depends(get_order_repository),
) -> OrderDetailsResponse:
    return OrderDetailsResponse.model_validate(repository.get_with_items(order_id).to_dict())


@order_router.put("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    body: UpdateStatusRequest,
    repository: OrderRepository = Depends(get_order_repository),
) -> OrderResponse:
    return OrderResponse.model_validate(repository.update_status(order_id, body.status).to_dict())
