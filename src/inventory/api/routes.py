"""FastAPI routes for the Inventory domain: stock movements and their audit trail."""

from fastapi import APIRouter, Depends

from catalogue.product.cached import build_product_repository
from inventory.api.schemas import OperationResponse, RecordOperationRequest, StockMovementResponse
from inventory.operation.log import OperationLog
from inventory.stock.movement import StockMovements
from shared.database import get_database

operation_router = APIRouter(prefix="/operations", tags=["operations"])


def get_operation_log() -> OperationLog:
    return OperationLog(get_database())


def get_stock_movements() -> StockMovements:
    database = get_database()
    return StockMovements(database, build_product_repository(database))


@operation_router.post("", status_code=201, response_model=StockMovementResponse)
def record_operation(
    body: RecordOperationRequest,
    movements: StockMovements = Depends(get_stock_movements),
) -> StockMovementResponse:
    product, operation = movements.record(
        body.product_id,
        body.change,
        body.operation_type,
        order_id=body.order_id,
    )
    return StockMovementResponse(
        operation=OperationResponse.model_validate(operation.model_dump()),
        product_id=product.product_id,
        quantity=product.quantity,
        price=product.price,
    )


@operation_router.get("/product/{product_id}", response_model=list[OperationResponse])
def list_operations_for_product(
    product_id: int,
    log: OperationLog = Depends(get_operation_log),
) -> list[OperationResponse]:
    return [OperationResponse.model_validate(op.model_dump()) for op in log.get_by_product_id(product_id)]


@operation_router.get("/order/{order_id}", response_model=list[OperationResponse])
def list_operations_for_order(
    order_id: int,
    log: OperationLog = Depends(get_operation_log),
) -> list[OperationResponse]:
    return [OperationResponse.model_validate(op.model_dump()) for op in log.get_by_order_id(order_id)]
