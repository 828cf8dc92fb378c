"""FastAPI endpoints for the Catalogue domain.

Every endpoint goes through the cached product repository, so reads are
served read-through and writes invalidate the affected cache keys.
"""

from fastapi import APIRouter, Depends

from catalogue.api.schemas import ProductRequest, ProductResponse, QuantityChangeRequest, StatusResponse
from catalogue.product.cached import CachedProductRepository, build_product_repository
from catalogue.product.product import Product

product_router = APIRouter(prefix="/products", tags=["products"])


def get_product_repository() -> CachedProductRepository:
    return build_product_repository()


def _response(product: Product) -> ProductResponse:
    return ProductResponse.model_validate(product.model_dump())


@product_router.post("", status_code=201, response_model=ProductResponse)
def create_product(
    body: ProductRequest,
    repository: CachedProductRepository = Depends(get_product_repository),
) -> ProductResponse:
    product = repository.create(Product(**body.model_dump()))
    return _response(product)


@product_router.get("", response_model=list[ProductResponse])
def list_products(repository: CachedProductRepository = Depends(get_product_repository)) -> list[ProductResponse]:
    return [_response(product) for product in repository.get_all()]


@product_router.get("/category/{category}", response_model=list[ProductResponse])
def list_products_in_category(
    category: str,
    repository: CachedProductRepository = Depends(get_product_repository),
) -> list[ProductResponse]:
    return [_response(product) for product in repository.get_by_category(category)]


@product_router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    repository: CachedProductRepository = Depends(get_product_repository),
) -> ProductResponse:
    return _response(repository.get_by_id(product_id))


@product_router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    body: ProductRequest,
    repository: CachedProductRepository = Depends(get_product_repository),
) -> ProductResponse:
    product = repository.update(Product(product_id=product_id, **body.model_dump()))
    return _response(product)


@product_router.patch("/{product_id}/quantity", response_model=ProductResponse)
def change_quantity(
    product_id: int,
    body: QuantityChangeRequest,
    repository: CachedProductRepository = Depends(get_product_repository),
) -> ProductResponse:
    return _response(repository.update_quantity(product_id, body.change))


@product_router.delete("/{product_id}", response_model=StatusResponse)
def delete_product(
    product_id: int,
    repository: CachedProductRepository = Depends(get_product_repository),
) -> StatusResponse:
    repository.delete(product_id)
    return StatusResponse()
