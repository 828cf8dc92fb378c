"""FastAPI endpoints for the Identity domain."""

from fastapi import APIRouter, Depends

from identity.api.schemas import CustomerRequest, CustomerResponse, StatusResponse
from identity.customer.customer import Customer
from identity.customer.repository import CustomerRepository
from shared.database import get_database

router = APIRouter(prefix="/customers", tags=["customers"])


def get_customer_repository() -> CustomerRepository:
    return CustomerRepository(get_database())


def _response(customer: Customer) -> CustomerResponse:
    return CustomerResponse.model_validate(customer.to_dict())


@router.post("", status_code=201, response_model=CustomerResponse)
def register_customer(
    body: CustomerRequest,
    repository: CustomerRepository = Depends(get_customer_repository),
) -> CustomerResponse:
    return _response(repository.create(Customer(**body.model_dump())))


@router.get("", response_model=list[CustomerResponse])
def list_customers(repository: CustomerRepository = Depends(get_customer_repository)) -> list[CustomerResponse]:
    return [_response(customer) for customer in repository.get_all()]


@router.get("/by-email/{email}", response_model=CustomerResponse)
def get_customer_by_email(
    email: str,
    repository: CustomerRepository = Depends(get_customer_repository),
) -> CustomerResponse:
    return _response(repository.get_by_email(email))


@router.get("/by-phone/{phone_number}", response_model=CustomerResponse)
def get_customer_by_phone(
    phone_number: str,
    repository: CustomerRepository = Depends(get_customer_repository),
) -> CustomerResponse:
    return _response(repository.get_by_phone_number(phone_number))


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: int,
    repository: CustomerRepository = Depends(get_customer_repository),
) -> CustomerResponse:
    return _response(repository.get_by_id(customer_id))


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    body: CustomerRequest,
    repository: CustomerRepository = Depends(get_customer_repository),
) -> CustomerResponse:
    return _response(repository.update(Customer(customer_id=customer_id, **body.model_dump())))


@router.delete("/{customer_id}", response_model=StatusResponse)
def delete_customer(
    customer_id: int,
    repository: CustomerRepository = Depends(get_customer_repository),
) -> StatusResponse:
    repository.delete(customer_id)
    return StatusResponse()
