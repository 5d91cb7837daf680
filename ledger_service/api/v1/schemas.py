"""Pydantic schemas for API request/response validation"""

from decimal import Decimal
from pydantic import BaseModel, Field


class IdResponse(BaseModel):
    """Identifier of a created or deleted entity"""

    id: int


class UserRequest(BaseModel):
    """Request body for POST /v1/users and PUT /v1/users/{id}"""

    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=1, max_length=50)


class UserResponse(BaseModel):
    """Response for GET /v1/users/{id}"""

    first_name: str
    last_name: str
    email: str


class AccountCreateRequest(BaseModel):
    """Request body for POST /v1/users/{id}/accounts"""

    currency: str = Field("usd", description="3-letter currency code")
    balance: Decimal = Field(Decimal("0"), description="Opening balance, up to 4 decimal places")


class AccountResponse(BaseModel):
    """Currency and balance of an account; balance serialized as a string"""

    currency: str
    balance: Decimal


class DepositRequest(BaseModel):
    """Request body for PATCH /v1/accounts/{id}"""

    amount: Decimal


class TransferRequest(BaseModel):
    """Request body for POST /v1/transfers"""

    from_account_id: int
    to_account_id: int
    amount: Decimal
    request_id: str = Field(..., min_length=1, max_length=40, description="Client idempotency key")


class TransferResponse(BaseModel):
    """Response for POST /v1/transfers"""

    request_id: str
    receipt: str
