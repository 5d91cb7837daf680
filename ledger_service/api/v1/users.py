"""/v1/users - user management and per-user accounts"""

from typing import List

from fastapi import APIRouter, Depends

from ledger_service.api.v1.schemas import (
    AccountCreateRequest,
    AccountResponse,
    IdResponse,
    UserRequest,
    UserResponse,
)
from ledger_service.api.dependencies import get_account_service, get_user_service
from ledger_service.domain.models import User
from ledger_service.services.accounts import AccountService
from ledger_service.services.users import UserService

router = APIRouter()


def _user_response(user: User) -> UserResponse:
    return UserResponse(first_name=user.first_name, last_name=user.last_name, email=user.email)


@router.post("/users", response_model=IdResponse)
def create_user(request_body: UserRequest, users: UserService = Depends(get_user_service)):
    user_id = users.create_user(request_body.first_name, request_body.last_name, request_body.email)
    return IdResponse(id=user_id)


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: int, users: UserService = Depends(get_user_service)):
    return _user_response(users.get_user(user_id))


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    request_body: UserRequest,
    users: UserService = Depends(get_user_service),
):
    user = users.update_user(user_id, request_body.first_name, request_body.last_name, request_body.email)
    return _user_response(user)


@router.delete("/users/{user_id}", response_model=IdResponse)
def delete_user(user_id: int, users: UserService = Depends(get_user_service)):
    """Refused with 500 while the user still owns accounts"""
    return IdResponse(id=users.delete_user(user_id))


@router.get("/users/{user_id}/accounts", response_model=List[AccountResponse])
def get_accounts_for_user(user_id: int, accounts: AccountService = Depends(get_account_service)):
    return [
        AccountResponse(currency=a.currency, balance=a.balance)
        for a in accounts.get_accounts_for_user(user_id)
    ]


@router.post("/users/{user_id}/accounts", response_model=IdResponse)
def create_account(
    user_id: int,
    request_body: AccountCreateRequest,
    accounts: AccountService = Depends(get_account_service),
):
    account_id = accounts.create_account(user_id, request_body.currency, request_body.balance)
    return IdResponse(id=account_id)
