"""/v1/accounts/{account_id} - balance read, deposit and deletion"""

from fastapi import APIRouter, Depends

from ledger_service.api.v1.schemas import AccountResponse, DepositRequest, IdResponse
from ledger_service.api.dependencies import get_account_service
from ledger_service.services.accounts import AccountService

router = APIRouter()


@router.get("/accounts/{account_id}", response_model=AccountResponse)
def get_account(account_id: int, accounts: AccountService = Depends(get_account_service)):
    balance = accounts.get_account(account_id)
    return AccountResponse(currency=balance.currency, balance=balance.balance)


@router.patch("/accounts/{account_id}", response_model=AccountResponse)
def deposit(
    account_id: int,
    request_body: DepositRequest,
    accounts: AccountService = Depends(get_account_service),
):
    """
    Deposit funds into an account.

    Returns:
        Updated currency and balance
    """
    balance = accounts.deposit(account_id, request_body.amount)
    return AccountResponse(currency=balance.currency, balance=balance.balance)


@router.delete("/accounts/{account_id}", response_model=IdResponse)
def delete_account(account_id: int, accounts: AccountService = Depends(get_account_service)):
    return IdResponse(id=accounts.delete_account(account_id))
