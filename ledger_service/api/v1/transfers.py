"""POST /v1/transfers - idempotent transfer between two accounts"""

import logging

from fastapi import APIRouter, Depends, Request

from ledger_service.api.v1.schemas import TransferRequest, TransferResponse
from ledger_service.api.dependencies import get_request_id, get_transfer_engine
from ledger_service.services.transfers import TransferEngine

router = APIRouter()


@router.post("/transfers", response_model=TransferResponse)
def create_transfer(
    request_body: TransferRequest,
    request: Request,
    engine: TransferEngine = Depends(get_transfer_engine),
):
    """
    Move funds between two accounts of the same currency.

    Retrying with the same request_id after a success returns the original
    receipt without moving funds again.

    Status codes:
        400: same account, non-positive amount, insufficient funds, currency mismatch
        404: source or destination account missing
        500: store failure; safe to retry with the same request_id
    """
    result = engine.transfer(
        from_account_id=request_body.from_account_id,
        to_account_id=request_body.to_account_id,
        amount=request_body.amount,
        request_id=request_body.request_id,
    )
    logging.debug(
        "Transfer response sent",
        extra={"request_id": get_request_id(request), "transfer_request_id": result.request_id},
    )
    return TransferResponse(request_id=result.request_id, receipt=result.receipt)
