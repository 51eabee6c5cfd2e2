"""
API endpoints for account administration.
"""
import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from .contracts import get_orchestrator
from ..errors import to_http_exception
from ..models.api_models import BalanceResponse, AccountDetailsResponse
from ...core.exceptions import DeployerError
from ...deployment.orchestrator import DeploymentOrchestrator

router = APIRouter(tags=["accounts"])
logger = logging.getLogger(__name__)


@router.get("/new-wallet/{uid}", response_class=PlainTextResponse)
async def new_wallet(
    uid: str,
    initial_balance: float = Query(10, ge=0, description="Initial balance in NEAR"),
    orchestrator: DeploymentOrchestrator = Depends(get_orchestrator)
):
    """Create ``uid.<account>`` funded from the configured account"""
    try:
        parent = orchestrator.config.require_account_id()
        account_id = await orchestrator.create_sub_account(parent, uid, initial_balance)
    except (DeployerError, ValueError) as e:
        logger.error(f"Sub account {uid} was not created: {e}")
        raise to_http_exception(e)
    return f"New sub account \"{account_id}\" is created successfully"


@router.get("/balance/{account_id}", response_model=BalanceResponse)
async def get_balance(
    account_id: str,
    orchestrator: DeploymentOrchestrator = Depends(get_orchestrator)
):
    """Balance of an account in yoctoNEAR"""
    try:
        balance = await orchestrator.get_balance(account_id)
    except DeployerError as e:
        raise to_http_exception(e)
    return {"account_id": account_id, **balance.to_dict()}


@router.get("/account/{account_id}", response_model=AccountDetailsResponse)
async def get_account(
    account_id: str,
    orchestrator: DeploymentOrchestrator = Depends(get_orchestrator)
):
    """Account view and the apps holding function-call keys on it"""
    try:
        return await orchestrator.get_account_details(account_id)
    except DeployerError as e:
        raise to_http_exception(e)
