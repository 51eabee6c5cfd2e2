from typing import Optional, List, Dict, Any
from pydantic import BaseModel


class TransactionResponse(BaseModel):
    """Signed transaction outcome"""
    transaction_hash: Optional[str] = None
    status: str
    logs: List[str] = []
    failure: Optional[Any] = None


class BalanceResponse(BaseModel):
    """Account balance in yoctoNEAR (strings, values exceed JSON integers)"""
    account_id: str
    total: str
    state_staked: str
    staked: str
    available: str


class AccountDetailsResponse(BaseModel):
    """Account view with function-call keys"""
    account_id: str
    amount: Optional[str] = None
    locked: Optional[str] = None
    code_hash: Optional[str] = None
    storage_usage: Optional[int] = None
    authorized_apps: List[Dict[str, Any]] = []
