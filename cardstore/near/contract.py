import logging
from typing import Any, Dict, Iterable, Optional

from ..core.exceptions import MethodNotAllowedError
from ..core.models import TransactionResult
from .account import SigningAccount
from .rpc_client import NearRpcClient


class ContractProxy:
    """
    Binding between a loaded account and a deployed contract.

    Only whitelisted entry points can be invoked: ``view_methods`` through the
    RPC client (no signature), ``change_methods`` as signed transactions from
    the bound account.
    """

    def __init__(
        self,
        account: SigningAccount,
        contract_id: str,
        view_methods: Iterable[str] = (),
        change_methods: Iterable[str] = (),
        rpc: Optional[NearRpcClient] = None,
        default_gas: int = 30_000_000_000_000,
    ):
        if account is None:
            raise ValueError("ContractProxy requires a loaded account")
        self.account = account
        self.contract_id = contract_id
        self.view_methods = frozenset(view_methods)
        self.change_methods = frozenset(change_methods)
        self.rpc = rpc
        self.default_gas = default_gas
        self.logger = logging.getLogger(f"{__name__}.ContractProxy")

    def __repr__(self) -> str:
        return f"ContractProxy({self.contract_id!r}, signer={self.account.account_id!r})"

    async def view(self, method: str, args: Optional[Dict[str, Any]] = None) -> Any:
        if method not in self.view_methods:
            raise MethodNotAllowedError(method, self.contract_id, kind="view method")
        if self.rpc is None:
            raise ValueError("ContractProxy has no RPC client for view calls")
        self.logger.debug(f"View {self.contract_id}.{method}")
        return await self.rpc.view_function(self.contract_id, method, args or {})

    async def call(self, method: str, args: Optional[Dict[str, Any]] = None,
                   gas: Optional[int] = None, deposit: int = 0) -> TransactionResult:
        if method not in self.change_methods:
            raise MethodNotAllowedError(method, self.contract_id, kind="change method")
        self.logger.info(f"Calling {self.contract_id}.{method} as {self.account.account_id}")
        return await self.account.function_call(
            self.contract_id,
            method,
            args or {},
            gas=gas or self.default_gas,
            deposit=deposit,
        )
