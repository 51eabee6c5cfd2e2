"""
Signing side of the NEAR boundary.

``AccountGateway`` wraps the py-near ``Account`` so the rest of the package
deals only in ``TransactionResult`` and the deployer error kinds.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

import aiohttp
from py_near.account import Account

from ..core.exceptions import DeployerError, NetworkError, RemoteError
from ..core.models import AccountCredentials, TransactionResult

# py-near raises its own exception classes for unreachable or slow RPC nodes
_TRANSPORT_ERROR_NAMES = {
    "RpcNotAvailableError",
    "RpcTimeoutError",
    "RpcEmptyResponse",
}


class SigningAccount(Protocol):
    """Subset of account operations the orchestrator relies on.

    Implemented by AccountGateway and by fakes in tests.
    """

    account_id: str

    def deploy_contract(self, code: bytes) -> Awaitable[TransactionResult]:
        ...

    def function_call(
        self,
        contract_id: str,
        method_name: str,
        args: Dict[str, Any],
        gas: int,
        deposit: int,
    ) -> Awaitable[TransactionResult]:
        ...

    def create_account(self, account_id: str, public_key: str, initial_balance: int) -> Awaitable[TransactionResult]:
        ...

    def close(self) -> Awaitable[None]:
        ...


def translate_sdk_error(exc: Exception, action: str) -> DeployerError:
    """Map an SDK exception onto NetworkError or RemoteError"""
    if isinstance(exc, DeployerError):
        return exc
    if isinstance(exc, (aiohttp.ClientError, asyncio.TimeoutError, ConnectionError)) \
            or type(exc).__name__ in _TRANSPORT_ERROR_NAMES:
        return NetworkError(f"{action} failed: {exc}", context={"sdk_error": type(exc).__name__})
    payload = getattr(exc, "error_json", None) or str(exc)
    return RemoteError(f"{action} rejected: {exc}", payload=payload,
                       context={"sdk_error": type(exc).__name__})


class AccountGateway:
    """Account handle able to sign and submit transactions"""

    def __init__(self, credentials: AccountCredentials, rpc_url: str, sdk_account: Optional[Account] = None):
        self.credentials = credentials
        self.account_id = credentials.account_id
        self.rpc_url = rpc_url
        self._account = sdk_account or Account(
            account_id=credentials.account_id,
            private_key=credentials.private_key,
            rpc_addr=rpc_url,
        )
        self._started = False
        self.logger = logging.getLogger(f"{__name__}.AccountGateway")

    async def startup(self) -> 'AccountGateway':
        if not self._started:
            try:
                await self._account.startup()
            except Exception as e:
                raise translate_sdk_error(e, f"Loading account {self.account_id}") from e
            self._started = True
        return self

    async def close(self):
        shutdown = getattr(self._account, "shutdown", None)
        if self._started and shutdown is not None:
            await shutdown()
        self._started = False

    async def _submit(self, action: str, call: Callable[[], Awaitable[Any]]) -> TransactionResult:
        await self.startup()
        try:
            outcome = await call()
        except Exception as e:
            raise translate_sdk_error(e, action) from e

        result = TransactionResult.from_outcome(outcome)
        if not result.succeeded:
            raise RemoteError(f"{action} failed on chain", payload=result.failure,
                              context={"transaction_hash": result.transaction_hash})
        self.logger.debug(f"{action} succeeded: {result.transaction_hash}")
        return result

    async def deploy_contract(self, code: bytes) -> TransactionResult:
        return await self._submit(
            f"Deploying contract to {self.account_id}",
            lambda: self._account.deploy_contract(code),
        )

    async def function_call(self, contract_id: str, method_name: str, args: Dict[str, Any],
                            gas: int, deposit: int = 0) -> TransactionResult:
        return await self._submit(
            f"Calling {contract_id}.{method_name}",
            lambda: self._account.function_call(contract_id, method_name, args, gas=gas, amount=deposit),
        )

    async def create_account(self, account_id: str, public_key: str, initial_balance: int) -> TransactionResult:
        return await self._submit(
            f"Creating account {account_id}",
            lambda: self._account.create_account(account_id, public_key, initial_balance),
        )
