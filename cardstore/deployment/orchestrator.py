"""
Deployment orchestrator: single request/response operations against the
network, each opening its own account handle and RPC session.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Dict, Optional, Union

from ..config.settings_loader import DeployerConfig, NetworkConfig
from ..core.exceptions import ArtifactError, DeployerError
from ..core.models import (
    AccountBalance,
    AccountCredentials,
    InitArgs,
    TransactionResult,
    near_to_yocto,
    sub_account_id,
)
from ..near.account import AccountGateway, SigningAccount
from ..near.contract import ContractProxy
from ..near.keystore import FileSystemKeyStore
from ..near.rpc_client import NearRpcClient
from .models import StepResult

AccountFactory = Callable[[AccountCredentials, str], SigningAccount]
RpcFactory = Callable[[NetworkConfig], NearRpcClient]


def default_account_factory(credentials: AccountCredentials, rpc_url: str) -> SigningAccount:
    return AccountGateway(credentials, rpc_url)


def default_rpc_factory(network: NetworkConfig) -> NearRpcClient:
    return NearRpcClient(network.node_url, timeout=network.timeout)


class DeploymentOrchestrator:
    """
    Deploy, initialize and administer a contract account.

    Ordering between operations (deploy before initialize) is up to the
    caller; DeploymentPipeline is the caller that enforces one.
    """

    def __init__(
        self,
        config: DeployerConfig,
        keystore: Optional[FileSystemKeyStore] = None,
        account_factory: Optional[AccountFactory] = None,
        rpc_factory: Optional[RpcFactory] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            config: Deployer configuration
            keystore: Credential store, defaults to the configured credentials path
            account_factory: Builds a signing account from credentials and RPC url
            rpc_factory: Builds a read-side RPC client from the network config
        """
        self.config = config
        self.keystore = keystore or FileSystemKeyStore(config.credentials_path)
        self.account_factory = account_factory or default_account_factory
        self.rpc_factory = rpc_factory or default_rpc_factory
        self.logger = logging.getLogger(__name__)

    def _account_id(self, account_id: Optional[str]) -> str:
        return account_id or self.config.require_account_id()

    def load_credentials(self, account_id: str) -> AccountCredentials:
        return self.keystore.get_credentials(self.config.network_id, account_id)

    @asynccontextmanager
    async def _open_account(self, credentials: AccountCredentials) -> AsyncIterator[SigningAccount]:
        account = self.account_factory(credentials, self.config.rpc_url)
        try:
            yield account
        finally:
            await account.close()

    @asynccontextmanager
    async def open_account(self, account_id: str) -> AsyncIterator[SigningAccount]:
        """Load ``account_id`` from the credential store as a signing account"""
        async with self._open_account(self.load_credentials(account_id)) as account:
            yield account

    @asynccontextmanager
    async def open_rpc(self) -> AsyncIterator[NearRpcClient]:
        rpc = self.rpc_factory(self.config.network)
        try:
            yield rpc
        finally:
            await rpc.close()

    def contract_proxy(self, account: SigningAccount, contract_id: Optional[str] = None,
                       rpc: Optional[NearRpcClient] = None) -> ContractProxy:
        contract = self.config.contract
        return ContractProxy(
            account,
            contract_id or self.config.contract_id or account.account_id,
            view_methods=contract.view_methods,
            change_methods=contract.change_methods,
            rpc=rpc,
            default_gas=contract.gas,
        )

    @staticmethod
    def read_artifact(artifact_path: Union[str, Path]) -> bytes:
        path = Path(artifact_path).expanduser()
        if not path.is_file():
            raise ArtifactError(f"Artifact not found: {path}", path=str(path))
        try:
            return path.read_bytes()
        except OSError as e:
            raise ArtifactError(f"Could not read artifact {path}: {e}", path=str(path)) from e

    async def deploy(self, artifact_path: Union[str, Path], account_id: Optional[str] = None) -> TransactionResult:
        """Ship the artifact as the program of ``account_id``"""
        account_id = self._account_id(account_id)
        # Read before touching the network so a bad path costs nothing
        code = self.read_artifact(artifact_path)
        self.logger.info(f"Deploying {artifact_path} ({len(code)} bytes) to {account_id}")

        async with self.open_account(account_id) as account:
            result = await account.deploy_contract(code)

        self.logger.info(f"Deployed {artifact_path} to {account_id}: {result.transaction_hash}")
        return result

    async def initialize(self, account_id: Optional[str] = None, init_args: Optional[InitArgs] = None,
                         contract_id: Optional[str] = None) -> TransactionResult:
        """Call the one-time init entry point of the contract on ``account_id``"""
        account_id = self._account_id(account_id)
        contract_id = contract_id or account_id
        init_args = (init_args or self.config.contract.init_args).with_owner(account_id)
        contract = self.config.contract

        async with self.open_account(account_id) as account:
            proxy = self.contract_proxy(account, contract_id=contract_id)
            result = await proxy.call(
                contract.init_method,
                init_args.to_args(),
                gas=contract.gas,
                deposit=contract.init_deposit,
            )

        self.logger.info(f"Initialized {contract_id} owned by {init_args.owner_id}")
        return result

    async def create_sub_account(self, parent_account_id: str, new_id: str,
                                 initial_balance: Union[int, float, str] = 10) -> str:
        """
        Create ``new_id.parent_account_id`` funded with ``initial_balance`` NEAR.

        The child gets the parent's public key, and the parent's key pair is
        stored under the child's id so later operations can sign as it.
        Raises RemoteError when the name is taken or the parent cannot fund it.
        """
        new_account_id = sub_account_id(new_id, parent_account_id)
        credentials = self.load_credentials(parent_account_id)
        self.logger.info(f"Creating sub account {new_account_id} with {initial_balance} NEAR")

        async with self._open_account(credentials) as account:
            await account.create_account(new_account_id, credentials.public_key, near_to_yocto(initial_balance))

        if not self.keystore.has_credentials(self.config.network_id, new_account_id):
            self.keystore.set_credentials(self.config.network_id, AccountCredentials(
                account_id=new_account_id,
                public_key=credentials.public_key,
                private_key=credentials.private_key,
            ))

        self.logger.info(f"New sub account \"{new_account_id}\" is created successfully")
        return new_account_id

    async def try_create_sub_account(self, parent_account_id: str, new_id: str,
                                     initial_balance: Union[int, float, str] = 10,
                                     step: Optional[str] = None) -> StepResult:
        """create_sub_account returning a StepResult instead of raising"""
        step = step or f"create_sub_account:{new_id}"
        try:
            account_id = await self.create_sub_account(parent_account_id, new_id, initial_balance)
        except (DeployerError, ValueError) as e:
            self.logger.warning(f"Sub account {new_id}.{parent_account_id} was not created: {e}")
            return StepResult.failure(step, e)
        return StepResult.success(step, account_id)

    async def get_balance(self, account_id: Optional[str] = None) -> AccountBalance:
        account_id = self._account_id(account_id)
        async with self.open_rpc() as rpc:
            view = await rpc.view_account(account_id)
            protocol = await rpc.protocol_config()
        per_byte = int(protocol["runtime_config"]["storage_amount_per_byte"])
        return AccountBalance.from_account_view(view, storage_amount_per_byte=per_byte)

    async def get_account_details(self, account_id: Optional[str] = None) -> Dict[str, Any]:
        account_id = self._account_id(account_id)
        async with self.open_rpc() as rpc:
            view = await rpc.view_account(account_id)
            keys = await rpc.view_access_keys(account_id)

        authorized_apps = []
        for key in keys:
            permission = key.get("access_key", {}).get("permission")
            if isinstance(permission, dict) and "FunctionCall" in permission:
                grant = permission["FunctionCall"]
                authorized_apps.append({
                    "contract_id": grant.get("receiver_id"),
                    "amount": grant.get("allowance"),
                    "public_key": key.get("public_key"),
                })

        return {
            "account_id": account_id,
            "amount": view.get("amount"),
            "locked": view.get("locked"),
            "code_hash": view.get("code_hash"),
            "storage_usage": view.get("storage_usage"),
            "authorized_apps": authorized_apps,
        }

    async def view(self, method: str, args: Optional[Dict[str, Any]] = None,
                   contract_id: Optional[str] = None, account_id: Optional[str] = None) -> Any:
        """Read-only contract call through the proxy whitelist"""
        account_id = self._account_id(account_id)
        async with self.open_account(account_id) as account, self.open_rpc() as rpc:
            proxy = self.contract_proxy(account, contract_id=contract_id, rpc=rpc)
            return await proxy.view(method, args)

    async def call(self, method: str, args: Optional[Dict[str, Any]] = None,
                   gas: Optional[int] = None, deposit: int = 0,
                   contract_id: Optional[str] = None, account_id: Optional[str] = None) -> TransactionResult:
        """State-mutating contract call signed by ``account_id``"""
        account_id = self._account_id(account_id)
        async with self.open_account(account_id) as account:
            proxy = self.contract_proxy(account, contract_id=contract_id)
            return await proxy.call(method, args, gas=gas, deposit=deposit)
