"""Pytest configuration and fixtures for the CardStore deployer tests."""

import json
import sys
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from cardstore.config.settings_loader import DeployerConfig
from cardstore.core.exceptions import NetworkError, RemoteError
from cardstore.core.models import AccountCredentials, TransactionResult, near_to_yocto
from cardstore.deployment.orchestrator import DeploymentOrchestrator

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MASTER_ACCOUNT = "parent.testnet"
PUBLIC_KEY = "ed25519:8hSHprDq2StXwMtNd43wDTXQYsjXcD4MJTXQYsjXcc"
PRIVATE_KEY = "ed25519:3D4YudUahN1nawWogh8pAKSj92sUNMdbZGjn7kERKzYoTy8tnFQuwoGUC51DowKqorvkr2pytJSnwuSbsNVfqygr"


class FakeNetwork:
    """In-memory stand-in for the chain: accounts, code and init state"""

    def __init__(self):
        self.accounts: Dict[str, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.unreachable = False
        self._tx = 0

    def add_account(self, account_id: str, amount_near: float = 100, storage_usage: int = 500, locked: int = 0):
        self.accounts[account_id] = {
            "amount": near_to_yocto(amount_near),
            "locked": locked,
            "storage_usage": storage_usage,
            "code": None,
            "initialized": False,
        }

    def next_tx(self) -> str:
        self._tx += 1
        return f"tx{self._tx}"

    def check_reachable(self):
        if self.unreachable:
            raise NetworkError("RPC node unreachable")


class FakeAccount:
    """SigningAccount backed by FakeNetwork"""

    def __init__(self, network: FakeNetwork, credentials: AccountCredentials):
        self.network = network
        self.credentials = credentials
        self.account_id = credentials.account_id
        self.closed = False

    def _state(self) -> Dict[str, Any]:
        state = self.network.accounts.get(self.account_id)
        if state is None:
            raise RemoteError(f"Account {self.account_id} does not exist",
                              payload={"name": "AccountDoesNotExist"})
        return state

    async def deploy_contract(self, code: bytes) -> TransactionResult:
        self.network.check_reachable()
        self.network.calls.append(("deploy_contract", self.account_id, len(code)))
        state = self._state()
        if state["amount"] < near_to_yocto(1):
            raise RemoteError("LackBalanceForState", payload={"name": "LackBalanceForState"})
        state["code"] = code
        return TransactionResult(transaction_hash=self.network.next_tx(), status="success")

    async def function_call(self, contract_id: str, method_name: str, args: Dict[str, Any],
                            gas: int, deposit: int = 0) -> TransactionResult:
        self.network.check_reachable()
        self.network.calls.append(("function_call", contract_id, method_name, args, gas, deposit))
        contract = self.network.accounts.get(contract_id)
        if contract is None or contract["code"] is None:
            raise RemoteError("CodeDoesNotExist", payload={"name": "CodeDoesNotExist"})
        if method_name == "new":
            if contract["initialized"]:
                raise RemoteError(
                    "Smart contract panicked: Already initialized",
                    payload={"ActionError": {"kind": {"FunctionCallError": {
                        "ExecutionError": "Smart contract panicked: Already initialized"}}}},
                )
            contract["initialized"] = True
        return TransactionResult(transaction_hash=self.network.next_tx(), status="success")

    async def create_account(self, account_id: str, public_key: str, initial_balance: int) -> TransactionResult:
        self.network.check_reachable()
        self.network.calls.append(("create_account", account_id, public_key, initial_balance))
        if account_id in self.network.accounts:
            raise RemoteError(f"Account {account_id} already exists",
                              payload={"name": "AccountAlreadyExists"})
        state = self._state()
        if state["amount"] < initial_balance:
            raise RemoteError("Not enough balance", payload={"name": "NotEnoughBalance"})
        state["amount"] -= initial_balance
        self.network.accounts[account_id] = {
            "amount": initial_balance,
            "locked": 0,
            "storage_usage": 182,
            "code": None,
            "initialized": False,
        }
        return TransactionResult(transaction_hash=self.network.next_tx(), status="success")

    async def close(self):
        self.closed = True


class FakeRpc:
    """NearRpcClient stand-in reading FakeNetwork"""

    def __init__(self, network: FakeNetwork, storage_amount_per_byte: int = 10 ** 19):
        self.network = network
        self.storage_amount_per_byte = storage_amount_per_byte
        self.closed = False

    async def view_account(self, account_id: str) -> Dict[str, Any]:
        self.network.check_reachable()
        state = self.network.accounts.get(account_id)
        if state is None:
            raise RemoteError(
                f"UNKNOWN_ACCOUNT: account {account_id} does not exist while viewing",
                payload={"name": "HANDLER_ERROR", "cause": {"name": "UNKNOWN_ACCOUNT"}},
            )
        return {
            "amount": str(state["amount"]),
            "locked": str(state["locked"]),
            "storage_usage": state["storage_usage"],
            "code_hash": "11111111111111111111111111111111" if state["code"] is None else "E8jZ1giWcVrps8PcV75ATauu6gFRkcwjNtKp7NKmipZG",
        }

    async def view_access_keys(self, account_id: str) -> List[Dict[str, Any]]:
        await self.view_account(account_id)
        return [
            {"public_key": PUBLIC_KEY, "access_key": {"nonce": 1, "permission": "FullAccess"}},
            {"public_key": "ed25519:app", "access_key": {"nonce": 2, "permission": {
                "FunctionCall": {"allowance": "250000000000000000000000", "receiver_id": "market.testnet",
                                 "method_names": []}}}},
        ]

    async def protocol_config(self, finality: str = "final") -> Dict[str, Any]:
        self.network.check_reachable()
        return {"runtime_config": {"storage_amount_per_byte": str(self.storage_amount_per_byte)}}

    async def view_function(self, contract_id: str, method_name: str, args: Optional[Dict[str, Any]] = None) -> Any:
        self.network.check_reachable()
        self.network.calls.append(("view_function", contract_id, method_name, args))
        return {"spec": "nft-1.0.0", "name": "tokenized", "symbol": "TK"}

    async def close(self):
        self.closed = True


def write_key_file(base: Path, network_id: str, account_id: str) -> Path:
    path = base / network_id / f"{account_id}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({
        "account_id": account_id,
        "public_key": PUBLIC_KEY,
        "private_key": PRIVATE_KEY,
    }))
    return path


@pytest.fixture
def credentials_dir(tmp_path) -> Path:
    """Credential store holding a key for the master account"""
    base = tmp_path / "near-credentials"
    write_key_file(base, "testnet", MASTER_ACCOUNT)
    return base


@pytest.fixture
def artifact(tmp_path) -> Path:
    path = tmp_path / "tokenizedCard.wasm"
    path.write_bytes(b"\x00asm\x01\x00\x00\x00" + b"\x00" * 64)
    return path


@pytest.fixture
def deployer_config(credentials_dir) -> DeployerConfig:
    return DeployerConfig.from_dict({
        "account_id": MASTER_ACCOUNT,
        "network": {"network_id": "testnet"},
        "credentials": {"credentials_path": str(credentials_dir)},
    })


@pytest.fixture
def fake_network() -> FakeNetwork:
    network = FakeNetwork()
    network.add_account(MASTER_ACCOUNT, amount_near=100)
    return network


@pytest.fixture
def opened_accounts() -> List[FakeAccount]:
    return []


@pytest.fixture
def orchestrator(deployer_config, fake_network, opened_accounts) -> DeploymentOrchestrator:
    """Orchestrator wired to the in-memory network"""

    def account_factory(credentials: AccountCredentials, rpc_url: str) -> FakeAccount:
        account = FakeAccount(fake_network, credentials)
        opened_accounts.append(account)
        return account

    return DeploymentOrchestrator(
        deployer_config,
        account_factory=account_factory,
        rpc_factory=lambda network: FakeRpc(fake_network),
    )
