from dataclasses import dataclass, field, asdict
from decimal import Decimal
from typing import Dict, List, Optional, Any, Union

YOCTO_PER_NEAR = 10 ** 24
# Storage staking price per byte (protocol default since genesis)
STORAGE_AMOUNT_PER_BYTE = 10 ** 19


def near_to_yocto(amount: Union[int, float, str, Decimal]) -> int:
    """Convert an amount expressed in NEAR to yoctoNEAR"""
    return int(Decimal(str(amount)) * YOCTO_PER_NEAR)


def yocto_to_near(amount: int) -> Decimal:
    return Decimal(amount) / YOCTO_PER_NEAR


def sub_account_id(new_id: str, parent_account_id: str) -> str:
    """Child account identifier: ``new_id`` prefixed onto the parent"""
    new_id = new_id.strip().strip(".")
    if not new_id:
        raise ValueError("Sub-account name must not be empty")
    if "." in new_id:
        raise ValueError(f"Sub-account name must be a single label, got '{new_id}'")
    return f"{new_id}.{parent_account_id}"


@dataclass(frozen=True)
class AccountCredentials:
    """Key material for one account as stored by the credential store"""
    account_id: str
    public_key: str
    private_key: str

    def __repr__(self) -> str:
        return f"AccountCredentials(account_id={self.account_id!r}, public_key={self.public_key!r})"


@dataclass
class AccountBalance:
    """Balance breakdown in yoctoNEAR"""
    total: int
    state_staked: int
    staked: int
    available: int

    @classmethod
    def from_account_view(cls, view: Dict[str, Any],
                          storage_amount_per_byte: int = STORAGE_AMOUNT_PER_BYTE) -> 'AccountBalance':
        """Build from a ``view_account`` query result"""
        amount = int(view.get("amount", 0))
        staked = int(view.get("locked", 0))
        state_staked = int(view.get("storage_usage", 0)) * storage_amount_per_byte
        total = amount + staked
        available = max(total - max(staked, state_staked), 0)
        return cls(total=total, state_staked=state_staked, staked=staked, available=available)

    def to_dict(self) -> Dict[str, str]:
        # Balances overflow JSON numbers, keep them as strings
        return {key: str(value) for key, value in asdict(self).items()}


@dataclass
class ContractMetadata:
    """NFT contract metadata passed to the init entry point"""
    spec: str = "nft-1.0.0"
    name: str = "tokenized"
    symbol: str = "TK"
    icon: Optional[str] = None
    base_uri: Optional[str] = None
    reference: Optional[str] = None
    reference_hash: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class InitArgs:
    """Parameter record of the one-time ``new`` entry point"""
    owner_id: Optional[str] = None
    metadata: ContractMetadata = field(default_factory=ContractMetadata)
    total_supply: int = 100
    cost_per_token: int = 1

    def __post_init__(self):
        if isinstance(self.metadata, dict):
            self.metadata = ContractMetadata(**self.metadata)

    def with_owner(self, owner_id: str) -> 'InitArgs':
        if self.owner_id:
            return self
        return InitArgs(
            owner_id=owner_id,
            metadata=self.metadata,
            total_supply=self.total_supply,
            cost_per_token=self.cost_per_token,
        )

    def to_args(self) -> Dict[str, Any]:
        if not self.owner_id:
            raise ValueError("InitArgs.owner_id is required")
        return {
            "owner_id": self.owner_id,
            "metadata": self.metadata.to_dict(),
            "total_supply": self.total_supply,
            "cost_per_token": self.cost_per_token,
        }


@dataclass
class TransactionResult:
    """Outcome of a signed transaction"""
    transaction_hash: Optional[str]
    status: str  # "success" | "failure"
    logs: List[str] = field(default_factory=list)
    outcome: Any = None
    failure: Any = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    @classmethod
    def from_outcome(cls, outcome: Any) -> 'TransactionResult':
        """
        Normalise a transaction outcome.

        Accepts either the raw RPC ``FinalExecutionOutcome`` dict or an SDK
        result object exposing ``status``, ``transaction`` and ``logs``.
        """
        if isinstance(outcome, dict):
            status = outcome.get("status") or {}
            tx = outcome.get("transaction") or {}
            tx_hash = tx.get("hash") if isinstance(tx, dict) else None
            logs = []
            for receipt in outcome.get("receipts_outcome", []):
                logs.extend(receipt.get("outcome", {}).get("logs", []))
        else:
            status = getattr(outcome, "status", None) or {}
            tx = getattr(outcome, "transaction", None)
            tx_hash = getattr(tx, "hash", None) if tx is not None else None
            logs = list(getattr(outcome, "logs", None) or [])

        failure = status.get("Failure") if isinstance(status, dict) else None
        return cls(
            transaction_hash=tx_hash,
            status="failure" if failure is not None else "success",
            logs=logs,
            outcome=outcome if isinstance(outcome, dict) else None,
            failure=failure,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transaction_hash": self.transaction_hash,
            "status": self.status,
            "logs": self.logs,
            "failure": self.failure,
        }
