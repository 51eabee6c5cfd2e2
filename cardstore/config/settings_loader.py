import os
import yaml
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Dict, Any, List, Mapping

from dotenv import load_dotenv

from ..core.exceptions import ConfigError
from ..core.models import InitArgs


NETWORK_PRESETS: Dict[str, Dict[str, Optional[str]]] = {
    "testnet": {
        "node_url": "https://rpc.testnet.near.org",
        "wallet_url": "https://wallet.testnet.near.org",
        "helper_url": "https://helper.testnet.near.org",
        "explorer_url": "https://explorer.testnet.near.org",
    },
    "mainnet": {
        "node_url": "https://rpc.mainnet.near.org",
        "wallet_url": "https://wallet.near.org",
        "helper_url": "https://helper.mainnet.near.org",
        "explorer_url": "https://explorer.near.org",
    },
    "localnet": {
        "node_url": "http://127.0.0.1:3030",
        "wallet_url": None,
        "helper_url": None,
        "explorer_url": None,
    },
}

# camelCase spellings accepted at the top level of a config record
_KEY_ALIASES = {
    "networkId": "network_id",
    "credentialsPath": "credentials_path",
    "rpcUrl": "rpc_url",
    "accountId": "account_id",
}

# 30 TGas, enough for init and simple change calls
DEFAULT_GAS = 30_000_000_000_000


def resolve_env_vars(value: Any) -> Any:
    """Substitute ``${VAR}`` / ``${VAR:default}`` placeholders recursively"""
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        env_var = value[2:-1]
        default_value = ""
        if ":" in env_var:
            env_var, default_value = env_var.split(":", 1)
        return os.getenv(env_var, default_value)
    elif isinstance(value, dict):
        return {k: resolve_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [resolve_env_vars(item) for item in value]
    return value


def as_bool(value: Any) -> bool:
    """Interpret a config flag that may arrive as a string"""
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("", "0", "false", "no", "off"):
            return False
        raise ValueError(f"Not a boolean: '{value}'")
    return bool(value)


@dataclass(frozen=True)
class NetworkConfig:
    """Network endpoints; fixed for the lifetime of the process"""
    network_id: str = "testnet"
    node_url: Optional[str] = None
    wallet_url: Optional[str] = None
    helper_url: Optional[str] = None
    explorer_url: Optional[str] = None
    timeout: float = 10.0

    def __post_init__(self):
        # ${VAR:default} placeholders resolve to strings
        object.__setattr__(self, "timeout", float(self.timeout))
        # Fill unset endpoints from the preset of the named network
        preset = NETWORK_PRESETS.get(self.network_id, {})
        for key, value in preset.items():
            if getattr(self, key) is None and value is not None:
                object.__setattr__(self, key, value)

    @property
    def rpc_url(self) -> Optional[str]:
        return self.node_url


@dataclass
class CredentialsConfig:
    """Location of the file-system credential store"""
    credentials_path: str = "~/.near-credentials"

    @property
    def resolved_path(self) -> Path:
        return Path(self.credentials_path).expanduser()


@dataclass
class ContractConfig:
    """Contract binding: method whitelist, init record and budgets"""
    contract_id: Optional[str] = None
    view_methods: List[str] = field(default_factory=lambda: [
        "nft_metadata",
        "nft_token",
        "nft_tokens",
        "nft_total_supply",
        "nft_tokens_for_owner",
        "nft_supply_for_owner",
    ])
    change_methods: List[str] = field(default_factory=lambda: [
        "new",
        "buy",
        "internal_add_token_to_owner",
        "internal_remove_token_from_owner",
    ])
    init_method: str = "new"
    init_args: InitArgs = field(default_factory=InitArgs)
    gas: int = DEFAULT_GAS
    init_deposit: int = 0

    def __post_init__(self):
        self.gas = int(self.gas)
        self.init_deposit = int(self.init_deposit)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ContractConfig':
        data = dict(data)
        init_args = data.pop('init_args', None)
        config = cls(**data)
        if init_args is not None:
            config.init_args = init_args if isinstance(init_args, InitArgs) else InitArgs(**init_args)
        return config


@dataclass
class DeploymentStepConfig:
    """One contract to ship as part of the deployment pipeline"""
    name: str
    artifact: str
    sub_account: Optional[str] = None
    initial_balance: float = 10
    initialize: bool = False

    def __post_init__(self):
        self.initial_balance = float(self.initial_balance)
        self.initialize = as_bool(self.initialize)


@dataclass
class DeploymentConfig:
    """Ordered deployment pipeline"""
    steps: List[DeploymentStepConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DeploymentConfig':
        steps = [DeploymentStepConfig(**step) for step in data.get('steps', [])]
        return cls(steps=steps)


@dataclass
class ApiConfig:
    """HTTP wrapper configuration"""
    host: str = "0.0.0.0"
    port: int = 3000

    def __post_init__(self):
        self.port = int(self.port)


@dataclass
class DeployerConfig:
    """Complete deployer configuration, passed explicitly to every component"""
    account_id: Optional[str]
    network: NetworkConfig
    credentials: CredentialsConfig
    contract: ContractConfig
    deployment: DeploymentConfig
    api: ApiConfig

    @property
    def network_id(self) -> str:
        return self.network.network_id

    @property
    def rpc_url(self) -> Optional[str]:
        return self.network.node_url

    @property
    def credentials_path(self) -> Path:
        return self.credentials.resolved_path

    @property
    def contract_id(self) -> Optional[str]:
        """Contract the proxy binds to; the master account unless overridden"""
        return self.contract.contract_id or self.account_id

    def require_account_id(self) -> str:
        if not self.account_id:
            raise ConfigError("No account id configured (set account_id or CONTRACT_NAME)")
        return self.account_id

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DeployerConfig':
        """Create DeployerConfig from dictionary"""
        data = resolve_env_vars({_KEY_ALIASES.get(k, k): v for k, v in (data or {}).items()})

        network_data = dict(data.get('network', {}))
        # Flat shorthand keys win over the nested sections
        if data.get('network_id'):
            network_data['network_id'] = data['network_id']
        if data.get('rpc_url'):
            network_data['node_url'] = data['rpc_url']

        credentials_data = dict(data.get('credentials', {}))
        if data.get('credentials_path'):
            credentials_data['credentials_path'] = data['credentials_path']

        try:
            return cls(
                account_id=data.get('account_id') or None,
                network=NetworkConfig(**network_data),
                credentials=CredentialsConfig(**credentials_data),
                contract=ContractConfig.from_dict(data.get('contract', {})),
                deployment=DeploymentConfig.from_dict(data.get('deployment', {})),
                api=ApiConfig(**data.get('api', {})),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid deployer configuration: {e}") from e

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'DeployerConfig':
        """Load DeployerConfig from YAML file"""
        path = Path(yaml_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {yaml_path}")

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        if data is not None and not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping: {yaml_path}")

        return cls.from_dict(data or {})

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 base: Optional['DeployerConfig'] = None) -> 'DeployerConfig':
        """
        Apply environment overrides on top of ``base`` (or the defaults).

        Recognised variables: NEAR_ACCOUNT_ID / CONTRACT_NAME,
        NEAR_NETWORK_ID / NODE_ENV, NEAR_RPC_URL, NEAR_CREDENTIALS_PATH.
        """
        if environ is None:
            load_dotenv(override=False)
            environ = os.environ
        config = base or cls.default()

        account_id = environ.get('NEAR_ACCOUNT_ID') or environ.get('CONTRACT_NAME')
        network_id = environ.get('NEAR_NETWORK_ID') or environ.get('NODE_ENV')
        rpc_url = environ.get('NEAR_RPC_URL')
        credentials_path = environ.get('NEAR_CREDENTIALS_PATH')

        network = config.network
        # NODE_ENV doubles as a generic runtime flag; only accept known networks from it
        if network_id and (network_id in NETWORK_PRESETS or environ.get('NEAR_NETWORK_ID')):
            if network_id != network.network_id:
                network = NetworkConfig(network_id=network_id, timeout=network.timeout)
        if rpc_url:
            network = replace(network, node_url=rpc_url)

        credentials = config.credentials
        if credentials_path:
            credentials = CredentialsConfig(credentials_path=credentials_path)

        return replace(
            config,
            account_id=account_id or config.account_id,
            network=network,
            credentials=credentials,
        )

    @classmethod
    def default(cls) -> 'DeployerConfig':
        """Return default configuration"""
        return cls(
            account_id=None,
            network=NetworkConfig(),
            credentials=CredentialsConfig(),
            contract=ContractConfig(),
            deployment=DeploymentConfig(),
            api=ApiConfig(),
        )

    def validate(self) -> List[str]:
        """Return a list of configuration issues (empty when valid)"""
        issues = []
        if not self.account_id:
            issues.append("account_id is not set")
        if not self.network.node_url:
            issues.append(f"No RPC url for network '{self.network.network_id}'")
        if self.contract.init_method not in self.contract.change_methods:
            issues.append(f"Init method '{self.contract.init_method}' is not a change method")
        overlap = set(self.contract.view_methods) & set(self.contract.change_methods)
        if overlap:
            issues.append(f"Methods listed as both view and change: {', '.join(sorted(overlap))}")

        seen = set()
        for step in self.deployment.steps:
            if step.name in seen:
                issues.append(f"Duplicate deployment step: {step.name}")
            seen.add(step.name)
            if not step.artifact:
                issues.append(f"Deployment step '{step.name}' has no artifact")
            if step.sub_account is not None and (not step.sub_account or "." in step.sub_account):
                issues.append(f"Deployment step '{step.name}' sub_account must be a single label")
            if step.initial_balance < 0:
                issues.append(f"Deployment step '{step.name}' has a negative initial balance")
        return issues


def load_deployer_config(config_path: Optional[str] = None,
                         environ: Optional[Mapping[str, str]] = None) -> DeployerConfig:
    """
    Build a fresh DeployerConfig.

    Reads ``config_path`` when given, otherwise the first existing file from
    the standard locations, otherwise the defaults. Environment variables are
    applied last.
    """
    if config_path:
        return DeployerConfig.from_env(environ, base=DeployerConfig.from_yaml(config_path))

    search_paths = [
        Path("./cardstore.yaml"),
        Path("./config/cardstore.yaml"),
        Path("~/.config/cardstore/cardstore.yaml").expanduser(),
    ]

    for path in search_paths:
        if path.exists():
            return DeployerConfig.from_env(environ, base=DeployerConfig.from_yaml(str(path)))

    return DeployerConfig.from_env(environ)
