"""
CardStore deployer - ship, initialize and administer NEAR contracts

Main modules:
- core: Data models and error kinds
- config: Deployer configuration loading and validation
- near: Credential store, RPC client, signing account and contract proxy
- deployment: Orchestrator operations and the deployment pipeline
- api: HTTP wrapper
- cli: Command line interface
"""

from .core.exceptions import (
    DeployerError,
    ConfigError,
    ArtifactError,
    CredentialsError,
    NetworkError,
    RemoteError,
    MethodNotAllowedError,
)
from .core.models import AccountBalance, InitArgs, ContractMetadata, TransactionResult
from .config.settings_loader import DeployerConfig, load_deployer_config
from .deployment.orchestrator import DeploymentOrchestrator
from .deployment.pipeline import DeploymentPipeline
from .deployment.models import StepResult, StepStatus, PipelineResult

__version__ = "1.0.0"
__all__ = [
    'DeployerError',
    'ConfigError',
    'ArtifactError',
    'CredentialsError',
    'NetworkError',
    'RemoteError',
    'MethodNotAllowedError',
    'AccountBalance',
    'InitArgs',
    'ContractMetadata',
    'TransactionResult',
    'DeployerConfig',
    'load_deployer_config',
    'DeploymentOrchestrator',
    'DeploymentPipeline',
    'StepResult',
    'StepStatus',
    'PipelineResult',
]
