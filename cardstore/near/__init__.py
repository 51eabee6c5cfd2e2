"""
NEAR network boundary: credential store, JSON-RPC reads, signing account
and contract proxy.
"""

from .keystore import FileSystemKeyStore
from .rpc_client import NearRpcClient
from .account import AccountGateway, SigningAccount
from .contract import ContractProxy

__all__ = [
    'FileSystemKeyStore',
    'NearRpcClient',
    'AccountGateway',
    'SigningAccount',
    'ContractProxy',
]
