"""
Error kinds raised by the deployer.

Local failures (artifact or key file) are IOError subclasses so callers that
only care about "something on disk is wrong" can catch them as such.
"""
from typing import Optional, Dict, Any


class DeployerError(Exception):
    """Base class for all deployer errors"""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "context": self.context,
        }


class ConfigError(DeployerError, ValueError):
    """Invalid or incomplete deployer configuration"""


class ArtifactError(DeployerError, IOError):
    """Deployment artifact is missing or unreadable"""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.path = path
        if path is not None:
            self.context.setdefault("path", path)


class CredentialsError(DeployerError, IOError):
    """Key file for an account is missing or malformed"""

    def __init__(self, message: str, account_id: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.account_id = account_id
        if account_id is not None:
            self.context.setdefault("account_id", account_id)


class NetworkError(DeployerError):
    """Transport failure or timeout talking to the RPC node"""


class RemoteError(DeployerError):
    """The network explicitly rejected a request.

    ``payload`` holds whatever the service returned (RPC error object or
    transaction failure) so callers can report it verbatim.
    """

    def __init__(self, message: str, payload: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.payload = payload

    @property
    def cause(self) -> Optional[str]:
        """Service error name, e.g. ``UNKNOWN_ACCOUNT``"""
        if isinstance(self.payload, dict):
            cause = self.payload.get("cause")
            if isinstance(cause, dict):
                return cause.get("name")
            return self.payload.get("name")
        return None

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["payload"] = self.payload
        return result


class MethodNotAllowedError(DeployerError):
    """Entry point is not part of a contract proxy's whitelist"""

    def __init__(self, method: str, contract_id: str, kind: str = "method"):
        super().__init__(
            f"'{method}' is not an allowed {kind} of contract {contract_id}",
            context={"method": method, "contract_id": contract_id},
        )
        self.method = method
        self.contract_id = contract_id
