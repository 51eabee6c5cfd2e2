from fastapi import HTTPException

from ..core.exceptions import (
    ArtifactError,
    ConfigError,
    CredentialsError,
    DeployerError,
    MethodNotAllowedError,
    NetworkError,
    RemoteError,
)


def to_http_exception(exc: Exception) -> HTTPException:
    """Translate a deployer error into the HTTP error returned to the caller"""
    if isinstance(exc, RemoteError):
        return HTTPException(status_code=400, detail=exc.to_dict())
    if isinstance(exc, MethodNotAllowedError):
        return HTTPException(status_code=403, detail=exc.to_dict())
    if isinstance(exc, NetworkError):
        return HTTPException(status_code=502, detail=exc.to_dict())
    if isinstance(exc, (ArtifactError, CredentialsError, ConfigError)):
        return HTTPException(status_code=500, detail=exc.to_dict())
    if isinstance(exc, DeployerError):
        return HTTPException(status_code=500, detail=exc.to_dict())
    if isinstance(exc, ValueError):
        return HTTPException(status_code=400, detail=str(exc))
    return HTTPException(status_code=500, detail=f"Unexpected error: {exc}")
