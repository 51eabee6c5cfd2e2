"""
File-system credential store.

Keys live at ``<base>/<network_id>/<account_id>.json`` as written by
``near login``::

    {"account_id": "...", "public_key": "ed25519:...", "private_key": "ed25519:..."}
"""
import json
import logging
import os
from pathlib import Path
from typing import List, Union

from ..core.exceptions import CredentialsError
from ..core.models import AccountCredentials


class FileSystemKeyStore:
    """Unencrypted key directory shared with near-cli"""

    def __init__(self, base_path: Union[str, Path]):
        self.base_path = Path(base_path).expanduser()
        self.logger = logging.getLogger(f"{__name__}.FileSystemKeyStore")

    def key_path(self, network_id: str, account_id: str) -> Path:
        return self.base_path / network_id / f"{account_id}.json"

    def get_credentials(self, network_id: str, account_id: str) -> AccountCredentials:
        path = self.key_path(network_id, account_id)
        if not path.is_file():
            raise CredentialsError(
                f"No key file for {account_id} on {network_id} at {path}",
                account_id=account_id,
                context={"path": str(path)},
            )

        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CredentialsError(
                f"Could not read key file {path}: {e}",
                account_id=account_id,
                context={"path": str(path)},
            ) from e

        private_key = data.get("private_key") or data.get("secret_key")
        public_key = data.get("public_key")
        if not private_key or not public_key:
            raise CredentialsError(
                f"Key file {path} lacks public_key/private_key",
                account_id=account_id,
                context={"path": str(path)},
            )

        stored_id = data.get("account_id") or account_id
        if stored_id != account_id:
            raise CredentialsError(
                f"Key file {path} belongs to {stored_id}, not {account_id}",
                account_id=account_id,
                context={"path": str(path), "stored_account_id": stored_id},
            )

        return AccountCredentials(
            account_id=account_id,
            public_key=public_key,
            private_key=private_key,
        )

    def has_credentials(self, network_id: str, account_id: str) -> bool:
        return self.key_path(network_id, account_id).is_file()

    def set_credentials(self, network_id: str, credentials: AccountCredentials) -> Path:
        """Write a key file for ``credentials.account_id``, readable by the owner only"""
        path = self.key_path(network_id, credentials.account_id)
        data = {
            "account_id": credentials.account_id,
            "public_key": credentials.public_key,
            "private_key": credentials.private_key,
        }
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w') as f:
                json.dump(data, f)
            os.chmod(path, 0o600)
        except OSError as e:
            raise CredentialsError(
                f"Could not write key file {path}: {e}",
                account_id=credentials.account_id,
                context={"path": str(path)},
            ) from e

        self.logger.info(f"Stored key for {credentials.account_id} at {path}")
        return path

    def list_accounts(self, network_id: str) -> List[str]:
        network_dir = self.base_path / network_id
        if not network_dir.is_dir():
            return []
        return sorted(p.stem for p in network_dir.glob("*.json"))
