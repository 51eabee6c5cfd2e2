import json
import os
import stat

import pytest

from cardstore.core.exceptions import CredentialsError
from cardstore.core.models import AccountCredentials
from cardstore.near.keystore import FileSystemKeyStore
from conftest import MASTER_ACCOUNT, PUBLIC_KEY, PRIVATE_KEY, write_key_file


def test_get_credentials(credentials_dir):
    store = FileSystemKeyStore(credentials_dir)

    credentials = store.get_credentials("testnet", MASTER_ACCOUNT)

    assert credentials.account_id == MASTER_ACCOUNT
    assert credentials.public_key == PUBLIC_KEY
    assert credentials.private_key == PRIVATE_KEY
    assert PRIVATE_KEY not in repr(credentials)


def test_missing_key_file(credentials_dir):
    store = FileSystemKeyStore(credentials_dir)

    with pytest.raises(CredentialsError) as exc_info:
        store.get_credentials("mainnet", MASTER_ACCOUNT)

    assert isinstance(exc_info.value, IOError)
    assert exc_info.value.account_id == MASTER_ACCOUNT


def test_malformed_key_file(credentials_dir):
    path = credentials_dir / "testnet" / "broken.testnet.json"
    path.write_text("{not json")

    with pytest.raises(CredentialsError):
        FileSystemKeyStore(credentials_dir).get_credentials("testnet", "broken.testnet")


def test_key_file_without_private_key(credentials_dir):
    path = credentials_dir / "testnet" / "public.testnet.json"
    path.write_text(json.dumps({"account_id": "public.testnet", "public_key": PUBLIC_KEY}))

    with pytest.raises(CredentialsError):
        FileSystemKeyStore(credentials_dir).get_credentials("testnet", "public.testnet")


def test_secret_key_spelling(credentials_dir):
    path = credentials_dir / "testnet" / "legacy.testnet.json"
    path.write_text(json.dumps({"public_key": PUBLIC_KEY, "secret_key": PRIVATE_KEY}))

    credentials = FileSystemKeyStore(credentials_dir).get_credentials("testnet", "legacy.testnet")

    assert credentials.account_id == "legacy.testnet"
    assert credentials.private_key == PRIVATE_KEY


def test_list_accounts(credentials_dir):
    write_key_file(credentials_dir, "testnet", "alice.testnet")
    store = FileSystemKeyStore(credentials_dir)

    assert store.list_accounts("testnet") == ["alice.testnet", MASTER_ACCOUNT]
    assert store.list_accounts("mainnet") == []


def test_key_file_for_another_account(credentials_dir):
    path = credentials_dir / "testnet" / "cards.testnet.json"
    path.write_text(json.dumps({
        "account_id": "other.testnet",
        "public_key": PUBLIC_KEY,
        "private_key": PRIVATE_KEY,
    }))

    with pytest.raises(CredentialsError) as exc_info:
        FileSystemKeyStore(credentials_dir).get_credentials("testnet", "cards.testnet")

    assert exc_info.value.context["stored_account_id"] == "other.testnet"


def test_set_credentials(tmp_path):
    store = FileSystemKeyStore(tmp_path / "keys")
    credentials = AccountCredentials("marketplace.parent.testnet", PUBLIC_KEY, PRIVATE_KEY)

    path = store.set_credentials("testnet", credentials)

    assert path == tmp_path / "keys" / "testnet" / "marketplace.parent.testnet.json"
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o600
    assert store.has_credentials("testnet", "marketplace.parent.testnet")
    assert store.get_credentials("testnet", "marketplace.parent.testnet") == credentials
