"""
Tests for deployer configuration loading.
"""
import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from cardstore.config.settings_loader import (
    DeployerConfig,
    DeploymentStepConfig,
    NetworkConfig,
    load_deployer_config,
    resolve_env_vars,
)
from cardstore.core.exceptions import ConfigError
from cardstore.core.models import InitArgs


class TestNetworkConfig:

    def test_testnet_preset(self):
        network = NetworkConfig()

        assert network.network_id == "testnet"
        assert network.rpc_url == "https://rpc.testnet.near.org"
        assert network.wallet_url == "https://wallet.testnet.near.org"

    def test_explicit_node_url_wins(self):
        network = NetworkConfig(network_id="mainnet", node_url="https://rpc.example.org")

        assert network.node_url == "https://rpc.example.org"
        assert network.explorer_url == "https://explorer.near.org"

    def test_unknown_network_has_no_endpoint(self):
        assert NetworkConfig(network_id="betanet").node_url is None


class TestDeployerConfig:

    def test_defaults(self):
        config = DeployerConfig.default()

        assert config.account_id is None
        assert config.network_id == "testnet"
        assert config.credentials_path == Path("~/.near-credentials").expanduser()
        assert config.contract.init_method == "new"
        assert config.contract.init_args == InitArgs()
        assert config.api.port == 3000
        assert "account_id is not set" in config.validate()

    def test_from_dict_with_camel_case_keys(self):
        config = DeployerConfig.from_dict({
            "accountId": "cards.testnet",
            "networkId": "mainnet",
            "credentialsPath": "/keys",
        })

        assert config.account_id == "cards.testnet"
        assert config.network_id == "mainnet"
        assert config.rpc_url == "https://rpc.mainnet.near.org"
        assert config.credentials_path == Path("/keys")
        assert config.contract_id == "cards.testnet"

    def test_from_dict_nested_sections(self):
        config = DeployerConfig.from_dict({
            "account_id": "cards.testnet",
            "network": {"network_id": "localnet", "timeout": 3},
            "contract": {
                "contract_id": "store.testnet",
                "init_args": {"total_supply": 20, "metadata": {"name": "cards", "symbol": "CRD"}},
            },
            "deployment": {"steps": [
                {"name": "tokenized_card", "artifact": "out/tokenizedCard.wasm", "initialize": True},
            ]},
        })

        assert config.rpc_url == "http://127.0.0.1:3030"
        assert config.network.timeout == 3
        assert config.contract_id == "store.testnet"
        assert config.contract.init_args.total_supply == 20
        assert config.contract.init_args.metadata.symbol == "CRD"
        assert config.contract.init_args.metadata.spec == "nft-1.0.0"
        assert config.deployment.steps[0].initialize is True

    def test_unknown_key_is_config_error(self):
        with pytest.raises(ConfigError):
            DeployerConfig.from_dict({"network": {"chain": "testnet"}})

    def test_env_placeholders(self):
        with patch.dict(os.environ, {"CONTRACT_NAME": "env.testnet"}):
            config = DeployerConfig.from_dict({"account_id": "${CONTRACT_NAME:fallback.testnet}"})
        assert config.account_id == "env.testnet"

        with patch.dict(os.environ, {}, clear=True):
            assert resolve_env_vars({"a": ["${MISSING:x}"]}) == {"a": ["x"]}

    def test_placeholders_coerced_to_field_types(self, tmp_path):
        path = tmp_path / "cardstore.yaml"
        path.write_text(
            "network:\n"
            "  timeout: ${NEAR_TIMEOUT:15}\n"
            "contract:\n"
            "  gas: ${NEAR_GAS:100000000000000}\n"
            "deployment:\n"
            "  steps:\n"
            "    - name: card_marketplace\n"
            "      artifact: out/cardMarketplace.wasm\n"
            "      sub_account: marketplace\n"
            "      initial_balance: ${MARKETPLACE_BALANCE:2.5}\n"
            "      initialize: ${MARKETPLACE_INIT:false}\n"
            "api:\n"
            "  port: ${PORT:3000}\n"
        )

        with patch.dict(os.environ, {"PORT": "8080"}):
            config = DeployerConfig.from_yaml(str(path))

        assert config.network.timeout == 15.0
        assert isinstance(config.network.timeout, float)
        assert config.contract.gas == 100_000_000_000_000
        assert config.deployment.steps[0].initial_balance == 2.5
        assert config.deployment.steps[0].initialize is False
        assert config.api.port == 8080

    def test_non_numeric_placeholder_is_config_error(self):
        with patch.dict(os.environ, {"PORT": "http"}):
            with pytest.raises(ConfigError):
                DeployerConfig.from_dict({"api": {"port": "${PORT:3000}"}})

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "cardstore.yaml"
        path.write_text(yaml.safe_dump({"account_id": "cards.testnet", "api": {"port": 8080}}))

        config = DeployerConfig.from_yaml(str(path))

        assert config.account_id == "cards.testnet"
        assert config.api.port == 8080

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            DeployerConfig.from_yaml(str(tmp_path / "nope.yaml"))

    def test_from_yaml_not_a_mapping(self, tmp_path):
        path = tmp_path / "cardstore.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigError):
            DeployerConfig.from_yaml(str(path))

    def test_env_overrides(self):
        config = DeployerConfig.from_env({
            "CONTRACT_NAME": "cards.testnet",
            "NODE_ENV": "mainnet",
            "NEAR_CREDENTIALS_PATH": "/keys",
        })

        assert config.account_id == "cards.testnet"
        assert config.network_id == "mainnet"
        assert config.rpc_url == "https://rpc.mainnet.near.org"
        assert config.credentials_path == Path("/keys")

    def test_node_env_ignored_when_not_a_network(self):
        config = DeployerConfig.from_env({"NODE_ENV": "development"})

        assert config.network_id == "testnet"

    def test_rpc_url_override_keeps_network(self):
        base = DeployerConfig.from_dict({"account_id": "cards.testnet"})

        config = DeployerConfig.from_env({"NEAR_RPC_URL": "https://archival-rpc.testnet.near.org"}, base=base)

        assert config.network_id == "testnet"
        assert config.rpc_url == "https://archival-rpc.testnet.near.org"
        assert config.account_id == "cards.testnet"

    def test_validate_flags_bad_steps(self):
        config = DeployerConfig.from_dict({"account_id": "cards.testnet"})
        config.deployment.steps = [
            DeploymentStepConfig(name="a", artifact="a.wasm", sub_account="x.y"),
            DeploymentStepConfig(name="a", artifact="", initial_balance=-1),
        ]
        config.contract.view_methods.append("buy")

        issues = config.validate()

        assert len(issues) == 5
        assert any("single label" in i for i in issues)
        assert any("Duplicate" in i for i in issues)
        assert any("both view and change" in i for i in issues)

    def test_require_account_id(self):
        with pytest.raises(ConfigError):
            DeployerConfig.default().require_account_id()


class TestLoadDeployerConfig:

    def test_explicit_path_then_env(self, tmp_path):
        path = tmp_path / "cardstore.yaml"
        path.write_text(yaml.safe_dump({"account_id": "file.testnet", "network": {"network_id": "testnet"}}))

        config = load_deployer_config(str(path), environ={"NEAR_ACCOUNT_ID": "env.testnet"})

        assert config.account_id == "env.testnet"

    def test_search_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "cardstore.yaml").write_text("account_id: found.testnet\n")

        config = load_deployer_config(environ={})

        assert config.account_id == "found.testnet"

    def test_fresh_instance_per_call(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        first = load_deployer_config(environ={})
        second = load_deployer_config(environ={"CONTRACT_NAME": "other.testnet"})

        assert first is not second
        assert first.account_id is None
        assert second.account_id == "other.testnet"
