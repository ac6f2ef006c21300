import json
import yaml
import pytest
from pathlib import Path

from assetdeploy.utils.common import (
    load_config,
    load_env,
    get_network_config,
    get_network_url,
    get_paths,
)
from assetdeploy.utils.constants import LOCAL_RPC_URL
from assetdeploy.utils.custom_exceptions import ConfigError

FIXTURES_DIR = Path(__file__).parent / "fixtures"

FULL_JSON_FIXTURE = FIXTURES_DIR / "full_config.json"
FULL_YAML_FIXTURE = FIXTURES_DIR / "full_config.yaml"

SAMPLE_CONFIG = {
    "default_network": "rinkeby",
    "networks": {
        "hardhat": {},
        "rinkeby": {
            "url": "https://rinkeby.example.org/v3/project",
            "accounts_env_var": "RINKEBY_PRIVATE_KEYS",
            "chain_id": 4,
        },
    },
    "solidity": {
        "version": "0.8.0",
        "settings": {"optimizer": {"enabled": True, "runs": 200}},
    },
}


def test_load_json_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(SAMPLE_CONFIG))
    assert load_config(str(path)) == SAMPLE_CONFIG


def test_load_yaml_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(SAMPLE_CONFIG))
    assert load_config(str(path)) == SAMPLE_CONFIG


def test_case_insensitive_extension(tmp_path):
    path = tmp_path / "config.YML"
    path.write_text(yaml.dump(SAMPLE_CONFIG))
    assert load_config(str(path)) == SAMPLE_CONFIG


def test_unsupported_extension_raises(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("")
    with pytest.raises(ValueError, match="Unsupported config file extension"):
        load_config(str(path))


def test_empty_yaml_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("# just a comment\n")
    with pytest.raises(ValueError, match="empty or contains only comments"):
        load_config(str(path))


def test_malformed_yaml_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("networks:\n  bad: [unterminated\n")
    with pytest.raises(yaml.YAMLError):
        load_config(str(path))


def test_literal_private_keys_are_rejected(tmp_path):
    config = json.loads(json.dumps(SAMPLE_CONFIG))
    config["networks"]["rinkeby"]["accounts"] = ["157fe16dc4a3"]
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config))
    with pytest.raises(ConfigError, match="accounts_env_var"):
        load_config(str(path))


def test_literal_explorer_api_key_is_rejected(tmp_path):
    config = dict(SAMPLE_CONFIG, etherscan={"apiKey": "EDIZBUAS4TG4"})
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config))
    with pytest.raises(ConfigError, match="api_key_env_var"):
        load_config(str(path))


def test_unquoted_compiler_version_raises(tmp_path):
    """YAML reads `version: 0.8` as a float."""
    path = tmp_path / "config.yaml"
    path.write_text(
        """\
networks:
  hardhat: {}
solidity:
  version: 0.8
"""
    )
    with pytest.raises(ConfigError, match="quote it"):
        load_config(str(path))


def test_non_integer_chain_id_raises(tmp_path):
    config = json.loads(json.dumps(SAMPLE_CONFIG))
    config["networks"]["rinkeby"]["chain_id"] = "4"
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config))
    with pytest.raises(ConfigError, match="chain_id must be an integer"):
        load_config(str(path))


@pytest.mark.parametrize("timeout", ["20000", 0, True])
def test_invalid_test_timeout_raises(tmp_path, timeout):
    config = dict(SAMPLE_CONFIG, test={"timeout": timeout})
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config))
    with pytest.raises(ConfigError, match="test.timeout must be a positive integer"):
        load_config(str(path))


def test_unknown_default_network_raises(tmp_path):
    config = dict(SAMPLE_CONFIG, default_network="ropsten")
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config))
    with pytest.raises(ConfigError, match="ropsten"):
        load_config(str(path))


def test_default_network_is_selected():
    name, network_config = get_network_config(SAMPLE_CONFIG, None)
    assert name == "rinkeby"
    assert network_config is SAMPLE_CONFIG["networks"]["rinkeby"]


def test_unknown_network_raises():
    with pytest.raises(ConfigError, match="not configured"):
        get_network_config(SAMPLE_CONFIG, "goerli")


def test_hardhat_network_falls_back_to_local_node():
    config = {"networks": {}, "solidity": {"version": "0.8.0"}}
    name, network_config = get_network_config(config, None)
    assert name == "hardhat"
    assert get_network_url(name, network_config) == LOCAL_RPC_URL


def test_network_url_is_passed_through():
    url = SAMPLE_CONFIG["networks"]["rinkeby"]["url"]
    assert get_network_url("rinkeby", SAMPLE_CONFIG["networks"]["rinkeby"]) == url


def test_network_url_from_env(monkeypatch):
    monkeypatch.setenv("RINKEBY_RPC_URL", "https://rinkeby.example.org/v3/secret")
    url = get_network_url("rinkeby", {"url_env_var": "RINKEBY_RPC_URL"})
    assert url == "https://rinkeby.example.org/v3/secret"


def test_network_without_url_raises():
    with pytest.raises(ConfigError, match="url_env_var"):
        get_network_url("mainnet", {})


def test_missing_required_env_raises(monkeypatch):
    monkeypatch.delenv("ASSETDEPLOY_MISSING", raising=False)
    with pytest.raises(ConfigError, match="ASSETDEPLOY_MISSING"):
        load_env("ASSETDEPLOY_MISSING")


def test_paths_default_and_override():
    paths = get_paths({"paths": {"artifacts": "./build"}})
    assert paths["artifacts"] == "./build"
    assert paths["sources"] == "./contracts"
    assert paths["deployments"] == "./deployments"


def test_full_fixtures_produce_identical_dicts():
    assert load_config(str(FULL_JSON_FIXTURE)) == load_config(str(FULL_YAML_FIXTURE))


def test_full_fixture_values_are_not_transformed():
    result = load_config(str(FULL_YAML_FIXTURE))

    assert result["networks"]["rinkeby"]["chain_id"] == 4
    assert result["networks"]["mainnet"]["gas_price"] == 120000000000
    assert result["solidity"]["version"] == "0.8.0"
    assert result["solidity"]["settings"]["optimizer"] == {"enabled": True, "runs": 200}
    assert result["test"]["timeout"] == 20000
