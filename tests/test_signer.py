import pytest
from eth_account import Account

from assetdeploy.utils.signer import Signer, load_signers
from assetdeploy.utils.custom_exceptions import ConfigError

RPC_URL = "https://rinkeby.example.org/v3/project"
PRIVATE_KEY = "0x" + "4c" * 32
NODE_ACCOUNT = "0x5B38Da6a701c568545dCfcB03FcB875f56beddC4"


def test_local_signer_signs_raw_transaction(fake_node):
    fake_node.results.update(
        {
            "eth_gasPrice": hex(10**9),
            "eth_estimateGas": hex(100_000),
            "eth_getTransactionCount": "0x3",
            "eth_sendRawTransaction": "0xhash",
        }
    )
    address = Account.from_key(PRIVATE_KEY).address
    signer = Signer(address, RPC_URL, {"gas_multiplier": 1.5}, 4, PRIVATE_KEY)

    assert signer.send_transaction({"data": "0x6080"}) == "0xhash"

    (raw,) = fake_node.params_of("eth_sendRawTransaction")[0]
    assert Account.recover_transaction(raw) == address
    assert fake_node.params_of("eth_getTransactionCount") == [[address, "pending"]]


def test_gas_settings_from_network_config(fake_node):
    signer = Signer(NODE_ACCOUNT, RPC_URL, {"gas_price": 120000000000, "gas": 3000000}, 1)

    populated = signer.populate_transaction({"data": "0x6080", "nonce": 0})

    assert populated["gasPrice"] == 120000000000
    assert populated["gas"] == 3000000
    assert populated["chainId"] == 1
    assert "eth_gasPrice" not in fake_node.methods()
    assert "eth_estimateGas" not in fake_node.methods()


def test_gas_multiplier_applies_to_estimate(fake_node):
    fake_node.results["eth_estimateGas"] = hex(100_001)
    signer = Signer(NODE_ACCOUNT, RPC_URL, {"gas_multiplier": 2}, 4)

    assert signer.get_gas_limit({"data": "0x6080"}) == 200_002


def test_node_signer_uses_send_transaction(fake_node):
    fake_node.results.update(
        {
            "eth_gasPrice": "0x1",
            "eth_estimateGas": "0x5208",
            "eth_getTransactionCount": "0x0",
            "eth_sendTransaction": "0xhash",
        }
    )
    signer = Signer(NODE_ACCOUNT, RPC_URL, {}, 31337)

    assert signer.send_transaction({"data": "0x6080"}) == "0xhash"
    (transaction,) = fake_node.params_of("eth_sendTransaction")[0]
    assert transaction["from"] == NODE_ACCOUNT
    assert transaction["gas"] == "0x5208"
    assert transaction["data"] == "0x6080"


def test_keys_are_loaded_from_env(monkeypatch):
    other_key = "0x" + "5d" * 32
    monkeypatch.setenv("RINKEBY_PRIVATE_KEYS", f"{PRIVATE_KEY}, {other_key}")

    signers = load_signers(
        "rinkeby", {"accounts_env_var": "RINKEBY_PRIVATE_KEYS"}, RPC_URL, 4
    )

    assert [signer.address for signer in signers] == [
        Account.from_key(PRIVATE_KEY).address,
        Account.from_key(other_key).address,
    ]
    assert all(signer.is_local for signer in signers)


def test_invalid_key_raises(monkeypatch):
    monkeypatch.setenv("RINKEBY_PRIVATE_KEYS", "not-a-key")

    with pytest.raises(ConfigError, match="invalid private key"):
        load_signers("rinkeby", {"accounts_env_var": "RINKEBY_PRIVATE_KEYS"}, RPC_URL, 4)


def test_live_network_without_accounts_raises():
    with pytest.raises(ConfigError, match="no \"accounts_env_var\""):
        load_signers("mainnet", {}, RPC_URL, 1)


def test_hardhat_network_uses_node_accounts(fake_node):
    fake_node.results["eth_accounts"] = [NODE_ACCOUNT]

    (signer,) = load_signers("hardhat", {}, "http://127.0.0.1:8545", 31337)

    assert signer.address == NODE_ACCOUNT
    assert not signer.is_local
