import math

from eth_account import Account

from .common import load_env
from .custom_exceptions import ConfigError
from .custom_types import NetworkConfig
from .logger import logger
from .node_handler import (
    estimate_gas,
    get_accounts,
    get_gas_price,
    get_transaction_count,
    send_raw_transaction,
    send_transaction,
)


class Signer:
    """
    An account able to send transactions on one network.

    Accounts backed by a private key sign locally and submit raw
    transactions. Accounts without a key are expected to be unlocked on
    the node (local development nodes) and are sent through
    eth_sendTransaction.
    """

    def __init__(
        self,
        address: str,
        rpc_url: str,
        network_config: NetworkConfig,
        chain_id: int,
        private_key: str | None = None,
    ):
        self.address = address
        self.rpc_url = rpc_url
        self.network_config = network_config
        self.chain_id = chain_id
        self._private_key = private_key

    @property
    def is_local(self) -> bool:
        return self._private_key is not None

    def __repr__(self):
        kind = "local" if self.is_local else "node"
        return f"<Signer {self.address} ({kind})>"

    def get_gas_price(self) -> int:
        gas_price = self.network_config.get("gas_price", "auto")
        if gas_price == "auto":
            return get_gas_price(self.rpc_url)
        return int(gas_price)

    def get_gas_limit(self, transaction: dict) -> int:
        gas = self.network_config.get("gas", "auto")
        if gas != "auto":
            return int(gas)

        estimated = estimate_gas(self.rpc_url, transaction)
        multiplier = self.network_config.get("gas_multiplier", 1)
        return math.ceil(estimated * multiplier)

    def populate_transaction(self, transaction: dict) -> dict:
        populated = {"from": self.address, **transaction}
        populated.setdefault("value", 0)
        if "gasPrice" not in populated:
            populated["gasPrice"] = self.get_gas_price()
        if "gas" not in populated:
            populated["gas"] = self.get_gas_limit(
                {key: _to_quantity(value) for key, value in populated.items()}
            )
        if "nonce" not in populated:
            populated["nonce"] = get_transaction_count(self.rpc_url, self.address)
        populated["chainId"] = self.chain_id
        return populated

    def send_transaction(self, transaction: dict) -> str:
        """
        Fill in the missing fields of a transaction and submit it.

        Returns:
            The transaction hash
        """
        populated = self.populate_transaction(transaction)
        logger.log(
            f'Transaction from {self.address}: nonce {populated["nonce"]}, '
            f'gas {populated["gas"]}, gas price {populated["gasPrice"]}'
        )

        if not self.is_local:
            return send_transaction(
                self.rpc_url,
                {key: _to_quantity(value) for key, value in populated.items()},
            )

        unsigned = {key: value for key, value in populated.items() if key != "from"}
        signed = Account.sign_transaction(unsigned, self._private_key)
        return send_raw_transaction(self.rpc_url, "0x" + bytes(signed.raw_transaction).hex())


def _to_quantity(value):
    return hex(value) if isinstance(value, int) and not isinstance(value, bool) else value


def load_signers(
    network_name: str, network_config: NetworkConfig, rpc_url: str, chain_id: int
) -> list[Signer]:
    """
    Accounts to deploy from: the private keys in the environment variable
    named by "accounts_env_var" (comma separated), or the node's unlocked
    accounts when the network has none configured.
    """
    accounts_env_var = network_config.get("accounts_env_var")

    if accounts_env_var is None:
        if network_config.get("live", network_name != "hardhat"):
            raise ConfigError(
                f'network "{network_name}" is live but has no "accounts_env_var"'
            )
        return [
            Signer(address, rpc_url, network_config, chain_id)
            for address in get_accounts(rpc_url)
        ]

    private_keys = [
        key.strip()
        for key in load_env(accounts_env_var, masked=True).split(",")
        if key.strip()
    ]
    if not private_keys:
        raise ConfigError(f"{accounts_env_var} does not contain any private key")

    signers = []
    for private_key in private_keys:
        try:
            account = Account.from_key(private_key)
        except (ValueError, TypeError) as e:
            raise ConfigError(f"{accounts_env_var} holds an invalid private key: {e}") from None
        signers.append(
            Signer(account.address, rpc_url, network_config, chain_id, private_key)
        )
    return signers
