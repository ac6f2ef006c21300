import os

from .utils.artifacts import read_artifact
from .utils.common import get_network_config, get_network_url, get_paths, load_config
from .utils.constants import CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH, NETWORK_ENV_VAR
from .utils.contract_factory import ContractFactory
from .utils.custom_exceptions import NodeError
from .utils.custom_types import Config, NetworkConfig
from .utils.deployments import save_deployment
from .utils.logger import logger
from .utils.node_handler import get_chain_id
from .utils.signer import load_signers


class Network:
    def __init__(self, name: str, config: NetworkConfig):
        self.name = name
        self.config = config
        self._url = None

    @property
    def url(self) -> str:
        if self._url is None:
            self._url = get_network_url(self.name, self.config)
        return self._url

    @property
    def live(self) -> bool:
        return self.config.get("live", self.name != "hardhat")

    def __repr__(self):
        return f"<Network {self.name}>"


class Runtime:
    """
    Everything a deployment script needs: the loaded config, the selected
    network and access to contract factories and signers.

    The node is contacted lazily, on the first call that needs it.
    """

    def __init__(self, config: Config, network_name: str | None = None):
        self.config = config
        self.paths = get_paths(config)
        self.network = Network(*get_network_config(config, network_name))
        self._chain_id = None
        self._signers = None

    @property
    def chain_id(self) -> int:
        if self._chain_id is None:
            chain_id = get_chain_id(self.network.url)
            expected_chain_id = self.network.config.get("chain_id")
            if expected_chain_id is not None and chain_id != expected_chain_id:
                raise NodeError(
                    f'network "{self.network.name}" is configured with chain ID '
                    f"{expected_chain_id} but the node reports {chain_id}"
                )
            self._chain_id = chain_id
        return self._chain_id

    def get_signers(self):
        if self._signers is None:
            self._signers = load_signers(
                self.network.name, self.network.config, self.network.url, self.chain_id
            )
        return self._signers

    def get_artifact(self, name: str) -> dict:
        return read_artifact(self.paths["artifacts"], name)

    def get_contract_factory(self, name: str, signer=None) -> ContractFactory:
        """
        Resolve a compiled contract by name to a factory bound to a signer
        (the first account of the network by default).
        """
        artifact = self.get_artifact(name)
        return ContractFactory.from_artifact(artifact, signer or self.get_signers()[0])

    def save_deployment(self, contract) -> str | None:
        if not self.network.config.get("save_deployments", False):
            return None
        return save_deployment(
            self.paths["deployments"], self.network.name, self.chain_id, contract
        )


def get_runtime() -> Runtime:
    """Runtime for the config and network named in the environment."""
    config_path = os.getenv(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)
    network_name = os.getenv(NETWORK_ENV_VAR)
    logger.info("Config", config_path)
    return Runtime(load_config(config_path), network_name)
