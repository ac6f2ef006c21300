from typing import TypedDict, NotRequired


class NetworkConfig(TypedDict):
    url: NotRequired[str]
    url_env_var: NotRequired[str]
    accounts_env_var: NotRequired[str]
    chain_id: NotRequired[int]
    gas_price: NotRequired[int | str]
    gas: NotRequired[int | str]
    gas_multiplier: NotRequired[float]
    live: NotRequired[bool]
    save_deployments: NotRequired[bool]
    tags: NotRequired[list[str]]
    timeout: NotRequired[int]


class OptimizerConfig(TypedDict):
    enabled: bool
    runs: int


class SoliditySettings(TypedDict):
    optimizer: NotRequired[OptimizerConfig]
    evmVersion: NotRequired[str]


class SolidityConfig(TypedDict):
    version: str
    settings: NotRequired[SoliditySettings]


class PathsConfig(TypedDict):
    sources: str
    cache: str
    artifacts: str
    deployments: str


class EtherscanConfig(TypedDict):
    api_key_env_var: NotRequired[str]
    api_url: NotRequired[str]


class TestConfig(TypedDict):
    timeout: int


class Config(TypedDict):
    default_network: NotRequired[str]
    networks: dict[str, NetworkConfig]
    solidity: SolidityConfig
    paths: NotRequired[PathsConfig]
    etherscan: NotRequired[EtherscanConfig]
    test: NotRequired[TestConfig]
