import json
import os

import requests
import yaml

from .constants import DEFAULT_NETWORK, DEFAULT_PATHS, LOCAL_RPC_URL, RPC_TIMEOUT_SEC
from .logger import logger
from .custom_types import Config, NetworkConfig, PathsConfig
from .custom_exceptions import ConfigError, NodeError, ExplorerError

# Keys that must never hold literal secrets, mapped to the key to use instead
SECRET_KEYS = {
    "accounts": "accounts_env_var",
    "api_key": "api_key_env_var",
    "apiKey": "api_key_env_var",
}


def load_env(variable_name, required=True, masked=False):
    value = os.getenv(variable_name, default=None)

    if required and not value:
        logger.error("Env not found", variable_name)
        raise ConfigError(f"environment variable {variable_name} is not set")

    printable_value = mask_text(value) if masked and value is not None else value

    if printable_value:
        logger.okay(f"{variable_name}", printable_value)
    else:
        logger.info(f"{variable_name} var is not set")

    return value


def load_config(path: str) -> Config:
    extension = os.path.splitext(path)[1].lower()

    with open(path, mode="r") as config_file:
        if extension == ".json":
            config = json.load(config_file)
        elif extension in (".yaml", ".yml"):
            config = yaml.safe_load(config_file)
            if config is None:
                raise ValueError(
                    f"Config file {path} is empty or contains only comments"
                )
        else:
            raise ValueError(f"Unsupported config file extension: {extension}")

    validate_config(config)
    return config


def validate_config(config: Config) -> None:
    """
    Check a loaded config for values the deployment cannot work with.

    Secrets are rejected outright: private keys and API keys have to be
    supplied through environment variables named in the config.
    """
    networks = config.get("networks")
    if not isinstance(networks, dict):
        raise ConfigError('"networks" must be a mapping of network names')

    for network_name, network_config in networks.items():
        network_config = network_config or {}
        _check_no_literal_secrets(network_config, f"networks.{network_name}")
        chain_id = network_config.get("chain_id")
        if chain_id is not None and (
            isinstance(chain_id, bool) or not isinstance(chain_id, int)
        ):
            raise ConfigError(
                f"networks.{network_name}.chain_id must be an integer, got {chain_id!r}"
            )

    default_network = config.get("default_network")
    if default_network is not None and default_network not in networks:
        raise ConfigError(f'default network "{default_network}" is not configured')

    solidity = config.get("solidity")
    if not isinstance(solidity, dict) or "version" not in solidity:
        raise ConfigError('"solidity.version" is required')
    if not isinstance(solidity["version"], str):
        # YAML reads an unquoted 0.8 as a float
        raise ConfigError(
            f'solidity.version must be a string, got {solidity["version"]!r}; quote it'
        )

    optimizer = (solidity.get("settings") or {}).get("optimizer") or {}
    runs = optimizer.get("runs")
    if runs is not None and (isinstance(runs, bool) or not isinstance(runs, int)):
        raise ConfigError(
            f"solidity.settings.optimizer.runs must be an integer, got {runs!r}"
        )

    _check_no_literal_secrets(config.get("etherscan") or {}, "etherscan")

    timeout = (config.get("test") or {}).get("timeout")
    if timeout is not None and (
        isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0
    ):
        raise ConfigError(
            f"test.timeout must be a positive integer (ms), got {timeout!r}"
        )


def _check_no_literal_secrets(section: dict, section_path: str) -> None:
    for key, replacement in SECRET_KEYS.items():
        if key in section:
            raise ConfigError(
                f'{section_path}.{key} holds a literal secret; put it in an environment '
                f'variable and reference it with "{replacement}"'
            )


def get_network_config(config: Config, network_name: str | None) -> tuple[str, NetworkConfig]:
    """
    Select a network from the config.

    Args:
        config: Loaded config
        network_name: Requested network or None for the default one

    Returns:
        The network name and its config exactly as written in the config file

    Raises:
        ConfigError: If the network is not configured
    """
    name = network_name or config.get("default_network") or DEFAULT_NETWORK
    networks = config["networks"]

    if name not in networks:
        if name == DEFAULT_NETWORK:
            return name, {}
        raise ConfigError(
            f'network "{name}" is not configured, available: {", ".join(networks)}'
        )

    return name, networks[name] or {}


def get_network_url(network_name: str, network_config: NetworkConfig) -> str:
    if "url" in network_config:
        return network_config["url"]

    url_env_var = network_config.get("url_env_var")
    if url_env_var is not None:
        return load_env(url_env_var, masked=True)

    if network_name == DEFAULT_NETWORK:
        return LOCAL_RPC_URL

    raise ConfigError(f'network "{network_name}" has neither "url" nor "url_env_var"')


def get_paths(config: Config) -> PathsConfig:
    paths = dict(DEFAULT_PATHS)
    paths.update(config.get("paths") or {})
    return paths


def _handle_request_errors(error_class):
    """Decorator to handle common HTTP request errors and convert them to custom exceptions."""

    def decorator(func):
        def wrapper(*args, **kwargs):
            try:
                response = func(*args, **kwargs)
                response.raise_for_status()
                return response
            except requests.exceptions.HTTPError as http_err:
                raise error_class(f"HTTP error occurred: {http_err}")
            except requests.exceptions.ConnectionError as conn_err:
                raise error_class(f"Connection error occurred: {conn_err}")
            except requests.exceptions.Timeout as timeout_err:
                raise error_class(f"Timeout error occurred: {timeout_err}")
            except requests.exceptions.RequestException as req_err:
                raise error_class(f"Request exception occurred: {req_err}")

        return wrapper

    return decorator


@_handle_request_errors(ExplorerError)
def fetch(url, params=None, headers=None):
    logger.log(f"Fetch: {mask_text(url)}")
    return requests.get(url, params=params, headers=headers, timeout=RPC_TIMEOUT_SEC)


@_handle_request_errors(ExplorerError)
def submit(url, data=None, params=None):
    logger.log(f"Submit: {mask_text(url)}")
    return requests.post(url, data=data, params=params, timeout=RPC_TIMEOUT_SEC)


@_handle_request_errors(NodeError)
def pull(url, payload=None, headers=None):
    logger.log(f"Pull: {mask_text(url)}")
    return requests.post(url, data=payload, headers=headers, timeout=RPC_TIMEOUT_SEC)


def mask_text(text, mask_start=3, mask_end=3):
    text_length = len(text)
    mask = "*" * max(text_length - mask_start - mask_end, 0)
    return text[:mask_start] + mask + text[max(text_length - mask_end, mask_start) :]
