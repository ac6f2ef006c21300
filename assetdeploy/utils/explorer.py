import json
import time

from .common import fetch, submit, load_env, get_paths
from .compiler import build_compiler_input, collect_sources, get_solc_long_version
from .constants import ETHERSCAN_API_URL, VERIFY_POLL_INTERVAL_SEC
from .contract_factory import get_constructor_abi
from .custom_exceptions import ExplorerError
from .custom_types import Config
from .encoder import encode_constructor_arguments
from .logger import logger

PENDING_STATUS = "Pending in queue"
ALREADY_VERIFIED = "already verified"


def get_api_key(config: Config) -> str:
    etherscan = config.get("etherscan") or {}
    api_key_env_var = etherscan.get("api_key_env_var")
    if api_key_env_var is None:
        raise ExplorerError('"etherscan.api_key_env_var" is not configured')
    return load_env(api_key_env_var, masked=True)


def get_api_url(config: Config) -> str:
    return (config.get("etherscan") or {}).get("api_url", ETHERSCAN_API_URL)


def _is_already_verified(result) -> bool:
    return ALREADY_VERIFIED in str(result).lower()


def build_verification_request(
    config: Config,
    address: str,
    artifact: dict,
    constructor_args: list,
    api_key: str,
) -> dict:
    """Form fields of an Etherscan "verifysourcecode" request."""
    sources = collect_sources(get_paths(config)["sources"])
    compiler_input = build_compiler_input(sources, config["solidity"].get("settings"))
    encoded_args = encode_constructor_arguments(
        get_constructor_abi(artifact["abi"]), constructor_args
    )

    return {
        "apikey": api_key,
        "module": "contract",
        "action": "verifysourcecode",
        "contractaddress": address,
        "sourceCode": json.dumps(compiler_input),
        "codeformat": "solidity-standard-json-input",
        "contractname": f'{artifact["sourceName"]}:{artifact["contractName"]}',
        "compilerversion": f"v{get_solc_long_version(config)}",
        # the misspelling is part of the Etherscan API
        "constructorArguements": encoded_args,
    }


def verify_contract(
    config: Config,
    chain_id: int,
    address: str,
    artifact: dict,
    constructor_args: list,
    poll_interval: float = VERIFY_POLL_INTERVAL_SEC,
) -> str:
    """
    Submit the project sources of a deployed contract for verification
    and wait for the explorer's verdict.

    Returns:
        The final verification status message

    Raises:
        ExplorerError: If the explorer rejects the submission or the verification fails
    """
    api_url = get_api_url(config)
    api_key = get_api_key(config)
    request = build_verification_request(
        config, address, artifact, constructor_args, api_key
    )

    logger.info(f"Submitting {request['contractname']} at {address} for verification")
    response = submit(api_url, data=request, params={"chainid": chain_id}).json()

    if response.get("status") != "1":
        if _is_already_verified(response.get("result")):
            logger.okay("Contract is already verified", address)
            return response["result"]
        raise ExplorerError(f'Received bad response: {response.get("result")}')

    guid = response["result"]
    logger.okay("Verification submitted", guid)

    while True:
        time.sleep(poll_interval)
        status = fetch(
            api_url,
            params={
                "chainid": chain_id,
                "apikey": api_key,
                "module": "contract",
                "action": "checkverifystatus",
                "guid": guid,
            },
        ).json()
        result = status.get("result")

        if result == PENDING_STATUS:
            logger.info("Verification is pending")
            continue

        if status.get("status") == "1" or _is_already_verified(result):
            logger.okay("Contract verified", address)
            return result

        raise ExplorerError(f"Verification failed: {result}")
