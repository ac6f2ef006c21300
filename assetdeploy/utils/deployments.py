import json
import os

from .helpers import create_dirs
from .logger import logger


def save_deployment(
    deployments_dir: str, network_name: str, chain_id: int, contract
) -> str:
    """
    Record a confirmed deployment as deployments/<network>/<Contract>.json.

    Args:
        deployments_dir: The deployments directory
        network_name: Network the contract was deployed to
        chain_id: Chain ID of that network
        contract: A confirmed DeployedContract

    Returns:
        The path of the written record
    """
    network_dir = os.path.join(deployments_dir, network_name)
    record_path = os.path.join(network_dir, f"{contract.contract_name}.json")
    create_dirs(record_path)

    with open(os.path.join(network_dir, ".chainId"), mode="w") as chain_id_file:
        chain_id_file.write(str(chain_id))

    record = {
        "address": contract.address,
        "abi": contract.abi,
        "transactionHash": contract.deploy_transaction_hash,
        "receipt": {
            "from": contract.receipt.get("from"),
            "blockNumber": contract.block_number,
            "gasUsed": contract.gas_used,
        },
        "args": list(contract.constructor_args),
        "chainId": chain_id,
    }
    with open(record_path, mode="w") as record_file:
        json.dump(record, record_file, indent=2)

    logger.okay("Deployment saved", record_path)
    return record_path


def load_deployment(deployments_dir: str, network_name: str, contract_name: str) -> dict | None:
    record_path = os.path.join(deployments_dir, network_name, f"{contract_name}.json")
    if not os.path.isfile(record_path):
        return None
    with open(record_path, mode="r") as record_file:
        return json.load(record_file)
