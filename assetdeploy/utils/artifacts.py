import glob
import json
import os

from .constants import ARTIFACT_FORMAT
from .custom_exceptions import ArtifactError
from .helpers import create_dirs, remove_directory
from .logger import logger


def get_artifact_path(artifacts_dir: str, source_name: str, contract_name: str) -> str:
    return os.path.join(artifacts_dir, source_name, f"{contract_name}.json")


def build_artifact(source_name: str, contract_name: str, compiled_contract: dict) -> dict:
    bytecode = compiled_contract["evm"]["bytecode"]
    deployed_bytecode = compiled_contract["evm"]["deployedBytecode"]
    return {
        "_format": ARTIFACT_FORMAT,
        "contractName": contract_name,
        "sourceName": source_name,
        "abi": compiled_contract["abi"],
        "bytecode": "0x" + bytecode["object"],
        "deployedBytecode": "0x" + deployed_bytecode["object"],
        "linkReferences": bytecode.get("linkReferences", {}),
        "deployedLinkReferences": deployed_bytecode.get("linkReferences", {}),
    }


def write_artifacts(artifacts_dir: str, compiler_output: dict) -> int:
    """
    Write one artifact per compiled contract.

    Returns:
        The number of artifacts written
    """
    written = 0
    for source_name, contracts in compiler_output.get("contracts", {}).items():
        for contract_name, compiled_contract in contracts.items():
            artifact_path = get_artifact_path(artifacts_dir, source_name, contract_name)
            create_dirs(artifact_path)
            with open(artifact_path, mode="w") as artifact_file:
                json.dump(
                    build_artifact(source_name, contract_name, compiled_contract),
                    artifact_file,
                    indent=2,
                )
            logger.log(f"Artifact written: {artifact_path}")
            written += 1
    return written


def find_artifact_paths(artifacts_dir: str, name: str) -> list[str]:
    if ":" in name:
        source_name, contract_name = name.rsplit(":", 1)
        artifact_path = get_artifact_path(artifacts_dir, source_name, contract_name)
        return [artifact_path] if os.path.isfile(artifact_path) else []

    return sorted(
        glob.glob(os.path.join(artifacts_dir, "**", f"{name}.json"), recursive=True)
    )


def read_artifact(artifacts_dir: str, name: str) -> dict:
    """
    Resolve a contract artifact by its name or fully qualified name.

    Args:
        artifacts_dir: The artifacts directory
        name: "ContractName" or "contracts/File.sol:ContractName"

    Returns:
        The artifact dict

    Raises:
        ArtifactError: If there is no such artifact or the name is ambiguous
    """
    artifact_paths = find_artifact_paths(artifacts_dir, name)

    if not artifact_paths:
        raise ArtifactError(
            f'Artifact for contract "{name}" not found in "{artifacts_dir}", did you compile?'
        )

    if len(artifact_paths) > 1:
        candidates = ", ".join(
            f'{artifact["sourceName"]}:{artifact["contractName"]}'
            for artifact in map(_load_artifact, artifact_paths)
        )
        raise ArtifactError(
            f'Multiple artifacts for contract "{name}", use a fully qualified name: {candidates}'
        )

    return _load_artifact(artifact_paths[0])


def _load_artifact(artifact_path: str) -> dict:
    with open(artifact_path, mode="r") as artifact_file:
        artifact = json.load(artifact_file)

    if artifact.get("_format") != ARTIFACT_FORMAT:
        raise ArtifactError(f"{artifact_path} is not a contract artifact")

    return artifact


def clean(cache_dir: str, artifacts_dir: str) -> None:
    for directory in (cache_dir, artifacts_dir):
        if remove_directory(directory):
            logger.okay("Removed", directory)
