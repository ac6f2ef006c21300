import json

import pytest

from assetdeploy.utils.artifacts import clean, read_artifact, write_artifacts
from assetdeploy.utils.custom_exceptions import ArtifactError


def compiled(abi=None):
    return {
        "abi": abi or [],
        "evm": {
            "bytecode": {"object": "6080", "linkReferences": {}},
            "deployedBytecode": {"object": "60aa", "linkReferences": {}},
        },
    }


COMPILER_OUTPUT = {
    "contracts": {
        "contracts/BullieverseAssets.sol": {"BullieverseAssets": compiled()},
        "contracts/lib/Ownable.sol": {"Ownable": compiled()},
        "contracts/other/Ownable.sol": {"Ownable": compiled()},
    }
}


def test_write_and_read_artifact(tmp_path):
    artifacts_dir = str(tmp_path / "artifacts")

    assert write_artifacts(artifacts_dir, COMPILER_OUTPUT) == 3

    artifact = read_artifact(artifacts_dir, "BullieverseAssets")
    assert artifact["contractName"] == "BullieverseAssets"
    assert artifact["sourceName"] == "contracts/BullieverseAssets.sol"
    assert artifact["bytecode"] == "0x6080"
    assert artifact["deployedBytecode"] == "0x60aa"
    assert (
        tmp_path / "artifacts" / "contracts" / "BullieverseAssets.sol" / "BullieverseAssets.json"
    ).is_file()


def test_missing_artifact_raises(tmp_path):
    with pytest.raises(ArtifactError, match="did you compile"):
        read_artifact(str(tmp_path), "BullieverseAssets")


def test_ambiguous_name_raises(tmp_path):
    write_artifacts(str(tmp_path), COMPILER_OUTPUT)

    with pytest.raises(ArtifactError, match="fully qualified name"):
        read_artifact(str(tmp_path), "Ownable")


def test_fully_qualified_name(tmp_path):
    write_artifacts(str(tmp_path), COMPILER_OUTPUT)

    artifact = read_artifact(str(tmp_path), "contracts/lib/Ownable.sol:Ownable")

    assert artifact["sourceName"] == "contracts/lib/Ownable.sol"


def test_foreign_json_is_not_an_artifact(tmp_path):
    (tmp_path / "Token.json").write_text(json.dumps({"abi": []}))

    with pytest.raises(ArtifactError, match="not a contract artifact"):
        read_artifact(str(tmp_path), "Token")


def test_clean_removes_cache_and_artifacts(tmp_path):
    cache_dir = tmp_path / "cache"
    artifacts_dir = tmp_path / "artifacts"
    cache_dir.mkdir()
    write_artifacts(str(artifacts_dir), COMPILER_OUTPUT)

    clean(str(cache_dir), str(artifacts_dir))

    assert not cache_dir.exists()
    assert not artifacts_dir.exists()
