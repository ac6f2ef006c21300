import json

import pytest

import assetdeploy.utils.node_handler as node_handler
from assetdeploy.utils.artifacts import write_artifacts

BYTECODE = "0x6080604052348015600f57600080fd5b50"

STRING_CONSTRUCTOR_ABI = [
    {
        "inputs": [{"internalType": "string", "name": "uri", "type": "string"}],
        "stateMutability": "nonpayable",
        "type": "constructor",
    }
]


class FakeResponse:
    def __init__(self, body):
        self.body = body

    def json(self):
        return self.body


class FakeNode:
    """Answers JSON-RPC calls from a table of method -> result (or callable)."""

    def __init__(self, results=None):
        self.results = dict(results or {})
        self.calls = []

    def __call__(self, url, payload=None, headers=None):
        request = json.loads(payload)
        self.calls.append((url, request["method"], request["params"]))
        answer = self.results.get(request["method"])
        if answer is None and request["method"] not in self.results:
            return FakeResponse(
                {"id": 1, "jsonrpc": "2.0", "error": {"code": -32601, "message": "method not found"}}
            )
        if callable(answer):
            answer = answer(request["params"])
        if isinstance(answer, Exception):
            return FakeResponse({"id": 1, "jsonrpc": "2.0", "error": {"message": str(answer)}})
        return FakeResponse({"id": 1, "jsonrpc": "2.0", "result": answer})

    def methods(self):
        return [method for _, method, _ in self.calls]

    def params_of(self, method):
        return [params for _, called, params in self.calls if called == method]


@pytest.fixture
def fake_node(monkeypatch):
    node = FakeNode()
    monkeypatch.setattr(node_handler, "pull", node)
    return node


@pytest.fixture
def artifact():
    return {
        "_format": "hh-sol-artifact-1",
        "contractName": "BullieverseAssets",
        "sourceName": "contracts/BullieverseAssets.sol",
        "abi": STRING_CONSTRUCTOR_ABI,
        "bytecode": BYTECODE,
        "deployedBytecode": "0x6080",
        "linkReferences": {},
        "deployedLinkReferences": {},
    }


@pytest.fixture
def project_config(tmp_path):
    return {
        "default_network": "rinkeby",
        "networks": {
            "hardhat": {},
            "rinkeby": {
                "url": "https://rinkeby.example.org/v3/project",
                "accounts_env_var": "RINKEBY_PRIVATE_KEYS",
                "chain_id": 4,
                "live": True,
                "save_deployments": True,
            },
        },
        "solidity": {
            "version": "0.8.0",
            "settings": {"optimizer": {"enabled": True, "runs": 200}},
        },
        "paths": {
            "sources": str(tmp_path / "contracts"),
            "cache": str(tmp_path / "cache"),
            "artifacts": str(tmp_path / "artifacts"),
            "deployments": str(tmp_path / "deployments"),
        },
        "etherscan": {"api_key_env_var": "ETHERSCAN_API_KEY"},
        "test": {"timeout": 20000},
    }


@pytest.fixture
def written_artifact(project_config, artifact):
    """The BullieverseAssets artifact compiled into the project's artifacts dir."""
    write_artifacts(
        project_config["paths"]["artifacts"],
        {
            "contracts": {
                artifact["sourceName"]: {
                    "BullieverseAssets": {
                        "abi": artifact["abi"],
                        "evm": {
                            "bytecode": {"object": artifact["bytecode"][2:]},
                            "deployedBytecode": {"object": "6080"},
                        },
                    }
                }
            }
        },
    )
    return artifact
