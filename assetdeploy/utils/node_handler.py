import json

from .common import pull, mask_text
from .logger import logger
from .custom_exceptions import NodeError

JSON_HEADERS = {"Content-Type": "application/json"}


def rpc_call(rpc_url: str, method: str, params: list | None = None):
    """
    Call a JSON-RPC method on a node.

    Args:
        rpc_url: The RPC URL
        method: JSON-RPC method name
        params: Positional method parameters

    Returns:
        The "result" member of the response

    Raises:
        NodeError: If the node answers with an error or a malformed response
    """
    payload = json.dumps(
        {"id": 1, "jsonrpc": "2.0", "method": method, "params": params or []}
    )
    response = pull(rpc_url, payload, JSON_HEADERS).json()

    if "error" in response:
        error = response["error"]
        message = error.get("message", error) if isinstance(error, dict) else error
        raise NodeError(f"{method} failed: {message}")

    if "result" not in response:
        raise NodeError(f"Received bad response to {method}: {response}")

    return response["result"]


def get_chain_id(rpc_url: str) -> int:
    logger.info(f'Receiving the chain ID from "{mask_text(rpc_url)}" ...')
    chain_id = int(rpc_call(rpc_url, "eth_chainId"), 16)
    logger.okay("Chain ID was successfully received", chain_id)
    return chain_id


def get_accounts(rpc_url: str) -> list[str]:
    """Accounts the node holds unlocked (local development nodes)."""
    accounts = rpc_call(rpc_url, "eth_accounts")
    if not accounts:
        raise NodeError("The node has no unlocked accounts")
    return accounts


def get_gas_price(rpc_url: str) -> int:
    return int(rpc_call(rpc_url, "eth_gasPrice"), 16)


def get_transaction_count(rpc_url: str, address: str) -> int:
    return int(rpc_call(rpc_url, "eth_getTransactionCount", [address, "pending"]), 16)


def estimate_gas(rpc_url: str, transaction: dict) -> int:
    return int(rpc_call(rpc_url, "eth_estimateGas", [transaction]), 16)


def send_transaction(rpc_url: str, transaction: dict) -> str:
    """Submit a transaction signed by the node itself. Returns the tx hash."""
    logger.info(f'Sending transaction to "{mask_text(rpc_url)}" ...')
    return rpc_call(rpc_url, "eth_sendTransaction", [transaction])


def send_raw_transaction(rpc_url: str, raw_transaction: str) -> str:
    """Submit a locally signed transaction. Returns the tx hash."""
    logger.info(f'Sending signed transaction to "{mask_text(rpc_url)}" ...')
    return rpc_call(rpc_url, "eth_sendRawTransaction", [raw_transaction])


def get_transaction_receipt(rpc_url: str, tx_hash: str) -> dict | None:
    """The transaction receipt, or None while the transaction is pending."""
    return rpc_call(rpc_url, "eth_getTransactionReceipt", [tx_hash])


def get_code(rpc_url: str, address: str) -> str:
    return rpc_call(rpc_url, "eth_getCode", [address, "latest"])
