import time

from eth_utils import to_checksum_address

from .constants import RECEIPT_POLL_INTERVAL_SEC
from .custom_exceptions import ArtifactError, DeployError
from .encoder import encode_constructor_arguments
from .logger import logger
from .node_handler import get_code, get_transaction_receipt
from .signer import Signer


def get_constructor_abi(abi: list) -> list:
    """Constructor inputs from a contract ABI, empty if there is no constructor."""
    for entry in abi:
        if entry["type"] == "constructor":
            return entry.get("inputs", [])
    return []


class DeployedContract:
    """
    Handle to a contract creation transaction.

    The address is known only once the transaction is mined, see `deployed`.
    """

    def __init__(
        self,
        contract_name: str,
        abi: list,
        deploy_transaction_hash: str,
        constructor_args: tuple,
        signer: Signer,
        timeout: float | None = None,
    ):
        self.contract_name = contract_name
        self.abi = abi
        self.deploy_transaction_hash = deploy_transaction_hash
        self.constructor_args = constructor_args
        self.signer = signer
        self.timeout = timeout
        self.address = None
        self.receipt = None

    def deployed(self, poll_interval: float = RECEIPT_POLL_INTERVAL_SEC):
        """
        Wait until the creation transaction is mined.

        Returns:
            self, with `address` and `receipt` set

        Raises:
            DeployError: If the transaction reverted, left no code behind or
                was not mined within the network timeout
        """
        if self.receipt is not None:
            return self

        logger.info(
            f"Waiting for {self.contract_name} deployment transaction",
            self.deploy_transaction_hash,
        )
        started = time.monotonic()
        rpc_url = self.signer.rpc_url

        receipt = get_transaction_receipt(rpc_url, self.deploy_transaction_hash)
        while receipt is None:
            if self.timeout is not None and time.monotonic() - started > self.timeout:
                raise DeployError(
                    f"transaction {self.deploy_transaction_hash} was not mined in {self.timeout}s"
                )
            time.sleep(poll_interval)
            receipt = get_transaction_receipt(rpc_url, self.deploy_transaction_hash)

        if receipt.get("status") != "0x1":
            raise DeployError(
                f"transaction {self.deploy_transaction_hash} has been reverted (status {receipt.get('status')})"
            )

        if not receipt.get("contractAddress"):
            raise DeployError(
                f"receipt of {self.deploy_transaction_hash} has no contract address"
            )

        address = to_checksum_address(receipt["contractAddress"])
        if get_code(rpc_url, address) in ("0x", "0x0", None):
            raise DeployError(f"no code at {address} after deployment")

        self.receipt = receipt
        self.address = address
        logger.okay(f"{self.contract_name} deployed", address)
        return self

    @property
    def gas_used(self) -> int | None:
        if self.receipt is None or "gasUsed" not in self.receipt:
            return None
        return int(self.receipt["gasUsed"], 16)

    @property
    def block_number(self) -> int | None:
        if self.receipt is None or "blockNumber" not in self.receipt:
            return None
        return int(self.receipt["blockNumber"], 16)


class ContractFactory:
    """Builds and sends creation transactions for one compiled contract."""

    def __init__(self, contract_name: str, abi: list, bytecode: str, signer: Signer):
        if "__$" in bytecode:
            raise ArtifactError(
                f"{contract_name} bytecode has unlinked library references"
            )
        if bytecode in ("", "0x"):
            raise ArtifactError(
                f"{contract_name} has no bytecode, is it abstract or an interface?"
            )

        self.contract_name = contract_name
        self.abi = abi
        self.bytecode = bytecode
        self.signer = signer

    @classmethod
    def from_artifact(cls, artifact: dict, signer: Signer):
        return cls(artifact["contractName"], artifact["abi"], artifact["bytecode"], signer)

    def get_deploy_data(self, *args) -> str:
        calldata = encode_constructor_arguments(get_constructor_abi(self.abi), list(args))
        return self.bytecode + calldata

    def deploy(self, *args) -> DeployedContract:
        """
        Send the creation transaction with the given constructor arguments.

        Returns:
            A DeployedContract handle, call `deployed()` on it to wait for
            the transaction to be mined
        """
        logger.info(f"Deploying {self.contract_name} from {self.signer.address}")
        tx_hash = self.signer.send_transaction({"data": self.get_deploy_data(*args)})
        logger.okay("Deployment transaction sent", tx_hash)

        return DeployedContract(
            self.contract_name,
            self.abi,
            tx_hash,
            args,
            self.signer,
            timeout=self.signer.network_config.get("timeout"),
        )
