import time

START_TIME = time.time()
START_TIME_INT = int(START_TIME)
LOGS_PATH = f"logs/{START_TIME_INT}/logs.txt"

DEFAULT_CONFIG_PATH = "deploy.config.yaml"
DEFAULT_NETWORK = "hardhat"
LOCAL_RPC_URL = "http://127.0.0.1:8545"

CONFIG_ENV_VAR = "ASSETDEPLOY_CONFIG"
NETWORK_ENV_VAR = "ASSETDEPLOY_NETWORK"

DEFAULT_PATHS = {
    "sources": "./contracts",
    "cache": "./cache",
    "artifacts": "./artifacts",
    "deployments": "./deployments",
}

SOLC_LIST_URL = "https://binaries.soliditylang.org/{platform}/list.json"
SOLC_BINARY_URL = "https://binaries.soliditylang.org/{platform}/{path}"
COMPILE_CACHE_FILE = "compile-cache.json"

ARTIFACT_FORMAT = "hh-sol-artifact-1"

ETHERSCAN_API_URL = "https://api.etherscan.io/v2/api"
VERIFY_POLL_INTERVAL_SEC = 5

RECEIPT_POLL_INTERVAL_SEC = 4
RPC_TIMEOUT_SEC = 30
