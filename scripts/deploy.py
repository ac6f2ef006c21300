import sys
import traceback

from assetdeploy.runtime import get_runtime

CONTRACT_NAME = "BullieverseAssets"
CONSTRUCTOR_ARG = "test"


def main(runtime):
    factory = runtime.get_contract_factory(CONTRACT_NAME)
    contract = factory.deploy(CONSTRUCTOR_ARG)

    contract.deployed()
    runtime.save_deployment(contract)

    print(f"Deployed {CONTRACT_NAME} Address:", contract.address)


def run(runtime=None) -> int:
    try:
        main(runtime or get_runtime())
    except Exception:
        traceback.print_exc()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(run())
