import argparse
import importlib.util
import os
import sys
import time
import traceback

from .runtime import Runtime
from .utils.artifacts import clean
from .utils.common import load_config
from .utils.compiler import compile_project
from .utils.constants import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_PATH,
    NETWORK_ENV_VAR,
    START_TIME,
)
from .utils.custom_exceptions import BaseCustomException, ConfigError
from .utils.deployments import load_deployment
from .utils.explorer import verify_contract
from .utils.local_node import local_node
from .utils.logger import logger

__version__ = "0.1.0"


def load_script(script_path: str):
    if not os.path.isfile(script_path):
        raise ConfigError(f"script {script_path} not found")

    module_name = os.path.splitext(os.path.basename(script_path))[0]
    spec = importlib.util.spec_from_file_location(module_name, script_path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    if not hasattr(module, "main"):
        raise ConfigError(f"script {script_path} has no main(runtime) function")

    return module


def run_script(runtime: Runtime, script_path: str) -> int:
    """
    Run a deployment script against the runtime.

    Scripts that define run(runtime) own their exit code, otherwise
    main(runtime) is called and any exception means failure.
    """
    module = load_script(script_path)
    logger.info(f'Running {script_path} on network "{runtime.network.name}"')

    if hasattr(module, "run"):
        return module.run(runtime)

    module.main(runtime)
    return 0


def deploy(runtime: Runtime, contract_name: str, constructor_args: list) -> int:
    factory = runtime.get_contract_factory(contract_name)
    contract = factory.deploy(*constructor_args)
    contract.deployed()
    runtime.save_deployment(contract)

    logger.divider()
    logger.report_table(
        [
            [
                1,
                contract_name,
                runtime.network.name,
                contract.address,
                contract.deploy_transaction_hash,
                contract.gas_used,
            ]
        ]
    )
    return 0


def verify(runtime: Runtime, address: str, contract_name: str, constructor_args: list) -> int:
    if not constructor_args:
        record = load_deployment(
            runtime.paths["deployments"], runtime.network.name, contract_name
        )
        if record is not None and record["address"].lower() == address.lower():
            constructor_args = record["args"]
            logger.info("Using constructor arguments of the saved deployment")

    verify_contract(
        runtime.config,
        runtime.chain_id,
        address,
        runtime.get_artifact(contract_name),
        constructor_args,
    )
    return 0


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(prog="assetdeploy")
    parser.add_argument(
        "--version", "-V", action="store_true", help="Display version information"
    )
    parser.add_argument(
        "--config",
        default=os.getenv(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH),
        help="Path to the project config (JSON or YAML)",
    )
    parser.add_argument(
        "--network", "-n", default=None, help="Network to connect to"
    )

    tasks = parser.add_subparsers(dest="task")

    compile_parser = tasks.add_parser("compile", help="Compile the project sources")
    compile_parser.add_argument(
        "--force", action="store_true", help="Compile even if nothing changed"
    )

    tasks.add_parser("clean", help="Remove the cache and artifacts")

    run_parser = tasks.add_parser("run", help="Run a deployment script")
    run_parser.add_argument("script", help="Path to the script")
    run_parser.add_argument(
        "--no-compile", action="store_true", help="Don't compile before running"
    )
    run_parser.add_argument(
        "--start-node",
        action="store_true",
        help='Start a local development node for the "hardhat" network',
    )

    deploy_parser = tasks.add_parser("deploy", help="Deploy a single contract")
    deploy_parser.add_argument("contract", help="Contract name")
    deploy_parser.add_argument("args", nargs="*", help="Constructor arguments")
    deploy_parser.add_argument(
        "--no-compile", action="store_true", help="Don't compile before deploying"
    )

    verify_parser = tasks.add_parser(
        "verify", help="Verify a deployed contract on the block explorer"
    )
    verify_parser.add_argument("address", help="Deployed contract address")
    verify_parser.add_argument("contract", help="Contract name")
    verify_parser.add_argument("args", nargs="*", help="Constructor arguments")

    return parser.parse_args(argv)


def execute(args) -> int:
    config = load_config(args.config)

    if args.task == "compile":
        compile_project(config, force=args.force)
        return 0

    runtime = Runtime(config, args.network)

    if args.task == "clean":
        clean(runtime.paths["cache"], runtime.paths["artifacts"])
        return 0

    if args.task in ("run", "deploy") and not args.no_compile:
        compile_project(config)

    if args.task == "deploy":
        return deploy(runtime, args.contract, args.args)

    if args.task == "verify":
        return verify(runtime, args.address, args.contract, args.args)

    # scripts building their own runtime pick these up
    os.environ[CONFIG_ENV_VAR] = args.config
    os.environ[NETWORK_ENV_VAR] = runtime.network.name

    start_node = args.start_node and runtime.network.name == "hardhat"
    try:
        if start_node:
            local_node.start(runtime.network.url)
        return run_script(runtime, args.script)
    finally:
        if start_node:
            local_node.stop()


def main(argv=None) -> int:
    args = parse_arguments(argv)
    if args.version:
        print(f"assetdeploy {__version__}")
        return 0
    if args.task is None:
        logger.error("No task given, see --help")
        return 1

    try:
        exit_code = execute(args)
    except BaseCustomException as custom_exc:
        logger.error(custom_exc.message)
        traceback.print_exc()
        return 1
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt by user")
        return 1
    except Exception as exc:
        logger.error("Unexpected error", repr(exc))
        traceback.print_exc()
        return 1

    execution_time = time.time() - START_TIME
    if exit_code == 0:
        logger.okay(f"Done in {round(execution_time, 3)}s ✨")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
