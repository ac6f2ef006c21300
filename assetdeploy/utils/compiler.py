import copy
import glob
import hashlib
import json
import os
import platform
import posixpath
import re
import stat
import subprocess
import sys

from .artifacts import write_artifacts
from .common import fetch, get_paths
from .constants import SOLC_LIST_URL, SOLC_BINARY_URL, COMPILE_CACHE_FILE
from .custom_exceptions import CompileError
from .custom_types import Config
from .helpers import create_dirs
from .logger import logger

IMPORT_PATTERN = re.compile(r"\bimport\s+[^;'\"]*['\"]([^'\"]+)['\"]")
COMMENT_PATTERN = re.compile(r"//[^\n]*|/\*.*?\*/", re.DOTALL)

OUTPUT_SELECTION = {
    "*": {
        "*": [
            "abi",
            "evm.bytecode.object",
            "evm.bytecode.linkReferences",
            "evm.deployedBytecode.object",
            "evm.deployedBytecode.linkReferences",
            "metadata",
        ],
        "": ["ast"],
    }
}


def get_solc_native_platform_from_os():
    platform_name = sys.platform
    if platform_name == "linux":
        return "linux-amd64"
    elif platform_name == "darwin":
        return "macosx-amd64"
    elif platform_name == "win32":
        return "windows-amd64"
    else:
        raise CompileError(f"Unsupported platform {platform_name} ({platform.machine()})")


def get_compiler_info(required_platform, required_compiler_version):
    """
    Find the solc build for a version like "0.8.0" or "0.8.0+commit.c7dfd78e".
    """
    compilers_list_url = SOLC_LIST_URL.format(platform=required_platform)
    available_compilers_list = fetch(compilers_list_url).json()
    required_build_info = next(
        (
            compiler
            for compiler in available_compilers_list["builds"]
            if required_compiler_version
            in (compiler["version"], compiler["longVersion"])
        ),
        None,
    )

    if not required_build_info:
        raise CompileError(
            f'Required compiler version "{required_compiler_version}" for "{required_platform}" is not found'
        )

    return required_build_info


def download_compiler(required_platform, build_info, destination_path):
    compiler_url = SOLC_BINARY_URL.format(
        platform=required_platform, path=build_info["path"]
    )
    logger.info(f'Downloading solc {build_info["longVersion"]} ...')
    download_compiler_response = fetch(compiler_url)

    try:
        with open(destination_path, "wb") as compiler_file:
            compiler_file.write(download_compiler_response.content)
    except IOError as e:
        raise CompileError(f"Error writing to file: {e}")
    return download_compiler_response.content


def get_checksum(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


def check_compiler_checksum(compiler, valid_checksum):
    compiler_checksum = get_checksum(compiler)
    if compiler_checksum != valid_checksum:
        raise CompileError(
            f"Compiler checksum mismatch. Expected: {valid_checksum}, Got: {compiler_checksum}"
        )


def set_compiler_executable(compiler_path):
    compiler_file_rights = os.stat(compiler_path)
    os.chmod(compiler_path, compiler_file_rights.st_mode | stat.S_IEXEC)


def is_compiler_prepared(compiler_path, valid_checksum) -> bool:
    if not os.path.isfile(compiler_path):
        return False
    with open(compiler_path, "rb") as compiler_file:
        return get_checksum(compiler_file.read()) == valid_checksum


def prepare_compiler(solc_dir: str, required_compiler_version: str) -> tuple[str, dict]:
    """
    Make sure the native solc build for a version is available in solc_dir.

    Returns:
        The compiler path and its build info from the solc-bin list
    """
    required_platform = get_solc_native_platform_from_os()
    build_info = get_compiler_info(required_platform, required_compiler_version)
    compiler_path = os.path.join(solc_dir, build_info["path"])
    valid_checksum = build_info["sha256"][2:]

    if is_compiler_prepared(compiler_path, valid_checksum):
        logger.log(f"Using cached compiler {compiler_path}")
        return compiler_path, build_info

    create_dirs(compiler_path)
    compiler_binary = download_compiler(required_platform, build_info, compiler_path)
    check_compiler_checksum(compiler_binary, valid_checksum)
    set_compiler_executable(compiler_path)
    logger.okay("Compiler is ready", build_info["longVersion"])

    return compiler_path, build_info


def collect_sources(sources_dir: str) -> dict[str, dict]:
    """
    Read every .sol file under sources_dir, keyed by its path relative to
    the directory holding sources_dir ("contracts/Token.sol"), together
    with everything they import.
    """
    project_root = os.path.dirname(os.path.abspath(sources_dir))
    sources = {}
    for source_path in sorted(
        glob.glob(os.path.join(sources_dir, "**", "*.sol"), recursive=True)
    ):
        source_name = os.path.relpath(source_path, project_root).replace(os.sep, "/")
        sources[source_name] = {"content": _read_source(source_path)}

    resolve_imports(sources, project_root)
    return sources


def _read_source(source_path: str) -> str:
    with open(source_path, mode="r") as source_file:
        return source_file.read()


def get_imports(source_name: str, content: str) -> list[str]:
    """
    Source names imported by a file. Relative paths ("./", "../") are
    resolved against the importing file, others are taken as they are.
    """
    imports = []
    for path in IMPORT_PATTERN.findall(COMMENT_PATTERN.sub("", content)):
        if path.startswith(("./", "../")):
            path = posixpath.normpath(
                posixpath.join(posixpath.dirname(source_name), path)
            )
        imports.append(path)
    return imports


def find_import_path(project_root: str, source_name: str) -> str | None:
    """A source name is looked up in the project first, then in node_modules."""
    for base in (project_root, os.path.join(project_root, "node_modules")):
        candidate = os.path.join(base, *source_name.split("/"))
        if os.path.isfile(candidate):
            return candidate
    return None


def resolve_imports(sources: dict[str, dict], project_root: str) -> None:
    pending = list(sources)
    while pending:
        importer = pending.pop()
        for source_name in get_imports(importer, sources[importer]["content"]):
            if source_name in sources:
                continue
            source_path = find_import_path(project_root, source_name)
            if source_path is None:
                raise CompileError(
                    f'Source "{source_name}" imported from "{importer}" not found'
                )
            logger.log(f"Resolved import {source_name} -> {source_path}")
            sources[source_name] = {"content": _read_source(source_path)}
            pending.append(source_name)


def build_compiler_input(sources: dict, settings: dict | None) -> dict:
    """
    Standard JSON input for solc. Settings are copied as configured,
    only the output selection is added.
    """
    compiler_settings = copy.deepcopy(settings) if settings else {}
    compiler_settings["outputSelection"] = OUTPUT_SELECTION
    return {
        "language": "Solidity",
        "sources": sources,
        "settings": compiler_settings,
    }


def compile_contracts(compiler_path, compiler_input: dict) -> dict:
    try:
        process = subprocess.run(
            [compiler_path, "--standard-json"],
            input=json.dumps(compiler_input).encode(),
            capture_output=True,
            check=True,
            timeout=120,
        )
    except subprocess.CalledProcessError as e:
        raise CompileError(f"Error during compiler subprocess execution: {e}")
    except subprocess.TimeoutExpired as e:
        raise CompileError(f"Compiler process timed out: {e}")
    except OSError as e:
        raise CompileError(f"Failed to run compiler {compiler_path}: {e}")

    output = json.loads(process.stdout)
    check_compiler_errors(output)
    return output


def check_compiler_errors(output: dict) -> None:
    errors = []
    for diagnostic in output.get("errors", []):
        message = diagnostic.get("formattedMessage", diagnostic.get("message", ""))
        if diagnostic.get("severity") == "error":
            errors.append(message)
        else:
            logger.warn(message.strip())

    if errors:
        raise CompileError("\n".join(errors))


def get_inputs_hash(compiler_input: dict, version: str) -> str:
    serialized = json.dumps(
        {"version": version, "input": compiler_input}, sort_keys=True
    )
    return get_checksum(serialized.encode())


def _load_compile_cache(cache_path: str) -> dict:
    if not os.path.isfile(cache_path):
        return {}
    try:
        with open(cache_path, mode="r") as cache_file:
            return json.load(cache_file)
    except (OSError, json.JSONDecodeError) as e:
        logger.warn(f"Failed to load compile cache: {e}")
        return {}


def _save_compile_cache(cache_path: str, inputs_hash: str, build_info: dict) -> None:
    create_dirs(cache_path)
    with open(cache_path, mode="w") as cache_file:
        json.dump(
            {"inputsHash": inputs_hash, "solcLongVersion": build_info["longVersion"]},
            cache_file,
            indent=2,
        )


def compile_project(config: Config, force: bool = False) -> int:
    """
    Compile every source of the project and write its artifacts.

    Args:
        config: Loaded config
        force: Compile even if nothing changed since the last run

    Returns:
        The number of contract artifacts written (0 when up to date)
    """
    paths = get_paths(config)
    solidity = config["solidity"]

    sources = collect_sources(paths["sources"])
    if not sources:
        logger.warn(f'No Solidity sources found in "{paths["sources"]}"')
        return 0

    compiler_input = build_compiler_input(sources, solidity.get("settings"))
    inputs_hash = get_inputs_hash(compiler_input, solidity["version"])
    cache_path = os.path.join(paths["cache"], COMPILE_CACHE_FILE)

    if (
        not force
        and _load_compile_cache(cache_path).get("inputsHash") == inputs_hash
        and os.path.isdir(paths["artifacts"])
    ):
        logger.info("Nothing to compile")
        return 0

    compiler_path, build_info = prepare_compiler(
        os.path.join(paths["cache"], "solc"), solidity["version"]
    )

    logger.info(f"Compiling {len(sources)} file(s) with solc {build_info['version']}")
    output = compile_contracts(compiler_path, compiler_input)
    written = write_artifacts(paths["artifacts"], output)
    _save_compile_cache(cache_path, inputs_hash, build_info)

    logger.okay("Contracts were successfully compiled", written)
    return written


def get_solc_long_version(config: Config) -> str:
    """The full solc version ("0.8.0+commit.c7dfd78e") of the configured compiler."""
    paths = get_paths(config)
    cache = _load_compile_cache(os.path.join(paths["cache"], COMPILE_CACHE_FILE))
    if "solcLongVersion" in cache:
        return cache["solcLongVersion"]

    build_info = get_compiler_info(
        get_solc_native_platform_from_os(), config["solidity"]["version"]
    )
    return build_info["longVersion"]
