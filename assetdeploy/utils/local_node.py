import os
import signal
import socket
import subprocess
import threading
import time

from urllib.parse import urlparse

from .logger import logger
from .custom_exceptions import LocalNodeError


class LocalNode:
    """A Hardhat development node started for the "hardhat" network."""

    sub_process = None
    output_thread = None
    START_TIMEOUT_SEC = 30
    STOP_TIMEOUT_SEC = 10
    READY_BANNER = "Started HTTP and WebSocket JSON-RPC server"

    def start(self, rpc_url: str):
        parsed_url = urlparse(rpc_url)
        if not parsed_url.port or not parsed_url.hostname:
            raise LocalNodeError(f"Invalid local RPC URL: '{rpc_url}'")

        if self._is_port_in_use_(parsed_url):
            raise LocalNodeError(f"{parsed_url.netloc} is busy")

        node_cmd = [
            "npx",
            "hardhat",
            "node",
            "--hostname",
            parsed_url.hostname,
            "--port",
            str(parsed_url.port),
        ]

        logger.info(f'Trying to start local node: "{" ".join(node_cmd[:7])}"')
        try:
            self.sub_process = subprocess.Popen(
                node_cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                preexec_fn=os.setsid,
            )
        except OSError as e:
            raise LocalNodeError(str(e))

        start_time = time.time()
        while time.time() - start_time < self.START_TIMEOUT_SEC:
            output = self.sub_process.stdout.readline().decode()
            if self.READY_BANNER in output:
                logger.okay(f"Local node is ready, PID {self.sub_process.pid}")
                self.output_thread = threading.Thread(
                    target=self._drain_output_, daemon=True
                )
                self.output_thread.start()
                return
            if not output and self.sub_process.poll() is not None:
                raise LocalNodeError(
                    f"node exited with code {self.sub_process.returncode}"
                )

        self.stop()
        raise LocalNodeError(
            f"node seems to have failed to start in {self.START_TIMEOUT_SEC}s"
        )

    def stop(self):
        if self.sub_process is None or self.sub_process.poll() is not None:
            return

        os.killpg(os.getpgid(self.sub_process.pid), signal.SIGTERM)
        try:
            self.sub_process.wait(timeout=self.STOP_TIMEOUT_SEC)
            logger.info(f"Local node stopped, PID {self.sub_process.pid}")
        except subprocess.TimeoutExpired:
            os.killpg(os.getpgid(self.sub_process.pid), signal.SIGKILL)
            self.sub_process.wait()
            logger.warn(
                f"Local node failed to terminate in {self.STOP_TIMEOUT_SEC} seconds, killed PID {self.sub_process.pid}"
            )

    # node output after startup goes to the log file
    def _drain_output_(self):
        for line in self.sub_process.stdout:
            logger.log("[node] " + line.decode(errors="replace").rstrip())

    def _is_port_in_use_(self, parsed_url) -> bool:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            return s.connect_ex((parsed_url.hostname, parsed_url.port)) == 0


local_node = LocalNode()
