"""
Local transport - run commands on the local machine.
"""

import subprocess
from pathlib import Path
from typing import Tuple

from ghostdc.transport.base import Transport

SHELL = "/bin/bash"


class LocalTransport(Transport):
    """
    Local transport for running commands on this machine.

    Uses subprocess for command execution. Output is stdout followed by
    stderr, passed on unmodified so failures surface as raw tool output.
    Shell lines run under bash with pipefail, so a failing stage fails the
    whole pipeline.
    """

    def run_shell(self, command: str) -> Tuple[str, int]:
        result = subprocess.run(
            f"set -o pipefail; {command}",
            shell=True,
            executable=SHELL,
            capture_output=True,
            text=True,
        )
        return result.stdout + result.stderr, result.returncode

    def run_command(self, args: list) -> Tuple[str, int]:
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as e:
            # Same exit code a shell reports for an unknown command
            return str(e), 127
        return result.stdout + result.stderr, result.returncode

    def write_file(self, path: str, content: bytes) -> None:
        Path(path).write_bytes(content)

    def read_file(self, path: str) -> bytes:
        return Path(path).read_bytes()

    def file_exists(self, path: str) -> bool:
        return Path(path).exists()

    def close(self) -> None:
        pass
