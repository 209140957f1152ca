"""
Base transport interface.

All transport implementations (Local, SSH) implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Tuple


class Transport(ABC):
    """
    Abstract base class for running commands and touching files on the host.

    Implementations:
    - LocalTransport: the machine ghostdc runs on
    - SSHTransport: a remote host reached over SSH
    """

    @abstractmethod
    def run_shell(self, command: str) -> Tuple[str, int]:
        """
        Run a command via shell and return output and exit code.

        Example:
            output, code = transport.run_shell("crontab -l")
        """
        pass

    @abstractmethod
    def run_command(self, args: list) -> Tuple[str, int]:
        """
        Run a command from a list of arguments (no shell).

        Example:
            output, code = transport.run_command(["snap", "list", "certbot"])
        """
        pass

    @abstractmethod
    def write_file(self, remote_path: str, content: bytes) -> None:
        """
        Write content to a file.

        Raises:
            IOError: If write fails
        """
        pass

    @abstractmethod
    def read_file(self, remote_path: str) -> bytes:
        """
        Read file content.

        Raises:
            FileNotFoundError: If file doesn't exist
        """
        pass

    @abstractmethod
    def file_exists(self, remote_path: str) -> bool:
        """Check if a file or directory exists."""
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Close transport connection.

        No-op for LocalTransport; closes the connection for SSHTransport.
        """
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class NullTransport(Transport):
    """
    Null Object implementation of Transport.

    Raises a helpful error when a resource is used before it was added
    to an executor.
    """

    def _raise_error(self, method_name: str) -> None:
        raise RuntimeError(
            f"Cannot call {method_name}: Transport not initialized. "
            f"Resources must be added to an executor before use. "
            f"Example: get_executor().add(YourResource(...))"
        )

    def run_shell(self, command: str) -> Tuple[str, int]:
        self._raise_error("run_shell()")
        return ("", 1)

    def run_command(self, args: list) -> Tuple[str, int]:
        self._raise_error("run_command()")
        return ("", 1)

    def write_file(self, remote_path: str, content: bytes) -> None:
        self._raise_error("write_file()")

    def read_file(self, remote_path: str) -> bytes:
        self._raise_error("read_file()")
        return b""

    def file_exists(self, remote_path: str) -> bool:
        self._raise_error("file_exists()")
        return False

    def close(self) -> None:
        pass
