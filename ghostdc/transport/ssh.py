"""
SSH transport - provision a remote host over SSH.
"""

import os
import shlex
from pathlib import Path
from typing import Tuple, Optional

import paramiko

from ghostdc.transport.base import Transport


class SSHTransport(Transport):
    """
    SSH transport for running the deploy steps on a remote host.

    Uses Paramiko for SSH connectivity and SFTP for file access.

    Example:
        with SSHTransport(host="blog.example.com", user="ubuntu", sudo=True) as transport:
            output, code = transport.run_shell("crontab -l")
    """

    def __init__(
        self,
        host: str,
        port: int = 22,
        user: Optional[str] = None,
        key_file: Optional[str] = None,
        timeout: int = 30,
        sudo: bool = False,
    ):
        """
        Initialize SSH transport and connect.

        Args:
            host: Remote hostname or IP
            port: SSH port (default: 22)
            user: SSH username (default: current user)
            key_file: Path to private key file
            timeout: Connection timeout in seconds
            sudo: Wrap every command in `sudo -n` (default: False)
        """
        self.host = host
        self.port = port
        self.user = user or os.getenv("USER")
        self.key_file = key_file
        self.timeout = timeout
        self.sudo = sudo
        self.client: Optional[paramiko.SSHClient] = None

        self._connect()

    def _connect(self) -> None:
        self.client = paramiko.SSHClient()
        self.client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        connect_kwargs = {
            "hostname": self.host,
            "port": self.port,
            "username": self.user,
            "timeout": self.timeout,
        }
        if self.key_file:
            connect_kwargs["key_filename"] = str(Path(self.key_file).expanduser())

        self.client.connect(**connect_kwargs)

    def _exec(self, command: str) -> Tuple[bytes, bytes, int]:
        """Run a raw command line; returns stdout, stderr and exit code."""
        _, stdout, stderr = self.client.exec_command(command)
        # Drain both streams before waiting, or a full window blocks the remote side
        out = stdout.read()
        err = stderr.read()
        return out, err, stdout.channel.recv_exit_status()

    def _wrap(self, command: str) -> str:
        wrapped = f"bash -o pipefail -c {shlex.quote(command)}"
        if self.sudo:
            wrapped = f"sudo -n {wrapped}"
        return wrapped

    def run_shell(self, command: str) -> Tuple[str, int]:
        """
        Run command via shell on remote host.

        The command line runs under `bash -o pipefail -c`, so a failing
        pipeline stage fails the command. With sudo enabled the whole line
        runs as root, pipes and redirects included.
        """
        out, err, exit_code = self._exec(self._wrap(command))
        return out.decode() + err.decode(), exit_code

    def run_command(self, args: list) -> Tuple[str, int]:
        """Run an argument list on the remote host (quoted for the remote shell)."""
        return self.run_shell(" ".join(shlex.quote(arg) for arg in args))

    def write_file(self, remote_path: str, content: bytes) -> None:
        """
        Write content to file on remote host.

        With sudo enabled, the content goes to a `mktemp` file over SFTP
        first and is copied into place with sudo. cp keeps the owner and
        mode of a file that already exists; a new file gets the default mode
        rather than the 0600 of the temporary file.
        """
        if not self.sudo:
            self._sftp_write(remote_path, content)
            return

        out, err, code = self._exec("mktemp /tmp/ghostdc.XXXXXXXXXX")
        if code != 0:
            raise IOError(f"Failed to create a temporary file: {err.decode()}")
        staging = out.decode().strip()

        try:
            self._sftp_write(staging, content)
            output, code = self.run_command(["cp", "--no-preserve=mode", staging, remote_path])
            if code != 0:
                raise IOError(f"Failed to copy {staging} to {remote_path}: {output}")
        finally:
            self._exec(f"rm -f {shlex.quote(staging)}")

    def _sftp_write(self, path: str, content: bytes) -> None:
        sftp = self.client.open_sftp()
        try:
            with sftp.open(path, "wb") as f:
                f.write(content)
        finally:
            sftp.close()

    def read_file(self, remote_path: str) -> bytes:
        if self.sudo:
            # stdout only; sudo warnings on stderr are not file content
            out, _, code = self._exec(self._wrap(f"cat {shlex.quote(remote_path)}"))
            if code != 0:
                raise FileNotFoundError(remote_path)
            return out

        sftp = self.client.open_sftp()
        try:
            with sftp.open(remote_path, "rb") as f:
                return f.read()
        finally:
            sftp.close()

    def file_exists(self, remote_path: str) -> bool:
        _, code = self.run_command(["test", "-e", remote_path])
        return code == 0

    def close(self) -> None:
        if self.client:
            self.client.close()
