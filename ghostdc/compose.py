"""
Docker Compose discovery and the stack lifecycle commands.

Both the standalone `docker-compose` binary and the `docker compose`
plugin are supported; the standalone binary wins when both exist.
"""

import shlex
from typing import List

from ghostdc.logging import get_deploy_logger
from ghostdc.transport import Transport

logger = get_deploy_logger(__name__)


class ComposeNotFoundError(RuntimeError):
    """Neither docker-compose nor the docker compose plugin is available."""

    def __init__(self):
        super().__init__(
            "Docker Compose not found: install docker-compose or the docker compose plugin"
        )


def detect_compose(transport: Transport) -> List[str]:
    """
    Return the compose command as an argument list.

    Raises:
        ComposeNotFoundError: when no compose flavor answers
    """
    _, code = transport.run_shell("command -v docker-compose")
    if code == 0:
        return ["docker-compose"]

    _, code = transport.run_command(["docker", "compose", "version"])
    if code == 0:
        return ["docker", "compose"]

    raise ComposeNotFoundError()


def compose_shell(project_dir: str, compose: List[str], *args: str) -> str:
    """Build the shell line running compose inside the project directory."""
    command = " ".join(shlex.quote(part) for part in [*compose, *args])
    return f"cd {shlex.quote(project_dir)} && {command}"


def run_compose(transport: Transport, project_dir: str, *args: str) -> str:
    """
    Run a compose subcommand in the project directory.

    Raises:
        ComposeNotFoundError: when no compose flavor answers
        RuntimeError: when compose exits non-zero, with its raw output
    """
    command = compose_shell(project_dir, detect_compose(transport), *args)
    logger.debug(f"Running: {command}")

    output, code = transport.run_shell(command)
    if code != 0:
        raise RuntimeError(
            f"Compose command failed (exit code {code})\n"
            f"Command: {command}\n"
            f"Output: {output}"
        )
    return output


def running_services(transport: Transport, project_dir: str) -> List[str]:
    """Names of the services compose reports as running."""
    output = run_compose(
        transport, project_dir, "ps", "--services", "--filter", "status=running"
    )
    return [line.strip() for line in output.splitlines() if line.strip()]


def start(transport: Transport, project_dir: str) -> None:
    """Start the stack in the background."""
    run_compose(transport, project_dir, "up", "-d")


def stop(transport: Transport, project_dir: str) -> None:
    """Stop and remove the stack's containers."""
    run_compose(transport, project_dir, "down")


def update(transport: Transport, project_dir: str) -> None:
    """Pull newer images and recreate the containers that changed."""
    run_compose(transport, project_dir, "pull")
    run_compose(transport, project_dir, "up", "-d", "--remove-orphans")
