"""
Exec resource - run a command behind an idempotency guard.

Commands are executed via shell (shell=True) to support pipes and
redirects. Only pass trusted values into them.
"""

import shlex
from typing import Any, Dict, Optional

from ghostdc.core.executor import get_executor
from ghostdc.core import Plan, Platform, Resource


class Exec(Resource):
    """
    Exec resource for running guarded commands.

    Idempotency guards:
    - creates: Run only if this path doesn't exist
    - unless: Run only if this command returns non-zero
    - only_if: Run only if this command returns zero

    Examples:
        Exec("install-docker",
             command="curl -fsSL https://get.docker.com | sh",
             unless="command -v docker")

        Exec("link-certbot",
             command="ln -s /snap/bin/certbot /usr/bin/certbot",
             creates="/usr/bin/certbot")
    """

    def __init__(
        self,
        name: str,
        command: str,
        creates: Optional[str] = None,
        unless: Optional[str] = None,
        only_if: Optional[str] = None,
        cwd: Optional[str] = None,
        environment: Optional[Dict[str, str]] = None,
        **options,
    ):
        """
        Initialize exec resource.

        Args:
            name: Resource name/description
            command: Command to execute
            creates: Only run if this file doesn't exist
            unless: Only run if this command fails
            only_if: Only run if this command succeeds
            cwd: Working directory
            environment: Environment variables
        """
        super().__init__(name, **options)

        self.command = command
        self.creates = creates
        self.unless = unless
        self.only_if = only_if
        self.cwd = cwd
        self.environment = environment or {}

        get_executor().add(self)

    def resource_type(self) -> str:
        return "exec"

    def check(self, platform: Platform) -> Dict[str, Any]:
        """Evaluate the guards; should_run=True means the command is due."""
        should_run = True

        if self.creates and self._transport.file_exists(self.creates):
            should_run = False

        if should_run and self.unless:
            _, code = self._transport.run_shell(self.unless)
            if code == 0:
                should_run = False

        if should_run and self.only_if:
            _, code = self._transport.run_shell(self.only_if)
            if code != 0:
                should_run = False

        return {"exists": True, "should_run": should_run}

    def desired_state(self) -> Dict[str, Any]:
        # actual should_run=True against desired False yields an UPDATE
        return {"exists": True, "should_run": False}

    def apply(self, plan: Plan, platform: Platform) -> None:
        if not self._actual_state.get("should_run", True):
            return

        self._run_shell(self._build_command(), f"Command '{self.name}' failed")

    def _build_command(self) -> str:
        cmd = self.command

        if self.environment:
            env_str = " ".join(
                f"{key}={shlex.quote(value)}" for key, value in self.environment.items()
            )
            cmd = f"{env_str} {cmd}"

        if self.cwd:
            cmd = f"cd {shlex.quote(self.cwd)} && {cmd}"

        return cmd

    def preview(self) -> str:
        """Return the command line apply() would run."""
        return self._build_command()
