"""
CronJob resource - register a line in the crontab of the connected user.
"""

import shlex
from typing import Any, Callable, Dict, Optional, Union

from ghostdc.core import Plan, Platform, Resource
from ghostdc.core.executor import get_executor


class CronJob(Resource):
    """
    Crontab entry, appended when no existing line contains `marker`.

    `command` may be a callable; it is resolved when the entry is written,
    so it can depend on steps that ran earlier (e.g. which compose flavor
    got installed).

    Examples:
        CronJob("certbot-renew",
                schedule="0 3 * * *",
                command="certbot renew --quiet",
                marker="certbot renew")
    """

    def __init__(
        self,
        name: str,
        schedule: str,
        command: Union[str, Callable[[], str]],
        marker: Optional[str] = None,
        **options,
    ):
        super().__init__(name, **options)

        self.schedule = schedule
        self.command = command
        if marker is None:
            if callable(command):
                raise ValueError("CronJob with a callable command needs an explicit marker")
            marker = command
        self.marker = marker

        get_executor().add(self)

    def resource_type(self) -> str:
        return "cron"

    def check(self, platform: Platform) -> Dict[str, Any]:
        for line in self._current_crontab().splitlines():
            stripped = line.strip()
            if stripped and not stripped.startswith("#") and self.marker in stripped:
                return {"exists": True, "marker": self.marker, "line": stripped}
        return {"exists": False, "marker": None, "line": None}

    def desired_state(self) -> Dict[str, Any]:
        return {"exists": True, "marker": self.marker}

    def apply(self, plan: Plan, platform: Platform) -> None:
        entry = self.entry()
        self._run_shell(
            f"(crontab -l 2>/dev/null; echo {shlex.quote(entry)}) | crontab -",
            f"Failed to register cron job {self.name}",
        )

    def entry(self) -> str:
        """The crontab line this resource writes."""
        command = self.command() if callable(self.command) else self.command
        return f"{self.schedule} {command}"

    def _current_crontab(self) -> str:
        output, code = self._transport.run_shell("crontab -l")
        # crontab -l exits 1 with "no crontab for <user>" when there is none
        return output if code == 0 else ""
