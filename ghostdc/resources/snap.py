"""
Snap resource - install snap packages.
"""

from typing import Any, Dict

from ghostdc.core import Plan, Platform, Resource
from ghostdc.core.executor import get_executor


class Snap(Resource):
    """
    Snap package, installed when `snap list` does not show it.

    Examples:
        Snap("core")
        Snap("certbot", classic=True)
    """

    def __init__(self, name: str, classic: bool = False, **options):
        super().__init__(name, **options)

        self.classic = classic

        get_executor().add(self)

    def resource_type(self) -> str:
        return "snap"

    def check(self, platform: Platform) -> Dict[str, Any]:
        output, code = self._transport.run_command(["snap", "list", self.name])
        if code != 0:
            return {"exists": False, "installed": False, "version": None}

        # Header line, then "<name> <version> <rev> <tracking> <publisher> <notes>"
        for line in output.splitlines()[1:]:
            parts = line.split()
            if len(parts) > 1 and parts[0] == self.name:
                return {"exists": True, "installed": True, "version": parts[1]}
        return {"exists": False, "installed": False, "version": None}

    def desired_state(self) -> Dict[str, Any]:
        return {"exists": True, "installed": True}

    def apply(self, plan: Plan, platform: Platform) -> None:
        args = ["snap", "install", self.name]
        if self.classic:
            args.append("--classic")
        self._run_command(args, f"snap install {self.name} failed")
