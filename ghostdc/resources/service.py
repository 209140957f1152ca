"""
Service resource - manage systemd units.
"""

from typing import Any, Dict, Optional

from ghostdc.core.executor import get_executor
from ghostdc.core import Plan, Platform, Resource


class Service(Resource):
    """
    Service resource for managing systemd units.

    Examples:
        # Ensure the docker daemon is up and starts at boot
        Service("docker", running=True, enabled=True)
    """

    def __init__(
        self,
        name: str,
        running: Optional[bool] = None,
        enabled: Optional[bool] = None,
        **options,
    ):
        super().__init__(name, **options)

        self.service_name = name
        self.running = running
        self.enabled = enabled

        get_executor().add(self)

    def resource_type(self) -> str:
        return "svc"

    def check(self, platform: Platform) -> Dict[str, Any]:
        _, active = self._transport.run_command(["systemctl", "is-active", self.service_name])
        _, enabled = self._transport.run_command(["systemctl", "is-enabled", self.service_name])
        return {
            "exists": True,
            "running": active == 0,
            "enabled": enabled == 0,
        }

    def desired_state(self) -> Dict[str, Any]:
        state = {"exists": True}

        if self.running is not None:
            state["running"] = self.running
        if self.enabled is not None:
            state["enabled"] = self.enabled

        return state

    def apply(self, plan: Plan, platform: Platform) -> None:
        for change in plan.changes:
            if change.field == "running":
                verb = "start" if change.to_value else "stop"
            elif change.field == "enabled":
                verb = "enable" if change.to_value else "disable"
            else:
                continue

            self._run_command(
                ["systemctl", verb, self.service_name],
                f"Failed to {verb} service {self.service_name}",
            )
