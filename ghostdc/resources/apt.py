"""
AptCache resource - refresh the apt package index and upgrade packages.
"""

from typing import Any, Dict

from ghostdc.core import Plan, Platform, Resource
from ghostdc.core.executor import get_executor
from ghostdc.logging import get_deploy_logger
from ghostdc.resources.pkg import APT_ENV, require_apt

logger = get_deploy_logger(__name__)

UPDATE_STAMP = "/var/lib/apt/periodic/update-success-stamp"
CACHE_MAX_AGE = 3600


class AptCache(Resource):
    """
    Package manager maintenance.

    Actions:
    - update: `apt-get update` when the cache stamp is older than an hour
    - upgrade: `apt-get upgrade -y` when it would install anything

    Examples:
        AptCache("apt-update", action="update")
        AptCache("apt-upgrade", action="upgrade")
    """

    def __init__(self, name: str, action: str = "update", max_age: int = CACHE_MAX_AGE, **options):
        super().__init__(name, **options)

        self.action = action.lower()
        self.max_age = max_age

        valid_actions = ["update", "upgrade"]
        if self.action not in valid_actions:
            raise ValueError(
                f"Invalid action '{self.action}'. Must be one of: {valid_actions}"
            )

        get_executor().add(self)

    def resource_type(self) -> str:
        return "apt"

    def check(self, platform: Platform) -> Dict[str, Any]:
        require_apt(platform)

        if self.action == "update":
            return self._check_update()
        return self._check_upgrade()

    def desired_state(self) -> Dict[str, Any]:
        # A stale cache or pending upgrades show up as an UPDATE
        if self.action == "update":
            return {"exists": True, "needs_update": False}
        return {"exists": True, "needs_upgrade": False}

    def apply(self, plan: Plan, platform: Platform) -> None:
        if self.action == "update":
            logger.info("Updating package cache...")
            self._run_shell(f"{APT_ENV} apt-get update -y", "apt-get update failed")
        else:
            logger.info("Upgrading packages...")
            self._run_shell(f"{APT_ENV} apt-get upgrade -y", "apt-get upgrade failed")

    def _check_update(self) -> Dict[str, Any]:
        if self._transport.file_exists(UPDATE_STAMP):
            output, code = self._transport.run_shell(
                f"echo $(($(date +%s) - $(stat -c %Y {UPDATE_STAMP})))"
            )
            if code == 0 and output.strip().isdigit():
                age_seconds = int(output.strip())
                return {
                    "exists": True,
                    "needs_update": age_seconds > self.max_age,
                    "cache_age_seconds": age_seconds,
                }

        return {"exists": True, "needs_update": True}

    def _check_upgrade(self) -> Dict[str, Any]:
        # Simulated upgrade: lists only what `apt-get upgrade` would install,
        # leaving out kept-back and phased packages
        output, code = self._transport.run_command(["apt-get", "-s", "upgrade"])
        if code != 0:
            raise RuntimeError(f"apt-get -s upgrade failed (exit {code}):\n{output}")

        pending = [line for line in output.splitlines() if line.startswith("Inst ")]
        return {
            "exists": True,
            "needs_upgrade": len(pending) > 0,
            "upgradable_count": len(pending),
        }
