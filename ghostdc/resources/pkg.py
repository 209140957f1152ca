"""
Package resource - manage apt packages on the Ubuntu host.
"""

from typing import Dict, Any, Optional, List, Union

from ghostdc.core.resource import Resource, Plan, Platform
from ghostdc.core.executor import get_executor

APT_ENV = "DEBIAN_FRONTEND=noninteractive"


def require_apt(platform: Platform) -> None:
    """Raise ValueError unless the host uses apt."""
    if not platform.is_apt_based:
        raise ValueError(
            f"Unsupported platform: {platform.distro} (an apt-based host such as Ubuntu is required)"
        )


class Package(Resource):
    """
    Package resource for installing apt packages.

    Examples:
        Package("git")

        # Several packages in one apt-get call
        Package(["git", "curl", "snapd", "cron"])
    """

    def __init__(self, name: Union[str, List[str]], **options):
        if isinstance(name, list):
            packages = name
            resource_name = packages[0] if packages else "empty"
        else:
            packages = [name]
            resource_name = name

        super().__init__(resource_name, **options)

        self.packages = packages

        get_executor().add(self)

    def resource_type(self) -> str:
        return "pkg"

    def check(self, platform: Platform) -> Dict[str, Any]:
        """Query dpkg for every package."""
        require_apt(platform)

        installed = {pkg: self._installed_version(pkg) for pkg in self.packages}

        return {
            "exists": all(v is not None for v in installed.values()),
            "installed": [pkg for pkg, v in installed.items() if v is not None],
            "missing": [pkg for pkg, v in installed.items() if v is None],
        }

    def desired_state(self) -> Dict[str, Any]:
        return {"exists": True, "installed": list(self.packages)}

    def apply(self, plan: Plan, platform: Platform) -> None:
        missing = self._actual_state.get("missing") or self.packages
        self._run_shell(
            f"{APT_ENV} apt-get install -y {' '.join(missing)}",
            "Package installation failed",
        )

    def _installed_version(self, pkg: str) -> Optional[str]:
        output, code = self._transport.run_command(
            ["dpkg-query", "-W", "-f=${Status} ${Version}", pkg]
        )
        if code != 0 or not output.startswith("install ok installed"):
            return None
        return output.split()[-1]
