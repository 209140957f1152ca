"""
Core resource abstraction for ghostdc.

Every provisioning step (package, checkout, certificate, cron entry, ...)
inherits from Resource and follows the Check/Plan/Apply pattern.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional, List, TYPE_CHECKING
import platform as platform_module

import distro as distro_lib

from ghostdc.transport.base import NullTransport

if TYPE_CHECKING:
    from ghostdc.transport import Transport


class Action(Enum):
    """Resource actions during apply."""
    NONE = "none"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class Change:
    """A single property change."""
    field: str
    from_value: Any
    to_value: Any

    def __str__(self):
        return f"{self.field}: {self.from_value} → {self.to_value}"


@dataclass
class Plan:
    """
    Execution plan for a resource.

    Shows what apply() is about to change and why.
    """
    action: Action
    changes: List[Change] = field(default_factory=list)
    reason: str = ""

    def has_changes(self) -> bool:
        """Check if plan has any changes."""
        return self.action != Action.NONE and len(self.changes) > 0

    def __str__(self):
        if self.action == Action.NONE:
            return "No changes"

        lines = [f"Action: {self.action.value}"]
        if self.reason:
            lines.append(f"Reason: {self.reason}")
        for change in self.changes:
            lines.append(f"  {change}")
        return "\n".join(lines)


def _parse_os_release(content: str) -> Dict[str, str]:
    values = {}
    for line in content.splitlines():
        if "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key.strip()] = value.strip().strip('"')
    return values


@dataclass
class Platform:
    """Platform information (OS, distro, version)."""
    system: str  # uname -s
    distro: str  # ubuntu, debian, ...
    version: str
    arch: str

    @property
    def is_apt_based(self) -> bool:
        return self.distro in ("ubuntu", "debian")

    @classmethod
    def detect(cls, transport: Optional["Transport"] = None) -> "Platform":
        """
        Detect platform information.

        Args:
            transport: Transport to use for detection (None = local)

        Returns:
            Platform information
        """
        if transport is None:
            system = platform_module.system()
            arch = platform_module.machine()
            distro = "unknown"
            version = ""

            if system == "Linux":
                distro = distro_lib.id()
                version = distro_lib.version()

            return cls(system=system, distro=distro, version=version, arch=arch)

        output, _ = transport.run_shell("uname -s")
        system = output.strip()

        output, _ = transport.run_shell("uname -m")
        arch = output.strip()

        distro = "unknown"
        version = ""

        if system == "Linux" and transport.file_exists("/etc/os-release"):
            release = _parse_os_release(
                transport.read_file("/etc/os-release").decode("utf-8")
            )
            distro = release.get("ID", distro)
            version = release.get("VERSION_ID", version)

        return cls(system=system, distro=distro, version=version, arch=arch)


class Resource(ABC):
    """
    Base class for all provisioning steps.

    Resources follow the Check → Plan → Apply pattern:
    1. Check: query the host for the current state
    2. Plan: compare it with the desired state
    3. Apply: act only when the two differ
    """

    def __init__(self, name: str, **options):
        """
        Initialize resource.

        Args:
            name: Resource identifier (e.g., "/opt/ghost", "certbot")
            **options: Resource-specific options
        """
        self.name = name
        self.options = options
        self._desired_state: Dict[str, Any] = {}
        self._actual_state: Dict[str, Any] = {}
        self._transport: "Transport" = NullTransport()  # Set by executor
        self.dry_run = False  # Set by executor

    @property
    def id(self) -> str:
        """
        Unique resource identifier.

        Format: resource_type:name
        Example: file:/opt/ghost/content, snap:certbot
        """
        return f"{self.resource_type()}:{self.name}"

    @abstractmethod
    def resource_type(self) -> str:
        """Return resource type string (file, pkg, snap, exec, ...)."""
        pass

    @abstractmethod
    def check(self, platform: Platform) -> Dict[str, Any]:
        """
        Check current state of the resource.

        Returns:
            Dictionary of current state properties, e.g.
            {"exists": True, "has_placeholder": False}
        """
        pass

    @abstractmethod
    def desired_state(self) -> Dict[str, Any]:
        """Return desired state properties."""
        pass

    def plan(self, platform: Platform) -> Plan:
        """
        Generate execution plan by comparing desired vs actual state.

        Args:
            platform: Platform information

        Returns:
            Plan object describing changes
        """
        self._actual_state = self.check(platform)
        self._desired_state = self.desired_state()

        exists = self._actual_state.get("exists", False)
        should_exist = self._desired_state.get("exists", True)

        if not exists and should_exist:
            action = Action.CREATE
            reason = "Resource does not exist"
        elif exists and not should_exist:
            action = Action.DELETE
            reason = "Resource should not exist"
        elif not exists and not should_exist:
            action = Action.NONE
            reason = "Resource correctly absent"
        else:
            changes = self._detect_changes()
            if changes:
                return Plan(
                    action=Action.UPDATE,
                    changes=changes,
                    reason="Properties differ from desired state",
                )
            action = Action.NONE
            reason = "No changes needed"

        changes = []
        if action == Action.CREATE:
            for key, value in self._desired_state.items():
                if key != "exists":
                    changes.append(Change(key, None, value))
        elif action == Action.DELETE:
            for key, value in self._actual_state.items():
                if key != "exists":
                    changes.append(Change(key, value, None))

        return Plan(action=action, changes=changes, reason=reason)

    def _detect_changes(self) -> List[Change]:
        """List the desired properties whose actual value differs."""
        changes = []

        for key, desired_value in self._desired_state.items():
            if key == "exists":
                continue

            actual_value = self._actual_state.get(key)

            if desired_value is None and actual_value is None:
                continue

            if actual_value != desired_value:
                changes.append(Change(key, actual_value, desired_value))

        return changes

    @abstractmethod
    def apply(self, plan: Plan, platform: Platform) -> None:
        """
        Apply the execution plan.

        Raises:
            RuntimeError: if the underlying command fails
        """
        pass

    def _run_shell(self, command: str, error: str) -> str:
        """Run a shell command, raising RuntimeError with its output on failure."""
        output, code = self._transport.run_shell(command)
        if code != 0:
            raise RuntimeError(
                f"{error} (exit code {code})\n"
                f"Command: {command}\n"
                f"Output: {output}"
            )
        return output

    def _run_command(self, args: List[str], error: str) -> str:
        """Run an argument list, raising RuntimeError with its output on failure."""
        output, code = self._transport.run_command(args)
        if code != 0:
            raise RuntimeError(
                f"{error} (exit code {code})\n"
                f"Command: {' '.join(args)}\n"
                f"Output: {output}"
            )
        return output

    def __repr__(self):
        return f"{self.__class__.__name__}(name={self.name!r})"

    def __str__(self):
        return self.id
