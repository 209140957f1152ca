"""
Executor - manages resource planning and application.

The executor:
1. Collects resources in registration order
2. Generates execution plans
3. Applies changes one step at a time, stopping at the first failure
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional
import time

from ghostdc.core.resource import Resource, Plan, Platform
from ghostdc.logging import get_deploy_logger
from ghostdc.transport import Transport, LocalTransport

logger = get_deploy_logger(__name__)


@dataclass
class PlanResult:
    """
    Result of planning phase.

    Contains plans for all resources and summary statistics.
    """
    plans: Dict[str, Plan] = field(default_factory=dict)
    errors: List[Exception] = field(default_factory=list)

    @property
    def change_count(self) -> int:
        """Count of resources with changes."""
        return sum(1 for plan in self.plans.values() if plan.has_changes())

    @property
    def has_changes(self) -> bool:
        return self.change_count > 0

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0


@dataclass
class ApplyResult:
    """
    Result of a run.

    changed_resources lists the steps that acted (or would have acted,
    in dry-run mode). failed_resource is the step that aborted the run.
    """
    plans: Dict[str, Plan] = field(default_factory=dict)
    changed_resources: List[str] = field(default_factory=list)
    errors: List[Exception] = field(default_factory=list)
    failed_resource: Optional[str] = None
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return len(self.errors) == 0


class Executor:
    """
    Resource executor implementing the plan/apply workflow.

    Example:
        executor = Executor()
        executor.add(AptCache("apt-update", action="update"))
        executor.add(Package(["git", "curl"]))

        # Preview
        plan_result = executor.plan()
        print(f"Will change {plan_result.change_count} resources")

        # Converge, step by step
        result = executor.run()
        print(f"Changed {len(result.changed_resources)} resources")
    """

    def __init__(
        self,
        platform: Optional[Platform] = None,
        transport: Optional[Transport] = None,
        dry_run: bool = False,
    ):
        """
        Initialize executor.

        Args:
            platform: Platform info (detected through the transport if None)
            transport: Transport for command execution (default: LocalTransport)
            dry_run: Log the steps that would change instead of applying them
        """
        self.transport = transport or LocalTransport()
        self._platform = platform
        self.dry_run = dry_run
        self.resources: List[Resource] = []
        self._registry: Dict[str, Resource] = {}

    @property
    def platform(self) -> Platform:
        if self._platform is None:
            self._platform = Platform.detect(self.transport)
        return self._platform

    def add(self, resource: Resource) -> Resource:
        """
        Add resource to executor.

        Re-adding an id replaces the earlier definition, keeping its
        position in the execution order.

        Returns:
            The resource (for chaining/references)
        """
        resource._transport = self.transport
        resource.dry_run = self.dry_run

        previous = self._registry.get(resource.id)
        if previous is not None:
            index = self.resources.index(previous)
            self.resources[index] = resource
        else:
            self.resources.append(resource)

        self._registry[resource.id] = resource
        return resource

    def get(self, resource_id: str) -> Optional[Resource]:
        """Get resource by ID."""
        return self._registry.get(resource_id)

    def plan(self) -> PlanResult:
        """
        Generate execution plan for all resources without applying anything.

        Steps that depend on earlier steps (a file inside a checkout that
        does not exist yet) report what they know at this point.
        """
        result = PlanResult()

        for resource in self.resources:
            try:
                result.plans[resource.id] = resource.plan(self.platform)
            except Exception as e:
                result.errors.append(e)

        return result

    def run(self) -> ApplyResult:
        """
        Plan and apply each resource in order.

        Each step is checked right before it runs, so it sees the effects
        of the steps before it. The first failure stops the run.
        """
        result = ApplyResult()
        start_time = time.time()

        for resource in self.resources:
            try:
                plan = resource.plan(self.platform)
                result.plans[resource.id] = plan

                if not plan.has_changes():
                    logger.debug(f"{resource.id}: {plan.reason}")
                    continue

                if self.dry_run:
                    logger.dry_run(f"{plan.action.value} {resource.id}")
                else:
                    logger.action(plan.action.value, resource.id, plan.reason)
                    resource.apply(plan, self.platform)

                result.changed_resources.append(resource.id)
            except Exception as e:
                result.errors.append(e)
                result.failed_resource = resource.id
                break

        result.duration = time.time() - start_time
        return result

    def clear(self) -> None:
        """Clear all resources."""
        self.resources.clear()
        self._registry.clear()


class Registry:
    """
    Process-wide resource registry.

    Resources register themselves with the registry's executor on
    construction, so a step list reads as plain declarations.
    """

    _instance: Optional['Registry'] = None
    _executor: Optional[Executor] = None

    @classmethod
    def get_instance(cls) -> 'Registry':
        """Get singleton registry instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset registry (useful for testing)."""
        cls._instance = None
        cls._executor = None

    def __init__(self):
        if Registry._executor is None:
            Registry._executor = Executor()

    @property
    def executor(self) -> Executor:
        return Registry._executor


def get_executor() -> Executor:
    """Get global executor instance."""
    return Registry.get_instance().executor


def reset_executor() -> None:
    """Reset global executor (useful for testing)."""
    Registry.reset()


def use_executor(executor: Executor) -> Executor:
    """Make `executor` the one new resources register with."""
    Registry.reset()
    Registry._executor = executor
    Registry.get_instance()
    return executor
