"""
Unit tests for the ghostdc executor.

Tests resource registration and the plan/run workflow.
"""

import pytest

from ghostdc.core import Platform, Action, Resource
from ghostdc.core.executor import Executor, get_executor, reset_executor, use_executor


# Simple resource for testing that doesn't auto-register
class MockResource(Resource):
    """Mock resource that is out of date until applied."""

    def __init__(self, name: str, value: str = "", fail: bool = False, log=None):
        super().__init__(name)
        self.value = value
        self.fail = fail
        self.applied = False
        self.checks = 0
        self.log = log if log is not None else []

    def resource_type(self) -> str:
        return "mock"

    def check(self, platform: Platform):
        self.checks += 1
        return {"exists": True, "value": self.value if self.applied else None}

    def desired_state(self):
        return {"exists": True, "value": self.value}

    def apply(self, plan, platform):
        self.log.append(self.name)
        if self.fail:
            raise RuntimeError(f"{self.name} exploded")
        self.applied = True


class TestExecutorResourceManagement:
    """Unit tests for executor resource management."""

    def test_add_single_resource(self, ubuntu):
        executor = Executor(platform=ubuntu)
        resource = MockResource("test1", "value1")
        executor.add(resource)

        assert len(executor.resources) == 1
        assert executor.get(resource.id) == resource

    def test_add_sets_transport_and_dry_run(self, ubuntu, fake_host):
        executor = Executor(platform=ubuntu, transport=fake_host, dry_run=True)
        resource = executor.add(MockResource("res"))

        assert resource._transport is fake_host
        assert resource.dry_run is True

    def test_resource_replacement_last_wins(self, ubuntu):
        """Redefining a resource replaces the earlier definition."""
        executor = Executor(platform=ubuntu)

        first = executor.add(MockResource("config", "http config"))
        second = executor.add(MockResource("config", "https config"))

        assert len(executor.resources) == 1
        assert executor.get("mock:config") is second
        assert executor.get("mock:config") is not first

    def test_resource_replacement_maintains_order(self, ubuntu):
        executor = Executor(platform=ubuntu)
        for name in ("res1", "res2", "res3"):
            executor.add(MockResource(name))

        executor.add(MockResource("res2", "second updated"))

        assert [r.name for r in executor.resources] == ["res1", "res2", "res3"]
        assert executor.resources[1].value == "second updated"

    def test_clear(self, ubuntu):
        executor = Executor(platform=ubuntu)
        executor.add(MockResource("res1"))
        executor.clear()

        assert executor.resources == []
        assert executor.get("mock:res1") is None


class TestExecutorRun:
    """Unit tests for the plan and run phases."""

    def test_plan_does_not_apply(self, ubuntu):
        executor = Executor(platform=ubuntu)
        resource = executor.add(MockResource("res", "v"))

        result = executor.plan()

        assert result.has_changes
        assert result.change_count == 1
        assert result.plans["mock:res"].action == Action.UPDATE
        assert resource.applied is False

    def test_plan_collects_errors(self, ubuntu):
        class Broken(MockResource):
            def check(self, platform):
                raise ValueError("cannot check")

        executor = Executor(platform=ubuntu)
        executor.add(Broken("broken"))
        executor.add(MockResource("fine", "v"))

        result = executor.plan()

        assert result.has_errors
        assert "mock:fine" in result.plans

    def test_run_applies_in_order(self, ubuntu):
        log = []
        executor = Executor(platform=ubuntu)
        for name in ("a", "b", "c"):
            executor.add(MockResource(name, "v", log=log))

        result = executor.run()

        assert result.success
        assert log == ["a", "b", "c"]
        assert result.changed_resources == ["mock:a", "mock:b", "mock:c"]

    def test_run_stops_at_first_failure(self, ubuntu):
        log = []
        executor = Executor(platform=ubuntu)
        executor.add(MockResource("a", "v", log=log))
        executor.add(MockResource("b", "v", fail=True, log=log))
        executor.add(MockResource("c", "v", log=log))

        result = executor.run()

        assert not result.success
        assert result.failed_resource == "mock:b"
        assert "exploded" in str(result.errors[0])
        assert log == ["a", "b"]
        assert result.changed_resources == ["mock:a"]

    def test_run_checks_each_step_once(self, ubuntu):
        executor = Executor(platform=ubuntu)
        resource = executor.add(MockResource("a", "v"))

        executor.run()

        assert resource.applied
        assert resource.checks == 1

    def test_run_skips_converged_resources(self, ubuntu):
        log = []
        executor = Executor(platform=ubuntu)
        resource = executor.add(MockResource("a", "v", log=log))
        resource.applied = True

        result = executor.run()

        assert result.success
        assert result.changed_resources == []
        assert log == []

    def test_dry_run_applies_nothing(self, ubuntu):
        log = []
        executor = Executor(platform=ubuntu, dry_run=True)
        executor.add(MockResource("a", "v", log=log))

        result = executor.run()

        assert result.changed_resources == ["mock:a"]
        assert log == []

    def test_platform_detected_lazily(self, fake_host):
        executor = Executor(transport=fake_host)
        assert fake_host.shells == []

        assert executor.platform.distro == "ubuntu"
        assert executor.platform.version == "24.04"
        assert executor.platform.system == "Linux"


class TestRegistry:
    """Unit tests for the global registry helpers."""

    def test_use_executor_replaces_global(self, ubuntu):
        executor = Executor(platform=ubuntu)
        use_executor(executor)

        assert get_executor() is executor

    def test_reset_executor_creates_new(self, ubuntu):
        use_executor(Executor(platform=ubuntu))
        before = get_executor()

        reset_executor()

        assert get_executor() is not before
