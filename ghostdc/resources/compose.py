"""
ComposeStack resource - bring the Docker Compose stack up.
"""

from typing import Any, Dict

from ghostdc import compose
from ghostdc.core import Plan, Platform, Resource
from ghostdc.core.executor import get_executor


class ComposeStack(Resource):
    """
    Compose project in `project_dir`, started with `up -d` when compose
    reports no running service.

    Examples:
        ComposeStack("/opt/ghost")
    """

    def __init__(self, project_dir: str, **options):
        super().__init__(project_dir, **options)

        self.project_dir = project_dir

        get_executor().add(self)

    def resource_type(self) -> str:
        return "compose"

    def check(self, platform: Platform) -> Dict[str, Any]:
        try:
            services = compose.running_services(self._transport, self.project_dir)
        except RuntimeError:
            # Compose or the project is not installed yet; apply() reports
            # the real error if that is still true when it runs.
            services = []

        return {"exists": True, "running": len(services) > 0, "services": services}

    def desired_state(self) -> Dict[str, Any]:
        return {"exists": True, "running": True}

    def apply(self, plan: Plan, platform: Platform) -> None:
        compose.start(self._transport, self.project_dir)
