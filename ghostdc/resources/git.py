"""
GitCheckout resource - clone a repository, or fast-forward an existing clone.
"""

from typing import Any, Dict, Optional

from ghostdc.config import ConfigError
from ghostdc.core import Action, Plan, Platform, Resource
from ghostdc.core.executor import get_executor
from ghostdc.logging import get_deploy_logger

logger = get_deploy_logger(__name__)


class GitCheckout(Resource):
    """
    Git working copy at `path`.

    A missing checkout is cloned from `repo_url`. An existing one is
    fetched and, when it is behind its upstream branch, pulled with
    --ff-only. Local edits (substituted placeholders) are carried over
    with --autostash.

    Examples:
        GitCheckout("/opt/ghost", repo_url="https://git.example.com/ghost-template.git")
    """

    def __init__(self, path: str, repo_url: Optional[str] = None, **options):
        super().__init__(path, **options)

        self.path = path
        self.repo_url = repo_url

        get_executor().add(self)

    def resource_type(self) -> str:
        return "git"

    def check(self, platform: Platform) -> Dict[str, Any]:
        if not self._transport.file_exists(f"{self.path}/.git"):
            return {"exists": False, "behind": None}

        # Preview runs skip the fetch and compare against the last known upstream
        if not self.dry_run:
            self._git(["fetch", "--quiet"], "git fetch failed")

        head, _ = self._transport.run_command(["git", "-C", self.path, "rev-parse", "HEAD"])
        upstream, code = self._transport.run_command(
            ["git", "-C", self.path, "rev-parse", "@{u}"]
        )
        if code != 0:
            # No upstream branch configured: nothing to pull from
            return {"exists": True, "behind": False}

        return {"exists": True, "behind": head.strip() != upstream.strip()}

    def desired_state(self) -> Dict[str, Any]:
        return {"exists": True, "behind": False}

    def apply(self, plan: Plan, platform: Platform) -> None:
        if plan.action == Action.CREATE:
            if not self.repo_url:
                raise ConfigError(
                    f"{self.path} is not a git checkout and no repository URL was given "
                    f"(use --repo-url or GHOSTDC_REPO_URL)"
                )
            logger.info(f"Cloning {self.repo_url} into {self.path}")
            self._run_command(["git", "clone", self.repo_url, self.path], "git clone failed")
        elif plan.action == Action.UPDATE:
            logger.info(f"Pulling {self.path}")
            self._git(["pull", "--ff-only", "--autostash"], "git pull failed")

    def _git(self, args, error: str) -> str:
        return self._run_command(["git", "-C", self.path] + args, error)
