"""
Placeholder resource - replace a literal token in a file, in place.
"""

from typing import Any, Dict

from ghostdc.core import Plan, Platform, Resource
from ghostdc.core.executor import get_executor
from ghostdc.logging import get_deploy_logger

logger = get_deploy_logger(__name__)


class Placeholder(Resource):
    """
    Substitute `token` with `value` in the file at `path`.

    The file is only rewritten while it still contains the token, so a
    second run leaves it alone.

    Examples:
        Placeholder("/opt/ghost/nginx/default.conf", token="<domain>", value="blog.example.com")
    """

    def __init__(self, path: str, token: str, value: str, **options):
        super().__init__(path, **options)

        if not token:
            raise ValueError("Placeholder token must not be empty")
        if token in value:
            raise ValueError(f"Replacement {value!r} contains the token {token!r}")

        self.path = path
        self.token = token
        self.value = value

        get_executor().add(self)

    def resource_type(self) -> str:
        return "placeholder"

    def check(self, platform: Platform) -> Dict[str, Any]:
        # A file that is not there yet (checkout still pending) counts as
        # unsubstituted; apply() fails if it is still missing by then.
        if not self._transport.file_exists(self.path):
            return {"exists": True, "present": False, "has_placeholder": True, "occurrences": None}

        content = self._read()
        return {
            "exists": True,
            "present": True,
            "has_placeholder": self.token in content,
            "occurrences": content.count(self.token),
        }

    def desired_state(self) -> Dict[str, Any]:
        return {"exists": True, "has_placeholder": False}

    def apply(self, plan: Plan, platform: Platform) -> None:
        if not self._transport.file_exists(self.path):
            raise FileNotFoundError(f"Configuration file not found: {self.path}")

        content = self._read()
        count = content.count(self.token)
        if count == 0:
            return

        self._transport.write_file(
            self.path, content.replace(self.token, self.value).encode("utf-8")
        )
        logger.info(f"Replaced {count} occurrence(s) of {self.token} in {self.path}")

    def _read(self) -> str:
        return self._transport.read_file(self.path).decode("utf-8")
