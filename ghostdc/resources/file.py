"""
File resource - manage files and directories.

Handles:
- File content
- File mode
- Directories (ensure="directory")
"""

from typing import Dict, Any, Optional

from ghostdc.core.resource import Resource, Plan, Action, Platform
from ghostdc.core.executor import get_executor


class File(Resource):
    """
    File resource for managing files and directories.

    Examples:
        # Directory, like `mkdir -p`
        File("/opt/ghost/content", ensure="directory")

        # File with content and mode
        File("/opt/ghost/.env", content="NODE_ENV=production\\n", mode=0o600)
    """

    def __init__(
        self,
        path: str,
        content: Optional[str] = None,
        ensure: str = "file",  # "file", "directory"
        mode: Optional[int] = None,
        **options
    ):
        super().__init__(path, **options)

        self.path = path
        self.content = content
        self.ensure = ensure
        self.mode = mode

        get_executor().add(self)

    def resource_type(self) -> str:
        return "file"

    def check(self, platform: Platform) -> Dict[str, Any]:
        """Check current file state."""
        state = {
            "exists": False,
            "type": None,
            "content": None,
            "mode": None,
        }

        if not self._transport.file_exists(self.path):
            return state

        state["exists"] = True

        output, code = self._transport.run_command(["stat", "-c", "%F|%a", self.path])
        if code == 0 and "|" in output:
            file_type, _, mode_octal = output.strip().partition("|")

            if "directory" in file_type.lower():
                state["type"] = "directory"
            elif "regular" in file_type.lower():
                state["type"] = "file"
            elif "symbolic link" in file_type.lower():
                state["type"] = "symlink"

            try:
                state["mode"] = int(mode_octal, 8)
            except ValueError:
                pass

        if state["type"] == "file" and self.content is not None:
            try:
                state["content"] = self._transport.read_file(self.path).decode("utf-8")
            except UnicodeDecodeError:
                state["content"] = None

        return state

    def desired_state(self) -> Dict[str, Any]:
        """Return desired file state."""
        state = {"exists": True, "type": self.ensure}
        if self.content is not None:
            state["content"] = self.content
        if self.mode is not None:
            state["mode"] = self.mode

        return state

    def apply(self, plan: Plan, platform: Platform) -> None:
        if plan.action == Action.CREATE:
            self._create()
        elif plan.action == Action.UPDATE:
            self._update(plan)

    def _create(self) -> None:
        if self.ensure == "directory":
            self._run_command(["mkdir", "-p", self.path], f"Failed to create {self.path}")
        else:
            parent = self.path.rsplit("/", 1)[0] or "/"
            self._run_command(["mkdir", "-p", parent], f"Failed to create {parent}")
            self._transport.write_file(self.path, (self.content or "").encode("utf-8"))

        self._set_mode()

    def _update(self, plan: Plan) -> None:
        for change in plan.changes:
            if change.field == "content":
                self._transport.write_file(self.path, change.to_value.encode("utf-8"))
            elif change.field == "mode":
                self._set_mode()
            elif change.field == "type":
                raise RuntimeError(
                    f"{self.path} is a {change.from_value}, expected a {change.to_value}"
                )

    def _set_mode(self) -> None:
        if self.mode is not None:
            mode_str = oct(self.mode)[2:]
            self._run_command(["chmod", mode_str, self.path], f"Failed to chmod {self.path}")
