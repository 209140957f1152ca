"""
Deploy settings.

Values come from the command line, with GHOSTDC_* environment variables
as fallback (see ghostdc.cli.main).
"""

import posixpath
import re
from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_PROJECT_DIR = "/opt/ghost"
DEFAULT_PLACEHOLDER = "<domain>"
DEFAULT_CONFIG_FILES = ["docker-compose.yml", "nginx/default.conf", "config.production.json"]
DEFAULT_DATA_DIRS = ["content", "mysql"]
DEFAULT_CRON_SCHEDULE = "0 3 * * *"

_DOMAIN_RE = re.compile(
    r"^(?=.{1,253}$)(?!-)[a-z0-9-]{1,63}(?<!-)(\.(?!-)[a-z0-9-]{1,63}(?<!-))+$"
)


class ConfigError(ValueError):
    """Raised for missing or malformed settings."""


def validate_domain(domain: Optional[str]) -> str:
    """Return the normalized domain or raise ConfigError."""
    if not domain or not domain.strip():
        raise ConfigError("A domain is required, e.g. `dc setup blog.example.com`")

    normalized = domain.strip().lower().rstrip(".")
    if not _DOMAIN_RE.match(normalized):
        raise ConfigError(f"Invalid domain: {domain!r}")
    return normalized


@dataclass
class Settings:
    """Everything a deploy run needs to know."""
    domain: Optional[str] = None
    project_dir: str = DEFAULT_PROJECT_DIR
    repo_url: Optional[str] = None
    email: Optional[str] = None
    include_www: bool = True
    placeholder: str = DEFAULT_PLACEHOLDER
    config_files: List[str] = field(default_factory=lambda: list(DEFAULT_CONFIG_FILES))
    data_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_DATA_DIRS))
    cron_schedule: str = DEFAULT_CRON_SCHEDULE
    dry_run: bool = False

    def validate(self) -> "Settings":
        """Check the settings a setup run depends on."""
        self.domain = validate_domain(self.domain)
        if self.include_www and self.domain.startswith("www."):
            raise ConfigError(
                f"Pass the bare domain, not {self.domain!r}; www.{self.domain[4:]} is added "
                f"automatically (use --no-www to serve {self.domain} alone)"
            )

        if not posixpath.isabs(self.project_dir):
            raise ConfigError(f"Project directory must be absolute: {self.project_dir!r}")
        self.project_dir = posixpath.normpath(self.project_dir)

        if self.email is not None and "@" not in self.email:
            raise ConfigError(f"Invalid email: {self.email!r}")
        if len(self.cron_schedule.split()) != 5:
            raise ConfigError(f"Cron schedule needs five fields: {self.cron_schedule!r}")
        return self

    @property
    def domains(self) -> List[str]:
        """Certificate names, bare domain first."""
        if self.include_www:
            return [self.domain, f"www.{self.domain}"]
        return [self.domain]

    def project_path(self, relative: str) -> str:
        return posixpath.join(self.project_dir, relative)
