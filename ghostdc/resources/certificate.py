"""
Certificate resource - obtain a Let's Encrypt certificate with certbot.
"""

from typing import Any, Dict, List, Optional

from ghostdc.core import Plan, Platform, Resource
from ghostdc.core.executor import get_executor
from ghostdc.logging import get_deploy_logger

logger = get_deploy_logger(__name__)

LIVE_DIR = "/etc/letsencrypt/live"


class Certificate(Resource):
    """
    TLS certificate for `domains`, requested through certbot's standalone
    authenticator. Port 80 must be free while it runs.

    The certificate is named after the first domain; its presence under
    /etc/letsencrypt/live/<domain>/ means there is nothing to do. Renewal
    is left to certbot (see CronJob).

    Examples:
        Certificate(["blog.example.com", "www.blog.example.com"], email="ops@example.com")
    """

    def __init__(self, domains: List[str], email: Optional[str] = None, **options):
        if not domains:
            raise ValueError("Certificate needs at least one domain")

        super().__init__(domains[0], **options)

        self.domains = list(domains)
        self.email = email

        get_executor().add(self)

    @property
    def fullchain_path(self) -> str:
        return f"{LIVE_DIR}/{self.name}/fullchain.pem"

    def resource_type(self) -> str:
        return "cert"

    def check(self, platform: Platform) -> Dict[str, Any]:
        if self._transport.file_exists(self.fullchain_path):
            return {"exists": True, "fullchain": self.fullchain_path}
        return {"exists": False, "fullchain": None}

    def desired_state(self) -> Dict[str, Any]:
        return {"exists": True, "fullchain": self.fullchain_path}

    def apply(self, plan: Plan, platform: Platform) -> None:
        logger.info(f"Requesting certificate for {', '.join(self.domains)}")
        self._run_command(self.certbot_args(), "certbot certonly failed")

    def certbot_args(self) -> List[str]:
        args = [
            "certbot", "certonly",
            "--standalone",
            "--non-interactive",
            "--agree-tos",
            "--cert-name", self.name,
        ]
        if self.email:
            args += ["-m", self.email]
        else:
            args.append("--register-unsafely-without-email")
        for domain in self.domains:
            args += ["-d", domain]
        return args
