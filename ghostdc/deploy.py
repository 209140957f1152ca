"""
The setup sequence: every step needed to serve Ghost on a fresh Ubuntu host.

Steps register with the active executor in the order they must run:

    a. apt cache refresh, upgrade and base packages
    b. template checkout (clone or fast-forward)
    c. domain placeholder substitution in the config files
    d. certbot (snaps, symlink) and the TLS certificate
    e. docker engine, compose, docker daemon
    f. data directories
    g. certificate renewal cron entry
    h. stack startup
"""

from typing import List

from ghostdc.compose import compose_shell, detect_compose
from ghostdc.config import Settings
from ghostdc.core import Resource
from ghostdc.core.executor import Executor, get_executor
from ghostdc.resources.apt import AptCache
from ghostdc.resources.certificate import Certificate
from ghostdc.resources.compose import ComposeStack
from ghostdc.resources.cron import CronJob
from ghostdc.resources.exec import Exec
from ghostdc.resources.file import File
from ghostdc.resources.git import GitCheckout
from ghostdc.resources.pkg import APT_ENV, Package
from ghostdc.resources.placeholder import Placeholder
from ghostdc.resources.service import Service
from ghostdc.resources.snap import Snap

BASE_PACKAGES = ["git", "curl", "snapd", "cron"]
DOCKER_INSTALL_SCRIPT = "https://get.docker.com"
RENEW_MARKER = "certbot renew"


def renew_command(settings: Settings, executor: Executor) -> str:
    """
    certbot renewal with nginx stopped around it, so the standalone
    authenticator can bind port 80.
    """
    compose = detect_compose(executor.transport)
    pre_hook = compose_shell(settings.project_dir, compose, "stop", "nginx")
    post_hook = compose_shell(settings.project_dir, compose, "start", "nginx")
    return f'certbot renew --quiet --pre-hook "{pre_hook}" --post-hook "{post_hook}"'


def build_setup(settings: Settings) -> List[Resource]:
    """
    Register the setup steps on the active executor and return them.

    `settings` must already be validated.
    """
    executor = get_executor()
    project_dir = settings.project_dir

    steps: List[Resource] = [
        # a. package manager
        AptCache("apt-update", action="update"),
        AptCache("apt-upgrade", action="upgrade"),
        Package(BASE_PACKAGES),

        # b. template
        GitCheckout(project_dir, repo_url=settings.repo_url),
    ]

    # c. domain placeholder
    for relative in settings.config_files:
        steps.append(
            Placeholder(settings.project_path(relative),
                        token=settings.placeholder, value=settings.domain)
        )

    steps += [
        # d. certbot and certificate
        Snap("core"),
        Snap("certbot", classic=True),
        Exec("link-certbot",
             command="ln -s /snap/bin/certbot /usr/bin/certbot",
             creates="/usr/bin/certbot"),
        Certificate(settings.domains, email=settings.email),

        # e. docker
        Exec("install-docker",
             command=f"curl -fsSL {DOCKER_INSTALL_SCRIPT} | sh",
             unless="command -v docker"),
        Exec("install-compose",
             command=f"{APT_ENV} apt-get install -y docker-compose-plugin",
             unless="command -v docker-compose || docker compose version"),
        Service("docker", running=True, enabled=True),
    ]

    # f. data directories
    for relative in settings.data_dirs:
        steps.append(File(settings.project_path(relative), ensure="directory"))

    steps += [
        # g. renewal
        CronJob("certbot-renew",
                schedule=settings.cron_schedule,
                command=lambda: renew_command(settings, executor),
                marker=RENEW_MARKER),

        # h. stack
        ComposeStack(project_dir),
    ]

    return steps
