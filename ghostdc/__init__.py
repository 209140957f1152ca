__version__ = "0.1.0"

from ghostdc.core import Resource, Plan, Action, Platform
from ghostdc.core.executor import Executor, get_executor, reset_executor, use_executor
from ghostdc.config import Settings, ConfigError
from ghostdc.resources.apt import AptCache
from ghostdc.resources.certificate import Certificate
from ghostdc.resources.compose import ComposeStack
from ghostdc.resources.cron import CronJob
from ghostdc.resources.exec import Exec
from ghostdc.resources.file import File
from ghostdc.resources.git import GitCheckout
from ghostdc.resources.pkg import Package
from ghostdc.resources.placeholder import Placeholder
from ghostdc.resources.service import Service
from ghostdc.resources.snap import Snap
from ghostdc.logging import get_logger, get_deploy_logger, setup_logging

"""
Building blocks of a ghostdc deploy:
    Resource is one provisioning step: check the host, plan, apply.
    Executor runs the steps in order and stops at the first failure.
    Settings carries the domain, project directory and template repository.
    Package, AptCache, Snap install software.
    GitCheckout, Placeholder, File prepare the compose project.
    Certificate, CronJob obtain and renew the TLS certificate.
    Service, ComposeStack bring docker and the Ghost stack up.
"""

__all__ = [
    "Resource",
    "Plan",
    "Action",
    "Platform",
    "Executor",
    "get_executor",
    "reset_executor",
    "use_executor",
    "Settings",
    "ConfigError",
    "AptCache",
    "Certificate",
    "ComposeStack",
    "CronJob",
    "Exec",
    "File",
    "GitCheckout",
    "Package",
    "Placeholder",
    "Service",
    "Snap",
    "get_logger",
    "get_deploy_logger",
    "setup_logging",
]
