"""
Logging for ghostdc.

Example:
    from ghostdc.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Cloning template")
    logger.error("Certificate request failed", exc_info=True)
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.theme import Theme

GHOSTDC_THEME = Theme({
    "log.time": "dim cyan",
    "log.level.debug": "dim blue",
    "log.level.info": "green",
    "log.level.warning": "yellow",
    "log.level.error": "bold red",
    "log.level.critical": "bold white on red",
    "ghostdc.success": "bold green",
    "ghostdc.step": "bold cyan",
    "ghostdc.action.create": "green",
    "ghostdc.action.update": "yellow",
    "ghostdc.action.delete": "red",
    "ghostdc.dry_run": "cyan",
})

console = Console(theme=GHOSTDC_THEME, stderr=True)

_initialized = False


def setup_logging(
    level: str = "INFO",
    show_time: bool = True,
    show_path: bool = False,
    rich_tracebacks: bool = True,
) -> None:
    """
    Initialize ghostdc logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        show_time: Show timestamps in log output
        show_path: Show file path in log output
        rich_tracebacks: Use rich formatting for tracebacks

    Note:
        Only the first call installs the handler; later calls just adjust
        the level.
    """
    global _initialized

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    if _initialized:
        logging.getLogger().setLevel(numeric_level)
        return

    handler = RichHandler(
        console=console,
        show_time=show_time,
        show_path=show_path,
        rich_tracebacks=rich_tracebacks,
        markup=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logging.basicConfig(
        level=numeric_level,
        handlers=[handler],
        force=True,
    )

    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a given module.

    Example:
        logger = get_logger(__name__)
        logger.info("Processing resource")
    """
    if not _initialized:
        setup_logging()

    return logging.getLogger(name)


class DeployLogger:
    """
    Deploy-specific logger.

    Wraps the standard logger with helpers for step and action output.
    """

    def __init__(self, name: str):
        self.logger = get_logger(name)
        self.console = console

    def debug(self, message: str, **kwargs) -> None:
        self.logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self.logger.error(message, **kwargs)

    def success(self, message: str) -> None:
        """Print a success line."""
        self.console.print(f"[ghostdc.success]✓[/ghostdc.success] {escape(message)}")

    def step(self, message: str) -> None:
        """Print a section header for a group of provisioning steps."""
        self.console.print(f"\n[ghostdc.step]==>[/ghostdc.step] {escape(message)}")

    def action(self, action: str, resource_id: str, details: Optional[str] = None) -> None:
        """
        Print a resource action (create/update/delete).

        Args:
            action: Action type (create, update, delete)
            resource_id: Resource identifier
            details: Optional details about the action
        """
        symbols = {
            "create": "+",
            "update": "~",
            "delete": "-",
        }
        symbol = symbols.get(action.lower(), "•")
        style = f"ghostdc.action.{action.lower()}"

        msg = f"[{style}]{symbol}[/{style}] {escape(resource_id)}"
        if details:
            msg += f" [dim]({escape(details)})[/dim]"

        self.console.print(msg)

    def dry_run(self, message: str) -> None:
        """Print a dry-run line."""
        self.console.print(f"[ghostdc.dry_run]\\[DRY RUN][/ghostdc.dry_run] {escape(message)}")


def get_deploy_logger(name: str) -> DeployLogger:
    """
    Get a DeployLogger instance for the given module.

    Example:
        logger = get_deploy_logger(__name__)
        logger.success("Stack started")
        logger.action("create", "snap:certbot")
    """
    return DeployLogger(name)
