"""
ghostdc CLI - provision and operate a Ghost site.

Commands:
    dc setup <domain>   - Provision the host and start the stack
    dc plan <domain>    - Show what setup would change
    dc start            - Start the stack
    dc stop             - Stop the stack
    dc update           - Pull new images and recreate containers
    dc version          - Show version
"""

import os
import sys
from typing import Optional

import click

from ghostdc import compose
from ghostdc.config import ConfigError, Settings, DEFAULT_PROJECT_DIR
from ghostdc.core.executor import Executor, use_executor
from ghostdc.core.resource import Action, Platform
from ghostdc.deploy import build_setup
from ghostdc.logging import get_deploy_logger, setup_logging
from ghostdc.transport import LocalTransport, SSHTransport, Transport

logger = get_deploy_logger(__name__)


class Context:
    """Options shared by every command."""

    def __init__(self, project_dir: str, repo_url: Optional[str], email: Optional[str],
                 host: Optional[str], user: Optional[str], key: Optional[str],
                 port: int, sudo: bool):
        self.project_dir = project_dir
        self.repo_url = repo_url
        self.email = email
        self.host = host
        self.user = user
        self.key = key
        self.port = port
        self.sudo = sudo

    def settings(self, domain: Optional[str] = None, **overrides) -> Settings:
        return Settings(
            domain=domain,
            project_dir=self.project_dir,
            repo_url=self.repo_url,
            email=self.email,
            **overrides,
        )


def _open_transport(ctx: Context) -> Transport:
    """Local transport, or SSH when --host is given."""
    if not ctx.host:
        return LocalTransport()

    click.echo(f"Connecting to {ctx.user or 'current_user'}@{ctx.host}:{ctx.port}...")
    try:
        return SSHTransport(host=ctx.host, port=ctx.port, user=ctx.user,
                            key_file=ctx.key, sudo=ctx.sudo)
    except Exception as e:
        click.secho(f"SSH connection failed: {e}", fg="red")
        sys.exit(1)


def _fail(error: Exception) -> None:
    click.secho(f"Error: {error}", fg="red", err=True)
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.option('--project-dir', envvar='GHOSTDC_PROJECT_DIR', default=DEFAULT_PROJECT_DIR,
              show_default=True, help='Directory holding the compose project')
@click.option('--repo-url', envvar='GHOSTDC_REPO_URL', help='Template repository to clone')
@click.option('--email', envvar='GHOSTDC_EMAIL', help="Let's Encrypt account email")
@click.option('--log-level', envvar='GHOSTDC_LOG_LEVEL', default='INFO', show_default=True,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False))
@click.option('--host', envvar='GHOSTDC_HOST', help='Remote host for SSH')
@click.option('--user', envvar='GHOSTDC_USER', help='SSH username')
@click.option('--key', envvar='GHOSTDC_KEY', help='SSH private key file')
@click.option('--port', envvar='GHOSTDC_PORT', default=22, help='SSH port (default: 22)')
@click.option('--sudo', is_flag=True, envvar='GHOSTDC_SUDO', help='Use sudo for remote commands')
@click.pass_context
def cli(ctx, project_dir: str, repo_url: Optional[str], email: Optional[str], log_level: str,
        host: Optional[str], user: Optional[str], key: Optional[str], port: int, sudo: bool):
    """ghostdc - Ghost behind Docker Compose, Nginx and Let's Encrypt."""
    setup_logging(log_level)
    ctx.obj = Context(project_dir, repo_url, email, host, user, key, port, sudo)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument('domain')
@click.option('--dry-run', is_flag=True, help='Show the steps that would run without running them')
@click.option('--no-www', is_flag=True, help='Do not request a certificate for www.<domain>')
@click.pass_obj
def setup(ctx: Context, domain: str, dry_run: bool, no_www: bool):
    """
    Provision the host for DOMAIN and start the stack.

    Example:
        dc setup blog.example.com
        dc --host blog.example.com --user ubuntu --sudo setup blog.example.com
    """
    try:
        settings = ctx.settings(domain, include_www=not no_www, dry_run=dry_run).validate()
    except ConfigError as e:
        _fail(e)

    if not ctx.host and hasattr(os, "geteuid") and os.geteuid() != 0:
        logger.warning("setup is not running as root; package and cron steps will likely fail")

    with _open_transport(ctx) as transport:
        executor = use_executor(Executor(transport=transport, dry_run=settings.dry_run))
        build_setup(settings)

        logger.step(f"Setting up {settings.domain} in {settings.project_dir}")
        result = executor.run()

    if not result.success:
        click.secho(f"\nStep {result.failed_resource} failed:", fg="red", err=True)
        _fail(result.errors[0])

    if settings.dry_run:
        click.echo(f"\nDry run: {len(result.changed_resources)} step(s) would change.")
        return

    if result.changed_resources:
        logger.success(f"Setup complete, {len(result.changed_resources)} step(s) changed "
                       f"({result.duration:.2f}s)")
    else:
        logger.success("Setup complete, nothing to change")
    click.echo(f"\nGhost is served at https://{settings.domain}")


@cli.command()
@click.argument('domain')
@click.option('--no-www', is_flag=True, help='Do not request a certificate for www.<domain>')
@click.pass_obj
def plan(ctx: Context, domain: str, no_www: bool):
    """
    Show what `setup DOMAIN` would change, without applying.

    Steps that depend on earlier steps are shown as they look right now.
    """
    try:
        settings = ctx.settings(domain, include_www=not no_www, dry_run=True).validate()
    except ConfigError as e:
        _fail(e)

    with _open_transport(ctx) as transport:
        executor = use_executor(Executor(transport=transport, dry_run=True))
        build_setup(settings)
        plan_result = executor.plan()

    if plan_result.has_errors:
        click.secho("Errors during planning:", fg="red")
        for error in plan_result.errors:
            click.secho(f"  ! {error}", fg="red")
        click.echo()

    if not plan_result.has_changes:
        click.secho("No changes needed.", fg="green")
        return

    click.echo("Setup will perform the following actions:\n")
    for resource_id, resource_plan in plan_result.plans.items():
        if resource_plan.has_changes():
            _display_plan(resource_id, resource_plan)

    click.echo(f"Plan: {plan_result.change_count} to change")
    click.echo(f"\nRun 'dc setup {settings.domain}' to apply these changes.")


def _lifecycle(ctx: Context, operation, done: str) -> None:
    with _open_transport(ctx) as transport:
        try:
            operation(transport, ctx.project_dir)
        except RuntimeError as e:
            _fail(e)
    logger.success(done)


@cli.command()
@click.pass_obj
def start(ctx: Context):
    """Start the stack (compose up -d)."""
    _lifecycle(ctx, compose.start, "Stack started")


@cli.command()
@click.pass_obj
def stop(ctx: Context):
    """Stop the stack (compose down)."""
    _lifecycle(ctx, compose.stop, "Stack stopped")


@cli.command()
@click.pass_obj
def update(ctx: Context):
    """Pull newer images and recreate the containers."""
    _lifecycle(ctx, compose.update, "Stack updated")


@cli.command()
def version():
    """Show ghostdc version."""
    from ghostdc import __version__
    click.echo(f"ghostdc version {__version__}")


@cli.command()
@click.pass_obj
def platform_info(ctx: Context):
    """Show detected platform information."""
    with _open_transport(ctx) as transport:
        plat = Platform.detect(transport)
    click.echo("Platform Information:")
    click.echo(f"  System:  {plat.system}")
    click.echo(f"  Distro:  {plat.distro}")
    click.echo(f"  Version: {plat.version}")
    click.echo(f"  Arch:    {plat.arch}")


def _display_plan(resource_id: str, plan) -> None:
    """Display a single resource plan."""
    click.echo(f"  {_action_symbol(plan.action)} {resource_id}")

    if plan.reason:
        click.echo(f"      reason: {plan.reason}")

    for change in plan.changes:
        click.echo(f"      {change.field}: {change.from_value} → {change.to_value}")

    click.echo()


def _action_symbol(action: Action) -> str:
    if action == Action.CREATE:
        return click.style("+", fg="green")
    elif action == Action.UPDATE:
        return click.style("~", fg="yellow")
    elif action == Action.DELETE:
        return click.style("-", fg="red")
    return " "


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
