"""Flask CLI commands for refresh-token maintenance."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from chirpy.api.deps import get_auth_service
from chirpy.services._shared.errors import ForbiddenOperationError, ServiceError

LOGGER = logging.getLogger(__name__)

RESET_REFUSED = "The 'flask sessions reset' command is restricted to PLATFORM=dev."


@click.group("sessions")
def sessions_cli() -> None:
    """Refresh-token maintenance commands."""


@sessions_cli.command("purge")
@with_appcontext
def purge_command() -> None:
    """Delete expired and revoked refresh tokens."""
    store = get_auth_service().refresh_store
    try:
        removed = store.purge_stale()
    except ServiceError as exc:
        raise click.ClickException(f"Purge failed: {exc}") from exc
    LOGGER.info("sessions.purge removed=%s", removed)
    click.echo(f"Purged {removed} refresh token(s).")


@sessions_cli.command("reset")
@click.option("--yes", is_flag=True, help="Skip the destructive confirmation prompt.")
@with_appcontext
def reset_command(yes: bool) -> None:
    """Delete every refresh token, logging out all users (``dev`` platform only)."""
    service = get_auth_service()
    if not service.cfg.admin_reset_allowed:
        raise click.ClickException(RESET_REFUSED)
    if not yes:
        click.confirm("This will terminate EVERY session. Continue?", abort=True)
    try:
        removed = service.reset_sessions()
    except ForbiddenOperationError as exc:
        raise click.ClickException(RESET_REFUSED) from exc
    except ServiceError as exc:
        raise click.ClickException(f"Reset failed: {exc}") from exc
    click.echo(f"Removed {removed} refresh token(s).")
