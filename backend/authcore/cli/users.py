"""Flask CLI commands for operator-side user management."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from authcore.factory import get_services
from authcore.services._shared.errors import ServiceError, ValidationError
from authcore.services._shared.policies import Role
from authcore.services.credentials.dto import RegisterIn

LOGGER = logging.getLogger(__name__)


def _describe(exc: ServiceError) -> str:
    """Flatten a service error, including per-field messages, into one line."""
    if isinstance(exc, ValidationError) and exc.errors:
        details = "; ".join(f"{field}: {' '.join(msgs)}" for field, msgs in exc.errors.items())
        return f"{exc.message} ({details})"
    return exc.message


@click.group("users")
def users_cli() -> None:
    """Manage user accounts and roles."""


@users_cli.command("create-admin")
@click.option("--name", required=True, help="Display name.")
@click.option("--email", required=True, help="Login email.")
@click.option(
    "--password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Password; prompted for when omitted.",
)
@with_appcontext
def create_admin_command(name: str, email: str, password: str) -> None:
    """Create a user with the admin role."""
    try:
        user = get_services().credentials.create_account(
            RegisterIn(name=name, email=email, password=password), role=Role.ADMIN
        )
    except ServiceError as exc:
        raise click.ClickException(_describe(exc)) from exc
    LOGGER.info("Admin created", extra={"event": "admin_created", "user_id": user.id})
    click.echo(f"Created admin {user.email} ({user.id})")


@users_cli.command("promote")
@click.argument("email")
@with_appcontext
def promote_command(email: str) -> None:
    """Grant the admin role to an existing user."""
    try:
        user = get_services().users.promote(email, Role.ADMIN)
    except ServiceError as exc:
        raise click.ClickException(_describe(exc)) from exc
    LOGGER.info("User promoted", extra={"event": "user_promoted", "user_id": user.id})
    click.echo(f"Promoted {user.email} to {user.role.value}")
