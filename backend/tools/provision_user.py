"""Provision teacher and admin accounts.

Why:
    `/auth/signup` only ever creates students. Staff accounts are created by an
    operator with this tool, which registers the identity-provider account and
    writes the matching profile record with the requested role.

Usage:
    python -m backend.tools.provision_user \
      --email teacher@example.com --name "Ada Lovelace" --role teacher

Notes:
    - Requires SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY (a local `.env` is
      honoured); an in-memory store would lose the account on exit.
    - Without --password a random one is generated and printed once.
"""

from __future__ import annotations

import secrets
from typing import Any, Callable, Optional

import click

from backend.identity_access.domain import STAFF_ROLES, Role
from backend.identity_access.provider import IdentityError
from backend.scheduling.errors import InvalidArgument
from backend.web.config import load_dotenv_if_enabled, load_settings
from backend.web.wiring import Services, build_supabase_services

ServicesFactory = Callable[[], Services]


def _default_services() -> Services:
    load_dotenv_if_enabled()
    settings = load_settings()
    if not settings.supabase_configured:
        raise click.ClickException(
            "Supabase is not configured: set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY."
        )
    return build_supabase_services(settings)


def _generate_password() -> str:
    return secrets.token_urlsafe(12)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--email", required=True, help="Login email of the new account.")
@click.option("--name", required=True, help="Display name shown in the directory.")
@click.option(
    "--role",
    type=click.Choice(STAFF_ROLES),
    required=True,
    help="Staff role; students sign up through the API.",
)
@click.option("--password", default=None, help="Initial password (generated when omitted).")
@click.pass_obj
def cli(obj: Any, email: str, name: str, role: str, password: Optional[str]) -> None:
    factory: ServicesFactory = obj if callable(obj) else _default_services
    services = factory()

    generated = password is None
    secret = password if password is not None else _generate_password()
    try:
        profile = services.profiles.provision(email=email, password=secret, name=name, role=Role(role))
    except IdentityError as exc:
        raise click.ClickException(f"Identity provider rejected the account: {exc.message}")
    except InvalidArgument as exc:
        raise click.ClickException(f"Invalid input: {exc.code}")

    click.echo(f"Created {profile.role} {profile.email} (id={profile.id})")
    if generated:
        click.echo(f"Generated password: {secret}")


if __name__ == "__main__":  # pragma: no cover
    cli()
