"""Management commands for the vet clinic scheduling backend."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

import click

from vetclinic.container import ServiceContainer
from vetclinic.core.security import VALID_ROLES, create_user_token
from vetclinic.db.session import create_tables
from vetclinic.repositories.clinic_repo import CLINICS
from vetclinic.repositories.pet_repo import PETS

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _services() -> ServiceContainer:
    create_tables()
    return ServiceContainer()


@click.group()
def cli() -> None:
    """Entry point for management commands."""


@cli.command("create-tables")
def create_tables_command() -> None:
    """Create the document table if it does not exist."""
    create_tables()
    logging.info("Tables created.")


@cli.command("sweep")
@click.option("--clinic-id", default=None, help="Only sweep this clinic's appointments.")
@click.option(
    "--now",
    "now_override",
    default=None,
    help="ISO timestamp to sweep against instead of the current time.",
)
def sweep(clinic_id: Optional[str], now_override: Optional[str]) -> None:
    """Mark confirmed appointments that have ended as completed."""
    services = _services()
    now = datetime.fromisoformat(now_override) if now_override else None
    if clinic_id:
        result = services.sweeper.run_for_clinic(clinic_id, now)
    else:
        result = services.sweeper.run_all(now)
    logging.info(
        "Sweep finished: %d completed, %d failed.",
        len(result.completed),
        len(result.failed),
    )
    if result.failed:
        raise click.ClickException(f"Failed to update: {', '.join(result.failed)}")


@cli.command("clear-reminders")
def clear_reminders() -> None:
    """Forget reminder ledger entries older than yesterday."""
    removed = _services().reminders.clear_old()
    logging.info("Removed %d reminder ledger entries.", removed)


@cli.command("add-clinic")
@click.option("--owner-id", required=True)
@click.option("--name", required=True)
def add_clinic(owner_id: str, name: str) -> None:
    """Register a clinic profile (development helper)."""
    record = _services().store.create(
        CLINICS,
        {"owner_id": owner_id, "name": name, "average_rating": 0, "review_count": 0},
    )
    click.echo(record["id"])


@cli.command("add-pet")
@click.option("--owner-id", required=True)
@click.option("--name", required=True)
@click.option("--species", default="")
def add_pet(owner_id: str, name: str, species: str) -> None:
    """Register a pet (development helper)."""
    record = _services().store.create(
        PETS, {"owner_id": owner_id, "name": name, "species": species}
    )
    click.echo(record["id"])


@cli.command("issue-token")
@click.argument("user_id")
@click.option("--role", type=click.Choice(sorted(VALID_ROLES)), required=True)
@click.option("--email", default="")
def issue_token(user_id: str, role: str, email: str) -> None:
    """Print a bearer token for local testing of the API."""
    click.echo(create_user_token(user_id, role, email))


if __name__ == "__main__":
    cli()
