import logging
import subprocess

import click
from sqlalchemy.exc import SQLAlchemyError

from resume_builder.app.api.routes.route_logic.template_catalog import (
    BUILT_IN_TEMPLATES,
    template_to_record,
)
from resume_builder.app.database.database import get_session_local

log = logging.getLogger(__name__)


def _run_alembic(arguments: list[str], success_message: str) -> bool:
    """
    Run an alembic command as a subprocess.

    Args:
        arguments (list[str]): Arguments passed after `alembic`.
        success_message (str): Message echoed when the command succeeds.

    Returns:
        bool: True if the command succeeded.

    """
    command = ["alembic", *arguments]
    try:
        subprocess.run(command, check=True)
    except subprocess.CalledProcessError as e:
        _error_msg = f"An error occurred while running '{' '.join(command)}': {e}"
        click.echo(_error_msg, err=True)
        log.exception(_error_msg)
        return False
    except FileNotFoundError:
        _error_msg = "Error: 'alembic' command not found. Make sure Alembic is installed and in your PATH."
        click.echo(_error_msg, err=True)
        log.exception(_error_msg)
        return False

    click.echo(success_message)
    log.info(success_message)
    return True


@click.group()
def cli():
    """Management script for the Resume Builder application."""
    pass


@cli.command("generate-migration")
@click.option(
    "-m",
    "--message",
    required=True,
    help="A short message describing the migration.",
)
def generate_migration(message: str):
    """
    Generate a new database migration script.

    This command wraps 'alembic revision --autogenerate'.

    Args:
        message (str): A short message describing the migration.

    """
    click.echo("Generating new migration...")
    _run_alembic(
        ["revision", "--autogenerate", "-m", message],
        f"Successfully generated new migration: {message}",
    )


@cli.command("apply-migrations")
def apply_migrations():
    """
    Apply all pending migrations to the database.

    This command wraps 'alembic upgrade head'.
    """
    click.echo("Applying database migrations...")
    _run_alembic(["upgrade", "head"], "Successfully applied all migrations.")


@cli.command("seed-templates")
def seed_templates():
    """
    Store the built-in templates in the `resume_templates` table.

    Notes:
        1. Existing rows with the same id are overwritten, so the command can be re-run.
        2. On a database error the transaction is rolled back and an error is printed.

    """
    _msg = "seed_templates starting"
    log.debug(_msg)
    click.echo(f"Seeding {len(BUILT_IN_TEMPLATES)} templates...")

    db_session_local = get_session_local()
    db = db_session_local()
    try:
        for template in BUILT_IN_TEMPLATES:
            db.merge(template_to_record(template))
        db.commit()
        _success_msg = "Templates seeded successfully."
        click.echo(_success_msg)
        log.info(_success_msg)
    except SQLAlchemyError as e:
        db.rollback()
        _error_msg = f"Error seeding templates: {e}"
        click.echo(_error_msg, err=True)
        log.exception(_error_msg)
    finally:
        db.close()

    _msg = "seed_templates returning"
    log.debug(_msg)


def main():
    """Run the command line interface."""
    cli()


if __name__ == "__main__":
    main()
