"""CLI tools for Lawdesk administration."""

import click
from sqlalchemy.exc import SQLAlchemyError

from lawdesk.core.errors import LawdeskError
from lawdesk.core.security import create_access_token
from lawdesk.db.session import SessionLocal
from lawdesk.services import user_service


@click.group()
def cli():
    """Lawdesk CLI tools."""
    pass


@cli.command()
@click.option("--email", required=True, help="User email address")
@click.option("--name", "display_name", required=True, help="Display name")
def create_user(email: str, display_name: str):
    """
    Create a user and print an access token.

    Example:
        python -m lawdesk.cli create-user --email "lawyer@example.com" --name "A. Lawyer"
    """
    db = SessionLocal()
    try:
        user = user_service.create_user(db, email, display_name)
        click.echo(f"✓ Created user: {user.email}")
        click.echo(f"  ID: {user.id}")
        click.echo(f"  Token: {create_access_token(user.id, user.token_version)}")
    except (LawdeskError, SQLAlchemyError) as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
        raise click.exceptions.Exit(1)
    finally:
        db.close()


@cli.command()
@click.option("--email", required=True, help="User email to issue a token for")
def issue_token(email: str):
    """
    Issue a fresh access token for an active user.

    Example:
        python -m lawdesk.cli issue-token --email "lawyer@example.com"
    """
    db = SessionLocal()
    try:
        user = user_service.get_user_by_email(db, email)
        if not user or not user.is_active:
            click.echo(f"❌ Active user not found: {email}")
            raise click.exceptions.Exit(1)
        click.echo(create_access_token(user.id, user.token_version))
    finally:
        db.close()


@cli.command()
@click.option("--email", required=True, help="User email to revoke sessions for")
def revoke_sessions(email: str):
    """
    Revoke all sessions for a user by bumping their token_version.

    Example:
        python -m lawdesk.cli revoke-sessions --email "user@example.com"
    """
    db = SessionLocal()
    try:
        user = user_service.get_user_by_email(db, email)
        if not user:
            click.echo(f"❌ User not found: {email}")
            raise click.exceptions.Exit(1)

        old_version = user.token_version
        user_service.revoke_all_sessions(db, user.id)

        click.echo(f"✓ Revoked all sessions for {email}")
        click.echo(f"  Token version: {old_version} → {user.token_version}")
    except SQLAlchemyError as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
        raise click.exceptions.Exit(1)
    finally:
        db.close()


@cli.command()
@click.option("--email", required=True, help="User email to deactivate")
def disable_user(email: str):
    """
    Deactivate a user and revoke their sessions.

    Example:
        python -m lawdesk.cli disable-user --email "user@example.com"
    """
    db = SessionLocal()
    try:
        user = user_service.get_user_by_email(db, email)
        if not user:
            click.echo(f"❌ User not found: {email}")
            raise click.exceptions.Exit(1)
        if not user.is_active:
            click.echo(f"User already disabled: {email}")
            return

        user_service.disable_user(db, user.id)
        click.echo(f"✓ Disabled {email}")
        click.echo(f"  Token version: {user.token_version}")
    except SQLAlchemyError as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
        raise click.exceptions.Exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    cli()
