import click
from flask import Flask


def register_cli(app: Flask) -> None:
    @app.cli.command("find-matches")
    def find_matches_command():
        """Run one matching pass over all pending reports."""
        from .service import trigger_matching

        body, status = trigger_matching(trigger="cli")
        if body.get("success"):
            click.echo(body["message"])
        else:
            click.echo(f"Matching failed: {body.get('error')}", err=True)
            raise SystemExit(1)

    @app.cli.command("init-db")
    def init_db_command():
        """Create all tables (development and tests; use migrations in production)."""
        from ...extensions import db

        db.create_all()
        click.echo("Database tables created")
