# commands.py
import click

from models.database import db
from services.accounts import AccountService


def register_commands(app):
    @app.cli.command("init-db")
    @click.option("--drop", is_flag=True, help="Drop existing tables first.")
    def init_db_command(drop):
        """Create the portal tables."""
        if drop:
            db.drop_all()
            click.echo("Dropped all tables")
        db.create_all()
        click.echo("Created tables from models")

    @app.cli.command("create-admin")
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    @click.option("--email", default=None, help="Contact address for the admin account.")
    def create_admin_command(password, email):
        """Create the admin account or rotate its password."""
        service = AccountService(db.session, app.extensions["notifier"], app.config)
        account = service.ensure_admin(password, email=email)
        click.echo(f"Admin account '{account.username}' is ready")
