import click

from models import User, Admin
from utils.db import ensure_indexes
from utils.attendance_sync import recompute_all


def register_commands(app):

    @app.cli.command("init-db")
    def init_db():
        """Create the MongoDB indexes."""
        ensure_indexes()
        click.echo("Indexes created.")

    @app.cli.command("create-admin")
    @click.argument("email")
    @click.password_option()
    @click.option("--name", default="Administrator", help="Full name of the admin profile.")
    def create_admin(email, password, name):
        """Create an admin account with its profile."""
        if User.find_by_email(email):
            raise click.ClickException(f"User {email} already exists.")
        result = User(email=email, password=password, role="admin").save()
        Admin(user_id=result.inserted_id, full_name=name).save()
        click.echo(f"Admin {email} created.")

    @app.cli.command("recompute-attendance")
    def recompute_attendance():
        """Rebuild every mentee's attendance summary from its records."""
        results = recompute_all()
        for mentee, summary in results:
            click.echo(
                f"{mentee.get('full_name')}: {summary['present_days']}/{summary['total_days']} "
                f"({summary['percentage']}%)"
            )
        click.echo(f"Recomputed {len(results)} mentees.")
