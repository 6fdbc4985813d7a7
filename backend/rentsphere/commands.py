"""Flask CLI commands running one tick of each background task on demand."""

import click
from flask.cli import AppGroup

from rentsphere.services.delivery_simulation_service import run_all_simulations
from rentsphere.services.payment_expiry_service import expire_unpaid_requests
from rentsphere.services.return_monitor_service import check_overdue_returns

deliveries_cli = AppGroup("deliveries", help="Simulated delivery tracking.")
returns_cli = AppGroup("returns", help="Return monitoring.")
payments_cli = AppGroup("payments", help="Payment windows.")


@deliveries_cli.command("simulate")
def simulate_deliveries():
    """Advance outbound and return deliveries that are due."""
    count = run_all_simulations()
    click.echo(f"{count} delivery transition(s) applied")


@returns_cli.command("check-overdue")
def check_overdue():
    """Flag rentals past their return window and stamp the late fee."""
    count = check_overdue_returns()
    click.echo(f"{count} overdue rental(s) updated")


@payments_cli.command("expire")
def expire_payments():
    """Expire approved requests whose payment window lapsed."""
    count = expire_unpaid_requests()
    click.echo(f"{count} request(s) expired")


def register_commands(app):
    app.cli.add_command(deliveries_cli)
    app.cli.add_command(returns_cli)
    app.cli.add_command(payments_cli)
