# Overview: Flask CLI command groups for bootstrap, inventory, jobs and backups.

# backend/commcentre/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Inventory:
# - python -m flask inventory seed-demo
#   Load the demo catalog (stationery, services, custom job).
# - python -m flask inventory low-stock [--threshold 5]
#   List products below the low-stock threshold.
#
# Jobs:
# - python -m flask jobs board
#   Print job counts per board column.
#
# Backups:
# - python -m flask backup export [--output PATH]
#   Write a full JSON snapshot (default: CommCentre_Backup_YYYY-MM-DD.json).

import json

import click
from flask.cli import with_appcontext

from .extensions import db
from .services import products_service, jobs_service
from .services.catalog import get_catalog
from .services.export_service import export_snapshot, backup_filename
from .validation import format_cents


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create missing tables."""
    db.create_all()
    click.echo("PASS Database tables are in place")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm destructive reset')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.echo("WARN  Refusing to reset without --yes")
        raise SystemExit(1)
    db.drop_all()
    db.create_all()
    get_catalog().invalidate()
    click.echo("PASS Database reset")


@click.group('inventory')
def inventory_group():
    """Product catalog commands."""


@inventory_group.command('seed-demo')
@with_appcontext
def seed_demo():
    """Load the demo catalog."""
    added = products_service.seed_demo_products()
    click.echo(f"PASS Added {added} demo products")


@inventory_group.command('low-stock')
@click.option('--threshold', type=int, default=None, help='Override LOW_STOCK_THRESHOLD')
@with_appcontext
def low_stock(threshold):
    """List products below the low-stock threshold."""
    products = products_service.low_stock_products(threshold)
    if not products:
        click.echo("PASS No low-stock products")
        return
    for p in products:
        click.echo(f"{p.id:>5}  {p.stock_quantity:>6}  {p.name} ({p.category})")


@click.group('jobs')
def jobs_group():
    """Print job commands."""


@jobs_group.command('board')
@with_appcontext
def board():
    """Print job counts per board column."""
    data = jobs_service.job_board()
    for column in data["columns"]:
        click.echo(f"{column['status']:<10} {column['count']}")
        for job in column["jobs"]:
            click.echo(
                f"    #{job['id']} {job['customer_name']} - {job['job_type']} "
                f"(bal {job['balance']})"
            )


@click.group('backup')
def backup_group():
    """Backup commands."""


@backup_group.command('export')
@click.option('--output', 'output_path', default=None, help='File to write (default: dated name)')
@with_appcontext
def export_backup(output_path):
    """Write a full JSON snapshot of products, sales and jobs."""
    snapshot = export_snapshot()
    path = output_path or backup_filename()
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(snapshot, fh, indent=2)

    revenue = sum(s["total_amount_cents"] for s in snapshot["sales"])
    click.echo(
        f"PASS Wrote {path}: {len(snapshot['products'])} products, "
        f"{len(snapshot['sales'])} sales ({format_cents(revenue)}), "
        f"{len(snapshot['jobs'])} jobs"
    )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(inventory_group)
    app.cli.add_command(jobs_group)
    app.cli.add_command(backup_group)
