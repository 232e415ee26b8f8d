# Overview: Flask CLI command groups for warehouse bootstrap and report inspection.

# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to "salesops:create_app".
# - Use: python -m flask <group> <command> [options]
#
# Warehouses:
# - python -m flask warehouses seed
#   Idempotent insert of the default warehouse list.
# - python -m flask warehouses list
#   List warehouses with location and active status.
#
# Reports (unrestricted scope, JSON on stdout):
# - python -m flask reports executives --start-date 2026-01-01 --end-date 2026-01-31
# - python -m flask reports warehouses --warehouse-id 3
# - python -m flask reports customers --sort-by total_kg --page 2 --limit 20
# - python -m flask reports inactive-customers --days 14

import json
from functools import wraps

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Warehouse
from .services import reporting_service
from .services.report_filters import build_report_filters
from .services.warehouse_service import seed_default_warehouses
from .validation import ValidationError


@click.group('warehouses')
def warehouses_group():
    """Warehouse bootstrap and inspection commands."""


@warehouses_group.command('seed')
@with_appcontext
def seed_warehouses():
    """Create the default warehouses (existing codes are skipped)."""
    created = seed_default_warehouses()
    if not created:
        click.echo("PASS Default warehouses already present")
        return
    for warehouse in created:
        click.echo(f"PASS Created warehouse: {warehouse.name} ({warehouse.code})")


@warehouses_group.command('list')
@with_appcontext
def list_warehouses():
    """List all warehouses."""
    warehouses = db.session.query(Warehouse).order_by(Warehouse.id.asc()).all()

    if not warehouses:
        click.echo("No warehouses found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Name':<25} {'Code':<8} {'City':<20} {'State':<15} {'Active'}")
    click.echo("="*80)

    for warehouse in warehouses:
        active_str = "Yes" if warehouse.is_active else "No"
        click.echo(
            f"{warehouse.id:<5} {warehouse.name:<25} {warehouse.code or '-':<8} "
            f"{warehouse.city:<20} {warehouse.state:<15} {active_str}"
        )

    click.echo("="*80 + "\n")


# =============================================================================
# REPORT COMMANDS
# =============================================================================

FILTER_OPTIONS = (
    click.option('--start-date', help='Inclusive start date (YYYY-MM-DD)'),
    click.option('--end-date', help='Inclusive end date (YYYY-MM-DD)'),
    click.option('--principal-id', help='Only records created by this user'),
    click.option('--customer-id', help='Only records for this customer'),
    click.option('--department', help='Executive department'),
    click.option('--role-ids', help='Comma separated role ids'),
    click.option('--warehouse-id', help='Warehouse id'),
    click.option('--record-kind', type=click.Choice(['order', 'visit']), help='Record kind (default order)'),
    click.option('--activity', type=click.Choice(['active', 'inactive', 'all']), help='Activity filter'),
    click.option('--status', help='Explicit order status'),
    click.option('--delivery-status', help='Explicit delivery status'),
    click.option('--inactive-days', help='Customer report: idle threshold in days'),
    click.option('--sort-by', help='Sort key'),
    click.option('--sort-order', type=click.Choice(['asc', 'desc']), help='Sort order (default desc)'),
    click.option('--page', help='Page number'),
    click.option('--limit', help='Page size (max 100)'),
)


def report_command(*extra_names):
    """
    Attach the shared filter options, build ReportFilters from them and
    print the report returned by the command as JSON. Options named in
    extra_names are passed through to the command instead.
    """
    def decorator(f):
        @wraps(f)
        def wrapper(**options):
            extra = {name: options.pop(name) for name in extra_names}
            try:
                filters = build_report_filters(None, **options)
                report = f(filters, **extra)
            except ValidationError as e:
                raise click.BadParameter(str(e))
            except reporting_service.ReportError as e:
                raise click.ClickException(str(e))
            click.echo(json.dumps(report, indent=2, default=str))

        for option in reversed(FILTER_OPTIONS):
            wrapper = option(wrapper)
        return with_appcontext(wrapper)

    return decorator


@click.group('reports')
def reports_group():
    """Print reports as JSON (unrestricted warehouse scope)."""


@reports_group.command('executives')
@report_command()
def executives_report(filters):
    """Per-executive performance, including deleted-user groups."""
    return reporting_service.executive_report(filters)


@reports_group.command('warehouses')
@report_command()
def warehouses_report(filters):
    """Revenue per warehouse."""
    return reporting_service.warehouse_report(filters)


@reports_group.command('customers')
@report_command()
def customers_report(filters):
    """Purchase history per customer."""
    return reporting_service.customer_report(filters)


@reports_group.command('inactive-customers')
@click.option('--days', type=click.IntRange(min=1), default=reporting_service.DEFAULT_INACTIVE_DAYS,
              show_default=True, help='Days since last order')
@report_command("days")
def inactive_customers_report(filters, days):
    """Active customers with no qualifying order in the last N days."""
    return reporting_service.inactive_customers_report(filters, days=days)


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(warehouses_group)
    app.cli.add_command(reports_group)
